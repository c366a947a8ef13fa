"""Caller-level task/reminder checks built on the recurrence engine.

The engine never raises; this layer is where malformed input and conflicts turn
into errors. It validates records before they are saved, rejects tasks that
overlap existing ones, and computes skip-list updates for single-instance
deletes. It performs no storage itself: callers pass in the rows they loaded
and persist what comes back.
"""

import logging
from dataclasses import dataclass
from datetime import date, datetime
from typing import Any, Dict, Iterable, List, Optional

from pydantic import BaseModel, ValidationError

from taskcadence.engine.dates import DATE_ONLY_RE, parse_to_utc_date, to_calendar_date
from taskcadence.engine.overlap import find_conflicting_items
from taskcadence.engine.patterns import (
    add_skip_date,
    build_rule,
    matches_pattern,
    safe_parse_skip_list,
    serialize_skip_list,
)
from taskcadence.models.constants import INSTANCE_ALREADY_DELETED_MESSAGE, OVERLAP_MESSAGE
from taskcadence.models.task import EventCandidate, ReminderRecord, TaskRecord
from taskcadence.recurrence.interpret import RepeatOptionParseError, interpret_repeat_option

logger = logging.getLogger(__name__)


class TaskServiceError(ValueError):
    """Base class for user-facing task/reminder rejections."""


class TaskValidationError(TaskServiceError):
    """Missing or malformed fields on create/update."""

    def __init__(self, message: str, *, fields: Optional[List[str]] = None):
        super().__init__(message)
        self.fields = fields or []


class TaskOverlapError(TaskServiceError):
    """The task would overlap an existing task."""

    def __init__(self, message: str = OVERLAP_MESSAGE, *, conflicting_ids: Optional[List[Any]] = None):
        super().__init__(message)
        self.conflicting_ids = conflicting_ids or []


class InstanceAlreadyDeletedError(TaskServiceError):
    """The occurrence is already in the skip list."""

    def __init__(self, day: str):
        super().__init__(INSTANCE_ALREADY_DELETED_MESSAGE)
        self.day = day


@dataclass(frozen=True)
class TaskSaveCheck:
    record: TaskRecord
    repeats_on_current_day: bool
    repeats_on_selected_day: bool


@dataclass(frozen=True)
class ReminderSaveCheck:
    record: ReminderRecord
    repeats_on_current_day: bool
    repeats_on_selected_day: bool


@dataclass(frozen=True)
class DeleteResult:
    """Outcome of a delete request.

    delete_all means the whole row goes; otherwise skip_dates is the new
    serialized skip list to store.
    """

    message: str
    delete_all: bool
    deleted_date: Optional[str] = None
    skip_dates: Optional[str] = None


def _as_mapping(data: Any) -> Dict[str, Any]:
    if isinstance(data, BaseModel):
        return data.model_dump(by_alias=True)
    if data is None:
        return {}
    return dict(data)


def _require(data: Dict[str, Any], fields: Iterable[str]) -> None:
    missing = [f for f in fields if data.get(f) in (None, "")]
    if missing:
        raise TaskValidationError("Missing required fields", fields=missing)


def _parse_day(data: Dict[str, Any], key: str) -> Optional[date]:
    value = data.get(key)
    if value in (None, ""):
        return None
    if isinstance(value, date) and not isinstance(value, datetime):
        return value
    if not isinstance(value, str) or not DATE_ONLY_RE.fullmatch(value):
        raise TaskValidationError("Invalid date format. Expected yyyy-MM-dd", fields=[key])
    day = to_calendar_date(value)
    if day is None:
        raise TaskValidationError("Invalid date format", fields=[key])
    return day


def _parse_instant(data: Dict[str, Any], key: str) -> datetime:
    instant = parse_to_utc_date(data.get(key))
    if instant is None:
        raise TaskValidationError("Invalid date format", fields=[key])
    return instant


def _parse_repeat(data: Dict[str, Any], selected_day: date):
    try:
        option = interpret_repeat_option(data.get("repeatOption"))
    except RepeatOptionParseError as e:
        raise TaskValidationError(str(e), fields=["repeatOption"]) from e
    repeat_end_day = _parse_day(data, "repeatEndDay")
    if repeat_end_day is not None and repeat_end_day < selected_day:
        raise TaskValidationError("Repeat end day must not be before the selected day", fields=["repeatEndDay"])
    return option, repeat_end_day


def validate_task_fields(data: Any) -> TaskRecord:
    """Validate a task create/update payload and return the normalized record."""
    payload = _as_mapping(data)
    _require(payload, ("name", "selectedDay", "startTime", "endTime"))

    selected_day = _parse_day(payload, "selectedDay")
    start = _parse_instant(payload, "startTime")
    end = _parse_instant(payload, "endTime")
    if end <= start:
        raise TaskValidationError("End time must be after start time", fields=["endTime"])
    option, repeat_end_day = _parse_repeat(payload, selected_day)

    try:
        return TaskRecord(
            id=payload.get("id"),
            name=payload["name"],
            selectedDay=selected_day,
            startTime=start,
            endTime=end,
            duration=payload.get("duration"),
            repeatOption=option,
            repeatEndDay=repeat_end_day,
            skipDates=sorted(safe_parse_skip_list(payload.get("skipDates"))),
        )
    except ValidationError as e:
        fields = [".".join(str(p) for p in err["loc"]) for err in e.errors()]
        raise TaskValidationError("Invalid task fields", fields=fields) from e


def validate_reminder_fields(data: Any) -> ReminderRecord:
    """Validate a reminder create/update payload."""
    payload = _as_mapping(data)
    _require(payload, ("name", "selectedDay", "selectedTime"))

    selected_day = _parse_day(payload, "selectedDay")
    selected_time = _parse_instant(payload, "selectedTime")
    option, repeat_end_day = _parse_repeat(payload, selected_day)

    try:
        return ReminderRecord(
            id=payload.get("id"),
            name=payload["name"],
            selectedDay=selected_day,
            selectedTime=selected_time,
            repeatOption=option,
            repeatEndDay=repeat_end_day,
            skipDates=sorted(safe_parse_skip_list(payload.get("skipDates"))),
        )
    except ValidationError as e:
        fields = [".".join(str(p) for p in err["loc"]) for err in e.errors()]
        raise TaskValidationError("Invalid reminder fields", fields=fields) from e


def _repeat_flags(record: Any, current_day: Any, ui_day: Any) -> tuple:
    """Whether a repeating record occurs on the user's current and selected days."""
    if not record.repeat_option:
        return False, False
    rule = build_rule(record.repeat_option, record.selected_day, record.repeat_end_day)
    on_current = matches_pattern(current_day, rule) if current_day else False
    on_selected = matches_pattern(ui_day, rule) if ui_day else False
    return on_current, on_selected


def prepare_task_save(
    data: Any,
    existing: Iterable[Any],
    *,
    current_day: Any = None,
    ui_day: Any = None,
) -> TaskSaveCheck:
    """Validate a task and reject it if it overlaps any existing task.

    Raises TaskValidationError or TaskOverlapError.
    """
    record = validate_task_fields(data)
    conflicts = find_conflicting_items(record.model_dump(by_alias=True), existing)
    if conflicts:
        ids = [getattr(EventCandidate.from_record(c), "id", None) for c in conflicts]
        logger.warning(f"Rejected task {record.name[:50]!r}: overlaps {ids}")
        raise TaskOverlapError(conflicting_ids=ids)

    on_current, on_selected = _repeat_flags(record, current_day, ui_day)
    logger.debug(f"Task {record.name[:50]!r} passed save checks")
    return TaskSaveCheck(
        record=record,
        repeats_on_current_day=on_current,
        repeats_on_selected_day=on_selected,
    )


def prepare_reminder_save(data: Any, *, current_day: Any = None, ui_day: Any = None) -> ReminderSaveCheck:
    """Validate a reminder; reminders are points in time and never conflict."""
    record = validate_reminder_fields(data)
    on_current, on_selected = _repeat_flags(record, current_day, ui_day)
    return ReminderSaveCheck(
        record=record,
        repeats_on_current_day=on_current,
        repeats_on_selected_day=on_selected,
    )


def delete_instance(record: Any, day: Any = None, *, delete_all: bool = False) -> DeleteResult:
    """Plan a delete for a task or reminder row.

    Non-repeating rows (or delete_all) are removed entirely. For a repeating
    row, the given day is added to its skip list.
    """
    candidate = EventCandidate.from_record(record)
    if candidate is None:
        raise TaskValidationError("Invalid record")

    if not candidate.repeat_option:
        return DeleteResult(message="Task deleted successfully", delete_all=True)
    if delete_all:
        return DeleteResult(message="All instances of the repeating task deleted successfully", delete_all=True)

    if not isinstance(day, str) or not DATE_ONLY_RE.fullmatch(day) or to_calendar_date(day) is None:
        raise TaskValidationError("Invalid date format. Expected yyyy-MM-dd", fields=["date"])

    skip_dates = safe_parse_skip_list(candidate.skip_dates)
    if day in skip_dates:
        raise InstanceAlreadyDeletedError(day)

    updated = add_skip_date(skip_dates, day)
    logger.debug(f"Skipping {day} for {candidate.id}")
    return DeleteResult(
        message="Single instance of the repeating task deleted successfully",
        delete_all=False,
        deleted_date=day,
        skip_dates=serialize_skip_list(updated),
    )
