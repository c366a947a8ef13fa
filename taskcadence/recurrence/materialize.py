"""Materialize stored tasks/reminders into concrete per-day instances.

Used for day and week views. Nothing produced here is persisted: each call
expands the stored rows it is given and returns fresh dictionaries with the
camelCase keys of the stored records.
"""

from __future__ import annotations

import logging
from datetime import date, datetime, timezone
from typing import Any, Dict, Iterable, List, Optional, Sequence

from pydantic import BaseModel

from taskcadence.engine.dates import (
    combine_date_time,
    format_date_string,
    format_instant,
    parse_to_utc_date,
    to_calendar_date,
)
from taskcadence.engine.patterns import (
    build_rule,
    get_occurrences_in_range,
    matches_pattern,
    safe_parse_skip_list,
)
from taskcadence.models.task import EventCandidate

logger = logging.getLogger(__name__)

TASK_TIME_KEYS = ("startTime", "endTime")
REMINDER_TIME_KEYS = ("selectedTime",)

_LATEST = datetime.max.replace(tzinfo=timezone.utc)


def _as_dict(record: Any) -> Dict[str, Any]:
    if isinstance(record, BaseModel):
        return record.model_dump(by_alias=True)
    return dict(record)


def _day_of(candidate: EventCandidate) -> Optional[date]:
    return to_calendar_date(candidate.selected_day)


def items_for_day(records: Iterable[Any], day: Any) -> List[Dict[str, Any]]:
    """Tasks or reminders occurring on `day`.

    Single items whose selected day is `day` come first, followed by one
    instance per repeating item whose pattern matches `day` and whose skip
    list does not name it. Repeating instances carry `selectedDay` = `day`.
    """
    target = to_calendar_date(day)
    if target is None:
        logger.error(f"Invalid date in items_for_day: {day!r}")
        return []
    day_str = format_date_string(target)

    singles: List[Dict[str, Any]] = []
    repeating: List[Dict[str, Any]] = []
    for record in records or []:
        candidate = EventCandidate.from_record(record)
        if candidate is None:
            logger.warning(f"Skipping non-record value of type {type(record).__name__}")
            continue

        if not candidate.repeat_option:
            if _day_of(candidate) == target:
                singles.append(_as_dict(record))
            continue

        if day_str in safe_parse_skip_list(candidate.skip_dates):
            logger.debug(f"Item {candidate.id} skips {day_str}")
            continue
        rule = build_rule(candidate.repeat_option, candidate.selected_day, candidate.repeat_end_day)
        if matches_pattern(target, rule):
            repeating.append({**_as_dict(record), "selectedDay": day_str})

    return singles + repeating


def _sort_key(item: Dict[str, Any], time_key: str) -> tuple[date, datetime]:
    day = to_calendar_date(item.get("selectedDay")) or date.max
    instant = parse_to_utc_date(item.get(time_key)) or _LATEST
    return (day, instant)


def _materialize_in_range(
    records: Iterable[Any],
    start: Any,
    end: Any,
    time_keys: Sequence[str],
) -> List[Dict[str, Any]]:
    start_day = to_calendar_date(start)
    end_day = to_calendar_date(end)
    if start_day is None or end_day is None:
        logger.error(f"Invalid range in materialize: start={start!r} end={end!r}")
        return []
    if start_day > end_day:
        return []

    out: List[Dict[str, Any]] = []
    for record in records or []:
        candidate = EventCandidate.from_record(record)
        if candidate is None:
            logger.warning(f"Skipping non-record value of type {type(record).__name__}")
            continue
        base = _as_dict(record)

        if not candidate.repeat_option:
            day = _day_of(candidate)
            if day is not None and start_day <= day <= end_day:
                out.append(base)
            continue

        rule = build_rule(candidate.repeat_option, candidate.selected_day, candidate.repeat_end_day)
        for occ in get_occurrences_in_range(rule, candidate.skip_dates, start_day, end_day):
            instance = {**base, "selectedDay": occ.date_str}
            for key in time_keys:
                combined = combine_date_time(occ.day, base.get(key)) if base.get(key) else None
                # Fall back to the stored value when it cannot be re-anchored.
                instance[key] = format_instant(combined) if combined else base.get(key)
            out.append(instance)

    return sorted(out, key=lambda item: _sort_key(item, time_keys[0]))


def tasks_in_range(records: Iterable[Any], start: Any, end: Any) -> List[Dict[str, Any]]:
    """Week view: tasks in [start, end], one instance per occurrence.

    Repeating instances get `startTime`/`endTime` moved onto the occurrence
    day. Sorted by day, then start time.
    """
    return _materialize_in_range(records, start, end, TASK_TIME_KEYS)


def reminders_in_range(records: Iterable[Any], start: Any, end: Any) -> List[Dict[str, Any]]:
    """Week view for reminders (re-anchors `selectedTime`)."""
    return _materialize_in_range(records, start, end, REMINDER_TIME_KEYS)
