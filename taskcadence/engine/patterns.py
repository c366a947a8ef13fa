"""Recurrence pattern matching and occurrence expansion.

Pattern matching answers "does this day carry an occurrence of the rule";
expansion enumerates matching days in a range, honoring the rule's end day and
a per-series skip list. Both degrade to False / [] on malformed input.
"""

from __future__ import annotations

import json
import logging
from datetime import date, timedelta
from typing import Any, FrozenSet, Iterable, Iterator, List, Optional

from taskcadence.engine.dates import (
    format_date_string,
    get_last_day_of_month,
    is_last_day_of_month,
    to_calendar_date,
)
from taskcadence.models.constants import DAY_INTERVALS
from taskcadence.models.recurrence import Occurrence, RecurrenceRule, RepeatOption
from taskcadence.models.task import EventCandidate

logger = logging.getLogger(__name__)


def matches_pattern(day: Any, rule: Optional[RecurrenceRule]) -> bool:
    """Return True if `day` carries an occurrence of `rule`.

    The anchor day always matches. Days before the anchor or after the end day
    never match. Day-stride patterns compare the whole-day distance from the
    anchor; monthly matches the anchor's day-of-month, and a rule anchored on
    the last day of a month also fires on the last day of every other month.
    """
    current = to_calendar_date(day)
    anchor = rule.anchor_day if rule is not None else None
    if current is None or anchor is None:
        logger.error(f"Invalid date in matches_pattern: day={day!r} anchor={anchor!r}")
        return False

    if current < anchor:
        return False
    if rule.end_day is not None and current > rule.end_day:
        return False

    if current == anchor:
        return True

    if not rule.repeat_option:
        return format_date_string(current) == format_date_string(anchor)

    diff_days = abs((current - anchor).days)
    frequency = rule.frequency

    if frequency in DAY_INTERVALS:
        return diff_days % DAY_INTERVALS[frequency] == 0

    if frequency == RepeatOption.MONTHLY:
        if current.day == anchor.day:
            return True
        # Month-end anchors follow the month end (Jan 31 -> Feb 28, Apr 30, ...)
        return is_last_day_of_month(anchor) and is_last_day_of_month(current)

    if frequency == RepeatOption.YEARLY:
        return (current.month, current.day) == (anchor.month, anchor.day)

    return False


def check_repeat_pattern(day: Any, repeat_option: Any, selected_day: Any, repeat_end_day: Any = None) -> bool:
    """Positional form of matches_pattern taking raw stored values."""
    return matches_pattern(
        day,
        build_rule(repeat_option, selected_day, repeat_end_day),
    )


def build_rule(repeat_option: Any, selected_day: Any, repeat_end_day: Any = None) -> RecurrenceRule:
    """Build a rule from raw stored values; unparsable dates become None."""
    if repeat_option is not None and not isinstance(repeat_option, str):
        repeat_option = str(repeat_option)
    end_day = to_calendar_date(repeat_end_day) if repeat_end_day else None
    if repeat_end_day and end_day is None:
        logger.warning(f"Ignoring unparsable repeat end day: {repeat_end_day!r}")
    return RecurrenceRule(
        repeat_option=repeat_option or None,
        anchor_day=to_calendar_date(selected_day),
        end_day=end_day,
    )


def rule_from_record(record: Any) -> Optional[RecurrenceRule]:
    """Rule described by a stored task/reminder row (None if not a record)."""
    candidate = EventCandidate.from_record(record)
    if candidate is None:
        return None
    return build_rule(candidate.repeat_option, candidate.selected_day, candidate.repeat_end_day)


def _normalize_skip_entries(entries: Iterable[Any]) -> FrozenSet[str]:
    out = set()
    for entry in entries:
        if not isinstance(entry, str) and not isinstance(entry, date):
            continue
        day = to_calendar_date(entry)
        if day is not None:
            out.add(format_date_string(day))
    return frozenset(out)


def safe_parse_skip_list(value: Any) -> FrozenSet[str]:
    """Parse a skip list given as a collection or a JSON array string.

    Anything malformed yields an empty set; a corrupt skip list must never
    block occurrence computation.
    """
    if value is None:
        return frozenset()
    if isinstance(value, (list, tuple, set, frozenset)):
        return _normalize_skip_entries(value)
    if not isinstance(value, str) or value.strip() == "":
        return frozenset()
    try:
        parsed = json.loads(value)
    except ValueError as e:
        logger.error(f"Error parsing skip list: {type(e).__name__}: {str(e)}")
        return frozenset()
    if not isinstance(parsed, list):
        logger.error(f"Skip list is not a JSON array: {value[:50]!r}")
        return frozenset()
    return _normalize_skip_entries(parsed)


def serialize_skip_list(skip_list: Any) -> str:
    """Sorted JSON array form used at the persistence boundary."""
    return json.dumps(sorted(safe_parse_skip_list(skip_list)))


def add_skip_date(skip_list: Any, day: Any) -> FrozenSet[str]:
    """Return a new skip set including `day` (unchanged if `day` is invalid)."""
    current = safe_parse_skip_list(skip_list)
    target = to_calendar_date(day)
    if target is None:
        return current
    return current | {format_date_string(target)}


def _month_days(rule: RecurrenceRule, start: date, end: date) -> Iterator[date]:
    anchor = rule.anchor_day
    year, month = start.year, start.month
    while (year, month) <= (end.year, end.month):
        month_start = date(year, month, 1)
        candidates = set()
        if anchor.day <= get_last_day_of_month(month_start):
            candidates.add(month_start.replace(day=anchor.day))
        if is_last_day_of_month(anchor):
            candidates.add(month_start.replace(day=get_last_day_of_month(month_start)))
        yield from sorted(candidates)
        year, month = (year + 1, 1) if month == 12 else (year, month + 1)


def _year_days(rule: RecurrenceRule, start: date, end: date) -> Iterator[date]:
    anchor = rule.anchor_day
    for year in range(start.year, end.year + 1):
        try:
            yield date(year, anchor.month, anchor.day)
        except ValueError:
            # Feb 29 anchor in a common year
            continue


def iter_occurrence_days(rule: Optional[RecurrenceRule], range_start: Any, range_end: Any) -> Iterator[date]:
    """Lazily yield the days in [range_start, range_end] on which `rule` fires.

    Same days as a day-by-day scan with matches_pattern, but steps straight
    from one candidate day to the next, so very long ranges stay cheap. The
    skip list is not applied here.
    """
    anchor = rule.anchor_day if rule is not None else None
    start = to_calendar_date(range_start)
    end = to_calendar_date(range_end)
    if anchor is None or start is None or end is None:
        return
    start = max(start, anchor)
    if rule.end_day is not None:
        end = min(end, rule.end_day)
    if start > end:
        return

    frequency = rule.frequency
    if frequency in DAY_INTERVALS:
        step = DAY_INTERVALS[frequency]
        offset = -(start - anchor).days % step
        if (end - start).days < offset:
            return
        current = start + timedelta(days=offset)
        while True:
            yield current
            if (end - current).days < step:
                return
            current += timedelta(days=step)

    if frequency == RepeatOption.MONTHLY:
        candidates = _month_days(rule, start, end)
    elif frequency == RepeatOption.YEARLY:
        candidates = _year_days(rule, start, end)
    else:
        # No repeat or an unknown option: the anchor day only.
        candidates = iter([anchor])

    for day in candidates:
        if start <= day <= end and matches_pattern(day, rule):
            yield day


def get_occurrences_in_range(
    rule: Optional[RecurrenceRule],
    skip_list: Any,
    range_start: Any,
    range_end: Any,
) -> List[Occurrence]:
    """Occurrences of `rule` in [range_start, range_end], ascending.

    Linear day-by-day scan from max(anchor, range_start) to
    min(range_end, end_day). Skipped days are excluded. Returns a new list;
    [] on invalid input or an inverted range.
    """
    occurrences: List[Occurrence] = []

    anchor = rule.anchor_day if rule is not None else None
    start = to_calendar_date(range_start)
    end = to_calendar_date(range_end)
    if anchor is None or start is None or end is None:
        logger.error(
            f"Invalid date in get_occurrences_in_range: anchor={anchor!r} "
            f"start={range_start!r} end={range_end!r}"
        )
        return occurrences

    if start > end:
        logger.debug(f"Range start {start} is after range end {end}")
        return occurrences

    effective_end = min(end, rule.end_day) if rule.end_day is not None else end
    skipped = safe_parse_skip_list(skip_list)

    current = max(anchor, start)
    while current <= effective_end:
        date_str = format_date_string(current)
        if date_str not in skipped and matches_pattern(current, rule):
            occurrences.append(Occurrence(day=current, date_str=date_str))
        if current == date.max:
            break
        current += timedelta(days=1)

    return occurrences


def occurrences_for_record(record: Any, range_start: Any, range_end: Any) -> List[Occurrence]:
    """Expand a stored task/reminder row over a range."""
    candidate = EventCandidate.from_record(record)
    if candidate is None:
        logger.error(f"Cannot expand non-record value: {type(record).__name__}")
        return []
    rule = build_rule(candidate.repeat_option, candidate.selected_day, candidate.repeat_end_day)
    return get_occurrences_in_range(rule, candidate.skip_dates, range_start, range_end)
