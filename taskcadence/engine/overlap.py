"""Conflict detection between time-bound events (tasks).

Tasks never span a civil-day boundary, so two occurrences conflict only when
they fall on the same calendar day and their time-of-day ranges overlap.
Recurring events are expanded into concrete occurrences inside the
intersection of both events' active windows before comparing.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import date, datetime, timedelta
from math import lcm
from typing import Any, FrozenSet, Iterable, Iterator, List, Optional

from taskcadence.engine.dates import (
    MAX_DATE,
    combine_date_time,
    format_date_string,
    parse_to_utc_date,
    to_calendar_date,
)
from taskcadence.engine.patterns import (
    build_rule,
    iter_occurrence_days,
    matches_pattern,
    safe_parse_skip_list,
)
from taskcadence.models.constants import (
    CALENDAR_CYCLE_DAYS,
    DAY_INTERVALS,
    TYPICAL_GAP_DAYS,
)
from taskcadence.models.recurrence import RecurrenceRule
from taskcadence.models.task import EventCandidate

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class _TimedEvent:
    """A record with its dates parsed once."""

    candidate: EventCandidate
    start: datetime
    end: datetime
    day: date
    rule: RecurrenceRule
    skip_dates: FrozenSet[str]

    @property
    def repeats(self) -> bool:
        return self.rule.repeats

    @property
    def window_end(self) -> date:
        # A single event occupies only its own day; a repeating one without an
        # end day is unbounded.
        if not self.repeats:
            return self.day
        return self.rule.end_day or MAX_DATE

    @property
    def gap_days(self) -> int:
        """Rough spacing between occurrences, used to pick the sparser side."""
        if not self.repeats:
            return MAX_DATE.toordinal()
        return TYPICAL_GAP_DAYS.get(self.rule.frequency, MAX_DATE.toordinal())

    def skips(self, day_str: str) -> bool:
        return day_str in self.skip_dates

    def iter_days(self, window_start: date, window_end: date) -> Iterator[date]:
        if not self.repeats:
            if window_start <= self.day <= window_end:
                yield self.day
            return
        for day in iter_occurrence_days(self.rule, window_start, window_end):
            if not self.skips(format_date_string(day)):
                yield day

    def occurs_on(self, day: date) -> bool:
        if not self.repeats:
            return day == self.day
        return matches_pattern(day, self.rule) and not self.skips(format_date_string(day))

    def on_day(self, day: date) -> tuple[Optional[datetime], Optional[datetime]]:
        return combine_date_time(day, self.start), combine_date_time(day, self.end)


def _timed_event(record: Any) -> Optional[_TimedEvent]:
    candidate = EventCandidate.from_record(record)
    if candidate is None:
        return None
    if not candidate.start_time or not candidate.end_time:
        return None
    start = parse_to_utc_date(candidate.start_time)
    end = parse_to_utc_date(candidate.end_time)
    day = to_calendar_date(candidate.selected_day)
    if start is None or end is None or day is None:
        return None
    return _TimedEvent(
        candidate=candidate,
        start=start,
        end=end,
        day=day,
        rule=build_rule(candidate.repeat_option, day, candidate.repeat_end_day),
        skip_dates=safe_parse_skip_list(candidate.skip_dates),
    )


def ranges_overlap(start1: Any, end1: Any, start2: Any, end2: Any) -> bool:
    """Half-open interval overlap: start1 < end2 and start2 < end1.

    Touching endpoints do not overlap. Invalid input returns False.
    """
    values = [parse_to_utc_date(v) for v in (start1, end1, start2, end2)]
    if any(v is None for v in values):
        logger.error(f"Invalid date in ranges_overlap: {(start1, end1, start2, end2)!r}")
        return False
    s1, e1, s2, e2 = values
    return s1 < e2 and s2 < e1


def _same_day_overlap(day: date, new: _TimedEvent, existing: _TimedEvent) -> bool:
    new_start, new_end = new.on_day(day)
    existing_start, existing_end = existing.on_day(day)
    overlap = ranges_overlap(new_start, new_end, existing_start, existing_end)
    logger.debug(
        f"Compared {new_start} - {new_end} with existing {existing.candidate.id} "
        f"{existing_start} - {existing_end}: overlap={overlap}"
    )
    return overlap


def _coincidence_period(new: _TimedEvent, existing: _TimedEvent) -> int:
    """Days after which the pair's combined pattern repeats itself."""
    new_step = DAY_INTERVALS.get(new.rule.frequency)
    existing_step = DAY_INTERVALS.get(existing.rule.frequency)
    if new_step and existing_step:
        return lcm(new_step, existing_step)
    # Calendar patterns repeat with the Gregorian cycle; doubled so that odd
    # day strides line up as well.
    return 2 * CALENDAR_CYCLE_DAYS


def _window(new: _TimedEvent, existing: _TimedEvent) -> Optional[tuple[date, date]]:
    start = max(new.day, existing.day)
    end = min(new.window_end, existing.window_end)
    if start > end:
        return None
    if end == MAX_DATE:
        # Both sides repeat forever. One full period of the combined pattern
        # past the window start holds every possible coincidence.
        try:
            end = start + timedelta(days=_coincidence_period(new, existing))
        except OverflowError:
            end = MAX_DATE
    return start, end


def _conflicts_with(new: _TimedEvent, existing: _TimedEvent) -> bool:
    if not new.repeats and not existing.repeats:
        if format_date_string(new.day) != format_date_string(existing.day):
            return False
        return _same_day_overlap(new.day, new, existing)

    window = _window(new, existing)
    if window is None:
        logger.debug(f"No date range overlap with existing {existing.candidate.id}")
        return False

    # Walk the sparser side and test the other on each of its days.
    if existing.gap_days > new.gap_days:
        walker, other = existing, new
    else:
        walker, other = new, existing

    for day in walker.iter_days(*window):
        if not other.occurs_on(day):
            continue
        day_str = format_date_string(day)
        # Expansion already drops skipped days; checked again per pair.
        if day_str in existing.skip_dates:
            continue
        if _same_day_overlap(day, new, existing):
            return True
    return False


def _iter_conflicts(candidate: Any, existing: Iterable[Any]) -> Iterator[Any]:
    if candidate is None or existing is None:
        return
    new = _timed_event(candidate)
    if new is None:
        logger.debug("Candidate is missing times or has unparsable dates; no conflict possible")
        return

    new_id = new.candidate.id
    new_day_str = format_date_string(new.day)

    for record in existing:
        item = EventCandidate.from_record(record)
        if item is None:
            continue
        if new_id is not None and item.id == new_id:
            continue
        if new_day_str in safe_parse_skip_list(item.skip_dates):
            logger.debug(f"Existing {item.id} skips {new_day_str}")
            continue
        timed = _timed_event(item)
        if timed is None:
            logger.debug(f"Existing {item.id} has unparsable dates, skipping")
            continue
        if _conflicts_with(new, timed):
            yield record


def find_conflict(candidate: Any, existing: Iterable[Any]) -> bool:
    """True iff any existing event conflicts with the candidate.

    Stops at the first conflict. Malformed records contribute no conflict.
    """
    for _ in _iter_conflicts(candidate, existing):
        return True
    return False


def find_conflicting_items(candidate: Any, existing: Iterable[Any]) -> List[Any]:
    """All existing records that conflict with the candidate, in input order."""
    return list(_iter_conflicts(candidate, existing))
