"""Recurrence engine for taskcadence."""

from taskcadence.engine.dates import (
    combine_date_time,
    format_date_string,
    is_valid_date,
    parse_to_utc_date,
    to_calendar_date,
)
from taskcadence.engine.patterns import (
    check_repeat_pattern,
    get_occurrences_in_range,
    iter_occurrence_days,
    matches_pattern,
    occurrences_for_record,
    safe_parse_skip_list,
    serialize_skip_list,
)
from taskcadence.engine.overlap import find_conflict, find_conflicting_items, ranges_overlap

__all__ = [
    "combine_date_time",
    "format_date_string",
    "is_valid_date",
    "parse_to_utc_date",
    "to_calendar_date",
    "check_repeat_pattern",
    "get_occurrences_in_range",
    "iter_occurrence_days",
    "matches_pattern",
    "occurrences_for_record",
    "safe_parse_skip_list",
    "serialize_skip_list",
    "find_conflict",
    "find_conflicting_items",
    "ranges_overlap",
]
