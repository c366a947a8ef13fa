"""Export RecurrenceRule to iCalendar RRULE strings (export-only)."""

from __future__ import annotations

from typing import List

from taskcadence.engine.dates import is_last_day_of_month
from taskcadence.models.recurrence import RecurrenceRule, RepeatOption


_FREQ_MAP: dict[RepeatOption, tuple[str, int]] = {
    RepeatOption.DAILY: ("DAILY", 1),
    RepeatOption.EVERY_TWO_DAYS: ("DAILY", 2),
    RepeatOption.EVERY_THREE_DAYS: ("DAILY", 3),
    RepeatOption.WEEKLY: ("WEEKLY", 1),
    RepeatOption.BIWEEKLY: ("WEEKLY", 2),
    RepeatOption.MONTHLY: ("MONTHLY", 1),
    RepeatOption.YEARLY: ("YEARLY", 1),
}


def rule_to_rrule(rule: RecurrenceRule) -> str:
    """Convert a rule to an RRULE (without the leading 'RRULE:' prefix).

    The anchor day becomes DTSTART on the exporting side; it is not part of the
    rule body. Raises ValueError for rules that do not repeat.
    """
    frequency = rule.frequency
    if frequency is None:
        raise ValueError(f"Rule does not repeat: {rule.repeat_option!r}")
    if rule.anchor_day is None:
        raise ValueError("Rule has no anchor day")

    freq, interval = _FREQ_MAP[frequency]
    parts: List[str] = [f"FREQ={freq}"]
    if interval != 1:
        parts.append(f"INTERVAL={interval}")

    anchor = rule.anchor_day
    if frequency == RepeatOption.MONTHLY:
        # Month-end anchors also follow the month end (Feb 28 -> 28th and last day).
        if not is_last_day_of_month(anchor):
            parts.append(f"BYMONTHDAY={anchor.day}")
        elif anchor.day == 31:
            parts.append("BYMONTHDAY=-1")
        else:
            parts.append(f"BYMONTHDAY={anchor.day},-1")
    elif frequency == RepeatOption.YEARLY:
        parts.append(f"BYMONTH={anchor.month}")
        parts.append(f"BYMONTHDAY={anchor.day}")

    # UNTIL: keep date-only to avoid timezone drift; Calendar interprets as end of day in UTC.
    if rule.end_day:
        parts.append(f"UNTIL={rule.end_day.strftime('%Y%m%d')}T235959Z")
    return ";".join(parts)
