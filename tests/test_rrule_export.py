"""Tests for iCalendar RRULE export."""

from datetime import date

import pytest

from taskcadence.models.recurrence import RecurrenceRule, RepeatOption
from taskcadence.recurrence.rrule_export import rule_to_rrule


def _rule(option, anchor=date(2023, 7, 20), end=None):
    return RecurrenceRule(repeat_option=option, anchor_day=anchor, end_day=end)


class TestRuleToRRule:
    @pytest.mark.parametrize(
        "option,expected",
        [
            (RepeatOption.DAILY, "FREQ=DAILY"),
            (RepeatOption.EVERY_TWO_DAYS, "FREQ=DAILY;INTERVAL=2"),
            (RepeatOption.EVERY_THREE_DAYS, "FREQ=DAILY;INTERVAL=3"),
            (RepeatOption.WEEKLY, "FREQ=WEEKLY"),
            (RepeatOption.BIWEEKLY, "FREQ=WEEKLY;INTERVAL=2"),
            (RepeatOption.MONTHLY, "FREQ=MONTHLY;BYMONTHDAY=20"),
            (RepeatOption.YEARLY, "FREQ=YEARLY;BYMONTH=7;BYMONTHDAY=20"),
        ],
    )
    def test_frequencies(self, option, expected):
        assert rule_to_rrule(_rule(option)) == expected

    def test_until_is_end_of_day_utc(self):
        rule = _rule(RepeatOption.WEEKLY, end=date(2023, 8, 20))
        assert rule_to_rrule(rule) == "FREQ=WEEKLY;UNTIL=20230820T235959Z"

    def test_monthly_month_end_anchors(self):
        assert rule_to_rrule(_rule(RepeatOption.MONTHLY, anchor=date(2023, 1, 31))) == "FREQ=MONTHLY;BYMONTHDAY=-1"
        assert rule_to_rrule(_rule(RepeatOption.MONTHLY, anchor=date(2023, 4, 30))) == "FREQ=MONTHLY;BYMONTHDAY=30,-1"

    def test_non_repeating_rule_raises(self):
        with pytest.raises(ValueError):
            rule_to_rrule(_rule(None))
        with pytest.raises(ValueError):
            rule_to_rrule(_rule("every full moon"))

    def test_missing_anchor_raises(self):
        with pytest.raises(ValueError):
            rule_to_rrule(RecurrenceRule(repeat_option="daily"))
