"""Tests for repeat option interpretation at the input boundary."""

import pytest

from taskcadence.models.recurrence import RepeatOption
from taskcadence.recurrence.interpret import RepeatOptionParseError, interpret_repeat_option


class TestInterpretRepeatOption:
    @pytest.mark.parametrize("option", list(RepeatOption))
    def test_stored_values_round_trip(self, option):
        assert interpret_repeat_option(option.value) == option
        assert interpret_repeat_option(option) == option

    @pytest.mark.parametrize("value", [None, "", "  ", "None", "never", "no-repeat", "Once"])
    def test_no_repeat(self, value):
        assert interpret_repeat_option(value) is None

    @pytest.mark.parametrize(
        "value,expected",
        [
            ("Daily", RepeatOption.DAILY),
            ("every day", RepeatOption.DAILY),
            ("Every-Two_Days", RepeatOption.EVERY_TWO_DAYS),
            ("every other day", RepeatOption.EVERY_TWO_DAYS),
            ("every 3 days", RepeatOption.EVERY_THREE_DAYS),
            ("WEEKLY", RepeatOption.WEEKLY),
            ("bi-weekly", RepeatOption.BIWEEKLY),
            ("fortnightly", RepeatOption.BIWEEKLY),
            ("every other week", RepeatOption.BIWEEKLY),
            ("each month", RepeatOption.MONTHLY),
            ("annually", RepeatOption.YEARLY),
        ],
    )
    def test_aliases(self, value, expected):
        assert interpret_repeat_option(value) == expected

    def test_unknown_value_raises(self):
        with pytest.raises(RepeatOptionParseError) as exc:
            interpret_repeat_option("every full moon")
        assert exc.value.value == "every full moon"
        assert isinstance(exc.value, ValueError)

    def test_non_string_raises(self):
        with pytest.raises(RepeatOptionParseError):
            interpret_repeat_option(7)

    def test_deterministic(self):
        assert interpret_repeat_option("Fortnightly") == interpret_repeat_option("Fortnightly")
