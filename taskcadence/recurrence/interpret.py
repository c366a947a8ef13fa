"""Interpretation of user-supplied repeat options.

This module is the single entrypoint used when a task or reminder is created or
updated. It must be deterministic: same input -> same output (or same error).
The engine itself never calls it; stored values reach the engine verbatim.
"""

from __future__ import annotations

import re
from typing import Any, Optional

from taskcadence.models.recurrence import RepeatOption


class RepeatOptionParseError(ValueError):
    """Unknown repeat option, surfaced to the caller as a 400."""

    def __init__(self, message: str, *, value: Any = None):
        super().__init__(message)
        self.value = value


_NO_REPEAT = {"", "none", "never", "no repeat", "once"}

_ALIASES: list[tuple[re.Pattern, RepeatOption]] = [
    (re.compile(r"^(daily|every day|each day)$"), RepeatOption.DAILY),
    (re.compile(r"^every (two|2|other) days?$"), RepeatOption.EVERY_TWO_DAYS),
    (re.compile(r"^every (three|3) days$"), RepeatOption.EVERY_THREE_DAYS),
    (re.compile(r"^(weekly|every week|each week)$"), RepeatOption.WEEKLY),
    (re.compile(r"^(biweekly|bi weekly|fortnightly|every (two|2|other) weeks?)$"), RepeatOption.BIWEEKLY),
    (re.compile(r"^(monthly|every month|each month)$"), RepeatOption.MONTHLY),
    (re.compile(r"^(yearly|annually|every year|each year)$"), RepeatOption.YEARLY),
]


def _normalize(text: str) -> str:
    # "Every-Two_Days" -> "every two days"
    return re.sub(r"[\s_\-]+", " ", text.strip().lower()).strip()


def interpret_repeat_option(value: Any) -> Optional[RepeatOption]:
    """Map a user-supplied repeat option onto the closed enumeration.

    Returns None for "no repeat". Raises RepeatOptionParseError for anything
    that is not one of the accepted options or a known alias.
    """
    if value is None:
        return None
    if isinstance(value, RepeatOption):
        return value
    if not isinstance(value, str):
        raise RepeatOptionParseError("Repeat option must be a string", value=value)

    # Exact stored vocabulary first (case-sensitive).
    try:
        return RepeatOption(value)
    except ValueError:
        pass

    normalized = _normalize(value)
    if normalized in _NO_REPEAT:
        return None
    for pattern, option in _ALIASES:
        if pattern.match(normalized):
            return option

    raise RepeatOptionParseError(f"Unknown repeat option: {value!r}", value=value)
