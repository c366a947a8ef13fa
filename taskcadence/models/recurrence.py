"""Recurrence models for taskcadence.

Canonical in-memory representation of a repeat rule and its concrete occurrences.
Occurrences are computed on demand and never stored.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime, timezone
from enum import Enum
from typing import Any, Dict, Optional

from pydantic import BaseModel, Field, field_validator


class RepeatOption(str, Enum):
    """Accepted repeat options (exact, case-sensitive stored values)."""

    DAILY = "daily"
    EVERY_TWO_DAYS = "every two days"
    EVERY_THREE_DAYS = "every three days"
    WEEKLY = "weekly"
    BIWEEKLY = "biweekly"
    MONTHLY = "monthly"
    YEARLY = "yearly"


class RecurrenceRule(BaseModel):
    """A repeat rule anchored at a calendar day.

    `repeat_option` keeps the raw stored string: an unrecognized value is not an
    error here, it simply never matches beyond the anchor day.
    """

    repeat_option: Optional[str] = Field(None, description="Stored repeat option; None/'' means no repeat")
    anchor_day: Optional[date] = Field(None, description="First occurrence (the task's selected day)")
    end_day: Optional[date] = Field(None, description="Last day the rule may fire (inclusive)")

    @field_validator("repeat_option", mode="before")
    @classmethod
    def _coerce_repeat_option(cls, v):
        if isinstance(v, RepeatOption):
            return v.value
        return v

    @field_validator("anchor_day", "end_day", mode="before")
    @classmethod
    def _datetime_to_utc_day(cls, v):
        # Calendar days are always taken from UTC components.
        if isinstance(v, datetime):
            if v.tzinfo is not None:
                try:
                    v = v.astimezone(timezone.utc)
                except OverflowError:
                    # No UTC calendar day exists; treated as a missing date.
                    return None
            return v.date()
        return v

    @property
    def repeats(self) -> bool:
        return bool(self.repeat_option)

    @property
    def frequency(self) -> Optional[RepeatOption]:
        """Closed-enum view of repeat_option (None for no repeat or unknown)."""
        if not self.repeat_option:
            return None
        try:
            return RepeatOption(self.repeat_option)
        except ValueError:
            return None


@dataclass(frozen=True)
class Occurrence:
    """One concrete calendar-day instance of a rule."""

    day: date
    date_str: str

    def to_dict(self) -> Dict[str, Any]:
        return {"date": self.day, "dateStr": self.date_str}
