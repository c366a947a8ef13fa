"""Task and reminder record models for taskcadence.

Records arrive from the persistence layer with camelCase keys and string-typed
dates. `EventCandidate` accepts anything (the engine must tolerate corrupt rows);
`TaskRecord` / `ReminderRecord` are the validated shapes used on create/update.
"""

from collections.abc import Mapping
from datetime import date, datetime
from typing import Any, List, Optional

from pydantic import BaseModel, Field, ValidationError

from taskcadence.models.recurrence import RepeatOption


class EventCandidate(BaseModel):
    """Loosely-typed time-bound event as stored (input to conflict checks)."""

    id: Optional[Any] = Field(None, description="Stored id; excluded from self-comparison")
    name: Optional[Any] = Field(None, description="Display name (informational only)")
    start_time: Optional[Any] = Field(None, alias="startTime", description="ISO-8601 instant")
    end_time: Optional[Any] = Field(None, alias="endTime", description="ISO-8601 instant")
    selected_day: Optional[Any] = Field(None, alias="selectedDay", description="YYYY-MM-DD anchor day")
    repeat_option: Optional[Any] = Field(None, alias="repeatOption", description="Repeat option or ''")
    repeat_end_day: Optional[Any] = Field(None, alias="repeatEndDay", description="YYYY-MM-DD or null")
    skip_dates: Optional[Any] = Field(None, alias="skipDates", description="JSON array string or list")

    class Config:
        """Pydantic configuration."""
        populate_by_name = True
        extra = "allow"

    @classmethod
    def from_record(cls, record: Any) -> Optional["EventCandidate"]:
        """Coerce a stored row (mapping or candidate) without raising."""
        if isinstance(record, cls):
            return record
        if isinstance(record, BaseModel):
            record = record.model_dump(by_alias=True)
        if not isinstance(record, Mapping):
            return None
        try:
            return cls.model_validate(dict(record))
        except ValidationError:
            return None

    def extra_value(self, key: str) -> Any:
        """Value of a pass-through field such as `selectedTime`."""
        return (self.model_extra or {}).get(key)


class TaskRecord(BaseModel):
    """Validated task record."""

    id: Optional[Any] = None
    name: str = Field(..., description="Task name")
    selected_day: date = Field(..., alias="selectedDay", description="Anchor day")
    start_time: datetime = Field(..., alias="startTime", description="Start instant (UTC)")
    end_time: datetime = Field(..., alias="endTime", description="End instant (UTC)")
    duration: Optional[int] = Field(None, description="Duration in minutes as entered by the user")
    repeat_option: Optional[RepeatOption] = Field(None, alias="repeatOption")
    repeat_end_day: Optional[date] = Field(None, alias="repeatEndDay")
    skip_dates: List[str] = Field(default_factory=list, alias="skipDates")

    class Config:
        """Pydantic configuration."""
        populate_by_name = True
        use_enum_values = True


class ReminderRecord(BaseModel):
    """Validated reminder record (a point in time, not a range)."""

    id: Optional[Any] = None
    name: str = Field(..., description="Reminder name")
    selected_day: date = Field(..., alias="selectedDay", description="Anchor day")
    selected_time: datetime = Field(..., alias="selectedTime", description="Reminder instant (UTC)")
    repeat_option: Optional[RepeatOption] = Field(None, alias="repeatOption")
    repeat_end_day: Optional[date] = Field(None, alias="repeatEndDay")
    skip_dates: List[str] = Field(default_factory=list, alias="skipDates")

    class Config:
        """Pydantic configuration."""
        populate_by_name = True
        use_enum_values = True
