"""Data models for taskcadence."""

from taskcadence.models.recurrence import Occurrence, RecurrenceRule, RepeatOption
from taskcadence.models.task import EventCandidate, ReminderRecord, TaskRecord

__all__ = [
    "Occurrence",
    "RecurrenceRule",
    "RepeatOption",
    "EventCandidate",
    "ReminderRecord",
    "TaskRecord",
]
