"""Constants for taskcadence.

This module centralizes the fixed pattern periods and vocabulary used by the engine.
"""

from taskcadence.models.recurrence import RepeatOption


# Day-stride patterns: an occurrence exists every N days from the anchor
DAY_INTERVALS = {
    RepeatOption.DAILY: 1,
    RepeatOption.EVERY_TWO_DAYS: 2,
    RepeatOption.EVERY_THREE_DAYS: 3,
    RepeatOption.WEEKLY: 7,
    RepeatOption.BIWEEKLY: 14,
}

# Approximate spacing of every pattern, used to choose which side to enumerate
TYPICAL_GAP_DAYS = {
    **DAY_INTERVALS,
    RepeatOption.MONTHLY: 30,
    RepeatOption.YEARLY: 365,
}

# Days in the 400-year Gregorian cycle; calendar dates and weekdays both
# repeat with this period
CALENDAR_CYCLE_DAYS = 146097

# Message surfaced to users when a task conflicts with an existing one
OVERLAP_MESSAGE = "This task overlaps with another task."
INSTANCE_ALREADY_DELETED_MESSAGE = "This instance is already deleted"
