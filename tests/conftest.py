"""Pytest fixtures and configuration for taskcadence tests."""

import pytest
from datetime import date
from fastapi.testclient import TestClient

from taskcadence.models.recurrence import RecurrenceRule, RepeatOption


@pytest.fixture
def sample_task_base():
    """Base stored-task row for creating test tasks.

    Returns a dict with camelCase keys (as stored) that can be overridden.
    """
    return {
        "id": 1,
        "name": "Test Task",
        "selectedDay": "2023-07-20",
        "startTime": "2023-07-20T09:00:00.000Z",
        "endTime": "2023-07-20T10:00:00.000Z",
        "duration": 60,
        "repeatOption": "",
        "repeatEndDay": None,
        "skipDates": "[]",
    }


@pytest.fixture
def make_task(sample_task_base):
    """Factory for stored task rows: make_task(id=2, startTime=...)."""
    def _make(**overrides):
        return {**sample_task_base, **overrides}
    return _make


@pytest.fixture
def sample_reminder_base():
    """Base stored-reminder row."""
    return {
        "id": 10,
        "name": "Test Reminder",
        "selectedDay": "2023-07-20",
        "selectedTime": "2023-07-20T08:15:00.000Z",
        "repeatOption": "",
        "repeatEndDay": None,
        "skipDates": "[]",
    }


@pytest.fixture
def make_reminder(sample_reminder_base):
    def _make(**overrides):
        return {**sample_reminder_base, **overrides}
    return _make


@pytest.fixture
def daily_rule():
    """Daily rule anchored 2023-01-01 with no end."""
    return RecurrenceRule(repeat_option=RepeatOption.DAILY, anchor_day=date(2023, 1, 1))


@pytest.fixture
def test_client():
    """Create a FastAPI test client."""
    from taskcadence.api.app import app

    with TestClient(app) as client:
        yield client
