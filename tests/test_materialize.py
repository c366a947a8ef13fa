"""Tests for day and week views over stored tasks and reminders."""

from taskcadence.models.task import TaskRecord
from taskcadence.recurrence.materialize import items_for_day, reminders_in_range, tasks_in_range


class TestItemsForDay:
    """Test items_for_day()."""

    def test_single_item_on_its_day(self, make_task):
        task = make_task()
        assert items_for_day([task], "2023-07-20") == [task]
        assert items_for_day([task], "2023-07-21") == []

    def test_repeating_instance_carries_requested_day(self, make_task):
        weekly = make_task(id=1, repeatOption="weekly")
        items = items_for_day([weekly], "2023-07-27")
        assert len(items) == 1
        assert items[0]["selectedDay"] == "2023-07-27"
        assert items[0]["id"] == 1
        # Stored row is left untouched.
        assert weekly["selectedDay"] == "2023-07-20"

    def test_singles_come_before_repeating(self, make_task):
        daily = make_task(id=1, repeatOption="daily")
        single = make_task(id=2, selectedDay="2023-07-22")
        items = items_for_day([daily, single], "2023-07-22")
        assert [item["id"] for item in items] == [2, 1]

    def test_skipped_day_is_omitted(self, make_task):
        daily = make_task(id=1, repeatOption="daily", skipDates='["2023-07-22"]')
        assert items_for_day([daily], "2023-07-22") == []
        assert len(items_for_day([daily], "2023-07-23")) == 1

    def test_repeat_end_day_respected(self, make_task):
        daily = make_task(id=1, repeatOption="daily", repeatEndDay="2023-07-21")
        assert len(items_for_day([daily], "2023-07-21")) == 1
        assert items_for_day([daily], "2023-07-22") == []

    def test_reminders_work_the_same_way(self, make_reminder):
        reminder = make_reminder(repeatOption="monthly")
        items = items_for_day([reminder], "2023-09-20")
        assert items[0]["selectedTime"] == "2023-07-20T08:15:00.000Z"
        assert items[0]["selectedDay"] == "2023-09-20"

    def test_invalid_day_and_records(self, make_task):
        assert items_for_day([make_task()], "bad") == []
        assert items_for_day(["junk", None, make_task()], "2023-07-20") == [make_task()]
        assert items_for_day(None, "2023-07-20") == []

    def test_accepts_pydantic_records(self, make_task):
        record = TaskRecord.model_validate(make_task(repeatOption="daily", skipDates=[]))
        items = items_for_day([record], "2023-07-21")
        assert items[0]["selectedDay"] == "2023-07-21"
        assert items[0]["name"] == "Test Task"


class TestTasksInRange:
    """Test week expansion of tasks."""

    def test_repeating_times_move_to_occurrence_day(self, make_task):
        daily = make_task(id=1, repeatOption="daily")
        items = tasks_in_range([daily], "2023-07-20", "2023-07-22")
        assert [item["selectedDay"] for item in items] == ["2023-07-20", "2023-07-21", "2023-07-22"]
        assert items[2]["startTime"] == "2023-07-22T09:00:00.000Z"
        assert items[2]["endTime"] == "2023-07-22T10:00:00.000Z"

    def test_sorted_by_day_then_start(self, make_task):
        daily = make_task(id=1, repeatOption="daily")
        early = make_task(
            id=2,
            selectedDay="2023-07-21",
            startTime="2023-07-21T07:00:00.000Z",
            endTime="2023-07-21T08:00:00.000Z",
        )
        items = tasks_in_range([daily, early], "2023-07-20", "2023-07-21")
        assert [(item["selectedDay"], item["id"]) for item in items] == [
            ("2023-07-20", 1),
            ("2023-07-21", 2),
            ("2023-07-21", 1),
        ]

    def test_singles_outside_range_are_dropped(self, make_task):
        assert tasks_in_range([make_task()], "2023-07-21", "2023-07-27") == []

    def test_skip_dates_excluded(self, make_task):
        daily = make_task(id=1, repeatOption="daily", skipDates=["2023-07-21"])
        items = tasks_in_range([daily], "2023-07-20", "2023-07-22")
        assert [item["selectedDay"] for item in items] == ["2023-07-20", "2023-07-22"]

    def test_unparsable_time_is_kept_verbatim(self, make_task):
        daily = make_task(id=1, repeatOption="daily", endTime="later")
        items = tasks_in_range([daily], "2023-07-21", "2023-07-21")
        assert items[0]["endTime"] == "later"
        assert items[0]["startTime"] == "2023-07-21T09:00:00.000Z"

    def test_invalid_or_inverted_range(self, make_task):
        assert tasks_in_range([make_task()], "bad", "2023-07-27") == []
        assert tasks_in_range([make_task()], "2023-07-27", "2023-07-20") == []


class TestRemindersInRange:
    def test_reanchors_selected_time(self, make_reminder):
        weekly = make_reminder(repeatOption="weekly")
        items = reminders_in_range([weekly], "2023-07-20", "2023-08-05")
        assert [item["selectedTime"] for item in items] == [
            "2023-07-20T08:15:00.000Z",
            "2023-07-27T08:15:00.000Z",
            "2023-08-03T08:15:00.000Z",
        ]
