"""Tests for the reminder record and its JSON mapping."""

from datetime import date, datetime, time

import pytest

from domains.reminders.models import (
    Category,
    Priority,
    Recurrence,
    Reminder,
    ValidationError,
    coerce_changes,
    new_reminder,
)

RECORD = {
    "id": "2f1c",
    "title": "Pay rent",
    "description": "Transfer to landlord",
    "date": "2024-01-01",
    "time": "09:00",
    "recurrence": "monthly",
    "category": "personal",
    "priority": "high",
    "active": True,
    "createdAt": "2024-01-01T08:00:00",
    "updatedAt": "2024-01-02T10:30:00",
    "notificationId": "a9b8",
}


def test_record_round_trip_keeps_field_names():
    reminder = Reminder.from_dict(RECORD)

    assert reminder.to_dict() == RECORD
    assert list(reminder.to_dict()) == list(RECORD)


def test_from_dict_reads_types():
    reminder = Reminder.from_dict(RECORD)

    assert reminder.date == date(2024, 1, 1)
    assert reminder.time == time(9, 0)
    assert reminder.anchor == datetime(2024, 1, 1, 9, 0)
    assert reminder.recurrence is Recurrence.MONTHLY
    assert reminder.priority is Priority.HIGH
    assert reminder.is_recurring


def test_none_recurrence_is_one_shot():
    reminder = Reminder.from_dict({**RECORD, "recurrence": "none"})

    assert reminder.recurrence is Recurrence.ONCE
    assert not reminder.is_recurring


def test_utc_timestamps_become_naive():
    reminder = Reminder.from_dict({**RECORD, "createdAt": "2024-01-01T08:00:00.000Z"})

    assert reminder.created_at.tzinfo is None


def test_missing_description_defaults_to_empty():
    record = dict(RECORD)
    del record["description"]

    assert Reminder.from_dict(record).description == ""


@pytest.mark.parametrize("field, value", [
    ("priority", "urgent"),
    ("category", "errands"),
    ("recurrence", "yearly"),
])
def test_unknown_enum_values_rejected(field, value):
    with pytest.raises(ValueError):
        Reminder.from_dict({**RECORD, field: value})


def test_priority_weights():
    assert [p.weight for p in (Priority.HIGH, Priority.MEDIUM, Priority.LOW)] == [3, 2, 1]


class TestNewReminder:

    def test_generates_ids_and_timestamps(self):
        now = datetime(2024, 3, 15, 10, 0)

        r = new_reminder("  Dentist  ", date(2024, 3, 20), time(9, 30, 15), now=now,
                         category=Category.HEALTH, priority=Priority.HIGH)

        assert r.title == "Dentist"
        assert r.time == time(9, 30)
        assert r.active is True
        assert r.created_at == r.updated_at == now
        assert r.id and r.notification_id and r.id != r.notification_id

    def test_ids_are_unique(self):
        a = new_reminder("A", date(2024, 3, 20), time(9, 0))
        b = new_reminder("A", date(2024, 3, 20), time(9, 0))
        assert a.id != b.id

    @pytest.mark.parametrize("title", ["", "   ", None])
    def test_blank_title_rejected(self, title):
        with pytest.raises(ValidationError, match="Title is required"):
            new_reminder(title, date(2024, 3, 20), time(9, 0))


class TestCoerceChanges:

    def test_converts_record_values(self):
        changes = coerce_changes({
            "title": "  Dentist ",
            "date": "2024-03-20",
            "time": "09:30:45",
            "recurrence": "weekly",
            "category": "health",
            "priority": "low",
        })

        assert changes == {
            "title": "Dentist",
            "date": date(2024, 3, 20),
            "time": time(9, 30),
            "recurrence": Recurrence.WEEKLY,
            "category": Category.HEALTH,
            "priority": Priority.LOW,
        }

    def test_typed_values_pass_through(self):
        changes = {"date": date(2024, 3, 20), "recurrence": Recurrence.DAILY, "active": False}
        assert coerce_changes(changes) == changes

    def test_datetime_for_date_keeps_the_day(self):
        assert coerce_changes({"date": datetime(2024, 3, 20, 9, 0)})["date"] == date(2024, 3, 20)

    @pytest.mark.parametrize("changes", [
        {"category": "errands"},
        {"date": 20240320},
        {"time": 930},
        {"active": 1},
    ])
    def test_bad_values_rejected(self, changes):
        with pytest.raises(ValueError):
            coerce_changes(changes)

    def test_blank_title_rejected(self):
        with pytest.raises(ValidationError, match="Title is required"):
            coerce_changes({"title": " "})
