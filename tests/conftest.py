"""Pytest configuration and fixtures."""

import os
import sys
from datetime import date, datetime, time
from unittest.mock import AsyncMock, Mock

import pytest

# Add project root to path
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from domains.reminders.models import Category, Priority, Recurrence, Reminder
from domains.reminders.notifier import Permission

NOW = datetime(2024, 3, 15, 0, 0)


@pytest.fixture
def now():
    """Fixed reference time: Friday 2024-03-15 00:00."""
    return NOW


@pytest.fixture
def make_reminder():
    """Factory for reminders with sensible defaults."""
    counter = {"n": 0}

    def _make(
        title="Pay rent",
        on_date="2024-01-01",
        at_time="09:00",
        recurrence=Recurrence.ONCE,
        priority=Priority.MEDIUM,
        category=Category.PERSONAL,
        active=True,
        description="",
        created_at=datetime(2024, 1, 1, 8, 0),
        **overrides,
    ):
        counter["n"] += 1
        n = counter["n"]
        fields = dict(
            id=f"rem-{n:04d}",
            title=title,
            description=description,
            date=date.fromisoformat(on_date),
            time=time.fromisoformat(at_time),
            recurrence=recurrence,
            category=category,
            priority=priority,
            active=active,
            created_at=created_at,
            updated_at=created_at,
            notification_id=f"notif-{n:04d}",
        )
        fields.update(overrides)
        return Reminder(**fields)

    return _make


@pytest.fixture
def mock_notifier():
    """Notifier that grants permission and records deliveries."""
    notifier = Mock()
    notifier.request_permission = AsyncMock(return_value=Permission.GRANTED)
    notifier.deliver = AsyncMock()
    return notifier


@pytest.fixture
def mock_scheduler():
    """Scheduler double recording schedule/cancel/reschedule calls in order."""
    scheduler = Mock()
    scheduler.calls = []

    async def _schedule(reminder):
        scheduler.calls.append(("schedule", reminder.notification_id))
        return True

    async def _cancel(notification_id):
        scheduler.calls.append(("cancel", notification_id))
        return True

    async def _reschedule(reminder):
        scheduler.calls.append(("reschedule", reminder.notification_id))
        return True

    scheduler.schedule = AsyncMock(side_effect=_schedule)
    scheduler.cancel = AsyncMock(side_effect=_cancel)
    scheduler.reschedule = AsyncMock(side_effect=_reschedule)
    return scheduler
