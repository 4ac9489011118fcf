"""Reminder record, enumerations and the JSON mapping used on disk and in backups."""

import uuid
from dataclasses import dataclass, replace
from datetime import date, datetime, time
from enum import Enum
from typing import Optional

from dateutil.parser import isoparse


class ValidationError(ValueError):
    """Raised at the editing boundary when a reminder is not acceptable."""


class DuplicateReminderError(ValueError):
    """Raised when adding a reminder whose id is already stored."""


class Recurrence(str, Enum):
    """How a reminder repeats after its anchor occurrence."""
    ONCE = "once"
    DAILY = "daily"
    WEEKLY = "weekly"
    MONTHLY = "monthly"

    @classmethod
    def parse(cls, value: str) -> "Recurrence":
        # "none" is the older name for one-shot reminders
        if value == "none":
            return cls.ONCE
        return cls(value)


class Category(str, Enum):
    WORK = "work"
    PERSONAL = "personal"
    HEALTH = "health"
    SHOPPING = "shopping"
    CUSTOM = "custom"


class Priority(str, Enum):
    HIGH = "high"
    MEDIUM = "medium"
    LOW = "low"

    @property
    def weight(self) -> int:
        """Sort weight: high=3, medium=2, low=1."""
        return _PRIORITY_WEIGHTS[self]


_PRIORITY_WEIGHTS = {Priority.HIGH: 3, Priority.MEDIUM: 2, Priority.LOW: 1}


def _parse_timestamp(value: str) -> datetime:
    """Parse an ISO timestamp into a naive local datetime."""
    parsed = isoparse(value)
    if parsed.tzinfo is not None:
        parsed = parsed.astimezone().replace(tzinfo=None)
    return parsed


@dataclass(frozen=True)
class Reminder:
    """A stored reminder.

    The reminder keeps a single anchor occurrence (date + time); later
    occurrences of recurring reminders are computed from it, never stored.
    """
    id: str
    title: str
    date: date
    time: time
    created_at: datetime
    updated_at: datetime
    notification_id: str
    description: str = ""
    recurrence: Recurrence = Recurrence.ONCE
    category: Category = Category.PERSONAL
    priority: Priority = Priority.MEDIUM
    active: bool = True

    @property
    def anchor(self) -> datetime:
        """The anchor occurrence as a naive local datetime."""
        return datetime.combine(self.date, self.time)

    @property
    def is_recurring(self) -> bool:
        return self.recurrence is not Recurrence.ONCE

    def to_dict(self) -> dict:
        """Serialize to the JSON record format (camelCase keys)."""
        return {
            "id": self.id,
            "title": self.title,
            "description": self.description,
            "date": self.date.isoformat(),
            "time": self.time.strftime("%H:%M"),
            "recurrence": self.recurrence.value,
            "category": self.category.value,
            "priority": self.priority.value,
            "active": self.active,
            "createdAt": self.created_at.isoformat(),
            "updatedAt": self.updated_at.isoformat(),
            "notificationId": self.notification_id,
        }

    @classmethod
    def from_dict(cls, data: dict) -> "Reminder":
        """Build a reminder from a JSON record.

        Raises:
            KeyError: if a required field is missing
            ValueError: if a field has an unexpected value
        """
        if not isinstance(data, dict):
            raise ValueError(f"Reminder record must be an object, got {type(data).__name__}")

        return cls(
            id=str(data["id"]),
            title=str(data["title"]),
            description=data.get("description") or "",
            date=date.fromisoformat(data["date"]),
            time=time.fromisoformat(data["time"]).replace(second=0, microsecond=0),
            recurrence=Recurrence.parse(data.get("recurrence", "once")),
            category=Category(data.get("category", "personal")),
            priority=Priority(data.get("priority", "medium")),
            active=bool(data.get("active", True)),
            created_at=_parse_timestamp(data["createdAt"]),
            updated_at=_parse_timestamp(data["updatedAt"]),
            notification_id=str(data["notificationId"]),
        )

    def with_changes(self, **changes) -> "Reminder":
        return replace(self, **changes)


def coerce_changes(changes: dict) -> dict:
    """Convert edited field values to the types a Reminder holds.

    Accepts the enum values and ISO date/time strings used in the JSON
    record, so ``recurrence="monthly"`` becomes ``Recurrence.MONTHLY``.

    Raises:
        ValidationError: if the title is blank
        ValueError: if a value cannot be converted
    """
    coerced = dict(changes)

    if "title" in coerced:
        title = (coerced["title"] or "").strip()
        if not title:
            raise ValidationError("Title is required.")
        coerced["title"] = title
    if "description" in coerced:
        coerced["description"] = (coerced["description"] or "").strip()

    if "date" in coerced:
        value = coerced["date"]
        if isinstance(value, datetime):
            value = value.date()
        elif isinstance(value, str):
            value = date.fromisoformat(value)
        elif not isinstance(value, date):
            raise ValueError(f"Invalid date: {value!r}")
        coerced["date"] = value

    if "time" in coerced:
        value = coerced["time"]
        if isinstance(value, str):
            value = time.fromisoformat(value)
        elif not isinstance(value, time):
            raise ValueError(f"Invalid time: {value!r}")
        coerced["time"] = value.replace(second=0, microsecond=0)

    if "recurrence" in coerced:
        coerced["recurrence"] = Recurrence.parse(coerced["recurrence"])
    if "category" in coerced:
        coerced["category"] = Category(coerced["category"])
    if "priority" in coerced:
        coerced["priority"] = Priority(coerced["priority"])

    if "active" in coerced and not isinstance(coerced["active"], bool):
        raise ValueError(f"Invalid active flag: {coerced['active']!r}")
    if "notification_id" in coerced:
        coerced["notification_id"] = str(coerced["notification_id"])

    return coerced


def new_reminder(
    title: str,
    on_date: date,
    at_time: time,
    *,
    description: Optional[str] = None,
    recurrence: Recurrence = Recurrence.ONCE,
    category: Category = Category.PERSONAL,
    priority: Priority = Priority.MEDIUM,
    now: Optional[datetime] = None,
) -> Reminder:
    """Create a new active reminder with fresh identifiers.

    Raises:
        ValidationError: if the title is blank
    """
    title = (title or "").strip()
    if not title:
        raise ValidationError("Title is required.")

    now = now or datetime.now()
    return Reminder(
        id=str(uuid.uuid4()),
        title=title,
        description=(description or "").strip(),
        date=on_date,
        time=at_time.replace(second=0, microsecond=0),
        recurrence=recurrence,
        category=category,
        priority=priority,
        active=True,
        created_at=now,
        updated_at=now,
        notification_id=str(uuid.uuid4()),
    )
