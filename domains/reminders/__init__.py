"""Reminders domain: recurring reminders delivered to a Discord channel.

Uses APScheduler date triggers with local JSON persistence.
"""

from .models import (
    Reminder,
    Recurrence,
    Category,
    Priority,
    ValidationError,
    DuplicateReminderError,
    new_reminder,
    coerce_changes,
)
from .recurrence import next_occurrence, format_relative
from .notifier import Notifier, DiscordNotifier, Permission
from .scheduler import NotificationScheduler, ScheduleState
from .storage import JsonReminderStorage, PersistenceError
from .store import ReminderStore
from .projection import project, Filters, FilterStatus, SortBy, ViewState
from .settings import SettingsService
from .backup import backup_to_drive, run_backup, BackupError, BackupTransportError, BackupApplicationError
from .parser import parse_reminder, parse_edit, ParsedReminder
from .handler import RemindersHandler

__all__ = [
    "Reminder",
    "Recurrence",
    "Category",
    "Priority",
    "ValidationError",
    "DuplicateReminderError",
    "new_reminder",
    "coerce_changes",
    "next_occurrence",
    "format_relative",
    "Notifier",
    "DiscordNotifier",
    "Permission",
    "NotificationScheduler",
    "ScheduleState",
    "JsonReminderStorage",
    "PersistenceError",
    "ReminderStore",
    "project",
    "Filters",
    "FilterStatus",
    "SortBy",
    "ViewState",
    "SettingsService",
    "backup_to_drive",
    "run_backup",
    "BackupError",
    "BackupTransportError",
    "BackupApplicationError",
    "parse_reminder",
    "parse_edit",
    "ParsedReminder",
    "RemindersHandler",
]
