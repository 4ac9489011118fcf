"""Reminders domain configuration."""

import os

from config import DATA_DIR

# Local persistence
REMINDERS_FILE = DATA_DIR / "reminders.json"
SETTINGS_FILE = DATA_DIR / "settings.json"

# Backup transport
BACKUP_TIMEOUT = float(os.getenv("REMINDERS_BACKUP_TIMEOUT", "30"))

# One-shot reminders whose time has already passed are skipped unless this is set
FIRE_OVERDUE_ONCE = os.getenv("REMINDERS_FIRE_OVERDUE_ONCE", "").lower() in ("1", "true", "yes")

# View defaults (ephemeral, never persisted)
DEFAULT_FILTER_STATUS = "active"
DEFAULT_SORT_BY = "date-asc"

# Settings defaults
DEFAULT_THEME = "system"

# Discord message limit
MAX_MESSAGE_LENGTH = 2000
