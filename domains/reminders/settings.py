"""Persistent key-value settings: theme and backup configuration."""

import json
import uuid
from pathlib import Path
from typing import Any, Optional

from logger import logger
from . import config
from .storage import PersistenceError, write_json_atomic

THEMES = ("light", "dark", "system")

# Keys
THEME = "theme"
WEB_APP_URL = "webAppUrl"
BACKUP_SECRET_KEY = "backupSecretKey"
LAST_BACKUP = "lastBackup"


class SettingsService:
    """Small JSON-file backed settings store.

    Values are read once on construction and written through on every set.
    """

    def __init__(self, path: Optional[Path] = None):
        self.path = Path(path or config.SETTINGS_FILE)
        self._values: dict[str, Any] = self._read()

    def _read(self) -> dict[str, Any]:
        try:
            data = json.loads(self.path.read_text(encoding="utf-8"))
        except FileNotFoundError:
            return {}
        except (OSError, ValueError) as e:
            logger.error(f"Settings file unreadable, using defaults: {e}")
            return {}
        if not isinstance(data, dict):
            logger.error("Settings file is not an object, using defaults")
            return {}
        return data

    def _write(self) -> None:
        try:
            write_json_atomic(self.path, self._values)
        except OSError as e:
            logger.error(f"Could not save settings to {self.path}: {e}")
            raise PersistenceError(f"Could not save your settings: {e}") from e

    def get(self, key: str, default: Any = None) -> Any:
        return self._values.get(key, default)

    def set(self, key: str, value: Any) -> None:
        """Set a value and write all settings.

        The new value is kept in memory even when the write fails.

        Raises:
            PersistenceError: if the settings file could not be written
        """
        if value is None:
            self._values.pop(key, None)
        else:
            self._values[key] = value
        self._write()

    @property
    def theme(self) -> str:
        theme = self.get(THEME)
        return theme if theme in THEMES else config.DEFAULT_THEME

    @theme.setter
    def theme(self, value: str) -> None:
        if value not in THEMES:
            raise ValueError(f"Unknown theme '{value}', expected one of {', '.join(THEMES)}")
        self.set(THEME, value)

    @property
    def web_app_url(self) -> str:
        return self.get(WEB_APP_URL, "")

    @web_app_url.setter
    def web_app_url(self, value: str) -> None:
        self.set(WEB_APP_URL, value.strip())

    @property
    def backup_secret_key(self) -> str:
        """Secret shared with the backup endpoint, generated on first use."""
        key = self.get(BACKUP_SECRET_KEY)
        if not key:
            key = str(uuid.uuid4())
            self.set(BACKUP_SECRET_KEY, key)
            logger.info("Generated new backup secret key")
        return key

    @property
    def last_backup(self) -> Optional[str]:
        return self.get(LAST_BACKUP)

    @last_backup.setter
    def last_backup(self, timestamp: str) -> None:
        self.set(LAST_BACKUP, timestamp)
