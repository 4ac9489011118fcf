"""Local JSON persistence for reminders.

The file holds a JSON array of reminder records. Writes go to a temp file in
the same directory which then replaces the real one, so a crash mid-write
never leaves a half-written file behind.
"""

import asyncio
import json
import os
import tempfile
from pathlib import Path
from typing import Iterable, Optional

from logger import logger
from . import config
from .models import Reminder


class PersistenceError(Exception):
    """Raised when reminders could not be written to disk."""


class JsonReminderStorage:
    """Load and save the whole reminder collection as one JSON document."""

    def __init__(self, path: Optional[Path] = None):
        self.path = Path(path or config.REMINDERS_FILE)

    async def load(self) -> list[Reminder]:
        """Load all reminders.

        A missing file yields an empty list. So does a corrupt one: it is
        logged and removed, and the app starts over with no reminders.
        """
        return await asyncio.to_thread(self._load_sync)

    async def save(self, reminders: Iterable[Reminder]) -> None:
        """Replace the stored collection.

        Raises:
            PersistenceError: if the file could not be written
        """
        records = [r.to_dict() for r in reminders]
        await asyncio.to_thread(self._save_sync, records)

    def _load_sync(self) -> list[Reminder]:
        try:
            raw = self.path.read_text(encoding="utf-8")
        except FileNotFoundError:
            return []
        except OSError as e:
            logger.error(f"Could not read reminders from {self.path}: {e}")
            return []

        if not raw.strip():
            return []

        try:
            records = json.loads(raw)
            if not isinstance(records, list):
                raise ValueError("expected a JSON array")
            return [Reminder.from_dict(record) for record in records]
        except (ValueError, KeyError, TypeError) as e:
            logger.error(f"Reminders data corrupted, starting fresh: {e}")
            self._discard()
            return []

    def _discard(self) -> None:
        try:
            self.path.unlink()
        except FileNotFoundError:
            pass
        except OSError as e:
            logger.warning(f"Could not remove corrupted reminders file {self.path}: {e}")

    def _save_sync(self, records: list[dict]) -> None:
        try:
            write_json_atomic(self.path, records)
        except OSError as e:
            logger.error(f"Could not save reminders to {self.path}: {e}")
            raise PersistenceError(f"Could not save your reminders: {e}") from e


def write_json_atomic(path: Path, data) -> None:
    """Write JSON to a temp file beside ``path``, then rename it over ``path``.

    Raises:
        OSError: if the directory or file could not be written
    """
    path.parent.mkdir(parents=True, exist_ok=True)
    fd, tmp_path = tempfile.mkstemp(prefix=f".{path.name}.", suffix=".tmp", dir=path.parent)
    try:
        with os.fdopen(fd, "w", encoding="utf-8") as f:
            json.dump(data, f, indent=2, ensure_ascii=False)
        os.replace(tmp_path, path)
    except OSError:
        try:
            os.unlink(tmp_path)
        except OSError:
            pass
        raise
