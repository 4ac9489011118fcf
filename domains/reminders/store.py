"""The in-memory reminder collection and its mutations.

The store is the single owner of the collection. Each mutation builds a new
tuple, publishes it, then saves it and updates the scheduler, in that order.
Mutations are serialised so each one sees the result of the previous one.
"""

import asyncio
from dataclasses import fields
from datetime import datetime
from typing import Callable, Optional

from logger import logger
from .models import DuplicateReminderError, Reminder, coerce_changes
from .scheduler import NotificationScheduler
from .storage import JsonReminderStorage, PersistenceError

_MUTABLE_FIELDS = {f.name for f in fields(Reminder)} - {"id", "created_at", "updated_at"}


class ReminderStore:
    """Authoritative reminder collection with persistence and scheduling effects.

    A failed save is re-raised as PersistenceError, but only after the new
    collection has been published and the scheduler updated; memory is not
    rolled back and the next successful save catches the file up.
    """

    def __init__(
        self,
        storage: JsonReminderStorage,
        scheduler: NotificationScheduler,
        clock: Optional[Callable[[], datetime]] = None,
    ):
        self.storage = storage
        self.scheduler = scheduler
        self._clock = clock or datetime.now
        self._reminders: tuple[Reminder, ...] = ()
        self._lock = asyncio.Lock()

    @property
    def reminders(self) -> tuple[Reminder, ...]:
        """Current snapshot of the collection."""
        return self._reminders

    def get(self, reminder_id: str) -> Optional[Reminder]:
        for r in self._reminders:
            if r.id == reminder_id:
                return r
        return None

    def find(self, id_prefix: str) -> Optional[Reminder]:
        """Find a reminder by id or unique id prefix."""
        id_prefix = id_prefix.strip()
        if not id_prefix:
            return None
        exact = self.get(id_prefix)
        if exact is not None:
            return exact
        matches = [r for r in self._reminders if r.id.startswith(id_prefix)]
        return matches[0] if len(matches) == 1 else None

    async def load(self) -> tuple[Reminder, ...]:
        """Replace the collection with what is stored. Does not schedule."""
        async with self._lock:
            loaded = await self.storage.load()
            self._reminders = tuple(loaded)
        logger.info(f"Loaded {len(self._reminders)} reminders")
        return self._reminders

    async def add(self, reminder: Reminder) -> None:
        """Add a new reminder and schedule it.

        Raises:
            DuplicateReminderError: if the id is already stored
            PersistenceError: if the collection could not be saved
        """
        async with self._lock:
            if self.get(reminder.id) is not None:
                raise DuplicateReminderError(f"Reminder {reminder.id} already exists")

            self._reminders = self._reminders + (reminder,)
            error = await self._save()
            await self.scheduler.schedule(reminder)

        logger.info(f"Added reminder {reminder.id}: '{reminder.title}'")
        if error:
            raise error

    async def update(self, reminder_id: str, **changes) -> Optional[Reminder]:
        """Merge changes into a reminder and reschedule it.

        Unknown ids are ignored (the reminder may have just been deleted).
        Values are converted to reminder types before anything is published,
        so a bad value leaves the collection untouched.

        Returns:
            The updated reminder, or None if the id is unknown

        Raises:
            ValidationError: if the title is blank
            ValueError: if a value cannot be converted
            TypeError: if a field is unknown
        """
        immutable = {"id", "created_at"} & changes.keys()
        if immutable:
            raise ValueError(f"Cannot change {', '.join(sorted(immutable))} of a reminder")
        changes.pop("updated_at", None)
        unknown = changes.keys() - _MUTABLE_FIELDS
        if unknown:
            raise TypeError(f"Unknown reminder fields: {', '.join(sorted(unknown))}")
        changes = coerce_changes(changes)

        async with self._lock:
            current = self.get(reminder_id)
            if current is None:
                logger.debug(f"Update ignored, reminder {reminder_id} not found")
                return None

            updated = current.with_changes(**changes, updated_at=self._stamp(current))
            self._replace(updated)
            error = await self._save()
            if updated.active:
                await self.scheduler.reschedule(updated)
            else:
                await self.scheduler.cancel(updated.notification_id)

        logger.info(f"Updated reminder {reminder_id}: {', '.join(sorted(changes)) or 'no fields'}")
        if error:
            raise error
        return updated

    async def delete(self, reminder_id: str) -> Optional[Reminder]:
        """Remove a reminder and cancel its notification.

        Returns:
            The removed reminder, or None if the id is unknown
        """
        async with self._lock:
            removed = self.get(reminder_id)
            if removed is None:
                logger.debug(f"Delete ignored, reminder {reminder_id} not found")
                return None

            self._reminders = tuple(r for r in self._reminders if r.id != reminder_id)
            error = await self._save()
            await self.scheduler.cancel(removed.notification_id)

        logger.info(f"Deleted reminder {reminder_id}: '{removed.title}'")
        if error:
            raise error
        return removed

    async def toggle_pause(self, reminder_id: str) -> Optional[Reminder]:
        """Flip a reminder between active and paused.

        Returns:
            The updated reminder, or None if the id is unknown
        """
        async with self._lock:
            current = self.get(reminder_id)
            if current is None:
                logger.debug(f"Toggle ignored, reminder {reminder_id} not found")
                return None

            updated = current.with_changes(active=not current.active, updated_at=self._stamp(current))
            self._replace(updated)
            error = await self._save()
            if updated.active:
                await self.scheduler.schedule(updated)
            else:
                await self.scheduler.cancel(updated.notification_id)

        logger.info(f"{'Resumed' if updated.active else 'Paused'} reminder {reminder_id}")
        if error:
            raise error
        return updated

    # --- internals (lock held) ---

    def _stamp(self, current: Reminder) -> datetime:
        return max(self._clock(), current.created_at)

    def _replace(self, updated: Reminder) -> None:
        self._reminders = tuple(updated if r.id == updated.id else r for r in self._reminders)

    async def _save(self) -> Optional[PersistenceError]:
        try:
            await self.storage.save(self._reminders)
        except PersistenceError as e:
            logger.warning(f"Reminders not saved, in-memory state kept: {e}")
            return e
        return None
