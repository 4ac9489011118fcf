"""Arm reminder notifications as APScheduler date jobs.

Each reminder has at most one live job, keyed by its ``notification_id``.
Per id the lifecycle is::

    UNSCHEDULED -> SCHEDULED -> FIRED -> SCHEDULED (recurring) | done
                        \\-> CANCELLED

A recurring reminder is re-armed by the scheduler after its notification has
been delivered, not by the job re-submitting itself. Every armed task carries
a token; a job whose token no longer matches the registry (because it was
cancelled or replaced) does nothing when it fires.
"""

import asyncio
import itertools
from dataclasses import dataclass
from datetime import datetime, timedelta
from enum import Enum
from typing import Callable, Iterable, Optional

from apscheduler.jobstores.base import JobLookupError
from apscheduler.schedulers.asyncio import AsyncIOScheduler
from apscheduler.triggers.date import DateTrigger

from logger import logger
from . import config
from .models import Reminder
from .notifier import Notifier, Permission
from .recurrence import next_occurrence


class ScheduleState(str, Enum):
    UNSCHEDULED = "unscheduled"
    SCHEDULED = "scheduled"
    FIRED = "fired"
    CANCELLED = "cancelled"


@dataclass
class _Task:
    """A single armed occurrence."""
    reminder: Reminder
    run_at: datetime
    token: int


class NotificationScheduler:
    """Owns the notification jobs for all reminders.

    Args:
        notifier: Delivery collaborator
        scheduler: APScheduler instance (a new AsyncIOScheduler by default)
        clock: Returns the current naive local time
        fire_overdue: Fire one-shot reminders whose time already passed
            instead of skipping them (defaults to config.FIRE_OVERDUE_ONCE)
    """

    def __init__(
        self,
        notifier: Notifier,
        scheduler: Optional[AsyncIOScheduler] = None,
        clock: Optional[Callable[[], datetime]] = None,
        fire_overdue: Optional[bool] = None,
    ):
        self.notifier = notifier
        self.scheduler = scheduler or AsyncIOScheduler()
        self.fire_overdue = config.FIRE_OVERDUE_ONCE if fire_overdue is None else fire_overdue
        self.permission = Permission.DEFAULT
        self._clock = clock or datetime.now
        self._tasks: dict[str, _Task] = {}
        self._states: dict[str, ScheduleState] = {}
        self._tokens = itertools.count(1)
        self._lock = asyncio.Lock()

    # --- lifecycle ---

    def start(self) -> None:
        if not self.scheduler.running:
            self.scheduler.start()
            logger.info("Reminder scheduler started")

    def shutdown(self) -> None:
        if self.scheduler.running:
            self.scheduler.shutdown(wait=False)
            logger.info("Reminder scheduler stopped")

    async def initialize(self) -> Permission:
        """Ask the notifier for delivery permission."""
        self.permission = await self._request_permission()
        logger.info(f"Notification permission: {self.permission.value}")
        return self.permission

    async def _request_permission(self) -> Permission:
        try:
            return await self.notifier.request_permission()
        except Exception as e:
            logger.error(f"Notification permission request failed: {e}")
            return Permission.DEFAULT

    async def _has_permission(self) -> bool:
        if self.permission is Permission.DEFAULT:
            self.permission = await self._request_permission()
        return self.permission is Permission.GRANTED

    # --- public operations ---

    async def schedule(self, reminder: Reminder) -> bool:
        """Arm the next occurrence of a reminder.

        Returns:
            True if a job is now armed for the reminder
        """
        async with self._lock:
            return await self._schedule_locked(reminder)

    async def cancel(self, notification_id: str) -> bool:
        """Cancel the pending job for a notification id.

        Unknown or already fired ids are ignored.

        Returns:
            True if a pending task was cancelled
        """
        async with self._lock:
            cancelled = self._cancel_locked(notification_id)
        if cancelled:
            logger.info(f"Cancelled notification {notification_id}")
        return cancelled

    async def reschedule(self, reminder: Reminder) -> bool:
        """Cancel then schedule, as one step."""
        async with self._lock:
            self._cancel_locked(reminder.notification_id)
            return await self._schedule_locked(reminder)

    async def schedule_all(self, reminders: Iterable[Reminder]) -> int:
        """Arm every active reminder. Used once at startup.

        Returns:
            Count of reminders armed
        """
        active = [r for r in reminders if r.active]
        logger.info(f"Scheduling {len(active)} active reminders")

        armed = 0
        for reminder in active:
            if await self.schedule(reminder):
                armed += 1
        return armed

    # --- introspection ---

    def state_of(self, notification_id: str) -> ScheduleState:
        return self._states.get(notification_id, ScheduleState.UNSCHEDULED)

    def next_run(self, notification_id: str) -> Optional[datetime]:
        task = self._tasks.get(notification_id)
        if task is None or self.state_of(notification_id) is not ScheduleState.SCHEDULED:
            return None
        return task.run_at

    def scheduled_ids(self) -> list[str]:
        return sorted(
            nid for nid in self._tasks
            if self._states.get(nid) is ScheduleState.SCHEDULED
        )

    # --- internals (lock held) ---

    async def _schedule_locked(self, reminder: Reminder, not_before: Optional[datetime] = None) -> bool:
        if not reminder.active:
            return False

        if not await self._has_permission():
            logger.warning(f"Notification permission not granted, not scheduling '{reminder.title}'")
            return False

        nid = reminder.notification_id
        self._cancel_locked(nid)

        now = self._clock()
        reference = now if not_before is None else max(now, not_before)
        run_at = next_occurrence(reminder, reference)

        if run_at < now:
            # Only one-shot reminders can be overdue here
            if not self.fire_overdue:
                logger.info(f"Skipping past reminder '{reminder.title}': was due {run_at}")
                return False
            logger.info(f"Firing overdue reminder '{reminder.title}' (was due {run_at})")
            run_at = now

        token = next(self._tokens)
        self._tasks[nid] = _Task(reminder=reminder, run_at=run_at, token=token)
        self._states[nid] = ScheduleState.SCHEDULED

        self.scheduler.add_job(
            self._fire,
            trigger=DateTrigger(run_date=run_at),
            args=[nid, token],
            id=nid,
            name=f"reminder:{reminder.title[:30]}",
            replace_existing=True,
            misfire_grace_time=None,
            coalesce=True,
        )
        logger.info(f"Scheduled '{reminder.title}' for {run_at}")
        return True

    def _cancel_locked(self, notification_id: str) -> bool:
        try:
            self.scheduler.remove_job(notification_id)
        except JobLookupError:
            pass

        task = self._tasks.pop(notification_id, None)
        if task is None:
            return False
        self._states[notification_id] = ScheduleState.CANCELLED
        return True

    # --- job callback ---

    async def _fire(self, notification_id: str, token: int) -> None:
        """Deliver one occurrence, then re-arm recurring reminders.

        Called by APScheduler when a job's run date arrives.
        """
        async with self._lock:
            task = self._tasks.get(notification_id)
            if task is None or task.token != token:
                logger.debug(f"Ignoring stale job for notification {notification_id}")
                return
            self._states[notification_id] = ScheduleState.FIRED
            if not task.reminder.is_recurring:
                del self._tasks[notification_id]

        reminder = task.reminder
        try:
            await self.notifier.deliver(reminder.title, reminder.description, notification_id)
            logger.info(f"Fired reminder {reminder.id}: {reminder.title}")
        except Exception as e:
            logger.error(f"Failed to deliver reminder {reminder.id}: {e}")

        if not reminder.is_recurring:
            return

        async with self._lock:
            # Cancelled or replaced while the notification was being delivered
            if self._tasks.get(notification_id) is not task:
                return
            if self._states.get(notification_id) is not ScheduleState.FIRED:
                return
            del self._tasks[notification_id]
            logger.info(f"Re-arming recurring reminder '{reminder.title}'")
            await self._schedule_locked(reminder, not_before=task.run_at + timedelta(seconds=1))
