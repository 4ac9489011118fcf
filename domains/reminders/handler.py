"""Chat command handler for the reminders channel."""

import re
from datetime import datetime
from typing import Optional

from logger import logger
from . import config
from .backup import BackupError, run_backup
from .models import Reminder, ValidationError
from .parser import is_reminder_request, parse_edit, parse_reminder
from .projection import FilterStatus, Filters, SORT_LABELS, SortBy, ViewState
from .recurrence import format_relative, next_occurrence
from .settings import THEMES, SettingsService
from .storage import PersistenceError
from .store import ReminderStore

HELP_TEXT = """**Reminder commands**
- `remind me [every day|every week|every month] [tomorrow|friday|1st feb|2024-01-01] at 9am [!high] [#work] <title> [-- description]`
- `reminders` - list reminders
- `reminders filter all|active|paused`
- `reminders sort date-asc|date-desc|priority|created-desc`
- `reminders search <text>` (no text clears the search)
- `edit reminder <id> [once|every day|...] [date] [time] [!priority] [#category] [new title] [-- description]`
- `pause reminder <id>` / `resume reminder <id>` / `delete reminder <id>`
- `reminders theme [light|dark|system]`
- `backup reminders` / `backup url <url>` / `backup status`"""

PRIORITY_MARKERS = {"high": "!!!", "medium": "!!", "low": "!"}


def split_message(text: str, limit: int = config.MAX_MESSAGE_LENGTH) -> list[str]:
    """Split a reply into Discord-sized chunks, preferring line breaks."""
    chunks = []
    current = ""
    for line in text.split("\n"):
        while len(line) > limit:
            if current:
                chunks.append(current)
                current = ""
            chunks.append(line[:limit])
            line = line[limit:]
        candidate = f"{current}\n{line}" if current else line
        if len(candidate) > limit:
            chunks.append(current)
            current = line
        else:
            current = candidate
    if current:
        chunks.append(current)
    return chunks


class RemindersHandler:
    """Routes chat messages to store operations and renders replies.

    Holds the view state (filter, search, sort) for the life of the process.
    """

    def __init__(self, store: ReminderStore, settings: SettingsService):
        self.store = store
        self.settings = settings
        self.view = ViewState()

    async def handle(self, content: str, now: Optional[datetime] = None) -> Optional[str]:
        """Handle a reminders command.

        Returns:
            Reply text, or None if the message is not a reminders command
        """
        now = now or datetime.now()
        text = content.strip()
        lower = text.lower()

        try:
            if lower in ("reminders", "list reminders", "show reminders", "my reminders"):
                return self._render(now)

            if lower in ("reminders help", "help reminders"):
                return HELP_TEXT

            if lower.startswith("reminders filter"):
                return self._set_filter(lower.removeprefix("reminders filter").strip(), now)

            if lower.startswith("reminders sort"):
                return self._set_sort(lower.removeprefix("reminders sort").strip(), now)

            if lower.startswith("reminders search"):
                self.view.search_query = text[len("reminders search"):].strip()
                return self._render(now)

            if lower.startswith("reminders theme"):
                return self._theme(lower.removeprefix("reminders theme").strip())

            match = re.match(r'edit reminder\s+(\S+)\s*(.*)$', text, flags=re.IGNORECASE | re.DOTALL)
            if match:
                return await self._edit(match.group(1), match.group(2), now)

            match = re.match(r'(pause|resume|delete) reminder\s+(\S+)$', lower)
            if match:
                return await self._change(match.group(1), match.group(2))

            if lower in ("backup reminders", "backup now"):
                return await self._backup()

            if lower.startswith("backup url"):
                return self._set_backup_url(text[len("backup url"):].strip())

            if lower == "backup status":
                return self._backup_status()

            if is_reminder_request(text):
                return await self._create(text, now)

        except PersistenceError as e:
            return f"Warning: {e}. The change is kept in memory and will be saved with the next change."

        return None

    # --- listing ---

    def _render(self, now: datetime) -> str:
        items = self.view.apply(self.store.reminders)

        header = f"**Reminders** ({self.view.filters.status.value}, {SORT_LABELS[self.view.sort_by]}"
        if self.view.search_query:
            header += f", matching '{self.view.search_query}'"
        header += ")"

        if not items:
            return f"{header}\n\nNo reminders."

        lines = [header, ""]
        for r in items:
            lines.append(self._format_line(r, now))
        return "\n".join(lines)

    def _format_line(self, r: Reminder, now: datetime) -> str:
        when = format_relative(next_occurrence(r, now), now)
        repeat = "" if not r.is_recurring else f" ({r.recurrence.value})"
        paused = " [paused]" if not r.active else ""
        line = f"- `{r.id[:8]}` {PRIORITY_MARKERS[r.priority.value]} **{r.title}** - {when}{repeat} #{r.category.value}{paused}"
        if r.description:
            line += f"\n  > {r.description}"
        return line

    def _set_filter(self, value: str, now: datetime) -> str:
        try:
            self.view.filters = Filters(FilterStatus(value))
        except ValueError:
            return "Filter must be one of: all, active, paused."
        return self._render(now)

    def _set_sort(self, value: str, now: datetime) -> str:
        try:
            self.view.sort_by = SortBy(value)
        except ValueError:
            return f"Sort must be one of: {', '.join(s.value for s in SortBy)}."
        return self._render(now)

    # --- mutations ---

    async def _create(self, text: str, now: datetime) -> str:
        parsed = parse_reminder(text, now)
        if parsed is None:
            return "I couldn't find a time in that. Try `remind me tomorrow at 9am <title>`."

        try:
            reminder = parsed.to_reminder(now)
        except ValidationError as e:
            return f"Error: {e}"

        await self.store.add(reminder)
        when = format_relative(next_occurrence(reminder, now), now)
        repeat = "" if not reminder.is_recurring else f", repeating {reminder.recurrence.value}"
        return f"**Reminder set for {when}{repeat}**\n\n> {reminder.title}\n`{reminder.id[:8]}`"

    async def _edit(self, id_prefix: str, rest: str, now: datetime) -> str:
        reminder = self.store.find(id_prefix.lower())
        if reminder is None:
            return "Reminder not found. Use `reminders` to see your reminders."

        try:
            changes = parse_edit(rest, now)
        except ValueError:
            return "That date or time doesn't exist."
        if not changes:
            return "Nothing to change. Try `edit reminder <id> friday 6pm <new title>`."

        try:
            updated = await self.store.update(reminder.id, **changes)
        except ValidationError as e:
            return f"Error: {e}"
        if updated is None:
            return "Reminder not found. Use `reminders` to see your reminders."

        return f"**Updated reminder**\n{self._format_line(updated, now)}"

    async def _change(self, action: str, id_prefix: str) -> str:
        reminder = self.store.find(id_prefix)
        if reminder is None:
            return "Reminder not found. Use `reminders` to see your reminders."

        if action == "delete":
            await self.store.delete(reminder.id)
            return f"Deleted reminder: {reminder.title}"

        want_active = action == "resume"
        if reminder.active == want_active:
            return f"Reminder already {'active' if want_active else 'paused'}: {reminder.title}"

        await self.store.toggle_pause(reminder.id)
        return f"{'Resumed' if want_active else 'Paused'} reminder: {reminder.title}"

    # --- settings ---

    def _theme(self, value: str) -> str:
        if not value:
            return f"Theme: {self.settings.theme}"
        try:
            self.settings.theme = value
        except ValueError:
            return f"Theme must be one of: {', '.join(THEMES)}."
        return f"Theme set to {value}."

    # --- backup ---

    async def _backup(self) -> str:
        try:
            message = await run_backup(self.store, self.settings)
        except BackupError as e:
            logger.warning(f"Backup failed: {e}")
            return f"Backup failed: {e}"
        return f"Backup complete: {message}"

    def _set_backup_url(self, url: str) -> str:
        if not url.startswith(("http://", "https://")):
            return "Backup URL must start with http:// or https://"
        self.settings.web_app_url = url
        return "Backup URL saved."

    def _backup_status(self) -> str:
        url = self.settings.web_app_url or "not set"
        last = self.settings.last_backup or "never"
        return (
            f"**Backup**\nURL: {url}\nLast backup: {last}\n"
            f"Secret key: `{self.settings.backup_secret_key}`"
        )
