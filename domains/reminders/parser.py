"""Parse chat messages into new reminders and reminder edits.

Examples:
- "remind me tomorrow at 9am to call the dentist"
- "remind me every month 2024-01-01 09:00 !high #personal Pay rent"
- "remind me friday 6pm #shopping groceries -- milk, eggs"
"""

import re
from dataclasses import dataclass
from datetime import date, datetime, time, timedelta
from typing import Optional

from .models import Category, Priority, Recurrence, Reminder, new_reminder

# Times need minutes or am/pm so that bare numbers in titles are left alone
TIME_PATTERN = r'\b(\d{1,2}[:.]\d{2}\s*(?:am|pm)?|\d{1,2}\s*(?:am|pm))(?!\w)'

ISO_DATE_PATTERN = r'\b(\d{4}-\d{2}-\d{2})\b'

DATE_PATTERN = (
    r'\b(tomorrow|today|monday|tuesday|wednesday|thursday|friday|saturday|sunday'
    r'|\d{1,2}(?:st|nd|rd|th)?\s+(?:jan|feb|mar|apr|may|jun|jul|aug|sep|oct|nov|dec)\w*)\b'
)

RECURRENCE_PATTERN = r'\b(every day|daily|every week|weekly|every month|monthly|once|one-off)\b'
PRIORITY_PATTERN = r'(?<!\S)!(high|medium|low)\b'
CATEGORY_PATTERN = r'(?<!\S)#(work|personal|health|shopping|custom)\b'

_RECURRENCE_WORDS = {
    'once': Recurrence.ONCE,
    'one-off': Recurrence.ONCE,
    'every day': Recurrence.DAILY,
    'daily': Recurrence.DAILY,
    'every week': Recurrence.WEEKLY,
    'weekly': Recurrence.WEEKLY,
    'every month': Recurrence.MONTHLY,
    'monthly': Recurrence.MONTHLY,
}

_MONTHS = {
    'jan': 1, 'feb': 2, 'mar': 3, 'apr': 4, 'may': 5, 'jun': 6,
    'jul': 7, 'aug': 8, 'sep': 9, 'oct': 10, 'nov': 11, 'dec': 12
}

_DAYS = ['monday', 'tuesday', 'wednesday', 'thursday', 'friday', 'saturday', 'sunday']


@dataclass
class ParsedReminder:
    """Fields of a reminder read from a chat message, not yet validated."""
    title: str
    date: date
    time: time
    recurrence: Recurrence = Recurrence.ONCE
    category: Category = Category.PERSONAL
    priority: Priority = Priority.MEDIUM
    description: str = ""

    def to_reminder(self, now: Optional[datetime] = None) -> Reminder:
        """Build the reminder. Raises ValidationError if the title is blank."""
        return new_reminder(
            self.title,
            self.date,
            self.time,
            description=self.description,
            recurrence=self.recurrence,
            category=self.category,
            priority=self.priority,
            now=now,
        )


def is_reminder_request(text: str) -> bool:
    """Quick check if text asks for a new reminder."""
    return bool(re.match(r'\s*(remind me|remind|add reminder|new reminder)\b', text, flags=re.IGNORECASE))


def parse_reminder(text: str, now: Optional[datetime] = None) -> Optional[ParsedReminder]:
    """Parse a reminder request.

    Args:
        text: Chat message text
        now: Current time (defaults to local now)

    Returns:
        ParsedReminder if a time was found, None otherwise. The title may be
        empty; ``to_reminder`` rejects that.
    """
    if not is_reminder_request(text):
        return None

    now = now or datetime.now()
    body, _, description = text.partition(' -- ')

    try:
        fields = _extract(body, now)
    except ValueError:
        return None
    if "time" not in fields:
        return None

    recurrence = fields.get("recurrence", Recurrence.ONCE)
    target_date = fields.get("date", now.date())
    at_time = fields["time"]

    # If a one-shot time has passed today and no date was given, assume tomorrow
    if (
        recurrence is Recurrence.ONCE
        and "date" not in fields
        and datetime.combine(target_date, at_time) <= now
    ):
        target_date += timedelta(days=1)

    return ParsedReminder(
        title=fields.get("title", ""),
        date=target_date,
        time=at_time,
        recurrence=recurrence,
        category=fields.get("category", Category.PERSONAL),
        priority=fields.get("priority", Priority.MEDIUM),
        description=description.strip(),
    )


def parse_edit(text: str, now: Optional[datetime] = None) -> dict:
    """Parse the new values for an existing reminder.

    Uses the same phrasing as a new reminder, e.g.
    "friday 6pm !high call mum -- bring cake". Only what is mentioned
    changes; leftover words become the new title.

    Returns:
        Field changes for ``ReminderStore.update`` (possibly empty)

    Raises:
        ValueError: for an impossible date or time
    """
    now = now or datetime.now()
    body, sep, description = text.partition(' -- ')
    if not sep and body.startswith('-- '):
        body, description, sep = '', body[3:], '--'

    changes = _extract(body, now)
    if sep:
        changes["description"] = description.strip()
    return changes


def _extract(body: str, now: datetime) -> dict:
    """Pull date, time, recurrence, priority, category and title out of text.

    Only fields present in the text are returned.

    Raises:
        ValueError: for an impossible date or time
    """
    fields = {}

    iso_match = re.search(ISO_DATE_PATTERN, body)
    if iso_match:
        fields["date"] = date.fromisoformat(iso_match.group(1))
        body = body[:iso_match.start()] + ' ' + body[iso_match.end():]

    time_match = re.search(TIME_PATTERN, body, flags=re.IGNORECASE)
    if time_match:
        hour, minute = _parse_time(time_match.group(1))
        if hour is None:
            raise ValueError(f"Invalid time: {time_match.group(1)}")
        fields["time"] = time(hour, minute)
        body = body[:time_match.start()] + ' ' + body[time_match.end():]

    recurrence_match = re.search(RECURRENCE_PATTERN, body, flags=re.IGNORECASE)
    if recurrence_match:
        fields["recurrence"] = _RECURRENCE_WORDS[recurrence_match.group(1).lower()]
        body = body[:recurrence_match.start()] + ' ' + body[recurrence_match.end():]

    if "date" not in fields:
        date_match = re.search(DATE_PATTERN, body, flags=re.IGNORECASE)
        if date_match:
            fields["date"] = _parse_date(date_match.group(1), now)
            body = body[:date_match.start()] + ' ' + body[date_match.end():]

    priority_match = re.search(PRIORITY_PATTERN, body, flags=re.IGNORECASE)
    if priority_match:
        fields["priority"] = Priority(priority_match.group(1).lower())
        body = re.sub(PRIORITY_PATTERN, ' ', body, flags=re.IGNORECASE)

    category_match = re.search(CATEGORY_PATTERN, body, flags=re.IGNORECASE)
    if category_match:
        fields["category"] = Category(category_match.group(1).lower())
        body = re.sub(CATEGORY_PATTERN, ' ', body, flags=re.IGNORECASE)

    title = _clean_title(body)
    if title:
        fields["title"] = title
    return fields


def _clean_title(text: str) -> str:
    title = re.sub(r'\s+', ' ', text).strip()
    title = re.sub(
        r'^(?:(?:remind me|remind|add reminder|new reminder|to|at|on|every)\b\s*)+',
        '', title, flags=re.IGNORECASE,
    )
    title = re.sub(r'(?:\s+\b(?:at|on|every))+$', '', title, flags=re.IGNORECASE)
    return title.strip(' .,;:!-')


def _parse_time(time_str: str) -> tuple[Optional[int], int]:
    """Parse time string to (hour, minute).

    Args:
        time_str: Time string like "9am", "9:30pm", "14:00", "8.45"

    Returns:
        Tuple of (hour, minute), or (None, 0) if invalid
    """
    time_str = time_str.lower().strip()

    is_pm = 'pm' in time_str
    is_am = 'am' in time_str
    time_str = re.sub(r'[ap]m', '', time_str).strip()

    try:
        if ':' in time_str or '.' in time_str:
            parts = re.split(r'[:.]', time_str)
            hour = int(parts[0])
            minute = int(parts[1]) if len(parts) > 1 else 0
        else:
            hour = int(time_str)
            minute = 0
    except ValueError:
        return None, 0

    if (is_am or is_pm) and not 1 <= hour <= 12:
        return None, 0

    # Convert 12-hour to 24-hour
    if is_pm and hour < 12:
        hour += 12
    elif is_am and hour == 12:
        hour = 0

    if hour < 0 or hour > 23 or minute < 0 or minute > 59:
        return None, 0

    return hour, minute


def _parse_date(date_str: Optional[str], now: datetime) -> date:
    """Parse a date word relative to now.

    Args:
        date_str: "today", "tomorrow", a day name, or "1st Feb"
        now: Current datetime

    Returns:
        Target date

    Raises:
        ValueError: for impossible dates such as "31 feb"
    """
    today = now.date()
    if not date_str:
        return today

    date_str = date_str.lower().strip()

    if date_str == 'today':
        return today
    if date_str == 'tomorrow':
        return today + timedelta(days=1)

    for i, day in enumerate(_DAYS):
        if date_str == day:
            # Same weekday means today; the time decides whether it has passed
            return today + timedelta(days=(i - today.weekday()) % 7)

    date_match = re.match(r'(\d{1,2})(?:st|nd|rd|th)?\s+(\w{3})', date_str)
    if date_match:
        day = int(date_match.group(1))
        month = _MONTHS[date_match.group(2)[:3]]
        target = date(today.year, month, day)
        # Dates already past this year mean next year
        if target < today:
            target = date(today.year + 1, month, day)
        return target

    return today
