"""Next-occurrence calculation for recurring reminders.

Everything here is pure: callers pass ``now`` in, nothing reads the clock.
All datetimes are naive local time, the same frame as a reminder's date/time.
"""

from datetime import datetime, timedelta

from dateutil.relativedelta import relativedelta

from .models import Recurrence, Reminder

_FIXED_STEPS = {
    Recurrence.DAILY: timedelta(days=1),
    Recurrence.WEEKLY: timedelta(weeks=1),
}


def next_occurrence(reminder: Reminder, now: datetime) -> datetime:
    """Return the next occurrence of a reminder at or after ``now``.

    One-shot reminders always return their anchor, even when it is in the
    past; the scheduler decides what to do with an overdue anchor. Recurring
    reminders whose anchor has passed are advanced by whole steps until the
    result is >= now.

    Args:
        reminder: The reminder to evaluate
        now: Reference time (naive local)

    Returns:
        The occurrence as a naive local datetime
    """
    anchor = reminder.anchor

    if reminder.recurrence is Recurrence.ONCE or anchor >= now:
        return anchor

    if reminder.recurrence is Recurrence.MONTHLY:
        return _next_monthly(anchor, now)

    step = _FIXED_STEPS[reminder.recurrence]
    # ceil((now - anchor) / step) without floats
    steps = -(-(now - anchor) // step)
    return anchor + steps * step


def _next_monthly(anchor: datetime, now: datetime) -> datetime:
    """Smallest anchor + N calendar months that is >= now.

    Offsets are always taken from the anchor, so a reminder on the 31st lands
    on the last day of shorter months and returns to the 31st afterwards.
    """
    months = (now.year - anchor.year) * 12 + (now.month - anchor.month)
    candidate = anchor + relativedelta(months=months)
    while candidate < now:
        months += 1
        candidate = anchor + relativedelta(months=months)
    return candidate


def format_time(when: datetime) -> str:
    """Format a time like "9:00 AM"."""
    suffix = "AM" if when.hour < 12 else "PM"
    return f"{when.hour % 12 or 12}:{when.minute:02d} {suffix}"


def format_relative(when: datetime, now: datetime) -> str:
    """Format a datetime relative to now, e.g. "tomorrow at 10:00 AM".

    Within a week either side the day is named ("today", "yesterday",
    "Friday", "last Friday"); further out the date is shown as MM/DD/YYYY.
    """
    days = (when.date() - now.date()).days

    if days < -6 or days >= 7:
        day = when.strftime("%m/%d/%Y")
    elif days < -1:
        day = f"last {when.strftime('%A')}"
    elif days == -1:
        day = "yesterday"
    elif days == 0:
        day = "today"
    elif days == 1:
        day = "tomorrow"
    else:
        day = when.strftime("%A")

    return f"{day} at {format_time(when)}"
