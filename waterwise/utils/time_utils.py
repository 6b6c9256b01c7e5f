"""Time and timezone utilities."""

from datetime import date, datetime, time, timedelta
from zoneinfo import ZoneInfo

from dateutil.relativedelta import SU, relativedelta


def to_local(dt: datetime, tz: str) -> datetime:
    """Convert a datetime to the given timezone.

    Naive datetimes are assumed to already be local to ``tz``.
    """
    if dt.tzinfo is None:
        return dt.replace(tzinfo=ZoneInfo(tz))
    return dt.astimezone(ZoneInfo(tz))


def local_date(dt: datetime, reference: datetime) -> date:
    """Calendar day of ``dt`` in ``reference``'s timezone.

    Naive datetimes are taken as already local.
    """
    if dt.tzinfo is not None and reference.tzinfo is not None:
        dt = dt.astimezone(reference.tzinfo)
    return dt.date()


def same_local_day(dt: datetime, reference: datetime) -> bool:
    """Check if ``dt`` falls on the same calendar day as ``reference``."""
    return local_date(dt, reference) == reference.date()


def at_hour(reference: datetime, hour: int, minute: int = 0, second: int = 0) -> datetime:
    """Return ``reference``'s calendar day at the given wall-clock time."""
    return datetime.combine(
        reference.date(), time(hour, minute, second), tzinfo=reference.tzinfo
    )


def end_of_day(reference: datetime) -> datetime:
    """Last whole second of ``reference``'s calendar day."""
    return at_hour(reference, 23, 59, 59)


def start_of_week(reference: datetime) -> datetime:
    """Midnight of the Sunday that starts ``reference``'s week."""
    sunday = reference + relativedelta(weekday=SU(-1))
    return at_hour(sunday, 0)


def week_dates(reference: datetime) -> list[date]:
    """The seven calendar days (Sunday to Saturday) of ``reference``'s week."""
    first = start_of_week(reference).date()
    return [first + timedelta(days=i) for i in range(7)]


def next_daily_occurrence(reference: datetime, hour: int, minute: int = 0) -> datetime:
    """Next time the wall clock reads ``hour:minute``, strictly after ``reference``."""
    candidate = at_hour(reference, hour, minute)
    if candidate <= reference:
        candidate = at_hour(reference + timedelta(days=1), hour, minute)
    return candidate


def format_duration(minutes: int) -> str:
    """Format minutes into a human-readable duration.

    Examples:
        30 -> "30 minutes"
        60 -> "1 hour"
        90 -> "1.5 hours"
    """
    if minutes < 60:
        return f"{minutes} minute{'s' if minutes != 1 else ''}"
    hours = minutes / 60
    if hours == int(hours):
        return f"{int(hours)} hour{'s' if hours != 1 else ''}"
    return f"{hours:.1f} hours"


def format_relative_time(dt: datetime, now: datetime) -> str:
    """Format a future datetime relative to now.

    Examples:
        "in 5 minutes"
        "in 2 hours"
        "tomorrow"
    """
    total_seconds = (dt - now).total_seconds()

    if total_seconds < 60:
        return "now"
    if total_seconds < 3600:
        minutes = int(total_seconds / 60)
        return f"in {minutes} minute{'s' if minutes != 1 else ''}"
    if dt.date() == now.date():
        hours = int(total_seconds / 3600)
        return f"in {hours} hour{'s' if hours != 1 else ''}"
    if dt.date() == now.date() + timedelta(days=1):
        return "tomorrow"
    days = (dt.date() - now.date()).days
    return f"in {days} days"
