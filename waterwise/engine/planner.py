"""Reminder planning - decides when the next reminders should fire.

A plan only ever covers the rest of the current local day. A daily replan
trigger regenerates it the next morning, so nothing here repeats forever.
"""

import logging
from datetime import datetime, timedelta, timezone
from typing import List, Tuple

from dateutil.rrule import MINUTELY, rrule

from waterwise.db.models import GoalStatus, ReminderEntry, ReminderPlan, ReminderSettings
from waterwise.engine.errors import ConfigurationError, StaleAnchorError
from waterwise.utils.constants import MAX_INTERVAL_MINUTES, REPLAN_MIN_HOUR
from waterwise.utils.time_utils import at_hour, end_of_day

logger = logging.getLogger(__name__)


def replan_hour_for(settings: ReminderSettings) -> int:
    """Hour of the daily replan trigger: one hour before the window, not before 06:00."""
    if not 0 <= settings.active_start_hour <= 23:
        return REPLAN_MIN_HOUR
    return max(settings.active_start_hour - 1, REPLAN_MIN_HOUR)


def check_settings(settings: ReminderSettings) -> None:
    """Raise ConfigurationError for settings that cannot produce a plan.

    An inverted active window is not an error here; it just yields no smart
    reminders.
    """
    if not 0 < settings.interval_minutes <= MAX_INTERVAL_MINUTES:
        raise ConfigurationError(
            f"Reminder interval must be between 1 and {MAX_INTERVAL_MINUTES} minutes, "
            f"got {settings.interval_minutes}"
        )
    for hour in (settings.active_start_hour, settings.active_end_hour):
        if not 0 <= hour <= 23:
            raise ConfigurationError(f"Active hour out of range: {hour}")


def _instant(dt: datetime) -> datetime:
    """``dt`` as UTC, so aware times compare and step by elapsed time."""
    if dt.tzinfo is None:
        return dt
    return dt.astimezone(timezone.utc)


def check_anchor(anchor: datetime, now: datetime) -> None:
    """Raise StaleAnchorError if the anchor is in the future."""
    if _instant(anchor) > _instant(now):
        raise StaleAnchorError(f"Last drink at {anchor.isoformat()} is after {now.isoformat()}")


def resolve_anchor(now: datetime, last_drink_at: datetime | None) -> Tuple[datetime, bool]:
    """Pick the time the next reminder is measured from.

    Returns:
        Tuple of (anchor, is_last_drink). Falls back to ``now`` when there
        is no drink or the drink time is unusable.
    """
    if last_drink_at is None:
        return now, False

    if last_drink_at.tzinfo is not None and now.tzinfo is not None:
        last_drink_at = last_drink_at.astimezone(now.tzinfo)

    try:
        check_anchor(last_drink_at, now)
    except StaleAnchorError as e:
        logger.warning(f"Ignoring last drink as anchor: {e}")
        return now, False

    return last_drink_at, True


def first_fire_after(anchor: datetime, now: datetime, interval_minutes: int) -> datetime:
    """First ``anchor + k * interval`` (k >= 1) strictly after ``now``.

    Steps are real elapsed minutes, so a DST change neither skips nor
    repeats a reminder. The result is in ``anchor``'s timezone.
    """
    step = timedelta(minutes=interval_minutes)
    start = _instant(anchor)
    candidate = start + step
    if candidate <= _instant(now):
        steps = (_instant(now) - start) // step + 1
        candidate = start + steps * step
    if anchor.tzinfo is None:
        return candidate
    return candidate.astimezone(anchor.tzinfo)


def series(start: datetime, until: datetime, interval_minutes: int) -> List[datetime]:
    """Every ``interval_minutes`` from ``start`` up to and including ``until``.

    Aware times are generated in UTC and converted back to ``start``'s
    timezone; naive times step by wall clock.
    """
    if _instant(start) > _instant(until):
        return []
    if start.tzinfo is None:
        return list(rrule(MINUTELY, interval=interval_minutes, dtstart=start, until=until))

    times = rrule(
        MINUTELY,
        interval=interval_minutes,
        dtstart=_instant(start),
        until=_instant(until),
    )
    return [t.astimezone(start.tzinfo) for t in times]


def _smart_entries(
    now: datetime,
    settings: ReminderSettings,
    candidate: datetime,
    has_anchor: bool,
) -> List[ReminderEntry]:
    start_hour = settings.active_start_hour
    end_hour = settings.active_end_hour

    if start_hour > end_hour:
        logger.warning(
            f"Active window {start_hour}:00-{end_hour}:59 is empty, no smart reminders today"
        )
        return []

    window_start = at_hour(now, start_hour)
    window_end = at_hour(now, end_hour, 59, 59)

    # Stay in phase with the last drink when it lands inside the window
    in_window = _instant(now) < _instant(candidate) <= _instant(window_end)
    if has_anchor and in_window and start_hour <= candidate.hour:
        first = candidate
    else:
        first = window_start

    return [
        ReminderEntry(fire_at=t, kind="smart-window")
        for t in series(first, window_end, settings.interval_minutes)
        if _instant(t) > _instant(now) and start_hour <= t.hour <= end_hour
    ]


def plan(
    now: datetime,
    settings: ReminderSettings,
    last_drink_at: datetime | None,
    goal_status: GoalStatus,
) -> ReminderPlan:
    """Compute the reminders for the rest of today.

    Args:
        now: Current time; its timezone defines "today"
        settings: Reminder settings
        last_drink_at: Time of the latest drink today, if any
        goal_status: Today's progress

    Returns:
        ReminderPlan with entries ascending by fire time. Entries are empty
        when reminders are off, the goal is met, the settings are invalid or
        nothing is left to schedule today. The replan hour is always set.
    """
    replan_hour = replan_hour_for(settings)
    empty = ReminderPlan(entries=(), replan_hour=replan_hour)

    if not settings.enabled or goal_status.is_complete:
        return empty

    try:
        check_settings(settings)
    except ConfigurationError as e:
        logger.error(f"Not planning reminders: {e}")
        return empty

    anchor, has_anchor = resolve_anchor(now, last_drink_at)
    candidate = first_fire_after(anchor, now, settings.interval_minutes)

    if settings.smart_mode:
        entries = _smart_entries(now, settings, candidate, has_anchor)
    else:
        entries = [
            ReminderEntry(fire_at=t, kind="fixed-interval")
            for t in series(candidate, end_of_day(now), settings.interval_minutes)
            if _instant(t) > _instant(now)
        ]

    # Same-zone aware datetimes compare by wall clock, so order by instant
    unique = {_instant(e.fire_at): e for e in entries}
    ordered = [unique[t] for t in sorted(unique)]
    return ReminderPlan(entries=tuple(ordered), replan_hour=replan_hour)
