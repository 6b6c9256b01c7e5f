"""Tests for reminder planning."""

from datetime import datetime, timedelta
from zoneinfo import ZoneInfo

from waterwise.db.models import GoalStatus, ReminderSettings
from waterwise.engine.planner import first_fire_after, plan, replan_hour_for

UTC = ZoneInfo("UTC")

NOT_DONE = GoalStatus(consumed_ml=500, goal_ml=2000, is_complete=False)
DONE = GoalStatus(consumed_ml=2500, goal_ml=2000, is_complete=True)


def settings(**overrides) -> ReminderSettings:
    values = {
        "enabled": True,
        "interval_minutes": 60,
        "smart_mode": False,
        "active_start_hour": 7,
        "active_end_hour": 22,
    }
    values.update(overrides)
    return ReminderSettings(**values)


def at(hour: int, minute: int = 0, day: int = 4) -> datetime:
    return datetime(2026, 3, day, hour, minute, tzinfo=UTC)


def test_first_reminder_follows_last_drink():
    """60 min interval, drink 30 min ago: first reminder in 30 min."""
    now = at(14, 10)

    result = plan(now, settings(), now - timedelta(minutes=30), NOT_DONE)

    assert result.entries[0].fire_at == now + timedelta(minutes=30)
    assert all(e.kind == "fixed-interval" for e in result.entries)


def test_fixed_interval_covers_rest_of_day():
    """Interval 30, drink at 14:00, now 14:10: 14:30, 15:00 ... 23:30."""
    result = plan(at(14, 10), settings(interval_minutes=30), at(14, 0), NOT_DONE)

    times = [e.fire_at for e in result.entries]
    assert times[0] == at(14, 30)
    assert times[-1] == at(23, 30)
    assert len(times) == 19
    assert all(b - a == timedelta(minutes=30) for a, b in zip(times, times[1:]))


def test_no_drink_anchors_on_now():
    """Without a drink today the first reminder is one interval from now."""
    result = plan(at(14, 10), settings(), None, NOT_DONE)

    assert result.entries[0].fire_at == at(15, 10)
    assert result.entries[-1].fire_at == at(23, 10)


def test_old_anchor_steps_forward_in_phase():
    """A drink hours ago keeps its phase: 09:00 drink, now 14:10 -> 15:00."""
    result = plan(at(14, 10), settings(), at(9, 0), NOT_DONE)

    assert result.entries[0].fire_at == at(15, 0)


def test_first_fire_is_strictly_after_now():
    """An anchor exactly one interval back must not fire at now."""
    now = at(14, 0)

    assert first_fire_after(at(13, 0), now, 60) == at(15, 0)
    assert first_fire_after(now, now, 45) == at(14, 45)


def test_future_anchor_falls_back_to_now():
    """A drink timestamped in the future (clock skew) is ignored."""
    result = plan(at(14, 10), settings(), at(15, 0), NOT_DONE)

    assert result.entries[0].fire_at == at(15, 10)


def test_nothing_after_midnight():
    """Fixed-interval plans stop at the end of the local day."""
    result = plan(at(23, 50), settings(), None, NOT_DONE)

    assert result.entries == ()
    assert result.replan_at(at(23, 50)) == at(6, 0, day=5)


def test_smart_mode_outside_window():
    """Smart 07-22 at 23:00: nothing today, replan tomorrow at 06:00."""
    now = at(23, 0)

    result = plan(now, settings(smart_mode=True), None, NOT_DONE)

    assert result.entries == ()
    assert result.replan_hour == 6
    assert result.replan_at(now) == at(6, 0, day=5)


def test_smart_mode_grid_from_window_start():
    """No drink today: reminders sit on the hour grid from 07:00."""
    result = plan(at(10, 20), settings(smart_mode=True), None, NOT_DONE)

    times = [e.fire_at for e in result.entries]
    assert times[0] == at(11, 0)
    assert times[-1] == at(22, 0)
    assert len(times) == 12
    assert all(e.kind == "smart-window" for e in result.entries)


def test_smart_mode_before_window():
    """Early morning: the whole window is planned."""
    result = plan(at(5, 0), settings(smart_mode=True), None, NOT_DONE)

    times = [e.fire_at for e in result.entries]
    assert times[0] == at(7, 0)
    assert times[-1] == at(22, 0)
    assert len(times) == 16


def test_smart_mode_follows_last_drink():
    """A drink inside the window shifts the series to its phase."""
    result = plan(at(10, 20), settings(smart_mode=True), at(10, 15), NOT_DONE)

    times = [e.fire_at for e in result.entries]
    assert times[0] == at(11, 15)
    assert times[-1] == at(22, 15)
    assert all(7 <= t.hour <= 22 for t in times)


def test_smart_mode_partial_last_slot():
    """90 min interval in a 07:00-09:59 window: 07:00 and 08:30 only."""
    result = plan(
        at(6, 0),
        settings(smart_mode=True, interval_minutes=90, active_start_hour=7, active_end_hour=9),
        None,
        NOT_DONE,
    )

    assert [e.fire_at for e in result.entries] == [at(7, 0), at(8, 30)]


def test_smart_mode_inverted_window_is_empty():
    """Start after end means no smart reminders, not an error."""
    result = plan(
        at(10, 0),
        settings(smart_mode=True, active_start_hour=22, active_end_hour=7),
        None,
        NOT_DONE,
    )

    assert result.entries == ()


def test_goal_complete_plans_nothing():
    """A met goal empties the plan whatever the settings."""
    for smart in (False, True):
        result = plan(at(10, 0), settings(smart_mode=smart), at(9, 30), DONE)
        assert result.entries == ()
        assert result.replan_hour == 6


def test_disabled_plans_nothing():
    """Reminders off: empty plan."""
    assert plan(at(10, 0), settings(enabled=False), None, NOT_DONE).is_empty


def test_invalid_settings_plan_nothing():
    """Bad interval or hours are logged and produce an empty plan."""
    assert plan(at(10, 0), settings(interval_minutes=0), None, NOT_DONE).is_empty
    assert plan(at(10, 0), settings(interval_minutes=-30), None, NOT_DONE).is_empty
    assert plan(at(10, 0), settings(active_end_hour=25), None, NOT_DONE).is_empty


def test_replan_hour():
    """One hour before the window, never before 06:00."""
    assert replan_hour_for(settings(active_start_hour=9)) == 8
    assert replan_hour_for(settings(active_start_hour=7)) == 6
    assert replan_hour_for(settings(active_start_hour=3)) == 6
    assert replan_hour_for(settings(active_start_hour=30)) == 6


def test_entries_are_ascending():
    """Plans are strictly ordered by fire time."""
    for smart in (False, True):
        result = plan(at(8, 5), settings(smart_mode=smart, interval_minutes=45), at(7, 50), NOT_DONE)
        times = [e.fire_at for e in result.entries]
        assert times == sorted(set(times))
        assert all(t > at(8, 5) for t in times)


def test_local_timezone_defines_today():
    """The day boundary is the one of now's timezone."""
    new_york = ZoneInfo("America/New_York")
    now = datetime(2026, 3, 4, 21, 30, tzinfo=new_york)

    result = plan(now, settings(), None, NOT_DONE)

    assert [e.fire_at for e in result.entries] == [
        datetime(2026, 3, 4, 22, 30, tzinfo=new_york),
        datetime(2026, 3, 4, 23, 30, tzinfo=new_york),
    ]


def test_oversized_interval_plans_nothing():
    """Intervals beyond one day are refused instead of overflowing."""
    assert plan(at(10, 0), settings(interval_minutes=1441), None, NOT_DONE).is_empty
    assert plan(at(10, 0), settings(interval_minutes=10**12), at(9, 0), NOT_DONE).is_empty


def test_spring_forward_has_no_duplicates():
    """Berlin skips 02:00-03:00 on 2026-03-29: reminders stay one hour apart."""
    berlin = ZoneInfo("Europe/Berlin")
    now = datetime(2026, 3, 29, 1, 10, tzinfo=berlin)

    result = plan(now, settings(), datetime(2026, 3, 29, 1, 0, tzinfo=berlin), NOT_DONE)

    stamps = [e.fire_at.timestamp() for e in result.entries]
    assert result.entries[0].fire_at == datetime(2026, 3, 29, 3, 0, tzinfo=berlin)
    assert result.entries[0].fire_at.utcoffset() == timedelta(hours=2)
    assert all(b - a == 3600 for a, b in zip(stamps, stamps[1:]))
    assert len(stamps) == 21


def test_fall_back_keeps_both_two_oclocks():
    """Berlin repeats 02:00-03:00 on 2026-10-25: both 02:00 reminders are kept."""
    berlin = ZoneInfo("Europe/Berlin")
    now = datetime(2026, 10, 25, 1, 10, tzinfo=berlin)

    result = plan(now, settings(), datetime(2026, 10, 25, 1, 0, tzinfo=berlin), NOT_DONE)

    stamps = [e.fire_at.timestamp() for e in result.entries]
    assert [e.fire_at.hour for e in result.entries[:3]] == [2, 2, 3]
    assert all(b - a == 3600 for a, b in zip(stamps, stamps[1:]))
    assert len(stamps) == 23
