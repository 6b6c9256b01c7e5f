"""Tests for weekly statistics and message formatting."""

import asyncio
from datetime import date, datetime
from zoneinfo import ZoneInfo

from waterwise.bot.formatters import (
    format_drink_logged,
    format_encouragement,
    format_pending_list,
    format_week_stats,
)
from waterwise.bot.stats import compute_week_stats, get_week_stats
from waterwise.db.models import DrinkLogResult, DrinkRecord, GoalStatus, PendingReminder

UTC = ZoneInfo("UTC")


def drink(amount: int, at: datetime) -> DrinkRecord:
    return DrinkRecord(id=str(at.timestamp()), amount_ml=amount, occurred_at=at)


def test_compute_week_stats():
    """Totals, averages and completion over Sunday to Saturday."""
    now = datetime(2026, 3, 4, 20, 0, tzinfo=UTC)  # Wednesday
    records = [
        drink(2000, datetime(2026, 3, 1, 9, 0, tzinfo=UTC)),
        drink(500, datetime(2026, 3, 2, 9, 0, tzinfo=UTC)),
        drink(1000, datetime(2026, 3, 4, 9, 0, tzinfo=UTC)),
        drink(1500, datetime(2026, 3, 4, 15, 0, tzinfo=UTC)),
        drink(9999, datetime(2026, 2, 28, 9, 0, tzinfo=UTC)),  # previous week
    ]

    stats = compute_week_stats(records, 2000, now)

    assert [d.day for d in stats.days][0] == date(2026, 3, 1)
    assert [d.amount_ml for d in stats.days] == [2000, 500, 0, 2500, 0, 0, 0]
    assert [d.percentage for d in stats.days][:4] == [100, 25, 0, 100]
    assert [d.is_today for d in stats.days] == [False, False, False, True, False, False, False]
    assert stats.total_ml == 5000
    assert stats.average_ml == 714
    assert stats.completed_days == 2
    assert stats.completion_rate == 29


def test_get_week_stats(controller, clock):
    """Stats are built from the stores."""
    asyncio.run(controller.log_drink(750))

    stats = asyncio.run(get_week_stats(controller))

    assert stats.total_ml == 750
    assert next(d for d in stats.days if d.is_today).amount_ml == 750


def test_format_week_stats():
    """The overview lists every day and the summary."""
    now = datetime(2026, 3, 4, 20, 0, tzinfo=UTC)
    stats = compute_week_stats([drink(2000, now)], 2000, now)

    text = format_week_stats(stats, 2000)

    assert "Wed 04" in text
    assert "Total: 2000ml" in text
    assert "Goal days: 1/7 (14%)" in text


def test_format_encouragement_brackets():
    """The nudge depends on progress."""
    assert "1800ml to go" in format_encouragement(GoalStatus(200, 2000, False))
    assert "30% done" in format_encouragement(GoalStatus(600, 2000, False))
    assert "halfway" in format_encouragement(GoalStatus(1200, 2000, False))
    assert "200ml left" in format_encouragement(GoalStatus(1800, 2000, False))


def test_format_drink_logged_goal_reached():
    """Crossing the goal is celebrated."""
    now = datetime(2026, 3, 4, 9, 0, tzinfo=UTC)
    result = DrinkLogResult(
        record=drink(2500, now),
        status=GoalStatus(2500, 2000, True),
        goal_just_reached=True,
    )

    text = format_drink_logged(result)

    assert "2500ml" in text
    assert "Congratulations" in text


def test_format_pending_list():
    """Pending reminders are listed with local times."""
    now = datetime(2026, 3, 4, 14, 0, tzinfo=UTC)
    pending = [
        PendingReminder("a", datetime(2026, 3, 4, 15, 0, tzinfo=UTC), "water_reminder"),
        PendingReminder("b", datetime(2026, 3, 5, 6, 0, tzinfo=UTC), "schedule_setup"),
    ]

    text = format_pending_list(pending, now)

    assert "Scheduled (2)" in text
    assert "Reminder: 15:00 (in 1 hour)" in text
    assert "Daily replan: 06:00 (tomorrow)" in text
    assert format_pending_list([], now) == "Nothing is scheduled."
