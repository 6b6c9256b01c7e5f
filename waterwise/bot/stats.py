"""Weekly statistics."""

from datetime import datetime
from typing import Iterable

from waterwise.db.models import DaySummary, DrinkRecord, WeekStats
from waterwise.engine.controller import ReminderController
from waterwise.utils.time_utils import local_date, week_dates


def compute_week_stats(
    records: Iterable[DrinkRecord], goal_ml: int, now: datetime
) -> WeekStats:
    """Summarize Sunday to Saturday of ``now``'s week.

    Averages and completion rate are taken over all seven days, including
    days that have not happened yet.
    """
    totals = {day: 0 for day in week_dates(now)}

    for record in records:
        day = local_date(record.occurred_at, now)
        if day in totals:
            totals[day] += record.amount_ml

    days = [
        DaySummary(
            day=day,
            amount_ml=amount,
            percentage=round(min(amount / goal_ml * 100, 100)) if goal_ml > 0 else 0,
            is_today=day == now.date(),
        )
        for day, amount in totals.items()
    ]

    total = sum(d.amount_ml for d in days)
    completed = sum(1 for d in days if d.amount_ml >= goal_ml)

    return WeekStats(
        days=days,
        total_ml=total,
        average_ml=round(total / 7),
        completed_days=completed,
        completion_rate=round(completed / 7 * 100),
    )


async def get_week_stats(controller: ReminderController) -> WeekStats:
    """Load this week's records and summarize them."""
    now = controller.now()
    records = await controller.records.get_week_records(now)
    goal_ml = await controller.settings.get_daily_goal()
    return compute_week_stats(records, goal_ml, now)
