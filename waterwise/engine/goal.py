"""Daily goal evaluation."""

from datetime import datetime
from typing import Iterable

from waterwise.db.models import DrinkRecord, GoalStatus
from waterwise.engine.errors import ConfigurationError
from waterwise.utils.time_utils import same_local_day


def evaluate(records: Iterable[DrinkRecord], goal_ml: int, as_of: datetime) -> GoalStatus:
    """Measure ``as_of``'s local-day intake against the goal.

    Records are compared in ``as_of``'s timezone; anything logged on another
    calendar day is ignored.

    Raises:
        ConfigurationError: if ``goal_ml`` is not positive
    """
    if goal_ml <= 0:
        raise ConfigurationError(f"Daily goal must be positive, got {goal_ml}")

    consumed = sum(r.amount_ml for r in records if same_local_day(r.occurred_at, as_of))

    return GoalStatus(consumed_ml=consumed, goal_ml=goal_ml, is_complete=consumed >= goal_ml)


def last_drink_at(records: Iterable[DrinkRecord], as_of: datetime) -> datetime | None:
    """Latest drink on ``as_of``'s local day, or None."""
    today = [r.occurred_at for r in records if same_local_day(r.occurred_at, as_of)]
    return max(today) if today else None
