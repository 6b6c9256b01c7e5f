"""Reminder controller - reacts to events by replanning reminders.

Every trigger runs the same pipeline:
    read settings -> read today's records -> evaluate goal -> plan -> apply

Runs are serialized through one lock, so a trigger that arrives while
another is in flight waits its turn instead of replacing it.
"""

import asyncio
import logging
from dataclasses import replace
from datetime import datetime
from typing import Callable, Tuple
from zoneinfo import ZoneInfo

from waterwise.db.models import (
    DrinkLogResult,
    GoalStatus,
    PendingReminder,
    ReminderPlan,
    ReminderSettings,
    ReminderState,
    Trigger,
)
from waterwise.db.repository import RecordStore, SettingsStore
from waterwise.engine.errors import ConfigurationError, PermissionDeniedError, PortFailure
from waterwise.engine.goal import evaluate, last_drink_at
from waterwise.engine.planner import plan
from waterwise.engine.scheduler import ReminderScheduler
from waterwise.utils.constants import DEFAULT_TIMEZONE

logger = logging.getLogger(__name__)


def state_for(settings: ReminderSettings, status: GoalStatus) -> ReminderState:
    """Where a finished replan leaves the reminder session."""
    if not settings.enabled:
        return "disabled"
    if status.is_complete:
        return "idle"
    return "scheduled"


class ReminderController:
    """Single entry point for everything that can change the reminder plan."""

    def __init__(
        self,
        records: RecordStore,
        settings: SettingsStore,
        scheduler: ReminderScheduler,
        tz: str = DEFAULT_TIMEZONE,
        clock: Callable[[], datetime] | None = None,
    ):
        self.records = records
        self.settings = settings
        self.scheduler = scheduler
        self.tz = tz
        self._clock = clock or (lambda: datetime.now(ZoneInfo(tz)))
        self._lock = asyncio.Lock()
        self.state: ReminderState = "disabled"

    def now(self) -> datetime:
        """Current local time."""
        return self._clock()

    async def handle(self, trigger: Trigger) -> ReminderPlan:
        """Recompute and reinstall the plan for a trigger.

        Raises:
            PortFailure: if reading state or cancelling pending reminders fails;
                the previously pending reminders are left in place
            ConfigurationError: if the stored goal is invalid
        """
        async with self._lock:
            reminder_plan, _ = await self._replan(trigger)
            return reminder_plan

    async def _replan(self, trigger: Trigger) -> Tuple[ReminderPlan, GoalStatus]:
        previous = self.state
        self.state = "planning"

        try:
            now = self.now()
            settings = await self.settings.get_reminder_settings()
            goal_ml = await self.settings.get_daily_goal()
            records = await self.records.get_today_records(now)
            status = evaluate(records, goal_ml, now)
        except (PortFailure, ConfigurationError) as e:
            self.state = previous
            logger.error(f"Replan on {trigger} aborted: {e}")
            raise

        try:
            reminder_plan = plan(now, settings, last_drink_at(records, now), status)
            await self.scheduler.apply(reminder_plan)
        except Exception:
            self.state = previous
            logger.error(f"Replan on {trigger} failed", exc_info=True)
            raise

        self.state = state_for(settings, status)
        logger.info(
            f"Replanned on {trigger}: {len(reminder_plan.entries)} reminders, "
            f"{status.consumed_ml}/{status.goal_ml}ml, state={self.state}"
        )
        return reminder_plan, status

    async def current_status(self) -> GoalStatus:
        """Today's progress toward the goal."""
        now = self.now()
        records = await self.records.get_today_records(now)
        goal_ml = await self.settings.get_daily_goal()
        return evaluate(records, goal_ml, now)

    async def log_drink(self, amount_ml: int, occurred_at: datetime | None = None) -> DrinkLogResult:
        """Record a drink and replan.

        ``goal_just_reached`` is set when this drink moved today's total from
        below the goal to at or above it.
        """
        async with self._lock:
            before = await self.current_status()
            record = await self.records.add_record(amount_ml, occurred_at or self.now())
            _, status = await self._replan("drink-logged")

        return DrinkLogResult(
            record=record,
            status=status,
            goal_just_reached=status.is_complete and not before.is_complete,
        )

    async def update_settings(self, settings: ReminderSettings) -> ReminderPlan:
        """Validate and store new reminder settings, then replan."""
        async with self._lock:
            await self.settings.save_reminder_settings(settings)
            reminder_plan, _ = await self._replan("settings-changed")
            return reminder_plan

    async def set_daily_goal(self, goal_ml: int) -> GoalStatus:
        """Store a new daily goal, then replan."""
        async with self._lock:
            await self.settings.set_daily_goal(goal_ml)
            _, status = await self._replan("settings-changed")
            return status

    async def enable_reminders(self, enabled: bool) -> ReminderPlan:
        """Turn reminders on or off.

        Turning them on first asks the delivery port for permission. A
        denial stores ``enabled=False``, cancels anything pending and is
        reported to the caller once.

        Raises:
            PermissionDeniedError: if the delivery port refuses
        """
        async with self._lock:
            current = await self.settings.get_reminder_settings()

            if enabled and not await self.scheduler.port.request_permission():
                await self.settings.save_reminder_settings(replace(current, enabled=False))
                await self._replan("settings-changed")
                raise PermissionDeniedError("Notifications are not permitted for this chat")

            await self.settings.save_reminder_settings(replace(current, enabled=enabled))
            reminder_plan, _ = await self._replan("settings-changed")
            return reminder_plan

    async def clear_all_data(self) -> None:
        """Delete every record, the goal and the reminder settings."""
        async with self._lock:
            await self.records.clear()
            await self.settings.clear()
            await self._replan("settings-changed")

    async def list_pending(self) -> list[PendingReminder]:
        """Reminders currently pending on the delivery port."""
        return await self.scheduler.list_pending()
