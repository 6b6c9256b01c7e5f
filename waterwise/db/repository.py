"""Record and settings stores on top of the key-value persistence port."""

import logging
import secrets
from datetime import date, datetime
from typing import List

from waterwise.db.models import DrinkRecord, ReminderSettings
from waterwise.engine.errors import ConfigurationError, PortFailure
from waterwise.engine.ports import KeyValueStore
from waterwise.utils.constants import (
    DEFAULT_DAILY_GOAL,
    DEFAULT_REMINDER_SETTINGS,
    MAX_DAILY_GOAL_ML,
    MAX_DRINK_ML,
    MAX_INTERVAL_MINUTES,
    QUICK_ADD_OPTIONS,
    STORAGE_KEYS,
    QuickAddOption,
)
from waterwise.utils.time_utils import local_date, same_local_day, to_local, week_dates

logger = logging.getLogger(__name__)


def validate_reminder_settings(settings: ReminderSettings) -> None:
    """Raise ConfigurationError for settings the planner cannot honour."""
    if not 0 < settings.interval_minutes <= MAX_INTERVAL_MINUTES:
        raise ConfigurationError(
            f"Reminder interval must be between 1 and {MAX_INTERVAL_MINUTES} minutes, "
            f"got {settings.interval_minutes}"
        )
    for name in ("active_start_hour", "active_end_hour"):
        hour = getattr(settings, name)
        if not 0 <= hour <= 23:
            raise ConfigurationError(f"{name} must be between 0 and 23, got {hour}")
    if settings.active_start_hour > settings.active_end_hour:
        raise ConfigurationError(
            f"Active hours start ({settings.active_start_hour}) "
            f"is after end ({settings.active_end_hour})"
        )


class RecordStore:
    """Append-only drink log."""

    def __init__(self, kv: KeyValueStore):
        self.kv = kv

    async def get_records(self) -> List[DrinkRecord]:
        """Get every stored record, oldest first."""
        raw = await self.kv.get(STORAGE_KEYS["water_records"]) or []
        try:
            return [DrinkRecord.from_dict(item) for item in raw]
        except (KeyError, TypeError, ValueError) as e:
            raise PortFailure(f"Malformed drink record in storage: {e}") from e

    async def add_record(self, amount_ml: int, occurred_at: datetime) -> DrinkRecord:
        """Append a new drink record."""
        if amount_ml <= 0 or amount_ml > MAX_DRINK_ML:
            raise ConfigurationError(
                f"Drink amount must be between 1 and {MAX_DRINK_ML} ml, got {amount_ml}"
            )

        record = DrinkRecord(
            id=f"{int(occurred_at.timestamp() * 1000)}-{secrets.token_hex(3)}",
            amount_ml=amount_ml,
            occurred_at=occurred_at,
        )

        existing = await self.kv.get(STORAGE_KEYS["water_records"]) or []
        existing.append(record.to_dict())
        await self.kv.set(STORAGE_KEYS["water_records"], existing)

        logger.info(f"Logged {amount_ml}ml at {occurred_at.isoformat()}")
        return record

    async def get_records_for_date(self, day: date, tz: str) -> List[DrinkRecord]:
        """Get records whose local calendar day (in ``tz``) is ``day``."""
        records = await self.get_records()
        return [r for r in records if to_local(r.occurred_at, tz).date() == day]

    async def get_today_records(self, now: datetime) -> List[DrinkRecord]:
        """Get records on the same local day as ``now``."""
        records = await self.get_records()
        return [r for r in records if same_local_day(r.occurred_at, now)]

    async def get_week_records(self, now: datetime) -> List[DrinkRecord]:
        """Get records from Sunday to Saturday of ``now``'s week, in its timezone."""
        days = set(week_dates(now))
        records = await self.get_records()
        return [r for r in records if local_date(r.occurred_at, now) in days]

    async def clear(self) -> None:
        """Delete all records."""
        await self.kv.remove(STORAGE_KEYS["water_records"])
        logger.info("Drink records cleared")


class SettingsStore:
    """Daily goal, reminder settings and quick-add options.

    Defaults are applied here and nowhere else.
    """

    def __init__(self, kv: KeyValueStore):
        self.kv = kv

    # Goal

    async def get_daily_goal(self) -> int:
        """Get the daily goal in ml."""
        goal = await self.kv.get(STORAGE_KEYS["daily_goal"])
        if goal is None:
            return DEFAULT_DAILY_GOAL
        try:
            return int(goal)
        except (TypeError, ValueError) as e:
            raise PortFailure(f"Malformed daily goal in storage: {goal!r}") from e

    async def set_daily_goal(self, goal_ml: int) -> None:
        """Store a new daily goal."""
        if goal_ml <= 0 or goal_ml > MAX_DAILY_GOAL_ML:
            raise ConfigurationError(
                f"Daily goal must be between 1 and {MAX_DAILY_GOAL_ML} ml, got {goal_ml}"
            )
        await self.kv.set(STORAGE_KEYS["daily_goal"], goal_ml)

    # Reminder settings

    async def get_reminder_settings(self) -> ReminderSettings:
        """Get reminder settings, filling missing fields from the defaults."""
        stored = await self.kv.get(STORAGE_KEYS["notification_settings"]) or {}
        merged = {**DEFAULT_REMINDER_SETTINGS, **stored}
        try:
            return ReminderSettings.from_dict(merged)
        except (KeyError, TypeError, ValueError) as e:
            raise PortFailure(f"Malformed reminder settings in storage: {e}") from e

    async def save_reminder_settings(self, settings: ReminderSettings) -> None:
        """Validate and store reminder settings."""
        validate_reminder_settings(settings)
        await self.kv.set(STORAGE_KEYS["notification_settings"], settings.to_dict())

    # Quick-add options

    async def get_quick_add_options(self) -> List[QuickAddOption]:
        """Get quick-add buttons, or the defaults if none are stored."""
        stored = await self.kv.get(STORAGE_KEYS["quick_add_options"])
        if not stored:
            return list(QUICK_ADD_OPTIONS)
        return [
            QuickAddOption(id=int(o["id"]), amount_ml=int(o["amount"]), label=o["label"])
            for o in stored
        ]

    async def save_quick_add_options(self, options: List[QuickAddOption]) -> None:
        """Store quick-add buttons."""
        for option in options:
            if option.amount_ml <= 0:
                raise ConfigurationError(
                    f"Quick-add amount must be positive, got {option.amount_ml}"
                )
        await self.kv.set(
            STORAGE_KEYS["quick_add_options"],
            [{"id": o.id, "amount": o.amount_ml, "label": o.label} for o in options],
        )

    async def clear(self) -> None:
        """Remove the goal and reminder settings (back to defaults)."""
        await self.kv.remove(STORAGE_KEYS["daily_goal"])
        await self.kv.remove(STORAGE_KEYS["notification_settings"])
        logger.info("Goal and reminder settings cleared")
