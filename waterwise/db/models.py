"""Data models."""

from dataclasses import dataclass, field
from datetime import date, datetime
from typing import Literal

from waterwise.utils.time_utils import next_daily_occurrence


ReminderKind = Literal["fixed-interval", "smart-window"]
PayloadKind = Literal["water_reminder", "smart_reminder", "schedule_setup"]
ReminderState = Literal["disabled", "planning", "scheduled", "idle"]
Trigger = Literal["drink-logged", "settings-changed", "app-resumed", "daily-replan-fired"]


@dataclass(frozen=True)
class DrinkRecord:
    """A single logged drink."""

    id: str
    amount_ml: int
    occurred_at: datetime

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "amount": self.amount_ml,
            "timestamp": self.occurred_at.isoformat(),
        }

    @classmethod
    def from_dict(cls, data: dict) -> "DrinkRecord":
        return cls(
            id=str(data["id"]),
            amount_ml=int(data["amount"]),
            occurred_at=datetime.fromisoformat(data["timestamp"]),
        )


@dataclass(frozen=True)
class ReminderSettings:
    """Reminder configuration as stored by the SettingsStore."""

    enabled: bool
    interval_minutes: int
    smart_mode: bool
    active_start_hour: int
    active_end_hour: int

    def to_dict(self) -> dict:
        return {
            "enabled": self.enabled,
            "interval_minutes": self.interval_minutes,
            "smart_mode": self.smart_mode,
            "active_start_hour": self.active_start_hour,
            "active_end_hour": self.active_end_hour,
        }

    @classmethod
    def from_dict(cls, data: dict) -> "ReminderSettings":
        return cls(
            enabled=bool(data["enabled"]),
            interval_minutes=int(data["interval_minutes"]),
            smart_mode=bool(data["smart_mode"]),
            active_start_hour=int(data["active_start_hour"]),
            active_end_hour=int(data["active_end_hour"]),
        )


@dataclass(frozen=True)
class GoalStatus:
    """Today's consumption measured against the daily goal."""

    consumed_ml: int
    goal_ml: int
    is_complete: bool

    @property
    def remaining_ml(self) -> int:
        return max(self.goal_ml - self.consumed_ml, 0)

    @property
    def percentage(self) -> int:
        return round(self.consumed_ml / self.goal_ml * 100) if self.goal_ml else 0


@dataclass(frozen=True)
class ReminderEntry:
    """One planned reminder."""

    fire_at: datetime
    kind: ReminderKind


@dataclass(frozen=True)
class ReminderPlan:
    """Ordered reminders for the rest of today plus the daily replan time."""

    entries: tuple[ReminderEntry, ...]
    replan_hour: int
    replan_minute: int = 0

    def replan_at(self, now: datetime) -> datetime:
        """Next time the daily replan trigger fires after ``now``."""
        return next_daily_occurrence(now, self.replan_hour, self.replan_minute)

    @property
    def is_empty(self) -> bool:
        return not self.entries


@dataclass(frozen=True)
class NotificationPayload:
    """What the scheduler hands to the delivery port."""

    kind: PayloadKind
    index: int = 0


@dataclass(frozen=True)
class PendingReminder:
    """A notification held by the delivery port."""

    id: str
    fire_at: datetime
    kind: PayloadKind


@dataclass
class ApplyResult:
    """Outcome of installing a plan."""

    submitted: list[str] = field(default_factory=list)
    failed: list[ReminderEntry] = field(default_factory=list)
    replan_id: str | None = None


@dataclass(frozen=True)
class DrinkLogResult:
    """Result of logging a drink."""

    record: DrinkRecord
    status: GoalStatus
    goal_just_reached: bool


@dataclass
class DaySummary:
    """Total intake for one day of the week."""

    day: date
    amount_ml: int
    percentage: int
    is_today: bool


@dataclass
class WeekStats:
    """Weekly intake statistics."""

    days: list[DaySummary]
    total_ml: int
    average_ml: int
    completed_days: int
    completion_rate: int
