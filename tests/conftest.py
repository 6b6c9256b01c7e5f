"""Shared fakes for the persistence and notification ports."""

import asyncio
import copy
from datetime import datetime
from typing import Any, Callable
from zoneinfo import ZoneInfo

import pytest

from waterwise.db.models import NotificationPayload, PendingReminder
from waterwise.db.repository import RecordStore, SettingsStore
from waterwise.engine.controller import ReminderController
from waterwise.engine.errors import PortFailure
from waterwise.engine.scheduler import ReminderScheduler
from waterwise.utils.time_utils import next_daily_occurrence

UTC = ZoneInfo("UTC")


class FakeKeyValueStore:
    """In-memory persistence port. Set ``fail_reads`` to simulate I/O errors."""

    def __init__(self):
        self.data: dict[str, Any] = {}
        self.fail_reads = False

    async def get(self, key: str) -> Any | None:
        if self.fail_reads:
            raise PortFailure(f"read of {key} failed")
        return copy.deepcopy(self.data.get(key))

    async def set(self, key: str, value: Any) -> None:
        self.data[key] = copy.deepcopy(value)

    async def remove(self, key: str) -> None:
        self.data.pop(key, None)


class FakeNotificationPort:
    """In-memory delivery port that records every call in ``events``."""

    def __init__(self, clock: Callable[[], datetime]):
        self.clock = clock
        self.pending: dict[str, PendingReminder] = {}
        self.events: list[str] = []
        self.fail_at: set[datetime] = set()
        self.fail_cancel = False
        self.permitted = True
        self._next_id = 0

    def _new_id(self) -> str:
        self._next_id += 1
        return f"job-{self._next_id}"

    async def schedule_one_shot(self, fire_at: datetime, payload: NotificationPayload) -> str:
        await asyncio.sleep(0)
        if fire_at in self.fail_at:
            raise PortFailure(f"rejected {fire_at.isoformat()}")
        reminder_id = self._new_id()
        self.pending[reminder_id] = PendingReminder(reminder_id, fire_at, payload.kind)
        self.events.append("one_shot")
        return reminder_id

    async def schedule_repeating_daily(
        self, hour: int, minute: int, payload: NotificationPayload
    ) -> str:
        await asyncio.sleep(0)
        reminder_id = self._new_id()
        fire_at = next_daily_occurrence(self.clock(), hour, minute)
        self.pending[reminder_id] = PendingReminder(reminder_id, fire_at, payload.kind)
        self.events.append("daily")
        return reminder_id

    async def cancel_all(self) -> None:
        await asyncio.sleep(0)
        if self.fail_cancel:
            raise PortFailure("cancel failed")
        self.pending.clear()
        self.events.append("cancel")

    async def list_pending(self) -> list[PendingReminder]:
        return sorted(self.pending.values(), key=lambda p: p.fire_at)

    async def request_permission(self) -> bool:
        return self.permitted

    def one_shots(self) -> list[PendingReminder]:
        return [p for p in self.pending.values() if p.kind != "schedule_setup"]

    def snapshot(self) -> list[tuple[datetime, str]]:
        return sorted((p.fire_at, p.kind) for p in self.pending.values())


class Clock:
    """Settable clock."""

    def __init__(self, now: datetime):
        self.now = now

    def __call__(self) -> datetime:
        return self.now


@pytest.fixture
def clock():
    return Clock(datetime(2026, 3, 4, 14, 10, tzinfo=UTC))


@pytest.fixture
def kv():
    return FakeKeyValueStore()


@pytest.fixture
def port(clock):
    return FakeNotificationPort(clock)


@pytest.fixture
def controller(kv, port, clock):
    return ReminderController(
        records=RecordStore(kv),
        settings=SettingsStore(kv),
        scheduler=ReminderScheduler(port),
        tz="UTC",
        clock=clock,
    )
