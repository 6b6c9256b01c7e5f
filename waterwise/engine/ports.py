"""Capability ports the engine depends on but does not implement."""

from datetime import datetime
from typing import Any, Protocol

from waterwise.db.models import NotificationPayload, PendingReminder


class KeyValueStore(Protocol):
    """Persistence port. Values are JSON-serializable.

    Implementations raise PortFailure when the backing store fails.
    """

    async def get(self, key: str) -> Any | None: ...

    async def set(self, key: str, value: Any) -> None: ...

    async def remove(self, key: str) -> None: ...


class NotificationPort(Protocol):
    """Notification delivery port.

    Implementations raise PortFailure when a call fails.
    """

    async def schedule_one_shot(
        self, fire_at: datetime, payload: NotificationPayload
    ) -> str: ...

    async def schedule_repeating_daily(
        self, hour: int, minute: int, payload: NotificationPayload
    ) -> str: ...

    async def cancel_all(self) -> None: ...

    async def list_pending(self) -> list[PendingReminder]: ...

    async def request_permission(self) -> bool: ...
