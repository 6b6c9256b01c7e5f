"""Installs a reminder plan on the notification delivery port."""

import logging

from waterwise.db.models import (
    ApplyResult,
    NotificationPayload,
    PayloadKind,
    PendingReminder,
    ReminderKind,
    ReminderPlan,
)
from waterwise.engine.errors import PortFailure
from waterwise.engine.ports import NotificationPort

logger = logging.getLogger(__name__)


PAYLOAD_KINDS: dict[ReminderKind, PayloadKind] = {
    "fixed-interval": "water_reminder",
    "smart-window": "smart_reminder",
}


class ReminderScheduler:
    """Replaces whatever is pending with a new plan.

    Callers must serialize ``apply``: cancel and submit are not atomic as a
    pair.
    """

    def __init__(self, port: NotificationPort):
        self.port = port

    async def apply(self, plan: ReminderPlan) -> ApplyResult:
        """Cancel every pending reminder, then submit the plan.

        1. Cancel all (a failure here aborts the whole apply)
        2. Submit each entry as a one-shot; failures are logged and skipped
        3. Arm the daily replan trigger, even for an empty plan

        Raises:
            PortFailure: if cancelling fails
        """
        try:
            await self.port.cancel_all()
        except PortFailure as e:
            logger.error(f"Cancel-all failed, not submitting new reminders: {e}")
            raise

        result = ApplyResult()

        for index, entry in enumerate(plan.entries):
            payload = NotificationPayload(kind=PAYLOAD_KINDS[entry.kind], index=index)
            try:
                reminder_id = await self.port.schedule_one_shot(entry.fire_at, payload)
            except PortFailure as e:
                logger.error(f"Failed to schedule reminder at {entry.fire_at.isoformat()}: {e}")
                result.failed.append(entry)
                continue
            result.submitted.append(reminder_id)

        try:
            result.replan_id = await self.port.schedule_repeating_daily(
                plan.replan_hour,
                plan.replan_minute,
                NotificationPayload(kind="schedule_setup"),
            )
        except PortFailure as e:
            logger.error(
                f"Failed to arm daily replan at {plan.replan_hour:02d}:{plan.replan_minute:02d}: {e}"
            )

        logger.info(
            f"Applied plan: {len(result.submitted)} reminders scheduled, "
            f"{len(result.failed)} failed, replan at {plan.replan_hour:02d}:{plan.replan_minute:02d}"
        )
        return result

    async def list_pending(self) -> list[PendingReminder]:
        """Reminders currently held by the delivery port."""
        return await self.port.list_pending()
