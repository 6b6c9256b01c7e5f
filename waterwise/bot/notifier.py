"""Notification delivery port backed by the python-telegram-bot JobQueue."""

import logging
from datetime import datetime, time
from typing import Any, Callable, Coroutine
from zoneinfo import ZoneInfo

from telegram import Bot
from telegram.constants import ChatAction
from telegram.error import Forbidden, TelegramError
from telegram.ext import ContextTypes, JobQueue

from waterwise.db.models import NotificationPayload, PendingReminder
from waterwise.engine.errors import PortFailure
from waterwise.utils.constants import DEFAULT_TIMEZONE, JOB_NAME_PREFIX

logger = logging.getLogger(__name__)

JobCallback = Callable[[ContextTypes.DEFAULT_TYPE], Coroutine[Any, Any, None]]


class TelegramNotificationPort:
    """Schedules reminders as JobQueue jobs for one chat.

    Every job this port creates is named with JOB_NAME_PREFIX, so
    ``cancel_all`` and ``list_pending`` never touch foreign jobs.
    """

    def __init__(
        self,
        job_queue: JobQueue,
        bot: Bot,
        chat_id: int,
        reminder_callback: JobCallback,
        replan_callback: JobCallback,
        tz: str = DEFAULT_TIMEZONE,
    ):
        self.job_queue = job_queue
        self.bot = bot
        self.chat_id = chat_id
        self.reminder_callback = reminder_callback
        self.replan_callback = replan_callback
        self.tz = tz

    def _own_jobs(self) -> list:
        return [
            job
            for job in self.job_queue.jobs()
            if job.name and job.name.startswith(JOB_NAME_PREFIX)
        ]

    async def schedule_one_shot(self, fire_at: datetime, payload: NotificationPayload) -> str:
        """Queue a single reminder message at ``fire_at``."""
        name = f"{JOB_NAME_PREFIX}{payload.kind}:{fire_at.isoformat()}"
        try:
            self.job_queue.run_once(
                self.reminder_callback,
                when=fire_at,
                data=payload,
                name=name,
                chat_id=self.chat_id,
            )
        except (TypeError, ValueError) as e:
            raise PortFailure(f"Could not queue reminder at {fire_at.isoformat()}: {e}") from e
        return name

    async def schedule_repeating_daily(
        self, hour: int, minute: int, payload: NotificationPayload
    ) -> str:
        """Queue a job that runs every day at ``hour:minute`` in the configured timezone."""
        name = f"{JOB_NAME_PREFIX}{payload.kind}"
        try:
            self.job_queue.run_daily(
                self.replan_callback,
                time=time(hour, minute, tzinfo=ZoneInfo(self.tz)),
                data=payload,
                name=name,
                chat_id=self.chat_id,
            )
        except (TypeError, ValueError) as e:
            raise PortFailure(f"Could not queue daily job at {hour:02d}:{minute:02d}: {e}") from e
        return name

    async def cancel_all(self) -> None:
        """Remove every job owned by this port."""
        jobs = self._own_jobs()
        for job in jobs:
            job.schedule_removal()
        if jobs:
            logger.debug(f"Cancelled {len(jobs)} pending jobs")

    async def list_pending(self) -> list[PendingReminder]:
        """Jobs owned by this port that still have a next run time."""
        pending = []
        for job in self._own_jobs():
            if job.next_t is None or not isinstance(job.data, NotificationPayload):
                continue
            pending.append(PendingReminder(id=job.name, fire_at=job.next_t, kind=job.data.kind))
        return sorted(pending, key=lambda p: p.fire_at)

    async def request_permission(self) -> bool:
        """Check the bot may still message the chat.

        Returns:
            False if the user blocked the bot or the chat is gone
        """
        try:
            await self.bot.send_chat_action(chat_id=self.chat_id, action=ChatAction.TYPING)
        except Forbidden as e:
            logger.warning(f"Bot may not message chat {self.chat_id}: {e}")
            return False
        except TelegramError as e:
            raise PortFailure(f"Could not reach Telegram: {e}") from e
        return True
