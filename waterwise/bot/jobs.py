"""JobQueue callbacks for scheduled reminders and the daily replan."""

import logging

from telegram.error import TelegramError
from telegram.ext import ContextTypes

from waterwise.bot.formatters import format_reminder_message
from waterwise.bot.keyboards import quick_add_keyboard
from waterwise.engine.controller import ReminderController
from waterwise.engine.errors import ConfigurationError, PortFailure

logger = logging.getLogger(__name__)


async def reminder_job(context: ContextTypes.DEFAULT_TYPE) -> None:
    """Send a reminder message with fresh progress."""
    job = context.job
    if job is None or job.chat_id is None:
        return

    controller: ReminderController = context.bot_data["controller"]

    try:
        status = await controller.current_status()
        options = await controller.settings.get_quick_add_options()
    except (PortFailure, ConfigurationError) as e:
        logger.error(f"Could not load progress for reminder {job.name}: {e}")
        return

    # A drink logged since planning may have met the goal already
    if status.is_complete:
        logger.info(f"Skipping reminder {job.name}: goal already reached")
        return

    try:
        await context.bot.send_message(
            chat_id=job.chat_id,
            text=format_reminder_message(job.data.kind, status),
            parse_mode="HTML",
            reply_markup=quick_add_keyboard(options),
        )
        logger.info(f"Sent reminder {job.name}")
    except TelegramError as e:
        logger.error(f"Failed to send reminder {job.name}: {e}")


async def replan_job(context: ContextTypes.DEFAULT_TYPE) -> None:
    """Daily trigger: plan the new day's reminders."""
    controller: ReminderController = context.bot_data["controller"]

    try:
        await controller.handle("daily-replan-fired")
    except (PortFailure, ConfigurationError) as e:
        logger.error(f"Daily replan failed: {e}")
