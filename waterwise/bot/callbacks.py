"""Callback query handlers for inline buttons."""

import logging
from dataclasses import replace

from telegram import Update
from telegram.ext import ContextTypes

from waterwise.bot.formatters import format_drink_logged
from waterwise.engine.controller import ReminderController
from waterwise.engine.errors import ConfigurationError, PortFailure
from waterwise.utils.time_utils import format_duration

logger = logging.getLogger(__name__)


async def handle_drink_callback(
    update: Update, context: ContextTypes.DEFAULT_TYPE, amount_ml: int
) -> None:
    """Handle a quick-add button press."""
    query = update.callback_query
    if not query:
        return

    controller: ReminderController = context.bot_data["controller"]

    try:
        result = await controller.log_drink(amount_ml)
    except (ConfigurationError, PortFailure) as e:
        logger.error(f"Quick-add of {amount_ml}ml failed: {e}")
        await query.answer("Could not save that drink.")
        return

    await query.answer(f"+{amount_ml}ml")
    if query.message:
        await query.message.reply_html(format_drink_logged(result))


async def handle_interval_callback(
    update: Update, context: ContextTypes.DEFAULT_TYPE, minutes: int
) -> None:
    """Handle an interval preset button press."""
    query = update.callback_query
    if not query:
        return

    controller: ReminderController = context.bot_data["controller"]
    settings = await controller.settings.get_reminder_settings()

    try:
        await controller.update_settings(replace(settings, interval_minutes=minutes))
    except ConfigurationError as e:
        await query.answer(str(e))
        return

    await query.answer()
    if query.message:
        await query.message.edit_text(f"✓ Reminding every {format_duration(minutes)}.")


async def handle_reset_confirmation(update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
    """Delete everything after the user confirmed."""
    query = update.callback_query
    if not query:
        return

    controller: ReminderController = context.bot_data["controller"]

    try:
        await controller.clear_all_data()
    except PortFailure as e:
        logger.error(f"Clearing data failed: {e}")
        await query.answer("Could not clear data.")
        return

    await query.answer()
    if query.message:
        await query.message.edit_text("🗑 All records and settings deleted.")


async def callback_router(update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
    """Route callback queries to appropriate handlers."""
    if not update.callback_query:
        return

    query = update.callback_query
    data = query.data

    if not data:
        return

    # Parse callback data
    parts = data.split(":")

    if parts[0] == "drink":
        await handle_drink_callback(update, context, int(parts[1]))

    elif parts[0] == "interval":
        await handle_interval_callback(update, context, int(parts[1]))

    elif parts[0] == "confirm" and parts[1] == "reset":
        await handle_reset_confirmation(update, context)

    elif parts[0] == "cancel":
        if query.message:
            await query.message.delete()
        await query.answer("Cancelled")

    else:
        await query.answer("Unknown action")
