"""Command handlers."""

import logging
from dataclasses import replace

from telegram import Update
from telegram.ext import ContextTypes

from waterwise.bot.formatters import (
    format_drink_logged,
    format_help_message,
    format_pending_list,
    format_settings,
    format_status,
    format_week_stats,
    format_welcome_message,
)
from waterwise.bot.keyboards import confirm_cancel_keyboard, interval_keyboard, quick_add_keyboard
from waterwise.bot.stats import get_week_stats
from waterwise.engine.controller import ReminderController
from waterwise.engine.errors import ConfigurationError, PermissionDeniedError, PortFailure
from waterwise.utils.constants import QuickAddOption
from waterwise.utils.time_utils import format_duration

logger = logging.getLogger(__name__)


def _parse_int(value: str) -> int | None:
    try:
        return int(value)
    except ValueError:
        return None


async def start_command(update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
    """Handle /start command."""
    if not update.message:
        return

    controller: ReminderController = context.bot_data["controller"]
    options = await controller.settings.get_quick_add_options()

    await update.message.reply_html(
        format_welcome_message(), reply_markup=quick_add_keyboard(options)
    )


async def help_command(update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
    """Handle /help command."""
    if not update.message:
        return

    await update.message.reply_html(format_help_message())


async def drink_command(update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
    """Handle /drink <ml> command."""
    if not update.message:
        return

    if not context.args or len(context.args) != 1:
        await update.message.reply_text("Usage: /drink <ml>  (e.g. /drink 250)")
        return

    amount = _parse_int(context.args[0].lower().removesuffix("ml"))
    if amount is None:
        await update.message.reply_text("Invalid amount. Must be a number of ml.")
        return

    controller: ReminderController = context.bot_data["controller"]

    try:
        result = await controller.log_drink(amount)
    except ConfigurationError as e:
        await update.message.reply_text(f"❌ {e}")
        return
    except PortFailure as e:
        logger.error(f"Logging drink failed: {e}")
        await update.message.reply_text("❌ Could not save that drink. Please try again.")
        return

    await update.message.reply_html(format_drink_logged(result))


async def quick_command(update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
    """Handle /quick [set <ml> ...] command."""
    if not update.message:
        return

    controller: ReminderController = context.bot_data["controller"]

    if context.args and context.args[0].lower() == "set":
        amounts = [_parse_int(a) for a in context.args[1:]]
        if not amounts or any(a is None for a in amounts):
            await update.message.reply_text("Usage: /quick set <ml> [<ml> ...]")
            return

        options = [
            QuickAddOption(id=i + 1, amount_ml=a, label=f"{a}ml")
            for i, a in enumerate(amounts)  # type: ignore
        ]
        try:
            await controller.settings.save_quick_add_options(options)
        except ConfigurationError as e:
            await update.message.reply_text(f"❌ {e}")
            return

        await update.message.reply_text(
            "✓ Quick-add buttons updated.", reply_markup=quick_add_keyboard(options)
        )
        return

    options = await controller.settings.get_quick_add_options()
    await update.message.reply_text("How much did you drink?", reply_markup=quick_add_keyboard(options))


async def status_command(update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
    """Handle /status command - today's progress."""
    if not update.message:
        return

    controller: ReminderController = context.bot_data["controller"]
    status = await controller.current_status()
    settings = await controller.settings.get_reminder_settings()

    await update.message.reply_html(format_status(status, settings))


async def week_command(update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
    """Handle /week command - weekly statistics."""
    if not update.message:
        return

    controller: ReminderController = context.bot_data["controller"]
    stats = await get_week_stats(controller)
    goal_ml = await controller.settings.get_daily_goal()

    await update.message.reply_html(format_week_stats(stats, goal_ml))


async def goal_command(update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
    """Handle /goal [ml] command."""
    if not update.message:
        return

    controller: ReminderController = context.bot_data["controller"]

    if not context.args:
        goal_ml = await controller.settings.get_daily_goal()
        await update.message.reply_html(
            f"<b>Daily goal:</b> {goal_ml}ml\n\nChange it with <code>/goal 2500</code>"
        )
        return

    goal_ml = _parse_int(context.args[0].lower().removesuffix("ml"))
    if goal_ml is None:
        await update.message.reply_text("Invalid goal. Must be a number of ml.")
        return

    try:
        status = await controller.set_daily_goal(goal_ml)
    except ConfigurationError as e:
        await update.message.reply_text(f"❌ {e}")
        return

    await update.message.reply_html(
        f"✓ Daily goal set to <b>{goal_ml}ml</b> ({status.consumed_ml}ml so far today)"
    )


async def reminders_command(update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
    """Handle /reminders on|off command."""
    if not update.message:
        return

    controller: ReminderController = context.bot_data["controller"]

    if not context.args or context.args[0].lower() not in ("on", "off"):
        settings = await controller.settings.get_reminder_settings()
        await update.message.reply_html(
            f"{format_settings(settings)}\n\nUsage: <code>/reminders on</code> or "
            "<code>/reminders off</code>"
        )
        return

    enabled = context.args[0].lower() == "on"

    try:
        reminder_plan = await controller.enable_reminders(enabled)
    except PermissionDeniedError:
        await update.message.reply_text(
            "❌ I'm not allowed to message you, so reminders stay off.\n\n"
            "Unblock the bot and try again."
        )
        return

    if not enabled:
        await update.message.reply_text("🔕 Reminders turned off.")
        return

    if reminder_plan.entries:
        first = reminder_plan.entries[0].fire_at
        await update.message.reply_text(
            f"🔔 Reminders on. Next one at {first.strftime('%H:%M')} "
            f"({len(reminder_plan.entries)} left today)."
        )
    else:
        await update.message.reply_text(
            "🔔 Reminders on. Nothing more today, I'll start again tomorrow."
        )


async def interval_command(update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
    """Handle /interval [minutes] command."""
    if not update.message:
        return

    controller: ReminderController = context.bot_data["controller"]
    settings = await controller.settings.get_reminder_settings()

    if not context.args:
        await update.message.reply_text(
            f"Current interval: {format_duration(settings.interval_minutes)}",
            reply_markup=interval_keyboard(settings.interval_minutes),
        )
        return

    minutes = _parse_int(context.args[0])
    if minutes is None:
        await update.message.reply_text("Invalid interval. Must be a number of minutes.")
        return

    try:
        await controller.update_settings(replace(settings, interval_minutes=minutes))
    except ConfigurationError as e:
        await update.message.reply_text(f"❌ {e}")
        return

    await update.message.reply_text(f"✓ Reminding every {format_duration(minutes)}.")


async def smart_command(update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
    """Handle /smart on|off [start end] command."""
    if not update.message:
        return

    controller: ReminderController = context.bot_data["controller"]
    settings = await controller.settings.get_reminder_settings()

    if not context.args or context.args[0].lower() not in ("on", "off"):
        await update.message.reply_html(
            f"{format_settings(settings)}\n\n"
            "Usage: <code>/smart on 7 22</code> or <code>/smart off</code>"
        )
        return

    if context.args[0].lower() == "off":
        await controller.update_settings(replace(settings, smart_mode=False))
        await update.message.reply_text("✓ Smart mode off. Reminding around the clock.")
        return

    start, end = settings.active_start_hour, settings.active_end_hour
    if len(context.args) == 3:
        start_arg, end_arg = _parse_int(context.args[1]), _parse_int(context.args[2])
        if start_arg is None or end_arg is None:
            await update.message.reply_text("Hours must be numbers, e.g. /smart on 7 22")
            return
        start, end = start_arg, end_arg

    try:
        await controller.update_settings(
            replace(settings, smart_mode=True, active_start_hour=start, active_end_hour=end)
        )
    except ConfigurationError as e:
        await update.message.reply_text(f"❌ {e}")
        return

    await update.message.reply_text(f"✓ Smart mode on: {start:02d}:00-{end:02d}:59.")


async def pending_command(update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
    """Handle /pending command - list scheduled reminders."""
    if not update.message:
        return

    controller: ReminderController = context.bot_data["controller"]
    pending = await controller.list_pending()

    await update.message.reply_html(format_pending_list(pending, controller.now()))


async def reset_command(update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
    """Handle /reset command - ask before deleting everything."""
    if not update.message:
        return

    await update.message.reply_text(
        "⚠️ This deletes all drink records and settings. It cannot be undone.",
        reply_markup=confirm_cancel_keyboard("reset"),
    )
