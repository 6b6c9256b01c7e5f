"""Main entry point for the Waterwise bot."""

import logging
import sys

from telegram import Update
from telegram.ext import (
    Application,
    ApplicationHandlerStop,
    CallbackQueryHandler,
    CommandHandler,
    ContextTypes,
    TypeHandler,
)

from waterwise.bot.callbacks import callback_router
from waterwise.bot.handlers import (
    drink_command,
    goal_command,
    help_command,
    interval_command,
    pending_command,
    quick_command,
    reminders_command,
    reset_command,
    smart_command,
    start_command,
    status_command,
    week_command,
)
from waterwise.bot.jobs import reminder_job, replan_job
from waterwise.bot.notifier import TelegramNotificationPort
from waterwise.config import Config
from waterwise.db.kv_store import SqliteKeyValueStore
from waterwise.db.migrations import run_migrations
from waterwise.db.repository import RecordStore, SettingsStore
from waterwise.engine.controller import ReminderController
from waterwise.engine.errors import ConfigurationError, PortFailure
from waterwise.engine.scheduler import ReminderScheduler
from waterwise.utils.error_handler import error_handler

# Configure logging
logging.basicConfig(
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    level=getattr(logging, Config.LOG_LEVEL),
    stream=sys.stdout,
)

logger = logging.getLogger(__name__)


async def restrict_to_owner(update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
    """Drop updates from any chat but the configured one."""
    chat = update.effective_chat
    if chat is None or chat.id != Config.TELEGRAM_CHAT_ID:
        raise ApplicationHandlerStop


async def post_init(application: Application) -> None:
    """Initialize bot resources after application is created."""
    # Initialize database
    await run_migrations(Config.DATABASE_PATH)

    kv = SqliteKeyValueStore(Config.DATABASE_PATH)
    await kv.connect()
    application.bot_data["kv"] = kv

    if application.job_queue is None:
        raise RuntimeError("JobQueue unavailable: install python-telegram-bot[job-queue]")

    port = TelegramNotificationPort(
        job_queue=application.job_queue,
        bot=application.bot,
        chat_id=Config.TELEGRAM_CHAT_ID,
        reminder_callback=reminder_job,
        replan_callback=replan_job,
        tz=Config.TIMEZONE,
    )

    controller = ReminderController(
        records=RecordStore(kv),
        settings=SettingsStore(kv),
        scheduler=ReminderScheduler(port),
        tz=Config.TIMEZONE,
    )
    application.bot_data["controller"] = controller

    # Starting the process is the app coming to the foreground
    try:
        await controller.handle("app-resumed")
    except (PortFailure, ConfigurationError) as e:
        logger.error(f"Initial replan failed: {e}")

    logger.info("Waterwise initialized successfully")


async def post_shutdown(application: Application) -> None:
    """Cleanup resources on shutdown."""
    kv: SqliteKeyValueStore | None = application.bot_data.get("kv")
    if kv:
        await kv.close()

    logger.info("Waterwise shut down")


def main() -> None:
    """Start the bot."""
    # Validate configuration
    try:
        Config.validate()
    except ValueError as e:
        logger.error(f"Configuration error: {e}")
        sys.exit(1)

    # Create application
    application = (
        Application.builder()
        .token(Config.TELEGRAM_BOT_TOKEN)
        .post_init(post_init)
        .post_shutdown(post_shutdown)
        .build()
    )

    # Single-user bot: everything else is ignored
    application.add_handler(TypeHandler(Update, restrict_to_owner), group=-1)

    # Commands
    application.add_handler(CommandHandler("start", start_command))
    application.add_handler(CommandHandler("help", help_command))
    application.add_handler(CommandHandler("drink", drink_command))
    application.add_handler(CommandHandler("quick", quick_command))
    application.add_handler(CommandHandler("status", status_command))
    application.add_handler(CommandHandler("week", week_command))

    # Settings commands
    application.add_handler(CommandHandler("goal", goal_command))
    application.add_handler(CommandHandler("reminders", reminders_command))
    application.add_handler(CommandHandler("interval", interval_command))
    application.add_handler(CommandHandler("smart", smart_command))
    application.add_handler(CommandHandler("pending", pending_command))
    application.add_handler(CommandHandler("reset", reset_command))

    # Callback queries (buttons)
    application.add_handler(CallbackQueryHandler(callback_router))

    # Error handler
    application.add_error_handler(error_handler)

    # Start the bot
    logger.info("Starting Waterwise bot...")
    application.run_polling(allowed_updates=["message", "callback_query"])


if __name__ == "__main__":
    main()
