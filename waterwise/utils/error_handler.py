"""Global error handler for the bot."""

import logging
import traceback

from telegram import Update
from telegram.error import Forbidden, NetworkError, TimedOut
from telegram.ext import ContextTypes

from waterwise.engine.errors import ConfigurationError, PortFailure

logger = logging.getLogger(__name__)


def describe_error(error: BaseException | None) -> str:
    """Pick the message shown to the user for an unhandled error."""
    if isinstance(error, ConfigurationError):
        return f"❌ Invalid setting.\n\n{error}"
    if isinstance(error, PortFailure):
        return "💾 Couldn't read or save your data.\n\nPlease try again in a moment."
    if isinstance(error, TimedOut):
        return "⏱️ Request timed out.\n\nPlease try again in a moment."
    if isinstance(error, NetworkError):
        return "🌐 Network error.\n\nPlease check your connection and try again."
    return (
        "😅 Oops! Something went wrong.\n\n"
        "The error has been logged. Please try again or use /help for assistance."
    )


async def error_handler(update: object, context: ContextTypes.DEFAULT_TYPE) -> None:
    """Handle errors in the bot."""
    logger.error("Exception while handling an update:", exc_info=context.error)

    if context.error is not None:
        tb_string = "".join(
            traceback.format_exception(None, context.error, context.error.__traceback__)
        )
        logger.error(f"Traceback:\n{tb_string}")

    # Nothing can be sent back if the user blocked the bot
    if isinstance(context.error, Forbidden):
        return

    if isinstance(update, Update) and update.effective_message:
        try:
            await update.effective_message.reply_text(describe_error(context.error))
        except Exception as e:
            logger.error(f"Failed to send error message to user: {e}")
