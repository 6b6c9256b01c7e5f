"""Inline keyboard builders."""

from typing import List

from telegram import InlineKeyboardButton, InlineKeyboardMarkup

from waterwise.utils.constants import NOTIFICATION_INTERVALS, QuickAddOption
from waterwise.utils.time_utils import format_duration


def quick_add_keyboard(options: List[QuickAddOption]) -> InlineKeyboardMarkup:
    """One button per quick-add amount, three per row."""
    buttons = [
        InlineKeyboardButton(f"💧 {o.label}", callback_data=f"drink:{o.amount_ml}")
        for o in options
    ]
    return InlineKeyboardMarkup([buttons[i:i + 3] for i in range(0, len(buttons), 3)])


def interval_keyboard(current: int) -> InlineKeyboardMarkup:
    """Interval presets; the current one is marked."""
    return InlineKeyboardMarkup(
        [
            [
                InlineKeyboardButton(
                    f"{'✓ ' if minutes == current else ''}{format_duration(minutes)}",
                    callback_data=f"interval:{minutes}",
                )
                for minutes in NOTIFICATION_INTERVALS
            ]
        ]
    )


def confirm_cancel_keyboard(action: str) -> InlineKeyboardMarkup:
    """Keyboard for confirmations: Confirm, Cancel."""
    return InlineKeyboardMarkup(
        [
            [
                InlineKeyboardButton("✓ Confirm", callback_data=f"confirm:{action}"),
                InlineKeyboardButton("✗ Cancel", callback_data=f"cancel:{action}"),
            ]
        ]
    )
