"""Message text formatters."""

from datetime import datetime

from waterwise.db.models import (
    DrinkLogResult,
    GoalStatus,
    PayloadKind,
    PendingReminder,
    ReminderSettings,
    WeekStats,
)
from waterwise.utils.time_utils import format_duration, format_relative_time


def progress_bar(percentage: int, width: int = 10) -> str:
    """Text progress bar, capped at full."""
    filled = min(max(percentage, 0), 100) * width // 100
    return "▰" * filled + "▱" * (width - filled)


def format_encouragement(status: GoalStatus) -> str:
    """A nudge that depends on how far along today's goal is."""
    percentage = status.percentage
    if percentage < 25:
        return f"Keep going! {status.remaining_ml}ml to go to reach today's goal."
    elif percentage < 50:
        return f"Nice! {percentage}% done, keep it up."
    elif percentage < 75:
        return "Great, more than halfway there. Hang in there!"
    return f"Almost there! Just {status.remaining_ml}ml left."


def format_reminder_message(kind: PayloadKind, status: GoalStatus) -> str:
    """Format a reminder notification."""
    header = {
        "water_reminder": "💧 <b>Time for some water!</b>",
        "smart_reminder": "💧 <b>Drink break!</b>",
    }.get(kind, "💧 <b>Stay hydrated!</b>")

    return (
        f"{header}\n\n"
        f"{progress_bar(status.percentage)} {status.consumed_ml}/{status.goal_ml}ml\n"
        f"{format_encouragement(status)}"
    )


def format_status(status: GoalStatus, settings: ReminderSettings) -> str:
    """Format today's progress and reminder mode."""
    lines = [
        "<b>Today</b>",
        f"{progress_bar(status.percentage)} {status.percentage}%",
        f"💧 {status.consumed_ml}ml of {status.goal_ml}ml",
    ]

    if status.is_complete:
        lines.append("🎉 Goal reached!")
    else:
        lines.append(f"🎯 {status.remaining_ml}ml to go")

    lines.append("")
    lines.append(format_settings(settings))
    return "\n".join(lines)


def format_settings(settings: ReminderSettings) -> str:
    """Format reminder settings."""
    if not settings.enabled:
        return "🔕 Reminders are off"

    text = f"🔔 Reminders every {format_duration(settings.interval_minutes)}"
    if settings.smart_mode:
        text += (
            f"\n🌙 Smart mode: {settings.active_start_hour:02d}:00"
            f"-{settings.active_end_hour:02d}:59"
        )
    return text


def format_drink_logged(result: DrinkLogResult) -> str:
    """Confirmation after a drink is logged."""
    status = result.status
    text = (
        f"✓ Logged <b>{result.record.amount_ml}ml</b>\n"
        f"{progress_bar(status.percentage)} {status.consumed_ml}/{status.goal_ml}ml"
    )
    if result.goal_just_reached:
        text += "\n\n🎉 <b>Congratulations!</b> You reached today's goal."
    return text


def format_week_stats(stats: WeekStats, goal_ml: int) -> str:
    """Format the weekly overview."""
    lines = ["<b>This Week</b>\n"]

    for day in stats.days:
        marker = "👉" if day.is_today else "  "
        check = " ✓" if day.amount_ml >= goal_ml else ""
        lines.append(
            f"{marker} {day.day.strftime('%a %d')}  {progress_bar(day.percentage, 8)} "
            f"{day.amount_ml}ml{check}"
        )

    lines.append("")
    lines.append(f"💧 Total: {stats.total_ml}ml")
    lines.append(f"📊 Daily average: {stats.average_ml}ml")
    lines.append(f"🎯 Goal days: {stats.completed_days}/7 ({stats.completion_rate}%)")
    return "\n".join(lines)


def format_pending_list(pending: list[PendingReminder], now: datetime) -> str:
    """Format the reminders waiting on the delivery port."""
    if not pending:
        return "Nothing is scheduled."

    labels = {
        "water_reminder": "🔔 Reminder",
        "smart_reminder": "🌙 Smart reminder",
        "schedule_setup": "🔄 Daily replan",
    }

    lines = [f"<b>Scheduled ({len(pending)})</b>\n"]
    for item in pending:
        local = item.fire_at.astimezone(now.tzinfo) if now.tzinfo else item.fire_at
        lines.append(
            f"{labels.get(item.kind, item.kind)}: {local.strftime('%H:%M')} "
            f"({format_relative_time(local, now)})"
        )
    return "\n".join(lines)


def format_welcome_message() -> str:
    """Format the welcome message for /start."""
    return """
<b>Welcome to Waterwise!</b> 💧

I'll track how much you drink and remind you to keep sipping until you hit your daily goal.

<b>Quick Start:</b>
• Tap a button below to log a drink
• /reminders on - Turn on reminders
• /status - Today's progress
• /help - Full command list
""".strip()


def format_help_message() -> str:
    """Format the help message."""
    return """
<b>Waterwise Commands 💧</b>

<b>Logging:</b>
/drink &lt;ml&gt; - Log a drink: <code>/drink 250</code>
/quick - Quick-add buttons
/quick set &lt;ml&gt; ... - Change buttons: <code>/quick set 150 300 500</code>

<b>Progress:</b>
/status - Today's progress
/week - This week's statistics

<b>Reminders:</b>
/reminders on|off - Enable or disable reminders
/interval [minutes] - Reminder interval
/smart on|off [start end] - Only remind between hours: <code>/smart on 7 22</code>
/pending - What is scheduled

<b>Settings:</b>
/goal [ml] - Show or set the daily goal
/reset - Delete all records and settings

<b>Tips:</b>
• Reminders follow your last drink, so logging right away keeps them spaced out
• Once the goal is reached, reminders stop until tomorrow
""".strip()
