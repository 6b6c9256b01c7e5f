"""Constants and default values."""

from dataclasses import dataclass


@dataclass(frozen=True)
class QuickAddOption:
    """A one-tap drink amount."""

    id: int
    amount_ml: int
    label: str


# Default quick-add buttons (seeded when nothing is stored)
QUICK_ADD_OPTIONS = [
    QuickAddOption(1, 100, "100ml"),
    QuickAddOption(2, 200, "200ml"),
    QuickAddOption(3, 250, "250ml"),
    QuickAddOption(4, 300, "300ml"),
    QuickAddOption(5, 500, "500ml"),
    QuickAddOption(6, 750, "750ml"),
]

DEFAULT_DAILY_GOAL = 2000  # ml

# Stored reminder settings are merged over this, at the SettingsStore only
DEFAULT_REMINDER_SETTINGS = {
    "enabled": False,
    "interval_minutes": 60,
    "smart_mode": False,
    "active_start_hour": 7,
    "active_end_hour": 22,
}

# Interval presets offered by /interval
NOTIFICATION_INTERVALS = [30, 60, 90, 120]

# Persistence keys
STORAGE_KEYS = {
    "daily_goal": "daily_goal",
    "water_records": "water_records",
    "quick_add_options": "quick_add_options",
    "notification_settings": "notification_settings",
}

# The daily replan never fires before this hour
REPLAN_MIN_HOUR = 6

# Limits
MAX_DRINK_ML = 5000
MAX_DAILY_GOAL_ML = 20000
MAX_INTERVAL_MINUTES = 1440  # one day

# Default timezone
DEFAULT_TIMEZONE = "UTC"

# Prefix for every job the Telegram delivery port owns
JOB_NAME_PREFIX = "waterwise:"
