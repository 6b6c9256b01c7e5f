"""Exception hierarchy for the reminder engine and its ports."""


class WaterwiseError(Exception):
    """Base exception for waterwise errors."""


class ConfigurationError(WaterwiseError, ValueError):
    """Invalid settings or goal. Retrying will not help."""


class PortFailure(WaterwiseError):
    """A persistence or notification port call failed."""


class PermissionDeniedError(PortFailure):
    """The delivery port is not allowed to notify the user."""


class StaleAnchorError(WaterwiseError):
    """The last-drink anchor lies in the future (clock skew).

    Raised and corrected inside the planner; never escalated.
    """
