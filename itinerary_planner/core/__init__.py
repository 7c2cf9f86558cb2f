"""
Core package - Configuration and cross-cutting concerns
"""

from .config import Settings, get_settings, reload_settings
from .exceptions import (
    ItineraryPlannerError,
    ConfigurationError,
    ProviderFailure,
    DurationParseError,
    LegNotFound,
    InfeasibleItinerary,
    NoFeasibleItinerary,
    NotificationFailure
)

__all__ = [
    "Settings",
    "get_settings",
    "reload_settings",
    "ItineraryPlannerError",
    "ConfigurationError",
    "ProviderFailure",
    "DurationParseError",
    "LegNotFound",
    "InfeasibleItinerary",
    "NoFeasibleItinerary",
    "NotificationFailure"
]
