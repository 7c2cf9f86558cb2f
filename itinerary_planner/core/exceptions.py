"""
Exception hierarchy shared by the search engine, provider client and API layer
"""

from datetime import datetime
from typing import Optional, Sequence


class ItineraryPlannerError(Exception):
    """Base class for all planner errors"""
    pass


class ConfigurationError(ItineraryPlannerError):
    """Missing or unparseable configuration / request input"""
    pass


class ProviderFailure(ItineraryPlannerError):
    """Flight-search provider errored or returned malformed data"""
    pass


class DurationParseError(ProviderFailure):
    """Provider duration string could not be parsed"""
    pass


class LegNotFound(ItineraryPlannerError):
    """No qualifying flight exists for a single leg"""

    def __init__(self, origin: str, destination: str, not_before: datetime):
        self.origin = origin
        self.destination = destination
        self.not_before = not_before
        super().__init__(
            f"No qualifying flight {origin} -> {destination} "
            f"departing at or after {not_before.isoformat()}"
        )


class InfeasibleItinerary(ItineraryPlannerError):
    """A candidate sequence could not be flown end to end"""

    def __init__(
        self,
        sequence: Sequence[str],
        origin: str,
        destination: str,
        reason: Optional[str] = None
    ):
        self.sequence = tuple(sequence)
        self.origin = origin
        self.destination = destination
        message = f"Sequence {'-'.join(self.sequence)} infeasible at leg {origin} -> {destination}"
        if reason:
            message = f"{message}: {reason}"
        super().__init__(message)


class NoFeasibleItinerary(ItineraryPlannerError):
    """Every candidate sequence was infeasible or failed"""
    pass


class NotificationFailure(ItineraryPlannerError):
    """Itinerary report could not be delivered"""
    pass
