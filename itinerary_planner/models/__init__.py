"""
Models package - Pydantic schemas for data validation
"""

from .flight import (
    OfferEndpoint,
    OfferSegment,
    OfferItinerary,
    OfferPrice,
    FlightOffer,
    Leg,
    ItineraryLeg,
    Itinerary,
    PlannedItinerary,
    parse_flight_offers,
    format_leg_summary
)
from .request import (
    FlightType,
    FlightSearchQuery
)

__all__ = [
    "OfferEndpoint",
    "OfferSegment",
    "OfferItinerary",
    "OfferPrice",
    "FlightOffer",
    "Leg",
    "ItineraryLeg",
    "Itinerary",
    "PlannedItinerary",
    "parse_flight_offers",
    "format_leg_summary",
    "FlightType",
    "FlightSearchQuery"
]
