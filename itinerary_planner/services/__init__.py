"""
Services package - Itinerary search engine and external API integrations
"""

from .amadeus import AmadeusClient, get_amadeus_client, AmadeusAPIError
from .resolver import FlightResolver, DirectFlightResolver, ConnectingFlightResolver, build_resolver
from .simulator import ItinerarySimulator
from .planner import ItineraryPlanner, enumerate_sequences, count_sequences, build_planner
from .notifier import EmailNotifier, get_email_notifier, format_itinerary_email

__all__ = [
    "AmadeusClient",
    "get_amadeus_client",
    "AmadeusAPIError",
    "FlightResolver",
    "DirectFlightResolver",
    "ConnectingFlightResolver",
    "build_resolver",
    "ItinerarySimulator",
    "ItineraryPlanner",
    "enumerate_sequences",
    "count_sequences",
    "build_planner",
    "EmailNotifier",
    "get_email_notifier",
    "format_itinerary_email"
]
