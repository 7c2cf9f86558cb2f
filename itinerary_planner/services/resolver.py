"""
Flight Resolver - Earliest qualifying flight for a single leg
Queries the flight-search provider and applies the departure-floor selection policy
"""

import logging
from abc import ABC, abstractmethod
from datetime import datetime
from typing import List, Optional, Protocol

from itinerary_planner.core.exceptions import LegNotFound, ProviderFailure
from itinerary_planner.core.timeutils import parse_duration
from itinerary_planner.models.flight import FlightOffer, Leg
from itinerary_planner.models.request import FlightType

logger = logging.getLogger(__name__)


class FlightSearchClient(Protocol):
    """Anything that can search offers for an origin/destination/date"""

    def search_flight_offers(self, origin: str, destination: str, departure_date) -> List[FlightOffer]:
        ...


class FlightResolver(ABC):
    """
    Base resolver: earliest offer departing at or after a floor time

    Subclasses decide which offers qualify and how an offer becomes a Leg.
    Ties on departure time keep the provider's original ordering.
    """

    def __init__(self, client: FlightSearchClient):
        self.client = client

    @abstractmethod
    def accepts(self, offer: FlightOffer) -> bool:
        """Whether an offer can be used for this strategy"""

    @abstractmethod
    def to_leg(self, offer: FlightOffer, origin: str, destination: str) -> Leg:
        """Convert a selected offer into a Leg"""

    def lookup(self, origin: str, destination: str, not_before: datetime) -> Leg:
        """
        Resolve the earliest qualifying flight

        Args:
            origin: 3-letter IATA origin code
            destination: 3-letter IATA destination code
            not_before: Earliest acceptable departure (UTC, inclusive)

        Returns:
            Leg for the selected offer

        Raises:
            LegNotFound: No offer qualifies
            ProviderFailure: Provider errored or returned malformed data
        """
        offers = self.client.search_flight_offers(origin, destination, not_before.date())

        earliest: Optional[FlightOffer] = None
        for offer in offers:
            if not self.accepts(offer):
                continue
            departure = offer.departure_time()
            if departure is None or departure < not_before:
                continue
            # Strict comparison keeps the first-encountered offer on ties
            if earliest is None or departure < earliest.departure_time():
                earliest = offer

        if earliest is None:
            raise LegNotFound(origin, destination, not_before)

        return self.to_leg(earliest, origin, destination)

    def find_earliest_flight(self, origin: str, destination: str, not_before: datetime) -> Optional[Leg]:
        """
        Same as lookup, but returns None when no flight can be used

        Provider failures are logged separately from plain misses.
        """
        try:
            return self.lookup(origin, destination, not_before)
        except LegNotFound as e:
            logger.info(str(e))
        except ProviderFailure as e:
            logger.warning(f"Flight search failed for {origin} -> {destination}: {str(e)}")
        return None


class DirectFlightResolver(FlightResolver):
    """Non-stop legs only: one segment, zero intermediate stops"""

    def accepts(self, offer: FlightOffer) -> bool:
        return offer.is_non_stop()

    def to_leg(self, offer: FlightOffer, origin: str, destination: str) -> Leg:
        segment = offer.segments[0]
        return Leg(
            origin=origin,
            destination=destination,
            airline=offer.airline(),
            flight_number=segment.flight_number,
            departure_time=segment.departure.at,
            arrival_time=segment.arrival.at,
            duration=parse_duration(segment.duration) if segment.duration
            else segment.arrival.at - segment.departure.at,
            cost=offer.price.total,
            stops=0
        )


class ConnectingFlightResolver(FlightResolver):
    """Any offer with at least one segment; the whole journey counts as one leg"""

    def accepts(self, offer: FlightOffer) -> bool:
        return bool(offer.segments)

    def to_leg(self, offer: FlightOffer, origin: str, destination: str) -> Leg:
        segments = offer.segments
        first, last = segments[0], segments[-1]
        itinerary_duration = offer.itineraries[0].duration

        # Connection points plus any technical stops inside segments
        stops = len(segments) - 1 + sum(segment.number_of_stops for segment in segments)

        return Leg(
            origin=origin,
            destination=destination,
            airline=offer.airline(),
            flight_number="/".join(segment.flight_number for segment in segments),
            departure_time=first.departure.at,
            arrival_time=last.arrival.at,
            duration=parse_duration(itinerary_duration) if itinerary_duration
            else last.arrival.at - first.departure.at,
            cost=offer.price.total,
            stops=stops
        )


def build_resolver(flight_type: FlightType, client: FlightSearchClient) -> FlightResolver:
    """Pick the resolver strategy for a request"""
    if flight_type == FlightType.DIRECT:
        return DirectFlightResolver(client)
    return ConnectingFlightResolver(client)
