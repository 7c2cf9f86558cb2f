"""
Itinerary Simulator - Chains single-leg lookups into a full itinerary
Each leg's departure floor is the previous arrival plus the connection buffer of the airport being left
"""

import logging
from datetime import datetime, timedelta
from typing import Dict, Optional, Sequence

from itinerary_planner.core.exceptions import InfeasibleItinerary, LegNotFound, ProviderFailure
from itinerary_planner.core.timeutils import hours_to_timedelta
from itinerary_planner.models.flight import Itinerary, ItineraryLeg
from itinerary_planner.services.resolver import FlightResolver

logger = logging.getLogger(__name__)


class ItinerarySimulator:
    """
    Simulates one candidate sequence leg by leg

    Core Logic:
    - Floor for each leg = previous arrival (or start time) + buffer at the current origin
    - Airports missing from the buffer table use the default buffer
    - The first unresolvable leg makes the whole sequence infeasible
    """

    def __init__(
        self,
        resolver: FlightResolver,
        connection_buffers: Optional[Dict[str, float]] = None,
        default_buffer_hours: float = 2.0,
        extra_travel_time_hours: float = 2.5
    ):
        """
        Initialize simulator

        Args:
            resolver: Leg resolution strategy
            connection_buffers: Minimum connection time in hours by IATA code
            default_buffer_hours: Buffer for airports not in the table
            extra_travel_time_hours: Padding added to every itinerary's total travel time
        """
        self.resolver = resolver
        self.connection_buffers = {
            code.upper(): hours for code, hours in (connection_buffers or {}).items()
        }
        self.default_buffer = hours_to_timedelta(default_buffer_hours)
        self.extra_travel_time = hours_to_timedelta(extra_travel_time_hours)

    def connection_buffer(self, iata_code: str) -> timedelta:
        """Minimum connection time at an airport"""
        hours = self.connection_buffers.get(iata_code.upper())
        if hours is None:
            logger.debug(f"No connection buffer for {iata_code}, using default {self.default_buffer}")
            return self.default_buffer
        return hours_to_timedelta(hours)

    def simulate(
        self,
        start_origin: str,
        sequence: Sequence[str],
        start_time: datetime
    ) -> Itinerary:
        """
        Simulate a candidate sequence

        Args:
            start_origin: IATA code the trip starts from
            sequence: Destinations in visiting order
            start_time: Earliest moment the traveler is at start_origin (UTC)

        Returns:
            Itinerary with one leg per destination

        Raises:
            InfeasibleItinerary: A leg had no qualifying flight or the provider failed;
                no further legs are resolved

        Example:
            itinerary = simulator.simulate("PUQ", ("SCL", "MIA"), start)
        """
        origin = start_origin
        previous_arrival = start_time
        legs = []
        total_flight = timedelta()
        total_layover = timedelta()
        total_cost = 0.0

        for destination in sequence:
            floor = previous_arrival + self.connection_buffer(origin)

            try:
                leg = self.resolver.lookup(origin, destination, floor)
            except LegNotFound as e:
                raise InfeasibleItinerary(sequence, origin, destination, "no qualifying flight") from e
            except ProviderFailure as e:
                raise InfeasibleItinerary(sequence, origin, destination, f"provider failure: {e}") from e

            layover = leg.departure_time - previous_arrival
            legs.append(ItineraryLeg.from_leg(leg, layover=layover, layover_iata=origin))

            total_flight += leg.duration
            total_layover += layover
            total_cost += leg.cost
            previous_arrival = leg.arrival_time
            origin = destination

        return Itinerary(
            legs=legs,
            total_flight_duration=total_flight,
            total_layover_duration=total_layover,
            total_travel_time=total_flight + total_layover + self.extra_travel_time,
            total_cost=total_cost
        )
