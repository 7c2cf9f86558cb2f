"""
Itinerary Planner - Enumerates candidate sequences and selects the fastest feasible itinerary
"""

import logging
from concurrent.futures import ThreadPoolExecutor
from datetime import datetime
from itertools import product
from typing import Iterator, List, Optional, Sequence, Tuple

from itinerary_planner.core.config import Settings, get_settings
from itinerary_planner.core.exceptions import InfeasibleItinerary, NoFeasibleItinerary, ProviderFailure
from itinerary_planner.models.flight import Itinerary, PlannedItinerary, format_leg_summary
from itinerary_planner.models.request import FlightType
from itinerary_planner.services.amadeus import get_amadeus_client
from itinerary_planner.services.resolver import FlightSearchClient, build_resolver
from itinerary_planner.services.simulator import ItinerarySimulator

logger = logging.getLogger(__name__)


def enumerate_sequences(regions: Sequence[Sequence[str]]) -> Iterator[Tuple[str, ...]]:
    """
    Every ordering that takes one destination from each region

    Order is lexicographic by region, then by position within the region.
    Yields nothing for an empty region list.
    """
    if not regions:
        return iter(())
    return product(*regions)


def count_sequences(regions: Sequence[Sequence[str]]) -> int:
    if not regions:
        return 0
    total = 1
    for region in regions:
        total *= len(region)
    return total


class ItineraryPlanner:
    """
    Runs the simulator over every candidate sequence and keeps the best result

    Sequences are simulated concurrently on a bounded thread pool. Results are
    joined in enumeration order, so ties on total travel time go to the
    earlier sequence.
    """

    def __init__(
        self,
        simulator: ItinerarySimulator,
        regions: Sequence[Sequence[str]],
        max_workers: int = 8
    ):
        self.simulator = simulator
        self.regions = [list(region) for region in regions]
        self.max_workers = max_workers

    def _evaluate(
        self,
        start_origin: str,
        sequence: Tuple[str, ...],
        start_time: datetime
    ) -> Optional[Itinerary]:
        """Simulate one sequence; None when it cannot be flown"""
        logger.debug(f"Checking sequence: {'-'.join(sequence)}")
        try:
            return self.simulator.simulate(start_origin, sequence, start_time)
        except InfeasibleItinerary as e:
            if isinstance(e.__cause__, ProviderFailure):
                logger.warning(str(e))
            else:
                logger.debug(str(e))
            return None

    def evaluate_all(
        self,
        start_origin: str,
        start_time: datetime,
        regions: Optional[Sequence[Sequence[str]]] = None
    ) -> List[Tuple[Tuple[str, ...], Optional[Itinerary]]]:
        """
        Simulate every candidate sequence

        Returns:
            (sequence, itinerary or None) pairs in enumeration order
        """
        sequences = list(enumerate_sequences(self.regions if regions is None else regions))
        if not sequences:
            return []

        with ThreadPoolExecutor(max_workers=min(self.max_workers, len(sequences))) as executor:
            futures = [
                executor.submit(self._evaluate, start_origin, sequence, start_time)
                for sequence in sequences
            ]

            outcomes = []
            for sequence, future in zip(sequences, futures):
                try:
                    outcomes.append((sequence, future.result()))
                except Exception:
                    logger.exception(f"Simulation crashed for sequence {'-'.join(sequence)}")
                    outcomes.append((sequence, None))

        return outcomes

    def select_best(
        self,
        start_origin: str,
        start_time: datetime,
        regions: Optional[Sequence[Sequence[str]]] = None
    ) -> PlannedItinerary:
        """
        Find the feasible itinerary with the lowest total travel time

        Args:
            start_origin: IATA code the trip starts from
            start_time: Earliest departure instant (UTC)
            regions: Override for the configured region lists

        Returns:
            PlannedItinerary with the winning sequence

        Raises:
            NoFeasibleItinerary: Every sequence was infeasible or failed
        """
        outcomes = self.evaluate_all(start_origin, start_time, regions)
        feasible = [(sequence, itinerary) for sequence, itinerary in outcomes if itinerary is not None]

        logger.info(
            f"Evaluated {len(outcomes)} sequence(s) from {start_origin}: {len(feasible)} feasible"
        )

        if not feasible:
            raise NoFeasibleItinerary("No valid itineraries were found across all sequences.")

        # min() keeps the first minimum, i.e. the earliest sequence in enumeration order
        best_sequence, best_itinerary = min(feasible, key=lambda outcome: outcome[1].total_travel_time)

        logger.info(
            f"Best sequence {'-'.join(best_sequence)}: "
            f"travel time {best_itinerary.total_travel_time}, cost {best_itinerary.total_cost:.2f}"
        )
        for leg in best_itinerary.legs:
            logger.debug(format_leg_summary(leg))

        return PlannedItinerary(best_sequence=list(best_sequence), best_itinerary=best_itinerary)


def build_planner(
    flight_type: FlightType = FlightType.DIRECT,
    client: Optional[FlightSearchClient] = None,
    settings: Optional[Settings] = None
) -> ItineraryPlanner:
    """
    Assemble resolver, simulator and planner from Settings

    Args:
        flight_type: Leg-resolution strategy
        client: Flight search client (defaults to the Amadeus singleton)
        settings: Settings (defaults to the application singleton)
    """
    settings = settings or get_settings()
    client = client or get_amadeus_client()

    simulator = ItinerarySimulator(
        build_resolver(flight_type, client),
        connection_buffers=settings.connection_buffers,
        default_buffer_hours=settings.default_connection_buffer_hours,
        extra_travel_time_hours=settings.extra_travel_time_hours
    )
    return ItineraryPlanner(simulator, settings.regions, max_workers=settings.max_workers)
