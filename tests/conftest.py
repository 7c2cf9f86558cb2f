"""
Shared fixtures: canned Amadeus offers and a recording flight-search client
"""

import os
import threading
from datetime import datetime, timezone

import pytest

# Required settings must exist before the application modules are imported
os.environ.setdefault("AMADEUS_CLIENT_ID", "test-client-id")
os.environ.setdefault("AMADEUS_CLIENT_SECRET", "test-client-secret")

from itinerary_planner.core.exceptions import ProviderFailure
from itinerary_planner.models.flight import FlightOffer

START = datetime(2025, 3, 15, 17, 30, tzinfo=timezone.utc)


def build_offer(
    origin,
    destination,
    departure,
    arrival,
    price="100.00",
    carrier="LA",
    number="800",
    duration=None,
    stops=0,
    via=None,
    validating=None,
):
    """Raw Amadeus flight-offer dict; `via` adds a connection through that airport"""
    if via:
        segments = [
            {
                "departure": {"iataCode": origin, "at": departure},
                "arrival": {"iataCode": via, "at": departure},
                "carrierCode": carrier,
                "number": number,
                "duration": "PT1H",
                "numberOfStops": 0,
            },
            {
                "departure": {"iataCode": via, "at": arrival},
                "arrival": {"iataCode": destination, "at": arrival},
                "carrierCode": carrier,
                "number": str(int(number) + 1),
                "duration": "PT1H",
                "numberOfStops": 0,
            },
        ]
    else:
        segments = [
            {
                "departure": {"iataCode": origin, "at": departure},
                "arrival": {"iataCode": destination, "at": arrival},
                "carrierCode": carrier,
                "number": number,
                "duration": duration or "PT2H",
                "numberOfStops": stops,
            }
        ]

    return {
        "type": "flight-offer",
        "id": f"{origin}{destination}{number}",
        "itineraries": [{"duration": duration or "PT2H", "segments": segments}],
        "price": {"currency": "USD", "total": price},
        "validatingAirlineCodes": [validating or carrier],
    }


class FakeFlightClient:
    """
    Stand-in for AmadeusClient

    Offers are keyed by (origin, destination) regardless of date; every call is recorded.
    """

    def __init__(self, offers=None, failing_routes=()):
        self.offers = {}
        for route, raw_offers in (offers or {}).items():
            self.offers[route] = [FlightOffer.model_validate(raw) for raw in raw_offers]
        self.failing_routes = set(failing_routes)
        self.calls = []
        self._lock = threading.Lock()

    def search_flight_offers(self, origin, destination, departure_date):
        with self._lock:
            self.calls.append((origin, destination, departure_date))
        if (origin, destination) in self.failing_routes:
            raise ProviderFailure(f"API request failed: 500 for {origin}-{destination}")
        return list(self.offers.get((origin, destination), []))


@pytest.fixture
def start_time():
    return START


@pytest.fixture
def make_offer():
    return build_offer


@pytest.fixture
def flight_client_factory():
    return FakeFlightClient


@pytest.fixture
def round_trip_offers():
    """PUQ -> SCL -> MIA offers used by the end-to-end scenarios"""
    return {
        ("PUQ", "SCL"): [
            # Departs before PUQ's 1.5h buffer has elapsed
            build_offer("PUQ", "SCL", "2025-03-15T18:30:00", "2025-03-15T21:55:00",
                        price="65.00", number="890", duration="PT3H25M"),
            build_offer("PUQ", "SCL", "2025-03-15T20:20:00", "2025-03-15T23:45:00",
                        price="79.10", number="896", duration="PT3H25M"),
        ],
        ("SCL", "MIA"): [
            build_offer("SCL", "MIA", "2025-03-16T01:00:00", "2025-03-16T09:30:00",
                        price="450.00", number="500", duration="PT8H30M"),
            build_offer("SCL", "MIA", "2025-03-16T07:00:00", "2025-03-16T15:30:00",
                        price="300.00", number="502", duration="PT8H30M"),
        ],
    }
