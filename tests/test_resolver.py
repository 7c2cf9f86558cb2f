from datetime import date, datetime, timedelta, timezone

import pytest

from itinerary_planner.core.exceptions import LegNotFound, ProviderFailure
from itinerary_planner.models.request import FlightType
from itinerary_planner.services.resolver import (
    ConnectingFlightResolver,
    DirectFlightResolver,
    FlightResolver,
    build_resolver,
)

FLOOR = datetime(2025, 3, 15, 19, 0, tzinfo=timezone.utc)


def test_direct_resolver_picks_earliest_non_stop_at_or_after_floor(flight_client_factory, make_offer):
    client = flight_client_factory({("PUQ", "SCL"): [
        make_offer("PUQ", "SCL", "2025-03-15T22:00:00", "2025-03-16T01:25:00", number="900"),
        # Earlier, but not non-stop
        make_offer("PUQ", "SCL", "2025-03-15T19:10:00", "2025-03-15T23:00:00", number="700", via="PMC"),
        make_offer("PUQ", "SCL", "2025-03-15T19:20:00", "2025-03-15T22:45:00", number="702", stops=1),
        # Before the floor
        make_offer("PUQ", "SCL", "2025-03-15T18:59:00", "2025-03-15T22:24:00", number="890"),
        make_offer("PUQ", "SCL", "2025-03-15T20:20:00", "2025-03-15T23:45:00", price="79.10",
                   number="896", duration="PT3H25M"),
    ]})

    leg = DirectFlightResolver(client).lookup("PUQ", "SCL", FLOOR)

    assert leg.flight_number == "LA896"
    assert leg.airline == "LA"
    assert leg.origin == "PUQ" and leg.destination == "SCL"
    assert leg.departure_time == datetime(2025, 3, 15, 20, 20, tzinfo=timezone.utc)
    assert leg.arrival_time == datetime(2025, 3, 15, 23, 45, tzinfo=timezone.utc)
    assert leg.duration == timedelta(hours=3, minutes=25)
    assert leg.cost == pytest.approx(79.10)
    assert leg.stops == 0
    assert client.calls == [("PUQ", "SCL", date(2025, 3, 15))]


def test_departure_exactly_at_floor_qualifies(flight_client_factory, make_offer):
    client = flight_client_factory({("PUQ", "SCL"): [
        make_offer("PUQ", "SCL", "2025-03-15T19:00:00", "2025-03-15T22:25:00", number="801"),
    ]})

    assert DirectFlightResolver(client).lookup("PUQ", "SCL", FLOOR).flight_number == "LA801"


def test_ties_keep_provider_order(flight_client_factory, make_offer):
    client = flight_client_factory({("PUQ", "SCL"): [
        make_offer("PUQ", "SCL", "2025-03-15T20:00:00", "2025-03-15T23:00:00", number="111", price="300"),
        make_offer("PUQ", "SCL", "2025-03-15T20:00:00", "2025-03-15T23:00:00", number="222", price="50"),
    ]})

    assert DirectFlightResolver(client).lookup("PUQ", "SCL", FLOOR).flight_number == "LA111"


def test_never_returns_offer_before_floor(flight_client_factory, make_offer):
    client = flight_client_factory({("PUQ", "SCL"): [
        make_offer("PUQ", "SCL", "2025-03-15T06:00:00", "2025-03-15T09:25:00", number="100"),
        make_offer("PUQ", "SCL", "2025-03-15T18:00:00", "2025-03-15T21:25:00", number="101"),
    ]})
    resolver = DirectFlightResolver(client)

    with pytest.raises(LegNotFound) as excinfo:
        resolver.lookup("PUQ", "SCL", FLOOR)

    assert excinfo.value.origin == "PUQ"
    assert excinfo.value.not_before == FLOOR
    assert resolver.find_earliest_flight("PUQ", "SCL", FLOOR) is None


def test_no_offers_is_not_found(flight_client_factory):
    resolver = DirectFlightResolver(flight_client_factory())

    with pytest.raises(LegNotFound):
        resolver.lookup("PUQ", "SCL", FLOOR)


def test_provider_failure_stays_distinct_from_not_found(flight_client_factory):
    client = flight_client_factory(failing_routes=[("PUQ", "SCL")])
    resolver = DirectFlightResolver(client)

    with pytest.raises(ProviderFailure):
        resolver.lookup("PUQ", "SCL", FLOOR)

    # Collapsed for callers that only care whether a flight exists
    assert resolver.find_earliest_flight("PUQ", "SCL", FLOOR) is None
    assert len(client.calls) == 2


def test_malformed_duration_is_a_provider_failure(flight_client_factory, make_offer):
    client = flight_client_factory({("PUQ", "SCL"): [
        make_offer("PUQ", "SCL", "2025-03-15T20:00:00", "2025-03-15T23:00:00", duration="three hours"),
    ]})

    with pytest.raises(ProviderFailure):
        DirectFlightResolver(client).lookup("PUQ", "SCL", FLOOR)


def test_connecting_resolver_accepts_connections(flight_client_factory, make_offer):
    client = flight_client_factory({("PUQ", "MIA"): [
        make_offer("PUQ", "MIA", "2025-03-15T21:00:00", "2025-03-16T09:00:00", number="700",
                   via="SCL", duration="PT12H", price="640.00"),
        make_offer("PUQ", "MIA", "2025-03-15T23:00:00", "2025-03-16T08:00:00", number="900"),
    ]})

    leg = ConnectingFlightResolver(client).lookup("PUQ", "MIA", FLOOR)

    assert leg.flight_number == "LA700/LA701"
    assert leg.stops == 1
    assert leg.departure_time == datetime(2025, 3, 15, 21, 0, tzinfo=timezone.utc)
    assert leg.arrival_time == datetime(2025, 3, 16, 9, 0, tzinfo=timezone.utc)
    assert leg.duration == timedelta(hours=12)
    assert leg.cost == pytest.approx(640.0)


def test_build_resolver_strategy():
    assert isinstance(build_resolver(FlightType.DIRECT, client=None), DirectFlightResolver)
    assert isinstance(build_resolver(FlightType.CONNECTING, client=None), ConnectingFlightResolver)


def test_base_resolver_cannot_be_instantiated(flight_client_factory):
    with pytest.raises(TypeError):
        FlightResolver(flight_client_factory())
