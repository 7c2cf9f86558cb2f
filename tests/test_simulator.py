from datetime import date, datetime, timedelta, timezone

import pytest

from itinerary_planner.core.config import DEFAULT_CONNECTION_BUFFERS
from itinerary_planner.core.exceptions import InfeasibleItinerary, LegNotFound, ProviderFailure
from itinerary_planner.services.resolver import DirectFlightResolver
from itinerary_planner.services.simulator import ItinerarySimulator


def _simulator(client, **kwargs):
    kwargs.setdefault("connection_buffers", DEFAULT_CONNECTION_BUFFERS)
    return ItinerarySimulator(DirectFlightResolver(client), **kwargs)


def test_simulate_chains_legs_with_connection_buffers(flight_client_factory, round_trip_offers, start_time):
    client = flight_client_factory(round_trip_offers)

    itinerary = _simulator(client).simulate("PUQ", ["SCL", "MIA"], start_time)

    first, second = itinerary.legs
    # PUQ buffer 1.5h: floor 19:00, the 18:30 departure is skipped
    assert first.flight_number == "LA896"
    assert first.layover == timedelta(hours=2, minutes=50)
    assert first.layover_iata == "PUQ"
    # SCL buffer 0.5h after the 23:45 arrival: floor 00:15 next day
    assert second.flight_number == "LA500"
    assert second.origin == "SCL" and second.destination == "MIA"
    assert second.layover == timedelta(hours=1, minutes=15)
    assert second.layover_iata == "SCL"

    assert client.calls == [
        ("PUQ", "SCL", date(2025, 3, 15)),
        ("SCL", "MIA", date(2025, 3, 16)),
    ]
    assert itinerary.sequence == ["SCL", "MIA"]
    assert itinerary.total_cost == pytest.approx(79.10 + 450.00)
    assert itinerary.total_flight_duration == timedelta(hours=11, minutes=55)
    assert itinerary.total_layover_duration == timedelta(hours=4, minutes=5)


def test_total_travel_time_identity(flight_client_factory, round_trip_offers, start_time):
    itinerary = _simulator(
        flight_client_factory(round_trip_offers), extra_travel_time_hours=2.5
    ).simulate("PUQ", ["SCL", "MIA"], start_time)

    assert itinerary.total_travel_time == (
        itinerary.total_flight_duration + itinerary.total_layover_duration + timedelta(hours=2.5)
    )
    assert itinerary.total_travel_time == timedelta(hours=18, minutes=30)


def test_leg_invariants(flight_client_factory, round_trip_offers, start_time):
    sequence = ["SCL", "MIA"]
    itinerary = _simulator(flight_client_factory(round_trip_offers)).simulate("PUQ", sequence, start_time)

    assert len(itinerary.legs) == len(sequence)
    for index, leg in enumerate(itinerary.legs):
        expected_origin = "PUQ" if index == 0 else sequence[index - 1]
        assert leg.origin == expected_origin
        assert leg.destination == sequence[index]
        assert leg.layover >= timedelta(0)


def test_stops_at_first_infeasible_leg(flight_client_factory, round_trip_offers, start_time):
    offers = {("PUQ", "SCL"): round_trip_offers[("PUQ", "SCL")]}
    client = flight_client_factory(offers)

    with pytest.raises(InfeasibleItinerary) as excinfo:
        _simulator(client).simulate("PUQ", ["SCL", "MIA", "MAD"], start_time)

    assert [(origin, destination) for origin, destination, _ in client.calls] == [
        ("PUQ", "SCL"),
        ("SCL", "MIA"),
    ]
    assert excinfo.value.origin == "SCL"
    assert excinfo.value.destination == "MIA"
    assert excinfo.value.sequence == ("SCL", "MIA", "MAD")
    assert isinstance(excinfo.value.__cause__, LegNotFound)


def test_provider_failure_makes_sequence_infeasible(flight_client_factory, start_time):
    client = flight_client_factory(failing_routes=[("PUQ", "SCL")])

    with pytest.raises(InfeasibleItinerary) as excinfo:
        _simulator(client).simulate("PUQ", ["SCL", "MIA"], start_time)

    assert isinstance(excinfo.value.__cause__, ProviderFailure)
    assert len(client.calls) == 1


def test_unknown_airport_uses_default_buffer(flight_client_factory, make_offer, start_time):
    client = flight_client_factory({("XYZ", "SCL"): [
        # 1h59 after start: inside the 2h default buffer
        make_offer("XYZ", "SCL", "2025-03-15T19:29:00", "2025-03-15T21:00:00", number="100"),
        make_offer("XYZ", "SCL", "2025-03-15T19:30:00", "2025-03-15T21:00:00", number="101"),
    ]})
    simulator = _simulator(client, default_buffer_hours=2.0)

    assert simulator.connection_buffer("XYZ") == timedelta(hours=2)
    assert simulator.connection_buffer("scl") == timedelta(minutes=30)

    itinerary = simulator.simulate("XYZ", ["SCL"], start_time)
    assert itinerary.legs[0].flight_number == "LA101"
    assert itinerary.legs[0].layover == timedelta(hours=2)


def test_empty_sequence_is_only_padding(flight_client_factory, start_time):
    client = flight_client_factory()
    itinerary = _simulator(client, extra_travel_time_hours=1).simulate("PUQ", [], start_time)

    assert itinerary.legs == []
    assert itinerary.total_travel_time == timedelta(hours=1)
    assert itinerary.total_cost == 0
    assert client.calls == []


def test_simulation_is_deterministic(flight_client_factory, round_trip_offers, start_time):
    simulator = _simulator(flight_client_factory(round_trip_offers))

    assert simulator.simulate("PUQ", ["SCL", "MIA"], start_time) == \
        simulator.simulate("PUQ", ["SCL", "MIA"], start_time)
