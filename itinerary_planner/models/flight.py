"""
Flight data models - Pydantic schemas for Amadeus offers and planned itineraries
Handles strict parsing of flight-offer payloads and the itinerary aggregates built from them
"""

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator
from typing import Optional, List, Dict, Any
from datetime import datetime, timedelta, timezone

from itinerary_planner.core.exceptions import ProviderFailure
from itinerary_planner.core.timeutils import format_duration, parse_utc, to_iso_z


class OfferEndpoint(BaseModel):
    """Departure or arrival point of an offer segment"""
    model_config = ConfigDict(populate_by_name=True, extra="allow")

    iata_code: str = Field(..., alias="iataCode")
    at: datetime = Field(..., description="Scheduled time; naive provider values are read as UTC")
    terminal: Optional[str] = None

    @field_validator("at", mode="before")
    @classmethod
    def ensure_utc(cls, v):
        if isinstance(v, str):
            return parse_utc(v)
        if not isinstance(v, datetime):
            return v
        if v.tzinfo is None:
            return v.replace(tzinfo=timezone.utc)
        return v.astimezone(timezone.utc)


class OfferSegment(BaseModel):
    """Single flown segment inside an offer itinerary"""
    model_config = ConfigDict(populate_by_name=True, extra="allow")

    departure: OfferEndpoint
    arrival: OfferEndpoint
    carrier_code: str = Field(..., alias="carrierCode")
    number: str
    duration: Optional[str] = None
    number_of_stops: int = Field(default=0, alias="numberOfStops", ge=0)

    @field_validator("number", mode="before")
    @classmethod
    def coerce_number(cls, v):
        return str(v) if isinstance(v, int) else v

    @property
    def flight_number(self) -> str:
        return f"{self.carrier_code}{self.number}"


class OfferItinerary(BaseModel):
    model_config = ConfigDict(populate_by_name=True, extra="allow")

    duration: Optional[str] = None
    segments: List[OfferSegment] = Field(default_factory=list)


class OfferPrice(BaseModel):
    model_config = ConfigDict(populate_by_name=True, extra="allow")

    total: float = Field(..., ge=0)
    currency: Optional[str] = None


class FlightOffer(BaseModel):
    """
    One priced offer from the Amadeus Flight Offers Search API
    Only the first itinerary is considered (one-way searches)
    """
    model_config = ConfigDict(populate_by_name=True, extra="allow")

    id: Optional[str] = None
    itineraries: List[OfferItinerary] = Field(default_factory=list)
    price: OfferPrice
    validating_airline_codes: List[str] = Field(default_factory=list, alias="validatingAirlineCodes")

    @property
    def segments(self) -> List[OfferSegment]:
        if not self.itineraries:
            return []
        return self.itineraries[0].segments

    def is_non_stop(self) -> bool:
        """Exactly one segment and no intermediate stops"""
        segments = self.segments
        return len(segments) == 1 and segments[0].number_of_stops == 0

    def departure_time(self) -> Optional[datetime]:
        segments = self.segments
        return segments[0].departure.at if segments else None

    def arrival_time(self) -> Optional[datetime]:
        segments = self.segments
        return segments[-1].arrival.at if segments else None

    def airline(self) -> str:
        if self.validating_airline_codes:
            return self.validating_airline_codes[0]
        segments = self.segments
        return segments[0].carrier_code if segments else "N/A"


class Leg(BaseModel):
    """
    One flight leg resolved from a provider offer
    Immutable once built
    """
    model_config = ConfigDict(frozen=True)

    origin: str = Field(..., description="3-letter IATA departure airport code")
    destination: str = Field(..., description="3-letter IATA arrival airport code")
    airline: str = Field(..., description="Validating airline code")
    flight_number: str = Field(..., description="Carrier code plus flight number, '/'-joined for connections")
    departure_time: datetime = Field(..., description="Departure (UTC)")
    arrival_time: datetime = Field(..., description="Arrival (UTC)")
    duration: timedelta = Field(..., description="Elapsed flight time")
    cost: float = Field(..., ge=0, description="Offer total price")
    stops: int = Field(default=0, ge=0, description="Intermediate stops")


class ItineraryLeg(Leg):
    """Leg plus the layover that preceded it"""

    layover: timedelta = Field(..., description="Wait between previous arrival (or start time) and this departure")
    layover_iata: str = Field(..., description="Airport where the layover happened")

    @classmethod
    def from_leg(cls, leg: Leg, layover: timedelta, layover_iata: str) -> "ItineraryLeg":
        return cls(**leg.model_dump(), layover=layover, layover_iata=layover_iata)


class Itinerary(BaseModel):
    """
    Fully resolved multi-leg itinerary

    total_travel_time = total_flight_duration + total_layover_duration + extra padding
    """

    legs: List[ItineraryLeg] = Field(default_factory=list)
    total_flight_duration: timedelta
    total_layover_duration: timedelta
    total_travel_time: timedelta
    total_cost: float = Field(..., ge=0)

    @property
    def sequence(self) -> List[str]:
        return [leg.destination for leg in self.legs]

    class Config:
        json_schema_extra = {
            "example": {
                "legs": [
                    {
                        "origin": "PUQ",
                        "destination": "SCL",
                        "airline": "LA",
                        "flight_number": "LA896",
                        "departure_time": "2025-03-15T20:20:00Z",
                        "arrival_time": "2025-03-15T23:45:00Z",
                        "duration": "PT3H25M",
                        "cost": 79.1,
                        "stops": 0,
                        "layover": "PT2H50M",
                        "layover_iata": "PUQ"
                    }
                ],
                "total_flight_duration": "PT3H25M",
                "total_layover_duration": "PT2H50M",
                "total_travel_time": "PT8H45M",
                "total_cost": 79.1
            }
        }


class PlannedItinerary(BaseModel):
    """Winning candidate sequence and its itinerary"""

    best_sequence: List[str]
    best_itinerary: Itinerary


def parse_flight_offers(raw_json: Dict[str, Any]) -> List[FlightOffer]:
    """
    Parse an Amadeus flight-offers response into FlightOffer objects

    Args:
        raw_json: Raw JSON response ({"data": [...], "meta": {...}})

    Returns:
        Offers in provider order

    Raises:
        ProviderFailure: If the payload structure is invalid
    """
    if not isinstance(raw_json, dict):
        raise ProviderFailure("Flight offers response is not a JSON object")

    data = raw_json.get("data", [])
    if data is None:
        return []
    if not isinstance(data, list):
        raise ProviderFailure("Flight offers 'data' is not a list")

    try:
        return [FlightOffer.model_validate(offer) for offer in data]
    except ValidationError as e:
        raise ProviderFailure(f"Malformed flight offer: {e.error_count()} validation error(s)") from e


def format_leg_summary(leg: Leg) -> str:
    """
    Generate a concise, human-readable leg summary

    Args:
        leg: Leg or ItineraryLeg object

    Returns:
        Formatted string with key flight information
    """
    summary = (
        f"{leg.flight_number} ({leg.airline}): "
        f"{leg.origin} → {leg.destination} | "
        f"Dep: {to_iso_z(leg.departure_time)} | "
        f"Arr: {to_iso_z(leg.arrival_time)} | "
        f"Duration: {format_duration(leg.duration)} | "
        f"Cost: {leg.cost:.2f}"
    )
    if isinstance(leg, ItineraryLeg):
        summary += f" | Layover: {format_duration(leg.layover)} at {leg.layover_iata}"
    return summary
