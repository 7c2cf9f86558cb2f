"""
Request models - Pydantic schemas for flight search input validation
"""

from enum import Enum
from pydantic import BaseModel, Field, ValidationError, field_validator
from typing import Optional
from datetime import datetime

from itinerary_planner.core.exceptions import ConfigurationError
from itinerary_planner.core.timeutils import parse_departure_instant


class FlightType(str, Enum):
    """Leg-resolution strategy"""
    DIRECT = "direct"
    CONNECTING = "connecting"


class FlightSearchQuery(BaseModel):
    """
    Itinerary search request built from /flights query parameters
    """

    start_origin: str = Field(
        ...,
        description="3-letter IATA code of the starting airport"
    )
    departure_date: str = Field(
        ...,
        description="Earliest departure date in format YYYY-MM-DD (UTC)"
    )
    departure_time: str = Field(
        ...,
        description="Earliest departure time in format HH:MM (UTC)"
    )
    flight_type: FlightType = Field(
        default=FlightType.DIRECT,
        description="'direct' for non-stop legs only; any other value allows connections"
    )
    email: Optional[str] = Field(
        None,
        description="Recipient for the itinerary report"
    )

    @field_validator('start_origin')
    @classmethod
    def validate_start_origin(cls, v):
        """Validate IATA airport code"""
        code = v.strip().upper()
        if len(code) != 3 or not code.isalpha():
            raise ValueError(f"Invalid start_origin '{v}', expected a 3-letter IATA code")
        return code

    @field_validator('flight_type', mode='before')
    @classmethod
    def normalize_flight_type(cls, v):
        """Anything other than 'direct' selects the connecting strategy"""
        if v is None or v == "":
            return FlightType.DIRECT
        if isinstance(v, FlightType):
            return v
        return FlightType.DIRECT if str(v).strip().lower() == "direct" else FlightType.CONNECTING

    @field_validator('email')
    @classmethod
    def normalize_email(cls, v):
        """Blank means no report; the address itself is checked at send time"""
        if v is None or not v.strip():
            return None
        return v.strip()

    @classmethod
    def from_params(
        cls,
        start_origin: Optional[str],
        departure_date: Optional[str],
        departure_time: Optional[str],
        flight_type: Optional[str] = None,
        email: Optional[str] = None
    ) -> "FlightSearchQuery":
        """
        Build a query from raw request parameters

        Raises:
            ConfigurationError: If a required parameter is missing or invalid
        """
        if not start_origin:
            raise ConfigurationError("start_origin is required")
        try:
            query = cls(
                start_origin=start_origin,
                departure_date=departure_date or "",
                departure_time=departure_time or "",
                flight_type=flight_type,
                email=email
            )
        except ValidationError as e:
            messages = "; ".join(error["msg"] for error in e.errors())
            raise ConfigurationError(messages) from e

        # Fail early on an unparseable date/time
        query.departure_instant()
        return query

    def departure_instant(self) -> datetime:
        """Combined UTC start instant"""
        return parse_departure_instant(self.departure_date, self.departure_time)

    class Config:
        json_schema_extra = {
            "example": {
                "start_origin": "PUQ",
                "departure_date": "2025-03-15",
                "departure_time": "17:30",
                "flight_type": "direct",
                "email": "traveler@example.com"
            }
        }
