"""
Duration and timestamp helpers
Provider durations use the ISO 8601 subset emitted by Amadeus (e.g. PT2H30M)
"""

import re
from datetime import datetime, timedelta, timezone

from itinerary_planner.core.exceptions import ConfigurationError, DurationParseError

_DURATION_RE = re.compile(
    r"^P(?:(?P<days>\d+)D)?"
    r"(?:T(?:(?P<hours>\d+)H)?(?:(?P<minutes>\d+)M)?(?:(?P<seconds>\d+(?:\.\d+)?)S)?)?$"
)


def parse_duration(duration_str: str) -> timedelta:
    """
    Parse an ISO 8601 duration string into a timedelta

    Args:
        duration_str: Duration such as 'PT2H30M', 'PT45M' or 'P1DT3H'

    Returns:
        Elapsed time as timedelta

    Raises:
        DurationParseError: If the string is empty or not a supported duration
    """
    if not isinstance(duration_str, str):
        raise DurationParseError(f"Duration must be a string, got {type(duration_str).__name__}")

    text = duration_str.strip().upper()
    match = _DURATION_RE.match(text)
    # Bare "P" or a trailing "T" carry no components
    if not match or text == "P" or text.endswith("T"):
        raise DurationParseError(f"Invalid duration: {duration_str!r}")

    parts = {name: float(value) for name, value in match.groupdict().items() if value}
    return timedelta(**parts)


def parse_utc(iso_value: str) -> datetime:
    """Parse an ISO timestamp, treating naive values as UTC"""
    parsed = datetime.fromisoformat(iso_value.replace("Z", "+00:00"))
    if parsed.tzinfo is None:
        return parsed.replace(tzinfo=timezone.utc)
    return parsed.astimezone(timezone.utc)


def to_iso_z(dt: datetime) -> str:
    return dt.astimezone(timezone.utc).replace(microsecond=0).isoformat().replace("+00:00", "Z")


def parse_departure_instant(departure_date: str, departure_time: str) -> datetime:
    """
    Combine request date and time into a single UTC instant

    Args:
        departure_date: Date in YYYY-MM-DD format
        departure_time: Time in HH:MM format

    Raises:
        ConfigurationError: If either part is missing or malformed
    """
    if not departure_date or not departure_time:
        raise ConfigurationError("departure_date and departure_time are required")

    try:
        naive = datetime.strptime(f"{departure_date} {departure_time}", "%Y-%m-%d %H:%M")
    except ValueError:
        raise ConfigurationError(
            f"Invalid departure '{departure_date} {departure_time}', expected YYYY-MM-DD HH:MM"
        )
    return naive.replace(tzinfo=timezone.utc)


def hours_to_timedelta(hours: float) -> timedelta:
    return timedelta(hours=hours)


def format_duration(duration: timedelta) -> str:
    """Human-readable duration, e.g. '1d 4h 05m'"""
    total_minutes = int(duration.total_seconds() // 60)
    if total_minutes <= 0:
        return "0m"

    days, remainder = divmod(total_minutes, 24 * 60)
    hours, minutes = divmod(remainder, 60)

    if days:
        return f"{days}d {hours}h {minutes:02d}m"
    if hours:
        return f"{hours}h {minutes:02d}m"
    return f"{minutes}m"
