"""
Score helpers — clamping and time utilities shared by every stage.
"""

from datetime import datetime, timezone
from typing import Optional


def clamp(value: float, low: float = 0.0, high: float = 100.0) -> float:
    return max(low, min(high, value))


def as_utc(dt: datetime) -> datetime:
    """Naive datetimes are treated as UTC."""
    if dt.tzinfo is None:
        return dt.replace(tzinfo=timezone.utc)
    return dt.astimezone(timezone.utc)


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def minutes_between(earlier: datetime, later: datetime) -> float:
    return (as_utc(later) - as_utc(earlier)).total_seconds() / 60.0


def time_of_day_bucket(dt: datetime) -> str:
    """6-12 morning, 12-18 afternoon, 18-22 evening, otherwise night."""
    hour = dt.hour
    if 6 <= hour < 12:
        return "morning"
    if 12 <= hour < 18:
        return "afternoon"
    if 18 <= hour < 22:
        return "evening"
    return "night"


def round_to_minute(dt: datetime) -> datetime:
    return dt.replace(second=0, microsecond=0)


def session_minutes(duration: Optional[float], default: float = 60.0) -> float:
    return duration if duration is not None else default
