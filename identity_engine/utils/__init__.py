"""Shared utilities for scoring, time bucketing and similarity."""

from .scores import (
    as_utc,
    clamp,
    minutes_between,
    round_to_minute,
    session_minutes,
    time_of_day_bucket,
    utc_now,
)
from .similarity import cosine_similarity, pearson_similarity

__all__ = [
    "as_utc",
    "clamp",
    "cosine_similarity",
    "minutes_between",
    "pearson_similarity",
    "round_to_minute",
    "session_minutes",
    "time_of_day_bucket",
    "utc_now",
]
