"""
Per-user engine state and the prediction TTL cache.

EngineState holds the only mutable data the engine keeps between calls:
adaptive mood state and behavior patterns, keyed by user id and populated
lazily. Components receive an EngineState explicitly; get_state() returns the
process-wide default. Same-user updates must be serialized by the caller.
"""

import time
from typing import Any, Callable, Dict, Generic, Hashable, List, Optional, Tuple, TypeVar

from pydantic import BaseModel, Field

from identity_engine.models.mood_events import (
    AdaptationMetrics,
    DynamicMoodWeights,
    MoodPatterns,
    MoodSelectionEvent,
)
from identity_engine.models.patterns import BehaviorPattern

V = TypeVar("V")


class TTLCache(Generic[V]):
    """
    Keyed cache whose entries expire ttl_seconds after being set.

    Keys are tuples whose first element is the user id, so a user's entries
    can be dropped with invalidate_user(). Expired entries are evicted on read
    and on every set(), so the cache holds at most the keys written within
    one TTL.
    """

    def __init__(self, ttl_seconds: float = 300.0, clock: Callable[[], float] = time.monotonic):
        self.ttl_seconds = ttl_seconds
        self._clock = clock
        self._entries: Dict[Tuple[Hashable, ...], Tuple[float, V]] = {}

    def get(self, key: Tuple[Hashable, ...]) -> Optional[V]:
        entry = self._entries.get(key)
        if entry is None:
            return None
        expires_at, value = entry
        if self._clock() >= expires_at:
            del self._entries[key]
            return None
        return value

    def set(self, key: Tuple[Hashable, ...], value: V) -> None:
        self.purge_expired()
        self._entries[key] = (self._clock() + self.ttl_seconds, value)

    def invalidate_user(self, user_id: str) -> int:
        """Drop every entry for user_id. Returns the number removed."""
        keys = [k for k in self._entries if k and k[0] == user_id]
        for key in keys:
            del self._entries[key]
        return len(keys)

    def purge_expired(self) -> int:
        now = self._clock()
        expired = [k for k, (expires_at, _) in self._entries.items() if now >= expires_at]
        for key in expired:
            del self._entries[key]
        return len(expired)

    def clear(self) -> None:
        self._entries.clear()

    def __len__(self) -> int:
        return len(self._entries)


class AdaptiveUserState(BaseModel):
    """Learned mood state for one user."""

    user_id: str
    mood_history: List[MoodSelectionEvent] = Field(default_factory=list)
    dynamic_mood_weights: Dict[str, DynamicMoodWeights] = Field(default_factory=dict)
    mood_patterns: MoodPatterns = Field(default_factory=MoodPatterns)
    hybrid_mood_preferences: Dict[str, float] = Field(default_factory=dict)
    adaptation_metrics: AdaptationMetrics = Field(default_factory=AdaptationMetrics)


class EngineState:
    """Process-wide keyed state, initially empty."""

    def __init__(self, cache_ttl_seconds: float = 300.0, clock: Callable[[], float] = time.monotonic):
        self.adaptive: Dict[str, AdaptiveUserState] = {}
        self.behavior_patterns: Dict[str, BehaviorPattern] = {}
        self.prediction_cache: TTLCache[Any] = TTLCache(cache_ttl_seconds, clock)

    def adaptive_state(self, user_id: str) -> AdaptiveUserState:
        """Return the user's adaptive state, creating it on first use."""
        state = self.adaptive.get(user_id)
        if state is None:
            state = AdaptiveUserState(user_id=user_id)
            self.adaptive[user_id] = state
        return state

    def behavior_pattern(self, user_id: str) -> Optional[BehaviorPattern]:
        return self.behavior_patterns.get(user_id)

    def set_behavior_pattern(self, user_id: str, pattern: BehaviorPattern) -> None:
        self.behavior_patterns[user_id] = pattern
        self.prediction_cache.invalidate_user(user_id)

    def reset_user(self, user_id: str) -> None:
        self.adaptive.pop(user_id, None)
        self.behavior_patterns.pop(user_id, None)
        self.prediction_cache.invalidate_user(user_id)


_state: Optional[EngineState] = None


def get_state() -> EngineState:
    """Return the process-wide EngineState (created lazily)."""
    global _state
    if _state is None:
        _state = EngineState()
    return _state


def reset_state() -> EngineState:
    """Replace the process-wide EngineState with an empty one."""
    global _state
    _state = EngineState()
    return _state
