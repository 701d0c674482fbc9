"""
Behavior pattern and predictive suggestion models.

BehaviorPattern is a per-user aggregate updated incrementally per session;
the derived ratios (likelihood, frequency, completion rate) are computed
from raw counts on read.
"""

from datetime import datetime
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, Field

from .session import GameSession


class TimePattern(BaseModel):
    hour: int = Field(ge=0, le=23)
    day_of_week: int = Field(ge=0, le=6)
    count: int = 0
    genre_counts: Dict[str, int] = Field(default_factory=dict)
    total_duration: float = 0.0

    @property
    def average_session_length(self) -> float:
        return self.total_duration / max(self.count, 1)

    def preferred_genres(self, limit: int = 3) -> List[str]:
        ranked = sorted(self.genre_counts.items(), key=lambda kv: kv[1], reverse=True)
        return [g for g, _ in ranked[:limit]]


class SessionLengthPattern(BaseModel):
    average_duration: float
    mood: Optional[str] = None
    count: int = 0
    completed_count: int = 0
    genre_counts: Dict[str, int] = Field(default_factory=dict)

    @property
    def completion_rate(self) -> float:
        return self.completed_count / max(self.count, 1)


class GenreSequence(BaseModel):
    sequence: List[str]
    count: int = 0
    next_genres: Dict[str, int] = Field(default_factory=dict)
    last_seen: Optional[datetime] = None

    def common_next_genres(self, limit: int = 3) -> List[str]:
        ranked = sorted(self.next_genres.items(), key=lambda kv: kv[1], reverse=True)
        return [g for g, _ in ranked[:limit]]


class MoodTransition(BaseModel):
    from_mood: str
    to_mood: str
    count: int = 0
    trigger_games: List[str] = Field(default_factory=list)
    total_gap_minutes: float = 0.0
    probability: float = 0.0

    @property
    def average_gap_minutes(self) -> float:
        return self.total_gap_minutes / max(self.count, 1)


class DevicePattern(BaseModel):
    platform: str
    session_count: int = 0
    genre_counts: Dict[str, int] = Field(default_factory=dict)
    hour_counts: Dict[int, int] = Field(default_factory=dict)
    total_duration: float = 0.0

    @property
    def average_session_length(self) -> float:
        return self.total_duration / max(self.session_count, 1)


class BehaviorPattern(BaseModel):
    user_id: str
    total_sessions: int = 0
    time_patterns: Dict[str, TimePattern] = Field(default_factory=dict)
    session_length_patterns: List[SessionLengthPattern] = Field(default_factory=list)
    genre_sequences: Dict[str, GenreSequence] = Field(default_factory=dict)
    mood_transitions: Dict[str, MoodTransition] = Field(default_factory=dict)
    device_patterns: Dict[str, DevicePattern] = Field(default_factory=dict)
    genre_counts: Dict[str, int] = Field(default_factory=dict)
    recent_genres: List[str] = Field(default_factory=list)
    last_session: Optional[GameSession] = None
    last_updated: Optional[datetime] = None

    def time_likelihood(self, pattern: TimePattern) -> float:
        return pattern.count / max(self.total_sessions, 1)

    def sequence_frequency(self, sequence: GenreSequence) -> float:
        return sequence.count / max(self.total_sessions, 1)


class PredictiveContext(BaseModel):
    """
    Request context for predictive suggestions.

    energy_level: 0-100 (None = unknown). social_context: solo | co-op | pvp.
    """

    timestamp: datetime
    available_time: Optional[float] = None
    current_mood: Optional[str] = None
    recent_sessions: List[GameSession] = Field(default_factory=list)
    device: Optional[str] = None
    social_context: Optional[str] = None
    energy_level: Optional[float] = Field(default=None, ge=0, le=100)


class FitScores(BaseModel):
    time: float = 0.5
    mood: float = 0.5
    energy: float = 0.5
    social: float = 0.5
    sequence: float = 0.5

    def average(self) -> float:
        return (self.time + self.mood + self.energy + self.social + self.sequence) / 5


class PredictiveSuggestion(BaseModel):
    game_id: str
    name: str = ""
    genre: str = ""
    confidence: float = Field(ge=0, le=1)
    predicted_satisfaction: float = Field(default=0.5, ge=0, le=1)
    fit_scores: FitScores = Field(default_factory=FitScores)
    reasoning: List[str] = Field(default_factory=list)
    estimated_playtime: float = 60.0
    alternatives: List[str] = Field(default_factory=list)


class PredictiveInsight(BaseModel):
    type: str = Field(pattern="^(pattern|anomaly|trend|recommendation)$")
    title: str
    description: str
    confidence: float = Field(ge=0, le=1)
    actionable: bool = False
    data: Dict[str, Any] = Field(default_factory=dict)


class NextGamePrediction(BaseModel):
    next_genre: Optional[str] = None
    game_id: Optional[str] = None
    confidence: float = 0.0
    reasoning: str = ""
    matched_sequence: List[str] = Field(default_factory=list)
