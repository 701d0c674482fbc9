"""
PlayerIdentity model — a user's aggregated profile snapshot.

Snapshots are never mutated in place; the aggregator returns a new instance
(model_copy) on every update.
"""

from datetime import datetime
from typing import Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from .session import GameSession

IDENTITY_SCHEMA_VERSION = 1


class UserMood(BaseModel):
    """A learned preference (0-100) for one mood."""

    mood_id: str
    preference: float = Field(default=50.0, ge=0, le=100)
    frequency: int = 0
    last_experienced: Optional[datetime] = None


class PlaystylePreferences(BaseModel):
    session_length: str = "medium"  # short | medium | long
    difficulty: str = "normal"  # casual | normal | hard | expert
    social_preference: str = "solo"  # solo | cooperative | competitive
    story_focus: float = Field(default=70.0, ge=0, le=100)
    graphics_focus: float = Field(default=60.0, ge=0, le=100)
    gameplay_focus: float = Field(default=80.0, ge=0, le=100)


class UserPlaystyle(BaseModel):
    primary: str = "casual"
    secondary: Optional[str] = None
    preferences: PlaystylePreferences = Field(default_factory=PlaystylePreferences)
    traits: List[str] = Field(default_factory=list)


class SessionFeatures(BaseModel):
    """Per-session behavior vector on the 1-10 mood axes."""

    energy: float = 5.0
    social: float = 5.0
    cognitive: float = 5.0
    time_commitment: float = 5.0


class PlayerIdentity(BaseModel):
    model_config = ConfigDict(extra="allow")

    id: str
    user_id: str
    moods: List[UserMood] = Field(default_factory=list)
    playstyle: UserPlaystyle = Field(default_factory=UserPlaystyle)
    genre_affinities: Dict[str, float] = Field(default_factory=dict)
    computed_mood: Optional[str] = None
    behavior_profile: SessionFeatures = Field(default_factory=SessionFeatures)
    sessions: List[GameSession] = Field(default_factory=list)
    last_updated: datetime
    version: int = IDENTITY_SCHEMA_VERSION

    @field_validator("genre_affinities")
    @classmethod
    def affinities_in_range(cls, v: Dict[str, float]) -> Dict[str, float]:
        for genre, value in v.items():
            if not 0 <= value <= 100:
                raise ValueError(f"Genre affinity for {genre!r} out of range: {value}")
        return v

    def mood_preference(self, mood_id: str) -> Optional[UserMood]:
        for mood in self.moods:
            if mood.mood_id == mood_id:
                return mood
        return None

    def average_duration_for_genre(self, genre: str) -> Optional[float]:
        durations = [
            s.duration for s in self.sessions
            if s.genre_key == genre and s.duration is not None
        ]
        if not durations:
            return None
        return sum(durations) / len(durations)
