"""
Adaptive persona models — mood selection events, user actions, learned
weights, mood rhythms and suggestions.

MoodSelectionEvent.outcomes is the only mutable block: later UserActions
referencing the event update its counters.
"""

from datetime import datetime
from typing import Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field

from .identity import PlayerIdentity

TIME_BUCKETS = ("morning", "afternoon", "evening", "night")
ACTION_TYPES = ("launch", "ignore", "rate", "switch_mood", "session_complete")


class MoodSelectionContext(BaseModel):
    time_of_day: Optional[str] = None
    day_of_week: Optional[int] = Field(default=None, ge=0, le=6)
    trigger: str = "manual"  # manual | suggested | auto
    previous_mood: Optional[str] = None
    session_length: Optional[float] = None


class MoodOutcomes(BaseModel):
    games_recommended: int = Field(default=0, ge=0)
    games_launched: int = Field(default=0, ge=0)
    ignored_recommendations: int = Field(default=0, ge=0)
    average_session_duration: Optional[float] = None
    user_rating: Optional[float] = Field(default=None, ge=1, le=5)

    @property
    def launch_rate(self) -> float:
        return self.games_launched / max(self.games_recommended, 1)


class MoodSelectionEvent(BaseModel):
    model_config = ConfigDict(validate_assignment=True)

    id: str
    user_id: str
    primary_mood: str = Field(min_length=1, pattern=r"\S")
    secondary_mood: Optional[str] = None
    intensity: float = Field(default=0.8, ge=0, le=1)
    timestamp: datetime
    context: MoodSelectionContext = Field(default_factory=MoodSelectionContext)
    outcomes: MoodOutcomes = Field(default_factory=MoodOutcomes)


class ActionMetadata(BaseModel):
    model_config = ConfigDict(extra="allow")

    session_duration: Optional[float] = None
    rating: Optional[float] = Field(default=None, ge=1, le=5)
    reason: Optional[str] = None
    previous_mood: Optional[str] = None


class UserAction(BaseModel):
    id: str
    user_id: str
    type: str = Field(pattern="^(launch|ignore|rate|switch_mood|session_complete)$")
    game_id: Optional[str] = None
    game_title: Optional[str] = None
    mood_context: Optional[str] = None
    timestamp: datetime
    metadata: ActionMetadata = Field(default_factory=ActionMetadata)


class DynamicMoodWeights(BaseModel):
    """Learned weights for one mood; starts from the static taxonomy."""

    mood_id: str
    genre_weights: Dict[str, float] = Field(default_factory=dict)
    tag_weights: Dict[str, float] = Field(default_factory=dict)
    platform_biases: Dict[str, float] = Field(default_factory=dict)
    time_preferences: Dict[str, float] = Field(
        default_factory=lambda: {bucket: 0.5 for bucket in TIME_BUCKETS}
    )
    confidence: float = Field(default=0.1, ge=0, le=1)
    sample_size: int = 0
    last_updated: Optional[datetime] = None


class MoodPatterns(BaseModel):
    """Per-user mood rhythms; values are mood ids in arrival order."""

    daily_rhythm: Dict[str, List[str]] = Field(default_factory=dict)
    weekly_patterns: Dict[int, List[str]] = Field(default_factory=dict)
    contextual_triggers: Dict[str, str] = Field(default_factory=dict)


class AdaptationMetrics(BaseModel):
    learning_rate: float = 0.05
    prediction_accuracy: float = 0.3
    user_satisfaction_score: float = 0.6
    last_adaptation: Optional[datetime] = None


class EnhancedPlayerIdentity(BaseModel):
    """Deep-copied snapshot returned after processing a mood selection."""

    user_id: str
    identity: Optional[PlayerIdentity] = None
    mood_history: List[MoodSelectionEvent] = Field(default_factory=list)
    dynamic_mood_weights: Dict[str, DynamicMoodWeights] = Field(default_factory=dict)
    mood_patterns: MoodPatterns = Field(default_factory=MoodPatterns)
    hybrid_mood_preferences: Dict[str, float] = Field(default_factory=dict)
    adaptation_metrics: AdaptationMetrics = Field(default_factory=AdaptationMetrics)


class MoodSuggestionContext(BaseModel):
    """current_time or time_of_day selects the rhythm bucket; current_mood drives trigger lookups."""

    current_time: Optional[datetime] = None
    time_of_day: Optional[str] = None
    day_of_week: Optional[int] = Field(default=None, ge=0, le=6)
    social_context: Optional[str] = None  # solo | co-op | pvp
    current_mood: Optional[str] = None


class MoodSuggestion(BaseModel):
    mood_id: str
    secondary_mood: Optional[str] = None
    confidence: float = Field(ge=0, le=1)
    reasoning: str
    contextual_factors: List[str] = Field(default_factory=list)
