"""Mood trend forecast and session resonance models."""

from datetime import datetime
from typing import Dict, List, Optional

from pydantic import BaseModel, Field


class MoodPreferenceSample(BaseModel):
    """One observed preference (0-100) for a mood at a point in time."""

    mood_id: str
    preference: float = Field(ge=0, le=100)
    timestamp: datetime


class MoodTrend(BaseModel):
    mood_id: str
    direction: str  # increasing | decreasing | stable
    change_rate: float
    confidence: float = Field(ge=0, le=1)
    sample_count: int
    latest_preference: float
    predicted_preference: float = Field(ge=0, le=100)


class MoodPrediction(BaseModel):
    predicted_mood: str
    confidence: float = Field(ge=0, le=1)


class MoodForecast(BaseModel):
    trends: List[MoodTrend] = Field(default_factory=list)
    volatility: float = Field(default=0.0, ge=0, le=1)
    primary_forecast: Optional[MoodPrediction] = None


class SessionEngagement(BaseModel):
    """Observed session facts used for resonance."""

    duration: Optional[float] = None  # minutes
    engagement: Optional[float] = Field(default=None, ge=0, le=100)
    actual_accuracy: Optional[float] = Field(default=None, ge=0, le=1)


class ResonanceFactors(BaseModel):
    mood_alignment: float
    duration_fit: float
    engagement_correlation: float


class SessionResonance(BaseModel):
    session_id: str
    user_id: str
    predicted_mood: str
    actual_mood: str
    resonance_score: float = Field(ge=0, le=1)
    prediction_confidence: float = Field(ge=0, le=1)
    confidence_delta: float = Field(ge=0, le=1)
    factors: ResonanceFactors
    session_duration: Optional[float] = None
    engagement: Optional[float] = None
    timestamp: datetime

    @property
    def correct(self) -> bool:
        return self.predicted_mood == self.actual_mood


class MoodAccuracy(BaseModel):
    mood_id: str
    accuracy: float
    sample_count: int


class ResonanceInsights(BaseModel):
    best_predicted_moods: List[MoodAccuracy] = Field(default_factory=list)
    worst_predicted_moods: List[MoodAccuracy] = Field(default_factory=list)
    optimal_session_length: Dict[str, float] = Field(default_factory=dict)
    engagement_patterns: Dict[str, float] = Field(default_factory=dict)


class ResonanceAnalysis(BaseModel):
    session_count: int = 0
    average_resonance: float = 0.0
    mood_accuracy: Dict[str, float] = Field(default_factory=dict)
    trend: str = "stable"  # improving | stable | declining
    insights: ResonanceInsights = Field(default_factory=ResonanceInsights)
