"""
Recommendation models — request contexts and ranked results.

GameRecommendation is ephemeral: recomputed per request, never persisted.
"""

from typing import Dict, List, Optional

from pydantic import BaseModel, Field


class RecommendationContext(BaseModel):
    """
    Request context for the base scorer.

    social_context: solo | co-op | pvp (None = not considered).
    time_available: minutes (None = not considered).
    """

    current_mood: Optional[str] = None
    social_context: Optional[str] = None
    time_available: Optional[float] = None


class EnhancedRecommendationContext(RecommendationContext):
    """Context for the hybrid mood engine."""

    primary_mood: Optional[str] = None
    secondary_mood: Optional[str] = None
    intensity: float = Field(default=0.8, ge=0, le=1)
    include_hybrid_recommendations: bool = False

    @property
    def effective_primary(self) -> Optional[str]:
        return self.primary_mood or self.current_mood


class GameRecommendation(BaseModel):
    game_id: str
    name: str = ""
    genre: str = "unknown"
    score: float
    reasons: List[str] = Field(default_factory=list, max_length=3)
    mood_match: float = 50.0
    playstyle_match: float = 50.0
    social_match: float = 50.0
    estimated_playtime: float = 60.0
    difficulty: str = "Medium"
    tags: List[str] = Field(default_factory=list)


class MoodCompatibility(BaseModel):
    energy: float = 50.0
    social: float = 50.0
    cognitive: float = 50.0
    time: float = 50.0


class MoodInfluence(BaseModel):
    primary: float = 50.0
    secondary: Optional[float] = None
    genre: float = 0.0
    tags: float = 0.0
    platform: float = 0.0
    hybrid: Optional[float] = None


class MoodCombination(BaseModel):
    primary: str
    secondary: str
    synergy: float
    reasoning: str


class EnhancedGameRecommendation(GameRecommendation):
    mood_score: float = 50.0
    hybrid_score: Optional[float] = None
    mood_influence: MoodInfluence = Field(default_factory=MoodInfluence)
    mood_compatibility: MoodCompatibility = Field(default_factory=MoodCompatibility)
    mood_combination: Optional[MoodCombination] = None


class GameProfile(BaseModel):
    """Derived 1-10 game axes used for mood compatibility."""

    energy: int = 5
    social: int = 5
    cognitive: int = 5
    time: int = 5

    def axes(self) -> Dict[str, int]:
        return {"energy": self.energy, "social": self.social, "cognitive": self.cognitive, "time": self.time}
