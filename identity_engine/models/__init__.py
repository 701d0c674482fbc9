"""Data models for the identity engine."""

from .config import (
    DEFAULT_CONFIG,
    DEFAULT_IDENTITY_OPTIONS,
    AdaptiveConfig,
    EngineConfig,
    HybridConfig,
    IdentityComputationOptions,
    MLModelConfig,
    PredictiveConfig,
    ScoringConfig,
    resolve_config,
)
from .game import Game, ensure_games
from .identity import PlayerIdentity, PlaystylePreferences, SessionFeatures, UserMood, UserPlaystyle
from .mood import Mood, PlaystyleArchetype
from .mood_events import (
    AdaptationMetrics,
    DynamicMoodWeights,
    EnhancedPlayerIdentity,
    MoodOutcomes,
    MoodPatterns,
    MoodSelectionContext,
    MoodSelectionEvent,
    MoodSuggestion,
    MoodSuggestionContext,
    UserAction,
)
from .patterns import (
    BehaviorPattern,
    FitScores,
    NextGamePrediction,
    PredictiveContext,
    PredictiveInsight,
    PredictiveSuggestion,
)
from .recommendation import (
    EnhancedGameRecommendation,
    EnhancedRecommendationContext,
    GameProfile,
    GameRecommendation,
    RecommendationContext,
)
from .resonance import (
    MoodForecast,
    MoodPrediction,
    MoodPreferenceSample,
    ResonanceAnalysis,
    SessionEngagement,
    SessionResonance,
)
from .session import GameSession, ensure_sessions

__all__ = [
    "DEFAULT_CONFIG",
    "DEFAULT_IDENTITY_OPTIONS",
    "AdaptationMetrics",
    "AdaptiveConfig",
    "BehaviorPattern",
    "DynamicMoodWeights",
    "EngineConfig",
    "EnhancedGameRecommendation",
    "EnhancedPlayerIdentity",
    "EnhancedRecommendationContext",
    "FitScores",
    "Game",
    "GameProfile",
    "GameRecommendation",
    "GameSession",
    "HybridConfig",
    "IdentityComputationOptions",
    "MLModelConfig",
    "Mood",
    "MoodForecast",
    "MoodOutcomes",
    "MoodPatterns",
    "MoodPrediction",
    "MoodPreferenceSample",
    "MoodSelectionContext",
    "MoodSelectionEvent",
    "MoodSuggestion",
    "MoodSuggestionContext",
    "NextGamePrediction",
    "PlayerIdentity",
    "PlaystyleArchetype",
    "PlaystylePreferences",
    "PredictiveConfig",
    "PredictiveContext",
    "PredictiveInsight",
    "PredictiveSuggestion",
    "RecommendationContext",
    "ResonanceAnalysis",
    "ScoringConfig",
    "SessionEngagement",
    "SessionFeatures",
    "SessionResonance",
    "UserAction",
    "UserMood",
    "UserPlaystyle",
    "ensure_games",
    "ensure_sessions",
    "resolve_config",
]
