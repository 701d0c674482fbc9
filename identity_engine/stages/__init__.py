"""
Engine stages.

- traits / playstyle / identity: identity aggregation.
- scoring: base scorer and hybrid mood engine.
- ml: collaborative + content-based recommender.
- adaptive: online mood weight learning.
- predictive: behavior patterns, suggestions and insights.
- trends / resonance: mood forecast and session resonance analysis.
"""

from .adaptive import AdaptivePersonaIntegration
from .identity import compute_identity, update_identity, update_mood_preference
from .ml import MLRecommendationEngine
from .predictive import PredictiveSuggestionEngine, get_predictive_insights
from .resonance import analyze_session_resonance, calculate_session_resonance
from .scoring import get_enhanced_recommendations, get_recommendations
from .trends import calculate_mood_forecast

__all__ = [
    "AdaptivePersonaIntegration",
    "MLRecommendationEngine",
    "PredictiveSuggestionEngine",
    "analyze_session_resonance",
    "calculate_mood_forecast",
    "calculate_session_resonance",
    "compute_identity",
    "get_enhanced_recommendations",
    "get_predictive_insights",
    "get_recommendations",
    "update_identity",
    "update_mood_preference",
]
