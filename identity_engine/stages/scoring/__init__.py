"""
Recommendation scoring: weighted base scorer and the hybrid mood engine.

Public API: get_recommendations, get_enhanced_recommendations.
- core: base scorer orchestration.
- Submodules: components, reasons, hybrid.
"""

from .core import get_recommendations, score_game
from .hybrid import get_enhanced_recommendations, mood_alignment, validate_mood_combination

__all__ = [
    "get_enhanced_recommendations",
    "get_recommendations",
    "mood_alignment",
    "score_game",
    "validate_mood_combination",
]
