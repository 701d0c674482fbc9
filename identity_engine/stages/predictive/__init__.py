"""
Predictive pattern engine.

- patterns: behavior pattern mining (time, length, sequences, transitions, devices).
- engine: PredictiveSuggestionEngine (fit scoring, cache, next-game prediction).
- insights: pattern/anomaly/trend/recommendation insights.
"""

from .engine import PredictiveSuggestionEngine
from .insights import get_predictive_insights
from .patterns import build_pattern, record_session

__all__ = [
    "PredictiveSuggestionEngine",
    "build_pattern",
    "get_predictive_insights",
    "record_session",
]
