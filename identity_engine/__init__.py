"""
Player identity and game recommendation engine.

Single entry point for the package:
- models/: sessions, games, identities, recommendations, configs
- taxonomy/: moods, playstyles, genres, tag signals
- stages/: identity aggregation, scoring, ML, adaptive, predictive, trends
- engine: IdentityEngine facade
"""

from identity_engine.engine import IdentityEngine
from identity_engine.errors import IdentityEngineError, InvalidMoodCombinationError, MalformedSessionError
from identity_engine.models.config import DEFAULT_CONFIG, EngineConfig, resolve_config
from identity_engine.settings import EngineSettings, configure_logging, get_settings, reload_settings
from identity_engine.stages import (
    analyze_session_resonance,
    calculate_mood_forecast,
    calculate_session_resonance,
    compute_identity,
    get_enhanced_recommendations,
    get_recommendations,
    update_identity,
)
from identity_engine.state import EngineState, get_state, reset_state
from identity_engine.stores import InMemoryGameCatalog, InMemorySessionStore

__all__ = [
    "DEFAULT_CONFIG",
    "EngineConfig",
    "EngineSettings",
    "EngineState",
    "IdentityEngine",
    "IdentityEngineError",
    "InMemoryGameCatalog",
    "InMemorySessionStore",
    "InvalidMoodCombinationError",
    "MalformedSessionError",
    "analyze_session_resonance",
    "calculate_mood_forecast",
    "calculate_session_resonance",
    "compute_identity",
    "configure_logging",
    "get_enhanced_recommendations",
    "get_recommendations",
    "get_settings",
    "get_state",
    "reload_settings",
    "reset_state",
    "resolve_config",
    "update_identity",
]
