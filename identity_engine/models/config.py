"""
Engine configuration — identity computation, scoring, hybrid, ML, adaptive
and predictive parameters.

Defaults are defined here. Settings may pass a dict (e.g. from a JSON file
named by IDENTITY_ENGINE_CONFIG_PATH); EngineConfig.from_dict() merges it
with these defaults section by section.
"""

from typing import Dict, Optional

from pydantic import BaseModel, Field, model_validator


class IdentityComputationOptions(BaseModel):
    """Options for compute_identity()."""

    # Recency decay base for the computed mood: weight = recent_session_weight ** rank
    recent_session_weight: float = Field(default=0.7, gt=0, le=1)

    # Sessions older than this many days are ignored. None disables the filter.
    mood_decay_days: Optional[int] = 30

    # Below this many usable sessions the default identity is returned.
    min_sessions_for_computation: int = 5

    # When False, sessions rated below 2 are dropped before computation.
    include_negative_sessions: bool = True


class ScoringConfig(BaseModel):
    """Base scorer weights and limits."""

    # -------------------------------------------------------------------------
    # Component weights (must sum to 1.0)
    # score = base + Σ (component - 50) * weight
    # -------------------------------------------------------------------------

    weight_mood: float = 0.30
    weight_playstyle: float = 0.25
    weight_genre: float = 0.20
    weight_social: float = 0.15
    weight_time: float = 0.10

    base_score: float = 50.0

    # Games scoring below this are excluded.
    min_score_threshold: float = 20.0
    max_recommendations: int = 20

    # Score above which "Highly personalized match" is added as a reason.
    personalized_reason_threshold: float = 80.0
    max_reasons: int = 3

    @model_validator(mode="after")
    def weights_sum_to_one(self):
        total = (
            self.weight_mood + self.weight_playstyle + self.weight_genre
            + self.weight_social + self.weight_time
        )
        if abs(total - 1.0) > 0.01:
            raise ValueError(f"Scoring weights must sum to 1.0, got {total}")
        return self


class HybridConfig(BaseModel):
    """Hybrid mood engine limits."""

    min_score_threshold: float = 30.0
    max_recommendations: int = 20
    default_intensity: float = Field(default=0.8, ge=0, le=1)

    # Share of the synergy score blended into the ranking score when
    # include_hybrid_recommendations is set.
    hybrid_weight: float = Field(default=0.2, ge=0, le=1)


class MLModelConfig(BaseModel):
    """Lightweight ML engine weights (must sum to 1.0) and fallback settings."""

    collaborative_weight: float = 0.4
    content_weight: float = 0.3
    mood_weight: float = 0.2
    playstyle_weight: float = 0.1

    # Minimum total tracked playtime (minutes) before ML scoring is used.
    min_data_points: float = 5

    max_recommendations: int = 10

    # Seed for the fallback scorer. None = nondeterministic.
    fallback_seed: Optional[int] = None
    fallback_score_min: float = 0.5
    fallback_score_max: float = 1.0

    @model_validator(mode="after")
    def weights_sum_to_one(self):
        total = (
            self.collaborative_weight + self.content_weight
            + self.mood_weight + self.playstyle_weight
        )
        if abs(total - 1.0) > 0.01:
            raise ValueError(f"ML weights must sum to 1.0, got {total}")
        if self.fallback_score_min > self.fallback_score_max:
            raise ValueError("fallback_score_min must not exceed fallback_score_max")
        return self


class AdaptiveConfig(BaseModel):
    """Online weight learning for moods."""

    initial_confidence: float = 0.1
    max_confidence: float = 0.9
    # confidence = min(max_confidence, initial_confidence + sample_size * confidence_per_sample)
    confidence_per_sample: float = 0.01

    # learning_rate = min(max_learning_rate, base_learning_rate + history_len / learning_rate_divisor)
    base_learning_rate: float = 0.05
    max_learning_rate: float = 0.3
    learning_rate_divisor: float = 200.0

    launch_rate_weight: float = 0.6
    satisfaction_weight: float = 0.4
    neutral_rating: float = 3.0

    max_mood_suggestions: int = 3
    personalized_score_threshold: float = 60.0
    max_personalized_recommendations: int = 10


class PredictiveConfig(BaseModel):
    """Predictive pattern engine."""

    cache_ttl_seconds: float = 300.0
    min_confidence: float = 0.3
    max_suggestions: int = 10
    fallback_count: int = 5

    hour_window: int = 2
    session_length_tolerance: float = 30.0
    max_sequence_length: int = 3
    recent_genre_window: int = 10
    max_trigger_games: int = 10

    peak_hour_ratio: float = 0.7
    sequence_insight_threshold: float = 0.3
    anomaly_likelihood_threshold: float = 0.05
    min_sessions_for_trend: int = 5


class EngineConfig(BaseModel):
    identity: IdentityComputationOptions = Field(default_factory=IdentityComputationOptions)
    scoring: ScoringConfig = Field(default_factory=ScoringConfig)
    hybrid: HybridConfig = Field(default_factory=HybridConfig)
    ml: MLModelConfig = Field(default_factory=MLModelConfig)
    adaptive: AdaptiveConfig = Field(default_factory=AdaptiveConfig)
    predictive: PredictiveConfig = Field(default_factory=PredictiveConfig)

    @classmethod
    def from_dict(cls, config_dict: Dict) -> "EngineConfig":
        """Create config from a sectioned dictionary (e.g., loaded from JSON)."""
        sections = {}
        for name, field in cls.model_fields.items():
            raw = config_dict.get(name)
            if not isinstance(raw, dict):
                continue
            section_cls = field.annotation
            allowed = set(section_cls.model_fields)
            sections[name] = {k: v for k, v in raw.items() if k in allowed}
        return cls.model_validate(sections)


DEFAULT_IDENTITY_OPTIONS = IdentityComputationOptions()
DEFAULT_CONFIG = EngineConfig()


def resolve_config(config: Optional["EngineConfig"]) -> "EngineConfig":
    """Return config or DEFAULT_CONFIG when none is provided."""
    return config if config is not None else DEFAULT_CONFIG
