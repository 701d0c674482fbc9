"""
Hybrid mood engine: primary + secondary mood scoring on top of the base scorer.

For each game:
- mood_compatibility: per-axis max(0, 100 - 10 * |game_axis - mood_axis|)
- alignment: 50 + Σ (genre_w - 0.5) * 20 + Σ (tag_w - 0.5) * 15, clamped
- synergy: (primary_alignment + secondary_alignment) / 2 * intensity

Synergy is explanatory unless include_hybrid_recommendations is set, in which
case score = (1 - hybrid_weight) * score + hybrid_weight * synergy.
"""

import logging
from typing import Dict, List, Optional, Tuple, Union

from identity_engine.errors import InvalidMoodCombinationError
from identity_engine.models.config import HybridConfig, ScoringConfig
from identity_engine.models.game import Game, ensure_games
from identity_engine.models.identity import PlayerIdentity
from identity_engine.models.mood import Mood
from identity_engine.models.mood_events import DynamicMoodWeights
from identity_engine.models.recommendation import (
    EnhancedGameRecommendation,
    EnhancedRecommendationContext,
    MoodCombination,
    MoodCompatibility,
    MoodInfluence,
    RecommendationContext,
)
from identity_engine.taxonomy.moods import get_mood, moods_conflict, resolve_mood_id
from identity_engine.taxonomy.tags import normalize_tags
from identity_engine.utils.scores import clamp

from ..traits import game_profile
from .core import DEFAULT_SCORING_CONFIG, build_recommendation, score_game

logger = logging.getLogger(__name__)

DEFAULT_HYBRID_CONFIG = HybridConfig()
NEUTRAL_WEIGHT = 0.5


def validate_mood_combination(primary: Optional[str], secondary: Optional[str]) -> None:
    """Raise InvalidMoodCombinationError when the pair conflicts."""
    if primary and secondary and moods_conflict(primary, secondary):
        raise InvalidMoodCombinationError(resolve_mood_id(primary), resolve_mood_id(secondary))


def compatibility_score(game_value: float, mood_value: float) -> float:
    return max(0.0, 100.0 - abs(game_value - mood_value) * 10)


def mood_compatibility(game: Game, mood: Optional[Mood]) -> MoodCompatibility:
    if mood is None:
        return MoodCompatibility()
    profile = game_profile(game)
    return MoodCompatibility(
        energy=compatibility_score(profile.energy, mood.energy_level),
        social=compatibility_score(profile.social, mood.social_requirement),
        cognitive=compatibility_score(profile.cognitive, mood.cognitive_load),
        time=compatibility_score(profile.time, mood.time_commitment),
    )


def _weights_for(mood: Mood, learned: Optional[DynamicMoodWeights]) -> Tuple[Dict, Dict, Dict]:
    if learned is not None:
        return learned.genre_weights, learned.tag_weights, learned.platform_biases
    return mood.genre_weights, mood.tag_weights, mood.platform_bias


def mood_alignment(
    game: Game,
    mood: Mood,
    learned: Optional[DynamicMoodWeights] = None,
) -> Dict[str, float]:
    """Alignment score plus its genre/tag/platform contributions."""
    genre_weights, tag_weights, platform_bias = _weights_for(mood, learned)
    genre_part = sum(
        (genre_weights.get(g, NEUTRAL_WEIGHT) - 0.5) * 20 for g in game.genre_keys()
    )
    tag_part = sum(
        (tag_weights.get(t, NEUTRAL_WEIGHT) - 0.5) * 15 for t in normalize_tags(game.tags)
    )
    platforms = [p.strip().lower() for p in game.platforms if p]
    platform_part = (
        sum(platform_bias.get(p, NEUTRAL_WEIGHT) for p in platforms) / len(platforms) * 100
        if platforms else 0.0
    )
    return {
        "alignment": clamp(50 + genre_part + tag_part),
        "genre": round(genre_part, 2),
        "tags": round(tag_part, 2),
        "platform": round(platform_part, 2),
    }


def analyze_mood_combination(
    game: Game,
    primary: Mood,
    secondary: Mood,
    intensity: float,
    learned: Optional[Dict[str, DynamicMoodWeights]] = None,
) -> MoodCombination:
    learned = learned or {}
    p = mood_alignment(game, primary, learned.get(primary.id))["alignment"]
    s = mood_alignment(game, secondary, learned.get(secondary.id))["alignment"]
    synergy = round((p + s) / 2 * intensity, 2)
    return MoodCombination(
        primary=primary.name,
        secondary=secondary.name,
        synergy=synergy,
        reasoning=(
            f"Strong {primary.name.lower()} + {secondary.name.lower()} combination "
            f"with {round(synergy)}% compatibility"
        ),
    )


def get_enhanced_recommendations(
    identity: PlayerIdentity,
    context: Union[Dict, EnhancedRecommendationContext],
    candidate_games: List[Union[Dict, Game]],
    config: Optional[HybridConfig] = None,
    scoring_config: Optional[ScoringConfig] = None,
    learned_weights: Optional[Dict[str, DynamicMoodWeights]] = None,
) -> List[EnhancedGameRecommendation]:
    """
    Mood-aware recommendations with per-axis compatibility and hybrid synergy.

    learned_weights: per-mood DynamicMoodWeights from the adaptive layer;
    they replace the static taxonomy weights for alignment when present.
    Raises InvalidMoodCombinationError for a conflicting mood pair.
    """
    config = config or DEFAULT_HYBRID_CONFIG
    scoring_config = scoring_config or DEFAULT_SCORING_CONFIG
    if isinstance(context, dict):
        context = EnhancedRecommendationContext.model_validate(context)
    learned_weights = learned_weights or {}

    validate_mood_combination(context.effective_primary, context.secondary_mood)

    primary = get_mood(context.effective_primary)
    secondary = get_mood(context.secondary_mood)
    if context.effective_primary and primary is None:
        logger.warning(
            "[hybrid_fallback] UNKNOWN_PRIMARY_MOOD mood=%s user_id=%s",
            context.effective_primary, identity.user_id,
        )
    base_context = RecommendationContext(
        current_mood=primary.id if primary else None,
        social_context=context.social_context,
        time_available=context.time_available,
    )

    recommendations: List[EnhancedGameRecommendation] = []
    for game in ensure_games(candidate_games):
        scores = score_game(game, identity, base_context, scoring_config)
        base = build_recommendation(game, identity, base_context, scores, scoring_config)

        influence = MoodInfluence()
        mood_score = 50.0
        combination = None
        if primary is not None:
            aligned = mood_alignment(game, primary, learned_weights.get(primary.id))
            mood_score = aligned["alignment"]
            influence = MoodInfluence(
                primary=aligned["alignment"],
                genre=aligned["genre"],
                tags=aligned["tags"],
                platform=aligned["platform"],
            )
            if secondary is not None:
                combination = analyze_mood_combination(
                    game, primary, secondary, context.intensity, learned_weights,
                )
                influence.secondary = mood_alignment(
                    game, secondary, learned_weights.get(secondary.id)
                )["alignment"]
                influence.hybrid = combination.synergy

        score = base.score
        if context.include_hybrid_recommendations and combination is not None:
            score = round(clamp(
                score * (1 - config.hybrid_weight) + combination.synergy * config.hybrid_weight
            ), 2)
        if score < config.min_score_threshold:
            continue

        reasons = list(base.reasons)
        if combination is not None and len(reasons) < scoring_config.max_reasons:
            reasons.append(combination.reasoning)

        recommendations.append(EnhancedGameRecommendation(
            **base.model_dump(exclude={"score", "reasons"}),
            score=score,
            reasons=reasons,
            mood_score=mood_score,
            hybrid_score=combination.synergy if combination else None,
            mood_influence=influence,
            mood_compatibility=mood_compatibility(game, primary),
            mood_combination=combination,
        ))

    recommendations.sort(key=lambda r: r.score, reverse=True)
    return recommendations[: config.max_recommendations]
