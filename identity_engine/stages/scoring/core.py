"""
Base recommendation scorer: weighted mood/playstyle/genre/social/time blend.

score = base + Σ (component - 50) * weight, clamped to [0, 100].
The mood, social and time terms apply only when the context carries them.
Submodules used: components, reasons.
"""

import logging
from typing import Dict, List, Optional, Union

from identity_engine.models.config import ScoringConfig
from identity_engine.models.game import Game, ensure_games
from identity_engine.models.identity import PlayerIdentity
from identity_engine.models.recommendation import GameRecommendation, RecommendationContext
from identity_engine.taxonomy.moods import get_mood
from identity_engine.utils.scores import clamp

from .components import (
    difficulty_label,
    estimate_playtime,
    genre_match,
    mood_match,
    playstyle_match,
    social_match,
    time_match,
)
from .reasons import generate_reasons

logger = logging.getLogger(__name__)

DEFAULT_SCORING_CONFIG = ScoringConfig()


def score_game(
    game: Game,
    identity: PlayerIdentity,
    context: RecommendationContext,
    config: ScoringConfig = DEFAULT_SCORING_CONFIG,
) -> Dict[str, float]:
    """Component scores plus the blended 'score' for one game."""
    mood_id = context.current_mood if get_mood(context.current_mood) else None
    estimated = estimate_playtime(game, identity)
    components = {
        "mood": mood_match(game, mood_id),
        "playstyle": playstyle_match(game, identity),
        "genre": genre_match(game, identity),
        "social": social_match(game, context.social_context),
        "time": time_match(estimated, context.time_available),
    }

    score = config.base_score
    if mood_id:
        score += (components["mood"] - 50) * config.weight_mood
    score += (components["playstyle"] - 50) * config.weight_playstyle
    score += (components["genre"] - 50) * config.weight_genre
    if context.social_context:
        score += (components["social"] - 50) * config.weight_social
    if context.time_available:
        score += (components["time"] - 50) * config.weight_time

    components["score"] = round(clamp(score), 2)
    components["estimated_playtime"] = estimated
    return components


def build_recommendation(
    game: Game,
    identity: PlayerIdentity,
    context: RecommendationContext,
    scores: Dict[str, float],
    config: ScoringConfig = DEFAULT_SCORING_CONFIG,
) -> GameRecommendation:
    mood_id = context.current_mood if get_mood(context.current_mood) else None
    return GameRecommendation(
        game_id=game.id,
        name=game.name,
        genre=game.primary_genre or "unknown",
        score=scores["score"],
        reasons=generate_reasons(
            game, identity, mood_id, scores["score"],
            personalized_threshold=config.personalized_reason_threshold,
            max_reasons=config.max_reasons,
        ),
        mood_match=scores["mood"],
        playstyle_match=scores["playstyle"],
        social_match=scores["social"],
        estimated_playtime=scores["estimated_playtime"],
        difficulty=difficulty_label(game),
        tags=list(game.tags),
    )


def get_recommendations(
    identity: PlayerIdentity,
    context: Optional[Union[Dict, RecommendationContext]],
    candidate_games: List[Union[Dict, Game]],
    config: Optional[ScoringConfig] = None,
) -> List[GameRecommendation]:
    """
    Rank candidate games for an identity.

    Games below min_score_threshold are excluded; equal scores keep candidate
    order; at most max_recommendations are returned.
    """
    config = config or DEFAULT_SCORING_CONFIG
    if isinstance(context, dict):
        context = RecommendationContext.model_validate(context)
    context = context or RecommendationContext()
    games = ensure_games(candidate_games)

    if context.current_mood and get_mood(context.current_mood) is None:
        logger.warning("[score_fallback] UNKNOWN_MOOD mood=%s user_id=%s", context.current_mood, identity.user_id)

    # 1) Score every candidate
    recommendations: List[GameRecommendation] = []
    for game in games:
        scores = score_game(game, identity, context, config)
        if scores["score"] < config.min_score_threshold:
            continue
        recommendations.append(build_recommendation(game, identity, context, scores, config))

    # 2) Stable sort by score
    recommendations.sort(key=lambda r: r.score, reverse=True)
    return recommendations[: config.max_recommendations]
