"""
Per-factor match scores (0-100) for the base scorer.

Each component returns 50 (neutral) when its context is absent.
"""

from typing import Optional

from identity_engine.models.game import Game
from identity_engine.models.identity import PlayerIdentity
from identity_engine.taxonomy.genres import (
    DEFAULT_DIFFICULTY,
    GENRE_DIFFICULTY,
    genre_difficulty_label,
)
from identity_engine.taxonomy.moods import get_mood
from identity_engine.taxonomy.playstyles import get_playstyle
from identity_engine.taxonomy.tags import TagSignal, normalize_tags, tag_signals, trait_matches_tags
from identity_engine.utils.scores import clamp

NEUTRAL = 50.0
DEFAULT_PLAYTIME_MINUTES = 60.0


def is_multiplayer_game(game: Game) -> bool:
    return game.is_multiplayer or TagSignal.MULTIPLAYER in tag_signals(game.tags)


def mood_match(game: Game, mood_id: Optional[str]) -> float:
    """85 for an associated genre, 60 + 5 per mood tag, else 30. Unknown mood → 50."""
    mood = get_mood(mood_id)
    if mood is None:
        return NEUTRAL
    if game.primary_genre in mood.associated_genres:
        return 85.0
    mood_tags = set(mood.mood_tags)
    matching = [t for t in normalize_tags(game.tags) if t in mood_tags]
    if matching:
        return clamp(60.0 + 5 * len(matching))
    return 30.0


def estimate_playtime(game: Game, identity: PlayerIdentity) -> float:
    """Catalog playtime scaled by preferred session length, averaged with the user's genre history."""
    base = game.average_playtime or DEFAULT_PLAYTIME_MINUTES
    preference = identity.playstyle.preferences.session_length
    if preference == "short":
        base *= 0.7
    elif preference == "long":
        base *= 1.3
    genre_sessions = [s for s in identity.sessions if s.genre_key and s.genre_key == game.primary_genre]
    if genre_sessions:
        avg_user = sum(
            s.duration if s.duration is not None else DEFAULT_PLAYTIME_MINUTES
            for s in genre_sessions
        ) / len(genre_sessions)
        base = (base + avg_user) / 2
    return float(round(base))


def _fits_session_length(preference: str, minutes: float) -> bool:
    if preference == "short":
        return minutes <= 60
    if preference == "medium":
        return 45 <= minutes <= 120
    if preference == "long":
        return minutes >= 90
    return False


def playstyle_match(game: Game, identity: PlayerIdentity) -> float:
    playstyle = identity.playstyle
    score = NEUTRAL
    for trait in get_playstyle(playstyle.primary).traits:
        if trait_matches_tags(trait, game.tags):
            score += 8
    if playstyle.secondary:
        for trait in get_playstyle(playstyle.secondary).traits:
            if trait_matches_tags(trait, game.tags):
                score += 4
    if _fits_session_length(playstyle.preferences.session_length, estimate_playtime(game, identity)):
        score += 10
    return clamp(score)


def genre_match(game: Game, identity: PlayerIdentity) -> float:
    return clamp(identity.genre_affinities.get(game.primary_genre, 0.0))


def social_match(game: Game, social_context: Optional[str]) -> float:
    if not social_context:
        return NEUTRAL
    multiplayer = is_multiplayer_game(game)
    if social_context == "solo" and not multiplayer:
        return 90.0
    if social_context == "co-op" and multiplayer:
        return 85.0
    if social_context == "pvp" and TagSignal.COMPETITIVE in tag_signals(game.tags):
        return 85.0
    return 30.0


def time_match(estimated_minutes: float, time_available: Optional[float]) -> float:
    if not time_available:
        return NEUTRAL
    if estimated_minutes <= time_available * 0.8:
        return 85.0
    if estimated_minutes <= time_available:
        return 70.0
    return 30.0


def difficulty_label(game: Game) -> str:
    if game.difficulty:
        return game.difficulty
    return genre_difficulty_label(GENRE_DIFFICULTY.get(game.primary_genre, DEFAULT_DIFFICULTY))
