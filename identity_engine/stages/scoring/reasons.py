"""Human-readable justifications for base recommendations."""

from typing import List, Optional

from identity_engine.models.game import Game
from identity_engine.models.identity import PlayerIdentity
from identity_engine.taxonomy.moods import get_mood
from identity_engine.taxonomy.tags import TagSignal, tag_signals

from .components import is_multiplayer_game

GENRE_LOVE_THRESHOLD = 70
STORY_FOCUS_THRESHOLD = 70


def generate_reasons(
    game: Game,
    identity: PlayerIdentity,
    mood_id: Optional[str],
    score: float,
    personalized_threshold: float = 80.0,
    max_reasons: int = 3,
) -> List[str]:
    reasons = []
    mood = get_mood(mood_id)
    if mood is not None and game.primary_genre in mood.associated_genres:
        reasons.append(f"Perfect for your {mood.name} mood")

    if identity.genre_affinities.get(game.primary_genre, 0) > GENRE_LOVE_THRESHOLD:
        reasons.append(f"You love {game.primary_genre} games")

    preferences = identity.playstyle.preferences
    if TagSignal.STORY in tag_signals(game.tags) and preferences.story_focus > STORY_FOCUS_THRESHOLD:
        reasons.append("Rich storytelling experience")

    if is_multiplayer_game(game) and preferences.social_preference != "solo":
        reasons.append("Great for social gaming")

    if score > personalized_threshold:
        reasons.append("Highly personalized match")

    return reasons[:max_reasons]
