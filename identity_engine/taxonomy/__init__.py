"""Static taxonomy: moods, playstyle archetypes, genres and typed tag lookups."""

from .genres import GENRE_IDS, MOOD_VECTOR_ORDER, normalize_genre
from .moods import (
    MOOD_ALIASES,
    MOOD_IDS,
    MOODS,
    TAXONOMY_VERSION,
    get_mood,
    moods_compatible,
    moods_conflict,
    resolve_mood_id,
)
from .playstyles import DEFAULT_PLAYSTYLE_ID, DEFAULT_TRAITS, PLAYSTYLES, PLAYSTYLES_BY_ID, get_playstyle
from .tags import TagSignal, tag_signals, trait_matches_tags

__all__ = [
    "DEFAULT_PLAYSTYLE_ID",
    "DEFAULT_TRAITS",
    "GENRE_IDS",
    "MOOD_ALIASES",
    "MOOD_IDS",
    "MOOD_VECTOR_ORDER",
    "MOODS",
    "PLAYSTYLES",
    "PLAYSTYLES_BY_ID",
    "TAXONOMY_VERSION",
    "TagSignal",
    "get_mood",
    "get_playstyle",
    "moods_compatible",
    "moods_conflict",
    "normalize_genre",
    "resolve_mood_id",
    "tag_signals",
    "trait_matches_tags",
]
