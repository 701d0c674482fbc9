"""
Mood taxonomy: eight moods with genre/tag weight maps and four compatibility
axes (energy, social, cognitive load, time commitment on a 1-10 scale).

Conflict sets are made symmetric when the taxonomy is built, so
moods_conflict(a, b) == moods_conflict(b, a) for every pair.
"""

from typing import Dict, List, Optional

from identity_engine.models.mood import Mood

TAXONOMY_VERSION = "2"

# Legacy and display ids accepted by resolve_mood_id()
MOOD_ALIASES: Dict[str, str] = {
    "low-energy": "chill",
    "relaxed": "chill",
    "high-energy": "energetic",
    "deep-focus": "focused",
    "immersive": "story",
}

_RAW_MOODS: List[Dict] = [
    {
        "id": "chill",
        "name": "Chill",
        "description": "Relaxed gaming with minimal mental effort",
        "emoji": "🌊",
        "associated_genres": ["casual", "puzzle", "simulation"],
        "energy_level": 2,
        "social_requirement": 3,
        "cognitive_load": 2,
        "time_commitment": 3,
        "genre_weights": {"casual": 0.9, "puzzle": 0.8, "simulation": 0.7, "strategy": 0.3, "action": 0.2},
        "tag_weights": {"relaxing": 0.9, "meditative": 0.8, "cozy": 0.8, "intense": 0.1, "competitive": 0.1},
        "platform_bias": {"pc": 0.7, "mobile": 0.9, "console": 0.6},
        "compatible_moods": ["creative", "exploratory"],
        "conflicting_moods": ["competitive", "energetic"],
        "mood_tags": ["relaxing", "casual", "peaceful", "cozy"],
        "preferred_session_length": 20,
    },
    {
        "id": "energetic",
        "name": "Energetic",
        "description": "Exciting, stimulating gameplay experiences",
        "emoji": "⚡",
        "associated_genres": ["action", "racing", "platformer"],
        "energy_level": 9,
        "social_requirement": 6,
        "cognitive_load": 7,
        "time_commitment": 6,
        "genre_weights": {"action": 0.9, "racing": 0.8, "sports": 0.7, "puzzle": 0.2, "simulation": 0.3},
        "tag_weights": {"intense": 0.9, "fast-paced": 0.8, "exciting": 0.8, "relaxing": 0.1, "meditative": 0.1},
        "platform_bias": {"pc": 0.8, "console": 0.9, "mobile": 0.5},
        "compatible_moods": ["competitive", "social"],
        "conflicting_moods": ["chill", "focused"],
        "mood_tags": ["action", "fast-paced", "intense", "exciting"],
        "preferred_session_length": 45,
    },
    {
        "id": "focused",
        "name": "Focused",
        "description": "Strategic thinking and deep concentration",
        "emoji": "🎯",
        "associated_genres": ["strategy", "puzzle", "rpg"],
        "energy_level": 5,
        "social_requirement": 2,
        "cognitive_load": 9,
        "time_commitment": 8,
        "genre_weights": {"strategy": 0.9, "puzzle": 0.8, "rpg": 0.7, "action": 0.3, "casual": 0.2},
        "tag_weights": {"strategic": 0.9, "challenging": 0.8, "complex": 0.7, "simple": 0.2, "casual": 0.2},
        "platform_bias": {"pc": 0.9, "console": 0.6, "mobile": 0.3},
        "compatible_moods": ["story", "exploratory"],
        "conflicting_moods": ["energetic", "social"],
        "mood_tags": ["strategic", "tactical", "puzzle", "thinking"],
        "preferred_session_length": 90,
    },
    {
        "id": "social",
        "name": "Social",
        "description": "Playing and connecting with others",
        "emoji": "🤝",
        "associated_genres": ["multiplayer", "sports", "casual"],
        "energy_level": 6,
        "social_requirement": 9,
        "cognitive_load": 5,
        "time_commitment": 6,
        "genre_weights": {"multiplayer": 0.9, "sports": 0.7, "casual": 0.6, "strategy": 0.5, "puzzle": 0.3},
        "tag_weights": {"multiplayer": 0.9, "cooperative": 0.8, "team-based": 0.8, "single-player": 0.2, "solo": 0.2},
        "platform_bias": {"pc": 0.8, "console": 0.9, "mobile": 0.6},
        "compatible_moods": ["energetic", "competitive"],
        "conflicting_moods": ["focused", "chill"],
        "mood_tags": ["multiplayer", "co-op", "social", "community"],
        "preferred_session_length": 60,
    },
    {
        "id": "creative",
        "name": "Creative",
        "description": "Building and expressing creativity",
        "emoji": "🎨",
        "associated_genres": ["simulation", "casual", "puzzle"],
        "energy_level": 5,
        "social_requirement": 4,
        "cognitive_load": 6,
        "time_commitment": 7,
        "genre_weights": {"simulation": 0.9, "casual": 0.7, "puzzle": 0.6, "action": 0.3, "strategy": 0.5},
        "tag_weights": {"creative": 0.9, "building": 0.8, "customization": 0.8, "destructive": 0.2, "competitive": 0.3},
        "platform_bias": {"pc": 0.9, "console": 0.5, "mobile": 0.4},
        "compatible_moods": ["chill", "exploratory"],
        "conflicting_moods": ["competitive", "energetic"],
        "mood_tags": ["creative", "building", "sandbox", "customization"],
        "preferred_session_length": 75,
    },
    {
        "id": "exploratory",
        "name": "Exploratory",
        "description": "Discovering new worlds and secrets",
        "emoji": "🗺️",
        "associated_genres": ["adventure", "rpg", "simulation"],
        "energy_level": 6,
        "social_requirement": 5,
        "cognitive_load": 5,
        "time_commitment": 7,
        "genre_weights": {"adventure": 0.9, "rpg": 0.8, "simulation": 0.6, "action": 0.5, "puzzle": 0.4},
        "tag_weights": {"exploration": 0.9, "discovery": 0.8, "open-world": 0.8, "linear": 0.2, "structured": 0.3},
        "platform_bias": {"pc": 0.8, "console": 0.8, "mobile": 0.5},
        "compatible_moods": ["story", "creative"],
        "conflicting_moods": ["competitive"],
        "mood_tags": ["exploration", "open-world", "discovery", "adventure"],
        "preferred_session_length": 80,
    },
    {
        "id": "competitive",
        "name": "Competitive",
        "description": "Challenge-seeking and achievement-focused",
        "emoji": "🏆",
        "associated_genres": ["action", "sports", "multiplayer"],
        "energy_level": 8,
        "social_requirement": 7,
        "cognitive_load": 7,
        "time_commitment": 6,
        "genre_weights": {"action": 0.8, "sports": 0.8, "multiplayer": 0.9, "casual": 0.2, "simulation": 0.3},
        "tag_weights": {"competitive": 0.9, "challenging": 0.8, "skill-based": 0.8, "casual": 0.1, "relaxing": 0.1},
        "platform_bias": {"pc": 0.9, "console": 0.8, "mobile": 0.4},
        "compatible_moods": ["energetic", "social"],
        "conflicting_moods": ["chill", "creative"],
        "mood_tags": ["competitive", "challenging", "pvp", "skill-based"],
        "preferred_session_length": 50,
    },
    {
        "id": "story",
        "name": "Story",
        "description": "Story-driven and atmospheric experiences",
        "emoji": "📖",
        "associated_genres": ["rpg", "adventure"],
        "energy_level": 4,
        "social_requirement": 2,
        "cognitive_load": 6,
        "time_commitment": 9,
        "genre_weights": {"rpg": 0.9, "adventure": 0.8, "story": 0.9, "action": 0.4, "puzzle": 0.5},
        "tag_weights": {"story-driven": 0.9, "atmospheric": 0.8, "immersive": 0.8, "arcade": 0.2, "casual": 0.3},
        "platform_bias": {"pc": 0.8, "console": 0.9, "mobile": 0.3},
        "compatible_moods": ["focused", "exploratory"],
        "conflicting_moods": ["energetic", "social"],
        "mood_tags": ["story", "narrative", "rpg", "adventure"],
        "preferred_session_length": 120,
    },
]


def _build_moods(raw: List[Dict]) -> Dict[str, Mood]:
    conflicts: Dict[str, set] = {m["id"]: set(m["conflicting_moods"]) for m in raw}
    for mood_id, others in list(conflicts.items()):
        for other in others:
            conflicts.setdefault(other, set()).add(mood_id)
    built = {}
    for m in raw:
        # Preserve declared order, then append conflicts gained by symmetry
        declared = list(m["conflicting_moods"])
        extra = sorted(conflicts[m["id"]] - set(declared))
        built[m["id"]] = Mood.model_validate({**m, "conflicting_moods": declared + extra})
    return built


MOODS: Dict[str, Mood] = _build_moods(_RAW_MOODS)
MOOD_IDS: List[str] = list(MOODS)


def resolve_mood_id(mood_id: Optional[str]) -> Optional[str]:
    """Map an alias to its canonical id. Unknown ids are returned unchanged."""
    if not mood_id:
        return None
    key = mood_id.strip().lower()
    return MOOD_ALIASES.get(key, key)


def get_mood(mood_id: Optional[str]) -> Optional[Mood]:
    """Return the Mood for an id or alias, or None when unknown."""
    resolved = resolve_mood_id(mood_id)
    return MOODS.get(resolved) if resolved else None


def moods_conflict(primary: str, secondary: str) -> bool:
    mood = get_mood(primary)
    other = resolve_mood_id(secondary)
    return bool(mood and other in mood.conflicting_moods)


def moods_compatible(primary: str, secondary: str) -> bool:
    mood = get_mood(primary)
    other = resolve_mood_id(secondary)
    return bool(mood and other in mood.compatible_moods)
