"""
Genre taxonomy and the per-genre lookup tables used by the scorers.

Tables:
- GENRE_MOOD_VECTORS: genre → affinity per MOOD_VECTOR_ORDER (ML content features)
- GENRE_DIFFICULTY / GENRE_SOCIAL: heuristic 0-1 difficulty and social scores
- GENRE_INTENSITY / GENRE_SOCIALNESS: predictive energy and social estimates
- GENRE_AXIS_SHIFTS: game-profile shifts on the four mood axes
"""

from typing import Dict, List, Tuple

GENRE_IDS: List[str] = [
    "action",
    "adventure",
    "rpg",
    "strategy",
    "puzzle",
    "simulation",
    "sports",
    "racing",
    "casual",
    "platformer",
    "shooter",
    "indie",
]

# Dimension order of the mood vectors below
MOOD_VECTOR_ORDER: List[str] = [
    "energetic",
    "exploratory",
    "focused",
    "story",
    "competitive",
    "chill",
    "creative",
    "social",
]

GENRE_MOOD_VECTORS: Dict[str, List[float]] = {
    "action": [0.8, 0.2, 0.1, 0.3, 0.6, 0.1, 0.2, 0.1],
    "adventure": [0.3, 0.7, 0.4, 0.8, 0.2, 0.3, 0.5, 0.2],
    "rpg": [0.2, 0.8, 0.3, 0.9, 0.1, 0.4, 0.7, 0.3],
    "strategy": [0.1, 0.3, 0.8, 0.4, 0.2, 0.9, 0.3, 0.2],
    "puzzle": [0.1, 0.2, 0.9, 0.3, 0.1, 0.7, 0.2, 0.1],
    "simulation": [0.2, 0.4, 0.6, 0.5, 0.3, 0.5, 0.4, 0.2],
    "sports": [0.7, 0.3, 0.2, 0.4, 0.8, 0.2, 0.3, 0.1],
    "racing": [0.8, 0.2, 0.1, 0.3, 0.7, 0.1, 0.2, 0.1],
}

GENRE_DIFFICULTY: Dict[str, float] = {
    "action": 0.6,
    "adventure": 0.4,
    "rpg": 0.7,
    "strategy": 0.8,
    "puzzle": 0.9,
    "simulation": 0.5,
    "sports": 0.4,
    "racing": 0.5,
}
DEFAULT_DIFFICULTY = 0.5

GENRE_SOCIAL: Dict[str, float] = {
    "action": 0.7,
    "adventure": 0.4,
    "rpg": 0.8,
    "strategy": 0.6,
    "puzzle": 0.2,
    "simulation": 0.3,
    "sports": 0.9,
    "racing": 0.6,
}
DEFAULT_SOCIAL = 0.3

GENRE_INTENSITY: Dict[str, float] = {
    "action": 0.8,
    "racing": 0.7,
    "sports": 0.6,
    "rpg": 0.5,
    "strategy": 0.4,
    "adventure": 0.3,
    "puzzle": 0.2,
    "simulation": 0.3,
}

GENRE_SOCIALNESS: Dict[str, float] = {
    "sports": 0.9,
    "racing": 0.8,
    "action": 0.7,
    "rpg": 0.6,
    "strategy": 0.5,
    "adventure": 0.4,
    "puzzle": 0.2,
    "simulation": 0.3,
}
DEFAULT_GENRE_ESTIMATE = 0.5

# genre → ((axis, delta), ...) with axes energy/social/cognitive/time
GENRE_AXIS_SHIFTS: Dict[str, Tuple[Tuple[str, int], ...]] = {
    "action": (("energy", 2), ("cognitive", -1)),
    "racing": (("energy", 2),),
    "sports": (("energy", 2), ("social", 2)),
    "puzzle": (("energy", -1), ("social", -1), ("cognitive", 2), ("time", -1)),
    "casual": (("energy", -1), ("cognitive", -1), ("time", -1)),
    "simulation": (("energy", -1), ("time", 2)),
    "multiplayer": (("social", 2),),
    "rpg": (("social", -1), ("cognitive", 2), ("time", 2)),
    "strategy": (("cognitive", 2), ("time", 2)),
}


def normalize_genre(genre) -> str:
    """Lower-case genre id; empty string when missing."""
    return (genre or "").strip().lower()


def genre_difficulty_label(score: float) -> str:
    if score < 0.3:
        return "Easy"
    if score < 0.7:
        return "Medium"
    return "Hard"
