"""
Typed tag lookups.

Free-form tags are resolved once per record into TagSignal members; every
scorer branches on signals instead of matching raw strings.
"""

from enum import Enum
from typing import Dict, FrozenSet, Iterable, List, Set, Tuple


class TagSignal(str, Enum):
    STORY = "story"
    MULTIPLAYER = "multiplayer"
    CREATIVE = "creative"
    STRATEGY = "strategy"
    GRAPHICS = "graphics"
    GAMEPLAY = "gameplay"
    COMPETITIVE = "competitive"
    SOLO = "solo"
    INTENSE = "intense"
    CALM = "calm"
    COMPLEX = "complex"
    SIMPLE = "simple"
    LONG = "long"
    SHORT = "short"


_KEYWORDS: Dict[TagSignal, Tuple[str, ...]] = {
    TagSignal.STORY: ("story", "narrative", "story-driven", "story-rich"),
    TagSignal.MULTIPLAYER: ("multiplayer", "co-op", "coop", "cooperative", "online-multiplayer"),
    TagSignal.CREATIVE: ("creative", "building", "sandbox", "crafting"),
    TagSignal.STRATEGY: ("strategy", "strategic", "tactical"),
    TagSignal.GRAPHICS: ("graphics", "visual", "visuals"),
    TagSignal.GAMEPLAY: ("gameplay", "mechanics"),
    TagSignal.COMPETITIVE: ("competitive", "pvp", "ranked", "esports"),
    TagSignal.SOLO: ("single-player", "singleplayer", "solo"),
    TagSignal.INTENSE: ("intense", "fast-paced"),
    TagSignal.CALM: ("relaxing", "meditative"),
    TagSignal.COMPLEX: ("strategic", "complex"),
    TagSignal.SIMPLE: ("simple", "casual"),
    TagSignal.LONG: ("epic", "lengthy"),
    TagSignal.SHORT: ("quick", "short"),
}

TAG_SIGNALS: Dict[str, FrozenSet[TagSignal]] = {}
for _signal, _words in _KEYWORDS.items():
    for _word in _words:
        TAG_SIGNALS[_word] = TAG_SIGNALS.get(_word, frozenset()) | {_signal}

# Session tag signal → behavioral traits
SIGNAL_TRAITS: Dict[TagSignal, Tuple[str, ...]] = {
    TagSignal.STORY: ("curious",),
    TagSignal.MULTIPLAYER: ("cooperative", "social"),
    TagSignal.CREATIVE: ("imaginative", "expressive"),
    TagSignal.STRATEGY: ("analytical", "tactical"),
}

# Game-profile axis shifts for tag signals
SIGNAL_AXIS_SHIFTS: Dict[TagSignal, Tuple[str, int]] = {
    TagSignal.INTENSE: ("energy", 1),
    TagSignal.CALM: ("energy", -1),
    TagSignal.MULTIPLAYER: ("social", 2),
    TagSignal.SOLO: ("social", -1),
    TagSignal.COMPLEX: ("cognitive", 1),
    TagSignal.SIMPLE: ("cognitive", -1),
    TagSignal.LONG: ("time", 1),
    TagSignal.SHORT: ("time", -1),
}

# Player trait → game tags that satisfy it
TRAIT_GAME_TAGS: Dict[str, FrozenSet[str]] = {
    "goal-oriented": frozenset({"achievements", "progression", "goals"}),
    "curious": frozenset({"exploration", "discovery", "secrets"}),
    "cooperative": frozenset({"co-op", "multiplayer", "team"}),
    "competitive": frozenset({"pvp", "competitive", "ranked"}),
    "imaginative": frozenset({"creative", "building", "sandbox"}),
    "analytical": frozenset({"strategy", "tactical", "puzzle"}),
    "relaxed": frozenset({"casual", "relaxing", "peaceful"}),
    "dedicated": frozenset({"challenging", "hardcore", "grinding"}),
}


def normalize_tags(tags: Iterable[str]) -> List[str]:
    return [t.strip().lower() for t in tags if t and t.strip()]


def tag_signals(tags: Iterable[str]) -> Set[TagSignal]:
    """Resolve free-form tags into the set of signals they carry."""
    signals: Set[TagSignal] = set()
    for tag in normalize_tags(tags):
        signals.update(TAG_SIGNALS.get(tag, ()))
    return signals


def trait_matches_tags(trait: str, tags: Iterable[str]) -> bool:
    wanted = TRAIT_GAME_TAGS.get(trait)
    if not wanted:
        return False
    return any(t in wanted for t in normalize_tags(tags))
