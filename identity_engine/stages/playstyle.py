"""
Playstyle classification: match extracted traits to archetypes and derive
session-length / difficulty / social / focus preferences.
"""

import logging
from typing import Iterable, List, Optional

from identity_engine.models.identity import PlaystylePreferences, UserPlaystyle
from identity_engine.models.mood import PlaystyleArchetype
from identity_engine.models.session import GameSession
from identity_engine.taxonomy.playstyles import DEFAULT_PLAYSTYLE_ID, DEFAULT_TRAITS, PLAYSTYLES
from identity_engine.taxonomy.tags import TagSignal, tag_signals

from .traits import extract_traits

logger = logging.getLogger(__name__)

SECONDARY_THRESHOLD = 0.3
DEFAULT_DURATION_MINUTES = 60


def playstyle_match_score(archetype: PlaystyleArchetype, traits: Iterable[str]) -> float:
    """Share of the archetype's traits present in the trait bag."""
    if not archetype.traits:
        return 0.0
    bag = set(traits)
    return sum(1 for t in archetype.traits if t in bag) / len(archetype.traits)


def find_primary_playstyle(traits: List[str]) -> PlaystyleArchetype:
    """Highest-scoring archetype; first archetype wins ties and the all-zero case."""
    best = PLAYSTYLES[0]
    best_score = 0.0
    for archetype in PLAYSTYLES:
        score = playstyle_match_score(archetype, traits)
        if score > best_score:
            best, best_score = archetype, score
    return best


def find_secondary_playstyle(traits: List[str], primary_id: str) -> Optional[PlaystyleArchetype]:
    best = None
    best_score = 0.0
    for archetype in PLAYSTYLES:
        if archetype.id == primary_id:
            continue
        score = playstyle_match_score(archetype, traits)
        if score > best_score and score > SECONDARY_THRESHOLD:
            best, best_score = archetype, score
    return best


def compute_preferences(sessions: List[GameSession]) -> PlaystylePreferences:
    total = len(sessions)
    if total == 0:
        return PlaystylePreferences()

    avg_duration = sum(
        s.duration if s.duration is not None else DEFAULT_DURATION_MINUTES for s in sessions
    ) / total
    if avg_duration < 45:
        session_length = "short"
    elif avg_duration < 90:
        session_length = "medium"
    else:
        session_length = "long"

    completion_rate = sum(1 for s in sessions if s.completed) / total
    if completion_rate > 0.8:
        difficulty = "casual"
    elif completion_rate > 0.5:
        difficulty = "normal"
    elif completion_rate > 0.3:
        difficulty = "hard"
    else:
        difficulty = "expert"

    signals = [tag_signals(s.tags) for s in sessions]
    social_ratio = sum(
        1 for s, sig in zip(sessions, signals)
        if TagSignal.MULTIPLAYER in sig or s.is_multiplayer
    ) / total
    if social_ratio > 0.6:
        social_preference = "competitive"
    elif social_ratio > 0.3:
        social_preference = "cooperative"
    else:
        social_preference = "solo"

    def focus(signal: TagSignal) -> float:
        return float(round(sum(1 for sig in signals if signal in sig) / total * 100))

    return PlaystylePreferences(
        session_length=session_length,
        difficulty=difficulty,
        social_preference=social_preference,
        story_focus=focus(TagSignal.STORY),
        graphics_focus=focus(TagSignal.GRAPHICS),
        gameplay_focus=focus(TagSignal.GAMEPLAY),
    )


def default_playstyle() -> UserPlaystyle:
    return UserPlaystyle(
        primary=DEFAULT_PLAYSTYLE_ID,
        secondary=None,
        preferences=PlaystylePreferences(),
        traits=list(DEFAULT_TRAITS),
    )


def classify_playstyle(sessions: List[GameSession]) -> UserPlaystyle:
    """
    Classify a session list into primary/secondary archetypes.

    Zero sessions → fixed Casual default.
    """
    if not sessions:
        return default_playstyle()

    traits = extract_traits(sessions)
    primary = find_primary_playstyle(traits)
    secondary = find_secondary_playstyle(traits, primary.id)
    logger.debug(
        "[playstyle] CLASSIFIED sessions=%s primary=%s secondary=%s traits=%s",
        len(sessions), primary.id, secondary.id if secondary else None, traits,
    )
    return UserPlaystyle(
        primary=primary.id,
        secondary=secondary.id if secondary else None,
        preferences=compute_preferences(sessions),
        traits=traits,
    )
