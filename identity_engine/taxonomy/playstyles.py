"""Playstyle archetypes and the default trait bag for players with no history."""

from typing import Dict, List

from identity_engine.models.mood import PlaystyleArchetype

PLAYSTYLES: List[PlaystyleArchetype] = [
    PlaystyleArchetype(
        id="achiever",
        name="Achiever",
        description="Driven by goals, completion and mastery",
        icon="🏆",
        traits=["goal-oriented", "completionist", "competitive", "dedicated"],
    ),
    PlaystyleArchetype(
        id="explorer",
        name="Explorer",
        description="Loves discovering worlds, secrets and lore",
        icon="🧭",
        traits=["curious", "thorough", "adventurous", "detail-oriented"],
    ),
    PlaystyleArchetype(
        id="socializer",
        name="Socializer",
        description="Plays for the people and the shared moments",
        icon="👥",
        traits=["cooperative", "communicative", "team-player", "friendly"],
    ),
    PlaystyleArchetype(
        id="competitor",
        name="Competitor",
        description="Seeks challenge, rankings and victory",
        icon="⚔️",
        traits=["competitive", "strategic", "skill-focused", "win-driven"],
    ),
    PlaystyleArchetype(
        id="creative",
        name="Creative",
        description="Builds, designs and expresses",
        icon="🎨",
        traits=["imaginative", "expressive", "builder", "innovative"],
    ),
    PlaystyleArchetype(
        id="strategist",
        name="Strategist",
        description="Plans ahead and enjoys deep systems",
        icon="🧠",
        traits=["analytical", "tactical", "patient", "forward-thinking"],
    ),
    PlaystyleArchetype(
        id="casual",
        name="Casual",
        description="Plays to unwind, on their own terms",
        icon="🛋️",
        traits=["relaxed", "flexible", "entertainment-focused", "stress-free"],
    ),
    PlaystyleArchetype(
        id="specialist",
        name="Specialist",
        description="Masters a niche with precision",
        icon="🎯",
        traits=["focused", "expert", "dedicated", "perfectionist"],
    ),
]

PLAYSTYLES_BY_ID: Dict[str, PlaystyleArchetype] = {p.id: p for p in PLAYSTYLES}

DEFAULT_PLAYSTYLE_ID = "casual"
DEFAULT_TRAITS: List[str] = ["relaxed", "flexible"]


def get_playstyle(playstyle_id: str) -> PlaystyleArchetype:
    """Archetype by id; unknown ids resolve to the Casual archetype."""
    return PLAYSTYLES_BY_ID.get(playstyle_id, PLAYSTYLES_BY_ID[DEFAULT_PLAYSTYLE_ID])
