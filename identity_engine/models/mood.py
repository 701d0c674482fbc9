"""
Taxonomy records — Mood and PlaystyleArchetype.

Static data; instances are built once by identity_engine.taxonomy.
"""

from typing import Dict, List

from pydantic import BaseModel, ConfigDict, Field


class Mood(BaseModel):
    """
    A named gaming mood.

    genre_weights / tag_weights: preference per genre or tag in [-1, 1].
    energy_level, social_requirement, cognitive_load, time_commitment: 1-10 axes.
    mood_tags: game tags that signal a fit for this mood in the base scorer.
    """

    model_config = ConfigDict(frozen=True)

    id: str
    name: str
    description: str = ""
    emoji: str = ""
    associated_genres: List[str] = Field(default_factory=list)
    genre_weights: Dict[str, float] = Field(default_factory=dict)
    tag_weights: Dict[str, float] = Field(default_factory=dict)
    platform_bias: Dict[str, float] = Field(default_factory=dict)
    energy_level: int = Field(5, ge=1, le=10)
    social_requirement: int = Field(5, ge=1, le=10)
    cognitive_load: int = Field(5, ge=1, le=10)
    time_commitment: int = Field(5, ge=1, le=10)
    compatible_moods: List[str] = Field(default_factory=list)
    conflicting_moods: List[str] = Field(default_factory=list)
    mood_tags: List[str] = Field(default_factory=list)
    preferred_session_length: int = 60


class PlaystyleArchetype(BaseModel):
    """One of the eight fixed behavioral classifications."""

    model_config = ConfigDict(frozen=True)

    id: str
    name: str
    description: str = ""
    icon: str = ""
    traits: List[str] = Field(default_factory=list)
