"""
Game model — catalog entry with genre/tag/platform metadata.

Supplied by the game catalog collaborator; built via ensure_games().
"""

from typing import Any, Dict, List, Optional, Union

from pydantic import BaseModel, ConfigDict, Field


class Game(BaseModel):
    model_config = ConfigDict(extra="allow")

    id: str
    name: str = ""
    genre: Optional[str] = None
    genres: List[str] = Field(default_factory=list)
    tags: List[str] = Field(default_factory=list)
    platforms: List[str] = Field(default_factory=list)
    average_playtime: Optional[float] = None
    difficulty: Optional[str] = None
    is_multiplayer: bool = False

    @property
    def primary_genre(self) -> str:
        """Lower-case primary genre; empty string when the game has none."""
        if self.genre:
            return self.genre.strip().lower()
        return self.genres[0].strip().lower() if self.genres else ""

    def genre_keys(self) -> List[str]:
        """All genres (lower-case, primary first, no duplicates)."""
        keys = []
        for g in [self.genre] + list(self.genres):
            key = (g or "").strip().lower()
            if key and key not in keys:
                keys.append(key)
        return keys


def ensure_games(games: List[Union[Dict[str, Any], "Game"]]) -> List["Game"]:
    """Convert list of dicts or Games to list of Game models."""
    return [
        Game.model_validate(g) if isinstance(g, dict) else g
        for g in games
    ]
