"""
GameSession model — one recorded play session.

Immutable once recorded. Built from store/API dicts via ensure_sessions(),
which converts validation failures into MalformedSessionError.
"""

from datetime import datetime
from typing import Any, Dict, List, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, ValidationError

from identity_engine.errors import MalformedSessionError


class GameSession(BaseModel):
    """
    A single play session.

    genre: optional; sessions without one are skipped by genre affinity but kept.
    duration: minutes played (None while the session is still open).
    intensity: self-reported or inferred 1-10.
    rating: optional 1-5 post-session rating.
    """

    model_config = ConfigDict(extra="allow", frozen=True)

    id: str = Field(min_length=1)
    user_id: str = ""
    game_id: str = ""
    game_name: Optional[str] = None
    genre: Optional[str] = None
    start_time: datetime
    end_time: Optional[datetime] = None
    duration: Optional[float] = Field(default=None, ge=0)
    mood: Optional[str] = None
    intensity: int = Field(default=5, ge=1, le=10)
    tags: List[str] = Field(default_factory=list)
    platform: str = "pc"
    completed: bool = False
    difficulty: Optional[str] = None
    is_multiplayer: bool = False
    rating: Optional[int] = Field(default=None, ge=1, le=5)

    @property
    def genre_key(self) -> str:
        return (self.genre or "").strip().lower()


def ensure_sessions(
    items: List[Union[Dict[str, Any], "GameSession"]],
) -> List["GameSession"]:
    """Convert list of dicts or GameSessions to GameSession models."""
    sessions = []
    for item in items:
        if isinstance(item, GameSession):
            sessions.append(item)
            continue
        try:
            sessions.append(GameSession.model_validate(item))
        except ValidationError as e:
            session_id = item.get("id") if isinstance(item, dict) else None
            raise MalformedSessionError(
                f"Invalid session record {session_id!r}: {e.error_count()} error(s)",
                session_id=session_id,
            ) from e
    return sessions
