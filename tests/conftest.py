"""
Shared fixtures: a fixed clock, a session factory and a small game catalog.
"""

from datetime import datetime, timedelta, timezone

import pytest

from identity_engine.models.game import Game
from identity_engine.models.session import GameSession
from identity_engine.state import EngineState

NOW = datetime(2024, 6, 12, 20, 0, tzinfo=timezone.utc)  # Wednesday evening

CATALOG = [
    {"id": "g-action", "name": "Blast Arena", "genre": "action", "tags": ["intense", "pvp", "competitive"],
     "platforms": ["pc", "console"], "average_playtime": 45, "is_multiplayer": True},
    {"id": "g-rpg", "name": "Elder Path", "genre": "rpg", "tags": ["story", "exploration", "epic"],
     "platforms": ["pc"], "average_playtime": 120},
    {"id": "g-puzzle", "name": "Tile Garden", "genre": "puzzle", "tags": ["relaxing", "casual"],
     "platforms": ["mobile", "pc"], "average_playtime": 20},
    {"id": "g-sim", "name": "Farm Days", "genre": "simulation", "tags": ["cozy", "building"],
     "platforms": ["pc"], "average_playtime": 90},
    {"id": "g-racing", "name": "Turbo Line", "genre": "racing", "tags": ["fast-paced", "competitive"],
     "platforms": ["console"], "average_playtime": 30},
    {"id": "g-strategy", "name": "Empire Mind", "genre": "strategy", "tags": ["strategy", "complex"],
     "platforms": ["pc"], "average_playtime": 150},
    {"id": "g-casual", "name": "Pop Bubbles", "genre": "casual", "tags": ["casual", "quick"],
     "platforms": ["mobile"], "average_playtime": 15},
    {"id": "g-adventure", "name": "Lost Isles", "genre": "adventure", "tags": ["exploration", "story"],
     "platforms": ["pc", "console"], "average_playtime": 80},
    {"id": "g-sports", "name": "Goal Rush", "genre": "sports", "tags": ["multiplayer", "competitive"],
     "platforms": ["console"], "average_playtime": 40, "is_multiplayer": True},
    {"id": "g-action-2", "name": "Neon Strike", "genre": "action", "tags": ["intense", "fast-paced"],
     "platforms": ["pc"], "average_playtime": 50},
]


@pytest.fixture
def now():
    return NOW


@pytest.fixture
def games():
    return [Game.model_validate(g) for g in CATALOG]


@pytest.fixture
def games_by_id(games):
    return {g.id: g for g in games}


@pytest.fixture
def state():
    return EngineState()


@pytest.fixture
def make_session():
    """Factory: make_session(n, days_ago=..., **fields) → GameSession."""

    def _make(n, days_ago=1.0, **fields):
        start = fields.pop("start_time", NOW - timedelta(days=days_ago))
        data = {
            "id": f"s-{n}",
            "user_id": "user-1",
            "game_id": "g-action",
            "genre": "action",
            "start_time": start,
            "duration": 60,
            "intensity": 5,
        }
        data.update(fields)
        return GameSession.model_validate(data)

    return _make


@pytest.fixture
def competitive_story_sessions(make_session):
    """4 competitive intensity-9 action sessions and 2 story rpg sessions."""
    sessions = [
        make_session(i, days_ago=i + 1, tags=["competitive"], intensity=9, mood="competitive")
        for i in range(4)
    ]
    sessions += [
        make_session(4 + i, days_ago=5 + i, game_id="g-rpg", genre="rpg", tags=["story"], mood="story")
        for i in range(2)
    ]
    return sessions
