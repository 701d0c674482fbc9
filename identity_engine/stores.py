"""
Session store and game catalog abstractions.

The engine never performs I/O itself: callers fetch sessions, mood history
and candidate games through these collaborators before invoking it.
Implementations: in-memory (local runs and tests); production stores live
outside this package. Delivery of UserActions is at-most-once by contract.
"""

from collections import defaultdict
from typing import Callable, Dict, List, Optional, Protocol

from identity_engine.models.game import Game
from identity_engine.models.mood_events import MoodSelectionEvent, UserAction
from identity_engine.models.session import GameSession
from identity_engine.utils.scores import as_utc


class SessionStore(Protocol):
    """Protocol for session and learning-event persistence."""

    def load_sessions(self, user_id: str) -> List[GameSession]:
        """Return the user's sessions ordered by start time (oldest first)."""
        ...

    def append_session(self, session: GameSession) -> None:
        ...

    def load_mood_history(self, user_id: str) -> List[MoodSelectionEvent]:
        ...

    def append_mood_event(self, event: MoodSelectionEvent) -> None:
        ...

    def append_user_action(self, action: UserAction) -> None:
        """Persist one action. Must not deliver the same action twice."""
        ...


class GameCatalog(Protocol):
    """Protocol for candidate game lookup."""

    def list_candidate_games(self, filter: Optional[Callable[[Game], bool]] = None) -> List[Game]:
        ...


class InMemorySessionStore:
    """
    Session store backed by process memory (no persistence).
    Used for local runs and the test suite.
    """

    def __init__(self):
        self._sessions: Dict[str, List[GameSession]] = defaultdict(list)
        self._mood_events: Dict[str, List[MoodSelectionEvent]] = defaultdict(list)
        self._actions: Dict[str, List[UserAction]] = defaultdict(list)
        self._action_ids: set = set()

    def load_sessions(self, user_id: str) -> List[GameSession]:
        return sorted(self._sessions.get(user_id, []), key=lambda s: as_utc(s.start_time))

    def append_session(self, session: GameSession) -> None:
        self._sessions[session.user_id].append(session)

    def load_mood_history(self, user_id: str) -> List[MoodSelectionEvent]:
        return list(self._mood_events.get(user_id, []))

    def append_mood_event(self, event: MoodSelectionEvent) -> None:
        self._mood_events[event.user_id].append(event)

    def append_user_action(self, action: UserAction) -> bool:
        """Record an action once. Returns False when the id was already stored."""
        if action.id in self._action_ids:
            return False
        self._action_ids.add(action.id)
        self._actions[action.user_id].append(action)
        return True

    def load_user_actions(self, user_id: str) -> List[UserAction]:
        return list(self._actions.get(user_id, []))


class InMemoryGameCatalog:
    def __init__(self, games: Optional[List[Game]] = None):
        self._games: List[Game] = list(games or [])

    def add(self, game: Game) -> None:
        self._games.append(game)

    def list_candidate_games(self, filter: Optional[Callable[[Game], bool]] = None) -> List[Game]:
        if filter is None:
            return list(self._games)
        return [g for g in self._games if filter(g)]

    def by_id(self) -> Dict[str, Game]:
        return {g.id: g for g in self._games}
