"""
IdentityEngine — facade over the identity, scoring, ML, adaptive and
predictive stages.

Holds one EngineState and one configured instance of each stateful
component. Collaborators (session store, game catalog) are optional: when
given, sessions and candidate games are fetched from them if the caller does
not pass them explicitly, and new sessions / mood events / actions are
persisted through them.
"""

import logging
import random
from collections import defaultdict
from datetime import datetime
from typing import Callable, Dict, List, Optional, Union

from identity_engine.models.config import EngineConfig, IdentityComputationOptions, resolve_config
from identity_engine.models.game import Game, ensure_games
from identity_engine.models.identity import PlayerIdentity, UserMood
from identity_engine.models.mood_events import (
    EnhancedPlayerIdentity,
    MoodSelectionEvent,
    MoodSuggestion,
    MoodSuggestionContext,
    UserAction,
)
from identity_engine.models.patterns import (
    NextGamePrediction,
    PredictiveContext,
    PredictiveInsight,
    PredictiveSuggestion,
)
from identity_engine.models.recommendation import (
    EnhancedGameRecommendation,
    EnhancedRecommendationContext,
    GameRecommendation,
    RecommendationContext,
)
from identity_engine.models.session import GameSession, ensure_sessions
from identity_engine.settings import EngineSettings, get_settings, load_engine_config
from identity_engine.stages import identity as identity_stage
from identity_engine.stages import resonance, trends
from identity_engine.stages.adaptive import AdaptivePersonaIntegration
from identity_engine.stages.ml import MLRecommendationEngine
from identity_engine.stages.predictive import PredictiveSuggestionEngine
from identity_engine.stages.scoring import get_enhanced_recommendations, get_recommendations
from identity_engine.state import EngineState, get_state
from identity_engine.stores import GameCatalog, SessionStore
from identity_engine.utils.scores import utc_now

logger = logging.getLogger(__name__)


class IdentityEngine:
    def __init__(
        self,
        config: Optional[EngineConfig] = None,
        state: Optional[EngineState] = None,
        session_store: Optional[SessionStore] = None,
        game_catalog: Optional[GameCatalog] = None,
        rng: Optional[random.Random] = None,
        clock: Callable[[], datetime] = utc_now,
    ):
        self.config = resolve_config(config)
        self.state = state or get_state()
        self.session_store = session_store
        self.game_catalog = game_catalog
        self.clock = clock
        self.ml = MLRecommendationEngine(self.config.ml, rng)
        self.adaptive = AdaptivePersonaIntegration(self.state, self.config.adaptive, clock)
        self.predictive = PredictiveSuggestionEngine(self.state, self.ml, self.config.predictive, clock)

    @classmethod
    def from_settings(cls, settings: Optional[EngineSettings] = None, **kwargs) -> "IdentityEngine":
        """Engine configured from environment settings with its own EngineState."""
        settings = settings or get_settings()
        config = load_engine_config(settings)
        kwargs.setdefault("state", EngineState(cache_ttl_seconds=config.predictive.cache_ttl_seconds))
        return cls(config=config, **kwargs)

    # --- 1. Collaborator helpers ---

    def _candidates(self, candidate_games: Optional[List[Union[Dict, Game]]]) -> List[Game]:
        if candidate_games is not None:
            return ensure_games(candidate_games)
        if self.game_catalog is None:
            return []
        return self.game_catalog.list_candidate_games()

    def _games_by_id(self) -> Dict[str, Game]:
        if self.game_catalog is None:
            return {}
        return {g.id: g for g in self.game_catalog.list_candidate_games()}

    def initialize(
        self,
        games: Optional[List[Union[Dict, Game]]] = None,
        sessions: Optional[List[Union[Dict, GameSession]]] = None,
    ) -> None:
        """Fit the ML engine and rebuild behavior patterns from a session corpus."""
        games = self._candidates(games)
        typed = ensure_sessions(sessions or [])
        self.ml.initialize(games, typed)
        by_user: Dict[str, List[GameSession]] = defaultdict(list)
        for session in typed:
            by_user[session.user_id or "default"].append(session)
        for user_id, user_sessions in by_user.items():
            self.predictive.analyze_behavior_patterns(user_id, user_sessions)

    # --- 2. Identity ---

    def compute_identity(
        self,
        user_id: str,
        sessions: Optional[List[Union[Dict, GameSession]]] = None,
        options: Optional[IdentityComputationOptions] = None,
        moods: Optional[List[UserMood]] = None,
    ) -> PlayerIdentity:
        if sessions is None:
            sessions = self.session_store.load_sessions(user_id) if self.session_store else []
        return identity_stage.compute_identity(
            user_id,
            sessions,
            options or self.config.identity,
            moods=moods,
            now=self.clock(),
            games_by_id=self._games_by_id(),
        )

    def update_identity(self, identity: PlayerIdentity, new_session: Union[Dict, GameSession]) -> PlayerIdentity:
        return identity_stage.update_identity(
            identity, new_session, self.config.identity, now=self.clock(), games_by_id=self._games_by_id(),
        )

    def update_mood_preference(self, identity: PlayerIdentity, mood_id: str, preference: float) -> PlayerIdentity:
        return identity_stage.update_mood_preference(identity, mood_id, preference, now=self.clock())

    def record_session(self, identity: PlayerIdentity, session: Union[Dict, GameSession]) -> PlayerIdentity:
        """
        Record a finished session: persist it, fold it into the ML profile and
        behavior patterns, and return the updated identity.
        """
        session = ensure_sessions([session])[0]
        if self.session_store is not None:
            self.session_store.append_session(session)
        user_id = session.user_id or identity.user_id
        self.ml.update_user_profile(user_id, session)
        self.predictive.update_behavior_patterns(user_id, session)
        return self.update_identity(identity, session)

    # --- 3. Recommendations ---

    def get_recommendations(
        self,
        identity: PlayerIdentity,
        context: Optional[Union[Dict, RecommendationContext]] = None,
        candidate_games: Optional[List[Union[Dict, Game]]] = None,
    ) -> List[GameRecommendation]:
        return get_recommendations(identity, context, self._candidates(candidate_games), self.config.scoring)

    def get_enhanced_recommendations(
        self,
        identity: PlayerIdentity,
        context: Union[Dict, EnhancedRecommendationContext],
        candidate_games: Optional[List[Union[Dict, Game]]] = None,
    ) -> List[EnhancedGameRecommendation]:
        return get_enhanced_recommendations(
            identity,
            context,
            self._candidates(candidate_games),
            config=self.config.hybrid,
            scoring_config=self.config.scoring,
            learned_weights=self.adaptive.learned_weights(identity.user_id),
        )

    def get_ml_recommendations(
        self,
        user_id: str,
        candidate_games: Optional[List[Union[Dict, Game]]] = None,
        count: Optional[int] = None,
    ) -> List[GameRecommendation]:
        return self.ml.generate_recommendations(user_id, self._candidates(candidate_games), count)

    # --- 4. Adaptive persona ---

    def process_mood_selection(
        self,
        user_id: str,
        event: Union[Dict, MoodSelectionEvent],
        identity: Optional[PlayerIdentity] = None,
    ) -> EnhancedPlayerIdentity:
        if isinstance(event, dict):
            event = MoodSelectionEvent.model_validate(event)
        enhanced = self.adaptive.process_mood_selection(user_id, event, identity)
        if self.session_store is not None:
            self.session_store.append_mood_event(event)
        return enhanced

    def learn_from_user_action(self, user_id: str, action: Union[Dict, UserAction]) -> None:
        if isinstance(action, dict):
            action = UserAction.model_validate(action)
        # A store that reports the action as already delivered stops replay here
        if self.session_store is not None and self.session_store.append_user_action(action) is False:
            logger.info("[adaptive] DUPLICATE_ACTION user_id=%s action_id=%s", user_id, action.id)
            return
        self.adaptive.learn_from_user_action(user_id, action)

    def generate_mood_suggestions(
        self,
        user_id: str,
        context: Optional[Union[Dict, MoodSuggestionContext]] = None,
    ) -> List[MoodSuggestion]:
        return self.adaptive.generate_mood_suggestions(user_id, context)

    def generate_personalized_recommendations(
        self,
        user_id: str,
        mood_id: str,
        candidate_games: Optional[List[Union[Dict, Game]]] = None,
    ) -> List[GameRecommendation]:
        return self.adaptive.generate_personalized_recommendations(
            user_id, mood_id, self._candidates(candidate_games),
        )

    # --- 5. Predictive ---

    def generate_suggestions(
        self,
        user_id: str,
        candidate_games: Optional[List[Union[Dict, Game]]],
        context: Union[Dict, PredictiveContext],
    ) -> List[PredictiveSuggestion]:
        return self.predictive.generate_suggestions(user_id, self._candidates(candidate_games), context)

    def get_predictive_insights(self, user_id: str) -> List[PredictiveInsight]:
        return self.predictive.get_predictive_insights(user_id)

    def predict_next_game(
        self,
        user_id: str,
        recent_sessions: List[Union[Dict, GameSession]],
        candidate_games: Optional[List[Union[Dict, Game]]] = None,
    ) -> NextGamePrediction:
        return self.predictive.predict_next_game(user_id, recent_sessions, self._candidates(candidate_games))

    # --- 6. Trends and resonance ---

    calculate_mood_forecast = staticmethod(trends.calculate_mood_forecast)
    calculate_session_resonance = staticmethod(resonance.calculate_session_resonance)
    analyze_session_resonance = staticmethod(resonance.analyze_session_resonance)
