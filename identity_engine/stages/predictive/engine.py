"""
Predictive suggestion engine.

Each candidate gets five independent fit scores in [0, 1]:
  time     - sessions seen within hour±2 on the same weekday (0.9 if one of
             them was in the game's genre, else 0.6; 0.5 without history)
  mood     - game appears among trigger games of transitions out of the
             current mood (0.9 / 0.4; 0.5 when unknown)
  energy   - 1 - |energy_level/100 - genre intensity|
  social   - genre socialness (co-op/pvp) or its inverse (solo)
  sequence - genre is a common continuation of the recent genre n-gram
             (0.9 / 0.5; 0.3 with no matching n-gram)

confidence is their mean; suggestions below min_confidence are dropped.
Results are cached per (user, minute, mood, device) until the TTL expires or
new behavior is recorded for the user.
"""

import logging
from datetime import datetime
from typing import Callable, Dict, List, Optional, Union

from identity_engine.models.config import PredictiveConfig
from identity_engine.models.game import Game, ensure_games
from identity_engine.models.patterns import (
    BehaviorPattern,
    FitScores,
    NextGamePrediction,
    PredictiveContext,
    PredictiveInsight,
    PredictiveSuggestion,
)
from identity_engine.models.session import GameSession, ensure_sessions
from identity_engine.state import EngineState, get_state
from identity_engine.taxonomy.genres import DEFAULT_GENRE_ESTIMATE, GENRE_INTENSITY, GENRE_SOCIALNESS
from identity_engine.taxonomy.moods import resolve_mood_id
from identity_engine.utils.scores import as_utc, clamp, round_to_minute, utc_now

from ..ml import MLRecommendationEngine
from .insights import get_predictive_insights
from .patterns import build_pattern, matching_sequences, record_session

logger = logging.getLogger(__name__)

DEFAULT_PLAYTIME_MINUTES = 60.0
FIT_REASON_THRESHOLD = 0.7
FIT_REASONS = {
    "time": "Perfect timing for this game",
    "mood": "Matches your current mood",
    "energy": "Energy level aligns with game intensity",
    "social": "Fits your social context",
    "sequence": "Follows your natural gaming flow",
}
MAX_ALTERNATIVES = 3


def _genre_estimate(table: Dict[str, float], genres: List[str]) -> float:
    known = [table[g] for g in genres if g in table]
    return max(known) if known else DEFAULT_GENRE_ESTIMATE


def _hour_distance(a: int, b: int) -> int:
    diff = abs(a - b) % 24
    return min(diff, 24 - diff)


def _recent_genres(sessions: List[GameSession], limit: int) -> List[str]:
    ordered = sorted(sessions, key=lambda s: as_utc(s.start_time))
    return [s.genre_key for s in ordered if s.genre_key][-limit:]


class PredictiveSuggestionEngine:
    """
    Pattern-based suggestions over an injected EngineState.

    ml_engine: used for predicted satisfaction; without one every game
    predicts 0.5.
    """

    def __init__(
        self,
        state: Optional[EngineState] = None,
        ml_engine: Optional[MLRecommendationEngine] = None,
        config: Optional[PredictiveConfig] = None,
        clock: Callable[[], datetime] = utc_now,
    ):
        self.state = state or get_state()
        self.ml_engine = ml_engine
        self.config = config or PredictiveConfig()
        self.clock = clock

    # --- 1. Pattern maintenance ---

    def analyze_behavior_patterns(
        self, user_id: str, sessions: List[Union[Dict, GameSession]],
    ) -> BehaviorPattern:
        """Rebuild the user's pattern from their full session history."""
        pattern = build_pattern(user_id, ensure_sessions(sessions), self.config)
        self.state.set_behavior_pattern(user_id, pattern)
        logger.info("[predictive] PATTERNS_ANALYZED user_id=%s sessions=%s", user_id, pattern.total_sessions)
        return pattern

    def update_behavior_patterns(self, user_id: str, session: Union[Dict, GameSession]) -> BehaviorPattern:
        """Fold one new session into the user's pattern."""
        session = ensure_sessions([session])[0]
        pattern = self.state.behavior_pattern(user_id) or BehaviorPattern(user_id=user_id)
        record_session(pattern, session, self.config)
        self.state.set_behavior_pattern(user_id, pattern)
        return pattern

    # --- 2. Fit scores ---

    def time_fit(self, pattern: BehaviorPattern, game: Game, when: datetime) -> float:
        when = as_utc(when)
        nearby = [
            slot for slot in pattern.time_patterns.values()
            if slot.day_of_week == when.weekday()
            and _hour_distance(slot.hour, when.hour) <= self.config.hour_window
        ]
        if not nearby:
            return 0.5
        genres = set(game.genre_keys())
        if any(genres & set(slot.genre_counts) for slot in nearby):
            return 0.9
        return 0.6

    @staticmethod
    def mood_fit(pattern: BehaviorPattern, game: Game, current_mood: Optional[str]) -> float:
        if not current_mood:
            return 0.5
        mood = resolve_mood_id(current_mood) or current_mood.strip().lower()
        outgoing = [t for t in pattern.mood_transitions.values() if t.from_mood == mood]
        if not outgoing:
            return 0.5
        return 0.9 if any(game.id in t.trigger_games for t in outgoing) else 0.4

    @staticmethod
    def energy_fit(game: Game, energy_level: Optional[float]) -> float:
        if energy_level is None:
            return 0.5
        intensity = _genre_estimate(GENRE_INTENSITY, game.genre_keys())
        return clamp(1 - abs(energy_level / 100 - intensity), 0.0, 1.0)

    @staticmethod
    def social_fit(game: Game, social_context: Optional[str]) -> float:
        if not social_context:
            return 0.5
        socialness = _genre_estimate(GENRE_SOCIALNESS, game.genre_keys())
        if game.is_multiplayer:
            socialness = max(socialness, 0.8)
        return 1 - socialness if social_context == "solo" else socialness

    @staticmethod
    def sequence_fit(pattern: BehaviorPattern, game: Game, recent_genres: List[str]) -> float:
        if not recent_genres:
            return 0.5
        matches = matching_sequences(pattern, recent_genres)
        if not matches:
            return 0.3
        genres = set(game.genre_keys())
        if any(genres & set(seq.common_next_genres()) for seq in matches):
            return 0.9
        return 0.5

    def estimate_playtime(self, pattern: BehaviorPattern, game: Game) -> float:
        genre = game.primary_genre
        durations = [
            p.average_duration for p in pattern.session_length_patterns
            if genre and genre in p.genre_counts
        ]
        if durations:
            return round(sum(durations) / len(durations), 1)
        return game.average_playtime or DEFAULT_PLAYTIME_MINUTES

    def predicted_satisfaction(self, user_id: str, game: Game, available: Optional[float], estimate: float) -> float:
        rating = self.ml_engine.predict_rating(user_id, game.id) if self.ml_engine else 0.5
        if available is not None and estimate > 0:
            rating *= min(1.0, available / estimate)
        return clamp(rating, 0.0, 1.0)

    # --- 3. Suggestions ---

    def _cache_key(self, user_id: str, context: PredictiveContext) -> tuple:
        return (
            user_id,
            round_to_minute(as_utc(context.timestamp)),
            resolve_mood_id(context.current_mood) or context.current_mood,
            context.device,
        )

    def fallback_suggestions(self, games: List[Game]) -> List[PredictiveSuggestion]:
        return [
            PredictiveSuggestion(
                game_id=g.id,
                name=g.name,
                genre=g.primary_genre,
                confidence=0.5,
                reasoning=["General recommendation"],
                estimated_playtime=g.average_playtime or DEFAULT_PLAYTIME_MINUTES,
            )
            for g in games[: self.config.fallback_count]
        ]

    def alternatives(self, game: Game, games: List[Game]) -> List[str]:
        """Same-genre candidates first, then the ML engine's most similar games."""
        picks = [
            other.id for other in games
            if other.id != game.id and other.primary_genre and other.primary_genre == game.primary_genre
        ]
        if self.ml_engine is not None:
            for other_id in self.ml_engine.similar_games(game.id, [g.id for g in games], MAX_ALTERNATIVES):
                if other_id not in picks:
                    picks.append(other_id)
        return picks[:MAX_ALTERNATIVES]

    def generate_suggestions(
        self,
        user_id: str,
        candidate_games: List[Union[Dict, Game]],
        context: Union[Dict, PredictiveContext],
    ) -> List[PredictiveSuggestion]:
        """
        Fit-scored suggestions, cached per (user, minute, mood, device).

        The candidate set is not part of the cache key: a hit computed for a
        wider candidate list is narrowed to the games passed in this call.
        """
        if isinstance(context, dict):
            context = PredictiveContext.model_validate(context)
        games = ensure_games(candidate_games)
        pattern = self.state.behavior_pattern(user_id)
        if pattern is None or pattern.total_sessions == 0:
            logger.info("[predictive_fallback] NO_PATTERN user_id=%s", user_id)
            return self.fallback_suggestions(games)

        key = self._cache_key(user_id, context)
        cached = self.state.prediction_cache.get(key)
        if cached is not None:
            logger.debug("[predictive] CACHE_HIT user_id=%s", user_id)
            available = {g.id for g in games}
            hits = []
            for s in cached:
                if s.game_id not in available:
                    continue
                hit = s.model_copy(deep=True)
                hit.alternatives = [a for a in hit.alternatives if a in available]
                hits.append(hit)
            return hits

        recent = _recent_genres(context.recent_sessions, self.config.max_sequence_length)
        suggestions = []
        for game in games:
            fit = FitScores(
                time=self.time_fit(pattern, game, context.timestamp),
                mood=self.mood_fit(pattern, game, context.current_mood),
                energy=self.energy_fit(game, context.energy_level),
                social=self.social_fit(game, context.social_context),
                sequence=self.sequence_fit(pattern, game, recent),
            )
            confidence = fit.average()
            if confidence < self.config.min_confidence:
                continue
            estimate = self.estimate_playtime(pattern, game)
            suggestions.append(PredictiveSuggestion(
                game_id=game.id,
                name=game.name,
                genre=game.primary_genre,
                confidence=round(confidence, 4),
                predicted_satisfaction=round(
                    self.predicted_satisfaction(user_id, game, context.available_time, estimate), 4,
                ),
                fit_scores=fit,
                reasoning=[
                    text for name, text in FIT_REASONS.items()
                    if getattr(fit, name) > FIT_REASON_THRESHOLD
                ],
                estimated_playtime=estimate,
                alternatives=self.alternatives(game, games),
            ))

        suggestions.sort(key=lambda s: s.confidence, reverse=True)
        suggestions = suggestions[: self.config.max_suggestions]
        self.state.prediction_cache.set(key, suggestions)
        return [s.model_copy(deep=True) for s in suggestions]

    # --- 4. Next game and insights ---

    def predict_next_game(
        self,
        user_id: str,
        recent_sessions: List[Union[Dict, GameSession]],
        candidate_games: Optional[List[Union[Dict, Game]]] = None,
    ) -> NextGamePrediction:
        """
        Most frequent stored n-gram matching the last genres played, and its
        top continuation. confidence = n-gram frequency.
        """
        pattern = self.state.behavior_pattern(user_id)
        if pattern is None or not pattern.genre_sequences:
            logger.info("[predictive_fallback] NO_SEQUENCES user_id=%s", user_id)
            return NextGamePrediction(reasoning="Insufficient data for prediction")

        recent = _recent_genres(ensure_sessions(recent_sessions), self.config.max_sequence_length)
        matches = [seq for seq in matching_sequences(pattern, recent) if seq.next_genres]
        if not matches:
            return NextGamePrediction(reasoning="No matching gaming sequence found")

        # Ties go to the longer sequence
        best = max(matches, key=lambda seq: (seq.count, len(seq.sequence)))
        next_genre = best.common_next_genres(1)[0]
        game_id = None
        for game in ensure_games(candidate_games or []):
            if next_genre in game.genre_keys():
                game_id = game.id
                break
        return NextGamePrediction(
            next_genre=next_genre,
            game_id=game_id,
            confidence=round(min(1.0, pattern.sequence_frequency(best)), 4),
            reasoning=f"After {' then '.join(best.sequence)} you usually play {next_genre}",
            matched_sequence=list(best.sequence),
        )

    def get_predictive_insights(self, user_id: str) -> List[PredictiveInsight]:
        return get_predictive_insights(self.state.behavior_pattern(user_id), self.config)
