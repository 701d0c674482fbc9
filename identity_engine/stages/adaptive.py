"""
Adaptive persona integration: online mood weight learning from feedback.

On each MoodSelectionEvent the user's mood history, daily/weekly rhythms and
contextual triggers are updated, then the event's outcome counters drive a
weight update for the selected mood:

    launch_rate  = launched / max(recommended, 1)
    satisfaction = (rating or 3) / 5
    adjustment   = (launch_rate * 0.6 + satisfaction * 0.4 - 0.5) * learning_rate

applied to every genre weight (clamped to [-1, 1]) and to the event's
time-of-day preference (clamped to [0, 1]). Confidence grows with sample size:
min(0.9, 0.1 + sample_size / 100).

UserActions mutate the most recent event's outcome block and re-run the
update. Delivery is at-most-once by the session store's contract; actions are
not deduplicated here.
"""

import logging
from collections import Counter
from datetime import datetime
from typing import Callable, Dict, List, Optional, Tuple, Union

from identity_engine.models.config import AdaptiveConfig
from identity_engine.models.game import Game, ensure_games
from identity_engine.models.identity import PlayerIdentity
from identity_engine.models.mood_events import (
    AdaptationMetrics,
    DynamicMoodWeights,
    EnhancedPlayerIdentity,
    MoodSelectionEvent,
    MoodSuggestion,
    MoodSuggestionContext,
    UserAction,
)
from identity_engine.models.recommendation import GameRecommendation
from identity_engine.state import AdaptiveUserState, EngineState, get_state
from identity_engine.taxonomy.moods import MOODS, get_mood, resolve_mood_id
from identity_engine.taxonomy.tags import normalize_tags
from identity_engine.utils.scores import clamp, time_of_day_bucket, utc_now

from .scoring.hybrid import validate_mood_combination

logger = logging.getLogger(__name__)

SOCIAL_CONTEXT_MOODS: Dict[str, List[str]] = {
    "solo": ["focused", "chill", "exploratory", "creative"],
    "co-op": ["social", "energetic", "creative"],
    "pvp": ["competitive", "energetic", "focused"],
}

STATIC_FALLBACK_COUNT = 5
STATIC_FALLBACK_SCORE = 75.0
RECENT_HISTORY_WINDOW = 10
MAX_COMPOUND_SUGGESTIONS = 2


def initial_mood_weights(mood_id: str, config: AdaptiveConfig, now: datetime) -> DynamicMoodWeights:
    mood = MOODS[mood_id]
    return DynamicMoodWeights(
        mood_id=mood_id,
        genre_weights=dict(mood.genre_weights),
        tag_weights=dict(mood.tag_weights),
        platform_biases=dict(mood.platform_bias),
        confidence=config.initial_confidence,
        sample_size=0,
        last_updated=now,
    )


class AdaptivePersonaIntegration:
    """
    Per-user mood learning over an injected EngineState.

    clock: returns the current time; used for last_updated stamps and as the
    default suggestion time.
    """

    def __init__(
        self,
        state: Optional[EngineState] = None,
        config: Optional[AdaptiveConfig] = None,
        clock: Callable[[], datetime] = utc_now,
    ):
        self.state = state or get_state()
        self.config = config or AdaptiveConfig()
        self.clock = clock

    # --- 1. State helpers ---

    def _user_state(self, user_id: str) -> AdaptiveUserState:
        state = self.state.adaptive_state(user_id)
        if not state.dynamic_mood_weights:
            now = self.clock()
            state.dynamic_mood_weights = {
                mood_id: initial_mood_weights(mood_id, self.config, now) for mood_id in MOODS
            }
        return state

    def learned_weights(self, user_id: str) -> Dict[str, DynamicMoodWeights]:
        """Learned weights for a user; empty until their first mood selection."""
        state = self.state.adaptive.get(user_id)
        return dict(state.dynamic_mood_weights) if state else {}

    def calculate_adaptation_metrics(self, history: List[MoodSelectionEvent]) -> AdaptationMetrics:
        cfg = self.config
        if not history:
            return AdaptationMetrics(learning_rate=cfg.base_learning_rate)
        recent = history[-RECENT_HISTORY_WINDOW:]
        avg_satisfaction = sum(
            e.outcomes.user_rating if e.outcomes.user_rating is not None else cfg.neutral_rating
            for e in recent
        ) / len(recent) / 5
        return AdaptationMetrics(
            learning_rate=min(cfg.max_learning_rate, cfg.base_learning_rate + len(history) / cfg.learning_rate_divisor),
            prediction_accuracy=min(0.9, 0.3 + len(recent) / 20),
            user_satisfaction_score=round(avg_satisfaction, 4),
            last_adaptation=self.clock(),
        )

    @staticmethod
    def calculate_hybrid_preferences(history: List[MoodSelectionEvent]) -> Dict[str, float]:
        """Summed launch rate per "primary+secondary" combination."""
        preferences: Dict[str, float] = {}
        for event in history:
            if event.secondary_mood:
                key = f"{event.primary_mood}+{event.secondary_mood}"
                preferences[key] = preferences.get(key, 0.0) + event.outcomes.launch_rate
        return preferences

    # --- 2. Weight update ---

    def weight_adjustment(self, event: MoodSelectionEvent, learning_rate: float) -> float:
        cfg = self.config
        rating = event.outcomes.user_rating
        satisfaction = (rating if rating is not None else cfg.neutral_rating) / 5
        factor = event.outcomes.launch_rate * cfg.launch_rate_weight + satisfaction * cfg.satisfaction_weight - 0.5
        return factor * learning_rate

    def _apply_weight_update(self, state: AdaptiveUserState, event: MoodSelectionEvent) -> None:
        weights = state.dynamic_mood_weights.get(event.primary_mood)
        if weights is None:
            logger.info(
                "[adaptive] NO_WEIGHTS_FOR_MOOD user_id=%s mood=%s", state.user_id, event.primary_mood,
            )
            return
        adjustment = self.weight_adjustment(event, state.adaptation_metrics.learning_rate)
        for genre, value in weights.genre_weights.items():
            weights.genre_weights[genre] = clamp(value + adjustment, -1.0, 1.0)
        bucket = event.context.time_of_day or time_of_day_bucket(event.timestamp)
        if bucket in weights.time_preferences:
            weights.time_preferences[bucket] = clamp(weights.time_preferences[bucket] + adjustment, 0.0, 1.0)
        weights.sample_size += 1
        weights.confidence = min(
            self.config.max_confidence,
            self.config.initial_confidence + weights.sample_size * self.config.confidence_per_sample,
        )
        weights.last_updated = self.clock()
        logger.debug(
            "[adaptive] WEIGHTS_UPDATED user_id=%s mood=%s adjustment=%.4f confidence=%.2f",
            state.user_id, event.primary_mood, adjustment, weights.confidence,
        )

    def _refresh(self, state: AdaptiveUserState, event: MoodSelectionEvent) -> None:
        state.adaptation_metrics = self.calculate_adaptation_metrics(state.mood_history)
        self._apply_weight_update(state, event)
        state.hybrid_mood_preferences = self.calculate_hybrid_preferences(state.mood_history)

    # --- 3. Public operations ---

    def process_mood_selection(
        self,
        user_id: str,
        event: Union[Dict, MoodSelectionEvent],
        identity: Optional[PlayerIdentity] = None,
    ) -> EnhancedPlayerIdentity:
        """
        Record a mood selection and learn from its outcomes.

        Raises InvalidMoodCombinationError for a conflicting mood pair.
        """
        if isinstance(event, dict):
            event = MoodSelectionEvent.model_validate(event)
        validate_mood_combination(event.primary_mood, event.secondary_mood)
        event = event.model_copy(update={
            "primary_mood": resolve_mood_id(event.primary_mood),
            "secondary_mood": resolve_mood_id(event.secondary_mood),
        }, deep=True)

        state = self._user_state(user_id)
        state.mood_history.append(event)

        patterns = state.mood_patterns
        bucket = event.context.time_of_day or time_of_day_bucket(event.timestamp)
        weekday = event.context.day_of_week if event.context.day_of_week is not None else event.timestamp.weekday()
        patterns.daily_rhythm.setdefault(bucket, []).append(event.primary_mood)
        patterns.weekly_patterns.setdefault(weekday, []).append(event.primary_mood)
        previous = resolve_mood_id(event.context.previous_mood)
        if previous:
            patterns.contextual_triggers[f"after:{previous}"] = event.primary_mood

        self._refresh(state, event)
        return self.snapshot(user_id, identity)

    def learn_from_user_action(self, user_id: str, action: Union[Dict, UserAction]) -> None:
        """Fold an action into the user's most recent mood selection."""
        if isinstance(action, dict):
            action = UserAction.model_validate(action)
        state = self.state.adaptive.get(user_id)
        if state is None or not state.mood_history:
            logger.info("[adaptive] ACTION_WITHOUT_MOOD_EVENT user_id=%s action=%s", user_id, action.type)
            return

        event = state.mood_history[-1]
        outcomes = event.outcomes
        meta = action.metadata
        mutated = True
        if action.type == "launch":
            outcomes.games_launched += 1
            if meta.session_duration:
                outcomes.average_session_duration = meta.session_duration
            if meta.rating is not None:
                outcomes.user_rating = meta.rating
        elif action.type == "ignore":
            outcomes.ignored_recommendations += 1
        elif action.type == "rate" and meta.rating is not None:
            outcomes.user_rating = meta.rating
        elif action.type == "session_complete" and meta.session_duration:
            outcomes.average_session_duration = meta.session_duration
        else:
            mutated = False

        if action.type == "switch_mood":
            previous = resolve_mood_id(meta.previous_mood)
            target = resolve_mood_id(action.mood_context)
            if previous and target:
                state.mood_patterns.contextual_triggers[f"after:{previous}"] = target

        if mutated:
            self._refresh(state, event)

    def calculate_mood_confidence(self, state: AdaptiveUserState, mood_id: str, bucket: str) -> float:
        weights = state.dynamic_mood_weights.get(mood_id)
        if weights is None:
            return 0.5
        time_preference = weights.time_preferences.get(bucket, 0.5)
        return clamp(weights.confidence + (time_preference - 0.5) * 0.3, 0.0, 1.0)

    def generate_mood_suggestions(
        self,
        user_id: str,
        context: Optional[Union[Dict, MoodSuggestionContext]] = None,
    ) -> List[MoodSuggestion]:
        """Top mood suggestions from rhythms, triggers, social context and past mood combinations."""
        if isinstance(context, dict):
            context = MoodSuggestionContext.model_validate(context)
        context = context or MoodSuggestionContext()
        state = self._user_state(user_id)
        bucket = context.time_of_day or time_of_day_bucket(context.current_time or self.clock())

        merged: Dict[Tuple[str, Optional[str]], MoodSuggestion] = {}

        def add(mood_id: str, reasoning: str, factor: str) -> None:
            confidence = self.calculate_mood_confidence(state, mood_id, bucket)
            existing = merged.get((mood_id, None))
            if existing is None:
                merged[(mood_id, None)] = MoodSuggestion(
                    mood_id=mood_id, confidence=confidence, reasoning=reasoning, contextual_factors=[factor],
                )
            elif factor not in existing.contextual_factors:
                existing.contextual_factors.append(factor)

        # 1) Daily rhythm, most frequent first
        for mood_id, _ in Counter(state.mood_patterns.daily_rhythm.get(bucket, [])).most_common():
            add(mood_id, f"Based on your patterns, you often feel {mood_id} in the {bucket}", bucket)

        # 2) What usually follows the current mood
        current = resolve_mood_id(context.current_mood)
        if current:
            follow = state.mood_patterns.contextual_triggers.get(f"after:{current}")
            if follow and get_mood(follow):
                add(follow, f"You often switch to {follow} after {current}", f"after:{current}")

        # 3) Social context
        if context.social_context:
            for mood_id in SOCIAL_CONTEXT_MOODS.get(context.social_context, []):
                add(mood_id, f"Good match for {context.social_context} gaming", context.social_context)

        # 4) Mood combinations that led to launches
        ranked_pairs = sorted(state.hybrid_mood_preferences.items(), key=lambda kv: kv[1], reverse=True)
        for pair, preference in ranked_pairs[:MAX_COMPOUND_SUGGESTIONS]:
            if preference <= 0:
                break
            primary, secondary = pair.split("+", 1)
            uses = sum(
                1 for e in state.mood_history
                if e.primary_mood == primary and e.secondary_mood == secondary
            )
            success_rate = preference / max(uses, 1)
            confidence = clamp(
                0.5 * self.calculate_mood_confidence(state, primary, bucket) + 0.5 * success_rate, 0.0, 1.0,
            )
            merged[(primary, secondary)] = MoodSuggestion(
                mood_id=primary,
                secondary_mood=secondary,
                confidence=confidence,
                reasoning=f"You often pair {primary} with {secondary}",
                contextual_factors=["hybrid"],
            )

        suggestions = sorted(merged.values(), key=lambda s: s.confidence, reverse=True)
        return suggestions[: self.config.max_mood_suggestions]

    def generate_personalized_recommendations(
        self,
        user_id: str,
        mood_id: str,
        candidate_games: List[Union[Dict, Game]],
    ) -> List[GameRecommendation]:
        """
        Score games with the user's learned weights for a mood.

        score = 50 + (50 + avg_genre_w*100*0.4 + avg_tag_w*100*0.3 - 50) * confidence,
        kept when above the personalized threshold. Users without learned weights
        get the static fallback; unknown moods yield [].
        """
        mood = get_mood(mood_id)
        if mood is None:
            logger.info("[adaptive_fallback] UNKNOWN_MOOD user_id=%s mood=%s", user_id, mood_id)
            return []
        games = ensure_games(candidate_games)
        weights = self.learned_weights(user_id).get(mood.id)
        if weights is None:
            logger.info("[adaptive_fallback] STATIC_WEIGHTS user_id=%s mood=%s", user_id, mood.id)
            return [
                GameRecommendation(
                    game_id=g.id,
                    name=g.name,
                    genre=g.primary_genre or "unknown",
                    score=STATIC_FALLBACK_SCORE,
                    reasons=[f"Matches {mood.name} mood"],
                    mood_match=STATIC_FALLBACK_SCORE,
                    tags=list(g.tags),
                )
                for g in games[:STATIC_FALLBACK_COUNT]
            ]

        recommendations = []
        for game in games:
            score = 50.0
            genres = game.genre_keys()
            if genres:
                score += sum(weights.genre_weights.get(g, 0.0) * 100 for g in genres) / len(genres) * 0.4
            tags = normalize_tags(game.tags)
            if tags:
                score += sum(weights.tag_weights.get(t, 0.0) * 100 for t in tags) / len(tags) * 0.3
            score = clamp(50 + (score - 50) * weights.confidence)
            if score <= self.config.personalized_score_threshold:
                continue
            recommendations.append(GameRecommendation(
                game_id=game.id,
                name=game.name,
                genre=game.primary_genre or "unknown",
                score=round(score, 2),
                reasons=[f"Matches your learned preferences for {mood.id}"],
                mood_match=round(score, 2),
                tags=list(game.tags),
            ))
        recommendations.sort(key=lambda r: r.score, reverse=True)
        return recommendations[: self.config.max_personalized_recommendations]

    def snapshot(self, user_id: str, identity: Optional[PlayerIdentity] = None) -> EnhancedPlayerIdentity:
        """Deep copy of the user's adaptive state."""
        state = self._user_state(user_id)
        return EnhancedPlayerIdentity(
            user_id=user_id,
            identity=identity,
            mood_history=[e.model_copy(deep=True) for e in state.mood_history],
            dynamic_mood_weights={k: v.model_copy(deep=True) for k, v in state.dynamic_mood_weights.items()},
            mood_patterns=state.mood_patterns.model_copy(deep=True),
            hybrid_mood_preferences=dict(state.hybrid_mood_preferences),
            adaptation_metrics=state.adaptation_metrics.model_copy(),
        )
