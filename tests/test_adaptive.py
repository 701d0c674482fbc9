"""
Adaptive Persona Tests

Tests mood-selection learning, the user-action feedback loop, mood
suggestions and personalized recommendations.

Scenarios:
----------
- Two selections at 9:00 and 9:15 on the same day both land in the
  "morning" daily-rhythm bucket.
- recommended=10, launched=8, rating=5 raises the mood's genre weights.

Run:
----
    pytest tests/test_adaptive.py -v
"""

from datetime import datetime, timezone

import pytest
from pydantic import ValidationError

from identity_engine.errors import InvalidMoodCombinationError
from identity_engine.models.config import AdaptiveConfig
from identity_engine.stages.adaptive import AdaptivePersonaIntegration
from identity_engine.taxonomy.moods import MOODS

MORNING = datetime(2024, 6, 12, 9, 0, tzinfo=timezone.utc)


def _event(n, mood="chill", secondary=None, timestamp=MORNING, **outcomes):
    return {
        "id": f"e-{n}",
        "user_id": "user-1",
        "primary_mood": mood,
        "secondary_mood": secondary,
        "timestamp": timestamp,
        "outcomes": outcomes,
    }


def _action(n, kind, **metadata):
    return {
        "id": f"a-{n}",
        "user_id": "user-1",
        "type": kind,
        "timestamp": MORNING,
        "metadata": metadata,
    }


class TestMoodSelection:
    @pytest.fixture(autouse=True)
    def setup(self, state):
        self.state = state
        self.adaptive = AdaptivePersonaIntegration(state, clock=lambda: MORNING)

    def test_morning_rhythm_accumulates(self):
        self.adaptive.process_mood_selection("user-1", _event(1, "chill"))
        enhanced = self.adaptive.process_mood_selection(
            "user-1", _event(2, "focused", timestamp=MORNING.replace(minute=15)),
        )
        assert enhanced.mood_patterns.daily_rhythm["morning"] == ["chill", "focused"]
        assert enhanced.mood_patterns.weekly_patterns[MORNING.weekday()] == ["chill", "focused"]
        assert len(enhanced.mood_history) == 2

    def test_positive_outcome_raises_genre_weights(self):
        before = dict(MOODS["energetic"].genre_weights)
        enhanced = self.adaptive.process_mood_selection(
            "user-1",
            _event(1, "energetic", games_recommended=10, games_launched=8, user_rating=5),
        )
        after = enhanced.dynamic_mood_weights["energetic"].genre_weights
        for genre, weight in before.items():
            assert after[genre] > weight

    def test_poor_outcome_lowers_genre_weights(self):
        before = dict(MOODS["chill"].genre_weights)
        enhanced = self.adaptive.process_mood_selection(
            "user-1", _event(1, "chill", games_recommended=10, games_launched=0, user_rating=1),
        )
        after = enhanced.dynamic_mood_weights["chill"].genre_weights
        for genre, weight in before.items():
            assert after[genre] < weight

    def test_confidence_non_decreasing(self):
        previous = 0.0
        for n in range(15):
            enhanced = self.adaptive.process_mood_selection("user-1", _event(n, "story"))
            confidence = enhanced.dynamic_mood_weights["story"].confidence
            assert confidence >= previous
            previous = confidence
        assert previous == pytest.approx(0.1 + 15 * 0.01)

    def test_confidence_capped(self):
        adaptive = AdaptivePersonaIntegration(
            self.state, AdaptiveConfig(confidence_per_sample=0.5), clock=lambda: MORNING,
        )
        for n in range(4):
            enhanced = adaptive.process_mood_selection("user-2", _event(n, "social"))
        assert enhanced.dynamic_mood_weights["social"].confidence == 0.9

    def test_weights_stay_in_range(self):
        for n in range(40):
            enhanced = self.adaptive.process_mood_selection(
                "user-1", _event(n, "chill", games_recommended=1, games_launched=1, user_rating=5),
            )
        weights = enhanced.dynamic_mood_weights["chill"]
        assert all(-1 <= w <= 1 for w in weights.genre_weights.values())
        assert all(0 <= p <= 1 for p in weights.time_preferences.values())

    def test_conflicting_pair_rejected(self):
        with pytest.raises(InvalidMoodCombinationError):
            self.adaptive.process_mood_selection("user-1", _event(1, "chill", secondary="competitive"))
        assert self.state.adaptive.get("user-1") is None or not self.state.adaptive["user-1"].mood_history

    @pytest.mark.parametrize("mood", ["", "   "])
    def test_blank_primary_mood_rejected(self, mood):
        with pytest.raises(ValidationError):
            self.adaptive.process_mood_selection("user-1", _event(1, mood))
        assert self.adaptive.generate_mood_suggestions("user-1", {"time_of_day": "morning"}) == []

    def test_aliases_are_canonical(self):
        enhanced = self.adaptive.process_mood_selection("user-1", _event(1, "relaxed"))
        assert enhanced.mood_history[0].primary_mood == "chill"

    def test_snapshot_is_a_copy(self):
        enhanced = self.adaptive.process_mood_selection("user-1", _event(1, "chill"))
        enhanced.dynamic_mood_weights["chill"].genre_weights["casual"] = -1.0
        assert self.state.adaptive["user-1"].dynamic_mood_weights["chill"].genre_weights["casual"] != -1.0

    def test_hybrid_preferences(self):
        enhanced = self.adaptive.process_mood_selection(
            "user-1", _event(1, "chill", secondary="creative", games_recommended=4, games_launched=2),
        )
        assert enhanced.hybrid_mood_preferences == {"chill+creative": 0.5}

    def test_contextual_trigger(self):
        event = _event(1, "creative")
        event["context"] = {"previous_mood": "chill"}
        enhanced = self.adaptive.process_mood_selection("user-1", event)
        assert enhanced.mood_patterns.contextual_triggers == {"after:chill": "creative"}


class TestUserActions:
    @pytest.fixture(autouse=True)
    def setup(self, state):
        self.state = state
        self.adaptive = AdaptivePersonaIntegration(state, clock=lambda: MORNING)
        self.adaptive.process_mood_selection("user-1", _event(1, "energetic", games_recommended=10))

    def _last(self):
        return self.state.adaptive["user-1"].mood_history[-1]

    def test_launch_updates_last_event(self):
        before = self.state.adaptive["user-1"].dynamic_mood_weights["energetic"].genre_weights["action"]
        self.adaptive.learn_from_user_action("user-1", _action(1, "launch", session_duration=40, rating=5))
        outcomes = self._last().outcomes
        assert outcomes.games_launched == 1
        assert outcomes.average_session_duration == 40
        assert outcomes.user_rating == 5
        weights = self.state.adaptive["user-1"].dynamic_mood_weights["energetic"]
        assert weights.sample_size == 2
        assert weights.genre_weights["action"] != before

    def test_ignore_counts(self):
        self.adaptive.learn_from_user_action("user-1", _action(1, "ignore"))
        self.adaptive.learn_from_user_action("user-1", _action(2, "ignore"))
        assert self._last().outcomes.ignored_recommendations == 2

    def test_replay_is_not_deduplicated(self):
        action = _action(1, "launch")
        self.adaptive.learn_from_user_action("user-1", action)
        self.adaptive.learn_from_user_action("user-1", action)
        assert self._last().outcomes.games_launched == 2

    def test_switch_mood_records_trigger(self):
        action = _action(1, "switch_mood", previous_mood="energetic")
        action["mood_context"] = "social"
        self.adaptive.learn_from_user_action("user-1", action)
        assert self.state.adaptive["user-1"].mood_patterns.contextual_triggers["after:energetic"] == "social"
        assert self.state.adaptive["user-1"].dynamic_mood_weights["energetic"].sample_size == 1

    def test_action_without_history_is_ignored(self):
        self.adaptive.learn_from_user_action("someone-else", _action(1, "launch"))
        assert "someone-else" not in self.state.adaptive


class TestSuggestions:
    @pytest.fixture(autouse=True)
    def setup(self, state):
        self.adaptive = AdaptivePersonaIntegration(state, clock=lambda: MORNING)

    def test_rhythm_suggestion(self):
        for n in range(3):
            self.adaptive.process_mood_selection("user-1", _event(n, "focused"))
        suggestions = self.adaptive.generate_mood_suggestions("user-1", {"time_of_day": "morning"})
        assert suggestions[0].mood_id == "focused"
        assert "morning" in suggestions[0].reasoning
        assert suggestions[0].contextual_factors == ["morning"]

    def test_social_context_suggestions(self):
        suggestions = self.adaptive.generate_mood_suggestions("new-user", {"social_context": "pvp"})
        assert [s.mood_id for s in suggestions] == ["competitive", "energetic", "focused"]
        assert all(s.reasoning == "Good match for pvp gaming" for s in suggestions)

    def test_merged_factors_and_top_three(self):
        self.adaptive.process_mood_selection("user-1", _event(1, "focused"))
        suggestions = self.adaptive.generate_mood_suggestions(
            "user-1", {"current_time": MORNING, "social_context": "solo"},
        )
        assert len(suggestions) == 3
        focused = [s for s in suggestions if s.mood_id == "focused"][0]
        assert focused.contextual_factors == ["morning", "solo"]
        assert all(0 <= s.confidence <= 1 for s in suggestions)

    def test_compound_suggestions_from_combinations(self):
        for n in range(2):
            self.adaptive.process_mood_selection(
                "user-1", _event(n, "chill", secondary="creative", games_recommended=4, games_launched=2),
            )
        self.adaptive.process_mood_selection(
            "user-1", _event(5, "social", secondary="energetic", games_recommended=4, games_launched=0),
        )
        suggestions = self.adaptive.generate_mood_suggestions("user-1", {"time_of_day": "night"})
        assert len(suggestions) == 1
        compound = suggestions[0]
        assert (compound.mood_id, compound.secondary_mood) == ("chill", "creative")
        assert compound.reasoning == "You often pair chill with creative"
        assert compound.contextual_factors == ["hybrid"]
        assert 0 <= compound.confidence <= 1

    def test_compound_and_single_kept_apart(self):
        self.adaptive.process_mood_selection(
            "user-1", _event(1, "chill", secondary="creative", games_recommended=2, games_launched=2),
        )
        suggestions = self.adaptive.generate_mood_suggestions("user-1", {"time_of_day": "morning"})
        pairs = {(s.mood_id, s.secondary_mood) for s in suggestions}
        assert pairs == {("chill", None), ("chill", "creative")}

    def test_empty_context(self):
        assert self.adaptive.generate_mood_suggestions("new-user") == []


class TestPersonalizedRecommendations:
    @pytest.fixture(autouse=True)
    def setup(self, state, games):
        self.games = games
        self.adaptive = AdaptivePersonaIntegration(state, clock=lambda: MORNING)

    def test_static_fallback(self):
        recs = self.adaptive.generate_personalized_recommendations("new-user", "chill", self.games)
        assert len(recs) == 5
        assert all(r.score == 75 and r.reasons == ["Matches Chill mood"] for r in recs)

    def test_unknown_mood(self):
        assert self.adaptive.generate_personalized_recommendations("new-user", "grumpy", self.games) == []

    def test_learned_scores_respect_threshold(self):
        for n in range(30):
            self.adaptive.process_mood_selection(
                "user-1", _event(n, "chill", games_recommended=1, games_launched=1, user_rating=5),
            )
        recs = self.adaptive.generate_personalized_recommendations("user-1", "chill", self.games)
        assert recs
        assert all(r.score > 60 for r in recs)
        assert recs[0].reasons == ["Matches your learned preferences for chill"]
        assert [r.score for r in recs] == sorted((r.score for r in recs), reverse=True)
