"""
Predictive Pattern Engine Tests

Tests behavior pattern mining, fit-scored suggestions, the TTL cache,
next-game prediction and insights.

Dataset Used:
-------------
- 4 Wednesday evenings, each: action at 18:00 (mood frustrated),
  rpg at 19:00 (mood chill), puzzle at 20:00 (mood chill)

Run:
----
    pytest tests/test_predictive.py -v
"""

from datetime import datetime, timedelta, timezone

import pytest

from identity_engine.models.config import PredictiveConfig
from identity_engine.models.session import GameSession
from identity_engine.stages.ml import MLRecommendationEngine
from identity_engine.stages.predictive import PredictiveSuggestionEngine, build_pattern
from identity_engine.state import EngineState, TTLCache

NOW = datetime(2024, 6, 12, 20, 0, tzinfo=timezone.utc)  # Wednesday evening

EVENING = [("g-action", "action", 18, "frustrated"), ("g-rpg", "rpg", 19, "chill"), ("g-puzzle", "puzzle", 20, "chill")]


def _session(n, game_id, genre, start, mood=None, **fields):
    data = {
        "id": f"p-{n}",
        "user_id": "user-1",
        "game_id": game_id,
        "genre": genre,
        "start_time": start,
        "end_time": start + timedelta(minutes=45),
        "duration": 45,
        "mood": mood,
    }
    data.update(fields)
    return GameSession.model_validate(data)


def weekly_sessions(weeks=4):
    sessions = []
    for week in range(weeks, 0, -1):
        day = NOW - timedelta(weeks=week)
        for game_id, genre, hour, mood in EVENING:
            start = day.replace(hour=hour, minute=0)
            sessions.append(_session(len(sessions), game_id, genre, start, mood, completed=genre == "puzzle"))
    return sessions


class FakeClock:
    def __init__(self):
        self.now = 0.0

    def __call__(self):
        return self.now


class TestPatternMining:
    @pytest.fixture(autouse=True)
    def setup(self):
        self.sessions = weekly_sessions()
        self.pattern = build_pattern("user-1", self.sessions, PredictiveConfig())

    def test_time_patterns(self):
        assert self.pattern.total_sessions == 12
        slot = self.pattern.time_patterns[f"18:{NOW.weekday()}"]
        assert slot.count == 4
        assert slot.genre_counts == {"action": 4}
        assert slot.average_session_length == 45
        assert self.pattern.time_likelihood(slot) == pytest.approx(4 / 12)

    def test_genre_sequences(self):
        pair = self.pattern.genre_sequences["action|rpg"]
        assert pair.count == 4
        assert pair.common_next_genres() == ["puzzle"]
        triple = self.pattern.genre_sequences["rpg|puzzle|action"]
        assert triple.next_genres == {"rpg": 3}

    def test_mood_transitions(self):
        forward = self.pattern.mood_transitions["frustrated>chill"]
        assert forward.count == 4
        assert forward.trigger_games == ["g-rpg"]
        assert forward.probability == 1.0
        assert forward.average_gap_minutes == pytest.approx(15)
        # chill → chill is not a transition
        assert "chill>chill" not in self.pattern.mood_transitions

    def test_session_length_buckets(self):
        assert len(self.pattern.session_length_patterns) == 2
        chill = [p for p in self.pattern.session_length_patterns if p.mood == "chill"][0]
        assert chill.count == 8
        assert chill.completion_rate == 0.5

    def test_device_patterns(self):
        device = self.pattern.device_patterns["pc"]
        assert device.session_count == 12
        assert device.hour_counts == {18: 4, 19: 4, 20: 4}

    def test_recent_genre_window(self):
        assert len(self.pattern.recent_genres) == PredictiveConfig().recent_genre_window

    def test_incremental_matches_rebuild(self, state):
        engine = PredictiveSuggestionEngine(state)
        for session in self.sessions:
            engine.update_behavior_patterns("user-1", session)
        assert state.behavior_pattern("user-1").model_dump() == self.pattern.model_dump()


class TestSuggestions:
    @pytest.fixture(autouse=True)
    def setup(self, games):
        self.clock = FakeClock()
        self.state = EngineState(cache_ttl_seconds=300, clock=self.clock)
        self.games = games
        self.sessions = weekly_sessions()
        ml = MLRecommendationEngine()
        ml.initialize(games, self.sessions)
        self.engine = PredictiveSuggestionEngine(self.state, ml)
        self.engine.analyze_behavior_patterns("user-1", self.sessions)
        self.context = {
            "timestamp": NOW,
            "available_time": 60,
            "current_mood": "frustrated",
            "recent_sessions": self.sessions[-3:-1],
            "social_context": "solo",
            "energy_level": 30,
        }

    def test_fit_scored_ranking(self):
        suggestions = self.engine.generate_suggestions("user-1", self.games, self.context)
        assert suggestions[0].game_id == "g-puzzle"
        top = suggestions[0]
        assert top.fit_scores.time == 0.9
        assert top.fit_scores.sequence == 0.9
        assert top.fit_scores.mood == 0.4
        assert top.confidence == pytest.approx(0.78)
        assert "Follows your natural gaming flow" in top.reasoning
        assert all(0.3 <= s.confidence <= 1 for s in suggestions)
        assert len(suggestions) <= 10

    def test_mood_trigger_fit(self):
        suggestions = self.engine.generate_suggestions("user-1", self.games, self.context)
        rpg = [s for s in suggestions if s.game_id == "g-rpg"][0]
        assert rpg.fit_scores.mood == 0.9

    def test_alternatives_share_genre_first(self):
        suggestions = self.engine.generate_suggestions("user-1", self.games, self.context)
        action = [s for s in suggestions if s.game_id == "g-action"][0]
        assert action.alternatives[0] == "g-action-2"
        assert "g-action" not in action.alternatives
        assert len(action.alternatives) <= 3

    def test_alternatives_without_ml_engine(self):
        engine = PredictiveSuggestionEngine(EngineState())
        engine.analyze_behavior_patterns("user-1", self.sessions)
        suggestions = engine.generate_suggestions("user-1", self.games, self.context)
        action = [s for s in suggestions if s.game_id == "g-action"][0]
        assert action.alternatives == ["g-action-2"]

    def test_cached_hit_narrowed_to_candidates(self):
        self.engine.generate_suggestions("user-1", self.games, self.context)
        subset = [g for g in self.games if g.id in {"g-puzzle", "g-action"}]
        second = self.engine.generate_suggestions("user-1", subset, self.context)
        assert {s.game_id for s in second} <= {"g-puzzle", "g-action"}
        for s in second:
            assert set(s.alternatives) <= {"g-puzzle", "g-action"}

    def test_satisfaction_time_adjusted(self):
        context = dict(self.context, available_time=5)
        suggestions = self.engine.generate_suggestions("user-1", self.games, context)
        for s in suggestions:
            assert s.predicted_satisfaction <= 5 / s.estimated_playtime + 1e-4

    def test_fallback_without_pattern(self):
        suggestions = self.engine.generate_suggestions("stranger", self.games, self.context)
        assert [s.game_id for s in suggestions] == [g.id for g in self.games[:5]]
        assert all(s.confidence == 0.5 and s.reasoning == ["General recommendation"] for s in suggestions)

    def test_cached_per_minute(self):
        first = self.engine.generate_suggestions("user-1", self.games, self.context)
        first[0].confidence = 0.0
        later = dict(self.context, timestamp=NOW + timedelta(seconds=30))
        second = self.engine.generate_suggestions("user-1", self.games, later)
        assert second[0].confidence == pytest.approx(0.78)
        assert len(self.state.prediction_cache) == 1

    def test_new_behavior_invalidates(self):
        self.engine.generate_suggestions("user-1", self.games, self.context)
        assert len(self.state.prediction_cache) == 1
        self.engine.update_behavior_patterns("user-1", _session(99, "g-sim", "simulation", NOW))
        assert len(self.state.prediction_cache) == 0

    def test_ttl_expiry(self):
        self.engine.generate_suggestions("user-1", self.games, self.context)
        self.clock.now += 301
        assert self.state.prediction_cache.purge_expired() == 1

    def test_cache_bounded_over_many_minutes(self):
        for minute in range(500):
            context = dict(self.context, timestamp=NOW + timedelta(minutes=minute))
            self.engine.generate_suggestions("user-1", self.games, context)
            self.clock.now += 60
        # entries written within the last 300 seconds
        assert len(self.state.prediction_cache) <= 5


class TestTTLCache:
    def test_expiry_and_invalidation(self):
        clock = FakeClock()
        cache = TTLCache(ttl_seconds=10, clock=clock)
        cache.set(("u1", 1), "a")
        cache.set(("u2", 1), "b")
        assert cache.get(("u1", 1)) == "a"
        assert cache.invalidate_user("u1") == 1
        assert cache.get(("u1", 1)) is None
        clock.now = 10
        assert cache.get(("u2", 1)) is None
        assert len(cache) == 0

    def test_set_evicts_expired_keys(self):
        clock = FakeClock()
        cache = TTLCache(ttl_seconds=10, clock=clock)
        cache.set(("u1", 0), "old")
        clock.now = 10
        cache.set(("u1", 1), "new")
        assert len(cache) == 1
        assert cache.get(("u1", 1)) == "new"


class TestNextGame:
    @pytest.fixture(autouse=True)
    def setup(self, state):
        self.sessions = weekly_sessions()
        self.engine = PredictiveSuggestionEngine(state)

    def test_insufficient_data(self):
        prediction = self.engine.predict_next_game("user-1", self.sessions[:2])
        assert prediction.next_genre is None
        assert prediction.reasoning == "Insufficient data for prediction"

    def test_predicts_continuation(self, games):
        self.engine.analyze_behavior_patterns("user-1", self.sessions)
        prediction = self.engine.predict_next_game("user-1", self.sessions[-3:-1], games)
        assert prediction.next_genre == "puzzle"
        assert prediction.game_id == "g-puzzle"
        assert prediction.matched_sequence == ["action", "rpg"]
        assert prediction.confidence == pytest.approx(round(4 / 12, 4))

    def test_longest_tail_considered(self):
        self.engine.analyze_behavior_patterns("user-1", self.sessions)
        prediction = self.engine.predict_next_game("user-1", self.sessions[-3:])
        assert prediction.next_genre == "action"


class TestInsights:
    def test_weekly_pattern_insights(self, state):
        engine = PredictiveSuggestionEngine(state)
        engine.analyze_behavior_patterns("user-1", weekly_sessions())
        insights = {i.title: i for i in engine.get_predictive_insights("user-1")}
        assert insights["Peak Gaming Time Detected"].data["peak_hours"] == [18, 19, 20]
        assert insights["Gaming Flow Patterns"].confidence == 0.7
        enhancement = insights["Mood Enhancement Opportunities"]
        assert enhancement.type == "recommendation"
        assert enhancement.data["transitions"][0]["trigger_games"] == ["g-rpg"]
        assert "Unusual Gaming Pattern Detected" not in insights

    def test_anomaly_and_genre_shift(self, state):
        sessions = [
            _session(i, "g-action", "action", NOW - timedelta(weeks=30 - i)) for i in range(12)
        ]
        sessions += [
            _session(12 + i, "g-rpg", "rpg", NOW - timedelta(weeks=18 - i)) for i in range(8)
        ]
        sessions.append(_session(99, "g-rpg", "rpg", (NOW - timedelta(days=3)).replace(hour=3)))
        engine = PredictiveSuggestionEngine(state)
        engine.analyze_behavior_patterns("user-1", sessions)
        insights = {i.title: i for i in engine.get_predictive_insights("user-1")}
        assert insights["Unusual Gaming Pattern Detected"].type == "anomaly"
        shift = insights["Shifting Genre Preferences"]
        assert shift.data == {"recent_genre": "rpg", "overall_genre": "action"}

    def test_no_pattern_no_insights(self, state):
        assert PredictiveSuggestionEngine(state).get_predictive_insights("nobody") == []
