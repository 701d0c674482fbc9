"""
IdentityEngine Facade and Settings Tests

Tests the facade wired to in-memory collaborators, and environment-driven
settings / config loading.

Scenario:
---------
- Sessions stored for user-1 are picked up by compute_identity when the
  caller passes none; candidate games come from the catalog.
- A user action delivered twice is learned from once.

Run:
----
    pytest tests/test_engine.py -v
"""

import json
from datetime import datetime, timezone

import pytest

from identity_engine import IdentityEngine, InMemoryGameCatalog, InMemorySessionStore
from identity_engine.models.config import EngineConfig
from identity_engine.settings import EngineSettings, load_engine_config, reload_settings
from identity_engine.state import EngineState

NOW = datetime(2024, 6, 12, 20, 0, tzinfo=timezone.utc)


class TestFacade:
    @pytest.fixture(autouse=True)
    def setup(self, games, competitive_story_sessions):
        self.store = InMemorySessionStore()
        for session in competitive_story_sessions:
            self.store.append_session(session)
        self.catalog = InMemoryGameCatalog(games)
        self.engine = IdentityEngine(
            state=EngineState(),
            session_store=self.store,
            game_catalog=self.catalog,
            clock=lambda: NOW,
        )

    def test_identity_from_store(self):
        identity = self.engine.compute_identity("user-1")
        assert len(identity.sessions) == 6
        assert identity.genre_affinities
        assert identity.last_updated == NOW

    def test_unknown_user_gets_default(self):
        identity = self.engine.compute_identity("nobody")
        assert identity.genre_affinities == {}
        assert identity.playstyle.primary == "casual"

    def test_recommendations_from_catalog(self):
        identity = self.engine.compute_identity("user-1")
        recs = self.engine.get_recommendations(identity, {"current_mood": "competitive"})
        assert recs
        assert {r.game_id for r in recs} <= {g.id for g in self.catalog.list_candidate_games()}

    def test_record_session(self, make_session):
        identity = self.engine.compute_identity("user-1")
        session = make_session(50, days_ago=0.1, game_id="g-puzzle", genre="puzzle", mood="chill")
        updated = self.engine.record_session(identity, session)
        assert len(updated.sessions) == 7
        assert len(self.store.load_sessions("user-1")) == 7
        assert self.engine.state.behavior_pattern("user-1").total_sessions == 1
        assert self.engine.ml.has_sufficient_data("user-1")

    def test_duplicate_action_learned_once(self):
        self.engine.process_mood_selection("user-1", {
            "id": "e-1", "user_id": "user-1", "primary_mood": "energetic",
            "timestamp": NOW, "outcomes": {"games_recommended": 5},
        })
        action = {"id": "a-1", "user_id": "user-1", "type": "launch", "timestamp": NOW}
        self.engine.learn_from_user_action("user-1", action)
        self.engine.learn_from_user_action("user-1", action)
        last = self.engine.state.adaptive["user-1"].mood_history[-1]
        assert last.outcomes.games_launched == 1
        assert len(self.store.load_user_actions("user-1")) == 1
        assert len(self.store.load_mood_history("user-1")) == 1

    def test_enhanced_recommendations(self):
        identity = self.engine.compute_identity("user-1")
        recs = self.engine.get_enhanced_recommendations(
            identity, {"primary_mood": "competitive", "secondary_mood": "energetic"},
        )
        assert all(r.mood_combination.primary == "Competitive" for r in recs)

    def test_initialize_builds_patterns(self, competitive_story_sessions):
        self.engine.initialize(sessions=competitive_story_sessions)
        assert self.engine.state.behavior_pattern("user-1").total_sessions == 6
        recs = self.engine.get_ml_recommendations("user-1", count=3)
        assert 0 < len(recs) <= 3

    def test_next_game_without_pattern(self, competitive_story_sessions):
        prediction = self.engine.predict_next_game("user-1", competitive_story_sessions[:2])
        assert prediction.next_genre is None


class TestSettings:
    def test_from_env(self, monkeypatch, tmp_path):
        config_file = tmp_path / "engine.json"
        config_file.write_text("{}")
        monkeypatch.setenv("IDENTITY_ENGINE_CONFIG_PATH", str(config_file))
        monkeypatch.setenv("IDENTITY_LOG_LEVEL", "debug")
        monkeypatch.setenv("PREDICTION_CACHE_TTL_SECONDS", "60")
        monkeypatch.setenv("ML_FALLBACK_SEED", "11")
        settings = reload_settings()
        assert settings.config_path == config_file
        assert settings.log_level == "DEBUG"
        assert settings.prediction_cache_ttl_seconds == 60
        assert settings.ml_fallback_seed == 11
        assert settings.validate() == (True, [])

    def test_defaults(self, monkeypatch):
        for name in ("IDENTITY_ENGINE_CONFIG_PATH", "IDENTITY_LOG_LEVEL",
                     "PREDICTION_CACHE_TTL_SECONDS", "ML_FALLBACK_SEED"):
            monkeypatch.delenv(name, raising=False)
        settings = EngineSettings.from_env()
        assert settings.config_path is None
        assert settings.ml_fallback_seed is None
        assert settings.prediction_cache_ttl_seconds == 300

    def test_validate_reports_errors(self, tmp_path):
        settings = EngineSettings(
            config_path=tmp_path / "missing.json", log_level="LOUD", prediction_cache_ttl_seconds=0,
        )
        ok, errors = settings.validate()
        assert not ok
        assert len(errors) == 3

    def test_load_engine_config(self, tmp_path):
        config_file = tmp_path / "engine.json"
        config_file.write_text(json.dumps({
            "scoring": {"min_score_threshold": 40, "not_a_field": 1},
            "predictive": {"max_suggestions": 4},
        }))
        settings = EngineSettings(config_path=config_file, prediction_cache_ttl_seconds=30, ml_fallback_seed=5)
        config = load_engine_config(settings)
        assert config.scoring.min_score_threshold == 40
        assert config.predictive.max_suggestions == 4
        assert config.predictive.cache_ttl_seconds == 30
        assert config.ml.fallback_seed == 5

    def test_file_ttl_wins_over_env(self, tmp_path):
        config_file = tmp_path / "engine.json"
        config_file.write_text(json.dumps({"predictive": {"cache_ttl_seconds": 10}}))
        config = load_engine_config(EngineSettings(config_path=config_file, prediction_cache_ttl_seconds=99))
        assert config.predictive.cache_ttl_seconds == 10

    def test_from_dict_ignores_unknown(self):
        config = EngineConfig.from_dict({"bogus": {"x": 1}, "ml": {"fallback_seed": 3, "extra": True}})
        assert config.ml.fallback_seed == 3
        assert config.scoring.max_recommendations == 20

    def test_from_settings(self, tmp_path):
        engine = IdentityEngine.from_settings(EngineSettings(prediction_cache_ttl_seconds=42, ml_fallback_seed=1))
        assert engine.config.predictive.cache_ttl_seconds == 42
        assert engine.state.prediction_cache.ttl_seconds == 42
