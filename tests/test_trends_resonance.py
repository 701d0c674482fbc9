"""
Trend and Resonance Analyzer Tests

Tests mood preference forecasting and predicted-vs-actual session resonance.

Run:
----
    pytest tests/test_trends_resonance.py -v
"""

from datetime import datetime, timedelta, timezone

import pytest

from identity_engine.stages.resonance import (
    analyze_session_resonance,
    calculate_session_resonance,
    duration_fit,
    engagement_correlation,
    mood_alignment,
)
from identity_engine.stages.trends import calculate_mood_forecast, trend_confidence, trend_direction

T0 = datetime(2024, 6, 1, tzinfo=timezone.utc)


def _sample(mood, preference, day):
    return {"mood_id": mood, "preference": preference, "timestamp": T0 + timedelta(days=day)}


class TestMoodForecast:
    def test_empty_history(self):
        forecast = calculate_mood_forecast([])
        assert forecast.trends == []
        assert forecast.volatility == 0
        assert forecast.primary_forecast is None

    def test_directions_and_deadband(self):
        history = [
            _sample("chill", 80, 2), _sample("chill", 20, 0),  # out of order on purpose
            _sample("focused", 50, 0), _sample("focused", 55, 1),
            _sample("story", 70, 0), _sample("story", 30, 1),
        ]
        trends = {t.mood_id: t for t in calculate_mood_forecast(history).trends}
        assert trends["chill"].direction == "increasing"
        assert trends["chill"].change_rate == pytest.approx(0.6)
        assert trends["focused"].direction == "stable"
        assert trends["story"].direction == "decreasing"

    def test_confidence(self):
        assert trend_confidence(5, 0.5) == 1.0
        assert trend_confidence(10, 0.5) == 1.0
        assert trend_confidence(1, 0.5) == pytest.approx(0.2)
        assert trend_confidence(5, 0.0) == pytest.approx(0.5)
        assert trend_direction(0.1) == "stable"

    def test_volatility_is_population_std(self):
        history = [
            _sample("chill", 0, 0), _sample("chill", 50, 1),
            _sample("social", 50, 0), _sample("social", 0, 1),
        ]
        forecast = calculate_mood_forecast(history)
        assert forecast.volatility == pytest.approx(0.5)

    def test_primary_forecast(self):
        history = [
            _sample("chill", 40, 0), _sample("chill", 60, 1),
            _sample("focused", 70, 0), _sample("focused", 50, 1),
        ]
        forecast = calculate_mood_forecast(history)
        trends = {t.mood_id: t for t in forecast.trends}
        assert trends["chill"].predicted_preference == 80
        assert trends["focused"].predicted_preference == 30
        assert forecast.primary_forecast.predicted_mood == "chill"

    def test_aliases_grouped(self):
        history = [_sample("relaxed", 10, 0), _sample("chill", 90, 1)]
        trends = calculate_mood_forecast(history).trends
        assert len(trends) == 1
        assert trends[0].sample_count == 2


class TestSessionResonance:
    def test_perfect_prediction(self):
        resonance = calculate_session_resonance(
            "s-1", "user-1", {"predicted_mood": "chill", "confidence": 1.0}, "chill",
        )
        assert resonance.resonance_score == 1.0
        assert resonance.confidence_delta == 0.0
        assert resonance.factors.mood_alignment == 1.0

    def test_miss(self):
        resonance = calculate_session_resonance(
            "s-1", "user-1", {"predicted_mood": "chill", "confidence": 0.5}, "competitive",
            {"duration": 60, "engagement": 90},
        )
        assert resonance.resonance_score == pytest.approx(0.15)
        assert resonance.confidence_delta == pytest.approx(0.5)
        assert resonance.factors.mood_alignment == 0.0
        assert resonance.factors.duration_fit == 1.0
        assert resonance.factors.engagement_correlation == pytest.approx(0.2)

    def test_explicit_accuracy(self):
        resonance = calculate_session_resonance(
            "s-1", "user-1", {"predicted_mood": "story", "confidence": 0.9}, "story",
            {"actual_accuracy": 0.6},
        )
        assert resonance.confidence_delta == pytest.approx(0.3)

    def test_alignment_table(self):
        assert mood_alignment("chill", "chill") == 1.0
        assert mood_alignment("chill", "creative") == 0.5
        assert mood_alignment("chill", "competitive") == 0.0

    def test_duration_fit(self):
        assert duration_fit("story", 150) == 1.0
        assert duration_fit("story", 10) == 0.2
        assert duration_fit("story", 400) == 0.2
        assert duration_fit("story", 60) == pytest.approx(1 - 90 / 150)
        assert duration_fit("story", None) == 0.5
        assert duration_fit("grumpy", 60) == 0.5

    def test_engagement_correlation(self):
        assert engagement_correlation(100, 1.0) == 1.0
        assert engagement_correlation(75, 0.5) == 1.0
        assert engagement_correlation(None, 1.0) == 0.5
        assert engagement_correlation(0, 1.0) == 0.0


class TestResonanceAnalysis:
    def _series(self, hits):
        resonances = []
        for i, hit in enumerate(hits):
            predicted = "chill" if i % 2 == 0 else "focused"
            actual = predicted if hit else "social"
            resonances.append(calculate_session_resonance(
                f"s-{i}", "user-1", {"predicted_mood": predicted, "confidence": 0.8}, actual,
                {"duration": 45, "engagement": 80}, timestamp=T0 + timedelta(hours=i),
            ))
        return resonances

    def test_empty(self):
        analysis = analyze_session_resonance([])
        assert analysis.session_count == 0
        assert analysis.trend == "stable"

    def test_improving(self):
        analysis = analyze_session_resonance(self._series([False] * 5 + [True] * 5))
        assert analysis.trend == "improving"
        assert analysis.session_count == 10

    def test_declining(self):
        analysis = analyze_session_resonance(self._series([True] * 5 + [False] * 5))
        assert analysis.trend == "declining"

    def test_stable_with_few_sessions(self):
        assert analyze_session_resonance(self._series([True] * 4)).trend == "stable"

    def test_accuracy_and_insights(self):
        # chill predictions at even indexes all hit; focused ones all miss
        analysis = analyze_session_resonance(self._series([i % 2 == 0 for i in range(6)]))
        assert analysis.mood_accuracy == {"chill": 1.0, "focused": 0.0}
        assert analysis.insights.best_predicted_moods[0].mood_id == "chill"
        assert analysis.insights.worst_predicted_moods[0].mood_id == "focused"
        assert analysis.insights.optimal_session_length == {"chill": 45.0}
        assert analysis.insights.engagement_patterns == {"chill": 80.0, "social": 80.0}
        assert analysis.average_resonance == pytest.approx((3 * 0.94 + 3 * 0.24) / 6)
