"""
Session resonance: how well a predicted mood matched the session that followed.

    resonance        = 0.7 * (predicted == actual) + 0.3 * prediction confidence
    confidence_delta = |confidence - actual_accuracy|

Factors: mood alignment (1 exact, 0.5 compatible, 0 otherwise), duration fit
against the actual mood's ideal range (0.2 outside it) and engagement
correlation against an expected engagement derived from alignment.
"""

import logging
from collections import defaultdict
from datetime import datetime
from typing import Dict, List, Optional, Tuple, Union

from identity_engine.models.resonance import (
    MoodAccuracy,
    MoodPrediction,
    ResonanceAnalysis,
    ResonanceFactors,
    ResonanceInsights,
    SessionEngagement,
    SessionResonance,
)
from identity_engine.taxonomy.moods import resolve_mood_id
from identity_engine.utils.scores import as_utc, clamp, utc_now

logger = logging.getLogger(__name__)

MOOD_COMPATIBILITY: Dict[str, List[str]] = {
    "chill": ["creative", "story", "exploratory"],
    "competitive": ["energetic", "focused", "social"],
    "energetic": ["competitive", "social", "focused"],
    "focused": ["competitive", "strategic", "puzzle"],
    "social": ["energetic", "competitive", "chill"],
    "creative": ["chill", "story", "exploratory"],
    "story": ["chill", "creative", "exploratory"],
    "exploratory": ["creative", "story", "chill"],
}

# mood → (min, max, ideal) minutes
DURATION_RANGES: Dict[str, Tuple[float, float, float]] = {
    "chill": (15, 90, 45),
    "competitive": (20, 120, 60),
    "energetic": (15, 90, 45),
    "focused": (30, 180, 90),
    "social": (30, 150, 75),
    "creative": (45, 240, 120),
    "story": (60, 300, 150),
    "exploratory": (45, 240, 120),
}
OUT_OF_RANGE_FIT = 0.2
TREND_WINDOW = 5
TREND_THRESHOLD = 0.1
HIGH_RESONANCE = 0.7
TOP_MOODS = 3


def mood_alignment(predicted: str, actual: str) -> float:
    if predicted == actual:
        return 1.0
    if actual in MOOD_COMPATIBILITY.get(predicted, []):
        return 0.5
    return 0.0


def duration_fit(mood_id: str, duration: Optional[float]) -> float:
    bounds = DURATION_RANGES.get(mood_id)
    if bounds is None or duration is None:
        return 0.5
    low, high, ideal = bounds
    if duration < low or duration > high:
        return OUT_OF_RANGE_FIT
    max_deviation = max(ideal - low, high - ideal)
    return clamp(1 - abs(duration - ideal) / max_deviation, 0.0, 1.0)


def engagement_correlation(engagement: Optional[float], alignment: float) -> float:
    if engagement is None:
        return 0.5
    expected = 50 + alignment * 50
    return clamp(1 - abs(engagement - expected) / 50, 0.0, 1.0)


def calculate_session_resonance(
    session_id: str,
    user_id: str,
    prediction: Union[Dict, MoodPrediction],
    actual_mood: str,
    session_data: Optional[Union[Dict, SessionEngagement]] = None,
    timestamp: Optional[datetime] = None,
) -> SessionResonance:
    if isinstance(prediction, dict):
        prediction = MoodPrediction.model_validate(prediction)
    if isinstance(session_data, dict):
        session_data = SessionEngagement.model_validate(session_data)
    session_data = session_data or SessionEngagement()

    predicted = resolve_mood_id(prediction.predicted_mood) or prediction.predicted_mood
    actual = resolve_mood_id(actual_mood) or actual_mood
    match = 1.0 if predicted == actual else 0.0
    confidence = prediction.confidence
    accuracy = session_data.actual_accuracy if session_data.actual_accuracy is not None else match
    alignment = mood_alignment(predicted, actual)

    return SessionResonance(
        session_id=session_id,
        user_id=user_id,
        predicted_mood=predicted,
        actual_mood=actual,
        resonance_score=round(0.7 * match + 0.3 * confidence, 4),
        prediction_confidence=confidence,
        confidence_delta=round(abs(confidence - accuracy), 4),
        factors=ResonanceFactors(
            mood_alignment=alignment,
            duration_fit=round(duration_fit(actual, session_data.duration), 4),
            engagement_correlation=round(engagement_correlation(session_data.engagement, alignment), 4),
        ),
        session_duration=session_data.duration,
        engagement=session_data.engagement,
        timestamp=timestamp or utc_now(),
    )


def _mean(values: List[float]) -> float:
    return sum(values) / len(values) if values else 0.0


def resonance_trend(ordered: List[SessionResonance]) -> str:
    recent = ordered[-TREND_WINDOW:]
    previous = ordered[-2 * TREND_WINDOW:-TREND_WINDOW]
    if len(recent) < TREND_WINDOW or not previous:
        return "stable"
    delta = _mean([r.resonance_score for r in recent]) - _mean([r.resonance_score for r in previous])
    if delta > TREND_THRESHOLD:
        return "improving"
    if delta < -TREND_THRESHOLD:
        return "declining"
    return "stable"


def analyze_session_resonance(resonances: List[Union[Dict, SessionResonance]]) -> ResonanceAnalysis:
    """Aggregate accuracy, trend and per-mood insights over many sessions."""
    items = [
        SessionResonance.model_validate(r) if isinstance(r, dict) else r
        for r in resonances
    ]
    if not items:
        logger.info("[resonance_fallback] NO_SESSIONS")
        return ResonanceAnalysis()
    ordered = sorted(items, key=lambda r: as_utc(r.timestamp))

    outcomes: Dict[str, List[float]] = defaultdict(list)
    for r in ordered:
        outcomes[r.predicted_mood].append(1.0 if r.correct else 0.0)
    accuracy = [
        MoodAccuracy(mood_id=mood, accuracy=round(_mean(hits), 4), sample_count=len(hits))
        for mood, hits in outcomes.items()
    ]

    durations: Dict[str, List[float]] = defaultdict(list)
    engagement: Dict[str, List[float]] = defaultdict(list)
    for r in ordered:
        if r.session_duration is not None and r.resonance_score >= HIGH_RESONANCE:
            durations[r.actual_mood].append(r.session_duration)
        if r.engagement is not None:
            engagement[r.actual_mood].append(r.engagement)

    return ResonanceAnalysis(
        session_count=len(ordered),
        average_resonance=round(_mean([r.resonance_score for r in ordered]), 4),
        mood_accuracy={a.mood_id: a.accuracy for a in accuracy},
        trend=resonance_trend(ordered),
        insights=ResonanceInsights(
            best_predicted_moods=sorted(accuracy, key=lambda a: a.accuracy, reverse=True)[:TOP_MOODS],
            worst_predicted_moods=sorted(accuracy, key=lambda a: a.accuracy)[:TOP_MOODS],
            optimal_session_length={m: round(_mean(v), 1) for m, v in durations.items()},
            engagement_patterns={m: round(_mean(v), 1) for m, v in engagement.items()},
        ),
    )
