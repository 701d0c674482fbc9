"""
Mood trend forecasting over a user's mood preference samples.

For each mood, samples are sorted by time and
    change_rate = (last - first) / 100
classified increasing / decreasing / stable with a 0.1 deadband. Confidence
grows with sample count (capped at 5) and is discounted by the distance of
|change_rate| from 0.5. Volatility is the population std of the per-mood
change rates, capped at 1.
"""

import logging
from collections import defaultdict
from typing import Dict, List, Union

import numpy as np

from identity_engine.models.resonance import MoodForecast, MoodPrediction, MoodPreferenceSample, MoodTrend
from identity_engine.taxonomy.moods import resolve_mood_id
from identity_engine.utils.scores import as_utc, clamp

logger = logging.getLogger(__name__)

TREND_DEADBAND = 0.1
CONFIDENCE_SAMPLE_CAP = 5
IDEAL_CHANGE_MAGNITUDE = 0.5


def trend_direction(change_rate: float) -> str:
    if change_rate > TREND_DEADBAND:
        return "increasing"
    if change_rate < -TREND_DEADBAND:
        return "decreasing"
    return "stable"


def trend_confidence(sample_count: int, change_rate: float) -> float:
    coverage = min(sample_count, CONFIDENCE_SAMPLE_CAP) / CONFIDENCE_SAMPLE_CAP
    return coverage * max(0.0, 1 - abs(abs(change_rate) - IDEAL_CHANGE_MAGNITUDE))


def _mood_trend(mood_id: str, samples: List[MoodPreferenceSample]) -> MoodTrend:
    ordered = sorted(samples, key=lambda s: as_utc(s.timestamp))
    first, last = ordered[0].preference, ordered[-1].preference
    change_rate = (last - first) / 100
    # One-step linear extrapolation of the average change per sample
    step = (last - first) / (len(ordered) - 1) if len(ordered) > 1 else 0.0
    return MoodTrend(
        mood_id=mood_id,
        direction=trend_direction(change_rate),
        change_rate=round(change_rate, 4),
        confidence=round(trend_confidence(len(ordered), change_rate), 4),
        sample_count=len(ordered),
        latest_preference=last,
        predicted_preference=round(clamp(last + step), 2),
    )


def calculate_mood_forecast(history: List[Union[Dict, MoodPreferenceSample]]) -> MoodForecast:
    """Per-mood trends, overall volatility and the most likely next mood."""
    samples = [
        MoodPreferenceSample.model_validate(h) if isinstance(h, dict) else h
        for h in history
    ]
    if not samples:
        logger.info("[trend_fallback] NO_HISTORY")
        return MoodForecast()

    by_mood: Dict[str, List[MoodPreferenceSample]] = defaultdict(list)
    for sample in samples:
        by_mood[resolve_mood_id(sample.mood_id) or sample.mood_id].append(sample)

    trends = [_mood_trend(mood_id, group) for mood_id, group in by_mood.items()]
    volatility = min(1.0, float(np.std([t.change_rate for t in trends])))
    top = max(trends, key=lambda t: t.predicted_preference)
    return MoodForecast(
        trends=trends,
        volatility=round(volatility, 4),
        primary_forecast=MoodPrediction(predicted_mood=top.mood_id, confidence=top.confidence),
    )
