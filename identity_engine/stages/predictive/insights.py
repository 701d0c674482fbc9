"""
Predictive insights derived from a user's BehaviorPattern.
"""

from collections import Counter
from typing import Dict, List, Optional

from identity_engine.models.config import PredictiveConfig
from identity_engine.models.patterns import BehaviorPattern, PredictiveInsight

NEGATIVE_MOODS = {"frustrated", "bored", "tired", "stressed"}
POSITIVE_MOODS = {"energetic", "focused", "creative", "chill"}


def _hour_counts(pattern: BehaviorPattern) -> Dict[int, int]:
    counts: Dict[int, int] = {}
    for slot in pattern.time_patterns.values():
        counts[slot.hour] = counts.get(slot.hour, 0) + slot.count
    return counts


def peak_time_insight(pattern: BehaviorPattern, config: PredictiveConfig) -> Optional[PredictiveInsight]:
    counts = _hour_counts(pattern)
    if not counts:
        return None
    peak = max(counts.values())
    hours = sorted(h for h, c in counts.items() if c >= peak * config.peak_hour_ratio)
    labels = ", ".join(f"{h}:00" for h in hours)
    return PredictiveInsight(
        type="pattern",
        title="Peak Gaming Time Detected",
        description=f"You're most active around {labels}",
        confidence=0.8,
        actionable=True,
        data={"peak_hours": hours, "hour_counts": counts},
    )


def sequence_insight(pattern: BehaviorPattern, config: PredictiveConfig) -> Optional[PredictiveInsight]:
    recurring = [
        seq for seq in pattern.genre_sequences.values()
        if pattern.sequence_frequency(seq) > config.sequence_insight_threshold
    ]
    if not recurring:
        return None
    recurring.sort(key=lambda s: s.count, reverse=True)
    top = recurring[0]
    return PredictiveInsight(
        type="pattern",
        title="Gaming Flow Patterns",
        description=f"You often play {' then '.join(top.sequence)}, usually followed by "
                    f"{', '.join(top.common_next_genres()) or 'something new'}",
        confidence=0.7,
        actionable=True,
        data={"sequences": [
            {"sequence": s.sequence, "frequency": round(pattern.sequence_frequency(s), 4),
             "next": s.common_next_genres()}
            for s in recurring
        ]},
    )


def mood_enhancement_insight(pattern: BehaviorPattern) -> Optional[PredictiveInsight]:
    uplifting = [
        t for t in pattern.mood_transitions.values()
        if t.from_mood in NEGATIVE_MOODS and t.to_mood in POSITIVE_MOODS
    ]
    if not uplifting:
        return None
    uplifting.sort(key=lambda t: t.count, reverse=True)
    return PredictiveInsight(
        type="recommendation",
        title="Mood Enhancement Opportunities",
        description=f"Some games help you go from {uplifting[0].from_mood} to {uplifting[0].to_mood}",
        confidence=0.6,
        actionable=True,
        data={"transitions": [
            {"from": t.from_mood, "to": t.to_mood, "probability": round(t.probability, 4),
             "trigger_games": list(t.trigger_games)}
            for t in uplifting
        ]},
    )


def anomaly_insight(pattern: BehaviorPattern, config: PredictiveConfig) -> Optional[PredictiveInsight]:
    rare = [
        slot for slot in pattern.time_patterns.values()
        if pattern.time_likelihood(slot) < config.anomaly_likelihood_threshold
    ]
    if not rare:
        return None
    return PredictiveInsight(
        type="anomaly",
        title="Unusual Gaming Pattern Detected",
        description=f"You occasionally play at unusual times ({len(rare)} rare time slot(s))",
        confidence=0.6,
        actionable=False,
        data={"slots": [{"hour": s.hour, "day_of_week": s.day_of_week, "count": s.count} for s in rare]},
    )


def genre_shift_insight(pattern: BehaviorPattern, config: PredictiveConfig) -> Optional[PredictiveInsight]:
    if pattern.total_sessions < config.min_sessions_for_trend or not pattern.recent_genres:
        return None
    recent_top = Counter(pattern.recent_genres).most_common(1)[0][0]
    overall_top = max(pattern.genre_counts.items(), key=lambda kv: kv[1])[0]
    if recent_top == overall_top:
        return None
    return PredictiveInsight(
        type="trend",
        title="Shifting Genre Preferences",
        description=f"You've been playing more {recent_top} lately (usually {overall_top})",
        confidence=0.6,
        actionable=True,
        data={"recent_genre": recent_top, "overall_genre": overall_top},
    )


def get_predictive_insights(
    pattern: Optional[BehaviorPattern],
    config: Optional[PredictiveConfig] = None,
) -> List[PredictiveInsight]:
    """All insights that apply; [] without a pattern."""
    if pattern is None or pattern.total_sessions == 0:
        return []
    config = config or PredictiveConfig()
    candidates = [
        peak_time_insight(pattern, config),
        sequence_insight(pattern, config),
        mood_enhancement_insight(pattern),
        anomaly_insight(pattern, config),
        genre_shift_insight(pattern, config),
    ]
    return [insight for insight in candidates if insight is not None]
