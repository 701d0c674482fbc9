"""
Behavior pattern mining: fold sessions, oldest first, into a BehaviorPattern.

Every accumulator keeps raw counts; ratios are derived on read so that an
incremental update and a full rebuild over the same sessions agree.
"""

from typing import List, Optional

from identity_engine.models.config import PredictiveConfig
from identity_engine.models.patterns import (
    BehaviorPattern,
    DevicePattern,
    GenreSequence,
    MoodTransition,
    SessionLengthPattern,
    TimePattern,
)
from identity_engine.models.session import GameSession
from identity_engine.taxonomy.moods import resolve_mood_id
from identity_engine.utils.scores import as_utc, minutes_between, session_minutes


def time_key(hour: int, day_of_week: int) -> str:
    return f"{hour}:{day_of_week}"


def sequence_key(sequence: List[str]) -> str:
    return "|".join(sequence)


def transition_key(from_mood: str, to_mood: str) -> str:
    return f"{from_mood}>{to_mood}"


def _bump(counts: dict, key, amount: int = 1) -> None:
    counts[key] = counts.get(key, 0) + amount


def _session_mood(session: GameSession) -> Optional[str]:
    # Moods outside the taxonomy (e.g. "frustrated") are kept verbatim
    if not session.mood:
        return None
    return resolve_mood_id(session.mood) or session.mood.strip().lower()


def _record_time(pattern: BehaviorPattern, session: GameSession, minutes: float) -> None:
    start = as_utc(session.start_time)
    key = time_key(start.hour, start.weekday())
    slot = pattern.time_patterns.get(key)
    if slot is None:
        slot = TimePattern(hour=start.hour, day_of_week=start.weekday())
        pattern.time_patterns[key] = slot
    slot.count += 1
    slot.total_duration += minutes
    if session.genre_key:
        _bump(slot.genre_counts, session.genre_key)


def _record_length(
    pattern: BehaviorPattern, session: GameSession, minutes: float, config: PredictiveConfig,
) -> None:
    mood = _session_mood(session)
    bucket = None
    for candidate in pattern.session_length_patterns:
        if candidate.mood == mood and abs(candidate.average_duration - minutes) <= config.session_length_tolerance:
            bucket = candidate
            break
    if bucket is None:
        bucket = SessionLengthPattern(average_duration=minutes, mood=mood)
        pattern.session_length_patterns.append(bucket)
    else:
        bucket.average_duration = (bucket.average_duration * bucket.count + minutes) / (bucket.count + 1)
    bucket.count += 1
    if session.completed:
        bucket.completed_count += 1
    if session.genre_key:
        _bump(bucket.genre_counts, session.genre_key)


def _record_sequences(pattern: BehaviorPattern, session: GameSession, config: PredictiveConfig) -> None:
    genre = session.genre_key
    if not genre:
        return
    history = pattern.recent_genres
    # n-grams ending just before this session, continued by its genre
    for length in range(2, config.max_sequence_length + 1):
        if len(history) < length:
            break
        sequence = history[-length:]
        key = sequence_key(sequence)
        entry = pattern.genre_sequences.get(key)
        if entry is None:
            entry = GenreSequence(sequence=list(sequence))
            pattern.genre_sequences[key] = entry
        entry.count += 1
        _bump(entry.next_genres, genre)
        entry.last_seen = as_utc(session.start_time)
    history.append(genre)
    del history[: max(0, len(history) - config.recent_genre_window)]


def _record_transition(pattern: BehaviorPattern, session: GameSession, config: PredictiveConfig) -> None:
    previous = pattern.last_session
    if previous is None:
        return
    from_mood, to_mood = _session_mood(previous), _session_mood(session)
    if not from_mood or not to_mood or from_mood == to_mood:
        return
    key = transition_key(from_mood, to_mood)
    transition = pattern.mood_transitions.get(key)
    if transition is None:
        transition = MoodTransition(from_mood=from_mood, to_mood=to_mood)
        pattern.mood_transitions[key] = transition
    transition.count += 1
    previous_end = previous.end_time or previous.start_time
    transition.total_gap_minutes += max(0.0, minutes_between(previous_end, session.start_time))
    if session.game_id and session.game_id not in transition.trigger_games:
        transition.trigger_games.append(session.game_id)
        del transition.trigger_games[: max(0, len(transition.trigger_games) - config.max_trigger_games)]

    outgoing = [t for t in pattern.mood_transitions.values() if t.from_mood == from_mood]
    total = sum(t.count for t in outgoing)
    for t in outgoing:
        t.probability = t.count / max(total, 1)


def _record_device(pattern: BehaviorPattern, session: GameSession, minutes: float) -> None:
    platform = (session.platform or "pc").lower()
    device = pattern.device_patterns.get(platform)
    if device is None:
        device = DevicePattern(platform=platform)
        pattern.device_patterns[platform] = device
    device.session_count += 1
    device.total_duration += minutes
    _bump(device.hour_counts, as_utc(session.start_time).hour)
    if session.genre_key:
        _bump(device.genre_counts, session.genre_key)


def record_session(pattern: BehaviorPattern, session: GameSession, config: PredictiveConfig) -> BehaviorPattern:
    """Fold one session into pattern (mutates and returns it)."""
    minutes = session_minutes(session.duration)
    pattern.total_sessions += 1
    _record_time(pattern, session, minutes)
    _record_length(pattern, session, minutes, config)
    _record_sequences(pattern, session, config)
    _record_transition(pattern, session, config)
    _record_device(pattern, session, minutes)
    if session.genre_key:
        _bump(pattern.genre_counts, session.genre_key)
    pattern.last_session = session
    pattern.last_updated = as_utc(session.start_time)
    return pattern


def build_pattern(user_id: str, sessions: List[GameSession], config: PredictiveConfig) -> BehaviorPattern:
    pattern = BehaviorPattern(user_id=user_id)
    for session in sorted(sessions, key=lambda s: as_utc(s.start_time)):
        record_session(pattern, session, config)
    return pattern


def matching_sequences(pattern: BehaviorPattern, recent_genres: List[str]) -> List[GenreSequence]:
    """Stored n-grams equal to the tail of recent_genres."""
    matches = []
    for length in range(2, len(recent_genres) + 1):
        entry = pattern.genre_sequences.get(sequence_key(recent_genres[-length:]))
        if entry is not None:
            matches.append(entry)
    return matches
