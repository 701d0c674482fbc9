"""
Trait extraction: behavioral trait bag and per-session feature vectors.

Public API:
- extract_traits(sessions): top trait names by count
- derive_game_profile(genres, tags): 1-10 energy/social/cognitive/time axes
- session_features(session, game=None): feature vector for one session
- mean_features(sessions, games_by_id=None): average feature vector
"""

from collections import Counter
from typing import Dict, Iterable, List, Optional

from identity_engine.models.game import Game
from identity_engine.models.identity import SessionFeatures
from identity_engine.models.recommendation import GameProfile
from identity_engine.models.session import GameSession
from identity_engine.taxonomy.genres import GENRE_AXIS_SHIFTS, normalize_genre
from identity_engine.taxonomy.tags import SIGNAL_AXIS_SHIFTS, SIGNAL_TRAITS, tag_signals

MAX_TRAITS = 8
DEDICATED_DURATION_MINUTES = 120
COMPETITIVE_INTENSITY = 8


def _session_traits(session: GameSession) -> List[str]:
    traits = []
    if session.duration and session.duration > DEDICATED_DURATION_MINUTES:
        traits.append("dedicated")
    if session.intensity >= COMPETITIVE_INTENSITY:
        traits.extend(["competitive", "skill-focused"])
    signals = tag_signals(session.tags)
    for signal, signal_traits in SIGNAL_TRAITS.items():
        if signal in signals:
            traits.extend(signal_traits)
    return traits


def extract_traits(sessions: Iterable[GameSession]) -> List[str]:
    """
    Tally threshold-rule traits over sessions and keep the top 8.

    Ties keep first-seen order (Counter.most_common is stable on insertion order).
    """
    counts: Counter = Counter()
    for session in sessions:
        counts.update(_session_traits(session))
    return [trait for trait, _ in counts.most_common(MAX_TRAITS)]


def derive_game_profile(genres: Iterable[str], tags: Iterable[str]) -> GameProfile:
    """Baseline 5 per axis, shifted by genre and tag keywords, clamped to 1-10."""
    axes: Dict[str, int] = {"energy": 5, "social": 5, "cognitive": 5, "time": 5}
    for genre in {normalize_genre(g) for g in genres if g}:
        for axis, delta in GENRE_AXIS_SHIFTS.get(genre, ()):
            axes[axis] += delta
    for signal in tag_signals(tags):
        shift = SIGNAL_AXIS_SHIFTS.get(signal)
        if shift:
            axes[shift[0]] += shift[1]
    return GameProfile(**{axis: max(1, min(10, value)) for axis, value in axes.items()})


def game_profile(game: Game) -> GameProfile:
    return derive_game_profile(game.genre_keys(), game.tags)


def _duration_commitment(duration: Optional[float]) -> Optional[int]:
    if duration is None:
        return None
    if duration < 30:
        return 2
    if duration < 60:
        return 4
    if duration < 120:
        return 6
    if duration < 180:
        return 8
    return 10


def session_features(session: GameSession, game: Optional[Game] = None) -> SessionFeatures:
    genres = [session.genre_key]
    tags = list(session.tags)
    multiplayer = session.is_multiplayer
    if game is not None:
        genres.extend(game.genre_keys())
        tags.extend(game.tags)
        multiplayer = multiplayer or game.is_multiplayer
    profile = derive_game_profile(genres, tags)

    social = float(profile.social)
    if multiplayer:
        social = max(social, 8.0)
    commitment = _duration_commitment(session.duration)
    time_commitment = float(profile.time) if commitment is None else (profile.time + commitment) / 2

    return SessionFeatures(
        energy=(profile.energy + session.intensity) / 2,
        social=social,
        cognitive=float(profile.cognitive),
        time_commitment=time_commitment,
    )


def mean_features(
    sessions: List[GameSession],
    games_by_id: Optional[Dict[str, Game]] = None,
) -> SessionFeatures:
    if not sessions:
        return SessionFeatures()
    games_by_id = games_by_id or {}
    vectors = [session_features(s, games_by_id.get(s.game_id)) for s in sessions]
    n = len(vectors)
    return SessionFeatures(
        energy=round(sum(v.energy for v in vectors) / n, 2),
        social=round(sum(v.social for v in vectors) / n, 2),
        cognitive=round(sum(v.cognitive for v in vectors) / n, 2),
        time_commitment=round(sum(v.time_commitment for v in vectors) / n, 2),
    )
