"""
Identity aggregation: session history → PlayerIdentity snapshot.

Public API: compute_identity, update_identity, update_mood_preference,
compute_genre_affinities, default_identity.
Snapshots are replaced, never mutated.
"""

import logging
from collections import defaultdict
from datetime import datetime, timedelta
from typing import Dict, List, Optional, Union

from identity_engine.models.config import DEFAULT_IDENTITY_OPTIONS, IdentityComputationOptions
from identity_engine.models.game import Game
from identity_engine.models.identity import PlayerIdentity, UserMood
from identity_engine.models.session import GameSession, ensure_sessions
from identity_engine.taxonomy.moods import resolve_mood_id
from identity_engine.utils.scores import as_utc, clamp, utc_now

from .playstyle import classify_playstyle, default_playstyle
from .traits import mean_features

logger = logging.getLogger(__name__)

NEGATIVE_RATING_FLOOR = 2


def filter_relevant_sessions(
    sessions: List[GameSession],
    options: IdentityComputationOptions,
    now: datetime,
) -> List[GameSession]:
    """Apply recency and negative-rating filters, newest first."""
    filtered = list(sessions)
    if options.mood_decay_days:
        cutoff = as_utc(now) - timedelta(days=options.mood_decay_days)
        filtered = [s for s in filtered if as_utc(s.start_time) >= cutoff]
    if not options.include_negative_sessions:
        filtered = [
            s for s in filtered
            if s.rating is None or s.rating >= NEGATIVE_RATING_FLOOR
        ]
    filtered.sort(key=lambda s: as_utc(s.start_time), reverse=True)
    return filtered


def compute_genre_affinities(sessions: List[GameSession]) -> Dict[str, float]:
    """
    Per-genre affinity: share of sessions * 100, plus (avg_rating - 3) * 10
    when the genre has rated sessions; clamped to [0, 100].

    Sessions without a genre are skipped.
    """
    counts: Dict[str, int] = defaultdict(int)
    ratings: Dict[str, List[int]] = defaultdict(list)
    for s in sessions:
        genre = s.genre_key
        if not genre:
            logger.debug("[identity] SESSION_WITHOUT_GENRE session_id=%s", s.id)
            continue
        counts[genre] += 1
        if s.rating is not None:
            ratings[genre].append(s.rating)

    total = sum(counts.values())
    affinities = {}
    for genre, count in counts.items():
        affinity = count / total * 100
        if ratings[genre]:
            avg_rating = sum(ratings[genre]) / len(ratings[genre])
            affinity += (avg_rating - 3) * 10
        affinities[genre] = round(clamp(affinity), 2)
    return affinities


def compute_current_mood(sessions: List[GameSession], recent_session_weight: float) -> Optional[str]:
    """Recency-weighted dominant mood; sessions must be sorted newest first."""
    weights: Dict[str, float] = defaultdict(float)
    for rank, s in enumerate(sessions):
        mood = resolve_mood_id(s.mood)
        if mood:
            weights[mood] += recent_session_weight ** rank
    if not weights:
        return None
    return max(weights.items(), key=lambda kv: kv[1])[0]


def default_identity(
    user_id: str,
    sessions: Optional[List[GameSession]] = None,
    now: Optional[datetime] = None,
) -> PlayerIdentity:
    """Identity for users below the session threshold: no affinities, Casual playstyle."""
    return PlayerIdentity(
        id=f"identity-{user_id}",
        user_id=user_id,
        moods=[],
        playstyle=default_playstyle(),
        genre_affinities={},
        computed_mood=None,
        sessions=list(sessions or []),
        last_updated=now or utc_now(),
    )


def compute_identity(
    user_id: str,
    sessions: List[Union[Dict, GameSession]],
    options: Optional[IdentityComputationOptions] = None,
    moods: Optional[List[UserMood]] = None,
    now: Optional[datetime] = None,
    games_by_id: Optional[Dict[str, Game]] = None,
) -> PlayerIdentity:
    """
    Compute a PlayerIdentity from session history.

    moods: learned mood preferences supplied by the adaptive layer, if any.
    games_by_id: optional catalog lookup used to enrich session feature vectors.
    """
    opts = options or DEFAULT_IDENTITY_OPTIONS
    now = now or utc_now()
    typed = ensure_sessions(sessions)
    relevant = filter_relevant_sessions(typed, opts, now)

    if len(relevant) < opts.min_sessions_for_computation:
        logger.info(
            "[identity_fallback] INSUFFICIENT_SESSIONS user_id=%s relevant=%s required=%s",
            user_id, len(relevant), opts.min_sessions_for_computation,
        )
        return default_identity(user_id, typed, now)

    return PlayerIdentity(
        id=f"identity-{user_id}",
        user_id=user_id,
        moods=[_clamped_mood(m) for m in (moods or [])],
        playstyle=classify_playstyle(relevant),
        genre_affinities=compute_genre_affinities(relevant),
        computed_mood=compute_current_mood(relevant, opts.recent_session_weight),
        behavior_profile=mean_features(relevant, games_by_id),
        sessions=relevant,
        last_updated=now,
    )


def update_identity(
    identity: PlayerIdentity,
    new_session: Union[Dict, GameSession],
    options: Optional[IdentityComputationOptions] = None,
    now: Optional[datetime] = None,
    games_by_id: Optional[Dict[str, Game]] = None,
) -> PlayerIdentity:
    """
    Append a session and recompute playstyle, affinities, computed mood and
    behavior profile from the full session list. Safe to call repeatedly.
    Below min_sessions_for_computation the default identity is returned.
    """
    opts = options or DEFAULT_IDENTITY_OPTIONS
    session = ensure_sessions([new_session])[0]
    sessions = sorted(
        list(identity.sessions) + [session],
        key=lambda s: as_utc(s.start_time),
        reverse=True,
    )
    if len(sessions) < opts.min_sessions_for_computation:
        logger.info(
            "[identity_fallback] INSUFFICIENT_SESSIONS user_id=%s relevant=%s required=%s",
            identity.user_id, len(sessions), opts.min_sessions_for_computation,
        )
        return default_identity(identity.user_id, sessions, now)
    return identity.model_copy(update={
        "sessions": sessions,
        "playstyle": classify_playstyle(sessions),
        "genre_affinities": compute_genre_affinities(sessions),
        "computed_mood": compute_current_mood(sessions, opts.recent_session_weight),
        "behavior_profile": mean_features(sessions, games_by_id),
        "last_updated": now or utc_now(),
    })


def update_mood_preference(
    identity: PlayerIdentity,
    mood_id: str,
    preference: float,
    now: Optional[datetime] = None,
) -> PlayerIdentity:
    """New snapshot with the mood's preference set (clamped to [0, 100])."""
    mood_id = resolve_mood_id(mood_id) or mood_id
    value = clamp(preference)
    moods = []
    found = False
    for mood in identity.moods:
        if mood.mood_id == mood_id:
            moods.append(mood.model_copy(update={"preference": value}))
            found = True
        else:
            moods.append(mood)
    if not found:
        moods.append(UserMood(mood_id=mood_id, preference=value))
    return identity.model_copy(update={"moods": moods, "last_updated": now or utc_now()})


def _clamped_mood(mood: UserMood) -> UserMood:
    return mood.model_copy(update={"preference": clamp(mood.preference)})
