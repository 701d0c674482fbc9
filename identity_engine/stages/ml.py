"""
Lightweight ML engine: user-user collaborative filtering blended with
content-based (genre), mood and playstyle scoring.

No training step: initialize() "fits" by building game feature vectors,
per-user behavior profiles and a sparse user×game rating matrix. Users whose
tracked playtime is below min_data_points get the seedable fallback ranking.

Scores are on the unit interval [0, 1].
"""

import logging
import random
from collections import defaultdict
from typing import Dict, List, Optional, Union

from pydantic import BaseModel, Field

from identity_engine.models.config import MLModelConfig
from identity_engine.models.game import Game, ensure_games
from identity_engine.models.recommendation import GameRecommendation
from identity_engine.models.session import GameSession, ensure_sessions
from identity_engine.taxonomy.genres import (
    DEFAULT_DIFFICULTY,
    DEFAULT_SOCIAL,
    GENRE_DIFFICULTY,
    GENRE_IDS,
    GENRE_MOOD_VECTORS,
    GENRE_SOCIAL,
    MOOD_VECTOR_ORDER,
    genre_difficulty_label,
)
from identity_engine.taxonomy.moods import resolve_mood_id
from identity_engine.utils.scores import clamp
from identity_engine.utils.similarity import cosine_similarity, pearson_similarity

logger = logging.getLogger(__name__)

DEFAULT_RATING = 0.5
DEFAULT_PLAYTIME_MINUTES = 60.0
REASON_THRESHOLD = 0.7


class GameFeatureVector(BaseModel):
    game_id: str
    genre_vector: List[float]
    mood_vector: List[float]
    difficulty_score: float
    social_score: float
    playtime_estimate: float


class UserBehaviorProfile(BaseModel):
    user_id: str
    total_playtime: float = 0.0
    session_count: int = 0
    preferred_genres: Dict[str, float] = Field(default_factory=dict)  # genre → minutes
    mood_patterns: Dict[str, float] = Field(default_factory=dict)  # mood → minutes
    multiplayer_sessions: int = 0
    difficulty_weighted: float = 0.0
    difficulty_weight: float = 0.0

    @property
    def average_session_length(self) -> float:
        return self.total_playtime / max(self.session_count, 1)

    @property
    def difficulty_preference(self) -> float:
        if self.difficulty_weight <= 0:
            return 0.5
        return self.difficulty_weighted / self.difficulty_weight

    @property
    def social_preference(self) -> float:
        if self.session_count == 0:
            return 0.5
        return self.multiplayer_sessions / self.session_count


def _genre_difficulty(genres: List[str]) -> float:
    difficulty = DEFAULT_DIFFICULTY
    for genre in genres:
        difficulty = max(difficulty, GENRE_DIFFICULTY.get(genre, 0.0))
    return difficulty


def _genre_social(genres: List[str]) -> float:
    social = DEFAULT_SOCIAL
    for genre in genres:
        social = max(social, GENRE_SOCIAL.get(genre, 0.0))
    return social


def build_game_features(game: Game) -> GameFeatureVector:
    genres = game.genre_keys()
    genre_vector = [1.0 if g in genres else 0.0 for g in GENRE_IDS]
    mood_vector = [0.0] * len(MOOD_VECTOR_ORDER)
    for genre in genres:
        mapping = GENRE_MOOD_VECTORS.get(genre)
        if mapping:
            mood_vector = [max(a, b) for a, b in zip(mood_vector, mapping)]
    return GameFeatureVector(
        game_id=game.id,
        genre_vector=genre_vector,
        mood_vector=mood_vector,
        difficulty_score=_genre_difficulty(genres),
        social_score=_genre_social(genres),
        playtime_estimate=game.average_playtime or DEFAULT_PLAYTIME_MINUTES,
    )


class MLRecommendationEngine:
    """
    Collaborative + content-based recommender.

    rng: random source for the fallback scorer. Defaults to
    random.Random(config.fallback_seed).
    """

    def __init__(self, config: Optional[MLModelConfig] = None, rng: Optional[random.Random] = None):
        self.config = config or MLModelConfig()
        self.rng = rng or random.Random(self.config.fallback_seed)
        self.game_features: Dict[str, GameFeatureVector] = {}
        self.games: Dict[str, Game] = {}
        self.user_profiles: Dict[str, UserBehaviorProfile] = {}
        # user → game → list of normalized ratings
        self._ratings: Dict[str, Dict[str, List[float]]] = defaultdict(dict)

    # --- 1. Fitting ---

    def initialize(
        self,
        games: List[Union[Dict, Game]],
        sessions: List[Union[Dict, GameSession]],
    ) -> None:
        """Build features, profiles and the rating matrix from scratch."""
        self.game_features = {}
        self.games = {}
        self.user_profiles = {}
        self._ratings = defaultdict(dict)
        for game in ensure_games(games):
            self.games[game.id] = game
            self.game_features[game.id] = build_game_features(game)
        typed = ensure_sessions(sessions)
        for session in typed:
            self._apply_session(session.user_id or "default", session)
        logger.info(
            "[ml] INITIALIZED games=%s users=%s sessions=%s",
            len(self.game_features), len(self.user_profiles), len(typed),
        )

    def add_games(self, games: List[Union[Dict, Game]]) -> None:
        for game in ensure_games(games):
            self.games[game.id] = game
            self.game_features[game.id] = build_game_features(game)

    def update_user_profile(self, user_id: str, session: Union[Dict, GameSession]) -> None:
        """Fold one new session into the user's profile and rating row."""
        self._apply_session(user_id, ensure_sessions([session])[0])

    def _session_genres(self, session: GameSession) -> List[str]:
        genres = [session.genre_key] if session.genre_key else []
        game = self.games.get(session.game_id)
        if game is not None:
            genres.extend(g for g in game.genre_keys() if g not in genres)
        return genres

    def _apply_session(self, user_id: str, session: GameSession) -> None:
        profile = self.user_profiles.get(user_id)
        if profile is None:
            profile = UserBehaviorProfile(user_id=user_id)
            self.user_profiles[user_id] = profile

        minutes = session.duration or 0.0
        genres = self._session_genres(session)
        profile.total_playtime += minutes
        profile.session_count += 1
        for genre in genres:
            profile.preferred_genres[genre] = profile.preferred_genres.get(genre, 0.0) + minutes
        mood = resolve_mood_id(session.mood)
        if mood:
            profile.mood_patterns[mood] = profile.mood_patterns.get(mood, 0.0) + minutes
        if session.is_multiplayer:
            profile.multiplayer_sessions += 1
        if genres:
            weight = max(minutes, 1.0)
            profile.difficulty_weighted += _genre_difficulty(genres) * weight
            profile.difficulty_weight += weight

        if session.game_id:
            rating = session.rating / 5 if session.rating is not None else DEFAULT_RATING
            self._ratings[user_id].setdefault(session.game_id, []).append(rating)

    # --- 2. Similarity and component scores ---

    def rating_row(self, user_id: str) -> Dict[str, float]:
        row = self._ratings.get(user_id, {})
        return {game_id: sum(r) / len(r) for game_id, r in row.items()}

    def calculate_user_similarity(self, user_a: str, user_b: str) -> float:
        """Pearson correlation over commonly rated games; 0 with none in common."""
        ratings_a = self.rating_row(user_a)
        ratings_b = self.rating_row(user_b)
        common = sorted(set(ratings_a) & set(ratings_b))
        if not common:
            return 0.0
        return pearson_similarity(
            [ratings_a[g] for g in common],
            [ratings_b[g] for g in common],
        )

    def collaborative_score(self, user_id: str, game_id: str) -> float:
        if user_id not in self._ratings:
            return 0.0
        weighted_sum = 0.0
        similarity_sum = 0.0
        for other_id in self._ratings:
            if other_id == user_id:
                continue
            other_row = self.rating_row(other_id)
            if game_id not in other_row:
                continue
            similarity = self.calculate_user_similarity(user_id, other_id)
            weighted_sum += similarity * other_row[game_id]
            similarity_sum += abs(similarity)
        return clamp(weighted_sum / similarity_sum, 0.0, 1.0) if similarity_sum > 0 else 0.0

    @staticmethod
    def content_score(profile: UserBehaviorProfile, features: GameFeatureVector) -> float:
        score = 0.0
        total = 0.0
        for genre, minutes in profile.preferred_genres.items():
            if genre in GENRE_IDS:
                score += features.genre_vector[GENRE_IDS.index(genre)] * minutes
                total += minutes
        return score / total if total > 0 else 0.0

    @staticmethod
    def mood_score(profile: UserBehaviorProfile, features: GameFeatureVector) -> float:
        score = 0.0
        total = 0.0
        for mood, minutes in profile.mood_patterns.items():
            if mood in MOOD_VECTOR_ORDER:
                score += features.mood_vector[MOOD_VECTOR_ORDER.index(mood)] * minutes
                total += minutes
        return score / total if total > 0 else 0.0

    @staticmethod
    def playstyle_score(profile: UserBehaviorProfile, features: GameFeatureVector) -> float:
        difficulty_match = 1 - abs(profile.difficulty_preference - features.difficulty_score)
        social_match = 1 - abs(profile.social_preference - features.social_score)
        return (difficulty_match + social_match) / 2

    # --- 3. Public scoring ---

    def has_sufficient_data(self, user_id: str) -> bool:
        profile = self.user_profiles.get(user_id)
        return profile is not None and profile.total_playtime >= self.config.min_data_points

    def predict_rating(self, user_id: str, game_id: str) -> float:
        """Unit-scale rating estimate; 0.5 when the user or game is unknown."""
        profile = self.user_profiles.get(user_id)
        features = self.game_features.get(game_id)
        if profile is None or features is None:
            return DEFAULT_RATING
        predicted = (
            self.content_score(profile, features) * 0.4
            + self.mood_score(profile, features) * 0.3
            + self.playstyle_score(profile, features) * 0.3
        )
        return clamp(predicted, 0.0, 1.0)

    def generate_recommendations(
        self,
        user_id: str,
        candidate_games: List[Union[Dict, Game]],
        count: Optional[int] = None,
    ) -> List[GameRecommendation]:
        count = count or self.config.max_recommendations
        games = ensure_games(candidate_games)
        if not self.has_sufficient_data(user_id):
            logger.info("[ml_fallback] INSUFFICIENT_DATA user_id=%s", user_id)
            return self.fallback_recommendations(games, count)

        profile = self.user_profiles[user_id]
        recommendations = []
        for game in games:
            features = self.game_features.get(game.id)
            if features is None:
                logger.debug("[ml] MISSING_FEATURES game_id=%s", game.id)
                continue
            collaborative = self.collaborative_score(user_id, game.id)
            content = self.content_score(profile, features)
            mood = self.mood_score(profile, features)
            playstyle = self.playstyle_score(profile, features)
            final = (
                collaborative * self.config.collaborative_weight
                + content * self.config.content_weight
                + mood * self.config.mood_weight
                + playstyle * self.config.playstyle_weight
            )
            recommendations.append(GameRecommendation(
                game_id=game.id,
                name=game.name,
                genre=game.primary_genre or "unknown",
                score=round(final, 4),
                reasons=[_reason(collaborative, content, mood, playstyle)],
                mood_match=round(mood, 4),
                playstyle_match=round(playstyle, 4),
                social_match=features.social_score,
                estimated_playtime=features.playtime_estimate,
                difficulty=genre_difficulty_label(features.difficulty_score),
                tags=list(game.tags),
            ))
        recommendations.sort(key=lambda r: r.score, reverse=True)
        return recommendations[:count]

    def fallback_recommendations(self, games: List[Game], count: int) -> List[GameRecommendation]:
        """Candidate order with random scores in [fallback_score_min, fallback_score_max]."""
        low, high = self.config.fallback_score_min, self.config.fallback_score_max
        return [
            GameRecommendation(
                game_id=game.id,
                name=game.name,
                genre=game.primary_genre or "unknown",
                score=round(self.rng.uniform(low, high), 4),
                reasons=["Popular game you might enjoy"],
                mood_match=0.5,
                playstyle_match=0.5,
                social_match=0.5,
                estimated_playtime=game.average_playtime or 0.0,
                difficulty="Medium",
                tags=list(game.tags),
            )
            for game in games[:count]
        ]

    def similar_games(self, game_id: str, candidate_ids: List[str], limit: int = 3) -> List[str]:
        """Candidates ranked by cosine similarity of genre + mood features."""
        source = self.game_features.get(game_id)
        if source is None:
            return []
        source_vec = source.genre_vector + source.mood_vector
        scored = []
        for other_id in candidate_ids:
            other = self.game_features.get(other_id)
            if other_id == game_id or other is None:
                continue
            similarity = cosine_similarity(source_vec, other.genre_vector + other.mood_vector)
            if similarity > 0:
                scored.append((other_id, similarity))
        scored.sort(key=lambda kv: kv[1], reverse=True)
        return [game for game, _ in scored[:limit]]


def _reason(collaborative: float, content: float, mood: float, playstyle: float) -> str:
    reasons = []
    if collaborative > REASON_THRESHOLD:
        reasons.append("Players with similar tastes loved this game")
    if content > REASON_THRESHOLD:
        reasons.append("Matches your favorite genres")
    if mood > REASON_THRESHOLD:
        reasons.append("Perfect for your current mood")
    if playstyle > REASON_THRESHOLD:
        reasons.append("Fits your playstyle perfectly")
    return ". ".join(reasons) if reasons else "Recommended for you"
