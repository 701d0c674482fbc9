"""
Similarity utilities — Pearson correlation for collaborative filtering and
cosine similarity for game feature vectors.
"""

from typing import List

import numpy as np


def cosine_similarity(v1: List[float], v2: List[float]) -> float:
    """Cosine of two game feature vectors; 0.0 when either is empty or all zeros."""
    if not v1 or len(v1) != len(v2):
        return 0.0
    a = np.asarray(v1, dtype=float)
    b = np.asarray(v2, dtype=float)
    norms = np.linalg.norm(a) * np.linalg.norm(b)
    if norms == 0:
        return 0.0
    return float(np.dot(a, b) / norms)


def pearson_similarity(x: List[float], y: List[float]) -> float:
    """
    Pearson correlation of two aligned rating vectors.

    Returns 0.0 for empty input or when either vector has zero variance.
    """
    if not x or len(x) != len(y):
        return 0.0
    a = np.asarray(x, dtype=float)
    b = np.asarray(y, dtype=float)
    da = a - a.mean()
    db = b - b.mean()
    denominator = np.sqrt(np.sum(da * da) * np.sum(db * db))
    if denominator == 0:
        return 0.0
    return float(np.sum(da * db) / denominator)
