"""
Cosine similarity and ranking over an unindexed set of vectors.
"""

from typing import Any, List, Optional, Sequence, Tuple

import numpy as np


def cosine_similarity(a: Optional[Sequence[float]], b: Optional[Sequence[float]]) -> float:
    """
    Cosine similarity of two vectors, clipped to [-1, 1].

    Returns 0.0 when either vector is missing or empty, when the lengths
    differ, or when either vector has zero magnitude.
    """
    if a is None or b is None:
        return 0.0
    if len(a) == 0 or len(a) != len(b):
        return 0.0

    va = np.asarray(a, dtype=np.float64)
    vb = np.asarray(b, dtype=np.float64)
    norm_a = np.linalg.norm(va)
    norm_b = np.linalg.norm(vb)
    if norm_a == 0 or norm_b == 0:
        return 0.0

    score = float(np.dot(va, vb) / (norm_a * norm_b))
    return max(-1.0, min(1.0, score))


def rank_by_similarity(
    query: Sequence[float],
    candidates: List[Tuple[Any, Optional[Sequence[float]]]],
    k: Optional[int] = None,
) -> List[Tuple[Any, float]]:
    """
    Score (item, vector) candidates against query and sort them best first.

    The sort is stable, so equal scores keep their input order. k=None
    returns every candidate; k <= 0 returns nothing.
    """
    if k is not None and k <= 0:
        return []

    scored = [(item, cosine_similarity(query, vector)) for item, vector in candidates]
    scored.sort(key=lambda pair: pair[1], reverse=True)

    if k is None:
        return scored
    return scored[:k]
