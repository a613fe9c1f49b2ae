"""Vector distance math."""
from __future__ import annotations

from collections.abc import Sequence

import numpy as np

from fundscope.domain.exceptions import VectorLengthError


def _pair(left: Sequence[float], right: Sequence[float]) -> tuple[np.ndarray, np.ndarray]:
    left_arr = np.asarray(left, dtype=np.float64)
    right_arr = np.asarray(right, dtype=np.float64)
    if left_arr.shape != right_arr.shape:
        raise VectorLengthError(left_arr.size, right_arr.size)
    return left_arr, right_arr


def cosine_similarity(left: Sequence[float], right: Sequence[float]) -> float:
    """Cosine of the angle between two vectors, 0.0 when either has zero norm."""
    left_arr, right_arr = _pair(left, right)
    denom = float(np.linalg.norm(left_arr) * np.linalg.norm(right_arr))
    if denom == 0.0:
        return 0.0
    score = float(np.dot(left_arr, right_arr) / denom)
    return min(1.0, max(-1.0, score))


def euclidean_distance(left: Sequence[float], right: Sequence[float]) -> float:
    left_arr, right_arr = _pair(left, right)
    return float(np.linalg.norm(left_arr - right_arr))


def distance_to_similarity(distance: float) -> float:
    """Map an L2 distance onto (0, 1], higher is better."""
    return 1.0 / (1.0 + distance)
