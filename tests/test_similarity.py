"""Cosine / Euclidean properties."""
import math
import random

import pytest

from fundscope.domain.exceptions import VectorLengthError
from fundscope.search.similarity import cosine_similarity, distance_to_similarity, euclidean_distance


def _random_vectors(seed: int, count: int = 25, dim: int = 16):
    rng = random.Random(seed)
    return [[rng.uniform(-5, 5) for _ in range(dim)] for _ in range(count)]


def test_cosine_is_symmetric():
    vectors = _random_vectors(1)
    for a, b in zip(vectors, reversed(vectors)):
        assert cosine_similarity(a, b) == cosine_similarity(b, a)


def test_self_similarity_is_one():
    for v in _random_vectors(2):
        assert cosine_similarity(v, v) == pytest.approx(1.0)


def test_cosine_is_bounded():
    vectors = _random_vectors(3)
    for a in vectors:
        for b in vectors:
            assert -1.0 <= cosine_similarity(a, b) <= 1.0
    assert cosine_similarity([1.0, 0.0], [-1.0, 0.0]) == pytest.approx(-1.0)


def test_zero_vector_similarity_is_zero():
    assert cosine_similarity([0.0, 0.0, 0.0], [1.0, 2.0, 3.0]) == 0.0
    assert cosine_similarity([1.0, 2.0, 3.0], [0.0, 0.0, 0.0]) == 0.0
    assert cosine_similarity([0.0, 0.0], [0.0, 0.0]) == 0.0


def test_length_mismatch_is_rejected():
    with pytest.raises(VectorLengthError, match="3 != 4"):
        cosine_similarity([1.0, 2.0, 3.0], [1.0, 2.0, 3.0, 4.0])
    with pytest.raises(VectorLengthError):
        euclidean_distance([1.0, 2.0, 3.0], [1.0, 2.0, 3.0, 4.0])


def test_length_mismatch_is_a_value_error():
    with pytest.raises(ValueError):
        cosine_similarity([1.0], [1.0, 2.0])


def test_euclidean_distance():
    assert euclidean_distance([0.0, 0.0], [3.0, 4.0]) == pytest.approx(5.0)
    assert euclidean_distance([1.5, -2.0], [1.5, -2.0]) == 0.0


def test_distance_to_similarity_is_monotone():
    assert distance_to_similarity(0.0) == 1.0
    assert distance_to_similarity(1.0) == pytest.approx(0.5)
    assert distance_to_similarity(0.5) > distance_to_similarity(2.0)
    assert not math.isnan(distance_to_similarity(1e9))
