"""
Tests for cosine similarity and ranking.
"""

import pytest

from keepsake.vector.similarity import cosine_similarity, rank_by_similarity


def test_identical_vectors_score_one():
    a = [0.3, -1.2, 4.0, 0.5]
    assert cosine_similarity(a, a) == pytest.approx(1.0)


def test_similarity_is_symmetric():
    a = [1.0, 2.0, 3.0]
    b = [-2.0, 0.5, 1.0]
    assert cosine_similarity(a, b) == pytest.approx(cosine_similarity(b, a))


def test_opposite_vectors_score_minus_one():
    assert cosine_similarity([1.0, 1.0], [-1.0, -1.0]) == pytest.approx(-1.0)


def test_orthogonal_vectors_score_zero():
    assert cosine_similarity([1.0, 0.0], [0.0, 1.0]) == pytest.approx(0.0)


@pytest.mark.parametrize("a,b", [
    ([1.0, 0.0], [1.0, 0.0, 0.0]),
    (None, [1.0, 0.0]),
    ([1.0, 0.0], None),
    ([], []),
    ([0.0, 0.0], [1.0, 0.0]),
    ([1.0, 0.0], [0.0, 0.0]),
])
def test_degenerate_inputs_score_exactly_zero(a, b):
    assert cosine_similarity(a, b) == 0.0


def test_result_stays_within_bounds():
    a = [1e-8, 1e-8, 1e-8]
    score = cosine_similarity(a, a)
    assert -1.0 <= score <= 1.0


def test_rank_orders_descending_and_truncates():
    candidates = [
        ("a", [0.0, 1.0]),
        ("b", [1.0, 0.0]),
        ("c", [0.7, 0.7]),
    ]
    ranked = rank_by_similarity([1.0, 0.0], candidates, k=2)

    assert [item for item, _ in ranked] == ["b", "c"]
    assert ranked[0][1] == pytest.approx(1.0)
    assert ranked[1][1] == pytest.approx(0.7071, abs=1e-3)


def test_rank_is_stable_for_ties():
    candidates = [("first", [1.0, 0.0]), ("second", [2.0, 0.0]), ("third", [3.0, 0.0])]
    ranked = rank_by_similarity([1.0, 0.0], candidates)
    assert [item for item, _ in ranked] == ["first", "second", "third"]


def test_rank_k_bounds():
    candidates = [("a", [1.0]), ("b", [1.0])]
    assert rank_by_similarity([1.0], candidates, k=0) == []
    assert rank_by_similarity([1.0], candidates, k=-3) == []
    assert len(rank_by_similarity([1.0], candidates, k=10)) == 2
    assert len(rank_by_similarity([1.0], candidates, k=None)) == 2


def test_rank_scores_mismatched_candidates_as_zero():
    candidates = [("short", [1.0]), ("match", [0.0, 1.0])]
    ranked = rank_by_similarity([1.0, 1.0], candidates)

    assert ranked[0][0] == "match"
    assert ranked[1] == ("short", 0.0)
