"""
Tests for cosine similarity, confidence tiers and best-match search.
"""

from datetime import datetime, timezone

import pytest

from conftest import QUERY, unit_at
from semantic_qa.entities import CachedQuestion, ConfidenceTier
from semantic_qa.exceptions import DimensionMismatchError
from semantic_qa.similarity import (
    MIN_CONFIDENCE,
    confidence_tier,
    cosine_similarity,
    find_most_similar,
)


def make_question(question_id: str, embedding: list[float]) -> CachedQuestion:
    now = datetime(2026, 1, 1, tzinfo=timezone.utc)
    return CachedQuestion(
        id=question_id,
        question=f"question {question_id}",
        answer=f"answer {question_id}",
        embedding=embedding,
        created_at=now,
        updated_at=now,
    )


@pytest.mark.parametrize("vector", [[1.0, 2.0, 3.0], [-0.5, 0.25], [1e-3, 4.0, -7.5, 0.0]])
def test_self_similarity_is_one(vector):
    assert cosine_similarity(vector, vector) == pytest.approx(1.0)


def test_similarity_is_symmetric():
    a = [0.3, -1.2, 4.0]
    b = [2.0, 0.5, -0.7]
    assert cosine_similarity(a, b) == pytest.approx(cosine_similarity(b, a))


def test_orthogonal_and_opposite_vectors():
    assert cosine_similarity([1.0, 0.0], [0.0, 1.0]) == pytest.approx(0.0)
    assert cosine_similarity([1.0, 2.0], [-1.0, -2.0]) == pytest.approx(-1.0)


def test_zero_magnitude_returns_zero():
    assert cosine_similarity([0.0, 0.0], [1.0, 2.0]) == 0.0
    assert cosine_similarity([1.0, 2.0], [0.0, 0.0]) == 0.0


def test_similarity_never_exceeds_one():
    v = [0.1] * 384
    assert cosine_similarity(v, v) <= 1.0


def test_dimension_mismatch_raises():
    with pytest.raises(DimensionMismatchError) as exc_info:
        cosine_similarity([1.0, 2.0], [1.0, 2.0, 3.0])
    assert exc_info.value.left == 2
    assert exc_info.value.right == 3


@pytest.mark.parametrize(
    "similarity, tier",
    [
        (0.95, ConfidenceTier.HIGH),
        (0.85, ConfidenceTier.MEDIUM),
        (0.75, ConfidenceTier.LOW),
        (0.5, ConfidenceTier.NONE),
        (0.90, ConfidenceTier.HIGH),
        (0.80, ConfidenceTier.MEDIUM),
        (0.70, ConfidenceTier.LOW),
        (1.0, ConfidenceTier.HIGH),
        (-1.0, ConfidenceTier.NONE),
    ],
)
def test_confidence_tier(similarity, tier):
    assert confidence_tier(similarity) is tier


def test_min_confidence_is_low_tier_bound():
    assert MIN_CONFIDENCE == 0.70
    assert confidence_tier(MIN_CONFIDENCE) is ConfidenceTier.LOW


@pytest.mark.parametrize("threshold", [-1.0, 0.0, 0.7, 1.0])
def test_empty_candidates_return_none(threshold):
    assert find_most_similar(QUERY, [], threshold) is None


def test_best_below_threshold_returns_none():
    candidates = [make_question("a", unit_at(0.65)), make_question("b", unit_at(0.2))]
    assert find_most_similar(QUERY, candidates, 0.70) is None


def test_returns_argmax_with_tier():
    candidates = [
        make_question("a", unit_at(0.72)),
        make_question("b", unit_at(0.93)),
        make_question("c", unit_at(0.81)),
    ]

    result = find_most_similar(QUERY, candidates)

    assert result is not None
    assert result.matched_question.id == "b"
    assert result.similarity == pytest.approx(0.93)
    assert result.confidence_tier is ConfidenceTier.HIGH


def test_ties_keep_first_candidate():
    candidates = [
        make_question("first", unit_at(0.8)),
        make_question("second", unit_at(0.8)),
    ]

    result = find_most_similar(QUERY, candidates)

    assert result.matched_question.id == "first"


def test_accepts_generator_of_candidates():
    candidates = (make_question(str(i), unit_at(s)) for i, s in enumerate([0.1, 0.99]))
    result = find_most_similar(QUERY, candidates)
    assert result.matched_question.id == "1"


def test_low_threshold_surfaces_none_tier():
    result = find_most_similar(QUERY, [make_question("a", unit_at(0.5))], threshold=0.0)
    assert result.confidence_tier is ConfidenceTier.NONE


def test_candidate_dimension_mismatch_is_fatal():
    candidates = [make_question("a", unit_at(0.9)), make_question("bad", [1.0, 0.0])]
    with pytest.raises(DimensionMismatchError):
        find_most_similar(QUERY, candidates)
