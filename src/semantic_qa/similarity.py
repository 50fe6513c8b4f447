"""Cosine similarity, confidence tiers and best-match search.

The search is a plain linear scan over every candidate. Stores with a vector
index can narrow the candidate list first (see ``NearestNeighborStore``),
but the scoring below is always exact.
"""

from collections.abc import Iterable, Sequence

import numpy as np

from semantic_qa.entities import CachedQuestion, ConfidenceTier, SimilarityResult
from semantic_qa.exceptions import DimensionMismatchError

HIGH_CONFIDENCE = 0.90
MEDIUM_CONFIDENCE = 0.80
LOW_CONFIDENCE = 0.70

# Minimum similarity accepted as a cache hit. Tied to the low tier so the
# "none" tier never surfaces from a successful search.
MIN_CONFIDENCE = LOW_CONFIDENCE


def cosine_similarity(a: Sequence[float], b: Sequence[float]) -> float:
    """Cosine similarity between two vectors.

    Args:
        a: First vector
        b: Second vector

    Returns:
        Similarity in [-1, 1], or 0.0 when either vector has zero magnitude

    Raises:
        DimensionMismatchError: If the vectors differ in length
    """
    if len(a) != len(b):
        raise DimensionMismatchError(len(a), len(b))

    va = np.asarray(a, dtype=np.float64)
    vb = np.asarray(b, dtype=np.float64)

    magnitude = np.linalg.norm(va) * np.linalg.norm(vb)
    if magnitude == 0:
        return 0.0

    # Clip rounding noise (e.g. 1.0000000000000002 for v·v)
    return float(np.clip(np.dot(va, vb) / magnitude, -1.0, 1.0))


def confidence_tier(similarity: float) -> ConfidenceTier:
    """Map a similarity score to its confidence tier (inclusive lower bounds)."""
    if similarity >= HIGH_CONFIDENCE:
        return ConfidenceTier.HIGH
    if similarity >= MEDIUM_CONFIDENCE:
        return ConfidenceTier.MEDIUM
    if similarity >= LOW_CONFIDENCE:
        return ConfidenceTier.LOW
    return ConfidenceTier.NONE


def find_most_similar(
    query_vector: Sequence[float],
    candidates: Iterable[CachedQuestion],
    threshold: float = MIN_CONFIDENCE,
) -> SimilarityResult | None:
    """Find the candidate most similar to ``query_vector``.

    Every candidate is scored exactly once. On ties the first candidate
    encountered wins, so the result is deterministic for a fixed ordering.

    Args:
        query_vector: Embedding of the incoming question
        candidates: Stored questions to compare against
        threshold: Minimum similarity for a match

    Returns:
        The best match, or None if there are no candidates or the best
        similarity is strictly below ``threshold``

    Raises:
        DimensionMismatchError: If any candidate embedding has a different length
    """
    best: CachedQuestion | None = None
    best_similarity = -np.inf

    for candidate in candidates:
        similarity = cosine_similarity(query_vector, candidate.embedding)
        if similarity > best_similarity:
            best = candidate
            best_similarity = similarity

    if best is None or best_similarity < threshold:
        return None

    return SimilarityResult(
        matched_question=best,
        similarity=float(best_similarity),
        confidence_tier=confidence_tier(best_similarity),
    )
