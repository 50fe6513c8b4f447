"""Similarity search result entity."""

from dataclasses import dataclass
from enum import Enum

from .cached_question import CachedQuestion


class ConfidenceTier(str, Enum):
    """Discrete confidence bucket derived from a similarity score."""

    HIGH = "high"
    MEDIUM = "medium"
    LOW = "low"
    NONE = "none"


@dataclass(frozen=True)
class SimilarityResult:
    """Best match for a query vector. Computed per query, never persisted.

    Attributes:
        matched_question: The candidate with the highest cosine similarity
        similarity: Cosine similarity in [-1, 1]
        confidence_tier: Tier derived from ``similarity``
    """

    matched_question: CachedQuestion
    similarity: float
    confidence_tier: ConfidenceTier
