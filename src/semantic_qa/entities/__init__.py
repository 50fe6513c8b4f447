"""Domain entities for internal representation.

These are pure dataclasses (frozen) used internally by services
and repositories. They are NOT used for API contracts - use DTOs
from the dto package for that.
"""

from .cached_question import CachedQuestion
from .similarity_result import ConfidenceTier, SimilarityResult

__all__ = ["CachedQuestion", "ConfidenceTier", "SimilarityResult"]
