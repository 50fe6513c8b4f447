"""Cached question domain entity."""

from dataclasses import dataclass
from datetime import datetime


@dataclass(frozen=True)
class CachedQuestion:
    """Domain entity for a stored question/answer pair.

    Created once when a question misses the cache and never mutated
    afterwards.

    Attributes:
        id: Opaque unique identifier assigned by the store
        question: The original question text
        answer: The canonical answer
        embedding: The embedding vector of the question text
        created_at: When this entry was created
        updated_at: When this entry was last written
    """

    id: str
    question: str
    answer: str
    embedding: list[float]
    created_at: datetime
    updated_at: datetime

    @property
    def dimension(self) -> int:
        """Length of the stored embedding."""
        return len(self.embedding)
