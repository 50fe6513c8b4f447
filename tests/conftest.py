"""
Shared fixtures and fake collaborators for the semantic QA tests.
"""

import hashlib
import math

import numpy as np
import pytest

from semantic_qa.repositories import InMemoryQuestionRepository
from semantic_qa.services import SemanticQAService


def unit_at(similarity: float) -> list[float]:
    """3-d unit vector whose cosine similarity to [1, 0, 0] is ``similarity``."""
    return [similarity, math.sqrt(1.0 - similarity * similarity), 0.0]


QUERY = [1.0, 0.0, 0.0]


class FakeEmbeddingProvider:
    """Returns fixed vectors for known texts, hashed gaussian vectors otherwise."""

    def __init__(self, vectors: dict[str, list[float]] | None = None, dimension: int = 3) -> None:
        self.vectors = dict(vectors or {})
        self._dimension = dimension
        self.calls: list[str] = []
        self.error: Exception | None = None

    @property
    def dimension(self) -> int:
        return self._dimension

    @property
    def model_name(self) -> str:
        return "fake-embeddings"

    async def embed(self, text: str) -> list[float]:
        self.calls.append(text)
        if self.error is not None:
            raise self.error
        if text in self.vectors:
            return list(self.vectors[text])
        seed = int(hashlib.sha256(text.encode()).hexdigest()[:8], 16)
        return np.random.default_rng(seed).standard_normal(self._dimension).tolist()

    async def is_available(self) -> bool:
        return self.error is None


class FakeAnswerGenerator:
    """Records calls; returns ``answer`` or raises ``error``."""

    def __init__(self, answer: str = "generated answer") -> None:
        self.answer = answer
        self.error: Exception | None = None
        self.calls: list[tuple[str, str | None]] = []

    @property
    def model_name(self) -> str:
        return "fake-chat"

    async def generate(self, question: str, context: str | None = None) -> str:
        self.calls.append((question, context))
        if self.error is not None:
            raise self.error
        return self.answer

    async def is_available(self) -> bool:
        return True


@pytest.fixture
def embeddings():
    return FakeEmbeddingProvider()


@pytest.fixture
def generator():
    return FakeAnswerGenerator()


@pytest.fixture
def store():
    return InMemoryQuestionRepository()


@pytest.fixture
def qa(store, embeddings, generator):
    return SemanticQAService(
        store=store,
        embedding_provider=embeddings,
        answer_generator=generator,
    )
