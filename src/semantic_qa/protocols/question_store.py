"""Question store protocol.

Defines the interface for any backend that durably holds
question/answer/embedding triples for semantic matching.

Implementations can include:
- Redis hashes (default)
- In-memory list (demos and tests)
- Any SQL or document database
"""

from typing import Protocol, runtime_checkable

from semantic_qa.entities import CachedQuestion


@runtime_checkable
class QuestionStore(Protocol):
    """Protocol for question storage backends.

    The QA service only ever appends to the store and reads from it;
    updates and deletes belong to administrative tooling.

    Example:
        ```python
        store: QuestionStore = RedisQuestionRepository.from_settings()
        store: QuestionStore = InMemoryQuestionRepository()
        ```
    """

    def create(self, question: str, answer: str, embedding: list[float]) -> CachedQuestion:
        """Persist a new question.

        Args:
            question: The question text
            answer: The answer text
            embedding: The embedding vector for the question

        Returns:
            The stored entity, with id and timestamps assigned
        """
        ...

    def find_all(self) -> list[CachedQuestion]:
        """Return every stored question, in a stable order.

        Returns:
            All cached questions
        """
        ...

    def find_by_id(self, question_id: str) -> CachedQuestion | None:
        """Look up a question by its id.

        Args:
            question_id: The id assigned at creation

        Returns:
            The question, or None if unknown
        """
        ...

    def find_by_text(self, question: str) -> CachedQuestion | None:
        """Look up a question by exact text.

        Args:
            question: The question text to match

        Returns:
            The first matching question, or None
        """
        ...

    def count_all(self) -> int:
        """Count stored questions."""
        ...

    def health_check(self) -> bool:
        """Check if the store is accessible."""
        ...


@runtime_checkable
class NearestNeighborStore(Protocol):
    """Optional capability: approximate nearest-neighbour recall.

    Stores that maintain a vector index implement this so the service can
    avoid a full scan. Candidates are re-scored exactly, so threshold and
    tier semantics do not depend on the index.
    """

    def find_nearest(self, vector: list[float], limit: int) -> list[CachedQuestion]:
        """Return up to ``limit`` questions closest to ``vector``.

        Args:
            vector: The query embedding
            limit: Maximum number of candidates

        Returns:
            Candidate questions, closest first
        """
        ...
