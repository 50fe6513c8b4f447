"""Question management service.

Adds questions with their embeddings and looks them up by id, text or
meaning. Used by seeding scripts and administrative callers; the QA flow
itself lives in ``SemanticQAService``.
"""

import logging

from semantic_qa.entities import CachedQuestion, SimilarityResult
from semantic_qa.exceptions import EmbeddingUnavailableError
from semantic_qa.protocols import EmbeddingProvider, QuestionStore
from semantic_qa.similarity import MIN_CONFIDENCE, find_most_similar

logger = logging.getLogger(__name__)


def require_text(value: str, field: str) -> str:
    """Reject empty or whitespace-only text."""
    if not value or not value.strip():
        raise ValueError(f"{field} is required")
    return value


async def embed_question(provider: EmbeddingProvider, question: str) -> list[float]:
    """Embed a question, turning any provider failure into EmbeddingUnavailableError.

    Args:
        provider: The embedding provider
        question: Text to embed

    Returns:
        The non-empty embedding vector

    Raises:
        EmbeddingUnavailableError: If the provider fails or returns an empty vector
    """
    try:
        vector = await provider.embed(question)
    except Exception as e:
        raise EmbeddingUnavailableError(provider.model_name, f"Failed to generate embedding: {e}") from e

    if not vector:
        raise EmbeddingUnavailableError(provider.model_name, "Provider returned an empty embedding")
    return vector


class QuestionService:
    """Question management on top of a QuestionStore.

    Example:
        ```python
        questions = QuestionService(store=store, embedding_provider=provider)
        await questions.add_question("What is 2+2?", "4")
        match = await questions.find_similar_question("what's two plus two")
        ```
    """

    def __init__(self, store: QuestionStore, embedding_provider: EmbeddingProvider) -> None:
        self._store = store
        self._embeddings = embedding_provider

    async def add_question(self, question: str, answer: str) -> CachedQuestion:
        """Embed ``question`` and store it with ``answer``.

        Raises:
            ValueError: If question or answer is blank
            EmbeddingUnavailableError: If the question cannot be embedded
        """
        require_text(question, "Question")
        require_text(answer, "Answer")

        vector = await embed_question(self._embeddings, question)
        entry = self._store.create(question, answer, vector)
        logger.info("Added question %s", entry.id, extra={"question_id": entry.id})
        return entry

    def get_all_questions(self) -> list[CachedQuestion]:
        return self._store.find_all()

    def get_question(self, question_id: str) -> CachedQuestion | None:
        return self._store.find_by_id(question_id)

    def find_by_text(self, question: str) -> CachedQuestion | None:
        return self._store.find_by_text(question)

    async def find_similar_question(
        self,
        question: str,
        threshold: float = MIN_CONFIDENCE,
    ) -> SimilarityResult | None:
        """Find the stored question closest in meaning to ``question``.

        Args:
            question: Question text to match
            threshold: Minimum similarity for a match

        Returns:
            The best match, or None when nothing reaches ``threshold``
        """
        require_text(question, "Question")
        vector = await embed_question(self._embeddings, question)
        return find_most_similar(vector, self._store.find_all(), threshold)
