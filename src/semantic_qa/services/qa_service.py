"""Semantic QA service: cache lookup with confidence routing.

This service answers questions from the question cache when a stored
question is close enough in meaning, and only calls the answer generator
when it has to. On a miss the generated answer is written back so the next
similar question is served from the cache.
"""

import asyncio
import logging
import math

from semantic_qa.config import settings
from semantic_qa.dto import ChatTurn
from semantic_qa.entities import CachedQuestion, ConfidenceTier, SimilarityResult
from semantic_qa.protocols import (
    FALLBACK_ANSWER,
    AnswerGenerator,
    EmbeddingProvider,
    NearestNeighborStore,
    QuestionStore,
)
from semantic_qa.similarity import MIN_CONFIDENCE, find_most_similar

from .question_service import embed_question, require_text
from .single_flight import SingleFlight, question_key

logger = logging.getLogger(__name__)


def build_adaptation_context(match: CachedQuestion) -> str:
    """Context handed to the generator for low-confidence matches."""
    return (
        f'A similar question in our database is: "{match.question}" '
        f'with answer: "{match.answer}". Use this as context to answer the '
        "user's question, adapting it to their specific query if needed."
    )


def with_confidence_note(answer: str, similarity: float) -> str:
    """Append a rounded confidence percentage to ``answer``."""
    percent = math.floor(similarity * 100 + 0.5)
    return f"{answer}\n\n(Confidence: {percent}%)"


class SemanticQAService:
    """Core question answering orchestration.

    This service depends on PROTOCOLS, not concrete implementations:
    - QuestionStore: Redis, in-memory, SQL, ...
    - EmbeddingProvider: Ollama, sentence-transformers, OpenAI, ...
    - AnswerGenerator: OpenAI, Ollama, ...

    Routing by confidence tier of the best cached match:
    - high: stored answer verbatim
    - medium: stored answer with a confidence note
    - low: generator adapts the stored answer (stored answer on failure)
    - none / no match: generator answers fresh, result is cached

    Example:
        ```python
        qa = SemanticQAService.create(
            store=RedisQuestionRepository.from_settings(embedding_provider=embeddings),
            embedding_provider=embeddings,
            answer_generator=OpenAIAnswerGenerator.create(),
        )
        turn = await qa.answer("What is 2+2?")
        ```
    """

    def __init__(
        self,
        store: QuestionStore,
        embedding_provider: EmbeddingProvider,
        answer_generator: AnswerGenerator,
        use_vector_index: bool = False,
        vector_index_candidates: int = 10,
        single_flight: bool = False,
    ) -> None:
        """Initialize the QA service.

        Args:
            store: Question cache backend (required).
            embedding_provider: Embedding generation service (required).
            answer_generator: Answer generation service (required).
            use_vector_index: Recall candidates through the store's vector
                index when it has one, instead of scanning every question.
            vector_index_candidates: Number of candidates to recall.
            single_flight: Collapse concurrent misses for the same question.
        """
        self._store = store
        self._embeddings = embedding_provider
        self._generator = answer_generator
        self._use_vector_index = use_vector_index
        self._vector_index_candidates = vector_index_candidates
        self._single_flight: SingleFlight[ChatTurn] | None = SingleFlight() if single_flight else None

    @classmethod
    def create(
        cls,
        store: QuestionStore,
        embedding_provider: EmbeddingProvider,
        answer_generator: AnswerGenerator,
        use_vector_index: bool | None = None,
        single_flight: bool | None = None,
    ) -> "SemanticQAService":
        """Factory method filling routing options from settings.

        Args:
            store: Question cache backend (required).
            embedding_provider: Embedding generation service (required).
            answer_generator: Answer generation service (required).
            use_vector_index: If None, uses settings.use_vector_index.
            single_flight: If None, uses settings.single_flight.

        Returns:
            Configured SemanticQAService instance
        """
        return cls(
            store=store,
            embedding_provider=embedding_provider,
            answer_generator=answer_generator,
            use_vector_index=settings.use_vector_index if use_vector_index is None else use_vector_index,
            vector_index_candidates=settings.vector_index_candidates,
            single_flight=settings.single_flight if single_flight is None else single_flight,
        )

    async def answer(self, question: str) -> ChatTurn:
        """Answer a question from the cache or the generator.

        Business logic:
        1. Embed the question
        2. Load candidate questions from the store
        3. Find the most similar candidate above MIN_CONFIDENCE
        4. Route on its confidence tier (see class docstring)

        Args:
            question: The user's question

        Returns:
            ChatTurn with the answer and where it came from

        Raises:
            ValueError: If the question is blank
            EmbeddingUnavailableError: If the question cannot be embedded
            DimensionMismatchError: If stored embeddings have a different length
            ProviderUnavailableError: If the generator fails on a cache miss
        """
        require_text(question, "Question")

        vector = await embed_question(self._embeddings, question)
        candidates = self._candidates(vector)
        logger.debug("Scanning %d cached questions", len(candidates))

        result = find_most_similar(vector, candidates, MIN_CONFIDENCE)

        if result is None or result.confidence_tier is ConfidenceTier.NONE:
            logger.info("Cache miss, generating answer", extra={"source": "generated"})
            return await self._answer_miss(question, vector)

        match = result.matched_question
        logger.info(
            "Cache hit: tier=%s similarity=%.4f question_id=%s",
            result.confidence_tier.value,
            result.similarity,
            match.id,
            extra={
                "tier": result.confidence_tier.value,
                "similarity": result.similarity,
                "question_id": match.id,
                "source": "cache",
            },
        )

        if result.confidence_tier is ConfidenceTier.HIGH:
            answer = match.answer
        elif result.confidence_tier is ConfidenceTier.MEDIUM:
            answer = with_confidence_note(match.answer, result.similarity)
        else:
            answer = await self._adapt(question, result)

        return ChatTurn(answer=answer, source="cache", confidence=result.similarity)

    async def answer_many(self, questions: list[str]) -> list[ChatTurn]:
        """Answer several questions concurrently, preserving order."""
        return list(await asyncio.gather(*(self.answer(q) for q in questions)))

    def _candidates(self, vector: list[float]) -> list[CachedQuestion]:
        if self._use_vector_index and isinstance(self._store, NearestNeighborStore):
            nearest = self._store.find_nearest(vector, self._vector_index_candidates)
            if nearest:
                return nearest
            # Index not built yet; fall through to a full scan
        return self._store.find_all()

    async def _answer_miss(self, question: str, vector: list[float]) -> ChatTurn:
        if self._single_flight is None:
            return await self._generate_and_store(question, vector)
        return await self._single_flight.run(
            question_key(question),
            lambda: self._generate_and_store(question, vector),
        )

    async def _generate_and_store(self, question: str, vector: list[float]) -> ChatTurn:
        answer = await self._generator.generate(question)
        # Re-use the query vector; it already represents the question text
        entry = self._store.create(question, answer, vector)
        logger.info("Cached new question %s", entry.id, extra={"question_id": entry.id})
        return ChatTurn(answer=answer, source="generated")

    async def _adapt(self, question: str, result: SimilarityResult) -> str:
        """Adapt a low-confidence match to the user's wording.

        Falls back to the stored answer when generation fails or yields no
        real answer.
        The adapted text is never written back to the store.
        """
        match = result.matched_question
        try:
            adapted = await self._generator.generate(question, build_adaptation_context(match))
        except Exception as e:
            logger.warning(
                "Answer adaptation failed, returning stored answer: %s",
                e,
                extra={"question_id": match.id},
            )
            return match.answer

        # Generators substitute FALLBACK_ANSWER for an empty completion
        if not adapted or not adapted.strip() or adapted == FALLBACK_ANSWER:
            return match.answer
        return adapted

    async def is_healthy(self) -> bool:
        """Check that both the store and the embedding provider are reachable."""
        store_healthy = self._store.health_check()
        embeddings_healthy = await self._embeddings.is_available()
        return store_healthy and embeddings_healthy

    @property
    def store(self) -> QuestionStore:
        """Get the underlying store (for testing)."""
        return self._store

    @property
    def embedding_provider(self) -> EmbeddingProvider:
        return self._embeddings

    @property
    def answer_generator(self) -> AnswerGenerator:
        return self._generator
