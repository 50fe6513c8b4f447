"""Semantic QA - question answering behind a semantic question cache.

Incoming questions are embedded and compared against previously answered
questions. Close matches are served from the cache (with confidence tiers
deciding how much to trust them); everything else goes to an answer
generator and is cached for next time.

Layers:
    - protocols: Interface contracts (QuestionStore, EmbeddingProvider, AnswerGenerator)
    - repositories: Store and provider implementations
    - services: Business logic (SemanticQAService, QuestionService)
    - similarity: Cosine similarity, confidence tiers, best-match search
    - dto: Data transfer objects (service contract)
    - entities: Domain models (internal)

Usage:
    ```python
    from semantic_qa.bootstrap import create_qa_service

    qa = create_qa_service()
    turn = await qa.answer("What is 2+2?")
    print(turn.answer, turn.source, turn.confidence)
    ```
"""

from semantic_qa.config import Settings, get_redis_client, get_settings, settings
from semantic_qa.dto import ChatTurn
from semantic_qa.entities import CachedQuestion, ConfidenceTier, SimilarityResult
from semantic_qa.exceptions import (
    DimensionMismatchError,
    EmbeddingUnavailableError,
    ProviderUnavailableError,
    SemanticQAError,
)
from semantic_qa.protocols import (
    AnswerGenerator,
    EmbeddingProvider,
    NearestNeighborStore,
    QuestionStore,
)
from semantic_qa.services import QuestionService, SemanticQAService
from semantic_qa.similarity import (
    MIN_CONFIDENCE,
    confidence_tier,
    cosine_similarity,
    find_most_similar,
)

__all__ = [
    # Configuration
    "Settings",
    "settings",
    "get_settings",
    "get_redis_client",
    # Protocols (interfaces)
    "AnswerGenerator",
    "EmbeddingProvider",
    "NearestNeighborStore",
    "QuestionStore",
    # Services (business logic)
    "SemanticQAService",
    "QuestionService",
    # Similarity engine
    "MIN_CONFIDENCE",
    "confidence_tier",
    "cosine_similarity",
    "find_most_similar",
    # Entities (domain models)
    "CachedQuestion",
    "ConfidenceTier",
    "SimilarityResult",
    # DTOs (service contract)
    "ChatTurn",
    # Errors
    "SemanticQAError",
    "DimensionMismatchError",
    "ProviderUnavailableError",
    "EmbeddingUnavailableError",
]
