"""Service layer for business logic.

Services depend on protocols (interfaces), not concrete implementations,
making them testable and flexible.

Architecture:
    Service -> Repository
    (Business) -> (Data access / external providers)

Usage:
    ```python
    from semantic_qa.services import SemanticQAService

    qa = SemanticQAService(
        store=store,
        embedding_provider=embeddings,
        answer_generator=generator,
    )
    turn = await qa.answer("What is 2+2?")
    ```
"""

from .qa_service import SemanticQAService, build_adaptation_context, with_confidence_note
from .question_service import QuestionService
from .single_flight import SingleFlight, question_key

__all__ = [
    "SemanticQAService",
    "QuestionService",
    "SingleFlight",
    "build_adaptation_context",
    "question_key",
    "with_confidence_note",
]
