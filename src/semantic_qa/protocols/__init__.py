"""Protocol interfaces for swappable implementations.

This package contains protocol definitions using structural typing.
Protocols enable:
- Easy swapping of implementations (Redis → SQL, Ollama → OpenAI, etc.)
- Unit testing with fake implementations
- Clear separation of concerns
"""

from .answer_generator import (
    DEFAULT_SYSTEM_PROMPT,
    FALLBACK_ANSWER,
    AnswerGenerator,
    build_system_prompt,
)
from .embedding_provider import EmbeddingProvider
from .question_store import NearestNeighborStore, QuestionStore

__all__ = [
    "AnswerGenerator",
    "EmbeddingProvider",
    "NearestNeighborStore",
    "QuestionStore",
    "DEFAULT_SYSTEM_PROMPT",
    "FALLBACK_ANSWER",
    "build_system_prompt",
]
