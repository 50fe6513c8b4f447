"""Repository layer for data access and external providers.

This layer hides external dependencies (Redis, embedding APIs, chat APIs)
behind protocol-based interfaces. The classes here are protocol-based
(structural typing), not inheritance-based.

``LocalEmbeddingProvider`` is not re-exported here so that importing the
package does not pull in sentence-transformers; import it from
``semantic_qa.repositories.local_embedding_provider``.
"""

from semantic_qa.protocols import AnswerGenerator, EmbeddingProvider, QuestionStore

from .memory_repository import InMemoryQuestionRepository
from .ollama_answer_generator import OllamaAnswerGenerator
from .ollama_embedding_provider import OllamaEmbeddingProvider
from .openai_answer_generator import OpenAIAnswerGenerator
from .openai_embedding_provider import OpenAIEmbeddingProvider
from .redis_repository import RedisQuestionRepository

__all__ = [
    "AnswerGenerator",
    "EmbeddingProvider",
    "QuestionStore",
    "InMemoryQuestionRepository",
    "RedisQuestionRepository",
    "OllamaEmbeddingProvider",
    "OpenAIEmbeddingProvider",
    "OllamaAnswerGenerator",
    "OpenAIAnswerGenerator",
]
