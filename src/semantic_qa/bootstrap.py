"""Composition root: build providers, store and service from settings.

Every dependency is constructed here and passed explicitly; nothing in the
package keeps a module-level provider client.
"""

import logging

from semantic_qa.config import Settings, get_redis_client, settings
from semantic_qa.protocols import AnswerGenerator, EmbeddingProvider, QuestionStore
from semantic_qa.repositories import (
    InMemoryQuestionRepository,
    OllamaAnswerGenerator,
    OllamaEmbeddingProvider,
    OpenAIAnswerGenerator,
    OpenAIEmbeddingProvider,
    RedisQuestionRepository,
)
from semantic_qa.services import SemanticQAService

logger = logging.getLogger(__name__)


def create_embedding_provider(config: Settings | None = None) -> EmbeddingProvider:
    """Build the embedding provider named by EMBEDDING_PROVIDER.

    EMBEDDING_MODEL applies to the selected provider only; when unset the
    provider's own default model is used.
    """
    config = config or settings

    if config.embedding_provider == "local":
        # Imported lazily: sentence-transformers pulls in torch
        from semantic_qa.repositories.local_embedding_provider import LocalEmbeddingProvider

        return LocalEmbeddingProvider(model_name=config.embedding_model)

    if config.embedding_provider == "openai":
        return OpenAIEmbeddingProvider(
            api_key=config.openai_api_key,
            model_name=config.embedding_model or OpenAIEmbeddingProvider.DEFAULT_MODEL,
            base_url=config.openai_base_url,
            timeout=config.provider_timeout,
        )

    return OllamaEmbeddingProvider(
        model_name=config.embedding_model or OllamaEmbeddingProvider.DEFAULT_MODEL,
        base_url=config.ollama_base_url,
        timeout=config.provider_timeout,
    )


def create_answer_generator(config: Settings | None = None) -> AnswerGenerator:
    """Build the answer generator named by ANSWER_PROVIDER."""
    config = config or settings

    if config.answer_provider == "ollama":
        return OllamaAnswerGenerator(
            model_name=config.chat_model or OllamaAnswerGenerator.DEFAULT_MODEL,
            base_url=config.ollama_base_url,
            temperature=config.generation_temperature,
            max_tokens=config.generation_max_tokens,
            timeout=config.provider_timeout,
        )

    return OpenAIAnswerGenerator(
        api_key=config.openai_api_key,
        model_name=config.chat_model or OpenAIAnswerGenerator.DEFAULT_MODEL,
        base_url=config.openai_base_url,
        temperature=config.generation_temperature,
        max_tokens=config.generation_max_tokens,
        timeout=config.provider_timeout,
    )


def create_question_store(
    config: Settings | None = None,
    embedding_provider: EmbeddingProvider | None = None,
) -> QuestionStore:
    """Build the question store named by QUESTION_STORE."""
    config = config or settings

    if config.question_store == "memory":
        return InMemoryQuestionRepository()

    return RedisQuestionRepository(
        redis_client=get_redis_client(config),
        index_name=config.question_index_name,
        vector_index=config.use_vector_index,
        dimension=embedding_provider.dimension if embedding_provider else None,
    )


def create_qa_service(config: Settings | None = None) -> SemanticQAService:
    """Wire a SemanticQAService from settings.

    Args:
        config: Settings to use. Defaults to the global settings.

    Returns:
        A ready SemanticQAService
    """
    config = config or settings

    embedding_provider = create_embedding_provider(config)
    answer_generator = create_answer_generator(config)
    store = create_question_store(config, embedding_provider)

    logger.info(
        "QA service: store=%s embeddings=%s/%s generator=%s/%s",
        config.question_store,
        config.embedding_provider,
        embedding_provider.model_name,
        config.answer_provider,
        answer_generator.model_name,
    )

    return SemanticQAService(
        store=store,
        embedding_provider=embedding_provider,
        answer_generator=answer_generator,
        use_vector_index=config.use_vector_index,
        vector_index_candidates=config.vector_index_candidates,
        single_flight=config.single_flight,
    )
