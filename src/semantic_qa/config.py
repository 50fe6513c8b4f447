import os
from dataclasses import dataclass
from functools import lru_cache

import redis
from dotenv import load_dotenv

load_dotenv()

EMBEDDING_PROVIDERS = ("ollama", "local", "openai")
ANSWER_PROVIDERS = ("openai", "ollama")
QUESTION_STORES = ("redis", "memory")


def _env_flag(name: str, default: str = "false") -> bool:
    return os.getenv(name, default).lower() == "true"


@dataclass(frozen=True)
class Settings:
    """Application settings loaded from environment variables."""

    # Redis
    redis_url: str = os.getenv("REDIS_URL", "redis://localhost:6379")
    redis_password: str | None = os.getenv("REDIS_PASSWORD")
    question_index_name: str = os.getenv("QUESTION_INDEX_NAME", "semantic_qa")
    question_store: str = os.getenv("QUESTION_STORE", "redis")

    # Embedding
    embedding_provider: str = os.getenv("EMBEDDING_PROVIDER", "ollama")
    # Unset means each provider uses its own default model
    embedding_model: str | None = os.getenv("EMBEDDING_MODEL") or None

    # Answer generation
    answer_provider: str = os.getenv("ANSWER_PROVIDER", "openai")
    chat_model: str | None = os.getenv("CHAT_MODEL") or None
    generation_temperature: float = float(os.getenv("GENERATION_TEMPERATURE", "0.7"))
    generation_max_tokens: int = int(os.getenv("GENERATION_MAX_TOKENS", "500"))

    # Ollama
    ollama_base_url: str = os.getenv("OLLAMA_BASE_URL", "http://localhost:11434")

    # OpenAI
    openai_api_key: str | None = os.getenv("OPENAI_API_KEY")
    openai_base_url: str = os.getenv("OPENAI_BASE_URL", "https://api.openai.com/v1")

    provider_timeout: float = float(os.getenv("PROVIDER_TIMEOUT", "30.0"))

    # Routing
    use_vector_index: bool = _env_flag("QA_VECTOR_INDEX")
    vector_index_candidates: int = int(os.getenv("QA_VECTOR_INDEX_CANDIDATES", "10"))
    single_flight: bool = _env_flag("QA_SINGLE_FLIGHT")

    # Logging
    log_level: str = os.getenv("LOG_LEVEL", "INFO")
    log_json: bool = _env_flag("LOG_JSON")

    def __post_init__(self) -> None:
        """Validate settings after initialization."""
        if self.embedding_provider not in EMBEDDING_PROVIDERS:
            raise ValueError(
                f"EMBEDDING_PROVIDER must be one of {list(EMBEDDING_PROVIDERS)}, "
                f"got {self.embedding_provider!r}"
            )

        if self.answer_provider not in ANSWER_PROVIDERS:
            raise ValueError(
                f"ANSWER_PROVIDER must be one of {list(ANSWER_PROVIDERS)}, "
                f"got {self.answer_provider!r}"
            )

        if self.question_store not in QUESTION_STORES:
            raise ValueError(
                f"QUESTION_STORE must be one of {list(QUESTION_STORES)}, "
                f"got {self.question_store!r}"
            )

        if not 0 <= self.generation_temperature <= 2:
            raise ValueError("GENERATION_TEMPERATURE must be between 0 and 2")

        if self.generation_max_tokens <= 0:
            raise ValueError("GENERATION_MAX_TOKENS must be positive")

        if self.provider_timeout <= 0:
            raise ValueError("PROVIDER_TIMEOUT must be positive")

        if self.vector_index_candidates <= 0:
            raise ValueError("QA_VECTOR_INDEX_CANDIDATES must be positive")


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()


# Global settings instance
settings = get_settings()


def get_redis_client(config: Settings | None = None) -> redis.Redis:
    """Create a Redis client instance."""
    config = config or settings
    return redis.from_url(
        config.redis_url,
        password=config.redis_password,
        decode_responses=False,
    )
