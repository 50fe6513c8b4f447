"""OpenAI embeddings over the REST API."""

import logging

import httpx

from semantic_qa.config import settings
from semantic_qa.exceptions import ProviderUnavailableError

logger = logging.getLogger(__name__)


class OpenAIEmbeddingProvider:
    """OpenAI implementation of EmbeddingProvider protocol.

    Calls ``POST {base_url}/embeddings`` directly with httpx.
    """

    DEFAULT_MODEL = "text-embedding-3-small"

    MODEL_DIMENSIONS = {
        "text-embedding-3-small": 1536,
        "text-embedding-3-large": 3072,
        "text-embedding-ada-002": 1536,
    }

    def __init__(
        self,
        api_key: str | None = None,
        model_name: str | None = None,
        base_url: str | None = None,
        timeout: float | None = None,
        client: httpx.AsyncClient | None = None,
    ) -> None:
        """Initialize the OpenAI embedding provider.

        Args:
            api_key: OpenAI API key. Defaults to settings.openai_api_key.
            model_name: Embedding model name. Defaults to DEFAULT_MODEL.
            base_url: API base URL. Defaults to settings.openai_base_url.
            timeout: Request timeout in seconds. Defaults to settings.provider_timeout.
            client: Preconfigured HTTP client (mainly for tests).
        """
        self._api_key = api_key or settings.openai_api_key
        if not self._api_key:
            raise ValueError("OPENAI_API_KEY is not set")
        self._model_name = model_name or self.DEFAULT_MODEL
        self._base_url = (base_url or settings.openai_base_url).rstrip("/")
        self._timeout = timeout or settings.provider_timeout
        self._dimension: int | None = None
        self._client = client

    @property
    def client(self) -> httpx.AsyncClient:
        """Lazy-load the async HTTP client."""
        if self._client is None:
            self._client = httpx.AsyncClient(timeout=self._timeout)
        return self._client

    @classmethod
    def create(
        cls,
        api_key: str | None = None,
        model_name: str | None = None,
    ) -> "OpenAIEmbeddingProvider":
        """Factory method to create OpenAIEmbeddingProvider with defaults."""
        return cls(api_key=api_key, model_name=model_name)

    @property
    def dimension(self) -> int:
        if self._dimension is None:
            self._dimension = self.MODEL_DIMENSIONS.get(self._model_name, 1536)
        return self._dimension

    @property
    def model_name(self) -> str:
        return self._model_name

    async def embed(self, text: str) -> list[float]:
        """Generate embedding vector for a single text.

        Raises:
            ProviderUnavailableError: On HTTP errors or an unexpected payload
        """
        try:
            response = await self.client.post(
                f"{self._base_url}/embeddings",
                headers={"Authorization": f"Bearer {self._api_key}"},
                json={"model": self._model_name, "input": text},
            )
            response.raise_for_status()
            vector = response.json()["data"][0]["embedding"]
        except httpx.HTTPError as e:
            raise ProviderUnavailableError("openai", f"Failed to generate embedding: {e}") from e
        except (ValueError, KeyError, IndexError, TypeError) as e:
            raise ProviderUnavailableError("openai", f"Unexpected embedding response: {e}") from e

        self._dimension = len(vector)
        return [float(x) for x in vector]

    async def is_available(self) -> bool:
        try:
            await self.embed("test")
            return True
        except ProviderUnavailableError as e:
            logger.warning("OpenAI embeddings unavailable: %s", e)
            return False

    async def close(self) -> None:
        """Close the async HTTP client."""
        if self._client is not None:
            await self._client.aclose()
            self._client = None
