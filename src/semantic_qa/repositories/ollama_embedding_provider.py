"""Ollama-based embedding provider.

Uses Ollama's local API to generate embeddings. Ollama serves models locally
without requiring HuggingFace authentication or downloading models manually.

Requirements:
    - Ollama installed: https://ollama.com
    - Model pulled: `ollama pull embeddinggemma`
    - Ollama running: `ollama serve` (usually runs automatically)

Models available:
- embeddinggemma (308M params, 768 dims, 2K context)
- nomic-embed-text (137M params, 768 dims)
- mxbai-embed-large (335M params, 1024 dims)
- all-minilm (22M params, 384 dims)
"""

import logging

import httpx

from semantic_qa.config import settings
from semantic_qa.exceptions import ProviderUnavailableError

logger = logging.getLogger(__name__)


class OllamaEmbeddingProvider:
    """Ollama-based implementation of EmbeddingProvider protocol.

    This class satisfies the EmbeddingProvider protocol through structural
    typing - no explicit inheritance needed.

    Example:
        ```python
        provider = OllamaEmbeddingProvider.create(model_name="embeddinggemma")
        embedding = await provider.embed("What is 2+2?")
        print(len(embedding))  # 768
        ```
    """

    DEFAULT_MODEL = "embeddinggemma"

    # Known model dimensions (for common models)
    MODEL_DIMENSIONS = {
        "embeddinggemma": 768,
        "embeddinggemma:300m": 768,
        "nomic-embed-text": 768,
        "mxbai-embed-large": 1024,
        "all-minilm": 384,
        "all-minilm:l6-v2": 384,
    }

    def __init__(
        self,
        model_name: str | None = None,
        base_url: str | None = None,
        timeout: float | None = None,
        client: httpx.AsyncClient | None = None,
    ) -> None:
        """Initialize the Ollama embedding provider.

        Args:
            model_name: Name of the Ollama model. Defaults to settings.embedding_model,
                then DEFAULT_MODEL.
            base_url: Ollama API base URL. Defaults to settings.ollama_base_url.
            timeout: Request timeout in seconds. Defaults to settings.provider_timeout.
            client: Preconfigured HTTP client (mainly for tests).
        """
        self._model_name = model_name or settings.embedding_model or self.DEFAULT_MODEL
        self._base_url = (base_url or settings.ollama_base_url).rstrip("/")
        self._timeout = timeout or settings.provider_timeout
        self._dimension: int | None = None
        self._client = client

    @property
    def client(self) -> httpx.AsyncClient:
        """Lazy-load the async HTTP client."""
        if self._client is None:
            self._client = httpx.AsyncClient(
                timeout=self._timeout,
                limits=httpx.Limits(max_connections=100, max_keepalive_connections=20),
            )
        return self._client

    @classmethod
    def create(
        cls,
        model_name: str | None = None,
        base_url: str | None = None,
    ) -> "OllamaEmbeddingProvider":
        """Factory method to create OllamaEmbeddingProvider with defaults."""
        return cls(model_name=model_name, base_url=base_url)

    @property
    def dimension(self) -> int:
        """Get the embedding vector dimension.

        For known models returns the documented dimension, otherwise the
        length of the last vector produced (768 before the first call).
        """
        if self._dimension is None:
            self._dimension = self.MODEL_DIMENSIONS.get(self._model_name, 768)
        return self._dimension

    @property
    def model_name(self) -> str:
        return self._model_name

    async def embed(self, text: str) -> list[float]:
        """Generate embedding vector for a single text.

        Raises:
            ProviderUnavailableError: If the Ollama API request fails or the
                response has no embedding
        """
        url = f"{self._base_url}/api/embed"
        payload = {"model": self._model_name, "input": text}

        try:
            response = await self.client.post(url, json=payload)
            response.raise_for_status()
            data = response.json()
        except httpx.HTTPError as e:
            error_msg = f"Ollama API error: {e}"
            if "connection refused" in str(e).lower():
                error_msg += " (is Ollama running? Try: ollama serve)"
            elif "not found" in str(e).lower():
                error_msg += f" (model not found? Try: ollama pull {self._model_name})"
            raise ProviderUnavailableError("ollama", error_msg) from e
        except ValueError as e:
            raise ProviderUnavailableError("ollama", f"Invalid JSON response: {e}") from e

        # Ollama returns {"embeddings": [[...]]} for single input
        embeddings = data.get("embeddings") or [data.get("embedding")]
        vector = embeddings[0]
        if not vector:
            raise ProviderUnavailableError("ollama", f"Unexpected response format: {data}")

        self._dimension = len(vector)
        return [float(x) for x in vector]

    async def is_available(self) -> bool:
        """Check if Ollama is running and the model answers."""
        try:
            await self.embed("test")
            return True
        except ProviderUnavailableError as e:
            logger.warning("Ollama embeddings unavailable: %s", e)
            return False

    async def close(self) -> None:
        """Close the async HTTP client."""
        if self._client is not None:
            await self._client.aclose()
            self._client = None
