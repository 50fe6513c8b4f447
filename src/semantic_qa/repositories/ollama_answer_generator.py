"""Ollama chat answer generator.

Uses Ollama's ``/api/chat`` endpoint with streaming disabled.

Requirements:
    - Model pulled: `ollama pull llama3.2`
    - Ollama running: `ollama serve`
"""

import logging

import httpx

from semantic_qa.config import settings
from semantic_qa.exceptions import ProviderUnavailableError
from semantic_qa.protocols import FALLBACK_ANSWER, build_system_prompt

logger = logging.getLogger(__name__)


class OllamaAnswerGenerator:
    """Ollama implementation of the AnswerGenerator protocol."""

    DEFAULT_MODEL = "llama3.2"

    def __init__(
        self,
        model_name: str | None = None,
        base_url: str | None = None,
        temperature: float | None = None,
        max_tokens: int | None = None,
        timeout: float | None = None,
        client: httpx.AsyncClient | None = None,
    ) -> None:
        """Initialize the Ollama answer generator.

        Args:
            model_name: Ollama chat model. Defaults to settings.chat_model, then DEFAULT_MODEL.
            base_url: Ollama API base URL. Defaults to settings.ollama_base_url.
            temperature: Sampling temperature. Defaults to settings.
            max_tokens: Maximum tokens to predict. Defaults to settings.
            timeout: Request timeout in seconds. Defaults to settings.provider_timeout.
            client: Preconfigured HTTP client (mainly for tests).
        """
        self._model_name = model_name or settings.chat_model or self.DEFAULT_MODEL
        self._base_url = (base_url or settings.ollama_base_url).rstrip("/")
        self._temperature = settings.generation_temperature if temperature is None else temperature
        self._max_tokens = max_tokens or settings.generation_max_tokens
        self._timeout = timeout or settings.provider_timeout
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
        model_name: str | None = None,
        base_url: str | None = None,
    ) -> "OllamaAnswerGenerator":
        """Factory method to create OllamaAnswerGenerator with defaults."""
        return cls(model_name=model_name, base_url=base_url)

    @property
    def model_name(self) -> str:
        return self._model_name

    async def generate(self, question: str, context: str | None = None) -> str:
        """Generate an answer, optionally grounded on ``context``.

        Raises:
            ProviderUnavailableError: If the Ollama API request fails
        """
        payload = {
            "model": self._model_name,
            "messages": [
                {"role": "system", "content": build_system_prompt(context)},
                {"role": "user", "content": question},
            ],
            "stream": False,
            "options": {
                "temperature": self._temperature,
                "num_predict": self._max_tokens,
            },
        }

        try:
            response = await self.client.post(f"{self._base_url}/api/chat", json=payload)
            response.raise_for_status()
            content = response.json().get("message", {}).get("content")
        except httpx.HTTPError as e:
            raise ProviderUnavailableError("ollama", f"Ollama API error: {e}") from e
        except (ValueError, KeyError, TypeError, AttributeError) as e:
            raise ProviderUnavailableError("ollama", f"Unexpected chat response: {e}") from e

        if not content or not content.strip():
            logger.warning("Ollama returned an empty completion, using fallback answer")
            return FALLBACK_ANSWER
        return content

    async def is_available(self) -> bool:
        """Check if Ollama is running."""
        try:
            response = await self.client.get(f"{self._base_url}/api/tags")
            return response.status_code == 200
        except httpx.HTTPError as e:
            logger.warning("Ollama chat unavailable: %s", e)
            return False

    async def close(self) -> None:
        """Close the async HTTP client."""
        if self._client is not None:
            await self._client.aclose()
            self._client = None
