"""OpenAI chat completions answer generator."""

import logging

import httpx

from semantic_qa.config import settings
from semantic_qa.exceptions import ProviderUnavailableError
from semantic_qa.protocols import FALLBACK_ANSWER, build_system_prompt

logger = logging.getLogger(__name__)


class OpenAIAnswerGenerator:
    """OpenAI implementation of the AnswerGenerator protocol.

    Calls ``POST {base_url}/chat/completions`` with a system prompt (plus
    optional context) and the user question.

    Example:
        ```python
        generator = OpenAIAnswerGenerator.create()
        answer = await generator.generate("What is 2+2?")
        ```
    """

    DEFAULT_MODEL = "gpt-3.5-turbo"

    def __init__(
        self,
        api_key: str | None = None,
        model_name: str | None = None,
        base_url: str | None = None,
        temperature: float | None = None,
        max_tokens: int | None = None,
        timeout: float | None = None,
        client: httpx.AsyncClient | None = None,
    ) -> None:
        """Initialize the OpenAI answer generator.

        Args:
            api_key: OpenAI API key. Defaults to settings.openai_api_key.
            model_name: Chat model. Defaults to settings.chat_model, then DEFAULT_MODEL.
            base_url: API base URL. Defaults to settings.openai_base_url.
            temperature: Sampling temperature. Defaults to settings.
            max_tokens: Completion token limit. Defaults to settings.
            timeout: Request timeout in seconds. Defaults to settings.provider_timeout.
            client: Preconfigured HTTP client (mainly for tests).
        """
        self._api_key = api_key or settings.openai_api_key
        if not self._api_key:
            raise ValueError("OPENAI_API_KEY is not set")
        self._model_name = model_name or settings.chat_model or self.DEFAULT_MODEL
        self._base_url = (base_url or settings.openai_base_url).rstrip("/")
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
        api_key: str | None = None,
        model_name: str | None = None,
    ) -> "OpenAIAnswerGenerator":
        """Factory method to create OpenAIAnswerGenerator with defaults."""
        return cls(api_key=api_key, model_name=model_name)

    @property
    def model_name(self) -> str:
        return self._model_name

    async def generate(self, question: str, context: str | None = None) -> str:
        """Generate an answer, optionally grounded on ``context``.

        Returns:
            The completion text, or FALLBACK_ANSWER if the model returned nothing

        Raises:
            ProviderUnavailableError: On HTTP errors or an unexpected payload
        """
        payload = {
            "model": self._model_name,
            "messages": [
                {"role": "system", "content": build_system_prompt(context)},
                {"role": "user", "content": question},
            ],
            "temperature": self._temperature,
            "max_tokens": self._max_tokens,
        }

        try:
            response = await self.client.post(
                f"{self._base_url}/chat/completions",
                headers={"Authorization": f"Bearer {self._api_key}"},
                json=payload,
            )
            response.raise_for_status()
            content = response.json()["choices"][0]["message"].get("content")
        except httpx.HTTPError as e:
            raise ProviderUnavailableError("openai", f"Failed to generate answer: {e}") from e
        except (ValueError, KeyError, IndexError, TypeError) as e:
            raise ProviderUnavailableError("openai", f"Unexpected completion response: {e}") from e

        if not content or not content.strip():
            logger.warning("OpenAI returned an empty completion, using fallback answer")
            return FALLBACK_ANSWER
        return content

    async def is_available(self) -> bool:
        """Check the API key and endpoint by listing models."""
        try:
            response = await self.client.get(
                f"{self._base_url}/models",
                headers={"Authorization": f"Bearer {self._api_key}"},
            )
            return response.status_code == 200
        except httpx.HTTPError as e:
            logger.warning("OpenAI chat unavailable: %s", e)
            return False

    async def close(self) -> None:
        """Close the async HTTP client."""
        if self._client is not None:
            await self._client.aclose()
            self._client = None
