"""Embedding provider protocol.

Defines the interface for any embedding generation service that can
convert text to vector embeddings.

Implementations can include:
- Ollama (local HTTP API, default)
- sentence-transformers (in-process)
- OpenAI embeddings (API)
"""

from typing import Protocol, runtime_checkable


@runtime_checkable
class EmbeddingProvider(Protocol):
    """Protocol for embedding generation services.

    Any type that implements these members satisfies the protocol,
    no explicit inheritance needed.

    Identical text must yield vectors whose cosine similarity is 1, and
    every vector from one provider must have the same length.
    """

    @property
    def dimension(self) -> int:
        """Return the dimension of the embedding vectors."""
        ...

    @property
    def model_name(self) -> str:
        """Return the name/identifier of the model."""
        ...

    async def embed(self, text: str) -> list[float]:
        """Generate the embedding vector for a single text.

        Args:
            text: The text to encode

        Returns:
            The embedding vector as a list of floats

        Raises:
            ProviderUnavailableError: On transport, auth or format errors
        """
        ...

    async def is_available(self) -> bool:
        """Check if the embedding provider is available."""
        ...
