"""Local sentence-transformers embedding provider.

Runs the model in-process, no API calls required. Encoding is CPU bound, so
it is pushed to a worker thread to keep the event loop responsive.
"""

import asyncio
import logging
import time

import numpy as np
from sentence_transformers import SentenceTransformer

from semantic_qa.exceptions import ProviderUnavailableError

logger = logging.getLogger(__name__)

DEFAULT_MODEL = "paraphrase-multilingual-MiniLM-L12-v2"


class LocalEmbeddingProvider:
    """Local sentence-transformers implementation of EmbeddingProvider.

    Default model: paraphrase-multilingual-MiniLM-L12-v2 (384 dimensions)
    """

    def __init__(self, model_name: str | None = None) -> None:
        """Initialize the local embedding provider.

        Args:
            model_name: Name of the sentence-transformers model.
        """
        self._model_name = model_name or DEFAULT_MODEL
        self._model: SentenceTransformer | None = None
        self._dimension: int | None = None

    @classmethod
    def create(cls, model_name: str | None = None) -> "LocalEmbeddingProvider":
        """Factory method to create LocalEmbeddingProvider with defaults."""
        return cls(model_name=model_name)

    @property
    def model(self) -> SentenceTransformer:
        """Lazy-load the embedding model."""
        if self._model is None:
            logger.info("Loading embedding model: %s", self._model_name)
            start_time = time.time()
            self._model = SentenceTransformer(self._model_name)
            logger.info("Model loaded in %.2fs", time.time() - start_time)
        return self._model

    @property
    def dimension(self) -> int:
        """Get the embedding vector dimension."""
        if self._dimension is None:
            sample_embedding = self.model.encode(["test"], show_progress_bar=False)
            self._dimension = len(sample_embedding[0])
        return self._dimension

    @property
    def model_name(self) -> str:
        return self._model_name

    def _encode(self, text: str) -> list[float]:
        embedding = self.model.encode(
            text,
            show_progress_bar=False,
            normalize_embeddings=True,
        )
        if isinstance(embedding, np.ndarray):
            if embedding.ndim == 1:
                return embedding.tolist()
            return embedding[0].tolist()
        return list(embedding)

    async def embed(self, text: str) -> list[float]:
        """Generate embedding vector for a single text.

        Raises:
            ProviderUnavailableError: If the model cannot be loaded or run
        """
        try:
            return await asyncio.to_thread(self._encode, text)
        except (OSError, RuntimeError) as e:
            raise ProviderUnavailableError("sentence-transformers", str(e)) from e

    async def is_available(self) -> bool:
        """Check if the model can be loaded."""
        try:
            await asyncio.to_thread(lambda: self.model)
            return True
        except (OSError, RuntimeError) as e:
            logger.warning("Local embedding model unavailable: %s", e)
            return False
