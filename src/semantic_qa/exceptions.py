"""Exception hierarchy for semantic QA.

Only the low-confidence adaptation path masks a provider failure; every other
error raised here propagates to the caller of ``SemanticQAService.answer``.
"""


class SemanticQAError(Exception):
    """Base class for all semantic QA errors."""


class DimensionMismatchError(SemanticQAError, ValueError):
    """Two embeddings of different length were compared.

    This indicates corrupt data upstream and is never retried.
    """

    def __init__(self, left: int, right: int) -> None:
        super().__init__(f"Embedding dimensions differ: {left} != {right}")
        self.left = left
        self.right = right


class ProviderUnavailableError(SemanticQAError, RuntimeError):
    """An external provider (embedding or generation) failed."""

    def __init__(self, provider: str, message: str) -> None:
        super().__init__(f"{provider}: {message}")
        self.provider = provider


class EmbeddingUnavailableError(ProviderUnavailableError):
    """The question could not be embedded, so it cannot be matched."""
