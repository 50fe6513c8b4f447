"""Response DTOs returned to callers of the QA service."""

from typing import Literal

from pydantic import BaseModel, Field


class ChatTurn(BaseModel):
    """Answer to a single question plus its provenance.

    ``confidence`` is only set when the answer came from a cache match.
    Use ``model_dump(exclude_none=True)`` to drop it on the generated path.
    """

    answer: str = Field(..., description="The answer text shown to the user")
    source: Literal["cache", "generated"] = Field(
        ...,
        description="Whether the answer came from the question cache or was freshly generated",
    )
    confidence: float | None = Field(
        None,
        description="Cosine similarity of the matched cached question",
        ge=-1.0,
        le=1.0,
    )

    model_config = {"frozen": True}
