"""Answer generator protocol.

Defines the interface for the (expensive) service that writes a natural
language answer when the question cache cannot.
"""

from typing import Protocol, runtime_checkable

# Returned instead of an empty completion; downstream consumers cannot tell
# an empty answer from no answer.
FALLBACK_ANSWER = (
    "Sorry, I can't answer this one yet. Could you please rephrase your question?"
)

DEFAULT_SYSTEM_PROMPT = "You are a helpful assistant."


def build_system_prompt(context: str | None = None) -> str:
    """Build the system message for a generation call.

    Args:
        context: Optional context the answer should draw on

    Returns:
        The system prompt
    """
    if context:
        return f"{DEFAULT_SYSTEM_PROMPT} Use the following context to answer questions: {context}"
    return DEFAULT_SYSTEM_PROMPT


@runtime_checkable
class AnswerGenerator(Protocol):
    """Protocol for answer generation services (chat completion APIs)."""

    @property
    def model_name(self) -> str:
        """Return the name/identifier of the model."""
        ...

    async def generate(self, question: str, context: str | None = None) -> str:
        """Generate an answer for ``question``.

        Args:
            question: The user question
            context: Optional context (e.g. a similar cached question and its answer)

        Returns:
            A non-empty answer

        Raises:
            ProviderUnavailableError: On transport, auth or format errors
        """
        ...

    async def is_available(self) -> bool:
        """Check if the generator is reachable."""
        ...
