"""Collapse concurrent identical cache misses into one call.

When two requests for the same question both miss the cache, only the first
(the leader) calls the generator and writes to the store; the others await
the leader's result.
"""

import asyncio
import hashlib
from collections.abc import Awaitable, Callable
from typing import Generic, TypeVar

T = TypeVar("T")


def normalize_question(text: str) -> str:
    """Lower-case and collapse whitespace."""
    return " ".join(text.lower().split())


def question_key(text: str) -> str:
    """Stable key for a question: sha256 of its normalized text."""
    return hashlib.sha256(normalize_question(text).encode("utf-8")).hexdigest()


class SingleFlight(Generic[T]):
    """Per-key in-flight registry for one event loop."""

    def __init__(self) -> None:
        self._in_flight: dict[str, asyncio.Future[T]] = {}

    def __len__(self) -> int:
        return len(self._in_flight)

    async def run(self, key: str, func: Callable[[], Awaitable[T]]) -> T:
        """Run ``func`` unless a call for ``key`` is already in flight.

        Args:
            key: Deduplication key
            func: Zero-argument coroutine factory

        Returns:
            The result of the leader's call

        Raises:
            Exception: Whatever the leader's call raised
        """
        pending = self._in_flight.get(key)
        if pending is not None:
            # Shield so a cancelled waiter does not cancel the leader
            return await asyncio.shield(pending)

        future: asyncio.Future[T] = asyncio.get_running_loop().create_future()
        self._in_flight[key] = future
        try:
            result = await func()
        except asyncio.CancelledError:
            future.cancel()
            raise
        except Exception as e:
            future.set_exception(e)
            # Mark retrieved; the leader re-raises it below
            future.exception()
            raise
        else:
            future.set_result(result)
            return result
        finally:
            del self._in_flight[key]
