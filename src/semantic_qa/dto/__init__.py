"""Data Transfer Objects for the service contract.

These Pydantic models define what the QA service hands back to its
callers. Internal domain logic should use entities from the entities package.
"""

from .responses import ChatTurn

__all__ = ["ChatTurn"]
