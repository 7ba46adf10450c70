"""Collaborator contracts and pipeline data types."""

from taxi_agents.interfaces.base import (
    DocumentRef,
    DocumentRegistry,
    GenerationClient,
    ObjectStore,
    StoredObject,
)
from taxi_agents.interfaces.types import ChatHistory, ChatTurn, PreparedReturn

__all__ = [
    # Value types
    "StoredObject",
    "DocumentRef",
    # Protocols
    "ObjectStore",
    "GenerationClient",
    "DocumentRegistry",
    # Pipeline types
    "PreparedReturn",
    "ChatTurn",
    "ChatHistory",
]
