"""Interfaces for the collaborators the pipeline consumes.

Object storage, the generation model and the document registry live
outside this package. They are described here as typing.Protocol
contracts, so any class with matching methods can be plugged in without
inheriting from anything.

Example Usage:
    ```python
    class S3ObjectStore:
        async def fetch(self, location: str) -> StoredObject:
            ...

    # S3ObjectStore satisfies ObjectStore structurally
    pipeline = ReturnPipeline(extractor, S3ObjectStore(), registry)
    ```
"""

from __future__ import annotations

from typing import Optional, Protocol, Sequence, runtime_checkable

from pydantic import BaseModel, ConfigDict, Field


# =============================================================================
# VALUE TYPES
# =============================================================================

class StoredObject(BaseModel):
    """Raw bytes and MIME type of one stored document."""

    model_config = ConfigDict(frozen=True)

    content: bytes = Field(repr=False)
    mime_type: str


class DocumentRef(BaseModel):
    """Registry entry for an uploaded document.

    Attributes:
        document_id: Registry identifier
        owner_id: Identity of the user who owns the document
        location: Opaque storage location token
        mime_type: MIME type recorded at upload, if any
        filename: Original filename
    """

    model_config = ConfigDict(frozen=True)

    document_id: str
    owner_id: str
    location: str
    mime_type: Optional[str] = None
    filename: Optional[str] = None


# =============================================================================
# COLLABORATOR PROTOCOLS
# =============================================================================

@runtime_checkable
class ObjectStore(Protocol):
    """Retrieves raw document bytes by location token."""

    async def fetch(self, location: str) -> StoredObject:
        """Return the object stored at ``location``.

        Raises:
            StorageError: ``not_found=True`` if nothing is stored there,
                ``not_found=False`` for transient failures.
        """
        ...


@runtime_checkable
class GenerationClient(Protocol):
    """Turns a prompt plus optional inline content into free-form text."""

    async def generate(
        self,
        prompt: str,
        *,
        content: Optional[bytes] = None,
        mime_type: Optional[str] = None,
    ) -> str:
        """Generate text for ``prompt``, with ``content`` attached inline.

        Raises:
            GenerationError: On quota, timeout or transport failures, or a
                MIME type the model cannot accept.
            ConfigurationError: When credentials are missing or rejected.
        """
        ...


@runtime_checkable
class DocumentRegistry(Protocol):
    """Looks up documents an owner is authorised to read."""

    async def authorized_documents(
        self,
        owner_id: str,
        document_ids: Sequence[str],
    ) -> list[DocumentRef]:
        """Return the requested documents that belong to ``owner_id``.

        Implementations must never return another owner's documents.
        Unknown or foreign ids are simply left out.
        """
        ...


__all__ = [
    "StoredObject",
    "DocumentRef",
    "ObjectStore",
    "GenerationClient",
    "DocumentRegistry",
]
