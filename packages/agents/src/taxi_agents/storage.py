"""Local implementations of the storage and registry collaborators.

Used by the command line and tests; production deployments plug in their
own ObjectStore and DocumentRegistry.
"""

import asyncio
import mimetypes
from pathlib import Path
from typing import Sequence, Union

import structlog

from taxi_core.exceptions import StorageError

from .interfaces.base import DocumentRef, StoredObject

logger = structlog.get_logger()

DEFAULT_MIME_TYPE = "application/octet-stream"


class LocalObjectStore:
    """ObjectStore reading files below a root directory."""

    def __init__(self, root_dir: Union[str, Path]):
        self.root_dir = Path(root_dir).resolve()

    def _resolve(self, location: str) -> Path:
        path = (self.root_dir / location).resolve()
        if not path.is_relative_to(self.root_dir):
            raise StorageError(
                "Location is outside the storage root",
                location=location,
                not_found=True,
            )
        return path

    async def fetch(self, location: str) -> StoredObject:
        path = self._resolve(location)
        if not path.is_file():
            raise StorageError(
                f"Document not found: {location}",
                location=location,
                not_found=True,
            )

        try:
            content = await asyncio.to_thread(path.read_bytes)
        except OSError as e:
            raise StorageError(
                f"Failed to read document: {e}",
                location=location,
            ) from e

        mime_type, _ = mimetypes.guess_type(path.name)
        logger.debug("document_fetched", location=location, size=len(content))
        return StoredObject(content=content, mime_type=mime_type or DEFAULT_MIME_TYPE)


class InMemoryDocumentRegistry:
    """DocumentRegistry holding references in memory, scoped by owner."""

    def __init__(self, documents: Sequence[DocumentRef] = ()):
        self._documents: dict[str, DocumentRef] = {}
        for document in documents:
            self.register(document)

    def register(self, document: DocumentRef) -> None:
        self._documents[document.document_id] = document

    async def authorized_documents(
        self,
        owner_id: str,
        document_ids: Sequence[str],
    ) -> list[DocumentRef]:
        found = []
        for document_id in document_ids:
            document = self._documents.get(document_id)
            if document is not None and document.owner_id == owner_id:
                found.append(document)
        return found
