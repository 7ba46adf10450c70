"""Tests for the local storage and registry implementations."""

import pytest

from taxi_agents.interfaces.base import DocumentRegistry, ObjectStore
from taxi_agents.storage import InMemoryDocumentRegistry, LocalObjectStore
from taxi_core.exceptions import StorageError

from conftest import document_ref


@pytest.fixture
def root(tmp_path):
    (tmp_path / "user-1").mkdir()
    (tmp_path / "user-1" / "w2.pdf").write_bytes(b"%PDF-1.7")
    (tmp_path / "user-1" / "notes.bin").write_bytes(b"\x00\x01")
    return tmp_path


class TestLocalObjectStore:
    """Tests for LocalObjectStore."""

    def test_satisfies_protocol(self, root):
        assert isinstance(LocalObjectStore(root), ObjectStore)

    @pytest.mark.asyncio
    async def test_fetch(self, root):
        stored = await LocalObjectStore(root).fetch("user-1/w2.pdf")

        assert stored.content == b"%PDF-1.7"
        assert stored.mime_type == "application/pdf"

    @pytest.mark.asyncio
    async def test_unknown_extension(self, root):
        stored = await LocalObjectStore(root).fetch("user-1/notes.bin")

        assert stored.mime_type == "application/octet-stream"

    @pytest.mark.asyncio
    async def test_missing_file(self, root):
        with pytest.raises(StorageError) as exc_info:
            await LocalObjectStore(root).fetch("user-1/missing.pdf")

        assert exc_info.value.not_found is True

    @pytest.mark.asyncio
    async def test_directory_is_not_a_document(self, root):
        with pytest.raises(StorageError):
            await LocalObjectStore(root).fetch("user-1")

    @pytest.mark.asyncio
    async def test_location_cannot_escape_root(self, root):
        store = LocalObjectStore(root / "user-1")

        with pytest.raises(StorageError) as exc_info:
            await store.fetch("../user-1/../../etc/passwd")

        assert exc_info.value.not_found is True


class TestInMemoryDocumentRegistry:
    """Tests for owner-scoped document lookup."""

    @pytest.fixture
    def registry(self):
        return InMemoryDocumentRegistry(
            [document_ref("doc-1"), document_ref("doc-2"), document_ref("doc-3", owner_id="user-2")]
        )

    def test_satisfies_protocol(self, registry):
        assert isinstance(registry, DocumentRegistry)

    @pytest.mark.asyncio
    async def test_returns_owned_documents_in_request_order(self, registry):
        refs = await registry.authorized_documents("user-1", ["doc-2", "doc-1"])

        assert [ref.document_id for ref in refs] == ["doc-2", "doc-1"]

    @pytest.mark.asyncio
    async def test_never_returns_foreign_documents(self, registry):
        refs = await registry.authorized_documents("user-1", ["doc-3", "doc-4"])

        assert refs == []

    @pytest.mark.asyncio
    async def test_register(self, registry):
        registry.register(document_ref("doc-5"))

        refs = await registry.authorized_documents("user-1", ["doc-5"])

        assert refs[0].filename == "doc-5.png"
