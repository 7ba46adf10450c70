"""Shared fixtures and fakes for the agents test suite."""

import asyncio
import json
import os
from typing import Optional

import pytest
import structlog

from taxi_agents.interfaces.base import DocumentRef, StoredObject
from taxi_core.exceptions import StorageError


OWNER = "user-1"


@pytest.fixture(autouse=True)
def clean_environment(monkeypatch):
    """Keep host credentials and settings out of every test."""
    for name in list(os.environ):
        if name.startswith("TAXI_") or name == "ANTHROPIC_API_KEY":
            monkeypatch.delenv(name, raising=False)
    yield
    structlog.reset_defaults()


def fenced(fields: dict) -> str:
    """Model-style response wrapping ``fields`` in a fenced JSON block."""
    return f"Here is the extracted data:\n```json\n{json.dumps(fields)}\n```"


class FakeGenerationClient:
    """GenerationClient answering from a script keyed by document content.

    Each script entry is a response text, an exception to raise, or an
    ``asyncio.Event`` to wait on before answering ``"{}"``.
    """

    def __init__(self, script: dict, delays: Optional[dict] = None):
        self.script = script
        self.delays = delays or {}
        self.calls: list[dict] = []
        self.active = 0
        self.peak = 0

    async def generate(self, prompt, *, content=None, mime_type=None):
        self.calls.append({"prompt": prompt, "content": content, "mime_type": mime_type})
        self.active += 1
        self.peak = max(self.peak, self.active)
        try:
            await asyncio.sleep(self.delays.get(content, 0))
            outcome = self.script[content]
            if isinstance(outcome, BaseException):
                raise outcome
            if isinstance(outcome, asyncio.Event):
                await outcome.wait()
                return "{}"
            return outcome
        finally:
            self.active -= 1


class FakeObjectStore:
    """ObjectStore over a dict of location to bytes."""

    def __init__(self, objects: dict, failing: frozenset = frozenset()):
        self.objects = objects
        self.failing = failing
        self.fetched: list[str] = []

    async def fetch(self, location: str) -> StoredObject:
        self.fetched.append(location)
        if location in self.failing:
            raise StorageError("Connection reset", location=location)
        if location not in self.objects:
            raise StorageError(f"Document not found: {location}", location=location, not_found=True)
        return StoredObject(content=self.objects[location], mime_type="image/png")


def document_ref(document_id: str, owner_id: str = OWNER, mime_type: Optional[str] = None) -> DocumentRef:
    return DocumentRef(
        document_id=document_id,
        owner_id=owner_id,
        location=f"{owner_id}/{document_id}.png",
        mime_type=mime_type,
        filename=f"{document_id}.png",
    )
