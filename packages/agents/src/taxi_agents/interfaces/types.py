"""Data types handed between pipeline stages and back to callers."""

from typing import Optional

from pydantic import BaseModel, ConfigDict, Field

from taxi_core.models import DocumentError, ExtractedFieldSet, RenderableReturn, TaxRecord
from taxi_core.reconciler import ReconciliationResult


class PreparedReturn(BaseModel):
    """Outcome of one preparation request.

    Extraction problems (``document_errors``) are kept apart from fields the
    user still has to answer (``missing_fields``), so callers can tell an
    extraction failure from information that is genuinely absent.
    """

    model_config = ConfigDict(frozen=True)

    field_sets: tuple[ExtractedFieldSet, ...]
    reconciliation: ReconciliationResult
    computed: Optional[TaxRecord] = None
    renderable: Optional[RenderableReturn] = None

    @property
    def missing_fields(self) -> tuple[str, ...]:
        return self.reconciliation.missing_fields

    @property
    def document_errors(self) -> tuple[DocumentError, ...]:
        return self.reconciliation.document_errors

    @property
    def is_complete(self) -> bool:
        return self.renderable is not None


class ChatTurn(BaseModel):
    """One message in a conversation."""

    model_config = ConfigDict(frozen=True)

    role: str = Field(pattern=r"^(user|assistant)$")
    text: str


class ChatHistory(BaseModel):
    """Bounded conversation history owned and passed by the caller.

    ``append`` returns a new history keeping only the newest ``max_turns``
    turns; nothing is stored process-wide.
    """

    model_config = ConfigDict(frozen=True)

    turns: tuple[ChatTurn, ...] = ()
    max_turns: int = Field(default=10, ge=1)

    def append(self, role: str, text: str) -> "ChatHistory":
        turns = self.turns + (ChatTurn(role=role, text=text),)
        return self.model_copy(update={"turns": turns[-self.max_turns:]})
