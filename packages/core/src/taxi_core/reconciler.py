"""Merge per-document field sets into one candidate return.

Documents are supplied in order of authority, so the merge is first-wins:
the first document to supply a non-null value for a field decides it, and
later documents never overwrite it.
"""

from typing import Any, Iterable, Mapping

import structlog
from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel

from .models import (
    DEFAULTED_MONEY_FIELDS,
    FIELD_VOCABULARY,
    DocumentError,
    ExtractedFieldSet,
    TaxRecord,
)

logger = structlog.get_logger()

USER_ANSWER_SOURCE = "user"


class ReconciliationResult(BaseModel):
    """Candidate record, what it still lacks, and per-document problems."""

    model_config = ConfigDict(frozen=True)

    record: TaxRecord
    missing_fields: tuple[str, ...]
    document_errors: tuple[DocumentError, ...] = ()
    sources: dict[str, str] = {}

    @property
    def is_complete(self) -> bool:
        return not self.missing_fields


def merge_first_wins(field_sets: Iterable[ExtractedFieldSet]) -> tuple[dict[str, Any], dict[str, str]]:
    """Merge field values in order, keeping the first non-null per field.

    Returns:
        Merged values keyed by vocabulary name, and the document id each
        value came from.
    """
    merged: dict[str, Any] = {}
    sources: dict[str, str] = {}

    for field_set in field_sets:
        if field_set.is_error:
            continue
        for name, value in field_set.fields.as_dict().items():
            if value is None or name in merged:
                continue
            merged[name] = value
            sources[name] = field_set.document_id

    return merged, sources


def reconcile(field_sets: Iterable[ExtractedFieldSet]) -> ReconciliationResult:
    """Reconcile field sets, given in caller order, into a candidate record.

    Never raises for partial data: absent required fields are reported in
    ``missing_fields`` and failed documents in ``document_errors``.
    """
    ordered = list(field_sets)
    merged, sources = merge_first_wins(ordered)

    for name in DEFAULTED_MONEY_FIELDS:
        merged.setdefault(name, 0)

    record = TaxRecord.model_validate(merged)
    errors = tuple(
        DocumentError(
            document_id=field_set.document_id,
            kind=field_set.error.kind,
            reason=field_set.error.reason,
        )
        for field_set in ordered
        if field_set.error is not None
    )
    missing = record.missing_fields()

    logger.info(
        "reconciliation_complete",
        documents=len(ordered),
        failed_documents=len(errors),
        fields_found=[name for name in FIELD_VOCABULARY if name in sources],
        missing_fields=list(missing),
    )

    return ReconciliationResult(
        record=record,
        missing_fields=missing,
        document_errors=errors,
        sources=sources,
    )


def fill_missing(result: ReconciliationResult, answers: Mapping[str, Any]) -> ReconciliationResult:
    """Apply user answers to a reconciled record and recount what is missing.

    Raises:
        ValidationError: If an answer names an unknown field or is invalid.
    """
    record = result.record.with_answers(answers)
    sources = dict(result.sources)
    for key in answers:
        sources[key if key in FIELD_VOCABULARY else to_camel(key)] = USER_ANSWER_SOURCE

    return ReconciliationResult(
        record=record,
        missing_fields=record.missing_fields(),
        document_errors=result.document_errors,
        sources=sources,
    )
