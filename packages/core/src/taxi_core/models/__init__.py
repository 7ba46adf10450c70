"""Data models for taxi-core.

- Field vocabulary and value normalisers (fields.py)
- Documents and per-document extraction results (extraction.py)
- The candidate / computed return (tax_record.py)
- Calculation audit trail (audit.py)
- The renderable projection (renderable.py)
"""

from taxi_core.models.fields import (
    DEFAULTED_MONEY_FIELDS,
    DERIVED_FIELDS,
    FIELD_VOCABULARY,
    FILING_STATUS_LABELS,
    MONEY_FIELDS,
    REQUIRED_FIELDS,
    TEXT_FIELDS,
    FilingStatus,
    mask_ssn,
    parse_filing_status,
    parse_money,
    parse_ssn,
    parse_text,
    parse_zip,
)
from taxi_core.models.extraction import (
    DocumentError,
    ExtractedFields,
    ExtractedFieldSet,
    ExtractionFailure,
    ExtractionFailureKind,
    RawDocument,
)
from taxi_core.models.tax_record import DeductionType, TaxRecord
from taxi_core.models.audit import AuditEntry
from taxi_core.models.renderable import LineItem, RenderableReturn

__all__ = [
    # Vocabulary
    "FIELD_VOCABULARY",
    "REQUIRED_FIELDS",
    "TEXT_FIELDS",
    "MONEY_FIELDS",
    "DEFAULTED_MONEY_FIELDS",
    "DERIVED_FIELDS",
    "FILING_STATUS_LABELS",
    "FilingStatus",
    # Normalisers
    "parse_money",
    "parse_ssn",
    "parse_filing_status",
    "parse_text",
    "parse_zip",
    "mask_ssn",
    # Extraction
    "RawDocument",
    "ExtractedFields",
    "ExtractedFieldSet",
    "ExtractionFailure",
    "ExtractionFailureKind",
    "DocumentError",
    # Records
    "DeductionType",
    "TaxRecord",
    # Audit
    "AuditEntry",
    # Rendering
    "LineItem",
    "RenderableReturn",
]
