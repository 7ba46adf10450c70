"""Models for documents handed to extraction and the fields read from them."""

from decimal import Decimal
from enum import Enum
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator
from pydantic.alias_generators import to_camel

from .fields import (
    FIELD_VOCABULARY,
    FilingStatus,
    parse_filing_status,
    parse_money,
    parse_ssn,
    parse_text,
    parse_zip,
)


class RawDocument(BaseModel):
    """One uploaded document, held only for the duration of an extraction."""

    model_config = ConfigDict(frozen=True)

    document_id: str
    content: bytes = Field(repr=False)
    mime_type: str
    filename: Optional[str] = None


class ExtractedFields(BaseModel):
    """Values read from one document, one attribute per vocabulary field.

    ``None`` means the document did not supply the field.
    """

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        frozen=True,
    )

    first_name: Optional[str] = None
    last_name: Optional[str] = None
    ssn: Optional[str] = Field(default=None, repr=False)
    filing_status: Optional[FilingStatus] = None
    address: Optional[str] = None
    city: Optional[str] = None
    state: Optional[str] = None
    zip: Optional[str] = None
    wages: Optional[Decimal] = None
    interest: Optional[Decimal] = None
    dividends: Optional[Decimal] = None
    capital_gains: Optional[Decimal] = None
    other_income: Optional[Decimal] = None
    adjustments: Optional[Decimal] = None
    deductions: Optional[Decimal] = None

    @field_validator("first_name", "last_name", "address", "city", "state", mode="before")
    @classmethod
    def _text(cls, v: Any) -> Optional[str]:
        return parse_text(v)

    @field_validator("zip", mode="before")
    @classmethod
    def _zip(cls, v: Any) -> Optional[str]:
        return parse_zip(v)

    @field_validator("ssn", mode="before")
    @classmethod
    def _ssn(cls, v: Any) -> Optional[str]:
        return parse_ssn(v)

    @field_validator("filing_status", mode="before")
    @classmethod
    def _filing_status(cls, v: Any) -> Optional[FilingStatus]:
        return parse_filing_status(v)

    @field_validator(
        "wages", "interest", "dividends", "capital_gains",
        "other_income", "adjustments", "deductions",
        mode="before",
    )
    @classmethod
    def _amount(cls, v: Any) -> Optional[Decimal]:
        return parse_money(v)

    def as_dict(self) -> dict[str, Any]:
        """Values keyed by vocabulary name, in vocabulary order."""
        values = self.model_dump(by_alias=True)
        return {name: values[name] for name in FIELD_VOCABULARY}

    @property
    def found_fields(self) -> tuple[str, ...]:
        """Vocabulary names this document supplied a value for."""
        return tuple(name for name, value in self.as_dict().items() if value is not None)


class ExtractionFailureKind(str, Enum):
    """Why a document produced no fields."""
    UNPARSED = "unparsed"
    GENERATION_FAILED = "generation_failed"
    STORAGE_FAILED = "storage_failed"
    NOT_FOUND = "not_found"
    CANCELLED = "cancelled"


class ExtractionFailure(BaseModel):
    """Error marker carried by a field set whose extraction failed."""

    model_config = ConfigDict(frozen=True)

    kind: ExtractionFailureKind
    reason: str
    raw_text: Optional[str] = Field(default=None, repr=False)


class ExtractedFieldSet(BaseModel):
    """Result of extracting one document: parsed fields or a failure marker.

    Build instances through ``parsed`` or ``failed``. A failed set never
    carries field values, so it cannot be confused with a document that
    simply had no data.
    """

    model_config = ConfigDict(frozen=True)

    document_id: str
    fields: ExtractedFields = Field(default_factory=ExtractedFields)
    error: Optional[ExtractionFailure] = None

    @model_validator(mode="after")
    def _failed_sets_are_empty(self) -> "ExtractedFieldSet":
        if self.error is not None and self.fields.found_fields:
            raise ValueError("a failed field set cannot carry field values")
        return self

    @classmethod
    def parsed(cls, document_id: str, fields: ExtractedFields) -> "ExtractedFieldSet":
        return cls(document_id=document_id, fields=fields)

    @classmethod
    def failed(
        cls,
        document_id: str,
        kind: ExtractionFailureKind,
        reason: str,
        raw_text: Optional[str] = None,
    ) -> "ExtractedFieldSet":
        return cls(
            document_id=document_id,
            error=ExtractionFailure(kind=kind, reason=reason, raw_text=raw_text),
        )

    @property
    def is_error(self) -> bool:
        return self.error is not None

    @property
    def found_fields(self) -> tuple[str, ...]:
        return self.fields.found_fields


class DocumentError(BaseModel):
    """A per-document extraction problem reported alongside results."""

    model_config = ConfigDict(frozen=True)

    document_id: str
    kind: ExtractionFailureKind
    reason: str
