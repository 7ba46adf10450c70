"""The candidate / computed tax return record."""

from decimal import Decimal
from enum import Enum
from typing import Any, Mapping, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic import ValidationError as PydanticValidationError
from pydantic.alias_generators import to_camel

from ..exceptions import ValidationError
from .fields import (
    ATTRIBUTE_NAMES,
    DERIVED_FIELDS,
    FIELD_VOCABULARY,
    REQUIRED_FIELDS,
    ZERO,
    FilingStatus,
    attribute_name,
    parse_filing_status,
    parse_money,
    parse_ssn,
    parse_text,
    parse_zip,
)


class DeductionType(str, Enum):
    """Which deduction was applied when the record was computed."""
    STANDARD = "standard"
    ITEMIZED = "itemized"


class TaxRecord(BaseModel):
    """A reconciled tax return, optionally carrying computed figures.

    Records are immutable. Answering missing fields produces a new record
    (see ``with_answers``) and computing one produces another; derived
    figures are only ever set by the calculator.

    ``wages``, ``interest``, ``dividends`` and ``capital_gains`` stay ``None``
    until a document or the user supplies them, because they are required.
    The remaining amounts default to zero.
    """

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        frozen=True,
    )

    # Identity
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    ssn: Optional[str] = Field(default=None, repr=False)

    # Filing
    filing_status: Optional[FilingStatus] = None

    # Address
    address: Optional[str] = None
    city: Optional[str] = None
    state: Optional[str] = None
    zip: Optional[str] = None

    # Income
    wages: Optional[Decimal] = None
    interest: Optional[Decimal] = None
    dividends: Optional[Decimal] = None
    capital_gains: Optional[Decimal] = None
    other_income: Decimal = ZERO

    # Adjustments and deductions
    adjustments: Decimal = ZERO
    deductions: Decimal = ZERO

    # Derived
    total_income: Optional[Decimal] = None
    adjusted_gross_income: Optional[Decimal] = None
    applied_deduction: Optional[Decimal] = None
    deduction_type: Optional[DeductionType] = None
    taxable_income: Optional[Decimal] = None
    estimated_tax: Optional[Decimal] = None

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

    @field_validator("wages", "interest", "dividends", "capital_gains", mode="before")
    @classmethod
    def _required_amount(cls, v: Any) -> Optional[Decimal]:
        return parse_money(v)

    @field_validator("other_income", "adjustments", "deductions", mode="before")
    @classmethod
    def _defaulted_amount(cls, v: Any) -> Decimal:
        amount = parse_money(v)
        return ZERO if amount is None else amount

    def value_of(self, field: str) -> Any:
        """Return the value of a vocabulary or derived field by name."""
        name = attribute_name(field)
        if name is None:
            raise KeyError(field)
        return getattr(self, name)

    def missing_fields(self) -> tuple[str, ...]:
        """Required fields still absent, in canonical required-list order."""
        return tuple(
            field for field in REQUIRED_FIELDS
            if getattr(self, ATTRIBUTE_NAMES[field]) is None
        )

    @property
    def is_complete(self) -> bool:
        """True when every required field has a value."""
        return not self.missing_fields()

    @property
    def is_computed(self) -> bool:
        """True when every derived field has been populated."""
        return all(
            getattr(self, ATTRIBUTE_NAMES[field]) is not None
            for field in DERIVED_FIELDS
        )

    def with_answers(self, answers: Mapping[str, Any]) -> "TaxRecord":
        """Return a new record with user answers applied.

        Answers may name any vocabulary field, by camelCase or snake_case
        name. Derived fields are cleared because their inputs may have
        changed.

        Raises:
            ValidationError: If an answer names an unknown field or carries
                a value that field cannot hold.
        """
        data = self.model_dump(exclude=_DERIVED_ATTRIBUTES)
        for key, value in answers.items():
            name = attribute_name(key)
            if name is None or name in _DERIVED_ATTRIBUTES:
                raise ValidationError(
                    f"Unknown field: {key}",
                    field=key,
                    constraint=f"Must be one of: {', '.join(FIELD_VOCABULARY)}",
                )
            data[name] = value

        try:
            return TaxRecord.model_validate(data)
        except PydanticValidationError as e:
            error = e.errors()[0]
            loc = str(error["loc"][0]) if error["loc"] else ""
            field = _VOCABULARY_NAMES.get(loc, loc) or None
            raise ValidationError(
                f"Invalid value for {field}: {error['msg']}",
                field=field,
                constraint=error["msg"],
            ) from e


_DERIVED_ATTRIBUTES = frozenset(ATTRIBUTE_NAMES[f] for f in DERIVED_FIELDS)
_VOCABULARY_NAMES = {attr: name for name, attr in ATTRIBUTE_NAMES.items()}
