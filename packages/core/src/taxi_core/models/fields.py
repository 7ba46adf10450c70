"""Field vocabulary and value normalisers shared by every model.

The vocabulary is fixed: model output, document merges and user answers
may only ever name these fields. Names are the camelCase wire names used by
the form renderer; Python attributes use the snake_case equivalents.
"""

import re
from decimal import ROUND_HALF_UP, Decimal, InvalidOperation
from enum import Enum
from typing import Any, Optional

from pydantic.alias_generators import to_snake


class FilingStatus(str, Enum):
    """IRS filing status options."""
    SINGLE = "single"
    MARRIED_JOINT = "married_joint"
    MARRIED_SEPARATE = "married_separate"
    HEAD_OF_HOUSEHOLD = "head_of_household"
    QUALIFYING_WIDOW = "qualifying_widow"


FILING_STATUS_LABELS: dict[FilingStatus, str] = {
    FilingStatus.SINGLE: "Single",
    FilingStatus.MARRIED_JOINT: "Married Filing Jointly",
    FilingStatus.MARRIED_SEPARATE: "Married Filing Separately",
    FilingStatus.HEAD_OF_HOUSEHOLD: "Head of Household",
    FilingStatus.QUALIFYING_WIDOW: "Qualifying Widow(er)",
}

# Letters-only spellings a model or a user is likely to produce
_FILING_STATUS_SPELLINGS: dict[str, FilingStatus] = {
    "single": FilingStatus.SINGLE,
    "marriedjoint": FilingStatus.MARRIED_JOINT,
    "marriedfilingjointly": FilingStatus.MARRIED_JOINT,
    "marriedjointly": FilingStatus.MARRIED_JOINT,
    "marriedseparate": FilingStatus.MARRIED_SEPARATE,
    "marriedfilingseparately": FilingStatus.MARRIED_SEPARATE,
    "marriedseparately": FilingStatus.MARRIED_SEPARATE,
    "headofhousehold": FilingStatus.HEAD_OF_HOUSEHOLD,
    "qualifyingwidow": FilingStatus.QUALIFYING_WIDOW,
    "qualifyingwidower": FilingStatus.QUALIFYING_WIDOW,
    "qualifyingsurvivingspouse": FilingStatus.QUALIFYING_WIDOW,
}


FIELD_VOCABULARY: tuple[str, ...] = (
    "firstName",
    "lastName",
    "ssn",
    "filingStatus",
    "address",
    "city",
    "state",
    "zip",
    "wages",
    "interest",
    "dividends",
    "capitalGains",
    "otherIncome",
    "adjustments",
    "deductions",
)

REQUIRED_FIELDS: tuple[str, ...] = (
    "firstName",
    "lastName",
    "ssn",
    "filingStatus",
    "address",
    "city",
    "state",
    "zip",
    "wages",
    "interest",
    "dividends",
    "capitalGains",
)

TEXT_FIELDS: tuple[str, ...] = (
    "firstName",
    "lastName",
    "address",
    "city",
    "state",
    "zip",
)

MONEY_FIELDS: tuple[str, ...] = (
    "wages",
    "interest",
    "dividends",
    "capitalGains",
    "otherIncome",
    "adjustments",
    "deductions",
)

# Money fields outside the required list fall back to zero when unsupplied
DEFAULTED_MONEY_FIELDS: tuple[str, ...] = tuple(
    name for name in MONEY_FIELDS if name not in REQUIRED_FIELDS
)

DERIVED_FIELDS: tuple[str, ...] = (
    "totalIncome",
    "adjustedGrossIncome",
    "appliedDeduction",
    "deductionType",
    "taxableIncome",
    "estimatedTax",
)

ATTRIBUTE_NAMES: dict[str, str] = {
    name: to_snake(name) for name in FIELD_VOCABULARY + DERIVED_FIELDS
}

MONEY_QUANTUM = Decimal("0.01")
ZERO = Decimal("0.00")
SSN_MASK = "XXX-XX-"


def attribute_name(field: str) -> Optional[str]:
    """Resolve a vocabulary name (camelCase or snake_case) to an attribute."""
    if field in ATTRIBUTE_NAMES:
        return ATTRIBUTE_NAMES[field]
    if field in ATTRIBUTE_NAMES.values():
        return field
    return None


def parse_money(value: Any) -> Optional[Decimal]:
    """Convert a number or numeric string to a non-negative 2-place Decimal.

    Accepts ints, floats, Decimals and strings such as ``"$1,200.50"``.
    Blank strings and the literal ``"null"`` mean "not supplied".

    Raises:
        ValueError: If the value is not a finite, non-negative amount.
    """
    if value is None:
        return None
    if isinstance(value, bool):
        raise ValueError("a boolean is not an amount")

    if isinstance(value, Decimal):
        amount = value
    elif isinstance(value, int):
        amount = Decimal(value)
    elif isinstance(value, float):
        # str() first so binary float noise never reaches the Decimal
        amount = Decimal(str(value))
    elif isinstance(value, str):
        cleaned = value.replace("$", "").replace(",", "").strip()
        if not cleaned or cleaned.lower() == "null":
            return None
        try:
            amount = Decimal(cleaned)
        except InvalidOperation:
            raise ValueError(f"not a numeric amount: {value!r}") from None
    else:
        raise ValueError(f"unsupported amount type: {type(value).__name__}")

    if not amount.is_finite():
        raise ValueError("amount must be finite")
    if amount < 0:
        raise ValueError("amount must be non-negative")
    try:
        return amount.quantize(MONEY_QUANTUM, rounding=ROUND_HALF_UP)
    except InvalidOperation:
        # More digits than the decimal context can hold at cent precision
        raise ValueError("amount out of range") from None


def parse_ssn(value: Any) -> Optional[str]:
    """Normalise an SSN to its 9 digits, dropping dashes and spaces.

    Raises:
        ValueError: If the value is not a string of exactly 9 digits.
    """
    if value is None:
        return None
    if not isinstance(value, str):
        raise ValueError("SSN must be a string")
    digits = re.sub(r"[\s-]", "", value)
    if not digits:
        return None
    if not re.fullmatch(r"\d{9}", digits):
        raise ValueError("SSN must contain exactly 9 digits")
    return digits


def parse_filing_status(value: Any) -> Optional[FilingStatus]:
    """Map an enum value or a human label onto FilingStatus.

    Raises:
        ValueError: If the value names no known filing status.
    """
    if value is None or isinstance(value, FilingStatus):
        return value
    if not isinstance(value, str):
        raise ValueError("filing status must be a string")
    key = re.sub(r"[^a-z]", "", value.lower())
    if not key:
        return None
    status = _FILING_STATUS_SPELLINGS.get(key)
    if status is None:
        raise ValueError(f"unknown filing status: {value!r}")
    return status


def parse_text(value: Any) -> Optional[str]:
    """Strip a text value; blank means "not supplied".

    Raises:
        ValueError: If the value is not a string.
    """
    if value is None:
        return None
    if not isinstance(value, str):
        raise ValueError("expected a string")
    stripped = value.strip()
    return stripped or None


def parse_zip(value: Any) -> Optional[str]:
    """Normalise a ZIP code; a bare number is zero-padded to five digits.

    Raises:
        ValueError: If the value is neither a string nor a 5-digit number.
    """
    if isinstance(value, int) and not isinstance(value, bool):
        if not 0 <= value <= 99999:
            raise ValueError("numeric ZIP code must have at most 5 digits")
        return f"{value:05d}"
    return parse_text(value)


def mask_ssn(ssn: Optional[str]) -> str:
    """Return the SSN with everything but the last four digits masked."""
    if not ssn:
        return SSN_MASK + "????"
    return SSN_MASK + ssn[-4:]
