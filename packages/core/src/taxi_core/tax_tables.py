"""Federal standard deductions and income tax brackets.

Simplified 2022 figures: one bracket table is applied to every filing
status, and only the standard deduction varies by status.

Sources:
- Standard deduction: IRS Publication 501 (2022)
- Brackets: IRS Rev. Proc. 2021-45, single filer schedule
"""

from decimal import ROUND_HALF_UP, Decimal
from typing import NamedTuple, Optional

from .models import FilingStatus


# =============================================================================
# VERSION TRACKING
# =============================================================================

TAX_TABLES_VERSION = "2022"


def get_tax_tables_version() -> str:
    """Return current tax tables version."""
    return TAX_TABLES_VERSION


# =============================================================================
# STANDARD DEDUCTION
# =============================================================================

STANDARD_DEDUCTIONS: dict[FilingStatus, Decimal] = {
    FilingStatus.SINGLE: Decimal("12950"),
    FilingStatus.MARRIED_SEPARATE: Decimal("12950"),
    FilingStatus.HEAD_OF_HOUSEHOLD: Decimal("19400"),
    FilingStatus.MARRIED_JOINT: Decimal("25900"),
    FilingStatus.QUALIFYING_WIDOW: Decimal("25900"),
}


def get_standard_deduction(filing_status: FilingStatus) -> Decimal:
    """Get the standard deduction for a filing status."""
    return STANDARD_DEDUCTIONS[FilingStatus(filing_status)]


# =============================================================================
# TAX BRACKETS
# =============================================================================

class TaxBracket(NamedTuple):
    """One marginal bracket.

    ``base_tax`` is the cumulative tax owed on all income below ``lower``.
    ``upper`` is None for the top bracket.
    """
    lower: Decimal
    upper: Optional[Decimal]
    rate: Decimal
    base_tax: Decimal


TAX_BRACKETS: tuple[TaxBracket, ...] = (
    TaxBracket(Decimal("0"), Decimal("10275"), Decimal("0.10"), Decimal("0")),
    TaxBracket(Decimal("10275"), Decimal("41775"), Decimal("0.12"), Decimal("1027.50")),
    TaxBracket(Decimal("41775"), Decimal("89075"), Decimal("0.22"), Decimal("4807.50")),
    TaxBracket(Decimal("89075"), Decimal("170050"), Decimal("0.24"), Decimal("15213.50")),
    TaxBracket(Decimal("170050"), Decimal("215950"), Decimal("0.32"), Decimal("34647.50")),
    TaxBracket(Decimal("215950"), Decimal("539900"), Decimal("0.35"), Decimal("49335.50")),
    TaxBracket(Decimal("539900"), None, Decimal("0.37"), Decimal("162718")),
)


def get_tax_brackets(filing_status: Optional[FilingStatus] = None) -> tuple[TaxBracket, ...]:
    """Get the bracket schedule for a filing status.

    Every status shares the single-filer schedule.
    """
    return TAX_BRACKETS


def find_bracket(
    taxable_income: Decimal,
    brackets: tuple[TaxBracket, ...] = TAX_BRACKETS,
) -> TaxBracket:
    """Return the bracket that taxes the last dollar of ``taxable_income``.

    Income exactly on a boundary belongs to the lower bracket.
    """
    for bracket in brackets:
        if bracket.upper is None or taxable_income <= bracket.upper:
            return bracket
    return brackets[-1]


def calculate_bracket_tax(
    taxable_income: Decimal,
    brackets: tuple[TaxBracket, ...] = TAX_BRACKETS,
) -> Decimal:
    """Progressive tax on ``taxable_income``, rounded to whole dollars.

    Rounds half up, so 1027.50 becomes 1028.
    """
    if taxable_income <= 0:
        return Decimal("0")
    bracket = find_bracket(taxable_income, brackets)
    tax = bracket.base_tax + (taxable_income - bracket.lower) * bracket.rate
    return tax.quantize(Decimal("1"), rounding=ROUND_HALF_UP)
