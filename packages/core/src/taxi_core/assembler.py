"""Package a computed return for the form renderer.

Selection, labelling and ordering only; no figures are computed here.
"""

from decimal import Decimal

from .exceptions import ReturnNotComputedError
from .models import (
    DERIVED_FIELDS,
    FILING_STATUS_LABELS,
    DeductionType,
    LineItem,
    RenderableReturn,
    TaxRecord,
    mask_ssn,
)

# (key, label) in form presentation order
INCOME_LINES: tuple[tuple[str, str], ...] = (
    ("wages", "Wages, salaries, tips"),
    ("interest", "Taxable interest"),
    ("dividends", "Ordinary dividends"),
    ("capitalGains", "Capital gain or (loss)"),
    ("otherIncome", "Other income"),
    ("totalIncome", "Total income"),
    ("adjustments", "Adjustments to income"),
    ("adjustedGrossIncome", "Adjusted gross income"),
)

DEDUCTION_LABELS: dict[DeductionType, str] = {
    DeductionType.STANDARD: "Standard deduction",
    DeductionType.ITEMIZED: "Itemized deductions",
}

TAX_LINES: tuple[tuple[str, str], ...] = (
    ("taxableIncome", "Taxable income"),
    ("estimatedTax", "Estimated tax"),
)

DISPLAY_QUANTUM = Decimal("0.01")


def _line(key: str, label: str, amount: Decimal) -> LineItem:
    return LineItem(key=key, label=label, amount=amount.quantize(DISPLAY_QUANTUM))


def assemble(record: TaxRecord) -> RenderableReturn:
    """Project a computed record into its renderable form.

    Raises:
        ReturnNotComputedError: If the record's derived fields are absent.
    """
    if not record.is_computed:
        absent = [name for name in DERIVED_FIELDS if record.value_of(name) is None]
        raise ReturnNotComputedError(
            "Tax record must be computed before it can be assembled",
            missing_derived=absent,
        )

    line_items = [_line(key, label, record.value_of(key)) for key, label in INCOME_LINES]
    line_items.append(
        _line("deduction", DEDUCTION_LABELS[record.deduction_type], record.applied_deduction)
    )
    line_items.extend(_line(key, label, record.value_of(key)) for key, label in TAX_LINES)

    return RenderableReturn(
        taxpayer_name=f"{record.first_name} {record.last_name}",
        masked_ssn=mask_ssn(record.ssn),
        filing_status=record.filing_status,
        filing_status_label=FILING_STATUS_LABELS[record.filing_status],
        address_lines=(
            record.address,
            f"{record.city}, {record.state} {record.zip}",
        ),
        line_items=tuple(line_items),
    )
