"""Deterministic federal tax estimate for a reconciled return.

Every step is logged for the audit trail. The calculator keeps no state
between calls: the same record always yields the same figures.
"""

from decimal import Decimal
from typing import Optional

import structlog

from .exceptions import IncompleteReturnError
from .models import AuditEntry, DeductionType, TaxRecord
from .tax_tables import (
    calculate_bracket_tax,
    find_bracket,
    get_standard_deduction,
    get_tax_brackets,
    get_tax_tables_version,
)

logger = structlog.get_logger()


class TaxCalculator:
    """
    Compute total income, AGI, taxable income and estimated tax.

    Uses the filing-status standard deduction unless the record carries
    itemized deductions, then applies the progressive bracket schedule.
    """

    def __init__(self, tables_version: Optional[str] = None):
        """
        Initialize calculator with a tax tables version.

        Args:
            tables_version: Override tax tables version (default: current)
        """
        self.tables_version = tables_version or get_tax_tables_version()

    def _log_step(
        self,
        audit_log: list[AuditEntry],
        step: str,
        input_value: str,
        output_value: str,
        source: str,
        notes: Optional[str] = None,
    ) -> None:
        """Add an entry to the audit log."""
        audit_log.append(
            AuditEntry(
                step=step,
                input_value=input_value,
                output_value=output_value,
                source=source,
                notes=notes,
            )
        )
        logger.info(
            "calculation_step",
            step=step,
            input=input_value,
            output=output_value,
            source=source,
        )

    def compute(self, record: TaxRecord) -> TaxRecord:
        """
        Compute derived figures for a complete record.

        Args:
            record: Reconciled record with every required field supplied

        Returns:
            A new TaxRecord with derived fields populated

        Raises:
            IncompleteReturnError: If any required field is missing
        """
        computed, _ = self.compute_with_audit(record)
        return computed

    def compute_with_audit(self, record: TaxRecord) -> tuple[TaxRecord, list[AuditEntry]]:
        """Compute derived figures and return them with the audit trail."""
        missing = record.missing_fields()
        if missing:
            logger.warning("calculation_rejected", missing_fields=list(missing))
            raise IncompleteReturnError(missing)

        audit_log: list[AuditEntry] = []
        source = f"Federal tax tables {self.tables_version}"

        # Step 1: Total income
        total_income = (
            record.wages
            + record.interest
            + record.dividends
            + record.capital_gains
            + record.other_income
        )
        self._log_step(
            audit_log,
            step="total_income",
            input_value=(
                f"{record.wages} + {record.interest} + {record.dividends} + "
                f"{record.capital_gains} + {record.other_income}"
            ),
            output_value=str(total_income),
            source="Form 1040 lines 1-8",
        )

        # Step 2: Adjusted gross income (not clamped)
        agi = total_income - record.adjustments
        self._log_step(
            audit_log,
            step="adjusted_gross_income",
            input_value=f"{total_income} - {record.adjustments}",
            output_value=str(agi),
            source="Form 1040 line 11",
        )

        # Step 3: Deduction, itemized overrides standard
        if record.deductions > 0:
            deduction = record.deductions
            deduction_type = DeductionType.ITEMIZED
            deduction_source = "User provided itemized deductions"
        else:
            deduction = get_standard_deduction(record.filing_status)
            deduction_type = DeductionType.STANDARD
            deduction_source = source
        self._log_step(
            audit_log,
            step="deduction",
            input_value=f"filing_status={record.filing_status.value}, itemized={record.deductions}",
            output_value=str(deduction),
            source=deduction_source,
            notes=deduction_type.value,
        )

        # Step 4: Taxable income
        taxable_income = max(Decimal("0"), agi - deduction)
        self._log_step(
            audit_log,
            step="taxable_income",
            input_value=f"max(0, {agi} - {deduction})",
            output_value=str(taxable_income),
            source="Form 1040 line 15",
        )

        # Step 5: Estimated tax
        brackets = get_tax_brackets(record.filing_status)
        estimated_tax = calculate_bracket_tax(taxable_income, brackets)
        bracket = find_bracket(taxable_income, brackets)
        self._log_step(
            audit_log,
            step="estimated_tax",
            input_value=f"taxable_income={taxable_income}",
            output_value=str(estimated_tax),
            source=source,
            notes=f"marginal rate {bracket.rate * 100:.0f}%",
        )

        computed = record.model_copy(
            update={
                "total_income": total_income,
                "adjusted_gross_income": agi,
                "applied_deduction": deduction,
                "deduction_type": deduction_type,
                "taxable_income": taxable_income,
                "estimated_tax": estimated_tax,
            }
        )
        return computed, audit_log


def compute(record: TaxRecord) -> TaxRecord:
    """Compute a record with the current tax tables."""
    return TaxCalculator().compute(record)
