"""Tests for standard deductions and the bracket schedule."""

from decimal import Decimal

import pytest

from taxi_core.models import FilingStatus
from taxi_core.tax_tables import (
    TAX_BRACKETS,
    calculate_bracket_tax,
    find_bracket,
    get_standard_deduction,
    get_tax_brackets,
    get_tax_tables_version,
)


class TestStandardDeduction:
    """Tests for standard deduction lookup."""

    @pytest.mark.parametrize(
        "status,expected",
        [
            (FilingStatus.SINGLE, Decimal("12950")),
            (FilingStatus.MARRIED_SEPARATE, Decimal("12950")),
            (FilingStatus.HEAD_OF_HOUSEHOLD, Decimal("19400")),
            (FilingStatus.MARRIED_JOINT, Decimal("25900")),
            (FilingStatus.QUALIFYING_WIDOW, Decimal("25900")),
        ],
    )
    def test_by_filing_status(self, status, expected):
        assert get_standard_deduction(status) == expected

    def test_accepts_enum_value(self):
        assert get_standard_deduction("married_joint") == Decimal("25900")

    def test_every_status_has_a_deduction(self):
        for status in FilingStatus:
            assert get_standard_deduction(status) > 0


class TestBracketSchedule:
    """Tests for the bracket table itself."""

    def test_version(self):
        assert get_tax_tables_version() == "2022"

    def test_every_status_shares_schedule(self):
        for status in FilingStatus:
            assert get_tax_brackets(status) == TAX_BRACKETS

    def test_brackets_are_contiguous(self):
        for lower, upper in zip(TAX_BRACKETS, TAX_BRACKETS[1:]):
            assert lower.upper == upper.lower

    def test_base_tax_is_cumulative(self):
        for previous, bracket in zip(TAX_BRACKETS, TAX_BRACKETS[1:]):
            expected = previous.base_tax + (previous.upper - previous.lower) * previous.rate
            assert bracket.base_tax == expected

    def test_top_bracket_is_open(self):
        assert TAX_BRACKETS[-1].upper is None
        assert TAX_BRACKETS[-1].rate == Decimal("0.37")


class TestCalculateBracketTax:
    """Tests for progressive tax and boundary handling."""

    @pytest.mark.parametrize(
        "taxable_income,expected",
        [
            (Decimal("0"), Decimal("0")),
            (Decimal("-500"), Decimal("0")),
            (Decimal("5"), Decimal("1")),
            (Decimal("10000"), Decimal("1000")),
            (Decimal("10275"), Decimal("1028")),
            (Decimal("41775"), Decimal("4808")),
            (Decimal("67100"), Decimal("10379")),
            (Decimal("89075"), Decimal("15214")),
            (Decimal("539900"), Decimal("162718")),
            (Decimal("600000"), Decimal("184955")),
        ],
    )
    def test_tax_amounts(self, taxable_income, expected):
        assert calculate_bracket_tax(taxable_income) == expected

    def test_boundary_belongs_to_lower_bracket(self):
        assert find_bracket(Decimal("10275")).rate == Decimal("0.10")
        assert find_bracket(Decimal("10275.01")).rate == Decimal("0.12")

    def test_continuous_across_boundary(self):
        below = calculate_bracket_tax(Decimal("41775"))
        above = calculate_bracket_tax(Decimal("41776"))

        assert above - below == Decimal("0")
        assert calculate_bracket_tax(Decimal("41780")) == Decimal("4809")

    def test_result_is_whole_dollars(self):
        tax = calculate_bracket_tax(Decimal("12345.67"))

        assert tax == tax.to_integral_value()
