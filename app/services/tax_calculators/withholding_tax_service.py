"""
Ledgerline - Withholding Tax Calculator

Income tax withheld at source, computed on annualized taxable income with a
progressive (marginal-rate) bracket table.

Default annual brackets:
- 0 - 250,000: 0%
- 250,000 - 400,000: 20%
- 400,000 - 800,000: 25%
- 800,000 - 2,000,000: 30%
- 2,000,000 - 8,000,000: 32%
- Above 8,000,000: 35%

Each bracket only taxes the slice of income that falls inside it.
"""

from decimal import Decimal
from typing import Any, Dict, List, Optional, Sequence, Tuple

from app.models.payroll import TaxBracket


DEFAULT_TAX_BRACKETS: Tuple[TaxBracket, ...] = (
    TaxBracket(Decimal("0"), Decimal("250000"), Decimal("0.0")),
    TaxBracket(Decimal("250000"), Decimal("400000"), Decimal("0.2")),
    TaxBracket(Decimal("400000"), Decimal("800000"), Decimal("0.25")),
    TaxBracket(Decimal("800000"), Decimal("2000000"), Decimal("0.30")),
    TaxBracket(Decimal("2000000"), Decimal("8000000"), Decimal("0.32")),
    TaxBracket(Decimal("8000000"), None, Decimal("0.35")),
)

MONTHS_PER_YEAR = Decimal("12")


class WithholdingTaxCalculator:
    """
    Progressive withholding tax calculator.

    Brackets are walked in ascending order; the remaining income is taxed one
    bracket width at a time until nothing is left.
    """

    def __init__(self, tax_brackets: Optional[Sequence[TaxBracket]] = None):
        self.tax_brackets = tuple(tax_brackets) if tax_brackets is not None else DEFAULT_TAX_BRACKETS

    def bracket_slices(self, annual_income: Decimal) -> List[Tuple[TaxBracket, Decimal]]:
        """Return (bracket, taxed amount) pairs for every bracket the income reaches."""
        slices = []
        remaining = annual_income

        for bracket in self.tax_brackets:
            if remaining <= 0:
                break

            width = bracket.width
            taxable_in_bracket = remaining if width is None else min(remaining, width)

            if taxable_in_bracket > 0:
                slices.append((bracket, taxable_in_bracket))
                remaining -= taxable_in_bracket

        return slices

    def calculate_annual_tax(self, annual_income: Decimal) -> Decimal:
        """Total annual tax owed on ``annual_income``."""
        tax = Decimal("0")
        for bracket, taxable_in_bracket in self.bracket_slices(annual_income):
            tax += taxable_in_bracket * bracket.rate
        return tax

    def calculate_monthly_withholding(self, monthly_taxable_income: Decimal) -> Decimal:
        """Annualize monthly taxable income, tax it, and spread the tax back over 12 months."""
        annual_tax = self.calculate_annual_tax(monthly_taxable_income * MONTHS_PER_YEAR)
        return annual_tax / MONTHS_PER_YEAR

    def calculate_tax_breakdown(self, annual_income: Decimal) -> Tuple[Decimal, List[Dict[str, Any]]]:
        """
        Calculate annual tax with a per-bracket breakdown.

        Returns:
            Tuple of (total_tax, bracket_breakdown)
        """
        total_tax = Decimal("0")
        breakdown = []

        for bracket, taxable_in_bracket in self.bracket_slices(annual_income):
            tax_in_bracket = taxable_in_bracket * bracket.rate
            breakdown.append({
                "range": describe_bracket(bracket),
                "rate": bracket.rate,
                "taxable_amount": taxable_in_bracket,
                "tax_amount": tax_in_bracket,
            })
            total_tax += tax_in_bracket

        return total_tax, breakdown

    def find_bracket(self, annual_income: Decimal) -> TaxBracket:
        """Bracket holding the top slice of ``annual_income`` (marginal bracket)."""
        slices = self.bracket_slices(annual_income)
        if not slices:
            return self.tax_brackets[0]
        return slices[-1][0]


def describe_bracket(bracket: TaxBracket) -> str:
    """Human readable range label, e.g. "250,000 - 400,000"."""
    upper = "∞" if bracket.max is None else f"{bracket.max:,.0f}"
    return f"{bracket.min:,.0f} - {upper}"
