"""
Ledgerline - Tax Calculators Package

Payroll tax and statutory contribution calculators.

Modules:
- withholding_tax_service: progressive income tax withholding (6 brackets)
- statutory_service: SSS / PhilHealth / Pag-IBIG contributions with salary caps
"""

from decimal import Decimal
from typing import Optional, Sequence

from app.models.payroll import TaxBracket
from app.services.tax_calculators.withholding_tax_service import (
    DEFAULT_TAX_BRACKETS,
    WithholdingTaxCalculator,
    describe_bracket,
)
from app.services.tax_calculators.statutory_service import (
    DEFAULT_PAGIBIG_CONTRIBUTION,
    DEFAULT_PHILHEALTH_CONTRIBUTION,
    DEFAULT_SSS_CONTRIBUTION,
    SCHEME_LABELS,
    StatutoryScheme,
    calculate_employer_contributions,
    find_scheme_line,
    matches_scheme,
)


# ===========================================
# CONVENIENCE FUNCTIONS
# ===========================================

def calculate_withholding_tax(
    annual_income: Decimal,
    tax_brackets: Optional[Sequence[TaxBracket]] = None,
) -> Decimal:
    """
    Calculate annual income tax on annual taxable income.

    Args:
        annual_income: Annual taxable income
        tax_brackets: Bracket table (defaults to DEFAULT_TAX_BRACKETS)

    Returns:
        Total annual tax amount
    """
    return WithholdingTaxCalculator(tax_brackets).calculate_annual_tax(annual_income)


def get_tax_bracket(
    annual_income: Decimal,
    tax_brackets: Optional[Sequence[TaxBracket]] = None,
) -> str:
    """
    Get the marginal tax bracket for an income level.

    Returns:
        Bracket description, e.g. "250,000 - 400,000 @ 20%"
    """
    bracket = WithholdingTaxCalculator(tax_brackets).find_bracket(annual_income)
    return f"{describe_bracket(bracket)} @ {(bracket.rate * 100).normalize():f}%"


__all__ = [
    # Withholding tax
    "DEFAULT_TAX_BRACKETS",
    "WithholdingTaxCalculator",
    "describe_bracket",
    # Statutory
    "DEFAULT_SSS_CONTRIBUTION",
    "DEFAULT_PHILHEALTH_CONTRIBUTION",
    "DEFAULT_PAGIBIG_CONTRIBUTION",
    "SCHEME_LABELS",
    "StatutoryScheme",
    "calculate_employer_contributions",
    "find_scheme_line",
    "matches_scheme",
    # Convenience functions
    "calculate_withholding_tax",
    "get_tax_bracket",
]
