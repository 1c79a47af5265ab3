"""
Ledgerline - Statutory Contributions

Mandatory government contributions withheld from employee pay:

1. SSS (social security)
   - Employee: 4.5%, Employer: 9.5%
   - Salary ceiling: 25,000

2. PhilHealth (health insurance)
   - Employee: 2.75%, Employer: 2.75%
   - Salary ceiling: 100,000

3. Pag-IBIG (housing fund)
   - Employee: 2%, Employer: 2%
   - Salary ceiling: 5,000

Contributions are computed on gross pay, capped at the scheme ceiling. A
scheme that HR already deducts manually is never injected a second time.
"""

from decimal import Decimal
from enum import Enum
from typing import Dict, Iterable, Optional

from app.models.payroll import (
    DeductionCategory,
    PayFrequency,
    PayrollLineItem,
    PayrollSettings,
    StatutoryContribution,
)


class StatutoryScheme(str, Enum):
    """Statutory schemes. Values are the tokens matched inside deduction names."""
    SSS = "sss"
    PHILHEALTH = "philhealth"
    PAGIBIG = "pag-ibig"


SCHEME_LABELS: Dict[StatutoryScheme, str] = {
    StatutoryScheme.SSS: "SSS Contribution",
    StatutoryScheme.PHILHEALTH: "PhilHealth Contribution",
    StatutoryScheme.PAGIBIG: "Pag-IBIG Contribution",
}

SCHEME_CATEGORIES: Dict[StatutoryScheme, DeductionCategory] = {
    StatutoryScheme.SSS: DeductionCategory.STATUTORY_SSS,
    StatutoryScheme.PHILHEALTH: DeductionCategory.STATUTORY_HEALTH,
    StatutoryScheme.PAGIBIG: DeductionCategory.STATUTORY_HOUSING,
}


DEFAULT_SSS_CONTRIBUTION = StatutoryContribution(
    employee_rate=Decimal("0.045"),
    employer_rate=Decimal("0.095"),
    max_salary=Decimal("25000"),
)

DEFAULT_PHILHEALTH_CONTRIBUTION = StatutoryContribution(
    employee_rate=Decimal("0.0275"),
    employer_rate=Decimal("0.0275"),
    max_salary=Decimal("100000"),
)

DEFAULT_PAGIBIG_CONTRIBUTION = StatutoryContribution(
    employee_rate=Decimal("0.02"),
    employer_rate=Decimal("0.02"),
    max_salary=Decimal("5000"),
)


def schedule_for(settings: PayrollSettings, scheme: StatutoryScheme) -> StatutoryContribution:
    """Contribution schedule configured for ``scheme``."""
    if scheme == StatutoryScheme.SSS:
        return settings.sss_contribution
    if scheme == StatutoryScheme.PHILHEALTH:
        return settings.philhealth_contribution
    return settings.pagibig_contribution


def matches_scheme(
    line_type: str,
    scheme: StatutoryScheme,
    category: Optional[DeductionCategory] = None,
) -> bool:
    """
    Whether a deduction line stands for ``scheme``.

    A structured category is authoritative. Without one, the scheme token is
    looked up case-insensitively anywhere in the free-text type, so a label
    such as "Special SSS Loan" also counts as SSS.
    """
    if category is not None:
        return category == SCHEME_CATEGORIES[scheme]
    return scheme.value in line_type.lower()


def find_scheme_line(
    lines: Iterable[PayrollLineItem],
    scheme: StatutoryScheme,
) -> Optional[PayrollLineItem]:
    """First breakdown line standing for ``scheme``, if any."""
    for line in lines:
        if matches_scheme(line.type, scheme, line.category):
            return line
    return None


def build_contribution_line(
    scheme: StatutoryScheme,
    schedule: StatutoryContribution,
    gross_pay: Decimal,
) -> PayrollLineItem:
    """Monthly employee contribution line for ``scheme``."""
    return PayrollLineItem(
        type=SCHEME_LABELS[scheme],
        amount=schedule.employee_share(gross_pay),
        frequency=PayFrequency.MONTHLY.value,
        category=SCHEME_CATEGORIES[scheme],
    )


def calculate_employer_contributions(
    gross_pay: Decimal,
    settings: PayrollSettings,
) -> Dict[str, Decimal]:
    """Employer-side contributions per scheme (not deducted from the employee)."""
    return {
        scheme.name: schedule_for(settings, scheme).employer_share(gross_pay)
        for scheme in StatutoryScheme
    }
