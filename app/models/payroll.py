"""
Ledgerline - Payroll Models

Value objects consumed and produced by the payroll calculation engine.

These are plain, immutable dataclasses. Persistence of employees, earnings,
deductions and calculated payrolls belongs to the host application; the engine
only ever sees the values below, built fresh for each calculation.
"""

from dataclasses import dataclass, field
from decimal import Decimal
from enum import Enum
from typing import List, Optional, Tuple


class PayFrequency(str, Enum):
    """How often an earning or deduction recurs."""
    DAILY = "DAILY"
    WEEKLY = "WEEKLY"
    BIWEEKLY = "BIWEEKLY"
    MONTHLY = "MONTHLY"
    QUARTERLY = "QUARTERLY"
    ANNUALLY = "ANNUALLY"
    ONE_TIME = "ONE_TIME"


class DeductionCategory(str, Enum):
    """
    Structured tag for employee deductions.

    When a deduction carries a category it decides whether the line counts as
    a statutory contribution. Untagged deductions fall back to matching the
    scheme name inside the free-text deduction type.
    """
    STATUTORY_SSS = "STATUTORY_SSS"
    STATUTORY_HEALTH = "STATUTORY_HEALTH"
    STATUTORY_HOUSING = "STATUTORY_HOUSING"
    OTHER = "OTHER"


# ===========================================
# SETTINGS
# ===========================================

@dataclass(frozen=True)
class TaxBracket:
    """One band of the progressive income tax table (annual amounts)."""
    min: Decimal
    max: Optional[Decimal]
    rate: Decimal

    @property
    def width(self) -> Optional[Decimal]:
        """Size of the band, None for the open-ended top band."""
        if self.max is None:
            return None
        return self.max - self.min


@dataclass(frozen=True)
class StatutoryContribution:
    """Rates and salary ceiling of a government contribution scheme."""
    employee_rate: Decimal
    employer_rate: Decimal
    max_salary: Decimal

    def employee_share(self, gross_pay: Decimal) -> Decimal:
        """Employee contribution, capped at the scheme's salary ceiling."""
        return min(gross_pay, self.max_salary) * self.employee_rate

    def employer_share(self, gross_pay: Decimal) -> Decimal:
        """Employer contribution (informational, never deducted)."""
        return min(gross_pay, self.max_salary) * self.employer_rate


@dataclass(frozen=True)
class PayrollSettings:
    """Configuration for a single payroll calculation."""
    working_days_per_month: Decimal
    working_hours_per_day: Decimal
    overtime_multiplier: Decimal
    tax_brackets: Tuple[TaxBracket, ...]
    sss_contribution: StatutoryContribution
    philhealth_contribution: StatutoryContribution
    pagibig_contribution: StatutoryContribution

    @property
    def monthly_working_hours(self) -> Decimal:
        return self.working_days_per_month * self.working_hours_per_day


# ===========================================
# CALCULATION INPUTS
# ===========================================

@dataclass(frozen=True)
class EmployeePayData:
    """Employee base data needed for payroll."""
    base_salary: Decimal
    id: Optional[str] = None
    currency: str = "PHP"
    employment_type: Optional[str] = None


@dataclass(frozen=True)
class AttendancePeriodSummary:
    """Attendance aggregated over a pay period."""
    total_work_days: int = 0
    total_work_hours: Decimal = Decimal("0")
    regular_hours: Decimal = Decimal("0")
    overtime_hours: Decimal = Decimal("0")


@dataclass(frozen=True)
class EmployeeEarning:
    """Variable or recurring addition to pay."""
    type: str
    amount: Decimal
    frequency: str = PayFrequency.MONTHLY.value
    is_active: bool = True


@dataclass(frozen=True)
class EmployeeDeduction:
    """
    Variable or recurring deduction from pay.

    Either a flat ``amount`` or a ``percentage`` of gross pay. When both are
    given the amount is used.
    """
    type: str
    amount: Optional[Decimal] = None
    percentage: Optional[Decimal] = None
    frequency: str = PayFrequency.MONTHLY.value
    is_active: bool = True
    category: Optional[DeductionCategory] = None


# ===========================================
# CALCULATION RESULT
# ===========================================

@dataclass(frozen=True)
class PayrollLineItem:
    """Single earnings or deductions breakdown entry (monthly amount)."""
    type: str
    amount: Decimal
    frequency: str
    category: Optional[DeductionCategory] = None


@dataclass(frozen=True)
class PayrollCalculationResult:
    """Complete gross-to-net breakdown for one employee and pay period."""
    # Work summary
    total_work_days: int
    total_work_hours: Decimal
    regular_hours: Decimal
    overtime_hours: Decimal

    # Base pay
    base_salary: Decimal
    hourly_rate: Decimal
    regular_pay: Decimal
    overtime_pay: Decimal

    # Earnings
    total_earnings: Decimal
    earnings_breakdown: List[PayrollLineItem] = field(default_factory=list)

    # Deductions
    total_deductions: Decimal = Decimal("0")
    deductions_breakdown: List[PayrollLineItem] = field(default_factory=list)

    # Final figures
    gross_pay: Decimal = Decimal("0")
    taxable_income: Decimal = Decimal("0")
    withholding_tax: Decimal = Decimal("0")
    net_pay: Decimal = Decimal("0")


@dataclass(frozen=True)
class PayrollSummary:
    """Totals across several calculated payrolls."""
    total_employees: int
    total_gross_pay: Decimal
    total_deductions: Decimal
    total_net_pay: Decimal
    average_gross_pay: Decimal
    average_net_pay: Decimal
