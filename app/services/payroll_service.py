"""
Ledgerline - Payroll Service

Gross-to-net payroll calculation engine.

Calculation order:
1. Hourly rate = base salary / (working days per month x working hours per day)
2. Regular and overtime pay from the attendance summary
3. Earnings converted to monthly equivalents by frequency
4. Gross pay = regular pay + overtime pay + earnings
5. Employee deductions (flat amount or percentage of gross), monthly equivalents
6. Statutory contributions (SSS, PhilHealth, Pag-IBIG) unless already deducted
7. Taxable income = gross pay - statutory contributions
8. Withholding tax on annualized taxable income, spread over 12 months
9. Net pay = gross pay - total deductions

The engine is pure: everything it needs is passed in, nothing is persisted,
and a fresh result is returned on every call. Callers may run it for many
employees concurrently.
"""

import calendar
import logging
from datetime import datetime, timedelta
from decimal import Decimal
from enum import Enum
from typing import Iterable, List, Optional, Sequence, Tuple

from app.models.payroll import (
    AttendancePeriodSummary,
    EmployeeDeduction,
    EmployeeEarning,
    EmployeePayData,
    PayFrequency,
    PayrollCalculationResult,
    PayrollLineItem,
    PayrollSettings,
    PayrollSummary,
)
from app.services.tax_calculators.statutory_service import (
    DEFAULT_PAGIBIG_CONTRIBUTION,
    DEFAULT_PHILHEALTH_CONTRIBUTION,
    DEFAULT_SSS_CONTRIBUTION,
    StatutoryScheme,
    build_contribution_line,
    find_scheme_line,
    schedule_for,
)
from app.services.tax_calculators.withholding_tax_service import (
    DEFAULT_TAX_BRACKETS,
    WithholdingTaxCalculator,
)
from app.utils.currency import round_currency, to_decimal


logger = logging.getLogger(__name__)


# ===========================================
# CONSTANTS
# ===========================================

# Fixed approximations of weeks / biweeks per month
WEEKS_PER_MONTH = Decimal("4.33")
BIWEEKS_PER_MONTH = Decimal("2.17")

MONTHS_PER_QUARTER = Decimal("3")
MONTHS_PER_YEAR = Decimal("12")

WITHHOLDING_TAX_LABEL = "Withholding Tax"


DEFAULT_PAYROLL_SETTINGS = PayrollSettings(
    working_days_per_month=Decimal("22"),
    working_hours_per_day=Decimal("8"),
    overtime_multiplier=Decimal("1.25"),
    tax_brackets=DEFAULT_TAX_BRACKETS,
    sss_contribution=DEFAULT_SSS_CONTRIBUTION,
    philhealth_contribution=DEFAULT_PHILHEALTH_CONTRIBUTION,
    pagibig_contribution=DEFAULT_PAGIBIG_CONTRIBUTION,
)


class PayPeriodType(str, Enum):
    """Pay period lengths supported by get_pay_period_dates."""
    MONTHLY = "monthly"
    BIWEEKLY = "biweekly"
    WEEKLY = "weekly"


def _frequency_value(frequency) -> str:
    if isinstance(frequency, PayFrequency):
        return frequency.value
    return str(frequency)


class PayrollCalculator:
    """
    Payroll calculator for one set of payroll settings.

    Holds no per-employee state; a single instance can be shared across
    calculations.
    """

    def __init__(self, settings: Optional[PayrollSettings] = None):
        self.settings = settings or DEFAULT_PAYROLL_SETTINGS
        self.tax_calculator = WithholdingTaxCalculator(self.settings.tax_brackets)

    # ===========================================
    # RATES
    # ===========================================

    def calculate_hourly_rate(self, base_salary: Decimal) -> Decimal:
        """Base salary spread over the month's working hours."""
        return to_decimal(base_salary) / self.settings.monthly_working_hours

    def to_monthly_amount(self, amount: Decimal, frequency) -> Decimal:
        """
        Convert an amount to its monthly equivalent.

        MONTHLY, ONE_TIME and unrecognised frequencies are used as-is.
        """
        freq = _frequency_value(frequency)

        if freq == PayFrequency.DAILY.value:
            return amount * self.settings.working_days_per_month
        if freq == PayFrequency.WEEKLY.value:
            return amount * WEEKS_PER_MONTH
        if freq == PayFrequency.BIWEEKLY.value:
            return amount * BIWEEKS_PER_MONTH
        if freq == PayFrequency.QUARTERLY.value:
            return amount / MONTHS_PER_QUARTER
        if freq == PayFrequency.ANNUALLY.value:
            return amount / MONTHS_PER_YEAR
        return amount

    # ===========================================
    # EARNINGS & DEDUCTIONS
    # ===========================================

    def normalize_earnings(
        self,
        earnings: Iterable[EmployeeEarning],
    ) -> Tuple[List[PayrollLineItem], Decimal]:
        """Monthly breakdown and total of the active earnings."""
        breakdown = []
        total = Decimal("0")

        for earning in earnings:
            if not earning.is_active:
                continue

            monthly_amount = self.to_monthly_amount(to_decimal(earning.amount), earning.frequency)
            breakdown.append(PayrollLineItem(
                type=earning.type,
                amount=monthly_amount,
                frequency=_frequency_value(earning.frequency),
            ))
            total += monthly_amount

        return breakdown, total

    def deduction_base_amount(self, deduction: EmployeeDeduction, gross_pay: Decimal) -> Decimal:
        """Flat amount when set, otherwise the percentage of gross pay."""
        if deduction.amount:
            return to_decimal(deduction.amount)
        if deduction.percentage:
            return gross_pay * (to_decimal(deduction.percentage) / 100)
        return Decimal("0")

    def normalize_deductions(
        self,
        deductions: Iterable[EmployeeDeduction],
        gross_pay: Decimal,
    ) -> Tuple[List[PayrollLineItem], Decimal]:
        """Monthly breakdown and total of the active employee deductions."""
        breakdown = []
        total = Decimal("0")

        for deduction in deductions:
            if not deduction.is_active:
                continue

            base_amount = self.deduction_base_amount(deduction, gross_pay)
            monthly_amount = self.to_monthly_amount(base_amount, deduction.frequency)
            breakdown.append(PayrollLineItem(
                type=deduction.type,
                amount=monthly_amount,
                frequency=_frequency_value(deduction.frequency),
                category=deduction.category,
            ))
            total += monthly_amount

        return breakdown, total

    def statutory_deductions(
        self,
        existing: Sequence[PayrollLineItem],
        gross_pay: Decimal,
    ) -> List[PayrollLineItem]:
        """Contribution lines for every scheme not already present in ``existing``."""
        lines = []
        for scheme in StatutoryScheme:
            if find_scheme_line(existing, scheme) is not None:
                logger.debug("Statutory %s already deducted, skipping", scheme.name)
                continue
            lines.append(
                build_contribution_line(scheme, schedule_for(self.settings, scheme), gross_pay)
            )
        return lines

    def calculate_taxable_income(
        self,
        gross_pay: Decimal,
        deductions: Sequence[PayrollLineItem],
    ) -> Decimal:
        """Gross pay less whichever statutory lines ended up in the deductions."""
        taxable_income = gross_pay
        for scheme in StatutoryScheme:
            line = find_scheme_line(deductions, scheme)
            if line is not None:
                taxable_income -= line.amount
        return taxable_income

    # ===========================================
    # FULL CALCULATION
    # ===========================================

    def calculate(
        self,
        employee: EmployeePayData,
        attendance: AttendancePeriodSummary,
        earnings: Iterable[EmployeeEarning] = (),
        deductions: Iterable[EmployeeDeduction] = (),
    ) -> PayrollCalculationResult:
        """Calculate the full payroll breakdown for one employee."""
        base_salary = to_decimal(employee.base_salary)
        regular_hours = to_decimal(attendance.regular_hours)
        overtime_hours = to_decimal(attendance.overtime_hours)

        hourly_rate = self.calculate_hourly_rate(base_salary)
        regular_pay = regular_hours * hourly_rate
        overtime_pay = overtime_hours * hourly_rate * self.settings.overtime_multiplier

        earnings_breakdown, total_earnings = self.normalize_earnings(earnings)

        gross_pay = regular_pay + overtime_pay + total_earnings

        deductions_breakdown, total_deductions = self.normalize_deductions(deductions, gross_pay)

        for line in self.statutory_deductions(deductions_breakdown, gross_pay):
            deductions_breakdown.append(line)
            total_deductions += line.amount

        taxable_income = self.calculate_taxable_income(gross_pay, deductions_breakdown)

        withholding_tax = self.tax_calculator.calculate_monthly_withholding(taxable_income)
        deductions_breakdown.append(PayrollLineItem(
            type=WITHHOLDING_TAX_LABEL,
            amount=withholding_tax,
            frequency=PayFrequency.MONTHLY.value,
        ))
        total_deductions += withholding_tax

        # Totals are rounded individually; gross and net are derived from the
        # rounded parts so the published figures always add up.
        rounded_regular_pay = round_currency(regular_pay)
        rounded_overtime_pay = round_currency(overtime_pay)
        rounded_total_earnings = round_currency(total_earnings)
        rounded_gross_pay = rounded_regular_pay + rounded_overtime_pay + rounded_total_earnings
        rounded_total_deductions = round_currency(total_deductions)
        net_pay = rounded_gross_pay - rounded_total_deductions

        logger.debug(
            "Payroll calculated for employee %s: gross=%s deductions=%s net=%s",
            employee.id or "-", rounded_gross_pay, rounded_total_deductions, net_pay,
        )

        return PayrollCalculationResult(
            total_work_days=attendance.total_work_days,
            total_work_hours=to_decimal(attendance.total_work_hours),
            regular_hours=regular_hours,
            overtime_hours=overtime_hours,
            base_salary=base_salary,
            hourly_rate=round_currency(hourly_rate),
            regular_pay=rounded_regular_pay,
            overtime_pay=rounded_overtime_pay,
            total_earnings=rounded_total_earnings,
            earnings_breakdown=earnings_breakdown,
            total_deductions=rounded_total_deductions,
            deductions_breakdown=deductions_breakdown,
            gross_pay=rounded_gross_pay,
            taxable_income=round_currency(taxable_income),
            withholding_tax=round_currency(withholding_tax),
            net_pay=net_pay,
        )


def calculate_payroll(
    employee: EmployeePayData,
    attendance: AttendancePeriodSummary,
    earnings: Iterable[EmployeeEarning] = (),
    deductions: Iterable[EmployeeDeduction] = (),
    settings: PayrollSettings = DEFAULT_PAYROLL_SETTINGS,
) -> PayrollCalculationResult:
    """Calculate payroll for an employee with the given settings."""
    return PayrollCalculator(settings).calculate(employee, attendance, earnings, deductions)


# ===========================================
# REPORTING HELPERS
# ===========================================

def calculate_payroll_summary(payrolls: Sequence[PayrollCalculationResult]) -> PayrollSummary:
    """Totals and averages across several payroll results."""
    total_employees = len(payrolls)
    total_gross = sum((p.gross_pay for p in payrolls), Decimal("0"))
    total_deductions = sum((p.total_deductions for p in payrolls), Decimal("0"))
    total_net = sum((p.net_pay for p in payrolls), Decimal("0"))

    if total_employees > 0:
        average_gross = round_currency(total_gross / total_employees)
        average_net = round_currency(total_net / total_employees)
    else:
        average_gross = Decimal("0")
        average_net = Decimal("0")

    return PayrollSummary(
        total_employees=total_employees,
        total_gross_pay=round_currency(total_gross),
        total_deductions=round_currency(total_deductions),
        total_net_pay=round_currency(total_net),
        average_gross_pay=average_gross,
        average_net_pay=average_net,
    )


def _start_of_day(moment: datetime) -> datetime:
    return moment.replace(hour=0, minute=0, second=0, microsecond=0)


def _end_of_day(moment: datetime) -> datetime:
    return moment.replace(hour=23, minute=59, second=59, microsecond=999000)


def get_pay_period_dates(
    period_type: PayPeriodType,
    reference_date: Optional[datetime] = None,
) -> Tuple[datetime, datetime]:
    """
    Start and end of the pay period containing ``reference_date``.

    - monthly: first to last day of the month
    - biweekly: consecutive 14-day blocks counted from January 1
    - weekly: Monday to Sunday
    """
    reference = reference_date or datetime.now()
    period = PayPeriodType(period_type)

    if period == PayPeriodType.MONTHLY:
        last_day = calendar.monthrange(reference.year, reference.month)[1]
        start = _start_of_day(reference.replace(day=1))
        end = _end_of_day(reference.replace(day=last_day))
    elif period == PayPeriodType.BIWEEKLY:
        day_of_year = reference.timetuple().tm_yday
        biweek_number = (day_of_year - 1) // 14
        start = _start_of_day(reference.replace(month=1, day=1)) + timedelta(days=biweek_number * 14)
        end = _end_of_day(start + timedelta(days=13))
    else:
        start = _start_of_day(reference - timedelta(days=reference.weekday()))
        end = _end_of_day(start + timedelta(days=6))

    return start, end
