"""
Ledgerline - Services Package

Business logic services.
"""

from app.services.payroll_service import (
    DEFAULT_PAYROLL_SETTINGS,
    PayPeriodType,
    PayrollCalculator,
    calculate_payroll,
    calculate_payroll_summary,
    get_pay_period_dates,
)
from app.services.attendance_service import (
    aggregate_attendance,
    build_attendance_input,
    calculate_attendance_hours,
    calculate_attendance_summary,
    determine_attendance_status,
    is_early_departure,
    is_late_arrival,
)

# Tax Calculators
from app.services.tax_calculators.withholding_tax_service import WithholdingTaxCalculator
from app.services.tax_calculators.statutory_service import StatutoryScheme

__all__ = [
    # Payroll
    "DEFAULT_PAYROLL_SETTINGS",
    "PayPeriodType",
    "PayrollCalculator",
    "calculate_payroll",
    "calculate_payroll_summary",
    "get_pay_period_dates",
    # Attendance
    "aggregate_attendance",
    "build_attendance_input",
    "calculate_attendance_hours",
    "calculate_attendance_summary",
    "determine_attendance_status",
    "is_early_departure",
    "is_late_arrival",
    # Tax Calculators
    "WithholdingTaxCalculator",
    "StatutoryScheme",
]
