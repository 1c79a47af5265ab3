"""
Ledgerline - Models Package

Value objects for the payroll engine and the attendance aggregator.
"""

from app.models.payroll import (
    PayFrequency,
    DeductionCategory,
    TaxBracket,
    StatutoryContribution,
    PayrollSettings,
    EmployeePayData,
    AttendancePeriodSummary,
    EmployeeEarning,
    EmployeeDeduction,
    PayrollLineItem,
    PayrollCalculationResult,
    PayrollSummary,
)
from app.models.attendance import (
    AttendanceStatus,
    WorkSchedule,
    DEFAULT_WORK_SCHEDULE,
    DailyAttendanceRecord,
    AttendanceHours,
    DailyAttendanceResult,
    AttendanceSummary,
    AttendanceReport,
)

__all__ = [
    # Payroll
    "PayFrequency",
    "DeductionCategory",
    "TaxBracket",
    "StatutoryContribution",
    "PayrollSettings",
    "EmployeePayData",
    "AttendancePeriodSummary",
    "EmployeeEarning",
    "EmployeeDeduction",
    "PayrollLineItem",
    "PayrollCalculationResult",
    "PayrollSummary",
    # Attendance
    "AttendanceStatus",
    "WorkSchedule",
    "DEFAULT_WORK_SCHEDULE",
    "DailyAttendanceRecord",
    "AttendanceHours",
    "DailyAttendanceResult",
    "AttendanceSummary",
    "AttendanceReport",
]
