"""
Ledgerline - Pydantic Schemas
"""

from app.schemas.payroll import (
    AttendancePeriodSummarySchema,
    EmployeeDeductionSchema,
    EmployeeEarningSchema,
    EmployeePayDataSchema,
    PayPeriodResponse,
    PayrollCalculateRequest,
    PayrollCalculationResponse,
    PayrollLineItemResponse,
    PayrollSettingsSchema,
    PayrollSummaryRequest,
    PayrollSummaryResponse,
    PayrollTotalsSchema,
    StatutoryContributionSchema,
    TaxBracketBreakdown,
    TaxBracketSchema,
    WithholdingTaxRequest,
    WithholdingTaxResponse,
)
from app.schemas.attendance import (
    AttendanceHoursRequest,
    AttendanceHoursResponse,
    AttendanceRecordSchema,
    AttendanceReportResponse,
    AttendanceStatusRequest,
    AttendanceStatusResponse,
    AttendanceSummaryRequest,
    AttendanceSummaryResponse,
    DailyAttendanceResponse,
    WorkScheduleSchema,
)
