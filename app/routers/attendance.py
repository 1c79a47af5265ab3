"""
Ledgerline - Attendance Router

Stateless attendance endpoints: worked hours for one day, daily status
classification, and a pay period report that feeds the payroll engine.
"""

import logging

from fastapi import APIRouter

from app.config import get_settings
from app.schemas.attendance import (
    AttendanceHoursRequest,
    AttendanceHoursResponse,
    AttendanceReportResponse,
    AttendanceStatusRequest,
    AttendanceStatusResponse,
    AttendanceSummaryRequest,
    AttendanceSummaryResponse,
    DailyAttendanceResponse,
)
from app.schemas.payroll import AttendancePeriodSummarySchema
from app.services.attendance_service import (
    aggregate_attendance,
    build_attendance_input,
    calculate_attendance_hours,
    determine_attendance_status,
    format_duration,
    is_early_departure,
    is_holiday,
    is_late_arrival,
)
from app.utils.error_handling import BusinessRuleException, validate_date_range


logger = logging.getLogger(__name__)

router = APIRouter()


def _grace_period(requested):
    if requested is None:
        return get_settings().attendance_grace_period_minutes
    return requested


@router.post(
    "/hours",
    response_model=AttendanceHoursResponse,
    summary="Calculate worked hours",
)
async def attendance_hours(request: AttendanceHoursRequest):
    """Worked, regular and overtime hours for one day of clock events."""
    hours = calculate_attendance_hours(
        request.clock_in,
        request.clock_out,
        request.break_start,
        request.break_end,
        request.schedule.to_model(),
    )
    return AttendanceHoursResponse(
        total_hours=hours.total_hours,
        regular_hours=hours.regular_hours,
        overtime_hours=hours.overtime_hours,
        break_duration=hours.break_duration,
        formatted=format_duration(hours.total_hours),
    )


@router.post(
    "/status",
    response_model=AttendanceStatusResponse,
    summary="Classify attendance day",
)
async def attendance_status(request: AttendanceStatusRequest):
    schedule = request.schedule.to_model()
    grace = _grace_period(request.grace_period_minutes)

    day_status = determine_attendance_status(
        request.clock_in,
        request.clock_out,
        request.work_date,
        schedule,
        grace,
        get_settings().attendance_half_day_hours,
    )

    return AttendanceStatusResponse(
        work_date=request.work_date,
        status=day_status,
        is_late=bool(request.clock_in) and is_late_arrival(request.clock_in, schedule.start_time, grace),
        is_early_departure=bool(request.clock_out)
        and is_early_departure(request.clock_out, schedule.end_time, grace),
    )


@router.post(
    "/summary",
    response_model=AttendanceReportResponse,
    summary="Summarise pay period attendance",
    description="Per-day results, period totals and the payroll attendance input",
)
async def attendance_summary(request: AttendanceSummaryRequest):
    """
    Aggregate one employee's records for a pay period.

    Holidays are dropped; when a period is given, so are records outside it.
    """
    if request.period_start and request.period_end:
        validate_date_range(request.period_start, request.period_end)

    seen = set()
    for record in request.records:
        if record.work_date in seen:
            raise BusinessRuleException(
                f"More than one attendance record for {record.work_date}",
                rule="one_record_per_day",
                details={"work_date": str(record.work_date)},
            )
        seen.add(record.work_date)

    records = [
        r.to_model() for r in request.records
        if not is_holiday(r.work_date, request.holidays)
        and (request.period_start is None or r.work_date >= request.period_start)
        and (request.period_end is None or r.work_date <= request.period_end)
    ]

    report = aggregate_attendance(
        records,
        request.schedule.to_model(),
        _grace_period(request.grace_period_minutes),
        get_settings().attendance_half_day_hours,
    )
    payroll_input = build_attendance_input(report.days)

    logger.info(
        "Attendance report: %d days, %d attended",
        report.summary.total_days, report.summary.present_days,
    )

    return AttendanceReportResponse(
        days=[DailyAttendanceResponse.from_result(d) for d in report.days],
        summary=AttendanceSummaryResponse.model_validate(report.summary),
        payroll_attendance=AttendancePeriodSummarySchema.model_validate(payroll_input),
    )
