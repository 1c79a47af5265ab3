"""
Ledgerline - Attendance Service

Turns captured clock events into worked hours, a daily status and a period
summary. The period summary feeds the payroll engine's attendance input.

Daily status rules (first match wins):
- Saturday / Sunday: WEEKEND
- No clock-in: ABSENT
- Clock-in after scheduled start + grace period: LATE
- Clocked out with under 4 hours on the clock: HALF_DAY
- Otherwise: PRESENT

For attendance rate purposes LATE days count as attended.
"""

import calendar
import logging
from datetime import date, datetime, timedelta
from decimal import Decimal, ROUND_FLOOR, ROUND_HALF_UP
from typing import Iterable, Optional, Sequence, Tuple

from app.models.attendance import (
    DEFAULT_WORK_SCHEDULE,
    AttendanceHours,
    AttendanceReport,
    AttendanceStatus,
    AttendanceSummary,
    DailyAttendanceRecord,
    DailyAttendanceResult,
    WorkSchedule,
)
from app.models.payroll import AttendancePeriodSummary
from app.utils.currency import round_currency, to_decimal
from app.utils.error_handling import InvalidTimeFormatException


logger = logging.getLogger(__name__)


DEFAULT_GRACE_PERIOD_MINUTES = 15
HALF_DAY_THRESHOLD_HOURS = Decimal("4")

ATTENDED_STATUSES = (AttendanceStatus.PRESENT, AttendanceStatus.LATE)

ZERO_HOURS = AttendanceHours(
    total_hours=Decimal("0.00"),
    regular_hours=Decimal("0.00"),
    overtime_hours=Decimal("0.00"),
    break_duration=0,
)


def parse_time_string(value: str) -> Tuple[int, int]:
    """Parse "HH:MM" into (hours, minutes)."""
    try:
        hours_part, minutes_part = value.strip().split(":")
        hours, minutes = int(hours_part), int(minutes_part)
    except (AttributeError, ValueError):
        raise InvalidTimeFormatException(value)

    if not (0 <= hours <= 23 and 0 <= minutes <= 59):
        raise InvalidTimeFormatException(value)
    return hours, minutes


def _minutes_since_midnight(moment: datetime) -> int:
    return moment.hour * 60 + moment.minute


def _elapsed_minutes(start: datetime, end: datetime) -> Decimal:
    return Decimal(str((end - start).total_seconds())) / 60


# ===========================================
# DAILY CALCULATIONS
# ===========================================

def calculate_attendance_hours(
    clock_in: datetime,
    clock_out: datetime,
    break_start: Optional[datetime] = None,
    break_end: Optional[datetime] = None,
    schedule: WorkSchedule = DEFAULT_WORK_SCHEDULE,
) -> AttendanceHours:
    """
    Worked hours between clock-in and clock-out.

    The break is subtracted only when both break timestamps are present.
    Hours beyond the schedule's regular hours per day are overtime.
    """
    total_minutes = _elapsed_minutes(clock_in, clock_out)

    break_minutes = Decimal("0")
    if break_start and break_end:
        break_minutes = _elapsed_minutes(break_start, break_end)
        total_minutes -= break_minutes

    total_hours = total_minutes / 60
    regular_limit = to_decimal(schedule.regular_hours_per_day)

    regular_hours = max(Decimal("0"), min(total_hours, regular_limit))
    overtime_hours = max(Decimal("0"), total_hours - regular_limit)

    return AttendanceHours(
        total_hours=round_currency(total_hours),
        regular_hours=round_currency(regular_hours),
        overtime_hours=round_currency(overtime_hours),
        break_duration=int(break_minutes.quantize(Decimal("1"), rounding=ROUND_HALF_UP)),
    )


def is_late_arrival(
    clock_in: datetime,
    schedule_start_time: str = DEFAULT_WORK_SCHEDULE.start_time,
    grace_period_minutes: int = DEFAULT_GRACE_PERIOD_MINUTES,
) -> bool:
    """Clock-in later than scheduled start plus grace period."""
    hours, minutes = parse_time_string(schedule_start_time)
    latest_on_time = hours * 60 + minutes + grace_period_minutes
    return _minutes_since_midnight(clock_in) > latest_on_time


def is_early_departure(
    clock_out: datetime,
    schedule_end_time: str = DEFAULT_WORK_SCHEDULE.end_time,
    grace_period_minutes: int = DEFAULT_GRACE_PERIOD_MINUTES,
) -> bool:
    """Clock-out earlier than scheduled end minus grace period."""
    hours, minutes = parse_time_string(schedule_end_time)
    earliest_leave = hours * 60 + minutes - grace_period_minutes
    return _minutes_since_midnight(clock_out) < earliest_leave


def determine_attendance_status(
    clock_in: Optional[datetime] = None,
    clock_out: Optional[datetime] = None,
    day: Optional[date] = None,
    schedule: WorkSchedule = DEFAULT_WORK_SCHEDULE,
    grace_period_minutes: int = DEFAULT_GRACE_PERIOD_MINUTES,
    half_day_hours: Decimal = HALF_DAY_THRESHOLD_HOURS,
) -> AttendanceStatus:
    """Classify one day of attendance."""
    day = day or date.today()

    # Saturday = 5, Sunday = 6
    if day.weekday() >= 5:
        return AttendanceStatus.WEEKEND

    if not clock_in:
        return AttendanceStatus.ABSENT

    if is_late_arrival(clock_in, schedule.start_time, grace_period_minutes):
        return AttendanceStatus.LATE

    if clock_out:
        hours = calculate_attendance_hours(clock_in, clock_out, schedule=schedule)
        if hours.total_hours < to_decimal(half_day_hours):
            return AttendanceStatus.HALF_DAY

    return AttendanceStatus.PRESENT


def evaluate_attendance_day(
    record: DailyAttendanceRecord,
    schedule: WorkSchedule = DEFAULT_WORK_SCHEDULE,
    grace_period_minutes: int = DEFAULT_GRACE_PERIOD_MINUTES,
    half_day_hours: Decimal = HALF_DAY_THRESHOLD_HOURS,
) -> DailyAttendanceResult:
    """
    Hours and status for a single record.

    A status already stored on the record is kept; open records (no
    clock-out yet) count zero hours.
    """
    if record.clock_in and record.clock_out:
        hours = calculate_attendance_hours(
            record.clock_in,
            record.clock_out,
            record.break_start,
            record.break_end,
            schedule,
        )
    else:
        hours = ZERO_HOURS

    status = record.status or determine_attendance_status(
        record.clock_in,
        record.clock_out,
        record.work_date,
        schedule,
        grace_period_minutes,
        half_day_hours,
    )

    return DailyAttendanceResult(work_date=record.work_date, status=status, hours=hours)


# ===========================================
# PERIOD AGGREGATION
# ===========================================

def calculate_attendance_summary(days: Sequence[DailyAttendanceResult]) -> AttendanceSummary:
    """Day counts, summed hours and attendance rate for a period."""
    total_days = len(days)
    present_days = sum(1 for d in days if d.status in ATTENDED_STATUSES)
    absent_days = sum(1 for d in days if d.status == AttendanceStatus.ABSENT)
    late_days = sum(1 for d in days if d.status == AttendanceStatus.LATE)
    half_days = sum(1 for d in days if d.status == AttendanceStatus.HALF_DAY)

    total_hours = sum((d.hours.total_hours for d in days), Decimal("0"))
    regular_hours = sum((d.hours.regular_hours for d in days), Decimal("0"))
    overtime_hours = sum((d.hours.overtime_hours for d in days), Decimal("0"))

    if total_days > 0:
        attendance_rate = Decimal(present_days) / Decimal(total_days) * 100
    else:
        attendance_rate = Decimal("0")

    return AttendanceSummary(
        total_days=total_days,
        present_days=present_days,
        absent_days=absent_days,
        late_days=late_days,
        half_days=half_days,
        total_hours=round_currency(total_hours),
        regular_hours=round_currency(regular_hours),
        overtime_hours=round_currency(overtime_hours),
        attendance_rate=round_currency(attendance_rate),
    )


def aggregate_attendance(
    records: Iterable[DailyAttendanceRecord],
    schedule: WorkSchedule = DEFAULT_WORK_SCHEDULE,
    grace_period_minutes: int = DEFAULT_GRACE_PERIOD_MINUTES,
    half_day_hours: Decimal = HALF_DAY_THRESHOLD_HOURS,
) -> AttendanceReport:
    """Evaluate every record of a pay period and summarise them."""
    days = [
        evaluate_attendance_day(record, schedule, grace_period_minutes, half_day_hours)
        for record in sorted(records, key=lambda r: r.work_date)
    ]
    summary = calculate_attendance_summary(days)

    logger.debug(
        "Aggregated %d attendance days: %d attended, %s hours",
        summary.total_days, summary.present_days, summary.total_hours,
    )

    return AttendanceReport(days=days, summary=summary)


def build_attendance_input(days: Sequence[DailyAttendanceResult]) -> AttendancePeriodSummary:
    """
    Payroll attendance input for a pay period.

    Work days are the PRESENT and LATE days; hours are summed over every
    record regardless of status.
    """
    return AttendancePeriodSummary(
        total_work_days=sum(1 for d in days if d.status in ATTENDED_STATUSES),
        total_work_hours=sum((d.hours.total_hours for d in days), Decimal("0")),
        regular_hours=sum((d.hours.regular_hours for d in days), Decimal("0")),
        overtime_hours=sum((d.hours.overtime_hours for d in days), Decimal("0")),
    )


# ===========================================
# DISPLAY & CALENDAR HELPERS
# ===========================================

def format_duration(hours) -> str:
    """Readable duration: "0h 0m", "45m", "8h", "7h 30m"."""
    value = to_decimal(hours)
    if value == 0:
        return "0h 0m"

    whole_hours = int(value.to_integral_value(rounding=ROUND_FLOOR))
    minutes = int(((value - whole_hours) * 60).quantize(Decimal("1"), rounding=ROUND_HALF_UP))
    if minutes == 60:
        whole_hours += 1
        minutes = 0

    if whole_hours == 0:
        return f"{minutes}m"
    if minutes == 0:
        return f"{whole_hours}h"
    return f"{whole_hours}h {minutes}m"


def get_date_range(period: str, now: Optional[datetime] = None) -> Tuple[datetime, datetime]:
    """Start and end of "today", "week" (Mon-Sun), "month" or "year"."""
    now = now or datetime.now()
    start_of_day = now.replace(hour=0, minute=0, second=0, microsecond=0)

    if period == "today":
        start = start_of_day
        end = start
    elif period == "week":
        start = start_of_day - timedelta(days=now.weekday())
        end = start + timedelta(days=6)
    elif period == "month":
        start = start_of_day.replace(day=1)
        end = start.replace(day=calendar.monthrange(now.year, now.month)[1])
    elif period == "year":
        start = start_of_day.replace(month=1, day=1)
        end = start.replace(month=12, day=31)
    else:
        raise ValueError(f"Unknown date range period: {period}")

    return start, end.replace(hour=23, minute=59, second=59, microsecond=999000)


def is_holiday(day: date, holidays: Iterable[date] = ()) -> bool:
    """Whether ``day`` falls on one of ``holidays`` (calendar date match)."""
    target = day.date() if isinstance(day, datetime) else day
    for holiday in holidays:
        holiday_date = holiday.date() if isinstance(holiday, datetime) else holiday
        if holiday_date == target:
            return True
    return False
