"""
Ledgerline - Attendance Schemas
"""

from datetime import date, datetime
from decimal import Decimal
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from app.models.attendance import (
    AttendanceStatus,
    DailyAttendanceRecord,
    DailyAttendanceResult,
    WorkSchedule,
)
from app.schemas.payroll import AttendancePeriodSummarySchema
from app.services.attendance_service import parse_time_string
from app.utils.error_handling import InvalidTimeFormatException


def _check_clock_order(clock_in, clock_out, break_start=None, break_end=None) -> None:
    stamps = [s for s in (clock_in, clock_out, break_start, break_end) if s is not None]
    if len({s.utcoffset() is None for s in stamps}) > 1:
        raise ValueError("clock timestamps must all carry, or all omit, a UTC offset")

    if clock_in and clock_out and clock_out < clock_in:
        raise ValueError("clock_out must not be before clock_in")
    if break_start and break_end:
        if break_end < break_start:
            raise ValueError("break_end must not be before break_start")
        if clock_in and clock_out and (break_start < clock_in or break_end > clock_out):
            raise ValueError("break must fall between clock_in and clock_out")


class WorkScheduleSchema(BaseModel):
    """Daily work schedule."""
    start_time: str = Field(default="09:00", description="HH:MM")
    end_time: str = Field(default="17:00", description="HH:MM")
    break_duration: int = Field(default=60, ge=0, description="Minutes")
    regular_hours_per_day: Decimal = Field(default=Decimal("8"), gt=0)
    overtime_multiplier: Decimal = Field(default=Decimal("1.5"), ge=0)

    @field_validator("start_time", "end_time")
    @classmethod
    def validate_time(cls, v: str) -> str:
        try:
            hours, minutes = parse_time_string(v)
        except InvalidTimeFormatException as exc:
            raise ValueError(exc.message)
        return f"{hours:02d}:{minutes:02d}"

    def to_model(self) -> WorkSchedule:
        return WorkSchedule(
            start_time=self.start_time,
            end_time=self.end_time,
            break_duration=self.break_duration,
            regular_hours_per_day=self.regular_hours_per_day,
            overtime_multiplier=self.overtime_multiplier,
        )


class AttendanceHoursRequest(BaseModel):
    """Clock events of a single day."""
    clock_in: datetime
    clock_out: datetime
    break_start: Optional[datetime] = None
    break_end: Optional[datetime] = None
    schedule: WorkScheduleSchema = Field(default_factory=WorkScheduleSchema)

    @model_validator(mode="after")
    def validate_order(self):
        _check_clock_order(self.clock_in, self.clock_out, self.break_start, self.break_end)
        return self


class AttendanceHoursResponse(BaseModel):
    total_hours: Decimal
    regular_hours: Decimal
    overtime_hours: Decimal
    break_duration: int
    formatted: str

    model_config = ConfigDict(from_attributes=True)


class AttendanceStatusRequest(BaseModel):
    """Inputs for classifying one day."""
    work_date: date
    clock_in: Optional[datetime] = None
    clock_out: Optional[datetime] = None
    schedule: WorkScheduleSchema = Field(default_factory=WorkScheduleSchema)
    grace_period_minutes: Optional[int] = Field(None, ge=0)


class AttendanceStatusResponse(BaseModel):
    work_date: date
    status: AttendanceStatus
    is_late: bool
    is_early_departure: bool


class AttendanceRecordSchema(BaseModel):
    """Captured attendance record."""
    work_date: date
    clock_in: Optional[datetime] = None
    clock_out: Optional[datetime] = None
    break_start: Optional[datetime] = None
    break_end: Optional[datetime] = None
    status: Optional[AttendanceStatus] = None

    @model_validator(mode="after")
    def validate_order(self):
        _check_clock_order(self.clock_in, self.clock_out, self.break_start, self.break_end)
        return self

    def to_model(self) -> DailyAttendanceRecord:
        return DailyAttendanceRecord(
            work_date=self.work_date,
            clock_in=self.clock_in,
            clock_out=self.clock_out,
            break_start=self.break_start,
            break_end=self.break_end,
            status=self.status,
        )


class AttendanceSummaryRequest(BaseModel):
    """Attendance records of a pay period."""
    records: List[AttendanceRecordSchema] = Field(default_factory=list)
    schedule: WorkScheduleSchema = Field(default_factory=WorkScheduleSchema)
    grace_period_minutes: Optional[int] = Field(None, ge=0)
    holidays: List[date] = Field(default_factory=list, description="Dates dropped from the period")
    period_start: Optional[date] = Field(None, description="Records before this date are ignored")
    period_end: Optional[date] = Field(None, description="Records after this date are ignored")


class DailyAttendanceResponse(BaseModel):
    work_date: date
    status: AttendanceStatus
    total_hours: Decimal
    regular_hours: Decimal
    overtime_hours: Decimal
    break_duration: int

    @classmethod
    def from_result(cls, result: DailyAttendanceResult) -> "DailyAttendanceResponse":
        return cls(
            work_date=result.work_date,
            status=result.status,
            total_hours=result.hours.total_hours,
            regular_hours=result.hours.regular_hours,
            overtime_hours=result.hours.overtime_hours,
            break_duration=result.hours.break_duration,
        )


class AttendanceSummaryResponse(BaseModel):
    total_days: int
    present_days: int
    absent_days: int
    late_days: int
    half_days: int
    total_hours: Decimal
    regular_hours: Decimal
    overtime_hours: Decimal
    attendance_rate: Decimal

    model_config = ConfigDict(from_attributes=True)


class AttendanceReportResponse(BaseModel):
    """Per-day results, period summary and the derived payroll attendance input."""
    days: List[DailyAttendanceResponse]
    summary: AttendanceSummaryResponse
    payroll_attendance: AttendancePeriodSummarySchema
