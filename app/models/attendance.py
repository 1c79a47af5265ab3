"""
Ledgerline - Attendance Models

Inputs and outputs of the attendance aggregator. Clock-in/out state tracking
lives in the host application; records arrive here already captured.
"""

from dataclasses import dataclass, field
from datetime import date, datetime
from decimal import Decimal
from enum import Enum
from typing import List, Optional


class AttendanceStatus(str, Enum):
    """Daily attendance classification."""
    PRESENT = "PRESENT"
    ABSENT = "ABSENT"
    LATE = "LATE"
    HALF_DAY = "HALF_DAY"
    WEEKEND = "WEEKEND"


@dataclass(frozen=True)
class WorkSchedule:
    """Scheduled working day. Times are "HH:MM" strings."""
    start_time: str = "09:00"
    end_time: str = "17:00"
    break_duration: int = 60  # minutes
    regular_hours_per_day: Decimal = Decimal("8")
    overtime_multiplier: Decimal = Decimal("1.5")


DEFAULT_WORK_SCHEDULE = WorkSchedule()


@dataclass(frozen=True)
class DailyAttendanceRecord:
    """Captured clock events for one employee on one day."""
    work_date: date
    clock_in: Optional[datetime] = None
    clock_out: Optional[datetime] = None
    break_start: Optional[datetime] = None
    break_end: Optional[datetime] = None
    status: Optional[AttendanceStatus] = None


@dataclass(frozen=True)
class AttendanceHours:
    """Worked hours for a single day."""
    total_hours: Decimal
    regular_hours: Decimal
    overtime_hours: Decimal
    break_duration: int = 0  # minutes


@dataclass(frozen=True)
class DailyAttendanceResult:
    """Hours and status computed for one record."""
    work_date: date
    status: AttendanceStatus
    hours: AttendanceHours


@dataclass(frozen=True)
class AttendanceSummary:
    """Attendance statistics for a period."""
    total_days: int
    present_days: int
    absent_days: int
    late_days: int
    half_days: int
    total_hours: Decimal
    regular_hours: Decimal
    overtime_hours: Decimal
    attendance_rate: Decimal


@dataclass(frozen=True)
class AttendanceReport:
    """Per-day results together with the period summary."""
    days: List[DailyAttendanceResult] = field(default_factory=list)
    summary: Optional[AttendanceSummary] = None
