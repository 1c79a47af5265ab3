"""
Ledgerline - Attendance Service Tests

Unit tests for worked hours, daily status and period aggregation.
"""

from datetime import date, datetime, timedelta
from decimal import Decimal

import pytest

from app.models.attendance import (
    AttendanceStatus,
    DailyAttendanceRecord,
    WorkSchedule,
)
from app.services.attendance_service import (
    aggregate_attendance,
    build_attendance_input,
    calculate_attendance_hours,
    determine_attendance_status,
    evaluate_attendance_day,
    format_duration,
    get_date_range,
    is_early_departure,
    is_holiday,
    is_late_arrival,
    parse_time_string,
)
from app.utils.error_handling import InvalidTimeFormatException


def at(day: date, hour: int, minute: int = 0) -> datetime:
    return datetime(day.year, day.month, day.day, hour, minute)


class TestAttendanceHours:
    """Test worked hour calculation."""

    def test_full_day_with_break(self, monday):
        hours = calculate_attendance_hours(
            at(monday, 9), at(monday, 18), at(monday, 12), at(monday, 13)
        )

        assert hours.total_hours == Decimal("8.00")
        assert hours.regular_hours == Decimal("8.00")
        assert hours.overtime_hours == Decimal("0.00")
        assert hours.break_duration == 60

    def test_overtime(self, monday):
        hours = calculate_attendance_hours(at(monday, 8), at(monday, 19, 30))

        assert hours.total_hours == Decimal("11.50")
        assert hours.regular_hours == Decimal("8.00")
        assert hours.overtime_hours == Decimal("3.50")
        assert hours.break_duration == 0

    def test_break_ignored_without_end(self, monday):
        hours = calculate_attendance_hours(at(monday, 9), at(monday, 13), break_start=at(monday, 11))

        assert hours.total_hours == Decimal("4.00")
        assert hours.break_duration == 0

    def test_custom_regular_hours(self, monday):
        schedule = WorkSchedule(regular_hours_per_day=Decimal("6"))
        hours = calculate_attendance_hours(at(monday, 9), at(monday, 17), schedule=schedule)

        assert hours.regular_hours == Decimal("6.00")
        assert hours.overtime_hours == Decimal("2.00")

    def test_rounding_to_two_places(self, monday):
        hours = calculate_attendance_hours(at(monday, 9), at(monday, 9, 20))

        assert hours.total_hours == Decimal("0.33")


class TestLateAndEarly:
    """Test schedule comparisons."""

    def test_within_grace_period(self, monday):
        assert not is_late_arrival(at(monday, 9, 15))

    def test_after_grace_period(self, monday):
        assert is_late_arrival(at(monday, 9, 16))

    def test_custom_grace_period(self, monday):
        assert is_late_arrival(at(monday, 9, 6), "09:00", grace_period_minutes=5)

    def test_early_departure(self, monday):
        assert is_early_departure(at(monday, 16, 44))
        assert not is_early_departure(at(monday, 16, 45))


class TestAttendanceStatus:
    """Test daily classification."""

    def test_weekend_wins(self):
        saturday = date(2024, 3, 9)
        assert determine_attendance_status(at(saturday, 9), at(saturday, 17), saturday) == AttendanceStatus.WEEKEND

    def test_absent(self, monday):
        assert determine_attendance_status(None, None, monday) == AttendanceStatus.ABSENT

    def test_late(self, monday):
        assert determine_attendance_status(at(monday, 10), at(monday, 11), monday) == AttendanceStatus.LATE

    def test_half_day(self, monday):
        assert determine_attendance_status(at(monday, 9), at(monday, 12), monday) == AttendanceStatus.HALF_DAY

    def test_present(self, monday):
        assert determine_attendance_status(at(monday, 9), at(monday, 17), monday) == AttendanceStatus.PRESENT

    def test_present_while_still_clocked_in(self, monday):
        assert determine_attendance_status(at(monday, 9), None, monday) == AttendanceStatus.PRESENT

    def test_stored_status_is_kept(self, monday):
        record = DailyAttendanceRecord(
            work_date=monday,
            clock_in=at(monday, 9),
            clock_out=at(monday, 17),
            status=AttendanceStatus.HALF_DAY,
        )

        result = evaluate_attendance_day(record)

        assert result.status == AttendanceStatus.HALF_DAY
        assert result.hours.total_hours == Decimal("8.00")

    def test_open_record_has_no_hours(self, monday):
        result = evaluate_attendance_day(DailyAttendanceRecord(work_date=monday, clock_in=at(monday, 9)))

        assert result.hours.total_hours == Decimal("0.00")


class TestAttendanceAggregation:
    """Test period summaries."""

    def _week(self, monday):
        return [
            DailyAttendanceRecord(monday + timedelta(days=2)),  # absent Wednesday
            DailyAttendanceRecord(monday, at(monday, 9), at(monday, 18), at(monday, 12), at(monday, 13)),
            DailyAttendanceRecord(
                monday + timedelta(days=1),
                at(monday + timedelta(days=1), 9, 30),
                at(monday + timedelta(days=1), 19, 30),
            ),
            DailyAttendanceRecord(
                monday + timedelta(days=3),
                at(monday + timedelta(days=3), 9),
                at(monday + timedelta(days=3), 12),
            ),
        ]

    def test_summary(self, monday):
        report = aggregate_attendance(self._week(monday))
        summary = report.summary

        assert [d.work_date for d in report.days] == sorted(d.work_date for d in report.days)
        assert summary.total_days == 4
        assert summary.present_days == 2
        assert summary.late_days == 1
        assert summary.absent_days == 1
        assert summary.half_days == 1
        assert summary.total_hours == Decimal("21.00")
        assert summary.regular_hours == Decimal("19.00")
        assert summary.overtime_hours == Decimal("2.00")
        assert summary.attendance_rate == Decimal("50.00")

    def test_empty_period(self):
        summary = aggregate_attendance([]).summary

        assert summary.total_days == 0
        assert summary.attendance_rate == Decimal("0")

    def test_payroll_input(self, monday):
        report = aggregate_attendance(self._week(monday))
        payroll_input = build_attendance_input(report.days)

        assert payroll_input.total_work_days == 2
        assert payroll_input.total_work_hours == Decimal("21.00")
        assert payroll_input.regular_hours == Decimal("19.00")
        assert payroll_input.overtime_hours == Decimal("2.00")


class TestHelpers:
    """Test formatting and calendar helpers."""

    @pytest.mark.parametrize("hours,expected", [
        (0, "0h 0m"),
        (Decimal("0.75"), "45m"),
        (8, "8h"),
        (Decimal("7.5"), "7h 30m"),
        (Decimal("1.999"), "2h"),
    ])
    def test_format_duration(self, hours, expected):
        assert format_duration(hours) == expected

    def test_parse_time_string(self):
        assert parse_time_string("08:05") == (8, 5)

    @pytest.mark.parametrize("value", ["25:00", "9am", "", "12:60"])
    def test_parse_time_string_rejects(self, value):
        with pytest.raises(InvalidTimeFormatException):
            parse_time_string(value)

    def test_date_range_week(self):
        start, end = get_date_range("week", datetime(2024, 3, 7, 15, 0))

        assert start == datetime(2024, 3, 4)
        assert end == datetime(2024, 3, 10, 23, 59, 59, 999000)

    def test_date_range_month(self):
        start, end = get_date_range("month", datetime(2023, 2, 10))

        assert start == datetime(2023, 2, 1)
        assert end.date() == date(2023, 2, 28)

    def test_date_range_unknown(self):
        with pytest.raises(ValueError):
            get_date_range("decade")

    def test_is_holiday(self, monday):
        assert is_holiday(monday, [date(2024, 1, 1), monday])
        assert is_holiday(at(monday, 10), [monday])
        assert not is_holiday(monday, [])
