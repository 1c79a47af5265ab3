"""
Ledgerline - Payroll Calculator Tests

Unit tests for the gross-to-net payroll engine.
"""

from dataclasses import replace
from datetime import datetime, timezone
from decimal import Decimal

import pytest

from app.models.payroll import (
    AttendancePeriodSummary,
    DeductionCategory,
    EmployeeDeduction,
    EmployeeEarning,
    EmployeePayData,
    PayFrequency,
    StatutoryContribution,
    TaxBracket,
)
from app.services.payroll_service import (
    DEFAULT_PAYROLL_SETTINGS,
    PayrollCalculator,
    calculate_payroll,
    calculate_payroll_summary,
    get_pay_period_dates,
)
from app.utils.currency import round_currency


def _line(result, token):
    return [d for d in result.deductions_breakdown if token in d.type.lower()]


class TestHourlyRateAndBasePay:
    """Test base pay from salary and attendance."""

    def test_hourly_rate(self, calculator):
        """22,000 over 22 days x 8 hours is 125 an hour."""
        assert calculator.calculate_hourly_rate(Decimal("22000")) == Decimal("125")

    def test_regular_and_overtime_pay(self, calculator, employee, full_month_attendance):
        result = calculator.calculate(employee, full_month_attendance)

        assert result.hourly_rate == Decimal("125.00")
        assert result.regular_pay == Decimal("22000.00")
        assert result.overtime_pay == Decimal("1562.50")
        assert result.gross_pay == Decimal("23562.50")

    def test_work_summary_is_echoed(self, calculator, employee, full_month_attendance):
        result = calculator.calculate(employee, full_month_attendance)

        assert result.total_work_days == 22
        assert result.total_work_hours == Decimal("186")
        assert result.regular_hours == Decimal("176")
        assert result.overtime_hours == Decimal("10")
        assert result.base_salary == Decimal("22000")

    def test_zero_base_salary(self, calculator, full_month_attendance):
        result = calculator.calculate(EmployeePayData(base_salary=Decimal("0")), full_month_attendance)

        assert result.gross_pay == Decimal("0.00")
        assert result.withholding_tax == Decimal("0.00")
        assert result.net_pay == Decimal("0.00")
        # Statutory lines are still present, at zero
        assert len(result.deductions_breakdown) == 4


class TestStatutoryInjection:
    """Test automatic SSS / PhilHealth / Pag-IBIG deductions."""

    def test_all_schemes_injected_with_caps(self, calculator, employee, full_month_attendance):
        result = calculator.calculate(employee, full_month_attendance)

        types = [d.type for d in result.deductions_breakdown]
        assert types == [
            "SSS Contribution",
            "PhilHealth Contribution",
            "Pag-IBIG Contribution",
            "Withholding Tax",
        ]

        sss, philhealth, pagibig, tax = result.deductions_breakdown
        assert sss.amount == Decimal("1060.3125")
        assert philhealth.amount == Decimal("647.96875")
        # Pag-IBIG capped at 5,000
        assert pagibig.amount == Decimal("100.00")
        assert tax.frequency == PayFrequency.MONTHLY.value

    def test_scenario_full_month(self, calculator, employee, full_month_attendance):
        result = calculator.calculate(employee, full_month_attendance)

        assert result.taxable_income == Decimal("21754.22")
        assert result.withholding_tax == Decimal("184.18")
        assert result.total_deductions == Decimal("1992.46")
        assert result.net_pay == Decimal("21570.04")

    @pytest.mark.parametrize("gross", ["25000", "30000", "1000000"])
    def test_sss_cap_independent_of_excess(self, calculator, gross):
        result = calculator.calculate(
            EmployeePayData(base_salary=Decimal("0")),
            AttendancePeriodSummary(),
            earnings=[EmployeeEarning(type="Allowance", amount=Decimal(gross))],
        )

        sss = _line(result, "sss")[0]
        assert sss.amount == Decimal("25000") * Decimal("0.045")

    @pytest.mark.parametrize("gross", ["100000", "150000", "1000000"])
    def test_philhealth_cap_independent_of_excess(self, calculator, gross):
        result = calculator.calculate(
            EmployeePayData(base_salary=Decimal("0")),
            AttendancePeriodSummary(),
            earnings=[EmployeeEarning(type="Allowance", amount=Decimal(gross))],
        )

        philhealth = _line(result, "philhealth")[0]
        assert philhealth.amount == Decimal("100000") * Decimal("0.0275")
        assert _line(result, "pag-ibig")[0].amount == Decimal("5000") * Decimal("0.02")

    def test_existing_sss_deduction_suppresses_injection(self, calculator, employee, full_month_attendance):
        result = calculator.calculate(
            employee,
            full_month_attendance,
            deductions=[EmployeeDeduction(type="Special SSS Loan", amount=Decimal("300"))],
        )

        sss_lines = _line(result, "sss")
        assert len(sss_lines) == 1
        assert sss_lines[0].type == "Special SSS Loan"
        assert sss_lines[0].amount == Decimal("300")

    def test_match_is_case_insensitive(self, calculator, employee, full_month_attendance):
        result = calculator.calculate(
            employee,
            full_month_attendance,
            deductions=[EmployeeDeduction(type="PAG-IBIG MP2", amount=Decimal("200"))],
        )

        assert len(_line(result, "pag-ibig")) == 1
        assert len(result.deductions_breakdown) == 4

    def test_category_overrides_name_matching(self, calculator, employee, full_month_attendance):
        result = calculator.calculate(
            employee,
            full_month_attendance,
            deductions=[
                EmployeeDeduction(
                    type="Social security (manual)",
                    amount=Decimal("1000"),
                    category=DeductionCategory.STATUTORY_SSS,
                ),
                EmployeeDeduction(
                    type="SSS salary loan",
                    amount=Decimal("500"),
                    category=DeductionCategory.OTHER,
                ),
            ],
        )

        types = [d.type for d in result.deductions_breakdown]
        assert "SSS Contribution" not in types
        assert "PhilHealth Contribution" in types
        # Only the tagged line reduces taxable income
        expected_taxable = (
            Decimal("23562.50") - Decimal("1000") - Decimal("647.96875") - Decimal("100")
        )
        assert result.taxable_income == round_currency(expected_taxable)

    def test_inactive_statutory_deduction_does_not_suppress(self, calculator, employee, full_month_attendance):
        result = calculator.calculate(
            employee,
            full_month_attendance,
            deductions=[EmployeeDeduction(type="SSS", amount=Decimal("999"), is_active=False)],
        )

        sss_lines = _line(result, "sss")
        assert [d.type for d in sss_lines] == ["SSS Contribution"]


class TestEarningsAndDeductions:
    """Test earnings and deduction normalization."""

    def test_annual_earning_normalizes_to_monthly(self, calculator):
        assert calculator.to_monthly_amount(Decimal("1200"), PayFrequency.ANNUALLY) == Decimal("100")

    def test_daily_earning_uses_working_days(self, calculator):
        assert calculator.to_monthly_amount(Decimal("100"), "DAILY") == Decimal("2200")

    def test_weekly_and_biweekly_factors(self, calculator):
        assert calculator.to_monthly_amount(Decimal("100"), "WEEKLY") == Decimal("433.00")
        assert calculator.to_monthly_amount(Decimal("100"), "BIWEEKLY") == Decimal("217.00")

    def test_quarterly(self, calculator):
        assert calculator.to_monthly_amount(Decimal("300"), "QUARTERLY") == Decimal("100")

    @pytest.mark.parametrize("frequency", ["MONTHLY", "ONE_TIME", "FORTNIGHTLY"])
    def test_pass_through_frequencies(self, calculator, frequency):
        assert calculator.to_monthly_amount(Decimal("750"), frequency) == Decimal("750")

    def test_one_time_bonus_without_attendance(self, calculator, employee, no_attendance):
        result = calculator.calculate(
            employee,
            no_attendance,
            earnings=[EmployeeEarning(type="Bonus", amount=Decimal("5000"), frequency="ONE_TIME")],
        )

        assert result.regular_pay == Decimal("0.00")
        assert result.overtime_pay == Decimal("0.00")
        assert result.total_earnings == Decimal("5000.00")
        assert result.gross_pay == Decimal("5000.00")

        sss, philhealth, pagibig, tax = result.deductions_breakdown
        assert sss.amount == Decimal("225.000")
        assert philhealth.amount == Decimal("137.5000")
        assert pagibig.amount == Decimal("100.00")
        assert tax.amount == Decimal("0")
        assert result.net_pay == Decimal("4537.50")

    def test_inactive_earnings_are_ignored(self, calculator, employee, no_attendance):
        result = calculator.calculate(
            employee,
            no_attendance,
            earnings=[
                EmployeeEarning(type="Rice Allowance", amount=Decimal("2000")),
                EmployeeEarning(type="Old Allowance", amount=Decimal("9999"), is_active=False),
            ],
        )

        assert [e.type for e in result.earnings_breakdown] == ["Rice Allowance"]
        assert result.total_earnings == Decimal("2000.00")

    def test_flat_deduction_and_line_count(self, calculator, employee, full_month_attendance):
        result = calculator.calculate(
            employee,
            full_month_attendance,
            deductions=[EmployeeDeduction(type="Uniform Fee", amount=Decimal("500"))],
        )

        assert [d.type for d in result.deductions_breakdown] == [
            "Uniform Fee",
            "SSS Contribution",
            "PhilHealth Contribution",
            "Pag-IBIG Contribution",
            "Withholding Tax",
        ]
        exact_sum = sum((d.amount for d in result.deductions_breakdown), Decimal("0"))
        assert result.total_deductions == round_currency(exact_sum)
        assert result.total_deductions == Decimal("2492.46")
        assert result.net_pay == Decimal("21070.04")

    def test_percentage_deduction_of_gross(self, calculator, employee, full_month_attendance):
        result = calculator.calculate(
            employee,
            full_month_attendance,
            deductions=[EmployeeDeduction(type="Coop Savings", percentage=Decimal("10"))],
        )

        coop = result.deductions_breakdown[0]
        assert coop.amount == Decimal("2356.250")

    def test_amount_wins_over_percentage(self, calculator):
        deduction = EmployeeDeduction(type="Loan", amount=Decimal("100"), percentage=Decimal("50"))
        assert calculator.deduction_base_amount(deduction, Decimal("10000")) == Decimal("100")

    def test_zero_amount_falls_back_to_percentage(self, calculator):
        deduction = EmployeeDeduction(type="Loan", amount=Decimal("0"), percentage=Decimal("5"))
        assert calculator.deduction_base_amount(deduction, Decimal("10000")) == Decimal("500")

    def test_neither_amount_nor_percentage(self, calculator):
        deduction = EmployeeDeduction(type="Empty")
        assert calculator.deduction_base_amount(deduction, Decimal("10000")) == Decimal("0")

    def test_weekly_deduction_normalized(self, calculator, employee, full_month_attendance):
        result = calculator.calculate(
            employee,
            full_month_attendance,
            deductions=[EmployeeDeduction(type="Parking", amount=Decimal("100"), frequency="WEEKLY")],
        )

        assert result.deductions_breakdown[0].amount == Decimal("433.00")
        assert result.deductions_breakdown[0].frequency == "WEEKLY"


class TestConservation:
    """Published totals add up."""

    @pytest.mark.parametrize("salary,regular,overtime,bonus", [
        ("22000", "176", "10", "0"),
        ("18333.33", "160.5", "3.25", "1234.567"),
        ("99999.99", "176", "0", "0.005"),
        ("12345.67", "33.3", "7.7", "0"),
    ])
    def test_net_and_gross_identities(self, calculator, salary, regular, overtime, bonus):
        result = calculator.calculate(
            EmployeePayData(base_salary=Decimal(salary)),
            AttendancePeriodSummary(regular_hours=Decimal(regular), overtime_hours=Decimal(overtime)),
            earnings=[EmployeeEarning(type="Bonus", amount=Decimal(bonus), frequency="ONE_TIME")],
        )

        assert result.gross_pay == round_currency(
            result.regular_pay + result.overtime_pay + result.total_earnings
        )
        assert result.net_pay == round_currency(result.gross_pay - result.total_deductions)


class TestSettingsOverride:
    """Settings are passed in per call."""

    def test_custom_settings(self, employee, full_month_attendance):
        settings = replace(
            DEFAULT_PAYROLL_SETTINGS,
            working_days_per_month=Decimal("20"),
            overtime_multiplier=Decimal("2"),
            tax_brackets=(TaxBracket(Decimal("0"), None, Decimal("0.10")),),
            sss_contribution=StatutoryContribution(Decimal("0"), Decimal("0"), Decimal("0")),
        )

        result = calculate_payroll(employee, full_month_attendance, settings=settings)

        assert result.hourly_rate == Decimal("137.50")
        assert result.overtime_pay == Decimal("2750.00")

    def test_default_settings_unchanged(self, employee, full_month_attendance):
        calculate_payroll(
            employee,
            full_month_attendance,
            settings=replace(DEFAULT_PAYROLL_SETTINGS, overtime_multiplier=Decimal("3")),
        )

        assert DEFAULT_PAYROLL_SETTINGS.overtime_multiplier == Decimal("1.25")
        assert PayrollCalculator().calculate(employee, full_month_attendance).overtime_pay == Decimal("1562.50")


class TestPayrollSummary:
    """Test batch totals."""

    def test_summary_totals_and_averages(self, calculator, employee, full_month_attendance, no_attendance):
        payrolls = [
            calculator.calculate(employee, full_month_attendance),
            calculator.calculate(
                employee,
                no_attendance,
                earnings=[EmployeeEarning(type="Bonus", amount=Decimal("5000"), frequency="ONE_TIME")],
            ),
        ]

        summary = calculate_payroll_summary(payrolls)

        assert summary.total_employees == 2
        assert summary.total_gross_pay == Decimal("28562.50")
        assert summary.total_net_pay == Decimal("26107.54")
        assert summary.average_gross_pay == Decimal("14281.25")
        assert summary.average_net_pay == Decimal("13053.77")

    def test_empty_summary(self):
        summary = calculate_payroll_summary([])

        assert summary.total_employees == 0
        assert summary.average_gross_pay == Decimal("0")
        assert summary.average_net_pay == Decimal("0")


class TestPayPeriods:
    """Test pay period boundaries."""

    def test_monthly(self):
        start, end = get_pay_period_dates("monthly", datetime(2024, 2, 14, 10, 30))

        assert start == datetime(2024, 2, 1)
        assert end == datetime(2024, 2, 29, 23, 59, 59, 999000)

    def test_weekly_runs_monday_to_sunday(self):
        start, end = get_pay_period_dates("weekly", datetime(2024, 3, 7, 8, 0))

        assert start == datetime(2024, 3, 4)
        assert end == datetime(2024, 3, 10, 23, 59, 59, 999000)

    def test_biweekly_blocks_from_january_first(self):
        start, end = get_pay_period_dates("biweekly", datetime(2024, 1, 15))

        assert start == datetime(2024, 1, 15)
        assert end == datetime(2024, 1, 28, 23, 59, 59, 999000)

    def test_biweekly_contains_reference_date(self):
        reference = datetime(2024, 1, 14, 12, 0)
        start, end = get_pay_period_dates("biweekly", reference)

        assert start == datetime(2024, 1, 1)
        assert start <= reference <= end

    @pytest.mark.parametrize("period_type", ["monthly", "biweekly", "weekly"])
    def test_aware_reference_keeps_timezone(self, period_type):
        reference = datetime(2024, 3, 7, 8, 0, tzinfo=timezone.utc)
        start, end = get_pay_period_dates(period_type, reference)

        assert start.tzinfo is timezone.utc
        assert end.tzinfo is timezone.utc
        assert start <= reference <= end

    def test_unknown_period_type(self):
        with pytest.raises(ValueError):
            get_pay_period_dates("fortnightly", datetime(2024, 1, 1))
