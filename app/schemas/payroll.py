"""
Ledgerline - Payroll Schemas

Pydantic schemas for payroll calculation requests and responses.
"""

from datetime import datetime
from decimal import Decimal
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field, model_validator

from app.config import get_settings
from app.models.payroll import (
    AttendancePeriodSummary,
    DeductionCategory,
    EmployeeDeduction,
    EmployeeEarning,
    EmployeePayData,
    PayFrequency,
    PayrollSettings,
    StatutoryContribution,
    TaxBracket,
)
from app.services.payroll_service import PayPeriodType
from app.utils.error_handling import InvalidTaxBracketsException, validate_tax_brackets


def _check_brackets(brackets) -> None:
    try:
        validate_tax_brackets(brackets)
    except InvalidTaxBracketsException as exc:
        raise ValueError(exc.message)


# ===========================================
# SETTINGS SCHEMAS
# ===========================================

class TaxBracketSchema(BaseModel):
    """Annual income tax bracket."""
    min: Decimal = Field(..., ge=0)
    max: Optional[Decimal] = Field(None, ge=0, description="Upper bound; null for the top bracket")
    rate: Decimal = Field(..., ge=0, le=1, description="Rate as a fraction, e.g. 0.25")

    model_config = ConfigDict(from_attributes=True)

    def to_model(self) -> TaxBracket:
        return TaxBracket(min=self.min, max=self.max, rate=self.rate)


class StatutoryContributionSchema(BaseModel):
    """Statutory contribution schedule."""
    employee_rate: Decimal = Field(..., ge=0, le=1)
    employer_rate: Decimal = Field(..., ge=0, le=1)
    max_salary: Decimal = Field(..., ge=0)

    model_config = ConfigDict(from_attributes=True)

    def to_model(self) -> StatutoryContribution:
        return StatutoryContribution(
            employee_rate=self.employee_rate,
            employer_rate=self.employer_rate,
            max_salary=self.max_salary,
        )


class PayrollSettingsSchema(BaseModel):
    """Payroll settings used for a calculation."""
    working_days_per_month: Decimal = Field(..., gt=0)
    working_hours_per_day: Decimal = Field(..., gt=0)
    overtime_multiplier: Decimal = Field(..., ge=0)
    tax_brackets: List[TaxBracketSchema] = Field(..., min_length=1)
    sss_contribution: StatutoryContributionSchema
    philhealth_contribution: StatutoryContributionSchema
    pagibig_contribution: StatutoryContributionSchema

    model_config = ConfigDict(from_attributes=True)

    @model_validator(mode="after")
    def validate_brackets(self):
        _check_brackets(self.tax_brackets)
        return self

    def to_model(self) -> PayrollSettings:
        return PayrollSettings(
            working_days_per_month=self.working_days_per_month,
            working_hours_per_day=self.working_hours_per_day,
            overtime_multiplier=self.overtime_multiplier,
            tax_brackets=tuple(b.to_model() for b in self.tax_brackets),
            sss_contribution=self.sss_contribution.to_model(),
            philhealth_contribution=self.philhealth_contribution.to_model(),
            pagibig_contribution=self.pagibig_contribution.to_model(),
        )


# ===========================================
# CALCULATION REQUEST SCHEMAS
# ===========================================

class EmployeePayDataSchema(BaseModel):
    """Employee base pay data."""
    id: Optional[str] = None
    base_salary: Decimal = Field(..., ge=0)
    currency: str = Field(
        default_factory=lambda: get_settings().default_currency,
        min_length=3,
        max_length=3,
    )
    employment_type: Optional[str] = None

    def to_model(self) -> EmployeePayData:
        return EmployeePayData(
            id=self.id,
            base_salary=self.base_salary,
            currency=self.currency,
            employment_type=self.employment_type,
        )


class AttendancePeriodSummarySchema(BaseModel):
    """Attendance aggregated over the pay period."""
    total_work_days: int = Field(default=0, ge=0)
    total_work_hours: Decimal = Field(default=Decimal("0"), ge=0)
    regular_hours: Decimal = Field(default=Decimal("0"), ge=0)
    overtime_hours: Decimal = Field(default=Decimal("0"), ge=0)

    model_config = ConfigDict(from_attributes=True)

    def to_model(self) -> AttendancePeriodSummary:
        return AttendancePeriodSummary(
            total_work_days=self.total_work_days,
            total_work_hours=self.total_work_hours,
            regular_hours=self.regular_hours,
            overtime_hours=self.overtime_hours,
        )


class EmployeeEarningSchema(BaseModel):
    """Recurring or one-time earning."""
    type: str = Field(..., min_length=1, max_length=100)
    amount: Decimal = Field(..., ge=0)
    frequency: PayFrequency = PayFrequency.MONTHLY
    is_active: bool = True

    def to_model(self) -> EmployeeEarning:
        return EmployeeEarning(
            type=self.type,
            amount=self.amount,
            frequency=self.frequency.value,
            is_active=self.is_active,
        )


class EmployeeDeductionSchema(BaseModel):
    """Recurring or one-time deduction (flat amount or percentage of gross)."""
    type: str = Field(..., min_length=1, max_length=100)
    amount: Optional[Decimal] = Field(None, ge=0)
    percentage: Optional[Decimal] = Field(None, ge=0, le=100)
    frequency: PayFrequency = PayFrequency.MONTHLY
    is_active: bool = True
    category: Optional[DeductionCategory] = None

    @model_validator(mode="after")
    def require_amount_or_percentage(self):
        if self.amount is None and self.percentage is None:
            raise ValueError("Either amount or percentage is required")
        return self

    def to_model(self) -> EmployeeDeduction:
        return EmployeeDeduction(
            type=self.type,
            amount=self.amount,
            percentage=self.percentage,
            frequency=self.frequency.value,
            is_active=self.is_active,
            category=self.category,
        )


class PayrollCalculateRequest(BaseModel):
    """Request for a single employee payroll calculation."""
    employee: EmployeePayDataSchema
    attendance: AttendancePeriodSummarySchema = Field(default_factory=AttendancePeriodSummarySchema)
    earnings: List[EmployeeEarningSchema] = Field(default_factory=list)
    deductions: List[EmployeeDeductionSchema] = Field(default_factory=list)
    settings: Optional[PayrollSettingsSchema] = Field(
        None, description="Overrides the configured payroll settings"
    )


# ===========================================
# CALCULATION RESPONSE SCHEMAS
# ===========================================

class PayrollLineItemResponse(BaseModel):
    """Breakdown line (monthly amount, not rounded)."""
    type: str
    amount: Decimal
    frequency: str

    model_config = ConfigDict(from_attributes=True)


class PayrollCalculationResponse(BaseModel):
    """Full payroll calculation result."""
    # Work summary
    total_work_days: int
    total_work_hours: Decimal
    regular_hours: Decimal
    overtime_hours: Decimal

    # Base pay
    base_salary: Decimal
    hourly_rate: Decimal
    regular_pay: Decimal
    overtime_pay: Decimal

    # Earnings
    total_earnings: Decimal
    earnings_breakdown: List[PayrollLineItemResponse]

    # Deductions
    total_deductions: Decimal
    deductions_breakdown: List[PayrollLineItemResponse]

    # Final calculations
    gross_pay: Decimal
    taxable_income: Decimal
    withholding_tax: Decimal
    net_pay: Decimal

    model_config = ConfigDict(from_attributes=True)


class PayrollTotalsSchema(BaseModel):
    """Figures of one calculated payroll needed for batch totals."""
    gross_pay: Decimal
    total_deductions: Decimal
    net_pay: Decimal


class PayrollSummaryRequest(BaseModel):
    """Calculated payrolls to summarise."""
    payrolls: List[PayrollTotalsSchema] = Field(default_factory=list)


class PayrollSummaryResponse(BaseModel):
    """Totals across several payrolls."""
    total_employees: int
    total_gross_pay: Decimal
    total_deductions: Decimal
    total_net_pay: Decimal
    average_gross_pay: Decimal
    average_net_pay: Decimal

    model_config = ConfigDict(from_attributes=True)


class PayPeriodResponse(BaseModel):
    """Pay period boundaries."""
    period_type: PayPeriodType
    start: datetime
    end: datetime


# ===========================================
# WITHHOLDING TAX SCHEMAS
# ===========================================

class WithholdingTaxRequest(BaseModel):
    """Withholding tax on an annual taxable income."""
    annual_income: Decimal = Field(..., ge=0)
    tax_brackets: Optional[List[TaxBracketSchema]] = None

    @model_validator(mode="after")
    def validate_brackets(self):
        if self.tax_brackets is not None:
            _check_brackets(self.tax_brackets)
        return self


class TaxBracketBreakdown(BaseModel):
    """Tax charged within one bracket."""
    range: str
    rate: Decimal
    taxable_amount: Decimal
    tax_amount: Decimal


class WithholdingTaxResponse(BaseModel):
    """Annual and monthly withholding tax."""
    annual_income: Decimal
    annual_tax: Decimal
    monthly_tax: Decimal
    effective_rate: Decimal
    marginal_bracket: str
    brackets: List[TaxBracketBreakdown]
