"""
Ledgerline - Payroll Router

Stateless payroll calculation endpoints. Nothing is persisted; every
request carries the employee data it needs.
"""

import logging
from datetime import datetime
from decimal import Decimal
from typing import Optional

from fastapi import APIRouter, HTTPException, Query, status

from app.config import get_settings
from app.models.payroll import PayrollSettings
from app.schemas.payroll import (
    PayPeriodResponse,
    PayrollCalculateRequest,
    PayrollCalculationResponse,
    PayrollSettingsSchema,
    PayrollSummaryRequest,
    PayrollSummaryResponse,
    TaxBracketBreakdown,
    WithholdingTaxRequest,
    WithholdingTaxResponse,
)
from app.services.payroll_service import (
    PayPeriodType,
    calculate_payroll,
    calculate_payroll_summary,
    get_pay_period_dates,
)
from app.services.tax_calculators import WithholdingTaxCalculator, get_tax_bracket
from app.utils.currency import round_currency


logger = logging.getLogger(__name__)

router = APIRouter()


def _resolve_settings(override: Optional[PayrollSettingsSchema]) -> PayrollSettings:
    if override is not None:
        return override.to_model()
    return get_settings().build_payroll_settings()


# ===========================================
# CALCULATION ENDPOINTS
# ===========================================

@router.post(
    "/calculate",
    response_model=PayrollCalculationResponse,
    summary="Calculate payroll",
    description="Gross-to-net payroll for one employee and pay period",
)
async def calculate(request: PayrollCalculateRequest):
    """
    Calculate payroll for one employee.

    Statutory contributions (SSS, PhilHealth, Pag-IBIG) are added unless
    the request already carries a matching deduction. Withholding tax is
    always added.
    """
    result = calculate_payroll(
        request.employee.to_model(),
        request.attendance.to_model(),
        [e.to_model() for e in request.earnings],
        [d.to_model() for d in request.deductions],
        _resolve_settings(request.settings),
    )

    logger.info(
        "Calculated payroll for employee %s: gross %s, net %s",
        request.employee.id or "<anonymous>", result.gross_pay, result.net_pay,
    )

    return PayrollCalculationResponse.model_validate(result)


@router.post(
    "/summary",
    response_model=PayrollSummaryResponse,
    summary="Summarise payrolls",
    description="Totals and averages across calculated payrolls",
)
async def summarize(request: PayrollSummaryRequest):
    summary = calculate_payroll_summary(request.payrolls)
    return PayrollSummaryResponse.model_validate(summary)


# ===========================================
# SETTINGS & PERIODS
# ===========================================

@router.get(
    "/settings/defaults",
    response_model=PayrollSettingsSchema,
    summary="Default payroll settings",
)
async def default_settings():
    """Payroll settings applied when a request carries no override."""
    return PayrollSettingsSchema.model_validate(get_settings().build_payroll_settings())


@router.get(
    "/pay-period",
    response_model=PayPeriodResponse,
    summary="Pay period dates",
)
async def pay_period(
    period_type: str = Query("monthly", description="monthly, biweekly or weekly"),
    reference_date: Optional[datetime] = Query(None, description="Defaults to now"),
):
    """Start and end of the pay period containing the reference date."""
    try:
        start, end = get_pay_period_dates(period_type, reference_date)
    except ValueError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))

    return PayPeriodResponse(period_type=PayPeriodType(period_type), start=start, end=end)


# ===========================================
# TAX ENDPOINTS
# ===========================================

@router.post(
    "/tax/withholding",
    response_model=WithholdingTaxResponse,
    summary="Calculate withholding tax",
    description="Progressive annual tax with per-bracket breakdown",
)
async def withholding_tax(request: WithholdingTaxRequest):
    if request.tax_brackets is not None:
        brackets = tuple(b.to_model() for b in request.tax_brackets)
    else:
        brackets = get_settings().build_payroll_settings().tax_brackets

    calculator = WithholdingTaxCalculator(brackets)
    annual_tax, breakdown = calculator.calculate_tax_breakdown(request.annual_income)

    if request.annual_income > 0:
        effective_rate = round_currency(annual_tax / request.annual_income * 100)
    else:
        effective_rate = Decimal("0")

    return WithholdingTaxResponse(
        annual_income=request.annual_income,
        annual_tax=round_currency(annual_tax),
        monthly_tax=round_currency(annual_tax / 12),
        effective_rate=effective_rate,
        marginal_bracket=get_tax_bracket(request.annual_income, brackets),
        brackets=[
            TaxBracketBreakdown(
                range=item["range"],
                rate=item["rate"],
                taxable_amount=round_currency(item["taxable_amount"]),
                tax_amount=round_currency(item["tax_amount"]),
            )
            for item in breakdown
        ],
    )
