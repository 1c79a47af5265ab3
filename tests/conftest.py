"""
Ledgerline - Test Configuration

Pytest fixtures and configuration.
"""

from datetime import date
from decimal import Decimal
from typing import AsyncGenerator

import pytest
import pytest_asyncio
from httpx import AsyncClient, ASGITransport

from app.models.payroll import AttendancePeriodSummary, EmployeePayData
from app.services.payroll_service import DEFAULT_PAYROLL_SETTINGS, PayrollCalculator
from main import app


@pytest_asyncio.fixture(scope="function")
async def client() -> AsyncGenerator[AsyncClient, None]:
    """Create a test client against the ASGI app."""
    async with AsyncClient(
        transport=ASGITransport(app=app),
        base_url="http://test"
    ) as ac:
        yield ac


@pytest.fixture
def calculator() -> PayrollCalculator:
    """Payroll calculator with the built-in settings."""
    return PayrollCalculator(DEFAULT_PAYROLL_SETTINGS)


@pytest.fixture
def employee() -> EmployeePayData:
    """Employee earning 22,000 a month (hourly rate 125.00 at 22 x 8)."""
    return EmployeePayData(id="emp-001", base_salary=Decimal("22000"))


@pytest.fixture
def full_month_attendance() -> AttendancePeriodSummary:
    """Full month with 10 overtime hours."""
    return AttendancePeriodSummary(
        total_work_days=22,
        total_work_hours=Decimal("186"),
        regular_hours=Decimal("176"),
        overtime_hours=Decimal("10"),
    )


@pytest.fixture
def no_attendance() -> AttendancePeriodSummary:
    return AttendancePeriodSummary()


@pytest.fixture
def monday() -> date:
    """A Monday."""
    return date(2024, 3, 4)

