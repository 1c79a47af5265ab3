"""
Ledgerline - FastAPI Application Entry Point

This is the main entry point for the FastAPI application.
"""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from app.config import settings
from app.routers import attendance, payroll
from app.utils.error_handling import setup_exception_handlers

# Configure logging
logging.basicConfig(
    level=logging.INFO if not settings.debug else logging.DEBUG,
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Lifespan context manager for FastAPI.
    Handles startup and shutdown events.
    """
    # Startup
    logger.info(f"Starting {settings.app_name}...")
    logger.info(f"Environment: {settings.app_env}")
    logger.info(
        f"Payroll defaults: {settings.payroll_working_days_per_month} days x "
        f"{settings.payroll_working_hours_per_day} hours, "
        f"overtime x{settings.payroll_overtime_multiplier}"
    )

    yield

    # Shutdown
    logger.info(f"Shutting down {settings.app_name}...")


# Create FastAPI application
app = FastAPI(
    title=settings.app_name,
    description="Payroll and attendance calculation service",
    version="0.1.0",
    docs_url="/api/docs" if settings.is_development else None,
    redoc_url="/api/redoc" if settings.is_development else None,
    lifespan=lifespan,
)

# Configure CORS
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins_list,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

setup_exception_handlers(app)


# ===========================================
# ROOT ENDPOINTS
# ===========================================

@app.get("/health")
async def health_check():
    """Health check endpoint."""
    return {
        "status": "healthy",
        "environment": settings.app_env,
    }


@app.get("/api/v1")
async def api_root():
    """API v1 root endpoint."""
    return {
        "message": f"Welcome to {settings.app_name} API v1",
        "endpoints": {
            "payroll": "/api/v1/payroll/calculate",
            "payroll_summary": "/api/v1/payroll/summary",
            "payroll_defaults": "/api/v1/payroll/settings/defaults",
            "pay_period": "/api/v1/payroll/pay-period",
            "withholding_tax": "/api/v1/payroll/tax/withholding",
            "attendance_hours": "/api/v1/attendance/hours",
            "attendance_status": "/api/v1/attendance/status",
            "attendance_summary": "/api/v1/attendance/summary",
        }
    }


# ===========================================
# ROUTERS
# ===========================================

app.include_router(payroll.router, prefix="/api/v1/payroll", tags=["Payroll"])
app.include_router(attendance.router, prefix="/api/v1/attendance", tags=["Attendance"])


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(
        "main:app",
        host="0.0.0.0",
        port=8000,
        reload=settings.debug,
    )
