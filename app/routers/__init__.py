"""
Ledgerline - API Routers
"""

from app.routers import attendance, payroll

__all__ = ["attendance", "payroll"]
