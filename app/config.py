"""
Ledgerline - Configuration Settings

This module handles all application configuration using Pydantic Settings.
Environment variables are loaded from .env file.
"""

from dataclasses import replace
from decimal import Decimal
from functools import lru_cache
from typing import Dict, List, Optional

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from app.models.payroll import PayrollSettings, TaxBracket
from app.services.payroll_service import DEFAULT_PAYROLL_SETTINGS
from app.utils.error_handling import (
    ConfigurationException,
    InvalidTaxBracketsException,
    validate_tax_brackets,
)


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore"
    )

    # ===========================================
    # APPLICATION CONFIGURATION
    # ===========================================
    app_name: str = "Ledgerline"
    app_env: str = "development"
    debug: bool = False
    default_currency: str = "PHP"

    # ===========================================
    # PAYROLL DEFAULTS
    # Overrides for the built-in payroll settings. Statutory schedules
    # always come from the built-in tables; everything can still be
    # overridden per request.
    # ===========================================
    payroll_working_days_per_month: Decimal = Field(default=Decimal("22"), gt=0)
    payroll_working_hours_per_day: Decimal = Field(default=Decimal("8"), gt=0)
    payroll_overtime_multiplier: Decimal = Field(default=Decimal("1.25"), ge=0)
    # JSON list of {"min", "max", "rate"}; max is null for the top bracket
    payroll_tax_brackets: Optional[List[Dict[str, Optional[Decimal]]]] = None

    # ===========================================
    # ATTENDANCE
    # ===========================================
    attendance_grace_period_minutes: int = Field(default=15, ge=0)
    attendance_half_day_hours: Decimal = Field(default=Decimal("4"), ge=0)

    # ===========================================
    # CORS SETTINGS
    # ===========================================
    cors_origins: str = "http://localhost:3000,http://localhost:8000,http://127.0.0.1:8000"

    @property
    def cors_origins_list(self) -> List[str]:
        """Parse CORS origins string into list."""
        return [origin.strip() for origin in self.cors_origins.split(",") if origin.strip()]

    @property
    def is_development(self) -> bool:
        """Check if running in development mode."""
        return self.app_env.lower() == "development"

    def build_payroll_settings(self) -> PayrollSettings:
        """Built-in payroll settings with the environment overrides applied."""
        tax_brackets = DEFAULT_PAYROLL_SETTINGS.tax_brackets
        if self.payroll_tax_brackets is not None:
            tax_brackets = self._parse_tax_brackets()

        return replace(
            DEFAULT_PAYROLL_SETTINGS,
            tax_brackets=tax_brackets,
            working_days_per_month=self.payroll_working_days_per_month,
            working_hours_per_day=self.payroll_working_hours_per_day,
            overtime_multiplier=self.payroll_overtime_multiplier,
        )

    def _parse_tax_brackets(self):
        try:
            brackets = tuple(
                TaxBracket(min=item["min"], max=item.get("max"), rate=item["rate"])
                for item in self.payroll_tax_brackets
            )
            validate_tax_brackets(brackets)
        except (KeyError, TypeError) as e:
            raise ConfigurationException(
                f"Malformed tax bracket: {e}",
                setting="payroll_tax_brackets",
                original_error=e,
            )
        except InvalidTaxBracketsException as e:
            raise ConfigurationException(
                e.message,
                setting="payroll_tax_brackets",
                original_error=e,
            )
        return brackets


@lru_cache()
def get_settings() -> Settings:
    """
    Get cached settings instance.
    Uses lru_cache to avoid reading .env file on every call.
    """
    return Settings()


# Export settings instance
settings = get_settings()
