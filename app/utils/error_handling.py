"""
Error Handling Module for Ledgerline

This module provides:
- The payroll/attendance exception hierarchy
- The JSON error envelope returned by every endpoint
- FastAPI exception handlers
- Input validation helpers shared by schemas, routers and settings
"""

from datetime import date, datetime, timezone
from enum import Enum
from typing import Any, Dict, List, Optional, Sequence
import logging

from fastapi import FastAPI, Request, HTTPException, status
from fastapi.responses import JSONResponse
from fastapi.exceptions import RequestValidationError
from starlette.exceptions import HTTPException as StarletteHTTPException

# Configure logging
logger = logging.getLogger("ledgerline.errors")


def _utc_timestamp() -> str:
    return datetime.now(timezone.utc).strftime("%Y-%m-%dT%H:%M:%S.%fZ")


class ErrorCode(str, Enum):
    """Error codes carried in the ``detail.code`` field"""

    # Request validation (400/422)
    VALIDATION_ERROR = "VALIDATION_ERROR"
    INVALID_INPUT = "INVALID_INPUT"
    INVALID_DATE_RANGE = "INVALID_DATE_RANGE"
    INVALID_TIME_FORMAT = "INVALID_TIME_FORMAT"
    INVALID_TAX_BRACKETS = "INVALID_TAX_BRACKETS"

    # Payroll / attendance rules (422)
    BUSINESS_RULE_VIOLATION = "BUSINESS_RULE_VIOLATION"

    # Routing (404/405)
    NOT_FOUND = "NOT_FOUND"
    METHOD_NOT_ALLOWED = "METHOD_NOT_ALLOWED"

    # Server side (500)
    INTERNAL_ERROR = "INTERNAL_ERROR"
    CONFIGURATION_ERROR = "CONFIGURATION_ERROR"


# Status codes of plain HTTPExceptions mapped to envelope codes
HTTP_STATUS_CODES = {
    status.HTTP_400_BAD_REQUEST: ErrorCode.INVALID_INPUT,
    status.HTTP_404_NOT_FOUND: ErrorCode.NOT_FOUND,
    status.HTTP_405_METHOD_NOT_ALLOWED: ErrorCode.METHOD_NOT_ALLOWED,
    status.HTTP_422_UNPROCESSABLE_ENTITY: ErrorCode.VALIDATION_ERROR,
}


class AppException(Exception):
    """Base class for errors raised by Ledgerline code"""

    status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR

    def __init__(
        self,
        code: ErrorCode,
        message: str,
        details: Optional[Dict[str, Any]] = None,
        field: Optional[str] = None,
        original_error: Optional[Exception] = None,
    ):
        super().__init__(message)
        self.code = code
        self.message = message
        self.details = details or {}
        self.field = field
        self.original_error = original_error

    def to_dict(self) -> Dict[str, Any]:
        """Envelope body for this error"""
        body: Dict[str, Any] = {
            "code": self.code.value,
            "message": self.message,
            "timestamp": _utc_timestamp(),
        }
        if self.field:
            body["field"] = self.field
        if self.details:
            body["details"] = self.details
        return body


# ============================================================================
# Validation Exceptions
# ============================================================================

class ValidationException(AppException):
    """Input rejected before any calculation ran"""

    status_code = status.HTTP_422_UNPROCESSABLE_ENTITY

    def __init__(
        self,
        message: str,
        field: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None,
        code: ErrorCode = ErrorCode.VALIDATION_ERROR,
    ):
        super().__init__(code, message, details=details, field=field)


class InvalidDateRangeException(ValidationException):
    """Period ends before it starts"""

    def __init__(self, start_date: date, end_date: date):
        super().__init__(
            f"Period {start_date} to {end_date} ends before it starts",
            code=ErrorCode.INVALID_DATE_RANGE,
            details={"start_date": str(start_date), "end_date": str(end_date)},
        )


class InvalidTimeFormatException(ValidationException):
    """Schedule time is not HH:MM on a 24-hour clock"""

    def __init__(self, value: Any, field: Optional[str] = None):
        super().__init__(
            f"Invalid time: {value}. Expected HH:MM (24-hour clock).",
            field=field,
            code=ErrorCode.INVALID_TIME_FORMAT,
            details={"provided": str(value), "expected_format": "HH:MM"},
        )


class InvalidTaxBracketsException(ValidationException):
    """Tax bracket table is not a contiguous ascending cover of [0, ∞)"""

    def __init__(self, reason: str, index: Optional[int] = None):
        details: Dict[str, Any] = {"reason": reason}
        if index is not None:
            details["bracket_index"] = index
        super().__init__(
            f"Invalid tax brackets: {reason}",
            field="tax_brackets",
            code=ErrorCode.INVALID_TAX_BRACKETS,
            details=details,
        )


# ============================================================================
# Business Rule / Configuration Exceptions
# ============================================================================

class BusinessRuleException(AppException):
    """Well-formed input that breaks a payroll or attendance rule"""

    status_code = status.HTTP_422_UNPROCESSABLE_ENTITY

    def __init__(self, message: str, rule: str, details: Optional[Dict[str, Any]] = None):
        super().__init__(
            ErrorCode.BUSINESS_RULE_VIOLATION,
            message,
            details={"rule": rule, **(details or {})},
        )


class ConfigurationException(AppException):
    """Environment settings that cannot be turned into payroll settings"""

    def __init__(self, message: str, setting: str, original_error: Optional[Exception] = None):
        super().__init__(
            ErrorCode.CONFIGURATION_ERROR,
            message,
            details={"setting": setting},
            original_error=original_error,
        )


# ============================================================================
# Exception Handlers
# ============================================================================

def create_error_response(
    code: ErrorCode,
    message: str,
    status_code: int,
    details: Optional[Dict[str, Any]] = None,
) -> JSONResponse:
    """Envelope for errors that did not start as an AppException"""
    body: Dict[str, Any] = {
        "code": code.value,
        "message": message,
        "timestamp": _utc_timestamp(),
    }
    if details:
        body["details"] = details
    return JSONResponse(status_code=status_code, content={"detail": body})


async def app_exception_handler(request: Request, exc: AppException) -> JSONResponse:
    """Handle AppException"""
    log = logger.error if exc.status_code >= 500 else logger.warning
    log(
        f"{exc.code.value} on {request.method} {request.url.path}: {exc.message}",
        exc_info=exc.original_error,
    )
    return JSONResponse(status_code=exc.status_code, content={"detail": exc.to_dict()})


async def http_exception_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    """Handle HTTPException raised by routers or by routing itself"""
    message = exc.detail if isinstance(exc.detail, str) else str(exc.detail)
    logger.warning(f"HTTP {exc.status_code} on {request.method} {request.url.path}: {message}")

    return create_error_response(
        HTTP_STATUS_CODES.get(exc.status_code, ErrorCode.INTERNAL_ERROR),
        message,
        exc.status_code,
    )


async def validation_exception_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    """Handle request body / query validation errors"""
    errors: List[Dict[str, str]] = [
        {
            "field": ".".join(str(loc) for loc in error["loc"]),
            "message": error["msg"],
            "type": error["type"],
        }
        for error in exc.errors()
    ]
    logger.warning(f"Rejected {request.method} {request.url.path}: {len(errors)} invalid field(s)")

    return create_error_response(
        ErrorCode.VALIDATION_ERROR,
        "Request validation failed",
        status.HTTP_422_UNPROCESSABLE_ENTITY,
        details={"errors": errors},
    )


async def unhandled_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """Last resort; internals are never echoed to the client"""
    logger.critical(
        f"Unhandled {type(exc).__name__} on {request.method} {request.url.path}",
        exc_info=exc,
    )
    return create_error_response(
        ErrorCode.INTERNAL_ERROR,
        "An unexpected error occurred. Please try again later.",
        status.HTTP_500_INTERNAL_SERVER_ERROR,
    )


def setup_exception_handlers(app: FastAPI) -> None:
    """Register all exception handlers with the FastAPI application"""
    app.add_exception_handler(AppException, app_exception_handler)
    app.add_exception_handler(HTTPException, http_exception_handler)
    app.add_exception_handler(StarletteHTTPException, http_exception_handler)
    app.add_exception_handler(RequestValidationError, validation_exception_handler)
    app.add_exception_handler(Exception, unhandled_exception_handler)


# ============================================================================
# Validation Helpers
# ============================================================================

def validate_date_range(start_date: date, end_date: date) -> None:
    """Raise InvalidDateRangeException when the period ends before it starts"""
    if start_date > end_date:
        raise InvalidDateRangeException(start_date, end_date)


def validate_tax_brackets(brackets: Sequence[Any]) -> None:
    """
    Validate a progressive tax table.

    Brackets must start at 0, ascend without gaps or overlaps (each min equals
    the previous max), have rates between 0 and 1, and end with a single
    unbounded bracket.
    """
    if not brackets:
        raise InvalidTaxBracketsException("at least one bracket is required")

    if brackets[0].min != 0:
        raise InvalidTaxBracketsException("first bracket must start at 0", index=0)

    last = len(brackets) - 1
    for index, bracket in enumerate(brackets):
        if not 0 <= bracket.rate <= 1:
            raise InvalidTaxBracketsException("rate must be between 0 and 1", index=index)

        if bracket.max is None:
            if index != last:
                raise InvalidTaxBracketsException("only the last bracket may be unbounded", index=index)
            continue

        if bracket.max <= bracket.min:
            raise InvalidTaxBracketsException("max must be greater than min", index=index)

        if index == last:
            raise InvalidTaxBracketsException("last bracket must be unbounded", index=index)

        if brackets[index + 1].min != bracket.max:
            raise InvalidTaxBracketsException(
                "brackets must be contiguous (min must equal previous max)",
                index=index + 1,
            )


__all__ = [
    # Base
    "AppException",
    "ErrorCode",

    # Validation
    "ValidationException",
    "InvalidDateRangeException",
    "InvalidTimeFormatException",
    "InvalidTaxBracketsException",

    # Business / configuration
    "BusinessRuleException",
    "ConfigurationException",

    # Handlers
    "create_error_response",
    "setup_exception_handlers",

    # Utilities
    "validate_date_range",
    "validate_tax_brackets",
]
