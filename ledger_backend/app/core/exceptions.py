"""
Custom exceptions and error handlers for consistent error responses.

Business-rule failures derive from LedgerError. Store-level failures are
raised as StoreFailureError so callers can tell a rejected operation from one
the system could not process.
"""

import logging
from decimal import Decimal
from fastapi import HTTPException, Request, status
from fastapi.responses import JSONResponse
from fastapi.exceptions import RequestValidationError
from typing import Any, Dict

logger = logging.getLogger("ledger")


class AppException(Exception):
    """Base application exception."""

    def __init__(self, message: str, error_code: str, status_code: int = 500, details: Dict[str, Any] = None):
        self.message = message
        self.error_code = error_code
        self.status_code = status_code
        self.details = details or {}
        super().__init__(message)


class AuthenticationError(AppException):
    """Raised when the calling profile cannot be resolved."""

    def __init__(self, message: str = "Authentication failed"):
        super().__init__(
            message=message,
            error_code="ERR_AUTH_001",
            status_code=status.HTTP_401_UNAUTHORIZED
        )


class LedgerError(AppException):
    """Expected outcome of a ledger business rule."""


class ResourceNotFoundError(LedgerError):
    """Raised when requested resource is not found."""

    def __init__(self, resource: str, resource_id: Any = None):
        message = f"{resource} not found"
        if resource_id is not None:
            message = f"{resource} with ID {resource_id} not found"
        super().__init__(
            message=message,
            error_code="ERR_NOT_FOUND_001",
            status_code=status.HTTP_404_NOT_FOUND,
            details={"resource": resource.lower(), "id": resource_id}
        )
        self.resource = resource.lower()


class JobAlreadyPaidError(LedgerError):
    """Raised when settling a job that has already been paid."""

    def __init__(self, job_id: int):
        super().__init__(
            message="Job is already paid",
            error_code="ERR_LEDGER_001",
            status_code=status.HTTP_409_CONFLICT,
            details={"job_id": job_id}
        )


class InsufficientFundsError(LedgerError):
    """Raised when the payer balance does not cover the job price."""

    def __init__(self, balance: Decimal, required: Decimal):
        super().__init__(
            message="Insufficient funds",
            error_code="ERR_LEDGER_002",
            status_code=status.HTTP_400_BAD_REQUEST,
            details={"balance": str(balance), "required": str(required)}
        )


class InvalidAmountError(LedgerError):
    """Raised for deposit amounts that are not a positive number of cents."""

    def __init__(self, amount: Any, message: str = "Amount must be greater than zero"):
        super().__init__(
            message=message,
            error_code="ERR_LEDGER_003",
            status_code=status.HTTP_400_BAD_REQUEST,
            details={"amount": str(amount)}
        )


class DepositLimitExceededError(LedgerError):
    """Raised when a deposit is larger than the payer's deposit cap."""

    def __init__(self, limit: Decimal):
        super().__init__(
            message=f"Deposit exceeds the maximum allowed limit of {limit:.2f}",
            error_code="ERR_LEDGER_004",
            status_code=status.HTTP_400_BAD_REQUEST,
            details={"limit": f"{limit:.2f}"}
        )
        self.limit = limit


class InvalidRangeError(LedgerError):
    """Raised when a reporting window is missing or malformed."""

    def __init__(self, message: str = "Start and end dates are required"):
        super().__init__(
            message=message,
            error_code="ERR_LEDGER_005",
            status_code=status.HTTP_400_BAD_REQUEST
        )


class StoreFailureError(AppException):
    """Raised when the ledger store cannot complete a request."""

    def __init__(self, message: str = "The ledger store could not process the request"):
        super().__init__(
            message=message,
            error_code="ERR_STORE_001",
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE
        )


# Global Exception Handlers

async def app_exception_handler(request: Request, exc: AppException) -> JSONResponse:
    """Handler for custom application exceptions."""
    return JSONResponse(
        status_code=exc.status_code,
        content={
            "error_code": exc.error_code,
            "message": exc.message,
            "details": exc.details
        }
    )


async def http_exception_handler(request: Request, exc: HTTPException) -> JSONResponse:
    """Handler for FastAPI HTTPException with standardized format."""
    # Map status code to error code
    error_code_map = {
        400: "ERR_BAD_REQUEST",
        401: "ERR_UNAUTHORIZED",
        404: "ERR_NOT_FOUND",
        500: "ERR_INTERNAL_SERVER"
    }

    error_code = error_code_map.get(exc.status_code, "ERR_UNKNOWN")

    return JSONResponse(
        status_code=exc.status_code,
        content={
            "error_code": error_code,
            "message": exc.detail,
            "details": {}
        }
    )


async def validation_exception_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    """Handler for Pydantic validation errors."""
    return JSONResponse(
        status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
        content={
            "error_code": "ERR_VALIDATION",
            "message": "Validation error",
            "details": {
                "errors": jsonable_errors(exc)
            }
        }
    )


async def generic_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """Handler for unhandled exceptions."""
    logger.exception("Unhandled exception on %s %s", request.method, request.url.path)

    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={
            "error_code": "ERR_INTERNAL_SERVER",
            "message": "An internal server error occurred",
            "details": {}
        }
    )


def jsonable_errors(exc: RequestValidationError) -> list:
    # ctx may carry exception instances (e.g. Decimal parsing), which are not JSON
    return [
        {key: value for key, value in error.items() if key != "ctx"}
        for error in exc.errors()
    ]
