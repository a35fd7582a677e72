"""
Centralized error handling and safe error messages.

Domain failures are raised inside the trading floor as ``TradingFloorError``
subclasses and converted at the coordinator boundary into the structured
``{"success": False, "error": ..., "code": ...}`` shape that the request
layer returns verbatim. Unexpected exceptions are turned into sanitized JSON
responses by the global handlers registered in ``src.main``.
"""
import logging
import traceback
from typing import Any

from fastapi import HTTPException, status
from fastapi.requests import Request
from fastapi.responses import JSONResponse
from pydantic import BaseModel

from src.core.config import settings
from src.core.security import sanitize
from src.services.alerting_service import (
    AlertType,
    send_critical_alert,
)

logger = logging.getLogger(__name__)


class ErrorResponse(BaseModel):
    """Standardized error response model."""
    success: bool = False
    error: str
    code: str | None = None
    detail: str | None = None


class SafeException(Exception):
    """Base exception for safe errors that can be shown to users."""

    def __init__(self, message: str, detail: str | None = None):
        """
        Initialize the safe exception.

        Args:
            message: User-friendly error message
            detail: Optional additional details
        """
        self.message = message
        self.detail = detail
        super().__init__(message)


class TradingFloorError(SafeException):
    """Base class for every failure the trading floor reports to callers."""

    code = "trading_floor_error"
    http_status = status.HTTP_400_BAD_REQUEST

    def to_result(self) -> dict[str, Any]:
        """Structured failure result returned by coordinator operations."""
        return {"success": False, "error": self.message, "code": self.code}


class AlreadyRegisteredError(TradingFloorError):
    """Agent name is already taken."""

    code = "already_registered"
    http_status = status.HTTP_409_CONFLICT


class NotFoundError(TradingFloorError):
    """Agent, intent or proposal does not exist."""

    code = "not_found"
    http_status = status.HTTP_404_NOT_FOUND


class UnsupportedAssetError(TradingFloorError):
    """Token symbol outside the configured asset set."""

    code = "unsupported_asset"


class InvalidAmountError(TradingFloorError):
    """Non-positive amount."""

    code = "invalid_amount"


class InvalidIntentError(TradingFloorError):
    """Malformed intent parameters such as a bad expiry or non-finite slippage."""

    code = "invalid_intent"


class InsufficientBalanceError(TradingFloorError):
    """Free balance too small for the requested escrow."""

    code = "insufficient_balance"


class AgentMissingError(TradingFloorError):
    """An agent referenced by a matched intent vanished before settlement."""

    code = "agent_missing"
    http_status = status.HTTP_409_CONFLICT


class NotIntentOwnerError(TradingFloorError):
    """Only the posting agent may cancel an intent."""

    code = "not_intent_owner"
    http_status = status.HTTP_403_FORBIDDEN


class IntentNotActiveError(TradingFloorError):
    """Intent already filled, cancelled or expired."""

    code = "intent_not_active"
    http_status = status.HTTP_409_CONFLICT


class GovernanceError(TradingFloorError):
    """Rejected proposal or vote."""

    code = "governance_error"


_ERROR_CLASSES: dict[str, type[TradingFloorError]] = {
    cls.code: cls
    for cls in (
        TradingFloorError,
        AlreadyRegisteredError,
        NotFoundError,
        UnsupportedAssetError,
        InvalidAmountError,
        InvalidIntentError,
        InsufficientBalanceError,
        AgentMissingError,
        NotIntentOwnerError,
        IntentNotActiveError,
        GovernanceError,
    )
}


def failure(error: TradingFloorError) -> dict[str, Any]:
    """Convert a domain error into the structured failure result."""
    logger.info(f"Rejected ({error.code}): {error.message}")
    return error.to_result()


def status_for_result(result: dict[str, Any]) -> int:
    """HTTP status for a coordinator result; 200 for successes."""
    if result.get("success", True):
        return status.HTTP_200_OK
    error_class = _ERROR_CLASSES.get(result.get("code") or "", TradingFloorError)
    return error_class.http_status


def create_safe_error_message(
    error: Exception, include_detail: bool = False
) -> str:
    """
    Create a safe error message that doesn't leak sensitive information.

    Args:
        error: The exception that occurred
        include_detail: Whether to include non-sensitive detail

    Returns:
        A safe error message for the user
    """
    if isinstance(error, SafeException):
        return error.message

    if settings.debug or include_detail:
        return sanitize(str(error))

    error_type = type(error).__name__
    safe_messages = {
        "ValueError": "Invalid input provided",
        "ValidationError": "Request validation failed",
        "NotFoundError": "Resource not found",
        "ConnectionError": "Service unavailable",
        "TimeoutError": "Request timed out",
        "TimeoutException": "Request timed out",
        "HTTPException": "Request processing error",
        "HTTPStatusError": "Upstream service error",
        "SQLAlchemyError": "Database error occurred",
        "Web3Exception": "Blockchain error occurred",
    }
    return safe_messages.get(error_type, "An error occurred while processing your request")


def create_error_response(
    status_code: int, message: str, detail: str | None = None, code: str | None = None
) -> JSONResponse:
    """
    Create a standardized JSON error response.

    Args:
        status_code: HTTP status code
        message: Main error message
        detail: Optional additional detail
        code: Optional machine-readable error code

    Returns:
        JSONResponse with error information
    """
    error_response = ErrorResponse(
        error=message, code=code, detail=detail if settings.debug else None
    )

    logger.error(f"Error {status_code}: {message} - {detail}")

    return JSONResponse(
        status_code=status_code, content=error_response.model_dump()
    )


async def http_exception_handler(
    request: Request, exc: HTTPException
) -> JSONResponse:
    """Render HTTPException with the standard error body."""
    return create_error_response(
        status_code=exc.status_code,
        message=str(exc.detail) if exc.detail else "Request processing error",
    )


async def trading_floor_exception_handler(
    request: Request, exc: TradingFloorError
) -> JSONResponse:
    """Render domain errors that escaped the coordinator boundary."""
    return JSONResponse(status_code=exc.http_status, content=exc.to_result())


async def general_exception_handler(
    request: Request, exc: Exception
) -> JSONResponse:
    """
    Handle all other exceptions globally.

    Args:
        request: The request that caused the exception
        exc: The exception that was raised

    Returns:
        JSONResponse with sanitized error information
    """
    logger.error(f"Unhandled exception: {exc}", exc_info=True)

    if settings.alert_enabled:
        send_critical_alert(
            alert_type=AlertType.INTERNAL_ERROR,
            message=f"Unhandled exception: {type(exc).__name__}",
            details={
                "error": sanitize(str(exc)),
                "path": str(request.url.path),
                "method": request.method,
            },
        )

    if settings.debug:
        detail = "".join(traceback.format_exception(type(exc), exc, exc.__traceback__))
    else:
        detail = None

    return create_error_response(
        status_code=500,
        message="Internal server error",
        detail=detail,
    )
