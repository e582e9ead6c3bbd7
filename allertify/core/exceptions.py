"""
Global exception handling for the application.
Standardizes error responses as {"error": {code, message, details, path}}.
"""

import traceback
from typing import Any, Dict, Optional

import structlog
from fastapi import Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from allertify.config import get_settings

logger = structlog.get_logger(__name__)


class AppError(Exception):
    """Base class for all application exceptions."""
    def __init__(
        self,
        message: str,
        status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR,
        details: Optional[Dict[str, Any]] = None,
    ):
        self.message = message
        self.status_code = status_code
        self.details = details or {}
        super().__init__(self.message)


class ValidationException(AppError):
    """Malformed input, rejected before any side effect."""
    def __init__(self, message: str = "Validation error", details: Optional[Dict[str, Any]] = None):
        super().__init__(message, status.HTTP_400_BAD_REQUEST, details)


class EntityNotFoundException(AppError):
    """Resource not found error."""
    def __init__(self, message: str = "Entity not found", details: Optional[Dict[str, Any]] = None):
        super().__init__(message, status.HTTP_404_NOT_FOUND, details)


class ProductNotFoundException(EntityNotFoundException):
    def __init__(self, message: str = "Product not found", details: Optional[Dict[str, Any]] = None):
        super().__init__(message, details)


class ScanNotFoundException(EntityNotFoundException):
    def __init__(self, message: str = "Scan not found or access denied", details: Optional[Dict[str, Any]] = None):
        super().__init__(message, details)


class BusinessRuleViolationException(AppError):
    """Business logic violation error."""
    def __init__(self, message: str = "Business rule violation", details: Optional[Dict[str, Any]] = None):
        super().__init__(message, status.HTTP_422_UNPROCESSABLE_ENTITY, details)


class InvalidInputException(BusinessRuleViolationException):
    """A collaborator was invoked with input it cannot evaluate."""
    def __init__(self, message: str = "Invalid input", details: Optional[Dict[str, Any]] = None):
        super().__init__(message, details)


class QuotaExceededException(AppError):
    """Daily scan quota exhausted. Surfaced through the generic failure status."""
    def __init__(self, daily_limit: int, current_usage: Optional[int] = None):
        self.daily_limit = daily_limit
        message = (
            f"Daily scan limit exceeded. You have used {daily_limit} scans today. "
            "Upgrade your plan for more scans."
        )
        details = {"dailyLimit": daily_limit}
        if current_usage is not None:
            details["currentUsage"] = current_usage
        super().__init__(message, status.HTTP_500_INTERNAL_SERVER_ERROR, details)


class UpstreamServiceException(AppError):
    """A third-party service answered with an error."""
    def __init__(self, message: str = "Upstream service error", details: Optional[Dict[str, Any]] = None):
        super().__init__(message, status.HTTP_502_BAD_GATEWAY, details)


class UpstreamTimeoutException(AppError):
    """A third-party service did not answer in time."""
    def __init__(self, message: str = "Upstream service timed out", details: Optional[Dict[str, Any]] = None):
        super().__init__(message, status.HTTP_504_GATEWAY_TIMEOUT, details)


class ServiceNotConfiguredException(AppError):
    def __init__(self, message: str = "Service is not configured", details: Optional[Dict[str, Any]] = None):
        super().__init__(message, status.HTTP_503_SERVICE_UNAVAILABLE, details)


class UnauthorizedException(AppError):
    """Authentication failure error."""
    def __init__(self, message: str = "Unauthorized", details: Optional[Dict[str, Any]] = None):
        super().__init__(message, status.HTTP_401_UNAUTHORIZED, details)


class ForbiddenException(AppError):
    """Authorization failure error."""
    def __init__(self, message: str = "Forbidden", details: Optional[Dict[str, Any]] = None):
        super().__init__(message, status.HTTP_403_FORBIDDEN, details)


def _error_body(code: str, message: str, path: str, details: Optional[Dict[str, Any]] = None) -> dict:
    body = {"code": code, "message": message, "path": path}
    if details is not None:
        body["details"] = details
    return {"error": body}


async def validation_exception_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    """Render request validation failures as 400 with field-level detail."""
    errors = []
    for err in exc.errors():
        loc = [str(part) for part in err.get("loc", ()) if part not in ("body", "query", "path", "form")]
        errors.append({"field": ".".join(loc), "message": err.get("msg", "Invalid value")})

    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content=_error_body("ValidationException", "Validation error", request.url.path, {"errors": errors}),
    )


async def global_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """Handle all uncaught exceptions globally."""

    if isinstance(exc, AppError):
        if exc.status_code >= 500:
            logger.warning("Request failed", path=request.url.path, code=exc.__class__.__name__, error=exc.message)
        return JSONResponse(
            status_code=exc.status_code,
            content=_error_body(exc.__class__.__name__, exc.message, request.url.path, exc.details),
        )

    logger.exception("Unexpected error occurred", path=request.url.path)

    details = None
    if not get_settings().is_production:
        details = {
            "type": exc.__class__.__name__,
            "error": str(exc),
            "traceback": traceback.format_exception(type(exc), exc, exc.__traceback__),
        }

    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content=_error_body(
            "InternalServerError",
            "An unexpected error occurred. Please try again later.",
            request.url.path,
            details,
        ),
    )
