"""
Standardized API Response Models

Provides consistent error envelopes for the admin API:
- Error code standards and their HTTP statuses
- Error response helpers
- APIException and exception handlers for domain errors
"""

import logging
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Dict, List, Optional

from fastapi import FastAPI, HTTPException, Request
from fastapi.responses import JSONResponse
from pydantic import BaseModel, Field

from ..domains.backup.errors import (
    BackupFormatError,
    BackupIntegrityError,
    BackupNotFoundError,
)

logger = logging.getLogger(__name__)


# -------------------------
# Error Codes
# -------------------------

class ErrorCode(str, Enum):
    """
    Standardized error codes for API responses.
    Format: {CATEGORY}_{SPECIFIC_ERROR}
    """
    # Validation errors (4xx)
    VALIDATION_ERROR = "VALIDATION_ERROR"
    INVALID_INPUT = "INVALID_INPUT"
    INVALID_FORMAT = "INVALID_FORMAT"

    # Authentication/Authorization (401/403)
    AUTH_REQUIRED = "AUTH_REQUIRED"
    PERMISSION_DENIED = "PERMISSION_DENIED"

    # Resource errors (404/409)
    NOT_FOUND = "NOT_FOUND"
    CONFLICT = "CONFLICT"

    # Server errors (5xx)
    INTERNAL_ERROR = "INTERNAL_ERROR"
    SERVICE_UNAVAILABLE = "SERVICE_UNAVAILABLE"

    # Domain-specific errors
    INTEGRITY_CHECK_FAILED = "INTEGRITY_CHECK_FAILED"


ERROR_CODE_TO_HTTP_STATUS: Dict[ErrorCode, int] = {
    ErrorCode.VALIDATION_ERROR: 422,
    ErrorCode.INVALID_INPUT: 400,
    ErrorCode.INVALID_FORMAT: 400,

    ErrorCode.AUTH_REQUIRED: 401,
    ErrorCode.PERMISSION_DENIED: 403,

    ErrorCode.NOT_FOUND: 404,
    ErrorCode.CONFLICT: 409,

    ErrorCode.INTERNAL_ERROR: 500,
    ErrorCode.SERVICE_UNAVAILABLE: 503,

    ErrorCode.INTEGRITY_CHECK_FAILED: 422,
}


def get_http_status(error_code: ErrorCode) -> int:
    """Get HTTP status code for an error code."""
    return ERROR_CODE_TO_HTTP_STATUS.get(error_code, 500)


# -------------------------
# Response Models
# -------------------------

class ResponseMeta(BaseModel):
    """Metadata included in all API responses."""
    timestamp: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
    request_id: Optional[str] = None
    version: str = "1.0"


class ErrorDetail(BaseModel):
    """Detailed error information."""
    code: ErrorCode
    message: str
    detail: Optional[str] = None


class APIErrorResponse(BaseModel):
    """
    Standard error response envelope.

    {
        "success": false,
        "error": {
            "code": "NOT_FOUND",
            "message": "Backup not found",
            "detail": "No backup with identifier: backup_123"
        },
        "meta": { "timestamp": "...", "version": "1.0" }
    }
    """
    success: bool = False
    error: ErrorDetail
    meta: ResponseMeta = Field(default_factory=ResponseMeta)


def error_response(
    code: ErrorCode,
    message: str,
    detail: Optional[str] = None,
) -> Dict[str, Any]:
    """Create a standard error response dict."""
    return APIErrorResponse(
        error=ErrorDetail(code=code, message=message, detail=detail)
    ).model_dump(mode="json")


# -------------------------
# FastAPI Exception Classes
# -------------------------

class APIException(HTTPException):
    """
    Custom API exception with structured error response.

    Usage:
        raise APIException(
            error_code=ErrorCode.NOT_FOUND,
            message="Backup not found",
            detail="No backup with identifier: backup_123"
        )
    """
    def __init__(
        self,
        error_code: ErrorCode,
        message: str,
        detail: Optional[str] = None,
        headers: Optional[Dict[str, str]] = None,
    ):
        self.error_code = error_code
        self.message = message
        self.error_detail = detail

        super().__init__(status_code=get_http_status(error_code), detail=message, headers=headers)

    def to_response(self) -> JSONResponse:
        """Convert to JSONResponse for exception handlers."""
        return JSONResponse(
            status_code=self.status_code,
            content=error_response(
                code=self.error_code,
                message=self.message,
                detail=self.error_detail,
            ),
            headers=self.headers,
        )


def raise_not_found(resource: str, identifier: Any, detail: Optional[str] = None):
    """Raise a NOT_FOUND exception."""
    raise APIException(
        error_code=ErrorCode.NOT_FOUND,
        message=f"{resource} not found",
        detail=detail or f"No {resource.lower()} with identifier: {identifier}",
    )


# -------------------------
# Exception Handlers
# -------------------------

_DOMAIN_ERRORS: List[tuple] = [
    (BackupNotFoundError, ErrorCode.NOT_FOUND),
    (BackupFormatError, ErrorCode.INVALID_FORMAT),
    (BackupIntegrityError, ErrorCode.INTEGRITY_CHECK_FAILED),
]


def register_exception_handlers(app: FastAPI) -> None:
    """Map APIException and backup domain errors to error envelopes."""

    @app.exception_handler(APIException)
    async def _api_exception_handler(request: Request, exc: APIException):
        return exc.to_response()

    for error_class, error_code in _DOMAIN_ERRORS:
        def _make_handler(code: ErrorCode):
            async def _handler(request: Request, exc: Exception):
                logger.warning(f"{request.method} {request.url.path} failed: {exc}")
                return JSONResponse(
                    status_code=get_http_status(code),
                    content=error_response(code=code, message=str(exc)),
                )
            return _handler

        app.add_exception_handler(error_class, _make_handler(error_code))
