"""
Shared HTTP layer for the admin API: response envelopes, error codes and
FastAPI dependencies.
"""

from .responses import (
    APIException,
    ErrorCode,
    error_response,
    raise_not_found,
    register_exception_handlers,
)

__all__ = [
    "APIException",
    "ErrorCode",
    "error_response",
    "raise_not_found",
    "register_exception_handlers",
]
