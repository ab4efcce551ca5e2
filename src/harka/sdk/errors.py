"""Errors raised by the admin API client."""

from typing import Any, Optional

# Codes set by the client itself; server-supplied codes pass through unchanged
NETWORK_ERROR = "NETWORK_ERROR"
TIMEOUT = "TIMEOUT"
ABORTED = "ABORTED"
CIRCUIT_OPEN = "CIRCUIT_OPEN"


class ApiError(Exception):
    """
    A failed admin API call.

    Attributes:
        message: Human readable message (server "message" when present)
        status: HTTP status, or None when no response was received
        code: Machine readable code (server code or one of the client codes)
        details: Parsed JSON error body
    """

    def __init__(
        self,
        message: str,
        status: Optional[int] = None,
        code: Optional[str] = None,
        details: Any = None,
    ):
        super().__init__(message)
        self.message = message
        self.status = status
        self.code = code
        self.details = details

    def __repr__(self) -> str:
        return f"ApiError({self.message!r}, status={self.status}, code={self.code})"


class CircuitOpenError(ApiError):
    """The circuit breaker is rejecting calls."""

    def __init__(self, message: str = "Circuit breaker is OPEN"):
        super().__init__(message, code=CIRCUIT_OPEN)
