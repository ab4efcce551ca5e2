"""
HARKA Admin SDK

Async client for the admin API plus the resilience primitives it is built on.

Usage:
    from harka.sdk import AdminApiClient

    async with AdminApiClient() as api:
        settings = await api.get_settings()
"""

from .client import AdminApiClient
from .errors import ApiError, CircuitOpenError
from .models import AdminSettings, UploadResult
from .resilience import (
    BatchProcessor,
    CircuitBreaker,
    CircuitState,
    DebouncedError,
    RateLimiter,
    RetryOptions,
    calculate_delay,
    debounce_async,
    with_retry,
    with_timeout,
)

__all__ = [
    "AdminApiClient",
    "ApiError",
    "CircuitOpenError",
    "AdminSettings",
    "UploadResult",
    "BatchProcessor",
    "CircuitBreaker",
    "CircuitState",
    "DebouncedError",
    "RateLimiter",
    "RetryOptions",
    "calculate_delay",
    "debounce_async",
    "with_retry",
    "with_timeout",
]
