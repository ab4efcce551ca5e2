"""
HARKA Admin API Client

Async client for the admin backend using httpx.AsyncClient.

Every JSON call goes through the same pipeline:
- circuit breaker around the whole call
- retries with backoff for GET requests (never for 4xx or aborted calls)
- a per-attempt timeout
- optional client-side rate limiting

Calls tagged with a request_id can be cancelled; starting a new call with
the same id cancels the previous one.
"""

import asyncio
import dataclasses
import logging
from typing import Any, Callable, Dict, List, Optional

import httpx

from ..config import ApiClientConfig
from .errors import ABORTED, NETWORK_ERROR, TIMEOUT, ApiError
from .models import AdminSettings, UploadResult
from .resilience import CircuitBreaker, RateLimiter, RetryOptions, with_retry, with_timeout

logger = logging.getLogger(__name__)

DEFAULT_BASE_URL = "http://localhost:8001/api"
UPLOAD_CHUNK_SIZE = 64 * 1024


class _AbortHandle:
    """Cancellation state of one tagged request."""

    def __init__(self):
        self.aborted = False
        self.task: Optional[asyncio.Task] = None

    def abort(self) -> None:
        self.aborted = True
        if self.task is not None and not self.task.done():
            self.task.cancel()


def _parse_json(response: httpx.Response) -> Any:
    if not response.content:
        return None
    try:
        return response.json()
    except ValueError:
        return None


def _should_retry(error: BaseException) -> bool:
    if isinstance(error, ApiError):
        if error.code == ABORTED:
            return False
        if error.status is not None and 400 <= error.status < 500:
            return False
    return True


def _log_retry(error: BaseException, attempt: int) -> None:
    logger.warning(f"⚠️ Admin API call failed (attempt {attempt}), retrying: {error}")


def _query(**params: Any) -> Dict[str, Any]:
    return {key: value for key, value in params.items() if value is not None}


class AdminApiClient:
    """
    Async client for the HARKA admin API.

    Usage:
        async with AdminApiClient(base_url="https://admin.example.com/api") as api:
            settings = await api.get_settings()
            await api.update_user_role("42", "instructor")
    """

    def __init__(
        self,
        base_url: str = DEFAULT_BASE_URL,
        timeout: float = 30.0,
        retry_options: Optional[RetryOptions] = None,
        failure_threshold: int = 5,
        reset_timeout: float = 60.0,
        cookies: Optional[Dict[str, str]] = None,
        headers: Optional[Dict[str, str]] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
        rate_limiter: Optional[RateLimiter] = None,
    ):
        self._timeout = timeout
        self._rate_limiter = rate_limiter

        retry_options = retry_options or RetryOptions()
        self._retry_options = dataclasses.replace(
            retry_options,
            retry_condition=_should_retry,
            on_retry=retry_options.on_retry or _log_retry,
        )
        self.breaker = CircuitBreaker(failure_threshold=failure_threshold, reset_timeout=reset_timeout)

        self._in_flight: Dict[str, _AbortHandle] = {}

        self._http = httpx.AsyncClient(
            base_url=base_url,
            headers={"Content-Type": "application/json", **(headers or {})},
            cookies=cookies,
            timeout=timeout,
            transport=transport,
        )

        logger.info(f"AdminApiClient initialized for {base_url}")

    @classmethod
    def from_config(cls, config: ApiClientConfig, **kwargs: Any) -> "AdminApiClient":
        """Build a client from the api_client config section."""
        return cls(
            base_url=config.base_url,
            timeout=config.timeout,
            retry_options=RetryOptions(
                max_attempts=config.max_attempts,
                initial_delay=config.initial_delay,
                max_delay=config.max_delay,
                backoff_multiplier=config.backoff_multiplier,
            ),
            failure_threshold=config.failure_threshold,
            reset_timeout=config.reset_timeout,
            **kwargs,
        )

    # =========================================================================
    # REQUEST PIPELINE
    # =========================================================================

    async def request(
        self,
        endpoint: str,
        method: str = "GET",
        json: Any = None,
        params: Optional[Dict[str, Any]] = None,
        request_id: Optional[str] = None,
        skip_retry: bool = False,
    ) -> Any:
        """
        Send a JSON request and return the decoded body.

        Args:
            endpoint: Path relative to the base URL, e.g. "/admin/settings"
            method: HTTP method
            json: Request body
            params: Query parameters
            request_id: Tag for cancellation; aborts an in-flight call with the same tag
            skip_retry: Send GET requests once

        Returns:
            Decoded JSON body, or {} for empty and non-JSON success bodies

        Raises:
            ApiError: Non-2xx response, network failure, timeout or abort
            CircuitOpenError: The circuit breaker is open
        """
        method = method.upper()
        handle = _AbortHandle()
        if request_id:
            previous = self._in_flight.get(request_id)
            if previous is not None:
                previous.abort()
            self._in_flight[request_id] = handle

        async def attempt() -> Any:
            if handle.aborted:
                raise ApiError("Request aborted", code=ABORTED)
            if self._rate_limiter is not None:
                await self._rate_limiter.acquire()
            return await with_timeout(
                self._send_tracked(handle, method, endpoint, json, params),
                self._timeout,
                ApiError("Request timeout", code=TIMEOUT),
            )

        async def call() -> Any:
            if method == "GET" and not skip_retry:
                return await with_retry(attempt, self._retry_options)
            return await attempt()

        try:
            return await self.breaker.execute(call)
        finally:
            if request_id and self._in_flight.get(request_id) is handle:
                del self._in_flight[request_id]

    async def _send_tracked(
        self,
        handle: _AbortHandle,
        method: str,
        endpoint: str,
        json: Any,
        params: Optional[Dict[str, Any]],
    ) -> Any:
        task = asyncio.ensure_future(self._send(method, endpoint, json, params))
        handle.task = task
        try:
            return await task
        except asyncio.CancelledError:
            if handle.aborted:
                raise ApiError("Request aborted", code=ABORTED) from None
            raise
        finally:
            handle.task = None

    async def _send(
        self,
        method: str,
        endpoint: str,
        json: Any,
        params: Optional[Dict[str, Any]],
    ) -> Any:
        try:
            response = await self._http.request(method, endpoint, json=json, params=params)
        except httpx.TimeoutException as e:
            raise ApiError("Request timeout", code=TIMEOUT) from e
        except httpx.TransportError as e:
            raise ApiError(f"Network error: {e}", code=NETWORK_ERROR) from e

        body = _parse_json(response)

        if not response.is_success:
            error_body = body if isinstance(body, dict) else {}
            raise ApiError(
                error_body.get("message") or f"HTTP {response.status_code}: {response.reason_phrase}",
                status=response.status_code,
                code=error_body.get("code"),
                details=body,
            )

        return {} if body is None else body

    def cancel_request(self, request_id: str) -> bool:
        """Abort the in-flight call tagged request_id. Returns False if none."""
        handle = self._in_flight.pop(request_id, None)
        if handle is None:
            return False
        handle.abort()
        return True

    def cancel_all_requests(self) -> None:
        for handle in self._in_flight.values():
            handle.abort()
        self._in_flight.clear()

    # =========================================================================
    # SETTINGS
    # =========================================================================

    async def get_settings(self) -> AdminSettings:
        data = await self.request("/admin/settings")
        return AdminSettings.model_validate(data)

    async def update_settings(self, section: str, data: Dict[str, Any]) -> AdminSettings:
        """Patch one settings section; returns the full updated settings."""
        result = await self.request(f"/admin/settings/{section}", method="PATCH", json=data)
        return AdminSettings.model_validate(result)

    # =========================================================================
    # USERS
    # =========================================================================

    async def get_users(
        self,
        page: Optional[int] = None,
        limit: Optional[int] = None,
        role: Optional[str] = None,
        status: Optional[str] = None,
        search: Optional[str] = None,
    ) -> Dict[str, Any]:
        params = _query(page=page, limit=limit, role=role, status=status, search=search)
        return await self.request("/admin/users", params=params)

    async def update_user_role(self, user_id: str, role: str) -> Dict[str, Any]:
        return await self.request(f"/admin/users/{user_id}/role", method="PATCH", json={"role": role})

    async def suspend_user(self, user_id: str, reason: Optional[str] = None) -> Dict[str, Any]:
        return await self.request(f"/admin/users/{user_id}/suspend", method="POST", json={"reason": reason})

    async def bulk_delete_users(self, user_ids: List[str]) -> Dict[str, Any]:
        return await self.request("/admin/users/bulk-delete", method="POST", json={"userIds": user_ids})

    # =========================================================================
    # AUDIT LOGS
    # =========================================================================

    async def get_audit_logs(
        self,
        page: Optional[int] = None,
        limit: Optional[int] = None,
        category: Optional[str] = None,
        severity: Optional[str] = None,
        start_date: Optional[str] = None,
        end_date: Optional[str] = None,
    ) -> Dict[str, Any]:
        params = _query(
            page=page,
            limit=limit,
            category=category,
            severity=severity,
            startDate=start_date,
            endDate=end_date,
        )
        return await self.request("/admin/audit-logs", params=params)

    # =========================================================================
    # FILES
    # =========================================================================

    async def export_data(self, type: str, format: str = "json") -> bytes:
        """Download an export (users, courses, analytics) as raw bytes."""
        try:
            response = await self._http.get(f"/admin/export/{type}", params={"format": format})
        except httpx.TransportError as e:
            raise ApiError("Export failed", code=NETWORK_ERROR) from e

        if not response.is_success:
            raise ApiError("Export failed", status=response.status_code)
        return response.content

    async def upload_file(
        self,
        filename: str,
        content: bytes,
        content_type: str = "application/octet-stream",
        on_progress: Optional[Callable[[int], None]] = None,
    ) -> UploadResult:
        """
        Upload a file as multipart form data, reporting progress.

        Args:
            filename: Name sent with the form part
            content: File bytes
            content_type: MIME type of the file
            on_progress: Called with the percentage (0-100) sent so far

        Raises:
            ApiError: Non-2xx response, invalid response body or network failure
        """
        # Encode the multipart body up front so progress can be measured against its length
        form = httpx.Request("POST", "http://upload.invalid", files={"file": (filename, content, content_type)})
        body = form.read()
        total = len(body)

        async def chunks():
            sent = 0
            for start in range(0, total, UPLOAD_CHUNK_SIZE):
                chunk = body[start:start + UPLOAD_CHUNK_SIZE]
                yield chunk
                sent += len(chunk)
                if on_progress:
                    on_progress(round(sent * 100 / total))

        try:
            response = await self._http.post(
                "/admin/upload",
                content=chunks(),
                headers={
                    "Content-Type": form.headers["Content-Type"],
                    "Content-Length": str(total),
                },
            )
        except httpx.TransportError as e:
            raise ApiError("Upload failed", code=NETWORK_ERROR) from e

        if not response.is_success:
            raise ApiError(f"Upload failed: {response.status_code}", status=response.status_code)

        try:
            return UploadResult.model_validate(response.json())
        except ValueError as e:
            raise ApiError("Invalid response format") from e

    # =========================================================================
    # LIFECYCLE
    # =========================================================================

    async def close(self):
        """Cancel tagged requests and close the HTTP client."""
        self.cancel_all_requests()
        await self._http.aclose()

    async def __aenter__(self):
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        await self.close()
