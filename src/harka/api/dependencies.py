"""
FastAPI dependencies shared by the admin routers.

Services come from the container stored on app.state by create_app(),
so tests can build an app around their own container.
"""

import secrets
from typing import Optional

from fastapi import Depends, Header, Request

from ..core.container import Container
from ..domains.backup.services import BackupService
from ..domains.search.services import SearchIndexService
from .responses import APIException, ErrorCode


def get_container(request: Request) -> Container:
    """Get the container owned by the running application."""
    return request.app.state.container


def get_search_service(container: Container = Depends(get_container)) -> SearchIndexService:
    return container.search_service()


def get_backup_service(container: Container = Depends(get_container)) -> BackupService:
    return container.backup_service()


def _extract_token(authorization: Optional[str], x_admin_token: Optional[str]) -> Optional[str]:
    if x_admin_token:
        return x_admin_token
    if authorization and authorization.lower().startswith("bearer "):
        return authorization[7:].strip()
    return None


def require_admin(
    container: Container = Depends(get_container),
    authorization: Optional[str] = Header(None),
    x_admin_token: Optional[str] = Header(None),
) -> None:
    """
    Guard admin routes with the configured admin token.

    An empty admin_token leaves the routes open (development only).
    """
    expected = container.config.admin_token
    if not expected:
        return

    provided = _extract_token(authorization, x_admin_token)
    if not provided or not secrets.compare_digest(provided, expected):
        raise APIException(
            error_code=ErrorCode.AUTH_REQUIRED,
            message="Admin authentication required",
            headers={"WWW-Authenticate": "Bearer"},
        )
