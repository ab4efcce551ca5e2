"""
Router Registry - Centralized router registration for the admin app.

All admin routers are mounted under /api/admin and guarded by the admin
token check.
"""

from fastapi import Depends, FastAPI

ADMIN_PREFIX = "/api/admin"


def register_routers(app: FastAPI) -> None:
    """Register all routers with the FastAPI application."""
    from .api.dependencies import require_admin
    from .domains.backup.api import router as backup_router
    from .domains.search.api import router as search_router

    admin_guard = [Depends(require_admin)]

    app.include_router(search_router, prefix=ADMIN_PREFIX, dependencies=admin_guard)
    app.include_router(backup_router, prefix=ADMIN_PREFIX, dependencies=admin_guard)
