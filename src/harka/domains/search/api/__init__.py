"""
Search Domain API Routes

Aggregates admin search sub-routers.
"""

from fastapi import APIRouter

from .admin_search import router as admin_search_router

router = APIRouter()

# admin_search_router carries the /search prefix
router.include_router(admin_search_router)

__all__ = ["router"]
