"""
Backup Domain API Routes

Aggregates backup sub-routers.
"""

from fastapi import APIRouter

from .backups import router as backups_router

router = APIRouter()

# backups_router carries the /backups prefix
router.include_router(backups_router)

__all__ = ["router"]
