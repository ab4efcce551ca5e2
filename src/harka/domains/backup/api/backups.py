"""
Backup API Routes

Backup management for the admin console: create, list, restore,
download, upload, validate and schedule.

Domain errors (not found, bad format, failed integrity check) are mapped
to error envelopes by harka.api.responses.
"""

import logging
from typing import List

from fastapi import APIRouter, Depends, File, Query, Response, UploadFile

from ....api.dependencies import get_backup_service
from ....api.responses import raise_not_found
from ..models import (
    BackupData,
    BackupMetadata,
    BackupOptions,
    BackupValidation,
    ExportFormat,
    RestoreOptions,
    RestoreRequest,
    RestoreResult,
    ScheduledBackup,
    ScheduleRequest,
)
from ..services import BackupService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/backups", tags=["backups"])


@router.get("", response_model=List[BackupMetadata])
async def list_backups(service: BackupService = Depends(get_backup_service)):
    """List stored backups, oldest first."""
    return service.get_backups()


@router.post("", response_model=BackupMetadata, status_code=201)
async def create_backup(
    options: BackupOptions,
    service: BackupService = Depends(get_backup_service),
):
    """Capture the requested entity types into a new backup."""
    return service.create_backup(options)


@router.post("/import", response_model=BackupMetadata, status_code=201)
async def import_backup(
    file: UploadFile = File(..., description="Exported backup (.json or .zip)"),
    service: BackupService = Depends(get_backup_service),
):
    """Upload a previously exported backup. The checksum must match."""
    content = await file.read()
    logger.info(f"Importing backup file {file.filename} ({len(content)} bytes)")
    return service.import_backup(content)


# Schedules are registered before "/{backup_id}" so the path is not captured as an id

@router.get("/schedules", response_model=List[ScheduledBackup])
async def list_schedules(service: BackupService = Depends(get_backup_service)):
    """List recurring backups, soonest first."""
    return service.get_scheduled_backups()


@router.post("/schedules", status_code=201)
async def create_schedule(
    request: ScheduleRequest,
    service: BackupService = Depends(get_backup_service),
):
    """Register a recurring backup."""
    schedule_id = service.schedule_backup(request.options, request.schedule)
    return {"id": schedule_id}


@router.get("/{backup_id}", response_model=BackupData)
async def get_backup(
    backup_id: str,
    service: BackupService = Depends(get_backup_service),
):
    backup = service.get_backup(backup_id)
    if backup is None:
        raise_not_found("Backup", backup_id)
    return backup


@router.delete("/{backup_id}", status_code=204)
async def delete_backup(
    backup_id: str,
    service: BackupService = Depends(get_backup_service),
):
    if not service.delete_backup(backup_id):
        raise_not_found("Backup", backup_id)
    return Response(status_code=204)


@router.post("/{backup_id}/restore", response_model=RestoreResult)
async def restore_backup(
    backup_id: str,
    request: RestoreRequest,
    service: BackupService = Depends(get_backup_service),
):
    """
    Restore a backup into the live repository.

    Existing records are reported as conflicts unless overwriteExisting
    is set. Use dryRun to preview counts without writing.
    """
    options = RestoreOptions(backup_id=backup_id, **request.model_dump())
    return service.restore_backup(options)


@router.get("/{backup_id}/export")
async def export_backup(
    backup_id: str,
    format: ExportFormat = Query(ExportFormat.JSON),
    service: BackupService = Depends(get_backup_service),
):
    """Download a backup as JSON or as a ZIP holding backup.json."""
    exported = service.export_backup(backup_id, format)
    return Response(
        content=exported.content,
        media_type=exported.media_type,
        headers={"Content-Disposition": f'attachment; filename="{exported.filename}"'},
    )


@router.get("/{backup_id}/validate", response_model=BackupValidation)
async def validate_backup(
    backup_id: str,
    service: BackupService = Depends(get_backup_service),
):
    """Check age, checksum and completeness of a stored backup."""
    return service.validate_backup(backup_id)


__all__ = ["router"]
