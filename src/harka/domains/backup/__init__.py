"""
Backup Domain

Point-in-time backups of platform records:
- Create, list, delete
- Restore with conflict reporting and dry runs
- JSON / ZIP export and checksum-verified import
- Validation and recurring schedules

Routes live in .api and are registered by harka.routers.
"""

from .errors import (
    BackupError,
    BackupFormatError,
    BackupIntegrityError,
    BackupNotFoundError,
)
from .models import (
    BackupData,
    BackupMetadata,
    BackupOptions,
    BackupSchedule,
    BackupValidation,
    ExportFormat,
    RestoreOptions,
    RestoreResult,
    ScheduledBackup,
)
from .services import BackupService

__all__ = [
    "BackupError",
    "BackupFormatError",
    "BackupIntegrityError",
    "BackupNotFoundError",
    "BackupData",
    "BackupMetadata",
    "BackupOptions",
    "BackupSchedule",
    "BackupValidation",
    "ExportFormat",
    "RestoreOptions",
    "RestoreResult",
    "ScheduledBackup",
    "BackupService",
]
