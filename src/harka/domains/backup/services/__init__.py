"""Backup domain services."""

from .backup_service import (
    BackupService,
    canonical_payload,
    compute_checksum,
)

__all__ = ["BackupService", "canonical_payload", "compute_checksum"]
