"""
Backup Domain Models

Pydantic models for backup metadata, restore requests and results.
JSON uses camelCase aliases to match the exported backup documents.
"""

from datetime import datetime, timezone
from enum import Enum
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

BACKUP_FORMAT_VERSION = "1.0.0"


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class CamelModel(BaseModel):
    """Base model with camelCase JSON aliases."""
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


# =============================================================================
# ENUMS
# =============================================================================

class ExportFormat(str, Enum):
    JSON = "json"
    ZIP = "zip"


class BackupSchedule(str, Enum):
    DAILY = "daily"
    WEEKLY = "weekly"
    MONTHLY = "monthly"


# =============================================================================
# BACKUPS
# =============================================================================

class BackupMetadata(CamelModel):
    """Descriptive header stored with every backup."""
    model_config = ConfigDict(extra="forbid")

    id: str
    name: str
    description: Optional[str] = None
    created_at: datetime = Field(default_factory=_utcnow)
    size: int = 0
    version: str = BACKUP_FORMAT_VERSION
    checksum: str = ""
    entity_counts: Dict[str, int] = Field(default_factory=dict)
    included_entities: List[str] = Field(default_factory=list)
    created_by: str = "system"


class BackupData(BaseModel):
    """
    A stored backup: metadata plus one record list per entity type.

    The exported document is flat: {"metadata": {...}, "users": [...], ...}
    """
    metadata: BackupMetadata
    entities: Dict[str, List[Dict[str, Any]]] = Field(default_factory=dict)

    def to_document(self) -> Dict[str, Any]:
        """Flat JSON-native document, as written by exports."""
        document: Dict[str, Any] = {
            "metadata": self.metadata.model_dump(mode="json", by_alias=True),
        }
        document.update(self.entities)
        return document

    @classmethod
    def from_document(cls, document: Dict[str, Any]) -> "BackupData":
        """Build from a flat document; the caller validates its shape first."""
        entities = {
            key: value for key, value in document.items()
            if key != "metadata" and isinstance(value, list)
        }
        return cls(metadata=BackupMetadata.model_validate(document["metadata"]), entities=entities)


class BackupOptions(CamelModel):
    """What to include in a new backup."""
    name: str = Field(..., min_length=1, max_length=255)
    description: Optional[str] = None
    included_entities: List[str] = Field(..., min_length=1)
    # Accepted for compatibility with the admin UI; exports are not compressed/encrypted
    compression: bool = False
    encryption: bool = False
    created_by: str = "system"


class ExportedBackup(BaseModel):
    """A downloadable backup file."""
    filename: str
    media_type: str
    content: bytes


# =============================================================================
# RESTORE
# =============================================================================

class RestoreOptions(CamelModel):
    """How to restore a stored backup."""
    backup_id: str
    overwrite_existing: bool = False
    selected_entities: Optional[List[str]] = None
    dry_run: bool = False


class RestoreRequest(CamelModel):
    """Restore options as posted to /backups/{id}/restore."""
    overwrite_existing: bool = False
    selected_entities: Optional[List[str]] = None
    dry_run: bool = False


class RestoreError(CamelModel):
    entity: str
    id: str
    error: str


class RestoreResult(CamelModel):
    """Outcome of a restore; success is false only when a whole entity type failed."""
    success: bool = True
    restored: Dict[str, int] = Field(default_factory=dict)
    skipped: Dict[str, int] = Field(default_factory=dict)
    errors: List[RestoreError] = Field(default_factory=list)
    summary: str = ""


class BackupValidation(CamelModel):
    valid: bool
    issues: List[str] = Field(default_factory=list)
    recommendations: List[str] = Field(default_factory=list)


# =============================================================================
# SCHEDULES
# =============================================================================

class ScheduleRequest(CamelModel):
    """Schedule request as posted to /backups/schedules."""
    options: BackupOptions
    schedule: BackupSchedule


class ScheduledBackup(CamelModel):
    id: str
    name: str
    schedule: BackupSchedule
    next_run: datetime
    enabled: bool = True
    options: BackupOptions
