"""
Backup Service

Creates, stores, exports, imports, validates and restores backups of
platform records read through an EntityRepository.

Integrity: every backup carries a SHA-256 checksum of its canonical payload
(the flat backup document without the checksum and size fields, serialized
with sorted keys and compact separators as UTF-8). Imports recompute it and
reject any mismatch.

Backups live in memory for the lifetime of the service; export them to keep
them across restarts.
"""

import hashlib
import io
import json
import logging
import uuid
import zipfile
from datetime import datetime, timedelta, timezone
from typing import Any, Callable, Dict, List, Optional, Sequence, Tuple, Union

from pydantic import ValidationError
from pydantic_core import to_jsonable_python

from ....core.ports import EntityRepository, Record, record_id
from ..errors import BackupFormatError, BackupIntegrityError, BackupNotFoundError
from ..models import (
    BackupData,
    BackupMetadata,
    BackupOptions,
    BackupSchedule,
    BackupValidation,
    ExportedBackup,
    ExportFormat,
    RestoreError,
    RestoreOptions,
    RestoreResult,
    ScheduledBackup,
)

logger = logging.getLogger(__name__)

DEFAULT_EXPECTED_ENTITIES = ("users", "courses", "discussions", "activities")
DEFAULT_MAX_AGE_DAYS = 30

ARCHIVE_MEMBER = "backup.json"

CONFLICT_MESSAGE = "Item already exists and overwrite is disabled"

SCHEDULE_INTERVALS: Dict[BackupSchedule, timedelta] = {
    BackupSchedule.DAILY: timedelta(days=1),
    BackupSchedule.WEEKLY: timedelta(days=7),
    BackupSchedule.MONTHLY: timedelta(days=30),
}


def _new_id(prefix: str) -> str:
    return f"{prefix}_{uuid.uuid4().hex[:16]}"


def _as_utc(value: datetime) -> datetime:
    return value if value.tzinfo else value.replace(tzinfo=timezone.utc)


def canonical_payload(document: Dict[str, Any]) -> bytes:
    """
    Serialized bytes the checksum and size are computed over.

    Takes the flat backup document exactly as exported or parsed; only
    metadata.checksum and metadata.size are left out.
    """
    document = dict(document)
    metadata = dict(document.get("metadata") or {})
    metadata.pop("checksum", None)
    metadata.pop("size", None)
    document["metadata"] = metadata
    return json.dumps(
        document, sort_keys=True, separators=(",", ":"), ensure_ascii=False
    ).encode("utf-8")


def compute_checksum(payload: bytes) -> str:
    return hashlib.sha256(payload).hexdigest()


class BackupService:
    """Backup lifecycle over an entity repository."""

    def __init__(
        self,
        repository: EntityRepository,
        expected_entities: Sequence[str] = DEFAULT_EXPECTED_ENTITIES,
        max_age_days: int = DEFAULT_MAX_AGE_DAYS,
        clock: Optional[Callable[[], datetime]] = None,
    ):
        self._repository = repository
        self._expected_entities = list(expected_entities)
        self._max_age_days = max_age_days
        self._clock = clock or (lambda: datetime.now(timezone.utc))

        self._backups: Dict[str, BackupData] = {}
        self._schedules: Dict[str, ScheduledBackup] = {}

    # =========================================================================
    # CREATE / READ / DELETE
    # =========================================================================

    def create_backup(self, options: BackupOptions) -> BackupMetadata:
        """
        Capture the requested entity types into a new stored backup.

        Returns:
            Metadata of the new backup (the payload stays in the service)
        """
        metadata = BackupMetadata(
            id=_new_id("backup"),
            name=options.name,
            description=options.description,
            created_at=self._clock(),
            included_entities=list(options.included_entities),
            created_by=options.created_by,
        )

        entities: Dict[str, List[Record]] = {}
        for entity_type in options.included_entities:
            records = to_jsonable_python(self._repository.fetch_entities(entity_type))
            entities[entity_type] = records
            metadata.entity_counts[entity_type] = len(records)

        backup = BackupData(metadata=metadata, entities=entities)
        self._seal(backup)
        self._backups[metadata.id] = backup

        logger.info(
            f"✅ Created backup {metadata.id} ({backup.metadata.size} bytes, "
            f"entities: {', '.join(metadata.included_entities)})"
        )
        return backup.metadata.model_copy(deep=True)

    def get_backups(self) -> List[BackupMetadata]:
        """Metadata of every stored backup, in creation order."""
        return [backup.metadata.model_copy(deep=True) for backup in self._backups.values()]

    def get_backup(self, backup_id: str) -> Optional[BackupData]:
        """Full copy of a stored backup, or None."""
        backup = self._backups.get(backup_id)
        return backup.model_copy(deep=True) if backup else None

    def delete_backup(self, backup_id: str) -> bool:
        """Delete a stored backup. Returns False if it did not exist."""
        deleted = self._backups.pop(backup_id, None) is not None
        if deleted:
            logger.info(f"Deleted backup {backup_id}")
        return deleted

    def _require(self, backup_id: str) -> BackupData:
        backup = self._backups.get(backup_id)
        if backup is None:
            raise BackupNotFoundError(backup_id)
        return backup

    def _seal(self, backup: BackupData) -> None:
        payload = canonical_payload(backup.to_document())
        backup.metadata.size = len(payload)
        backup.metadata.checksum = compute_checksum(payload)

    # =========================================================================
    # RESTORE
    # =========================================================================

    def restore_backup(self, options: RestoreOptions) -> RestoreResult:
        """
        Write a stored backup's records back through the repository.

        Records that already exist are skipped and reported unless
        overwrite_existing is set. A failure of a whole entity type is
        reported with id "bulk" and marks the result unsuccessful; the
        remaining types are still restored.

        Raises:
            BackupNotFoundError: No backup with options.backup_id
        """
        backup = self._require(options.backup_id)
        result = RestoreResult()

        entity_types = (
            options.selected_entities
            if options.selected_entities is not None
            else backup.metadata.included_entities
        )

        for entity_type in entity_types:
            records = backup.entities.get(entity_type)
            if records is None:
                continue

            if options.dry_run:
                result.restored[entity_type] = len(records)
                continue

            try:
                restored, skipped, errors = self._restore_records(
                    entity_type, records, options.overwrite_existing
                )
            except Exception as e:
                logger.exception(f"❌ Restoring {entity_type} from {backup.metadata.id} failed")
                result.errors.append(RestoreError(entity=entity_type, id="bulk", error=str(e)))
                result.success = False
                continue

            result.restored[entity_type] = restored
            if skipped:
                result.skipped[entity_type] = skipped
            result.errors.extend(errors)

        total_restored = sum(result.restored.values())
        if options.dry_run:
            result.summary = (
                f"Dry run completed. Would restore {total_restored} items "
                f"across {len(result.restored)} entity types."
            )
        else:
            result.summary = (
                f"Restore completed. {total_restored} items restored "
                f"with {len(result.errors)} errors."
            )

        logger.info(f"Restore of {backup.metadata.id}: {result.summary}")
        return result

    def _restore_records(
        self,
        entity_type: str,
        records: List[Record],
        overwrite: bool,
    ) -> Tuple[int, int, List[RestoreError]]:
        restored = 0
        skipped = 0
        errors: List[RestoreError] = []

        for record in records:
            item_id = record_id(record) if isinstance(record, dict) else None
            try:
                if item_id is None:
                    raise ValueError("Record has no id")

                if not overwrite and self._repository.exists(entity_type, item_id):
                    errors.append(RestoreError(entity=entity_type, id=item_id, error=CONFLICT_MESSAGE))
                    skipped += 1
                    continue

                self._repository.save(entity_type, record)
                restored += 1
            except Exception as e:
                logger.warning(f"⚠️ Could not restore {entity_type} {item_id}: {e}")
                errors.append(RestoreError(entity=entity_type, id=item_id or "", error=str(e)))

        return restored, skipped, errors

    # =========================================================================
    # EXPORT / IMPORT
    # =========================================================================

    def export_backup(self, backup_id: str, format: Union[ExportFormat, str] = ExportFormat.JSON) -> ExportedBackup:
        """
        Render a stored backup as a downloadable file.

        JSON exports are the pretty-printed backup document; ZIP exports hold
        the same document as backup.json.

        Raises:
            BackupNotFoundError: No backup with this id
        """
        backup = self._require(backup_id)
        export_format = ExportFormat(format)
        text = json.dumps(backup.to_document(), indent=2, ensure_ascii=False)

        if export_format is ExportFormat.JSON:
            return ExportedBackup(
                filename=f"{backup_id}.json",
                media_type="application/json",
                content=text.encode("utf-8"),
            )

        buffer = io.BytesIO()
        with zipfile.ZipFile(buffer, "w", compression=zipfile.ZIP_DEFLATED) as archive:
            archive.writestr(ARCHIVE_MEMBER, text)
        return ExportedBackup(
            filename=f"{backup_id}.zip",
            media_type="application/zip",
            content=buffer.getvalue(),
        )

    def import_backup(self, content: Union[bytes, str]) -> BackupMetadata:
        """
        Verify and store an exported backup under a new id.

        Raises:
            BackupFormatError: Not a backup document or archive
            BackupIntegrityError: Undecodable content, missing or mismatched checksum or size
        """
        raw = content.encode("utf-8") if isinstance(content, str) else content

        if zipfile.is_zipfile(io.BytesIO(raw)):
            try:
                with zipfile.ZipFile(io.BytesIO(raw)) as archive:
                    raw = archive.read(ARCHIVE_MEMBER)
            except KeyError as e:
                raise BackupFormatError(f"Backup archive has no {ARCHIVE_MEMBER}") from e
            except zipfile.BadZipFile as e:
                raise BackupIntegrityError("Backup archive is corrupted") from e

        try:
            document = json.loads(raw.decode("utf-8"))
        except (UnicodeDecodeError, json.JSONDecodeError) as e:
            raise BackupIntegrityError("Backup file is corrupted: not valid JSON") from e

        metadata = document.get("metadata") if isinstance(document, dict) else None
        if not isinstance(metadata, dict) or not metadata.get("id"):
            raise BackupFormatError("Invalid backup file format")

        checksum = metadata.get("checksum")
        if not checksum:
            raise BackupIntegrityError("Backup file has no checksum")

        # Verified against the document as written, before any model parsing
        payload = canonical_payload(document)
        if compute_checksum(payload) != checksum:
            logger.error(f"❌ Integrity check failed for imported backup {metadata['id']}")
            raise BackupIntegrityError("Backup file integrity check failed")
        if metadata.get("size") != len(payload):
            logger.error(f"❌ Size mismatch for imported backup {metadata['id']}")
            raise BackupIntegrityError("Backup file size does not match its contents")

        try:
            backup = BackupData.from_document(document)
        except ValidationError as e:
            raise BackupFormatError(f"Invalid backup metadata: {e.error_count()} errors") from e

        original_id = backup.metadata.id
        backup.metadata.id = _new_id("imported")
        self._seal(backup)
        self._backups[backup.metadata.id] = backup

        logger.info(f"✅ Imported backup {original_id} as {backup.metadata.id}")
        return backup.metadata.model_copy(deep=True)

    # =========================================================================
    # VALIDATION
    # =========================================================================

    def validate_backup(self, backup_id: str) -> BackupValidation:
        """Check a stored backup's age, checksum and completeness."""
        backup = self._backups.get(backup_id)
        if backup is None:
            return BackupValidation(valid=False, issues=["Backup not found"])

        issues: List[str] = []
        recommendations: List[str] = []

        age = self._clock() - _as_utc(backup.metadata.created_at)
        if age > timedelta(days=self._max_age_days):
            issues.append(f"Backup is older than {self._max_age_days} days")
            recommendations.append("Consider creating a more recent backup")

        if compute_checksum(canonical_payload(backup.to_document())) != backup.metadata.checksum:
            issues.append("Backup checksum mismatch - data may be corrupted")
            recommendations.append("Re-download or recreate the backup")

        missing = [e for e in self._expected_entities if e not in backup.metadata.included_entities]
        if missing:
            recommendations.append(f"Consider including missing entities: {', '.join(missing)}")

        return BackupValidation(valid=not issues, issues=issues, recommendations=recommendations)

    # =========================================================================
    # SCHEDULES
    # =========================================================================

    def schedule_backup(self, options: BackupOptions, schedule: Union[BackupSchedule, str]) -> str:
        """Register a recurring backup; the first run is one interval from now."""
        cadence = BackupSchedule(schedule)
        scheduled = ScheduledBackup(
            id=_new_id("schedule"),
            name=options.name,
            schedule=cadence,
            next_run=self._clock() + SCHEDULE_INTERVALS[cadence],
            options=options,
        )
        self._schedules[scheduled.id] = scheduled
        logger.info(f"Scheduled backup \"{options.name}\" to run {cadence.value}")
        return scheduled.id

    def get_scheduled_backups(self) -> List[ScheduledBackup]:
        """Registered schedules, soonest first."""
        return sorted(
            (s.model_copy(deep=True) for s in self._schedules.values()),
            key=lambda s: s.next_run,
        )

    def run_due_backups(self, now: Optional[datetime] = None) -> List[BackupMetadata]:
        """
        Create a backup for every enabled schedule whose next run has passed.

        Each schedule runs at most once per call and is advanced past `now`.
        """
        now = now or self._clock()
        created: List[BackupMetadata] = []

        for scheduled in self._schedules.values():
            if not scheduled.enabled or scheduled.next_run > now:
                continue

            created.append(self.create_backup(scheduled.options))

            interval = SCHEDULE_INTERVALS[scheduled.schedule]
            while scheduled.next_run <= now:
                scheduled.next_run += interval

        return created
