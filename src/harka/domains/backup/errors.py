"""Backup domain exceptions."""


class BackupError(Exception):
    """Base class for backup failures."""


class BackupNotFoundError(BackupError):
    """No backup is stored under the requested id."""

    def __init__(self, backup_id: str):
        self.backup_id = backup_id
        super().__init__(f"Backup not found: {backup_id}")


class BackupFormatError(BackupError):
    """An imported file is not a backup document."""


class BackupIntegrityError(BackupError):
    """A backup's checksum does not match its contents."""
