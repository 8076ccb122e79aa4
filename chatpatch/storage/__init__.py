"""Filesystem boundary: project file access and backups."""

from .file_store import (
    FileStore, LocalFileStore,
    FileStoreError, FileNotFoundInStore, PathOutsideProjectError,
)
from .backup_store import BackupStore, LocalBackupStore, BackupError

__all__ = [
    "FileStore", "LocalFileStore",
    "FileStoreError", "FileNotFoundInStore", "PathOutsideProjectError",
    "BackupStore", "LocalBackupStore", "BackupError",
]
