"""
Backup store — timestamped copies of files taken before they are
overwritten or deleted.
"""

from __future__ import annotations

import logging
import os
from datetime import datetime, timezone
from typing import Protocol

from .file_store import LocalFileStore

logger = logging.getLogger(__name__)

_SUFFIX = ".backup"


class BackupError(Exception):
    """Raised when a backup cannot be created or restored."""


class BackupStore(Protocol):
    def create_backup(self, path: str) -> str: ...


def _timestamp() -> str:
    return datetime.now(timezone.utc).strftime("%Y-%m-%dT%H-%M-%S-%fZ")


class LocalBackupStore:
    """Keep backups of project files in a single directory.

    Backup names are ``<flattened path>.<UTC timestamp>.backup``; a
    counter is appended in the unlikely event of a collision.
    """

    def __init__(self, file_store: LocalFileStore, backup_dir: str) -> None:
        self._store = file_store
        self.backup_dir = (
            backup_dir if os.path.isabs(backup_dir)
            else os.path.join(file_store.root, backup_dir)
        )

    def _prefix(self, path: str) -> str:
        return self._store.relative(path).replace(os.sep, "__").replace("/", "__")

    def create_backup(self, path: str) -> str:
        """Copy *path* into the backup directory and return the copy's path."""
        try:
            content = self._store.read(path)
            os.makedirs(self.backup_dir, exist_ok=True)
            base = os.path.join(self.backup_dir, f"{self._prefix(path)}.{_timestamp()}")
            backup_path = base + _SUFFIX
            counter = 1
            while os.path.exists(backup_path):
                backup_path = f"{base}-{counter}{_SUFFIX}"
                counter += 1
            with open(backup_path, "w", encoding="utf-8", newline="") as f:
                f.write(content)
        except Exception as exc:
            raise BackupError(f"Failed to create backup of {path}: {exc}") from exc

        logger.info("[Backup] %s -> %s", path, backup_path)
        return backup_path

    def list_backups(self, path: str) -> list[str]:
        """Backups of *path*, newest first."""
        if not os.path.isdir(self.backup_dir):
            return []
        prefix = self._prefix(path) + "."
        names = [
            name for name in os.listdir(self.backup_dir)
            if name.startswith(prefix) and name.endswith(_SUFFIX)
        ]
        return [
            os.path.join(self.backup_dir, name)
            for name in sorted(names, reverse=True)
        ]

    def restore(self, backup_path: str, path: str) -> None:
        """Overwrite *path* with the contents of *backup_path*."""
        try:
            with open(backup_path, "r", encoding="utf-8") as f:
                content = f.read()
            self._store.write(path, content)
        except Exception as exc:
            raise BackupError(f"Failed to restore from backup: {exc}") from exc
        logger.info("[Backup] Restored %s from %s", path, backup_path)
