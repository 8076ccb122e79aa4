"""
File store — the filesystem boundary. Paths handed to the store are
project-relative; anything that resolves outside the project root is
refused.
"""

from __future__ import annotations

import logging
import os
from typing import Protocol, runtime_checkable

logger = logging.getLogger(__name__)


class FileStoreError(Exception):
    """Base class for file store failures."""


class FileNotFoundInStore(FileStoreError):
    """Raised when reading a file that does not exist."""


class PathOutsideProjectError(FileStoreError):
    """Raised when a path resolves outside the project root."""


@runtime_checkable
class FileStore(Protocol):
    def exists(self, path: str) -> bool: ...

    def read(self, path: str) -> str: ...

    def write(self, path: str, content: str) -> None: ...

    def delete(self, path: str) -> None: ...


class LocalFileStore:
    """A :class:`FileStore` rooted at a directory on the local disk."""

    def __init__(self, root: str = ".") -> None:
        self.root = os.path.realpath(root)

    def resolve(self, path: str) -> str:
        """Absolute path for *path*, refusing anything outside the root."""
        candidate = path if os.path.isabs(path) else os.path.join(self.root, path)
        resolved = os.path.realpath(candidate)
        if os.path.commonpath([resolved, self.root]) != self.root:
            raise PathOutsideProjectError(
                f"Path {path} is outside project boundaries"
            )
        return resolved

    def relative(self, path: str) -> str:
        return os.path.relpath(self.resolve(path), self.root)

    def exists(self, path: str) -> bool:
        try:
            return os.path.isfile(self.resolve(path))
        except PathOutsideProjectError:
            logger.warning("[FileStore] Refusing to look outside root: %s", path)
            return False

    def read(self, path: str) -> str:
        abs_path = self.resolve(path)
        try:
            with open(abs_path, "r", encoding="utf-8", errors="replace") as f:
                return f.read()
        except FileNotFoundError as exc:
            raise FileNotFoundInStore(path) from exc

    def write(self, path: str, content: str) -> None:
        """Write *content* atomically via temp file + rename."""
        abs_path = self.resolve(path)
        os.makedirs(os.path.dirname(abs_path), exist_ok=True)
        tmp_path = abs_path + ".chatpatch_tmp"
        try:
            with open(tmp_path, "w", encoding="utf-8", newline="") as f:
                f.write(content)
            os.replace(tmp_path, abs_path)
        except OSError:
            try:
                os.unlink(tmp_path)
            except OSError:
                pass
            raise

    def delete(self, path: str) -> None:
        abs_path = self.resolve(path)
        try:
            os.unlink(abs_path)
        except FileNotFoundError as exc:
            raise FileNotFoundInStore(path) from exc
