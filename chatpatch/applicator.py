"""
File applicator — writes :class:`FileChangeCandidate` objects to disk with
backups, dry-run support and per-path serialization.
"""

from __future__ import annotations

import logging
import threading
from dataclasses import dataclass, field
from typing import Iterable, Optional

from .diff_display import compute_diff
from .editing.metrics import log_edit_metric
from .editing.patch_applier import EditResult, StreamEditor
from .editing.scope_resolver import EditRange, content_range
from .extraction.change_type import ChangeType, FileChangeCandidate
from .storage.backup_store import BackupError, LocalBackupStore
from .storage.file_store import FileStoreError, LocalFileStore

logger = logging.getLogger(__name__)


@dataclass
class ApplicationResult:
    """Outcome of applying one candidate."""
    path: str
    change_type: ChangeType
    success: bool = False
    backup_path: Optional[str] = None
    new_content: Optional[str] = None
    edit_summary: Optional[str] = None
    edit_confidence: Optional[int] = None
    dry_run: bool = False
    error: str = ""


@dataclass
class ApplicationSummary:
    """Outcome of applying a batch of candidates."""
    results: list[ApplicationResult] = field(default_factory=list)

    @property
    def applied(self) -> list[ApplicationResult]:
        return [r for r in self.results if r.success]

    @property
    def failed(self) -> list[ApplicationResult]:
        return [r for r in self.results if not r.success]

    @property
    def success(self) -> bool:
        return not self.failed


@dataclass
class DiffPreview:
    """What applying a candidate would do, without touching disk."""
    path: str
    change_type: ChangeType
    original_content: Optional[str]
    new_content: Optional[str]
    diff_text: Optional[str]
    edit_summary: Optional[str] = None
    error: str = ""


class FileApplicator:
    """Apply file change candidates to a project.

    Parameters
    ----------
    file_store:
        Project file access.
    backup_store:
        Where backups go before updates and deletes; ``None`` disables
        backups.
    dry_run:
        Compute results without writing, deleting or backing up.
    metrics_file:
        JSONL file receiving one metric entry per applied candidate.
    """

    def __init__(
        self,
        file_store: LocalFileStore,
        backup_store: LocalBackupStore | None = None,
        dry_run: bool = False,
        editor: StreamEditor | None = None,
        metrics_file: str | None = None,
    ) -> None:
        self._store = file_store
        self._backups = backup_store
        self._dry_run = dry_run
        self._editor = editor or StreamEditor()
        self._metrics_file = metrics_file
        self._locks: dict[str, threading.Lock] = {}
        self._locks_guard = threading.Lock()

    def _lock_for(self, path: str) -> threading.Lock:
        key = self._store.resolve(path)
        with self._locks_guard:
            lock = self._locks.get(key)
            if lock is None:
                lock = self._locks[key] = threading.Lock()
            return lock

    # ------------------------------------------------------------------
    # Planning
    # ------------------------------------------------------------------

    def plan_edit(self, candidate: FileChangeCandidate,
                  original: str) -> EditResult:
        """Patch *original* with the candidate's content."""
        if candidate.line_range is not None:
            edit_range = EditRange.from_one_based(
                candidate.line_range.start, candidate.line_range.end,
            )
        else:
            edit_range = content_range(original)
        return self._editor.apply_edit(original, candidate.content, edit_range)

    def preview(self, candidates: Iterable[FileChangeCandidate]) -> list[DiffPreview]:
        """Describe each candidate's effect without changing anything."""
        previews: list[DiffPreview] = []
        for candidate in candidates:
            original: Optional[str] = None
            new_content: Optional[str] = None
            summary: Optional[str] = None
            error = ""
            try:
                if candidate.change_type is ChangeType.CREATE:
                    new_content = candidate.content
                else:
                    original = self._store.read(candidate.path)
                    if candidate.change_type is ChangeType.UPDATE:
                        edit = self.plan_edit(candidate, original)
                        new_content, summary = edit.new_content, edit.summary
                    else:
                        new_content = ""
            except FileStoreError as exc:
                error = str(exc)

            diff_text = None
            if not error:
                diff_text = compute_diff(candidate.path, original, new_content)
            previews.append(DiffPreview(
                path=candidate.path,
                change_type=candidate.change_type,
                original_content=original,
                new_content=new_content,
                diff_text=diff_text,
                edit_summary=summary,
                error=error,
            ))
        return previews

    # ------------------------------------------------------------------
    # Application
    # ------------------------------------------------------------------

    def apply(self, candidates: Iterable[FileChangeCandidate]) -> ApplicationSummary:
        """Apply every candidate in order.

        A failure is recorded on that candidate's result and the remaining
        candidates are still applied.
        """
        summary = ApplicationSummary()
        for candidate in candidates:
            result = ApplicationResult(
                path=candidate.path,
                change_type=candidate.change_type,
                dry_run=self._dry_run,
            )
            try:
                with self._lock_for(candidate.path):
                    self._apply_one(candidate, result)
                result.success = True
            except (FileStoreError, BackupError, OSError) as exc:
                result.error = str(exc)
                logger.warning(
                    "[Apply] %s %s failed: %s",
                    candidate.change_type.value, candidate.path, exc,
                )
            summary.results.append(result)

            if self._metrics_file and not self._dry_run:
                log_edit_metric({
                    "path": candidate.path,
                    "change_type": candidate.change_type.value,
                    "confidence": candidate.confidence,
                    "edit_confidence": result.edit_confidence,
                    "summary": result.edit_summary,
                    "success": result.success,
                }, self._metrics_file)

        logger.info(
            "[Apply] %d applied, %d failed%s",
            len(summary.applied), len(summary.failed),
            " (dry run)" if self._dry_run else "",
        )
        return summary

    def _apply_one(self, candidate: FileChangeCandidate,
                   result: ApplicationResult) -> None:
        path = candidate.path

        if candidate.change_type is ChangeType.CREATE:
            if self._store.exists(path):
                raise FileStoreError(f"Refusing to create {path}: file already exists")
            result.new_content = candidate.content
            if not self._dry_run:
                self._store.write(path, candidate.content)
            logger.info("[Apply] Created %s", path)
            return

        original = self._store.read(path)

        if candidate.change_type is ChangeType.UPDATE:
            edit = self.plan_edit(candidate, original)
            result.new_content = edit.new_content
            result.edit_summary = edit.summary
            result.edit_confidence = edit.confidence
            if not self._dry_run:
                result.backup_path = self._backup(path)
                self._store.write(path, edit.new_content)
            logger.info("[Apply] Updated %s (%s)", path, edit.summary)
            return

        if not self._dry_run:
            result.backup_path = self._backup(path)
            self._store.delete(path)
        logger.info("[Apply] Deleted %s", path)

    def _backup(self, path: str) -> Optional[str]:
        if self._backups is None:
            return None
        return self._backups.create_backup(path)

    # ------------------------------------------------------------------
    # Backups
    # ------------------------------------------------------------------

    def list_backups(self, path: str) -> list[str]:
        """Backups of *path*, newest first."""
        if self._backups is None:
            return []
        return self._backups.list_backups(path)

    def restore_from_backup(self, backup_path: str, path: str) -> None:
        """Overwrite *path* with *backup_path*."""
        if self._backups is None:
            raise BackupError("Backups are disabled")
        with self._lock_for(path):
            self._backups.restore(backup_path, path)
