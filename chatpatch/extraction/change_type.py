"""
Change type resolution — turns a resolved fragment into a
:class:`FileChangeCandidate` (create / update / delete).
"""

from __future__ import annotations

import enum
import logging
import re
from dataclasses import dataclass, field
from typing import Optional

from ..storage.file_store import FileStore
from .fragment_extractor import CodeFragment

logger = logging.getLogger(__name__)

CONTEXT_WINDOW = 200

_DELETE_WORDS = re.compile(r"\b(?:delete|remove)")
_LINE_RANGE = re.compile(r"\blines?\s+(\d+)(?:\s*[-–]\s*(\d+))?", re.IGNORECASE)


class ChangeType(str, enum.Enum):
    CREATE = "create"
    UPDATE = "update"
    DELETE = "delete"


@dataclass(frozen=True)
class LineRange:
    """1-based, inclusive line range named in the response text."""
    start: int
    end: int


@dataclass
class FileChangeCandidate:
    """A fragment resolved to a target path, change type and confidence."""
    path: str
    content: str
    change_type: ChangeType
    original_content: Optional[str] = None
    confidence: int = 0
    reasoning: list[str] = field(default_factory=list)
    line_range: Optional[LineRange] = None

    def __post_init__(self) -> None:
        if not self.path:
            raise ValueError("FileChangeCandidate requires a non-empty path")
        self.confidence = min(100, max(0, int(self.confidence)))

    def to_dict(self) -> dict:
        return {
            "path": self.path,
            "content": self.content,
            "change_type": self.change_type.value,
            "original_content": self.original_content,
            "confidence": self.confidence,
            "reasoning": list(self.reasoning),
            "line_range": (
                {"start": self.line_range.start, "end": self.line_range.end}
                if self.line_range else None
            ),
        }


def surrounding_text(fragment: CodeFragment, text: str,
                     window: int = CONTEXT_WINDOW) -> str:
    """Lower-cased text just before and just after the fragment's fence."""
    start = fragment.source_offset
    end = fragment.end_offset or start
    before = text[max(0, start - window):start]
    after = text[end:end + window]
    return f"{before}\n{after}".lower()


def extract_line_range(text: str) -> LineRange | None:
    """Parse a "line 12" / "lines 12-20" reference from *text*."""
    match = _LINE_RANGE.search(text)
    if not match:
        return None
    start = int(match.group(1))
    end = int(match.group(2)) if match.group(2) else start
    if end < start:
        start, end = end, start
    return LineRange(start, end)


class ChangeTypeResolver:
    """Decide create / update / delete from file existence and wording."""

    def __init__(self, file_store: FileStore, window: int = CONTEXT_WINDOW) -> None:
        self._store = file_store
        self._window = window

    def resolve(
        self,
        path: str,
        fragment: CodeFragment,
        text: str,
    ) -> ChangeType | None:
        """Return the change type, or ``None`` when no change should be made."""
        if self._store.exists(path):
            if _DELETE_WORDS.search(surrounding_text(fragment, text, self._window)):
                change_type = ChangeType.DELETE
            else:
                change_type = ChangeType.UPDATE
        elif fragment.content.strip():
            change_type = ChangeType.CREATE
        else:
            logger.debug("[ChangeType] %s: missing file and empty content", path)
            return None

        logger.debug("[ChangeType] %s -> %s", path, change_type.value)
        return change_type

    def line_range_for(self, fragment: CodeFragment, text: str) -> LineRange | None:
        start = fragment.source_offset
        return extract_line_range(text[max(0, start - self._window):start])
