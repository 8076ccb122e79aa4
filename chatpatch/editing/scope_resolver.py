"""
Scope resolver — determines which lines of a file an edit replaces,
either from an explicit range or by locating the function or TODO marker
the edit talks about.
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from typing import Optional

logger = logging.getLogger(__name__)

# Function / class names mentioned in an edit request
_DEFINITION_PATTERNS = [
    re.compile(r"\bfunction\s+(\w+)"),
    re.compile(r"\b(?:async\s+)?def\s+(\w+)"),
    re.compile(r"\bclass\s+(\w+)"),
    re.compile(r"\b(?:const|let|var)\s+(\w+)\s*=\s*(?:async\s+)?(?:function|\()"),
    re.compile(r"\b(\w+)\s*function\b", re.IGNORECASE),
]

_TODO_MARKER = re.compile(r"\b(?:TODO|FIXME)\b")
_COMPLETION_WORDS = re.compile(r"\b(?:implement|complete)", re.IGNORECASE)


@dataclass(frozen=True)
class EditRange:
    """0-based, inclusive line range of the original content to replace.

    ``end_line == start_line - 1`` denotes an empty range: a pure
    insertion before ``start_line``.
    """
    start_line: int
    end_line: int

    @property
    def is_insertion(self) -> bool:
        return self.end_line < self.start_line

    @classmethod
    def insertion_at(cls, line: int) -> "EditRange":
        return cls(line, line - 1)

    @classmethod
    def from_one_based(cls, start: int, end: int) -> "EditRange":
        """Convert a 1-based inclusive range (as written in prose)."""
        return cls(max(0, start - 1), max(0, end - 1))


def content_range(content: str) -> EditRange:
    """The range covering every line of *content* except a final newline."""
    lines = content.split("\n")
    last = len(lines) - 1
    if content.endswith("\n") and last > 0:
        last -= 1
    return EditRange(0, last)


def split_content(content: str, edit_range: EditRange) -> tuple[str, str, str]:
    """Split *content* into (prefix, highlighted, suffix) around *edit_range*.

    ``prefix + highlighted + suffix`` reproduces *content* when the range
    is not empty.
    """
    lines = content.split("\n")
    start = min(max(edit_range.start_line, 0), len(lines))
    end = min(edit_range.end_line, len(lines) - 1)
    if end < start - 1:
        end = start - 1

    prefix = "\n".join(lines[:start]) + ("\n" if start > 0 else "")
    highlighted = "\n".join(lines[start:end + 1])
    if end < len(lines) - 1:
        suffix = "\n" + "\n".join(lines[end + 1:])
    else:
        suffix = ""
    return prefix, highlighted, suffix


def _definition_name(edit_request: str) -> str | None:
    for pattern in _DEFINITION_PATTERNS:
        match = pattern.search(edit_request)
        if match:
            return match.group(1)
    return None


def _find_definition(lines: list[str], name: str) -> int | None:
    definition = re.compile(
        rf"\b(?:function\s+{re.escape(name)}\b|(?:async\s+)?def\s+{re.escape(name)}\b"
        rf"|class\s+{re.escape(name)}\b|(?:const|let|var)\s+{re.escape(name)}\s*=)"
    )
    for i, line in enumerate(lines):
        if definition.search(line):
            return i
    call = re.compile(rf"\b{re.escape(name)}\s*\(")
    for i, line in enumerate(lines):
        if call.search(line):
            return i
    return None


def _indent_width(line: str) -> int:
    return len(line) - len(line.lstrip())


def _block_end(lines: list[str], start: int) -> int:
    """Last line of the block starting at *start*.

    Colon-terminated headers (Python) end where indentation returns to the
    header's level; anything else ends where its braces balance.
    """
    header = lines[start].rstrip()
    if header.endswith(":"):
        base = _indent_width(lines[start])
        end = start
        for j in range(start + 1, len(lines)):
            if not lines[j].strip():
                continue
            if _indent_width(lines[j]) <= base:
                break
            end = j
        return end

    depth = 0
    opened = False
    for j in range(start, len(lines)):
        depth += lines[j].count("{") - lines[j].count("}")
        if lines[j].count("{"):
            opened = True
        if opened and depth <= 0:
            return j
    return start if not opened else len(lines) - 1


def detect_edit_range(content: str, edit_request: str) -> Optional[EditRange]:
    """Guess the range of *content* that *edit_request* rewrites.

    Returns ``None`` when nothing specific is found (caller edits the
    whole file).
    """
    lines = content.split("\n")

    name = _definition_name(edit_request)
    if name:
        start = _find_definition(lines, name)
        if start is not None:
            end = _block_end(lines, start)
            logger.debug(
                "[StreamEdit] Edit targets %s at lines %d-%d", name, start, end,
            )
            return EditRange(start, end)

    if _COMPLETION_WORDS.search(edit_request):
        for i, line in enumerate(lines):
            if _TODO_MARKER.search(line):
                logger.debug("[StreamEdit] Edit targets TODO marker at line %d", i)
                return EditRange(i, i)

    return None
