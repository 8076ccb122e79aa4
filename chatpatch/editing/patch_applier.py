"""
Patch applier — rebuilds file content from a streaming line diff and
summarises what the edit did.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Iterable, Iterator

from .diff_engine import DiffKind, DiffLine, LineDiffEngine, count_kinds, new_side
from .scope_resolver import EditRange, content_range, detect_edit_range, split_content

logger = logging.getLogger(__name__)


@dataclass
class EditResult:
    """Outcome of a precise edit."""
    diff_lines: list[DiffLine] = field(default_factory=list)
    new_content: str = ""
    summary: str = "+0 -0 ~0 lines"
    confidence: int = 0


def summarize(diff_lines: Iterable[DiffLine]) -> str:
    added, removed, unchanged = count_kinds(diff_lines)
    return f"+{added} -{removed} ~{unchanged} lines"


def edit_confidence(diff_lines: Iterable[DiffLine]) -> int:
    """How trustworthy an edit looks: targeted edits beat wholesale rewrites."""
    added, removed, unchanged = count_kinds(diff_lines)
    changed = added + removed
    if unchanged > 0 and changed / (unchanged + changed) < 0.5:
        return 90
    if added > 0 and removed == 0:
        return 85
    if added > 0 and removed > 0:
        return 75
    return 60


def leading_indentation(prefix: str) -> str:
    """Indentation of the last line of *prefix* (ignoring its line break)."""
    if prefix.endswith("\n"):
        prefix = prefix[:-1]
    last = prefix.split("\n")[-1]
    return last[: len(last) - len(last.lstrip())]


def reindent(diff_line: DiffLine, indentation: str) -> DiffLine:
    if diff_line.kind is not DiffKind.NEW or not indentation or not diff_line.text.strip():
        return diff_line
    return DiffLine(DiffKind.NEW, indentation + diff_line.text)


def request_lines(edit_request: str) -> list[str]:
    """Split replacement text into lines, ignoring one trailing newline."""
    if not edit_request:
        return []
    if edit_request.endswith("\n"):
        edit_request = edit_request[:-1]
    return edit_request.split("\n")


class PatchApplier:
    """Reconstruct content from (prefix, diff, suffix)."""

    def apply(
        self,
        prefix: str,
        diff_lines: Iterable[DiffLine],
        suffix: str,
        insertion: bool = False,
    ) -> EditResult:
        """Build the edited content.

        When *insertion* is set (nothing was highlighted), NEW lines take
        the indentation of the last line of *prefix*.
        """
        lines = list(diff_lines)
        if insertion:
            indentation = leading_indentation(prefix)
            lines = [reindent(d, indentation) for d in lines]

        kept = new_side(lines)
        if not kept and not insertion:
            # Removed span: drop the line break it leaves at the seam.
            if suffix.startswith("\n"):
                suffix = suffix[1:]
            elif prefix.endswith("\n"):
                prefix = prefix[:-1]
        new_content = prefix + "\n".join(kept) + suffix
        result = EditResult(
            diff_lines=lines,
            new_content=new_content,
            summary=summarize(lines),
            confidence=edit_confidence(lines),
        )
        logger.debug("[StreamEdit] %s (confidence %d)", result.summary, result.confidence)
        return result


class StreamEditor:
    """Apply replacement text to a file as a minimal line-level patch."""

    def __init__(
        self,
        engine: LineDiffEngine | None = None,
        applier: PatchApplier | None = None,
    ) -> None:
        self._engine = engine or LineDiffEngine()
        self._applier = applier or PatchApplier()

    def resolve_range(self, original_content: str, edit_request: str,
                      target_range: EditRange | None) -> EditRange:
        if target_range is not None:
            return target_range
        detected = detect_edit_range(original_content, edit_request)
        if detected is not None:
            return detected
        return content_range(original_content)

    def apply_edit(
        self,
        original_content: str,
        edit_request: str,
        target_range: EditRange | None = None,
    ) -> EditResult:
        """Replace *target_range* of *original_content* with *edit_request*.

        Without a range, the function or TODO marker named by the request
        is targeted; failing that, the whole file.
        """
        edit_range = self.resolve_range(original_content, edit_request, target_range)
        prefix, highlighted, suffix = split_content(original_content, edit_range)
        old_lines = highlighted.split("\n") if highlighted else []

        diff_lines = self._engine.diff(old_lines, request_lines(edit_request))
        return self._applier.apply(prefix, diff_lines, suffix, insertion=not highlighted)

    def iter_edit(
        self,
        original_content: str,
        new_lines: Iterable[str],
        target_range: EditRange | None = None,
    ) -> Iterator[DiffLine]:
        """Yield diff lines while replacement lines are still arriving.

        Without a range the whole file is the target.
        """
        edit_range = target_range or content_range(original_content)
        prefix, highlighted, _ = split_content(original_content, edit_range)
        old_lines = highlighted.split("\n") if highlighted else []
        indentation = "" if highlighted else leading_indentation(prefix)

        for diff_line in self._engine.stream(old_lines, new_lines):
            yield reindent(diff_line, indentation)
