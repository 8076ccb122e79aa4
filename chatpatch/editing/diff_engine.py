"""
Line diff engine — order-preserving, streaming line alignment.

This is not a minimum-edit-distance diff. Each incoming new line is
matched against the old lines that have not been consumed yet; the
alignment can therefore be produced while new lines are still arriving,
without revisiting anything already emitted.

Invariants: the OLD and SAME lines of a diff spell out the old sequence,
and the NEW and SAME lines spell out the new sequence.
"""

from __future__ import annotations

import enum
import logging
import re
from dataclasses import dataclass
from typing import Iterable, Iterator, Sequence

logger = logging.getLogger(__name__)

_WHITESPACE = re.compile(r"\s+")


class DiffKind(str, enum.Enum):
    OLD = "old"
    NEW = "new"
    SAME = "same"


@dataclass(frozen=True)
class DiffLine:
    kind: DiffKind
    text: str


def normalize_whitespace(line: str) -> str:
    """Comparison key for fuzzy matching: the line with all whitespace removed.

    Broader than trimming the ends: interior spacing differences such as
    `add(a,b)` vs `add(a, b)` also count as whitespace-only divergence.
    """
    return _WHITESPACE.sub("", line)


class StreamingDiff:
    """Incremental alignment of new lines against a fixed old sequence.

    The old lines are held in an immutable tuple and consumed by advancing
    a cursor. Exact matches are preferred; once a whitespace-only
    divergence has been seen, lines that differ only in whitespace are
    also matched (emitted as an OLD/NEW pair rather than SAME).
    """

    def __init__(self, old_lines: Sequence[str]) -> None:
        self._old: tuple[str, ...] = tuple(old_lines)
        self._cursor = 0
        self._finished = False
        self.seen_indentation_mistake = False

    @property
    def remaining_old(self) -> int:
        return len(self._old) - self._cursor

    def push(self, new_line: str) -> list[DiffLine]:
        """Align one new line; returns the diff lines it resolves."""
        if self._finished:
            raise RuntimeError("push() called after finish()")

        if self._cursor >= len(self._old):
            return [DiffLine(DiffKind.NEW, new_line)]

        offset, exact = self._match(new_line)
        if offset < 0:
            return [DiffLine(DiffKind.NEW, new_line)]

        out = [
            DiffLine(DiffKind.OLD, self._old[self._cursor + i])
            for i in range(offset)
        ]
        self._cursor += offset
        matched = self._old[self._cursor]
        self._cursor += 1

        if exact:
            out.append(DiffLine(DiffKind.SAME, matched))
        else:
            out.append(DiffLine(DiffKind.OLD, matched))
            out.append(DiffLine(DiffKind.NEW, new_line))
        return out

    def finish(self) -> list[DiffLine]:
        """Flush the unconsumed old lines as deletions."""
        self._finished = True
        out = [DiffLine(DiffKind.OLD, line) for line in self._old[self._cursor:]]
        self._cursor = len(self._old)
        return out

    def _match(self, new_line: str) -> tuple[int, bool]:
        """Return (offset into the unconsumed old lines, exact?) or (-1, False)."""
        for i in range(self._cursor, len(self._old)):
            if self._old[i] == new_line:
                return i - self._cursor, True

        key = normalize_whitespace(new_line)
        fuzzy = -1
        for i in range(self._cursor, len(self._old)):
            if normalize_whitespace(self._old[i]) == key:
                fuzzy = i - self._cursor
                break

        if fuzzy >= 0 and not self.seen_indentation_mistake:
            self.seen_indentation_mistake = True
            logger.debug(
                "[StreamEdit] Whitespace-only divergence seen, fuzzy matching enabled"
            )

        if self.seen_indentation_mistake and fuzzy >= 0:
            return fuzzy, False
        return -1, False


class LineDiffEngine:
    """Produce tagged line diffs, all at once or as a stream."""

    def stream(
        self,
        old_lines: Sequence[str],
        new_lines: Iterable[str],
    ) -> Iterator[DiffLine]:
        """Yield diff lines as *new_lines* is consumed."""
        differ = StreamingDiff(old_lines)
        for line in new_lines:
            yield from differ.push(line)
        yield from differ.finish()

    def diff(self, old_lines: Sequence[str], new_lines: Sequence[str]) -> list[DiffLine]:
        return list(self.stream(old_lines, new_lines))


def old_side(diff_lines: Iterable[DiffLine]) -> list[str]:
    """The old sequence spelled out by a diff (OLD + SAME lines)."""
    return [d.text for d in diff_lines if d.kind is not DiffKind.NEW]


def new_side(diff_lines: Iterable[DiffLine]) -> list[str]:
    """The new sequence spelled out by a diff (NEW + SAME lines)."""
    return [d.text for d in diff_lines if d.kind is not DiffKind.OLD]


def count_kinds(diff_lines: Iterable[DiffLine]) -> tuple[int, int, int]:
    """Return (added, removed, unchanged) line counts."""
    added = removed = unchanged = 0
    for d in diff_lines:
        if d.kind is DiffKind.NEW:
            added += 1
        elif d.kind is DiffKind.OLD:
            removed += 1
        else:
            unchanged += 1
    return added, removed, unchanged
