"""
Filename heuristics — small pure functions that look for a target filename
in the text surrounding a code fragment, plus the registry that orders them.

Each heuristic takes a :class:`FilenameContext` and returns a valid
filename or ``None``. Matches in the text *before* the fragment are tried
nearest-first, then matches in the text after it.
"""

from __future__ import annotations

import importlib
import logging
import re
from dataclasses import dataclass
from typing import Callable, Iterable, Optional

from ..language import VALID_EXTENSIONS, get_extension

logger = logging.getLogger(__name__)

_MAX_FILENAME_LENGTH = 100
_INVALID_CHARS = set('<>:"|?*')

# Bare file name (no directory) and directory-qualified path
_NAME = r"[\w\-][\w.\-]*\.[A-Za-z0-9]+(?![\w/])"
_PATH = r"(?:\.{1,2}/)?[\w.\-]+(?:/[\w.\-]+)*/[\w\-][\w.\-]*\.[A-Za-z0-9]+(?![\w/])"
_ANY = rf"(?:{_PATH}|{_NAME})"


@dataclass(frozen=True)
class FilenameContext:
    """Text windows around a fragment's opening fence."""
    before: str
    after: str


FilenameHeuristic = Callable[[FilenameContext], Optional[str]]


def is_valid_filename(filename: str) -> bool:
    """Return True if *filename* looks like a real source/config file name."""
    if "." not in filename:
        return False
    if len(filename) > _MAX_FILENAME_LENGTH:
        return False
    if any(ch in _INVALID_CHARS for ch in filename):
        return False
    return get_extension(filename) in VALID_EXTENSIONS


def first_valid(candidates: Iterable[str]) -> str | None:
    for candidate in candidates:
        if is_valid_filename(candidate):
            return candidate
    return None


def pattern_heuristic(pattern: str, flags: int = re.IGNORECASE) -> FilenameHeuristic:
    """Build a heuristic from a regex whose first group is the filename."""
    compiled = re.compile(pattern, flags)

    def heuristic(context: FilenameContext) -> str | None:
        before = [m.group(1) for m in compiled.finditer(context.before)]
        after = [m.group(1) for m in compiled.finditer(context.after)]
        return first_valid(list(reversed(before)) + after)

    heuristic.__doc__ = f"Match {pattern!r}"
    return heuristic


# ── Built-in heuristics, in priority order ──

explicit_verb = pattern_heuristic(
    r"\b(?:file|update|modify|create|save(?:\s+(?:to|as))?|write(?:\s+to)?|in)"
    rf"\s+`?({_NAME})`?"
)
verb_with_path = pattern_heuristic(
    rf"\b(?:file|update|modify|create|save|write)\s+`?({_PATH})`?"
)
bold_markdown = pattern_heuristic(rf"\*\*`?({_ANY})`?\*\*")
backtick_name = pattern_heuristic(rf"`({_ANY})`")
colon_suffix = pattern_heuristic(rf"({_ANY}):")
fence_line = pattern_heuristic(rf"```[\w+#.-]*[ \t]*(?://|#)?[ \t]*({_ANY})")
heres_your = pattern_heuristic(
    r"\bhere(?:'s|’s|\s+is)?\s+(?:(?:your|the|an?)\s+)?(?:updated?\s+)?"
    rf"`?({_ANY})`?"
)
for_file = pattern_heuristic(rf"\bfor\s+`?({_ANY})`?")
add_to_file = pattern_heuristic(rf"\badd\s+(?:this\s+)?(?:to\s+)?`?({_ANY})`?")
update_file = pattern_heuristic(rf"\bupdate\s+(?:your\s+)?`?({_ANY})`?")

BUILTIN_HEURISTICS: list[tuple[str, FilenameHeuristic]] = [
    ("explicit_verb", explicit_verb),
    ("verb_with_path", verb_with_path),
    ("bold_markdown", bold_markdown),
    ("backtick_name", backtick_name),
    ("colon_suffix", colon_suffix),
    ("fence_line", fence_line),
    ("heres_your", heres_your),
    ("for_file", for_file),
    ("add_to_file", add_to_file),
    ("update_file", update_file),
]


class HeuristicRegistry:
    """Ordered, name-addressable collection of filename heuristics.

    Instances are built explicitly and handed to the resolver; there is no
    module-level registry to mutate.
    """

    def __init__(
        self,
        heuristics: Iterable[tuple[str, FilenameHeuristic]] | None = None,
    ) -> None:
        self._heuristics: list[tuple[str, FilenameHeuristic]] = list(
            BUILTIN_HEURISTICS if heuristics is None else heuristics
        )

    def register(
        self,
        name: str,
        heuristic: FilenameHeuristic,
        index: int | None = None,
    ) -> None:
        """Add *heuristic* under *name* (appended unless *index* is given)."""
        if name in self.names():
            raise ValueError(f"Heuristic already registered: {name}")
        if index is None:
            self._heuristics.append((name, heuristic))
        else:
            self._heuristics.insert(index, (name, heuristic))

    def unregister(self, name: str) -> None:
        self._heuristics = [(n, h) for n, h in self._heuristics if n != name]

    def names(self) -> list[str]:
        return [name for name, _ in self._heuristics]

    def __iter__(self):
        return iter(list(self._heuristics))

    def __len__(self) -> int:
        return len(self._heuristics)

    def load_from_paths(self, dotted_paths: Iterable[str]) -> None:
        """Append heuristics given as dotted import paths.

        Example: ``my_package.naming.django_settings_file``
        """
        for dotted_path in dotted_paths:
            heuristic = self._load_from_path(dotted_path)
            if heuristic is not None:
                self.register(dotted_path, heuristic)

    @staticmethod
    def _load_from_path(dotted_path: str) -> FilenameHeuristic | None:
        try:
            module_path, attr_name = dotted_path.rsplit(".", 1)
            module = importlib.import_module(module_path)
            heuristic = getattr(module, attr_name)
        except (ImportError, AttributeError, ValueError) as exc:
            logger.warning(
                "[Filename] Failed to load heuristic '%s': %s", dotted_path, exc,
            )
            return None
        if not callable(heuristic):
            logger.warning("[Filename] %s is not callable", dotted_path)
            return None
        logger.info("[Filename] Loaded heuristic: %s", dotted_path)
        return heuristic
