"""
Filename resolver — infers a target path for fragments that do not name
one, falling back to a deterministic, language-based name.
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from typing import TYPE_CHECKING

from ..language import CONTEXTUAL_FILENAMES, extension_for_language
from .heuristics import (
    FilenameContext,
    HeuristicRegistry,
    first_valid,
    is_valid_filename,
)

if TYPE_CHECKING:
    from .fragment_extractor import CodeFragment

logger = logging.getLogger(__name__)

WINDOW_BEFORE = 300
WINDOW_AFTER = 100

_COMMENT_FILENAME = re.compile(r"((?:\.{1,2}/)?[\w.\-/]*\.[A-Za-z0-9]+)")


@dataclass
class FilenameResolution:
    """Where a fragment's filename came from."""
    filename: str
    source: str          # "explicit", a heuristic name, or "generated"

    @property
    def generated(self) -> bool:
        return self.source == "generated"


def filename_from_comment(comment: str) -> str | None:
    """Return the first valid filename mentioned in a fence-line comment."""
    return first_valid(m.group(1) for m in _COMMENT_FILENAME.finditer(comment))


def generate_fallback_filename(language: str | None, index: int) -> str | None:
    """Deterministic filename for a fragment in *language*.

    The same language and fragment index always give the same name;
    unknown languages give ``None``.
    """
    extension = extension_for_language(language)
    if extension is None:
        return None
    suggestions = CONTEXTUAL_FILENAMES.get(extension, [f"file.{extension}"])
    return suggestions[index % len(suggestions)]


class FilenameResolver:
    """Resolve target filenames using ordered textual heuristics."""

    def __init__(
        self,
        registry: HeuristicRegistry | None = None,
        window_before: int = WINDOW_BEFORE,
        window_after: int = WINDOW_AFTER,
    ) -> None:
        self._registry = registry if registry is not None else HeuristicRegistry()
        self._window_before = window_before
        self._window_after = window_after

    def context_at(self, text: str, offset: int) -> FilenameContext:
        return FilenameContext(
            before=text[max(0, offset - self._window_before):offset],
            after=text[offset:offset + self._window_after],
        )

    def find_in_context(
        self,
        text: str,
        offset: int,
        comment: str | None = None,
    ) -> FilenameResolution | None:
        """Try the fence comment, then each heuristic in order."""
        if comment:
            from_comment = filename_from_comment(comment)
            if from_comment:
                return FilenameResolution(from_comment, "fence_comment")

        context = self.context_at(text, offset)
        for name, heuristic in self._registry:
            try:
                candidate = heuristic(context)
            except Exception as exc:
                logger.warning("[Filename] Heuristic %s failed: %s", name, exc)
                continue
            if candidate and is_valid_filename(candidate):
                logger.debug(
                    "[Filename] Heuristic %s matched %s at offset %d",
                    name, candidate, offset,
                )
                return FilenameResolution(candidate, name)
        return None

    def resolve(
        self,
        fragment: "CodeFragment",
        text: str,
        index: int,
    ) -> FilenameResolution | None:
        """Resolve and record the filename for *fragment*.

        *index* is the fragment's position in extraction order; it picks
        the generated name when nothing in the text names a file.
        """
        if fragment.filename:
            return FilenameResolution(fragment.filename, "explicit")

        resolution = self.find_in_context(
            text, fragment.source_offset, fragment.inline_comment,
        )
        if resolution is None:
            generated = generate_fallback_filename(fragment.language, index)
            if generated is None:
                logger.warning(
                    "[Filename] No filename for fragment %d (language=%s)",
                    index, fragment.language,
                )
                return None
            resolution = FilenameResolution(generated, "generated")
            logger.debug(
                "[Filename] Generated fallback %s for fragment %d",
                generated, index,
            )

        fragment.filename = resolution.filename
        return resolution
