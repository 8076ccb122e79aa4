"""
Fragment extractor — pulls fenced code blocks out of a chat response and
records the hints (language, filename, action verb) found around them.
"""

from __future__ import annotations

import logging
import os
import re
from dataclasses import dataclass
from typing import Optional

from ..language import detect_language_from_filename
from .filename_resolver import filename_from_comment

logger = logging.getLogger(__name__)

# Fragments whose stripped content is not longer than this are dropped.
MIN_FRAGMENT_LENGTH = 10

# Characters of content used when deduplicating fragments
_DEDUP_PREFIX = 100

# "Create utils/math.js:" immediately followed by a fenced block
_FILE_HEADER_PATTERN = re.compile(
    r"\b(create|update|modify|add)\s+`?([^\s:`]+\.[A-Za-z0-9]+)`?:?[ \t]*\r?\n"
    r"(```([\w+#.-]*)[^\n]*\n(.*?)```)",
    re.IGNORECASE | re.DOTALL,
)

# Any fenced block; group 2 is the remainder of the opening fence line
_FENCE_PATTERN = re.compile(
    r"```([\w+#.-]*)[ \t]*([^\n]*)\n(.*?)```",
    re.DOTALL,
)

_COMMENT_MARKERS = ("//", "#", "/*", "<!--", "--")


@dataclass
class CodeFragment:
    """A candidate block of code text extracted from a response."""
    content: str
    language: Optional[str] = None
    filename: Optional[str] = None
    action_hint: Optional[str] = None
    source_offset: int = 0          # offset of the opening fence
    end_offset: int = 0             # offset just past the closing fence
    inline_comment: Optional[str] = None

    def dedup_key(self) -> tuple:
        return (self.content[:_DEDUP_PREFIX], self.language, self.filename)


class FragmentExtractor:
    """Parse raw response text into :class:`CodeFragment` objects."""

    def __init__(self, min_length: int = MIN_FRAGMENT_LENGTH) -> None:
        self._min_length = min_length

    def extract(self, text: str) -> list[CodeFragment]:
        """Extract code fragments from *text*, in order of appearance.

        Blocks introduced by a file header ("Update src/app.js:") are
        captured first and carry the header's filename and action verb;
        the remaining fenced blocks are captured afterwards. A block is
        never captured twice.
        """
        fragments: list[CodeFragment] = []
        captured_fences: set[int] = set()

        # Pass 1: file headers
        for match in _FILE_HEADER_PATTERN.finditer(text):
            action, filename, _, language, body = match.groups()
            fence_start = match.start(3)
            captured_fences.add(fence_start)

            content = self._clean_block(body)
            if not self._long_enough(content):
                logger.debug(
                    "[Extract] Skipping short header block at offset %d",
                    fence_start,
                )
                continue

            fragments.append(CodeFragment(
                content=content,
                language=(language.lower() if language
                          else detect_language_from_filename(filename)),
                filename=filename,
                action_hint=action.lower(),
                source_offset=fence_start,
                end_offset=match.end(3),
            ))

        # Pass 2: generic fenced blocks
        for match in _FENCE_PATTERN.finditer(text):
            if match.start() in captured_fences:
                continue
            language, fence_info, body = match.groups()

            content = self._clean_block(body)
            if not self._long_enough(content):
                logger.debug(
                    "[Extract] Skipping short block at offset %d", match.start(),
                )
                continue

            comment = self._fence_comment(fence_info)
            fragments.append(CodeFragment(
                content=content,
                language=language.lower() if language else None,
                filename=filename_from_comment(comment) if comment else None,
                source_offset=match.start(),
                end_offset=match.end(),
                inline_comment=comment,
            ))

        fragments.sort(key=lambda f: f.source_offset)
        result = self._deduplicate(fragments)
        logger.info(
            "[Extract] %d fragment(s) extracted from %d characters",
            len(result), len(text),
        )
        return result

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------

    def _long_enough(self, content: str) -> bool:
        return len(content.strip()) > self._min_length

    @staticmethod
    def _clean_block(body: str) -> str:
        """Drop surrounding blank lines and trailing whitespace, keep indentation."""
        lines = [line.rstrip("\r") for line in body.split("\n")]
        while lines and not lines[0].strip():
            lines.pop(0)
        while lines and not lines[-1].strip():
            lines.pop()
        return "\n".join(lines).rstrip()

    @staticmethod
    def _fence_comment(fence_info: str) -> str | None:
        """Return the trailing comment on an opening fence line, if any."""
        info = fence_info.strip()
        if not info:
            return None
        for marker in _COMMENT_MARKERS:
            if info.startswith(marker):
                info = info[len(marker):]
                break
        info = info.rstrip("*/-> ").strip()
        return info or None

    @staticmethod
    def _deduplicate(fragments: list[CodeFragment]) -> list[CodeFragment]:
        seen: set[tuple] = set()
        unique: list[CodeFragment] = []
        for fragment in fragments:
            key = fragment.dedup_key()
            if key in seen:
                logger.debug(
                    "[Extract] Dropping duplicate fragment at offset %d",
                    fragment.source_offset,
                )
                continue
            seen.add(key)
            unique.append(fragment)
        return unique


def clean_fragment_content(content: str, filename: str) -> str:
    """Strip artefacts that should not land in the target file.

    JSON targets lose any leading comment or blank lines; other targets
    lose a first-line comment that merely names the file.
    """
    ext = os.path.splitext(filename)[1].lower()
    lines = content.split("\n")

    if ext == ".json":
        while lines and (
            lines[0].strip().startswith(("//", "#")) or not lines[0].strip()
        ):
            lines.pop(0)
    elif lines:
        first = lines[0].strip()
        base_name = os.path.basename(filename)
        if first.startswith(("//", "#", "/*", "<!--")) and base_name in first:
            lines.pop(0)

    return "\n".join(lines).rstrip()


def extract_explanation(text: str) -> str | None:
    """Return the prose part of a response (fenced blocks removed).

    Returns ``None`` when 50 characters or fewer remain.
    """
    explanation = re.sub(r"```.*?```", "", text, flags=re.DOTALL)
    explanation = re.sub(r"\n{3,}", "\n\n", explanation).strip()
    return explanation if len(explanation) > 50 else None
