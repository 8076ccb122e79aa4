"""
Programmatic API for chatpatch — analyse chat responses and apply edits.

Example usage::

    from chatpatch import analyze_response, apply_edit

    result = analyze_response(response_text, project_root="my-app")
    for change in result.file_changes:
        print(change.change_type.value, change.path, change.confidence)

    edit = apply_edit(original, replacement)
    print(edit.summary)
"""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass, field
from typing import Optional

from .config import Config
from .editing.patch_applier import EditResult, StreamEditor
from .editing.scope_resolver import EditRange
from .extraction.change_type import ChangeTypeResolver, FileChangeCandidate
from .extraction.classifier import ActionabilityClassifier, Classification, Decision
from .extraction.filename_resolver import FilenameResolver
from .extraction.fragment_extractor import (
    CodeFragment,
    FragmentExtractor,
    clean_fragment_content,
    extract_explanation,
)
from .extraction.heuristics import HeuristicRegistry
from .storage.file_store import FileStore, FileStoreError, LocalFileStore

logger = logging.getLogger(__name__)


@dataclass
class AnalysisSummary:
    """Per-response fragment counts."""
    total_blocks: int = 0
    actionable_blocks: int = 0
    examples: int = 0
    explanations: int = 0

    def to_dict(self) -> dict:
        return {
            "total_blocks": self.total_blocks,
            "actionable_blocks": self.actionable_blocks,
            "examples": self.examples,
            "explanations": self.explanations,
        }


@dataclass
class AnalysisResult:
    """Structured result returned by :func:`analyze_response`."""
    file_changes: list[FileChangeCandidate] = field(default_factory=list)
    analysis: AnalysisSummary = field(default_factory=AnalysisSummary)
    explanation: Optional[str] = None
    fragments: list[CodeFragment] = field(default_factory=list)

    def to_dict(self) -> dict:
        return {
            "file_changes": [c.to_dict() for c in self.file_changes],
            "analysis": self.analysis.to_dict(),
            "explanation": self.explanation,
        }


def _normalize_path(filename: str) -> str:
    """Project-relative, forward-slash form of a filename from prose."""
    path = filename.strip().replace("\\", "/")
    while path.startswith("./"):
        path = path[2:]
    return os.path.normpath(path).replace(os.sep, "/")


class ResponseAnalyzer:
    """Turn a chat response into :class:`FileChangeCandidate` objects.

    Every collaborator is injected so tests can substitute fakes; the
    defaults reproduce the stock pipeline.

    Parameters
    ----------
    file_store:
        Used to check whether targets exist and to read their content.
    extractor, resolver, classifier, change_resolver:
        Pipeline stages; built with default settings when omitted.
    """

    def __init__(
        self,
        file_store: FileStore,
        extractor: FragmentExtractor | None = None,
        resolver: FilenameResolver | None = None,
        classifier: ActionabilityClassifier | None = None,
        change_resolver: ChangeTypeResolver | None = None,
    ) -> None:
        self._store = file_store
        self._extractor = extractor or FragmentExtractor()
        self._resolver = resolver or FilenameResolver()
        self._classifier = classifier or ActionabilityClassifier()
        self._change_resolver = change_resolver or ChangeTypeResolver(file_store)

    @classmethod
    def from_config(cls, cfg: Config, file_store: FileStore | None = None) -> "ResponseAnalyzer":
        """Build an analyzer wired with the thresholds and heuristics in *cfg*."""
        store = file_store or LocalFileStore(cfg.PROJECT_ROOT)
        registry = HeuristicRegistry()
        registry.load_from_paths(cfg.FILENAME_HEURISTICS)
        return cls(
            store,
            extractor=FragmentExtractor(min_length=cfg.MIN_FRAGMENT_LENGTH),
            resolver=FilenameResolver(
                registry,
                window_before=cfg.FILENAME_WINDOW_BEFORE,
                window_after=cfg.FILENAME_WINDOW_AFTER,
            ),
            classifier=ActionabilityClassifier(
                threshold=cfg.ACTIONABLE_THRESHOLD,
                window=cfg.CLASSIFIER_WINDOW,
            ),
            change_resolver=ChangeTypeResolver(store, window=cfg.CLASSIFIER_WINDOW),
        )

    def analyze_response(self, text: str) -> AnalysisResult:
        """Analyse one response.

        Fragments are processed sequentially in order of appearance.
        Exemplar and explanatory fragments are counted but never become
        candidates; actionable fragments that cannot be given a filename
        are dropped.
        """
        fragments = self._extractor.extract(text or "")
        summary = AnalysisSummary(total_blocks=len(fragments))
        changes: list[FileChangeCandidate] = []

        for index, fragment in enumerate(fragments):
            classification = self._classifier.classify(fragment, text)
            if classification.decision is Decision.EXEMPLAR:
                summary.examples += 1
                continue
            if classification.decision is Decision.EXPLANATORY:
                summary.explanations += 1
                continue
            summary.actionable_blocks += 1

            candidate = self._build_candidate(fragment, text, index, classification)
            if candidate is not None:
                changes.append(candidate)

        logger.info(
            "[Extract] %d block(s): %d actionable, %d example(s), "
            "%d explanation(s) -> %d change(s)",
            summary.total_blocks, summary.actionable_blocks, summary.examples,
            summary.explanations, len(changes),
        )
        return AnalysisResult(
            file_changes=changes,
            analysis=summary,
            explanation=extract_explanation(text or ""),
            fragments=fragments,
        )

    def _build_candidate(
        self,
        fragment: CodeFragment,
        text: str,
        index: int,
        classification: Classification,
    ) -> Optional[FileChangeCandidate]:
        resolution = self._resolver.resolve(fragment, text, index)
        if resolution is None:
            logger.warning(
                "[Filename] Dropping actionable fragment at offset %d: no filename",
                fragment.source_offset,
            )
            return None

        path = _normalize_path(resolution.filename)
        if not path or path == ".":
            return None

        change_type = self._change_resolver.resolve(path, fragment, text)
        if change_type is None:
            return None

        try:
            original_content = self._store.read(path)
        except FileStoreError:
            original_content = None

        reasoning = list(classification.reasoning)
        if resolution.generated:
            reasoning.append(f"Generated fallback filename: {resolution.filename}")
        elif resolution.source != "explicit":
            reasoning.append(f"Filename from {resolution.source}: {resolution.filename}")

        return FileChangeCandidate(
            path=path,
            content=clean_fragment_content(fragment.content, path),
            change_type=change_type,
            original_content=original_content,
            confidence=classification.confidence,
            reasoning=reasoning,
            line_range=self._change_resolver.line_range_for(fragment, text),
        )


# ══════════════════════════════════════════════════════════════════
#  Module-level entry points
# ══════════════════════════════════════════════════════════════════

def analyze_response(
    text: str,
    *,
    project_root: str | None = None,
    file_store: FileStore | None = None,
    config_path: str | None = None,
) -> AnalysisResult:
    """Analyse *text* against a project on disk.

    Args:
        text: The full chat response.
        project_root: Project directory (default: from config, else CWD).
        file_store: Explicit store; overrides *project_root*.
        config_path: Explicit path to ``.chatpatch.yaml``.

    Returns:
        An :class:`AnalysisResult` with the file changes and block counts.
    """
    cfg = Config.load(config_path)
    if project_root:
        cfg.PROJECT_ROOT = project_root
    analyzer = ResponseAnalyzer.from_config(cfg, file_store)
    return analyzer.analyze_response(text)


def apply_edit(
    original_content: str,
    edit_request: str,
    target_range: EditRange | tuple[int, int] | None = None,
) -> EditResult:
    """Apply *edit_request* (replacement text) to *original_content*.

    *target_range* is a 0-based inclusive ``(start_line, end_line)``; when
    omitted the range is detected from the request, falling back to the
    whole content.
    """
    if target_range is not None and not isinstance(target_range, EditRange):
        target_range = EditRange(*target_range)
    return StreamEditor().apply_edit(original_content, edit_request, target_range)
