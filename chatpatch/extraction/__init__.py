"""Response analysis: fragments, filenames, actionability, change types."""

from .fragment_extractor import (
    CodeFragment, FragmentExtractor, clean_fragment_content, extract_explanation,
)
from .heuristics import FilenameContext, HeuristicRegistry, is_valid_filename
from .filename_resolver import (
    FilenameResolver, FilenameResolution, generate_fallback_filename,
)
from .classifier import ActionabilityClassifier, Classification, Decision
from .change_type import (
    ChangeType, ChangeTypeResolver, FileChangeCandidate, LineRange,
)

__all__ = [
    "CodeFragment", "FragmentExtractor", "clean_fragment_content",
    "extract_explanation",
    "FilenameContext", "HeuristicRegistry", "is_valid_filename",
    "FilenameResolver", "FilenameResolution", "generate_fallback_filename",
    "ActionabilityClassifier", "Classification", "Decision",
    "ChangeType", "ChangeTypeResolver", "FileChangeCandidate", "LineRange",
]
