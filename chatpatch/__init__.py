"""
chatpatch — turn AI chat responses into precise file patches.

Public API for library usage::

    from chatpatch import analyze_response, apply_edit

    result = analyze_response(response_text, project_root=".")
    edit = apply_edit(original_content, replacement_text)
"""

from .api import (
    AnalysisResult, AnalysisSummary, ResponseAnalyzer,
    analyze_response, apply_edit,
)
from .applicator import ApplicationResult, ApplicationSummary, FileApplicator
from .editing import EditRange, EditResult
from .extraction import ChangeType, CodeFragment, FileChangeCandidate

__all__ = [
    "AnalysisResult", "AnalysisSummary", "ResponseAnalyzer",
    "analyze_response", "apply_edit",
    "ApplicationResult", "ApplicationSummary", "FileApplicator",
    "EditRange", "EditResult",
    "ChangeType", "CodeFragment", "FileChangeCandidate",
]
