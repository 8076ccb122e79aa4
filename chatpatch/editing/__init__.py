"""Line-level streaming diff and precise patch application."""

from .diff_engine import DiffKind, DiffLine, LineDiffEngine, StreamingDiff
from .scope_resolver import EditRange, detect_edit_range, split_content
from .patch_applier import PatchApplier, StreamEditor, EditResult, edit_confidence
from .metrics import log_edit_metric, read_edit_stats

__all__ = [
    "DiffKind", "DiffLine", "LineDiffEngine", "StreamingDiff",
    "EditRange", "detect_edit_range", "split_content",
    "PatchApplier", "StreamEditor", "EditResult", "edit_confidence",
    "log_edit_metric", "read_edit_stats",
]
