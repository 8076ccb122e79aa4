import logging
import os
from datetime import datetime

from .api import AnalysisResult
from .applicator import ApplicationSummary
from .editing.diff_engine import DiffKind
from .editing.patch_applier import EditResult

# ── Color palette ──
C_CYAN   = "\033[38;5;81m"
C_GREEN  = "\033[38;5;114m"
C_RED    = "\033[38;5;203m"
C_YELLOW = "\033[38;5;221m"
C_DIM    = "\033[38;5;243m"
C_BOLD   = "\033[1m"
C_RESET  = "\033[0m"

_CHANGE_COLORS = {"create": C_GREEN, "update": C_YELLOW, "delete": C_RED}


def setup_logger(log_dir: str = ".chatpatch/logs") -> logging.Logger:
    """Creates a file logger. All verbose output goes here."""
    os.makedirs(log_dir, exist_ok=True)
    timestamp = datetime.now().strftime("%Y%m%d_%H%M%S")
    log_file = os.path.join(log_dir, f"chatpatch_{timestamp}.log")

    logger = logging.getLogger("chatpatch")
    logger.setLevel(logging.DEBUG)

    # File handler captures everything
    fh = logging.FileHandler(log_file, encoding="utf-8")
    fh.setLevel(logging.DEBUG)
    fh.setFormatter(logging.Formatter(
        "%(asctime)s [%(levelname)s] %(message)s", datefmt="%H:%M:%S"
    ))
    logger.addHandler(fh)

    return logger


def print_analysis(result: AnalysisResult, source: str = "") -> None:
    """Print the candidates and block counts of one analysed response."""
    a = result.analysis
    header = f"{C_BOLD}{source}{C_RESET}  " if source else ""
    print(
        f"{header}{C_DIM}{a.total_blocks} block(s): "
        f"{a.actionable_blocks} actionable, {a.examples} example(s), "
        f"{a.explanations} explanation(s){C_RESET}"
    )
    if not result.file_changes:
        print(f"  {C_DIM}(no file changes){C_RESET}")
        return
    for change in result.file_changes:
        kind = change.change_type.value
        color = _CHANGE_COLORS.get(kind, "")
        lines = ""
        if change.line_range:
            lines = f"  lines {change.line_range.start}-{change.line_range.end}"
        print(f"  {color}{kind:<7}{C_RESET} {change.path}  "
              f"{C_CYAN}{change.confidence}%{C_RESET}{lines}")
        if change.reasoning:
            print(f"          {C_DIM}{', '.join(change.reasoning)}{C_RESET}")


def print_application(summary: ApplicationSummary) -> None:
    """Print per-candidate outcomes of an apply run."""
    for r in summary.results:
        if r.success:
            icon = f"{C_GREEN}✔{C_RESET}"
            detail = r.edit_summary or ""
            if r.dry_run:
                detail = f"{detail} (dry run)".strip()
        else:
            icon = f"{C_RED}✘{C_RESET}"
            detail = f"{C_RED}{r.error}{C_RESET}"
        print(f"  {icon} {r.change_type.value:<7} {r.path}  {detail}")
        if r.backup_path:
            print(f"          {C_DIM}backup: {r.backup_path}{C_RESET}")
    print(f"\n  {len(summary.applied)} applied, {len(summary.failed)} failed")


def print_edit_result(edit: EditResult) -> None:
    """Print an edit's diff lines followed by its summary."""
    for line in edit.diff_lines:
        if line.kind is DiffKind.NEW:
            print(f"{C_GREEN}+ {line.text}{C_RESET}")
        elif line.kind is DiffKind.OLD:
            print(f"{C_RED}- {line.text}{C_RESET}")
        else:
            print(f"  {line.text}")
    print(f"\n  {edit.summary}  (confidence {edit.confidence}%)")


def print_stats(stats: dict) -> None:
    print(f"  Edits:              {stats['total_edits']}")
    print(f"  Success rate:       {stats['success_rate']:.1f}%")
    print(f"  Avg confidence:     {stats['avg_confidence']:.1f}")
    print(f"  Avg edit confidence:{stats['avg_edit_confidence']:6.1f}")
    for change_type, pct in stats["change_types"].items():
        print(f"    {change_type:<8} {pct:.1f}%")
