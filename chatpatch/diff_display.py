"""
Diff display — compute and show colored unified diffs before files change.

Includes a Textual-based interactive diff viewer that pauses so the user
can review planned changes and approve/reject them before anything is
written to disk.
"""

from __future__ import annotations

import difflib
import logging
import sys
from typing import TYPE_CHECKING, Optional

if TYPE_CHECKING:
    from .applicator import DiffPreview

logger = logging.getLogger(__name__)


def compute_diff(filepath: str, old_content: Optional[str],
                 new_content: Optional[str]) -> str | None:
    """Return a unified diff string if the content differs.

    Returns None for new files (no *old_content*) and unchanged content.
    """
    if old_content is None:
        return None
    new_content = new_content or ""
    if old_content == new_content:
        return None

    old_lines = old_content.splitlines(keepends=True)
    new_lines = new_content.splitlines(keepends=True)

    diff = difflib.unified_diff(
        old_lines, new_lines,
        fromfile=f"a/{filepath}",
        tofile=f"b/{filepath}",
        lineterm="",
    )
    diff_text = "\n".join(line.rstrip("\n") for line in diff)
    return diff_text if diff_text.strip() else None


def format_colored_diff(diff_text: str) -> str:
    """Add ANSI colors to a unified diff string.

    Green for additions (+), red for deletions (-), cyan for @@ hunks.
    """
    colored: list[str] = []
    for line in diff_text.splitlines():
        if line.startswith("+++") or line.startswith("---"):
            colored.append(f"\033[1m{line}\033[0m")
        elif line.startswith("@@"):
            colored.append(f"\033[36m{line}\033[0m")
        elif line.startswith("+"):
            colored.append(f"\033[32m{line}\033[0m")
        elif line.startswith("-"):
            colored.append(f"\033[31m{line}\033[0m")
        else:
            colored.append(line)
    return "\n".join(colored)


def _split_previews(previews: list["DiffPreview"]):
    diffs = [(p.path, p.diff_text) for p in previews if p.diff_text]
    new_files = {
        p.path: p.new_content or ""
        for p in previews
        if p.original_content is None and not p.error
    }
    return diffs, new_files


def show_diffs(previews: list["DiffPreview"], log_only: bool = False) -> list[str]:
    """Display the diffs of *previews*.

    When *log_only* is True, diffs are logged but not printed (for --auto mode).
    Returns list of diff strings.
    """
    diffs, new_files = _split_previews(previews)
    for filepath, diff_text in diffs:
        if log_only:
            logger.info("[Apply] Diff for %s:\n%s", filepath, diff_text)
        else:
            print(f"\n{'─' * 60}")
            print(format_colored_diff(diff_text))

    if new_files and not log_only:
        print(f"\n  New files: {', '.join(new_files)}")
    return [d for _, d in diffs]


# ══════════════════════════════════════════════════════════════════
#  Interactive diff approval (Textual TUI)
# ══════════════════════════════════════════════════════════════════

def prompt_diff_approval(previews: list["DiffPreview"], auto: bool = False) -> bool:
    """Show planned changes and wait for approval.

    Returns ``True`` if the user approves (or if running in auto mode).
    Returns ``False`` if the user rejects.
    """
    diffs, new_files = _split_previews(previews)

    if not diffs and not new_files:
        return True

    if auto:
        for filepath, diff_text in diffs:
            logger.info("[Apply] [auto] Diff for %s:\n%s", filepath, diff_text)
        if new_files:
            logger.info("[Apply] [auto] New files: %s", ", ".join(new_files))
        return True

    if sys.stdout.isatty() and sys.stdin.isatty():
        try:
            return _textual_diff_approval(diffs, new_files)
        except Exception as e:
            logger.warning("[Apply] Textual diff viewer failed: %s", e)

    return _console_diff_approval(diffs, new_files)


def _format_rich_diff(diff_text: str) -> str:
    """Convert unified diff text to Rich markup for Textual display."""
    markup_lines: list[str] = []
    for line in diff_text.splitlines():
        escaped = line.replace("[", "\\[")
        if line.startswith("+++") or line.startswith("---"):
            markup_lines.append(f"[bold white]{escaped}[/bold white]")
        elif line.startswith("@@"):
            markup_lines.append(f"[cyan]{escaped}[/cyan]")
        elif line.startswith("+"):
            markup_lines.append(f"[green]{escaped}[/green]")
        elif line.startswith("-"):
            markup_lines.append(f"[red]{escaped}[/red]")
        else:
            markup_lines.append(escaped)
    return "\n".join(markup_lines)


def _textual_diff_approval(diffs: list[tuple[str, str]],
                           new_files: dict[str, str]) -> bool:
    """Launch a Textual app to display the planned changes."""
    from textual.app import App, ComposeResult
    from textual.binding import Binding
    from textual.containers import Horizontal, VerticalScroll
    from textual.widgets import Button, Footer, Static

    class PatchReviewApp(App):
        """Interactive diff viewer with approve/reject."""

        CSS = """
        #title-bar {
            dock: top;
            height: 3;
            background: #1a1a2e;
            color: #e94560;
            text-align: center;
            padding: 1;
            text-style: bold;
        }
        #diff-scroll {
            height: 1fr;
            margin: 1 2;
            border: round #444;
            padding: 1;
        }
        .file-header {
            color: #e9c46a;
            text-style: bold;
            margin: 1 0 0 0;
        }
        .new-file-section {
            color: #2a9d8f;
            text-style: bold;
            margin: 1 0;
        }
        #action-buttons {
            dock: bottom;
            height: 3;
            align: center middle;
        }
        #action-buttons Button {
            margin: 0 2;
            min-width: 20;
        }
        """

        BINDINGS = [
            Binding("a", "approve", "Approve"),
            Binding("escape", "reject", "Reject"),
            Binding("r", "reject", "Reject"),
        ]

        def __init__(self) -> None:
            super().__init__()
            self.approved = False

        def compose(self) -> ComposeResult:
            yield Static(
                f" ━━  Patch Review: {len(diffs) + len(new_files)} file(s)  ━━ ",
                id="title-bar",
            )
            with VerticalScroll(id="diff-scroll"):
                for filepath, diff_text in diffs:
                    yield Static(
                        f"[bold yellow]{'─' * 58}\n  {filepath}[/bold yellow]",
                        classes="file-header",
                    )
                    yield Static(_format_rich_diff(diff_text))
                if new_files:
                    yield Static("New files:", classes="new-file-section")
                    for path, content in new_files.items():
                        line_count = len(content.splitlines())
                        yield Static(f"  [green]+ {path}[/green]  ({line_count} lines)")
            with Horizontal(id="action-buttons"):
                yield Button("✔ Approve", id="approve-btn", variant="success")
                yield Button("✕ Reject", id="reject-btn", variant="error")
            yield Footer()

        def on_button_pressed(self, event: Button.Pressed) -> None:
            self.approved = event.button.id == "approve-btn"
            self.exit()

        def action_approve(self) -> None:
            self.approved = True
            self.exit()

        def action_reject(self) -> None:
            self.approved = False
            self.exit()

    app = PatchReviewApp()
    app.run()
    return app.approved


def _console_diff_approval(diffs: list[tuple[str, str]],
                           new_files: dict[str, str]) -> bool:
    """Console diff approval for non-interactive terminals."""
    print("\n" + "=" * 60)
    print("  PATCH REVIEW")
    print("=" * 60)

    for _, diff_text in diffs:
        print(f"\n{'─' * 60}")
        print(format_colored_diff(diff_text))

    if new_files:
        print(f"\n  New files: {', '.join(new_files)}")

    print("\n  [A]pprove  |  [R]eject\n")
    while True:
        try:
            choice = input("  Your choice: ").strip().lower()
        except (EOFError, KeyboardInterrupt):
            return False
        if choice in ("a", "approve"):
            return True
        if choice in ("r", "reject"):
            return False
        print("  Invalid choice. Use A or R.")
