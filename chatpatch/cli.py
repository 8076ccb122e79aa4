"""
`chatpatch` command line interface.

Commands
--------
chatpatch analyze RESPONSE... [--json]          -- list the file changes in responses
chatpatch apply RESPONSE [--dry-run] [--auto]   -- review and apply a response
chatpatch edit TARGET --request FILE [--start N --end M]
                                                -- patch one file with replacement text
chatpatch watch DIR [--auto]                    -- analyse responses saved into DIR
chatpatch backups PATH                          -- list backups of PATH, newest first
chatpatch restore BACKUP PATH                   -- restore PATH from BACKUP
chatpatch stats [--last N]                      -- rolling edit statistics

RESPONSE may be ``-`` to read from stdin.
"""

from __future__ import annotations

import argparse
import json
import logging
import sys

from tqdm import tqdm

from .api import ResponseAnalyzer
from .applicator import FileApplicator
from .cli_display import (
    print_analysis, print_application, print_edit_result, print_stats,
    setup_logger,
)
from .config import Config
from .diff_display import prompt_diff_approval, show_diffs
from .editing.metrics import read_edit_stats
from .editing.patch_applier import StreamEditor
from .editing.scope_resolver import EditRange
from .storage.backup_store import BackupError, LocalBackupStore
from .storage.file_store import FileStoreError, LocalFileStore
from .watcher import ResponseInboxWatcher

logger = logging.getLogger(__name__)

EXIT_OK = 0
EXIT_FAILED = 1
EXIT_USAGE = 2


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------

def _read_text(path: str) -> str:
    if path == "-":
        return sys.stdin.read()
    with open(path, "r", encoding="utf-8", errors="replace") as f:
        return f.read()


def _build_applicator(cfg: Config, store: LocalFileStore, dry_run: bool = False,
                      backups: bool = True) -> FileApplicator:
    backup_store = None
    if backups and cfg.CREATE_BACKUPS:
        backup_store = LocalBackupStore(store, cfg.BACKUP_DIR)
    return FileApplicator(
        store,
        backup_store=backup_store,
        dry_run=dry_run,
        metrics_file=cfg.resolve_path(cfg.METRICS_FILE),
    )


# ---------------------------------------------------------------------------
# Sub-command handlers
# ---------------------------------------------------------------------------

def _cmd_analyze(args: argparse.Namespace, cfg: Config) -> int:
    analyzer = ResponseAnalyzer.from_config(cfg)
    results = []
    for path in tqdm(args.responses, unit="file", desc="Analysing",
                     disable=len(args.responses) < 2):
        try:
            results.append((path, analyzer.analyze_response(_read_text(path))))
        except OSError as exc:
            print(f"Cannot read {path}: {exc}", file=sys.stderr)
            return EXIT_USAGE

    if args.json:
        payload = [dict(source=path, **result.to_dict()) for path, result in results]
        print(json.dumps(payload if len(payload) > 1 else payload[0], indent=2))
    else:
        for path, result in results:
            print_analysis(result, source=path)
    return EXIT_OK


def _cmd_apply(args: argparse.Namespace, cfg: Config) -> int:
    try:
        text = _read_text(args.response)
    except OSError as exc:
        print(f"Cannot read {args.response}: {exc}", file=sys.stderr)
        return EXIT_USAGE

    store = LocalFileStore(cfg.PROJECT_ROOT)
    result = ResponseAnalyzer.from_config(cfg, store).analyze_response(text)
    print_analysis(result, source=args.response)
    if not result.file_changes:
        return EXIT_OK

    applicator = _build_applicator(cfg, store, dry_run=args.dry_run,
                                   backups=not args.no_backup)
    previews = applicator.preview(result.file_changes)
    if args.dry_run:
        show_diffs(previews)
    elif not prompt_diff_approval(previews, auto=args.auto):
        print("  Changes rejected; nothing written.")
        return EXIT_OK

    summary = applicator.apply(result.file_changes)
    print_application(summary)
    return EXIT_OK if summary.success else EXIT_FAILED


def _cmd_edit(args: argparse.Namespace, cfg: Config) -> int:
    if args.end is not None and args.start is None:
        print("--end requires --start", file=sys.stderr)
        return EXIT_USAGE

    store = LocalFileStore(cfg.PROJECT_ROOT)
    try:
        original = store.read(args.target)
        request = _read_text(args.request)
    except (FileStoreError, OSError) as exc:
        print(str(exc), file=sys.stderr)
        return EXIT_USAGE

    target_range = None
    if args.start is not None:
        end = args.end if args.end is not None else args.start
        target_range = EditRange.from_one_based(args.start, end)

    edit = StreamEditor().apply_edit(original, request, target_range)
    print_edit_result(edit)
    if args.dry_run:
        return EXIT_OK

    try:
        if cfg.CREATE_BACKUPS:
            backup = LocalBackupStore(store, cfg.BACKUP_DIR).create_backup(args.target)
            print(f"  backup: {backup}")
        store.write(args.target, edit.new_content)
    except (FileStoreError, BackupError) as exc:
        print(str(exc), file=sys.stderr)
        return EXIT_FAILED
    return EXIT_OK


def _cmd_watch(args: argparse.Namespace, cfg: Config) -> int:
    store = LocalFileStore(cfg.PROJECT_ROOT)
    analyzer = ResponseAnalyzer.from_config(cfg, store)
    applicator = _build_applicator(cfg, store)

    def _on_response(path, result) -> None:
        print_analysis(result, source=path)
        if args.auto and result.file_changes:
            print_application(applicator.apply(result.file_changes))

    watcher = ResponseInboxWatcher(
        args.inbox, analyzer, _on_response, extensions=cfg.INBOX_EXTENSIONS,
    )
    print(f"Watching {watcher.inbox_dir} (Ctrl+C to stop)")
    watcher.run_forever()
    return EXIT_OK


def _cmd_backups(args: argparse.Namespace, cfg: Config) -> int:
    store = LocalFileStore(cfg.PROJECT_ROOT)
    backups = LocalBackupStore(store, cfg.BACKUP_DIR).list_backups(args.path)
    if not backups:
        print(f"  (no backups for: {args.path})")
    for backup in backups:
        print(f"  {backup}")
    return EXIT_OK


def _cmd_restore(args: argparse.Namespace, cfg: Config) -> int:
    store = LocalFileStore(cfg.PROJECT_ROOT)
    applicator = _build_applicator(cfg, store, backups=True)
    try:
        applicator.restore_from_backup(args.backup, args.path)
    except (BackupError, FileStoreError) as exc:
        print(str(exc), file=sys.stderr)
        return EXIT_FAILED
    print(f"  Restored {args.path}")
    return EXIT_OK


def _cmd_stats(args: argparse.Namespace, cfg: Config) -> int:
    print_stats(read_edit_stats(args.last, cfg.resolve_path(cfg.METRICS_FILE)))
    return EXIT_OK


# ---------------------------------------------------------------------------
# Entry point
# ---------------------------------------------------------------------------

def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="chatpatch",
        description="Turn chat responses into precise file patches",
    )
    parser.add_argument("--config", default=None,
                        help="Path to .chatpatch.yaml config file")
    parser.add_argument("--project-root", default=None,
                        help="Project directory (default: from config, else CWD)")
    sub = parser.add_subparsers(dest="command", required=True)

    p = sub.add_parser("analyze", help="List the file changes in responses")
    p.add_argument("responses", nargs="+", help="Response files ('-' for stdin)")
    p.add_argument("--json", action="store_true", help="Print JSON")
    p.set_defaults(func=_cmd_analyze)

    p = sub.add_parser("apply", help="Review and apply a response")
    p.add_argument("response", help="Response file ('-' for stdin)")
    p.add_argument("--dry-run", action="store_true",
                   help="Show what would change without writing")
    p.add_argument("--auto", action="store_true",
                   help="Non-interactive mode: approve without review")
    p.add_argument("--no-backup", action="store_true",
                   help="Do not back up files before changing them")
    p.set_defaults(func=_cmd_apply)

    p = sub.add_parser("edit", help="Patch one file with replacement text")
    p.add_argument("target", help="File to edit")
    p.add_argument("--request", required=True,
                   help="File holding the replacement text ('-' for stdin)")
    p.add_argument("--start", type=int, default=None, help="First line (1-based)")
    p.add_argument("--end", type=int, default=None, help="Last line (1-based)")
    p.add_argument("--dry-run", action="store_true", help="Do not write")
    p.set_defaults(func=_cmd_edit)

    p = sub.add_parser("watch", help="Analyse responses saved into a directory")
    p.add_argument("inbox", help="Directory to watch")
    p.add_argument("--auto", action="store_true",
                   help="Apply changes without review")
    p.set_defaults(func=_cmd_watch)

    p = sub.add_parser("backups", help="List backups of a file")
    p.add_argument("path")
    p.set_defaults(func=_cmd_backups)

    p = sub.add_parser("restore", help="Restore a file from a backup")
    p.add_argument("backup")
    p.add_argument("path")
    p.set_defaults(func=_cmd_restore)

    p = sub.add_parser("stats", help="Rolling edit statistics")
    p.add_argument("--last", type=int, default=50,
                   help="Number of recent edits to include")
    p.set_defaults(func=_cmd_stats)

    return parser


def main(argv: list[str] | None = None) -> int:
    args = build_parser().parse_args(argv)

    cfg = Config.load(args.config)
    if args.project_root:
        cfg.PROJECT_ROOT = args.project_root
    setup_logger(cfg.resolve_path(cfg.LOG_DIR))

    return args.func(args, cfg)


if __name__ == "__main__":
    sys.exit(main())
