"""
`edit-engine` command-line interface.

Commands
--------
edit-engine diff OLD NEW                       -- unified diff of two files
edit-engine diff OLD NEW --tokenizer word      -- inline word diff
edit-engine edit FILE --old TEXT --new TEXT    -- apply one exact-string edit
edit-engine edit FILE --edits edits.json       -- apply a batch of edits
edit-engine edit FILE ... --review             -- approve the diff before writing
edit-engine edit FILE ... --dry-run            -- show the diff, write nothing
edit-engine cat FILE --offset 10 --limit 20    -- line-numbered view
edit-engine stats --last 50                    -- rolling edit statistics
"""

from __future__ import annotations

import argparse
import json
import logging
import os
import sys
from datetime import datetime
from typing import Optional

from .config import Config
from .diff_display import (
    format_colored_diff,
    format_colored_ops,
    format_edit_result,
    format_plain_diff,
    prompt_diff_approval,
)
from .diffing.differ import diff
from .diffing.hunks import structured_patch
from .diffing.tokenizers import DiffOptions, TokenizerKind
from .editing.edits import Edit, normalize_edits
from .editing.errors import EditError
from .editing.files import LocalFileProvider
from .editing.metrics import read_edit_stats
from .editing.session import EditSession

logger = logging.getLogger(__name__)


def setup_logger(log_dir: str = ".edit_engine/logs") -> logging.Logger:
    """Creates a file logger. All verbose output goes here."""
    os.makedirs(log_dir, exist_ok=True)
    timestamp = datetime.now().strftime("%Y%m%d_%H%M%S")
    log_file = os.path.join(log_dir, f"edit_engine_{timestamp}.log")

    root = logging.getLogger("edit_engine")
    root.setLevel(logging.DEBUG)
    for handler in list(root.handlers):
        if isinstance(handler, logging.FileHandler):
            root.removeHandler(handler)
            handler.close()

    fh = logging.FileHandler(log_file, encoding="utf-8")
    fh.setLevel(logging.DEBUG)
    fh.setFormatter(logging.Formatter(
        "%(asctime)s [%(levelname)s] %(message)s", datefmt="%H:%M:%S"
    ))
    root.addHandler(fh)

    return root


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------

def _use_color(args: argparse.Namespace, cfg: Config) -> bool:
    if getattr(args, "no_color", False):
        return False
    return cfg.COLOR and sys.stdout.isatty()


def _diff_options(args: argparse.Namespace) -> DiffOptions:
    return DiffOptions(
        ignore_case=args.ignore_case,
        ignore_whitespace=args.ignore_whitespace,
    )


def _load_edits(args: argparse.Namespace) -> list[Edit]:
    if args.edits:
        with open(args.edits, "r", encoding="utf-8") as f:
            data = json.load(f)
        if isinstance(data, dict):
            data = data.get("edits", [])
        return normalize_edits(data)
    if args.old is None or args.new is None:
        raise ValueError("either --edits or both --old and --new are required")
    return [Edit(args.old, args.new, args.replace_all)]


# ---------------------------------------------------------------------------
# Commands
# ---------------------------------------------------------------------------

def _cmd_diff(args: argparse.Namespace, cfg: Config) -> int:
    """Diff two files; exit status 1 when they differ, like diff(1)."""
    provider = LocalFileProvider()
    try:
        old_text, _ = provider.read(args.old)
        new_text, _ = provider.read(args.new)
    except (OSError, UnicodeDecodeError) as exc:
        print(f"Error: {exc}", file=sys.stderr)
        return 2
    options = _diff_options(args)
    context = args.context if args.context is not None else cfg.CONTEXT_LINES

    if args.tokenizer == TokenizerKind.LINE.value:
        hunks = structured_patch(old_text, new_text, context, options)
        if args.json:
            print(json.dumps([h.to_dict() for h in hunks], indent=2))
        elif hunks:
            if _use_color(args, cfg):
                print(format_colored_diff(hunks, cfg.WORD_DIFF_THRESHOLD,
                                          args.old, args.new))
            else:
                print(format_plain_diff(hunks, args.old, args.new))
        return 1 if hunks else 0

    ops = diff(old_text, new_text, args.tokenizer, options)
    if args.json:
        print(json.dumps([op.to_dict() for op in ops], indent=2))
    else:
        print(format_colored_ops(ops, color=_use_color(args, cfg)))
    return 1 if any(op.added or op.removed for op in ops) else 0


def _cmd_edit(args: argparse.Namespace, cfg: Config) -> int:
    """Apply edits to FILE (read first, so staleness is measured from now)."""
    try:
        edits = _load_edits(args)
    except (OSError, ValueError, TypeError) as exc:
        print(f"Error: {exc}", file=sys.stderr)
        return 2

    if args.context is not None:
        cfg.CONTEXT_LINES = args.context

    session = EditSession(config=cfg, project_root=os.getcwd())
    approve = prompt_diff_approval if args.review or cfg.REVIEW else None
    try:
        if session.provider.exists(args.file):
            session.read_file(args.file)
        if args.dry_run:
            result = session.preview(args.file, edits)
        else:
            result = session.edit_file(args.file, edits, approve=approve)
    except (OSError, UnicodeDecodeError, EditError) as exc:
        print(f"Error: {exc}", file=sys.stderr)
        return 1

    if args.json:
        print(json.dumps(result.to_dict(), indent=2))
        return 0 if result.success else 1

    if not result.success:
        print(f"Error: {result.error}", file=sys.stderr)
        return 1

    if args.dry_run or not result.written:
        if result.hunks:
            if _use_color(args, cfg):
                print(format_colored_diff(result.hunks, cfg.WORD_DIFF_THRESHOLD))
            else:
                print(format_plain_diff(result.hunks, args.file, args.file))
        if not args.dry_run:
            print("Edit rejected; file left unchanged.")
            return 1
        return 0

    print(format_edit_result(args.file, result, edits))
    return 0


def _cmd_cat(args: argparse.Namespace, cfg: Config) -> int:
    session = EditSession(config=cfg)
    try:
        text = session.read_file(args.file, offset=args.offset, limit=args.limit)
    except (OSError, UnicodeDecodeError, EditError) as exc:
        print(f"Error: {exc}", file=sys.stderr)
        return 1
    if text:
        print(text)
    return 0


def _cmd_stats(args: argparse.Namespace, cfg: Config) -> int:
    """Show rolling edit statistics."""
    stats = read_edit_stats(last_n=args.last, project_root=os.getcwd(),
                            metrics_dir=cfg.METRICS_DIR)

    if stats["total_edits"] == 0:
        print("No edit metrics found yet.")
        print("Metrics are recorded each time `edit-engine edit` runs.")
        return 0

    print(f"\n┌─────────────────────────────────────┐")
    print(f"│ Edit Stats (last {args.last} edits){' ' * max(0, 12 - len(str(args.last)))}│")
    print(f"├─────────────────────────────────────┤")
    print(f"│ Total edits:          {stats['total_edits']:<14}│")
    print(f"│ Success rate:         {stats['success_rate']:<6.0f}%{' ' * 7}│")
    print(f"│ Avg hunks:            {stats['avg_hunks']:<14.2f}│")
    print(f"│ Lines added:          {stats['lines_added']:<14}│")
    print(f"│ Lines removed:        {stats['lines_removed']:<14}│")

    kinds = stats.get("error_kinds", {})
    if kinds:
        print(f"│ Errors:{' ' * 30}│")
        for kind, pct in kinds.items():
            label = f"  {kind}:"
            print(f"│ {label:<22}{pct:<6.0f}%{' ' * 7}│")

    print(f"└─────────────────────────────────────┘")
    print()
    return 0


# ---------------------------------------------------------------------------
# Argument parsing
# ---------------------------------------------------------------------------

def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="edit-engine",
        description="Text diffing and transactional file edits",
    )
    parser.add_argument("--config", default=None,
                        help="Path to a .edit_engine.yaml config file")
    subparsers = parser.add_subparsers(dest="cmd", metavar="COMMAND")
    subparsers.required = True

    # --- diff ---
    diff_p = subparsers.add_parser("diff", help="Diff two files")
    diff_p.add_argument("old", help="Original file")
    diff_p.add_argument("new", help="Modified file")
    diff_p.add_argument(
        "--tokenizer", default=TokenizerKind.LINE.value,
        choices=[k.value for k in TokenizerKind],
        help="Diff granularity (default: line)",
    )
    diff_p.add_argument("--context", type=int, default=None,
                        help="Context lines per hunk (default: from config)")
    diff_p.add_argument("--ignore-case", action="store_true")
    diff_p.add_argument("--ignore-whitespace", action="store_true")
    diff_p.add_argument("--json", action="store_true", help="Machine-readable output")
    diff_p.add_argument("--no-color", action="store_true")
    diff_p.set_defaults(func=_cmd_diff)

    # --- edit ---
    edit_p = subparsers.add_parser("edit", help="Apply exact-string edits to a file")
    edit_p.add_argument("file", help="File to edit (created when --old is empty)")
    edit_p.add_argument("--old", default=None, help="Exact text to replace")
    edit_p.add_argument("--new", default=None, help="Replacement text")
    edit_p.add_argument("--replace-all", action="store_true",
                        help="Replace every occurrence of --old")
    edit_p.add_argument("--edits", default=None,
                        help="JSON file holding a list of {old_string, new_string, replace_all}")
    edit_p.add_argument("--context", type=int, default=None)
    edit_p.add_argument("--review", action="store_true",
                        help="Review the diff before it is written")
    edit_p.add_argument("--dry-run", action="store_true",
                        help="Show the diff without writing")
    edit_p.add_argument("--json", action="store_true", help="Machine-readable output")
    edit_p.add_argument("--no-color", action="store_true")
    edit_p.set_defaults(func=_cmd_edit)

    # --- cat ---
    cat_p = subparsers.add_parser("cat", help="Print a file with line numbers")
    cat_p.add_argument("file")
    cat_p.add_argument("--offset", type=int, default=1, help="First line (1-based)")
    cat_p.add_argument("--limit", type=int, default=None, help="Number of lines")
    cat_p.set_defaults(func=_cmd_cat)

    # --- stats ---
    stats_p = subparsers.add_parser("stats", help="Show rolling edit statistics")
    stats_p.add_argument(
        "--last", type=int, default=50,
        help="Number of recent edits to include (default: 50)",
    )
    stats_p.set_defaults(func=_cmd_stats)

    return parser


# ---------------------------------------------------------------------------
# Entry point
# ---------------------------------------------------------------------------

def main(argv: Optional[list[str]] = None) -> int:
    """Entry point for the ``edit-engine`` console script."""
    parser = _build_parser()
    args = parser.parse_args(argv)

    cfg = Config.load(args.config)
    try:
        setup_logger(cfg.LOG_DIR)
    except OSError as exc:
        print(f"Warning: file logging disabled: {exc}", file=sys.stderr)

    logger.debug("[CLI] %s", " ".join(argv if argv is not None else sys.argv[1:]))
    return args.func(args, cfg)


if __name__ == "__main__":
    sys.exit(main())
