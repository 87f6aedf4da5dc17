"""
Diff display — render hunks as colored unified diffs, line-numbered
snippets and agent-facing result text.

Includes a Textual-based review screen that pauses before a write so the
user can approve or reject an edit.
"""

from __future__ import annotations

import logging
import sys
from typing import Any, Iterable

from .diffing.differ import DiffOp, OpKind
from .diffing.hunks import Hunk, format_patch
from .diffing.word_diff import (
    DEFAULT_WORD_DIFF_THRESHOLD,
    DisplayLine,
    LineType,
    highlight_hunks,
)
from .editing.edits import normalize_edits
from .editing.transaction import EditResult, edit_snippet

logger = logging.getLogger(__name__)

_BOLD = "\033[1m"
_CYAN = "\033[36m"
_GREEN = "\033[32m"
_RED = "\033[31m"
_DIM = "\033[2m"
_REVERSE = "\033[7m"
_RESET = "\033[0m"


def number_lines(content: str, start_line: int = 1) -> str:
    """Prefix every line with its number, right-aligned in six columns."""
    return "\n".join(
        f"{start_line + index:>6}→{line}"
        for index, line in enumerate(content.split("\n"))
    )


def format_hunk_header(hunk: Hunk) -> str:
    return hunk.header


def _highlighted(line: DisplayLine, threshold: float) -> bool:
    return line.word_diff and line.change_ratio <= threshold


def _ansi_parts(parts: list[DiffOp], color: str) -> str:
    out: list[str] = []
    for op in parts:
        if op.kind is OpKind.EQUAL:
            out.append(op.value)
        else:
            out.append(f"{_REVERSE}{op.value}{_RESET}{color}")
    return "".join(out)


def format_colored_diff(
    hunks: list[Hunk],
    threshold: float = DEFAULT_WORD_DIFF_THRESHOLD,
    old_name: str | None = None,
    new_name: str | None = None,
) -> str:
    """Render *hunks* with ANSI colors.

    Green for additions, red for deletions, cyan for ``@@`` headers.  Paired
    lines whose change ratio is within *threshold* get the changed
    characters drawn in reverse video.
    """
    colored: list[str] = []
    if old_name is not None:
        colored.append(f"{_BOLD}--- {old_name}{_RESET}")
        colored.append(f"{_BOLD}+++ {new_name or old_name}{_RESET}")

    for hunk, display in zip(hunks, highlight_hunks(hunks)):
        colored.append(f"{_CYAN}{hunk.header}{_RESET}")
        for line in display:
            if line.type is LineType.ADD:
                body = _ansi_parts(line.parts, _GREEN) if _highlighted(line, threshold) else line.text
                colored.append(f"{_GREEN}+{body}{_RESET}")
            elif line.type is LineType.REMOVE:
                body = _ansi_parts(line.parts, _RED) if _highlighted(line, threshold) else line.text
                colored.append(f"{_RED}-{body}{_RESET}")
            elif line.type is LineType.NO_NEWLINE:
                colored.append(f"{_DIM}{line.text}{_RESET}")
            else:
                colored.append(f" {line.text}")
    return "\n".join(colored)


def format_plain_diff(hunks: list[Hunk], old_name: str = "a", new_name: str = "b") -> str:
    return format_patch(old_name, new_name, hunks).rstrip("\n")


def format_colored_ops(ops: list[DiffOp], color: bool = True) -> str:
    """Render a flat (non-line) diff inline, e.g. a word or character diff."""
    out: list[str] = []
    for op in ops:
        if op.kind is OpKind.EQUAL:
            out.append(op.value)
        elif not color:
            out.append(f"{{+{op.value}+}}" if op.added else f"[-{op.value}-]")
        elif op.added:
            out.append(f"{_GREEN}{op.value}{_RESET}")
        else:
            out.append(f"{_RED}{op.value}{_RESET}")
    return "".join(out)


# ---------------------------------------------------------------------------
# Rich markup (Textual)
# ---------------------------------------------------------------------------

def _escape(text: str) -> str:
    return text.replace("[", "\\[")


def _rich_parts(parts: list[DiffOp], style: str) -> str:
    out: list[str] = []
    for op in parts:
        if op.kind is OpKind.EQUAL:
            out.append(_escape(op.value))
        else:
            out.append(f"[reverse {style}]{_escape(op.value)}[/reverse {style}]")
    return "".join(out)


def format_rich_diff(hunks: list[Hunk],
                     threshold: float = DEFAULT_WORD_DIFF_THRESHOLD) -> str:
    """Convert hunks to Rich markup for Textual display."""
    markup: list[str] = []
    for hunk, display in zip(hunks, highlight_hunks(hunks)):
        markup.append(f"[cyan]{_escape(hunk.header)}[/cyan]")
        for line in display:
            number = f"{line.line_number:>5} " if line.line_number is not None else "      "
            if line.type is LineType.ADD:
                body = (_rich_parts(line.parts, "green") if _highlighted(line, threshold)
                        else _escape(line.text))
                markup.append(f"[dim]{number}[/dim][green]+{body}[/green]")
            elif line.type is LineType.REMOVE:
                body = (_rich_parts(line.parts, "red") if _highlighted(line, threshold)
                        else _escape(line.text))
                markup.append(f"[dim]{number}[/dim][red]-{body}[/red]")
            elif line.type is LineType.NO_NEWLINE:
                markup.append(f"[dim]      {_escape(line.text)}[/dim]")
            else:
                markup.append(f"[dim]{number}[/dim] {_escape(line.text)}")
    return "\n".join(markup)


# ---------------------------------------------------------------------------
# Agent-facing result text
# ---------------------------------------------------------------------------

def _hunk_snippet(hunk: Hunk) -> str:
    new_side = [line[1:] for line in hunk.lines if line[:1] in (" ", "+")]
    return number_lines("\n".join(new_side), hunk.new_start)


def format_edit_result(path: str, result: EditResult,
                       edits: Iterable[Any] | None = None,
                       user_modified: bool = False) -> str:
    """Describe a successful edit the way a file tool reports it back."""
    if not result.success:
        return f"Error: {result.error}"

    modified = (". The user modified your proposed changes before accepting them"
                if user_modified else "")
    edits = normalize_edits(edits or [])

    if len(edits) == 1:
        edit = edits[0]
        if edit.replace_all:
            return (
                f"The file {path} has been updated{modified}. All occurrences of "
                f"'{edit.old_string}' were successfully replaced with "
                f"'{edit.new_string}'."
            )
        snippet, start = edit_snippet(result.original_content, edit.old_string,
                                      edit.new_string)
        return (
            f"The file {path} has been updated{modified}. Here's the result of "
            f"running `cat -n` on a snippet of the edited file:\n"
            f"{number_lines(snippet, start)}"
        )

    body = "\n...\n".join(_hunk_snippet(hunk) for hunk in result.hunks)
    return (
        f"Applied {len(edits)} edits to {path}{modified}:\n{body}"
    )


# ══════════════════════════════════════════════════════════════════
#  Interactive Diff Approval — Textual TUI
# ══════════════════════════════════════════════════════════════════

def prompt_diff_approval(path: str, result: EditResult, auto: bool = False) -> bool:
    """Show the edit's hunks and wait for approval.

    Returns ``True`` if the user approves (or in auto mode), ``False`` if
    they reject.  Falls back to a console prompt when stdin is not a TTY
    or the Textual viewer cannot start.
    """
    if not result.success or not result.hunks:
        return True

    if auto:
        logger.info("[Review] [auto] Diff for %s:\n%s",
                    path, format_plain_diff(result.hunks, path, path))
        return True

    if sys.stdout.isatty() and sys.stdin.isatty():
        try:
            return _textual_diff_approval(path, result)
        except Exception as exc:
            logger.warning("[Review] Textual diff viewer failed: %s", exc)

    return _console_diff_approval(path, result)


def _textual_diff_approval(path: str, result: EditResult) -> bool:
    """Launch a Textual app to display the hunks and get approval."""
    from textual.app import App, ComposeResult
    from textual.binding import Binding
    from textual.containers import Horizontal, VerticalScroll
    from textual.widgets import Button, Footer, Static

    class DiffApprovalApp(App):
        """Hunk viewer with approve/reject."""

        CSS = """
        Screen {
            background: $surface;
        }
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
        #action-buttons {
            dock: bottom;
            height: 3;
            align: center middle;
            padding: 0 2;
        }
        #action-buttons Button {
            margin: 0 2;
            min-width: 20;
        }
        #summary {
            dock: bottom;
            height: 1;
            text-align: center;
            color: #888;
        }
        """

        BINDINGS = [
            Binding("a", "approve", "Approve"),
            Binding("ctrl+s", "approve", "Approve"),
            Binding("escape", "reject", "Reject"),
            Binding("r", "reject", "Reject"),
        ]

        def __init__(self, path: str, result: EditResult) -> None:
            super().__init__()
            self._path = path
            self._result = result
            self.approved = False

        def compose(self) -> ComposeResult:
            yield Static(f" ━━  Edit Review: {_escape(self._path)}  ━━ ", id="title-bar")
            with VerticalScroll(id="diff-scroll"):
                yield Static(format_rich_diff(self._result.hunks))
            yield Static(
                f"  {len(self._result.hunks)} hunk(s), "
                f"[green]+{self._result.lines_added}[/green] "
                f"[red]-{self._result.lines_removed}[/red]  |  "
                f"Press [bold]A[/bold] to approve, [bold]R[/bold] or Esc to reject",
                id="summary",
            )
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

    app = DiffApprovalApp(path, result)
    app.run()
    return app.approved


def _console_diff_approval(path: str, result: EditResult) -> bool:
    """Console approval when the Textual viewer is unavailable."""
    print("\n" + "=" * 60)
    print(f"  EDIT REVIEW: {path}")
    print("=" * 60)
    print(format_colored_diff(result.hunks))
    print("\n" + "=" * 60)
    print("  [A]pprove  |  [R]eject")
    print()

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
