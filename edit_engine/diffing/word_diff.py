"""
Word-diff highlighter — pairs adjacent removed/added lines inside a hunk
and re-diffs each pair at character granularity so a renderer can show
exactly what changed within the line.

The result is display metadata only; it never changes file content.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum

from .differ import DiffOp, OpKind, diff
from .hunks import NO_NEWLINE_MARKER, Hunk
from .tokenizers import DiffOptions, Tokenizer, TokenizerKind

# Pairs whose change ratio exceeds this are drawn as whole-line changes.
DEFAULT_WORD_DIFF_THRESHOLD = 0.4


class LineType(str, Enum):
    ADD = "add"
    REMOVE = "remove"
    NOCHANGE = "nochange"
    NO_NEWLINE = "no_newline"


@dataclass
class DisplayLine:
    """A hunk line prepared for rendering."""
    type: LineType
    text: str                        # line text without its marker
    line_number: int | None = None
    word_diff: bool = False
    pair_index: int | None = None    # index of the counterpart line
    parts: list[DiffOp] = field(default_factory=list)
    change_ratio: float = 0.0

    def to_dict(self) -> dict:
        return {
            "type": self.type.value,
            "text": self.text,
            "lineNumber": self.line_number,
            "wordDiff": self.word_diff,
            "pairIndex": self.pair_index,
            "parts": [op.to_dict() for op in self.parts],
            "changeRatio": self.change_ratio,
        }


def to_display_lines(lines: list[str], old_start: int = 1,
                     new_start: int = 1) -> list[DisplayLine]:
    """Convert marker-prefixed hunk lines into numbered display lines.

    Context and added lines are numbered on the new side, removed lines on
    the old side.
    """
    display: list[DisplayLine] = []
    old_no, new_no = old_start, new_start
    for line in lines:
        if line == NO_NEWLINE_MARKER:
            display.append(DisplayLine(LineType.NO_NEWLINE, line))
        elif line.startswith("+"):
            display.append(DisplayLine(LineType.ADD, line[1:], new_no))
            new_no += 1
        elif line.startswith("-"):
            display.append(DisplayLine(LineType.REMOVE, line[1:], old_no))
            old_no += 1
        else:
            display.append(DisplayLine(LineType.NOCHANGE, line[1:], new_no))
            old_no += 1
            new_no += 1
    return display


def highlight(
    lines: list[str],
    old_start: int = 1,
    new_start: int = 1,
    tokenizer: TokenizerKind | str | Tokenizer = TokenizerKind.CHARACTER,
    options: DiffOptions | None = None,
) -> list[DisplayLine]:
    """Attach intra-line diffs to positionally paired remove/add lines.

    A maximal run of removed lines immediately followed by a maximal run of
    added lines is zipped index-for-index; surplus lines on either side are
    left unmarked.  The no-newline marker belongs to the line before it and
    does not break a run.
    """
    display = to_display_lines(lines, old_start, new_start)
    count = len(display)
    index = 0

    while index < count:
        if display[index].type is not LineType.REMOVE:
            index += 1
            continue

        removed: list[int] = []
        cursor = index
        while cursor < count and display[cursor].type in (LineType.REMOVE, LineType.NO_NEWLINE):
            if display[cursor].type is LineType.REMOVE:
                removed.append(cursor)
            cursor += 1

        added: list[int] = []
        while cursor < count and display[cursor].type in (LineType.ADD, LineType.NO_NEWLINE):
            if display[cursor].type is LineType.ADD:
                added.append(cursor)
            cursor += 1

        for removed_index, added_index in zip(removed, added):
            _pair(display, removed_index, added_index, tokenizer, options)
        index = cursor

    return display


def _pair(display: list[DisplayLine], removed_index: int, added_index: int,
          tokenizer, options: DiffOptions | None) -> None:
    removed = display[removed_index]
    added = display[added_index]
    ops = diff(removed.text, added.text, tokenizer, options)

    removed.parts = [
        DiffOp(OpKind.EQUAL, list(op.old_tokens), list(op.old_tokens))
        if op.kind is OpKind.EQUAL else op
        for op in ops if op.kind is not OpKind.INSERT
    ]
    added.parts = [op for op in ops if op.kind is not OpKind.DELETE]

    changed = sum(len(op.value) for op in ops if op.kind is not OpKind.EQUAL)
    total = len(removed.text) + len(added.text)
    ratio = changed / total if total else 0.0

    for line, counterpart in ((removed, added_index), (added, removed_index)):
        line.word_diff = True
        line.pair_index = counterpart
        line.change_ratio = ratio


def highlight_hunks(hunks: list[Hunk], **kwargs) -> list[list[DisplayLine]]:
    """Run :func:`highlight` over every hunk, numbering from its starts."""
    return [
        highlight(hunk.lines, hunk.old_start, hunk.new_start, **kwargs)
        for hunk in hunks
    ]
