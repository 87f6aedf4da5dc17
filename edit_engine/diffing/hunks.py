"""
Hunk builder — groups a flat diff into unified-diff hunks with bounded
context, and applies such hunks back onto the old text.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field

from .differ import DiffOp, OpKind, diff_lines
from .tokenizers import DiffOptions

logger = logging.getLogger(__name__)

NO_NEWLINE_MARKER = "\\ No newline at end of file"
DEFAULT_CONTEXT = 4


class PatchApplyError(Exception):
    """Raised when a hunk does not match the text it is applied to."""


@dataclass
class Hunk:
    """A contiguous, context-padded block of a unified diff.

    ``lines`` holds marker-prefixed lines (``' '``, ``'-'``, ``'+'``) without
    their newline; a line that had no trailing newline is followed by
    :data:`NO_NEWLINE_MARKER`.
    """
    old_start: int
    old_lines: int
    new_start: int
    new_lines: int
    lines: list[str] = field(default_factory=list)

    @property
    def header(self) -> str:
        # Empty ranges conventionally point at the line before them.
        old_start = self.old_start - 1 if self.old_lines == 0 else self.old_start
        new_start = self.new_start - 1 if self.new_lines == 0 else self.new_start
        return f"@@ -{old_start},{self.old_lines} +{new_start},{self.new_lines} @@"

    @property
    def added(self) -> int:
        return sum(1 for line in self.lines if line.startswith("+"))

    @property
    def removed(self) -> int:
        return sum(1 for line in self.lines if line.startswith("-"))

    def to_dict(self) -> dict:
        return {
            "oldStart": self.old_start,
            "oldLines": self.old_lines,
            "newStart": self.new_start,
            "newLines": self.new_lines,
            "lines": list(self.lines),
        }


def split_lines(value: str) -> list[str]:
    """Split *value* into lines that keep their ``\\n`` (last may lack one)."""
    lines = [line + "\n" for line in value.split("\n")]
    if value.endswith("\n"):
        lines.pop()
    else:
        lines[-1] = lines[-1][:-1]
    return lines


def build_hunks(ops: list[DiffOp], context: int = DEFAULT_CONTEXT) -> list[Hunk]:
    """Group *ops* into hunks carrying up to *context* lines on each side.

    Equal runs of at most ``2 * context`` lines between two changes are
    folded into one hunk; longer runs (and the final run) close it.
    """
    if context < 0:
        raise ValueError("context must be >= 0")

    entries: list[tuple[DiffOp | None, list[str]]] = [
        (op, split_lines(op.value)) for op in ops
    ]
    entries.append((None, []))   # flushes a hunk that runs to end of input

    hunks: list[Hunk] = []
    old_range_start = 0
    new_range_start = 0
    cur_range: list[str] = []
    old_line = 1
    new_line = 1

    for index, (op, lines) in enumerate(entries):
        if op is not None and op.kind is not OpKind.EQUAL:
            if not old_range_start:
                old_range_start = old_line
                new_range_start = new_line
                if index > 0:
                    previous = entries[index - 1][1]
                    cur_range = [" " + line for line in previous[-context:]] if context > 0 else []
                    old_range_start -= len(cur_range)
                    new_range_start -= len(cur_range)

            marker = "+" if op.kind is OpKind.INSERT else "-"
            cur_range.extend(marker + line for line in lines)
            if op.kind is OpKind.INSERT:
                new_line += len(lines)
            else:
                old_line += len(lines)
            continue

        if old_range_start:
            if len(lines) <= context * 2 and index < len(entries) - 2:
                cur_range.extend(" " + line for line in lines)
            else:
                context_size = min(len(lines), context)
                cur_range.extend(" " + line for line in lines[:context_size])
                hunks.append(Hunk(
                    old_start=old_range_start,
                    old_lines=old_line - old_range_start + context_size,
                    new_start=new_range_start,
                    new_lines=new_line - new_range_start + context_size,
                    lines=cur_range,
                ))
                old_range_start = 0
                new_range_start = 0
                cur_range = []
        old_line += len(lines)
        new_line += len(lines)

    for hunk in hunks:
        hunk.lines = _mark_missing_newlines(hunk.lines)
    return hunks


def _mark_missing_newlines(lines: list[str]) -> list[str]:
    marked: list[str] = []
    for line in lines:
        if line.endswith("\n"):
            marked.append(line[:-1])
        else:
            marked.append(line)
            marked.append(NO_NEWLINE_MARKER)
    return marked


def structured_patch(
    old_text: str,
    new_text: str,
    context: int = DEFAULT_CONTEXT,
    options: DiffOptions | None = None,
) -> list[Hunk]:
    """Line-diff two texts and return their hunks."""
    if options is not None and options.newline_is_token:
        raise ValueError(
            "newline_is_token may only be used with diffing functions, "
            "not with patch generation"
        )
    return build_hunks(diff_lines(old_text, new_text, options), context)


# ---------------------------------------------------------------------------
# Applying hunks
# ---------------------------------------------------------------------------

def _keepends(text: str) -> list[str]:
    parts = text.split("\n")
    lines = [part + "\n" for part in parts[:-1]]
    if parts[-1]:
        lines.append(parts[-1])
    return lines


def apply_hunks(old_text: str, hunks: list[Hunk]) -> str:
    """Apply *hunks* to *old_text* and return the new text.

    Context and removed lines must match the old text exactly.

    Raises
    ------
    PatchApplyError
        If a hunk is out of order or does not match.
    """
    old_lines = _keepends(old_text)
    result: list[str] = []
    pos = 0

    for hunk in hunks:
        start = hunk.old_start - 1
        if start < pos or start > len(old_lines):
            raise PatchApplyError(
                f"Hunk {hunk.header} starts outside the remaining text "
                f"(line {pos + 1} of {len(old_lines)})"
            )
        result.extend(old_lines[pos:start])
        pos = start

        for index, line in enumerate(hunk.lines):
            if line == NO_NEWLINE_MARKER:
                continue
            marker, text = line[:1], line[1:]
            at_eof = (index + 1 < len(hunk.lines)
                      and hunk.lines[index + 1] == NO_NEWLINE_MARKER)
            full = text if at_eof else text + "\n"

            if marker in (" ", "-"):
                if pos >= len(old_lines) or old_lines[pos] != full:
                    found = old_lines[pos] if pos < len(old_lines) else "<end of file>"
                    logger.debug(
                        "[Hunks] Mismatch at old line %d: expected %r, found %r",
                        pos + 1, full, found,
                    )
                    raise PatchApplyError(
                        f"Hunk {hunk.header} does not match line {pos + 1}"
                    )
                pos += 1
                if marker == " ":
                    result.append(full)
            elif marker == "+":
                result.append(full)
            else:
                raise PatchApplyError(f"Unknown hunk line marker {marker!r}")

    result.extend(old_lines[pos:])
    return "".join(result)


def format_patch(
    old_name: str,
    new_name: str,
    hunks: list[Hunk],
    old_header: str = "",
    new_header: str = "",
) -> str:
    """Render *hunks* as unified-diff text."""
    out: list[str] = []
    if old_name == new_name:
        out.append(f"Index: {old_name}")
        out.append("=" * 67)
    out.append(f"--- {old_name}" + (f"\t{old_header}" if old_header else ""))
    out.append(f"+++ {new_name}" + (f"\t{new_header}" if new_header else ""))
    for hunk in hunks:
        out.append(hunk.header)
        out.extend(hunk.lines)
    return "\n".join(out) + "\n"
