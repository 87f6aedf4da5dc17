"""
Edit transaction — validates a batch of string replacements against one
file's content and applies them all-or-nothing.

Each edit is applied as a pure ``content -> content'`` step, so a failure
part-way through a batch leaves the original content untouched.
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass, field
from typing import Any, Iterable

from ..diffing.hunks import DEFAULT_CONTEXT, Hunk, structured_patch
from .edits import Edit, normalize_edits
from .errors import (
    EditError,
    FileExistsEditError,
    FileNotFoundEditError,
    InvalidEditError,
    NoMatchError,
    NotReadError,
    NotUniqueError,
    OverlapConflictError,
    StaleReadError,
    UnchangedError,
)
from .file_state import FileState, canonical_path

logger = logging.getLogger(__name__)


@dataclass
class EditResult:
    """Outcome of an edit transaction."""
    success: bool = False
    path: str = ""
    hunks: list[Hunk] = field(default_factory=list)
    updated_content: str = ""
    original_content: str = ""
    error: EditError | None = None
    written: bool = False

    @property
    def lines_added(self) -> int:
        return sum(h.added for h in self.hunks)

    @property
    def lines_removed(self) -> int:
        return sum(h.removed for h in self.hunks)

    def to_dict(self) -> dict:
        return {
            "success": self.success,
            "path": self.path,
            "hunks": [h.to_dict() for h in self.hunks],
            "updated_content": self.updated_content,
            "error": self.error.to_dict() if self.error else None,
            "written": self.written,
        }


def replace_string(content: str, old_string: str, new_string: str,
                   replace_all: bool = False) -> str:
    """Replace the first (or every) occurrence of *old_string*.

    When deleting (*new_string* empty) a string that does not end in a
    newline but is followed by one, the newline is removed too so no blank
    line is left behind.
    """
    count = -1 if replace_all else 1
    if (not new_string and not old_string.endswith("\n")
            and old_string + "\n" in content):
        return content.replace(old_string + "\n", new_string, count)
    return content.replace(old_string, new_string, count)


class EditTransaction:
    """Validate and apply an ordered list of edits to one file's content.

    Parameters
    ----------
    path:
        The file being edited (canonicalised for cache lookups).
    original_content:
        Current content of the file ("" when it does not exist).
    edits:
        :class:`Edit` objects, dicts or tuples, applied in order.
    file_state:
        The cached state from the caller's last read, if any.
    file_exists:
        Whether the file currently exists on disk.
    disk_mtime_ms:
        Current on-disk modification time; compared against *file_state*.
    context:
        Context lines per hunk.
    """

    def __init__(
        self,
        path,
        original_content: str,
        edits: Iterable[Any],
        file_state: FileState | None = None,
        *,
        file_exists: bool = True,
        disk_mtime_ms: float | None = None,
        context: int = DEFAULT_CONTEXT,
    ) -> None:
        self._path = path
        self._original = original_content
        self._edits = normalize_edits(edits)
        self._state = file_state
        self._exists = file_exists
        self._disk_mtime_ms = disk_mtime_ms
        self._context = context

    @property
    def edits(self) -> list[Edit]:
        return list(self._edits)

    def run(self) -> EditResult:
        """Apply the batch.

        Raises
        ------
        EditError
            The first validation failure; nothing has been modified.
        """
        path = canonical_path(self._path)
        self._check_file(path)
        self._prevalidate(path)

        content = self._original
        applied: list[str] = []
        for edit in self._edits:
            content = self._apply_one(path, content, edit, applied)
            applied.append(edit.new_string)

        if content == self._original:
            raise UnchangedError(
                "Original and edited file match exactly. Failed to apply edit.",
                path=path,
            )

        hunks = structured_patch(self._original, content, self._context)
        logger.info(
            "[EditTxn] Applied %d edit(s) to %s: %d hunk(s)",
            len(self._edits), path, len(hunks),
        )
        return EditResult(
            success=True,
            path=path,
            hunks=hunks,
            updated_content=content,
            original_content=self._original,
        )

    # ------------------------------------------------------------------
    # Validation
    # ------------------------------------------------------------------

    def _check_file(self, path: str) -> None:
        creating = any(edit.old_string == "" for edit in self._edits)
        if creating and len(self._edits) > 1:
            raise InvalidEditError(path=path)

        if not self._exists:
            if creating:
                return   # brand-new file, nothing to have read
            raise FileNotFoundEditError(path=path)

        if creating and self._original.replace("\r\n", "\n").strip():
            raise FileExistsEditError(path=path)

        state = self._state
        if state is None or canonical_path(state.path) != path:
            raise NotReadError(path=path)

        if self._disk_mtime_ms is not None and self._disk_mtime_ms > state.mtime_ms:
            logger.debug(
                "[EditTxn] %s modified on disk (%.0f > %.0f)",
                path, self._disk_mtime_ms, state.mtime_ms,
            )
            raise StaleReadError(path=path)

    def _prevalidate(self, path: str) -> None:
        for edit in self._edits:
            if edit.old_string == edit.new_string:
                raise UnchangedError(path=path, old_string=edit.old_string)
            if not edit.old_string:
                continue
            count = self._original.count(edit.old_string)
            if count > 1 and not edit.replace_all:
                raise NotUniqueError(path=path, old_string=edit.old_string, count=count)

    def _apply_one(self, path: str, content: str, edit: Edit,
                   applied: list[str]) -> str:
        if edit.old_string == edit.new_string:
            raise UnchangedError(path=path, old_string=edit.old_string)

        trimmed = edit.old_string.rstrip("\n")
        if trimmed and any(trimmed in previous for previous in applied):
            raise OverlapConflictError(path=path, old_string=edit.old_string)

        if edit.old_string == "":
            return edit.new_string

        if edit.old_string not in content:
            raise NoMatchError(path=path, old_string=edit.old_string)

        updated = replace_string(content, edit.old_string, edit.new_string,
                                 edit.replace_all)
        if updated == content:
            raise NoMatchError(
                "String not found in file. Failed to apply edit.",
                path=path, old_string=edit.old_string,
            )
        return updated


def apply_edits(
    path,
    original_content: str,
    edits: Iterable[Any],
    file_state: FileState | None = None,
    *,
    file_exists: bool = True,
    disk_mtime_ms: float | None = None,
    context: int = DEFAULT_CONTEXT,
) -> EditResult:
    """Run an :class:`EditTransaction` and report failures as a result value.

    Returns
    -------
    EditResult
        ``success=True`` with hunks and updated content, or
        ``success=False`` with the typed :class:`EditError`.
    """
    try:
        txn = EditTransaction(
            path, original_content, edits, file_state,
            file_exists=file_exists, disk_mtime_ms=disk_mtime_ms, context=context,
        )
        return txn.run()
    except EditError as exc:
        logger.info("[EditTxn] Rejected edit to %s: %s (%s)", path, exc.kind.value, exc)
        return EditResult(
            success=False,
            path=exc.path or str(path),
            original_content=original_content,
            error=exc,
        )


def edits_equivalent(edits_a: Iterable[Any], edits_b: Iterable[Any],
                     content: str, path: str = "edits_equivalent") -> bool:
    """True if two batches are identical or have the same effect on *content*.

    Batches that both fail are equivalent when they fail the same way.
    """
    first = normalize_edits(edits_a)
    second = normalize_edits(edits_b)
    if first == second:
        return True

    state = FileState(canonical_path(path), content, 0.0)
    result_a = apply_edits(path, content, first, state)
    result_b = apply_edits(path, content, second, state)
    if result_a.error is not None and result_b.error is not None:
        return result_a.error.kind is result_b.error.kind
    if result_a.error is not None or result_b.error is not None:
        return False
    return result_a.updated_content == result_b.updated_content


_LINE_BREAK = re.compile(r"\r?\n")


def edit_snippet(original: str, old_string: str, new_string: str,
                 context_lines: int = 4) -> tuple[str, int]:
    """Return ``(snippet, start_line)`` around an edit in the updated text."""
    index = original.find(old_string) if old_string else 0
    before = original[:index] if index >= 0 else original
    line_number = len(_LINE_BREAK.split(before)) - 1

    updated = replace_string(original, old_string, new_string) if old_string else new_string
    lines = _LINE_BREAK.split(updated)
    start = max(0, line_number - context_lines)
    end = line_number + context_lines + len(_LINE_BREAK.split(new_string))
    return "\n".join(lines[start:end]), start + 1
