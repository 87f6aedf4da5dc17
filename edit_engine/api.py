"""
Programmatic API for edit_engine — use as a library from Python code.

Example usage::

    from edit_engine import FileStateCache, apply_edits

    cache = FileStateCache()
    state = cache.record_read("app.py", content, mtime_ms)
    result = apply_edits("app.py", content, [("foo", "bar")], state)
    print(result.success)
    for hunk in result.hunks:
        print(hunk.header)
"""

from __future__ import annotations

import logging
from typing import Any, Iterable

from .diff_display import number_lines
from .diffing.differ import diff
from .diffing.hunks import DEFAULT_CONTEXT, apply_hunks, build_hunks, structured_patch
from .diffing.word_diff import highlight_hunks
from .editing.edits import Edit
from .editing.errors import EditError
from .editing.file_state import FileState, FileStateCache
from .editing.transaction import EditResult, apply_edits

_logger = logging.getLogger(__name__)

_IN_MEMORY_PATH = "<memory>"


def edit_content(content: str, edits: Iterable[Any],
                 context: int = DEFAULT_CONTEXT) -> EditResult:
    """Apply *edits* to an in-memory string.

    There is no file, so the read-before-write and staleness checks are
    satisfied by a synthetic state for *content*.
    """
    state = FileState(_IN_MEMORY_PATH, content, 0.0)
    result = apply_edits(_IN_MEMORY_PATH, content, edits, state, context=context)
    _logger.debug("[Edits] In-memory edit: success=%s", result.success)
    return result


__all__ = [
    "apply_edits", "edit_content", "diff", "build_hunks", "structured_patch",
    "apply_hunks", "highlight_hunks", "number_lines", "FileStateCache",
    "Edit", "EditResult", "EditError",
]
