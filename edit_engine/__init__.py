"""
edit_engine — text diffing and transactional exact-string file edits.

Public API for library usage::

    from edit_engine import apply_edits, structured_patch, FileStateCache
"""

from .api import (
    apply_edits, edit_content, diff, build_hunks, structured_patch,
    apply_hunks, highlight_hunks, number_lines, FileStateCache,
    Edit, EditResult, EditError,
)
from .editing.session import EditSession

__version__ = "0.1.0"

__all__ = [
    "apply_edits", "edit_content", "diff", "build_hunks", "structured_patch",
    "apply_hunks", "highlight_hunks", "number_lines", "FileStateCache",
    "Edit", "EditResult", "EditError", "EditSession",
]
