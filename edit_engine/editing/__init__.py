"""Edit transactions — validate, apply and record exact-string file edits."""

from .errors import (
    EditErrorKind, EditError, UnchangedError, NotUniqueError, NoMatchError,
    OverlapConflictError, NotReadError, StaleReadError, InvalidPathError,
    FileNotFoundEditError, FileExistsEditError, InvalidEditError,
    NotebookFileError,
)
from .edits import Edit, normalize_edits, desanitize_edits, expand_tags, hunks_to_edits
from .file_state import FileState, FileStateCache, canonical_path
from .transaction import (
    EditResult, EditTransaction, apply_edits, replace_string,
    edits_equivalent, edit_snippet,
)
from .files import LocalFileProvider, find_similar_file
from .metrics import log_edit_metric, read_edit_stats
from .session import EditSession

__all__ = [
    "EditErrorKind", "EditError", "UnchangedError", "NotUniqueError",
    "NoMatchError", "OverlapConflictError", "NotReadError", "StaleReadError",
    "InvalidPathError", "FileNotFoundEditError", "FileExistsEditError",
    "InvalidEditError", "NotebookFileError",
    "Edit", "normalize_edits", "desanitize_edits", "expand_tags",
    "hunks_to_edits",
    "FileState", "FileStateCache", "canonical_path",
    "EditResult", "EditTransaction", "apply_edits", "replace_string",
    "edits_equivalent", "edit_snippet",
    "LocalFileProvider", "find_similar_file",
    "log_edit_metric", "read_edit_stats",
    "EditSession",
]
