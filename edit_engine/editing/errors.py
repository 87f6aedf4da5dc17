"""
Edit errors — the typed failures an edit transaction can report.

Every error carries enough context (path, offending string, occurrence
count) for the agent to re-read the file and retry with a more specific
``old_string``.  Messages are meant to be shown verbatim.
"""

from __future__ import annotations

from enum import Enum


class EditErrorKind(str, Enum):
    UNCHANGED = "unchanged"
    NOT_UNIQUE = "not_unique"
    NO_MATCH = "no_match"
    OVERLAP_CONFLICT = "overlap_conflict"
    NOT_READ = "not_read"
    STALE_READ = "stale_read"
    INVALID_PATH = "invalid_path"
    FILE_NOT_FOUND = "file_not_found"
    FILE_EXISTS = "file_exists"
    INVALID_EDIT = "invalid_edit"
    NOTEBOOK_FILE = "notebook_file"


class EditError(Exception):
    """Base class for edit validation failures."""

    kind: EditErrorKind
    code: int = 0
    default_message = "Failed to apply edit."

    def __init__(
        self,
        message: str | None = None,
        *,
        path: str | None = None,
        old_string: str | None = None,
        count: int | None = None,
    ) -> None:
        self.message = message or self.default_message
        self.path = path
        self.old_string = old_string
        self.count = count
        super().__init__(self.message)

    def to_dict(self) -> dict:
        data = {
            "kind": self.kind.value,
            "code": self.code,
            "message": self.message,
            "path": self.path,
        }
        if self.old_string is not None:
            data["old_string"] = self.old_string
        if self.count is not None:
            data["count"] = self.count
        return data


class UnchangedError(EditError):
    kind = EditErrorKind.UNCHANGED
    code = 1
    default_message = (
        "No changes to make: old_string and new_string are exactly the same."
    )


class FileExistsEditError(EditError):
    kind = EditErrorKind.FILE_EXISTS
    code = 3
    default_message = "Cannot create new file - file already exists."


class FileNotFoundEditError(EditError):
    kind = EditErrorKind.FILE_NOT_FOUND
    code = 4
    default_message = "File does not exist."


class NotebookFileError(EditError):
    kind = EditErrorKind.NOTEBOOK_FILE
    code = 5
    default_message = (
        "File is a Jupyter Notebook. Use a notebook editing tool to edit this file."
    )


class NotReadError(EditError):
    kind = EditErrorKind.NOT_READ
    code = 6
    default_message = "File has not been read yet. Read it first before writing to it."


class StaleReadError(EditError):
    kind = EditErrorKind.STALE_READ
    code = 7
    default_message = (
        "File has been modified since read, either by the user or by a linter. "
        "Read it again before attempting to write it."
    )


class NoMatchError(EditError):
    kind = EditErrorKind.NO_MATCH
    code = 8

    def __init__(self, message: str | None = None, *, old_string: str = "", **kwargs) -> None:
        if message is None:
            message = f"String to replace not found in file.\nString: {old_string}"
        super().__init__(message, old_string=old_string, **kwargs)


class NotUniqueError(EditError):
    kind = EditErrorKind.NOT_UNIQUE
    code = 9

    def __init__(self, message: str | None = None, *, old_string: str = "",
                 count: int = 0, **kwargs) -> None:
        if message is None:
            message = (
                f"Found {count} matches of the string to replace, but replace_all "
                "is false. To replace all occurrences, set replace_all to true. "
                "To replace only one occurrence, please provide more context to "
                f"uniquely identify the instance.\nString: {old_string}"
            )
        super().__init__(message, old_string=old_string, count=count, **kwargs)


class OverlapConflictError(EditError):
    kind = EditErrorKind.OVERLAP_CONFLICT
    code = 10
    default_message = (
        "Cannot edit file: old_string is a substring of a new_string from a "
        "previous edit."
    )


class InvalidPathError(EditError):
    kind = EditErrorKind.INVALID_PATH
    code = 11

    def __init__(self, message: str | None = None, *, path=None, **kwargs) -> None:
        if message is None:
            message = f"Invalid file path: {path!r}"
        super().__init__(message, path=None if path is None else str(path), **kwargs)


class InvalidEditError(EditError):
    kind = EditErrorKind.INVALID_EDIT
    code = 12
    default_message = (
        "An edit with an empty old_string creates the file and must be the "
        "only edit in its batch."
    )
