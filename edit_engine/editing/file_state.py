"""
File state cache — what each path looked like when it was last read.

The cache is owned by the caller and passed to edit transactions
explicitly.  It does no locking; at most one transaction per path may be
in flight at a time.
"""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass

from .errors import InvalidPathError

logger = logging.getLogger(__name__)


def canonical_path(path) -> str:
    """Return the absolute, normalised form of *path* used as cache key.

    Raises
    ------
    InvalidPathError
        For empty paths or paths containing NUL bytes.
    """
    if path is None:
        raise InvalidPathError(path=path)
    text = os.fspath(path) if isinstance(path, os.PathLike) else str(path)
    if not text.strip() or "\x00" in text:
        raise InvalidPathError(path=text)
    return os.path.normpath(os.path.abspath(os.path.expanduser(text)))


@dataclass
class FileState:
    """Content and modification time recorded at the last read or write."""
    path: str
    content: str
    mtime_ms: float


class FileStateCache:
    """Per-path record of last-read content, keyed by canonical path."""

    def __init__(self) -> None:
        self._entries: dict[str, FileState] = {}

    def record_read(self, path, content: str, mtime_ms: float) -> FileState:
        """Store the state observed by a read."""
        key = canonical_path(path)
        state = FileState(key, content, mtime_ms)
        self._entries[key] = state
        logger.debug("[FileState] Recorded read of %s (mtime %.0f)", key, mtime_ms)
        return state

    def refresh(self, path, content: str, mtime_ms: float) -> FileState:
        """Replace the entry after a successful write."""
        key = canonical_path(path)
        state = FileState(key, content, mtime_ms)
        self._entries[key] = state
        logger.debug("[FileState] Refreshed %s after write (mtime %.0f)", key, mtime_ms)
        return state

    def get(self, path) -> FileState | None:
        return self._entries.get(canonical_path(path))

    def invalidate(self, path) -> bool:
        """Forget *path*; returns whether an entry existed."""
        removed = self._entries.pop(canonical_path(path), None) is not None
        if removed:
            logger.debug("[FileState] Invalidated %s", path)
        return removed

    def is_stale(self, path, disk_mtime_ms: float) -> bool:
        """True when the file changed on disk after it was last read."""
        state = self.get(path)
        return state is not None and disk_mtime_ms > state.mtime_ms

    def clear(self) -> None:
        self._entries.clear()

    def __contains__(self, path) -> bool:
        try:
            return canonical_path(path) in self._entries
        except InvalidPathError:
            return False

    def __len__(self) -> int:
        return len(self._entries)

    def __iter__(self):
        return iter(list(self._entries.values()))
