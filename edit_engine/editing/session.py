"""
Edit session — wires the file provider, the state cache and edit
transactions together into a read -> edit -> write cycle.

The transaction itself never touches the disk; the session does the I/O
around it and serialises edits to the same path.
"""

from __future__ import annotations

import logging
import threading
from typing import Any, Callable, Iterable

from ..config import Config
from .edits import desanitize_edits, normalize_edits
from .errors import FileNotFoundEditError, InvalidPathError, NotebookFileError
from .file_state import FileStateCache, canonical_path
from .files import LocalFileProvider, find_similar_file
from .metrics import log_edit_metric
from .transaction import EditResult, apply_edits

logger = logging.getLogger(__name__)

ApproveCallback = Callable[[str, EditResult], bool]


def _invalid_path(path, error: InvalidPathError) -> EditResult:
    logger.info("[EditSession] %s", error.message)
    return EditResult(success=False, path=str(path), error=error)


class EditSession:
    """Stateful front end for agents editing files on disk.

    Parameters
    ----------
    provider:
        Object with ``exists``, ``read`` and ``write`` (defaults to
        :class:`LocalFileProvider`).
    cache:
        The :class:`FileStateCache` shared with whoever performs reads.
    config:
        Engine configuration; defaults to ``Config()``.
    project_root:
        Where the metrics directory lives. Defaults to CWD.
    """

    def __init__(
        self,
        provider: LocalFileProvider | None = None,
        cache: FileStateCache | None = None,
        config: Config | None = None,
        project_root: str | None = None,
    ) -> None:
        self.provider = provider or LocalFileProvider()
        self.cache = cache if cache is not None else FileStateCache()
        self.config = config or Config()
        self.project_root = project_root
        self._locks: dict[str, threading.Lock] = {}
        self._locks_guard = threading.Lock()

    def _lock_for(self, path: str) -> threading.Lock:
        with self._locks_guard:
            lock = self._locks.get(path)
            if lock is None:
                lock = self._locks[path] = threading.Lock()
            return lock

    # ------------------------------------------------------------------
    # Reads
    # ------------------------------------------------------------------

    def read_file(self, path, offset: int = 1, limit: int | None = None) -> str:
        """Read *path*, record its state, and return ``cat -n`` style text.

        *offset* is the 1-based first line to show; the whole file is
        recorded in the cache regardless of the window shown.
        """
        from ..diff_display import number_lines

        key = canonical_path(path)
        content, mtime_ms = self.provider.read(key)
        self.cache.record_read(key, content, mtime_ms)

        lines = content.split("\n")
        if content.endswith("\n"):
            lines.pop()
        start = max(offset, 1)
        window = lines[start - 1:] if limit is None else lines[start - 1:start - 1 + limit]
        if not window:
            return ""
        return number_lines("\n".join(window), start)

    # ------------------------------------------------------------------
    # Edits
    # ------------------------------------------------------------------

    def _run(self, key: str, edits: list) -> EditResult:
        if key.endswith(".ipynb"):
            error = NotebookFileError(path=key)
            logger.info("[EditSession] Refusing notebook edit to %s", key)
            return EditResult(success=False, path=key, error=error)

        exists = self.provider.exists(key)
        if exists:
            content, disk_mtime = self.provider.read(key)
        else:
            content, disk_mtime = "", None

        edits = desanitize_edits(content, edits)
        result = apply_edits(
            key, content, edits, self.cache.get(key),
            file_exists=exists,
            disk_mtime_ms=disk_mtime,
            context=self.config.CONTEXT_LINES,
        )

        if isinstance(result.error, FileNotFoundEditError):
            similar = find_similar_file(key)
            if similar:
                result.error = FileNotFoundEditError(
                    f"{result.error.message} Did you mean {similar}?", path=key,
                )
        return result

    def preview(self, path, edits: Iterable[Any]) -> EditResult:
        """Validate and diff *edits* without writing anything."""
        try:
            key = canonical_path(path)
        except InvalidPathError as exc:
            return _invalid_path(path, exc)
        with self._lock_for(key):
            return self._run(key, normalize_edits(edits))

    def edit_file(
        self,
        path,
        edits: Iterable[Any],
        approve: ApproveCallback | None = None,
    ) -> EditResult:
        """Apply *edits* to *path* and write the result.

        When *approve* is given it is called with the successful result
        before the write; returning False leaves the file untouched and the
        result's ``written`` flag False.

        Raises
        ------
        OSError
            If the provider fails to write; the cache is left as it was.
        """
        edits = normalize_edits(edits)
        try:
            key = canonical_path(path)
        except InvalidPathError as exc:
            result = _invalid_path(path, exc)
            self._record_metric(str(path), edits, result)
            return result

        with self._lock_for(key):
            result = self._run(key, edits)

            if result.success and approve is not None and not approve(key, result):
                logger.info("[EditSession] Edit to %s rejected at review", key)
            elif result.success:
                mtime_ms = self.provider.write(key, result.updated_content)
                self.cache.refresh(key, result.updated_content, mtime_ms)
                result.written = True
                logger.info(
                    "[EditSession] Wrote %s (+%d -%d)",
                    key, result.lines_added, result.lines_removed,
                )

        self._record_metric(key, edits, result)
        return result

    def _record_metric(self, path: str, edits: list, result: EditResult) -> None:
        if not self.config.METRICS_ENABLED:
            return
        log_edit_metric(
            {
                "file": path,
                "edits": len(edits),
                "success": result.success,
                "written": result.written,
                "error_kind": result.error.kind.value if result.error else None,
                "hunks": len(result.hunks),
                "lines_added": result.lines_added,
                "lines_removed": result.lines_removed,
            },
            project_root=self.project_root,
            metrics_dir=self.config.METRICS_DIR,
        )
