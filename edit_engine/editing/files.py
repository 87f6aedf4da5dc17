"""
Local file provider — the read / exists / write contract an edit session
needs, backed by the real file system.
"""

from __future__ import annotations

import logging
import os
import tempfile

logger = logging.getLogger(__name__)


def _mtime_ms(path: str) -> float:
    return os.stat(path).st_mtime_ns / 1_000_000


class LocalFileProvider:
    """Reads and writes UTF-8 text files with atomic replacement.

    Content is read and written with ``newline=""`` so line endings are
    preserved byte for byte.
    """

    def __init__(self, encoding: str = "utf-8") -> None:
        self.encoding = encoding

    def exists(self, path: str) -> bool:
        return os.path.isfile(path)

    def mtime_ms(self, path: str) -> float:
        return _mtime_ms(path)

    def read(self, path: str) -> tuple[str, float]:
        """Return ``(content, mtime_ms)``; raises OSError if unreadable."""
        with open(path, "r", encoding=self.encoding, newline="") as f:
            content = f.read()
        return content, _mtime_ms(path)

    def write(self, path: str, content: str) -> float:
        """Write *content* atomically via temp file + rename.

        Parent directories are created as needed.  Returns the new mtime.
        """
        abs_path = os.path.abspath(path)
        directory = os.path.dirname(abs_path)
        os.makedirs(directory, exist_ok=True)

        fd, tmp_path = tempfile.mkstemp(
            dir=directory, prefix=".edit_engine_", suffix=".tmp",
        )
        try:
            with os.fdopen(fd, "w", encoding=self.encoding, newline="") as f:
                f.write(content)
            if os.path.exists(abs_path):
                os.chmod(tmp_path, os.stat(abs_path).st_mode & 0o7777)
            os.replace(tmp_path, abs_path)
        except OSError:
            logger.error("[Files] Failed to write %s", abs_path)
            try:
                os.unlink(tmp_path)
            except OSError:
                pass
            raise
        return _mtime_ms(abs_path)


def find_similar_file(path: str) -> str | None:
    """Return a sibling with the same stem but another extension, if any."""
    directory = os.path.dirname(os.path.abspath(path))
    if not os.path.isdir(directory):
        return None

    base = os.path.basename(path)
    stem = os.path.splitext(base)[0]
    for name in sorted(os.listdir(directory)):
        if name != base and name.startswith(stem + "."):
            return os.path.join(directory, name)
    return None
