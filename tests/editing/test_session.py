"""Tests for EditSession — the read -> edit -> write cycle on real files."""

import os

import pytest

from edit_engine.config import Config
from edit_engine.editing.edits import Edit
from edit_engine.editing.errors import EditErrorKind
from edit_engine.editing.metrics import read_edit_stats
from edit_engine.editing.session import EditSession


@pytest.fixture
def session(tmp_path, monkeypatch):
    for key in list(os.environ):
        if key.startswith("EDIT_ENGINE_"):
            monkeypatch.delenv(key)
    return EditSession(config=Config(), project_root=str(tmp_path))


def _bump_mtime(path, seconds=10):
    st = os.stat(path)
    os.utime(path, ns=(st.st_atime_ns, st.st_mtime_ns + seconds * 1_000_000_000))


class TestReadFile:
    def test_numbers_lines(self, session, tmp_path):
        path = tmp_path / "a.txt"
        path.write_text("one\ntwo\nthree\n")
        assert session.read_file(str(path)) == "     1→one\n     2→two\n     3→three"

    def test_offset_and_limit(self, session, tmp_path):
        path = tmp_path / "a.txt"
        path.write_text("".join(f"l{i}\n" for i in range(1, 11)))
        assert session.read_file(str(path), offset=4, limit=2) == "     4→l4\n     5→l5"

    def test_records_state(self, session, tmp_path):
        path = tmp_path / "a.txt"
        path.write_text("x\n")
        session.read_file(str(path))
        assert session.cache.get(str(path)).content == "x\n"

    def test_empty_file(self, session, tmp_path):
        path = tmp_path / "empty.txt"
        path.write_text("")
        assert session.read_file(str(path)) == ""


class TestEditFile:
    def test_edit_after_read_writes_file(self, session, tmp_path):
        path = tmp_path / "a.py"
        path.write_text("x = 1\ny = 2\n")
        session.read_file(str(path))

        result = session.edit_file(str(path), [Edit("y = 2", "y = 3")])

        assert result.success and result.written
        assert path.read_text() == "x = 1\ny = 3\n"
        assert session.cache.get(str(path)).content == "x = 1\ny = 3\n"

    def test_consecutive_edits_without_rereading(self, session, tmp_path):
        path = tmp_path / "a.py"
        path.write_text("a\nb\n")
        session.read_file(str(path))

        assert session.edit_file(str(path), [("a", "A")]).success
        assert session.edit_file(str(path), [("b", "B")]).success
        assert path.read_text() == "A\nB\n"

    def test_edit_without_read_is_rejected(self, session, tmp_path):
        path = tmp_path / "a.py"
        path.write_text("a\n")

        result = session.edit_file(str(path), [("a", "b")])
        assert result.error.kind is EditErrorKind.NOT_READ
        assert path.read_text() == "a\n"

    def test_external_change_is_stale(self, session, tmp_path):
        path = tmp_path / "a.py"
        path.write_text("a\n")
        session.read_file(str(path))
        path.write_text("a\nmore\n")
        _bump_mtime(path)

        result = session.edit_file(str(path), [("a\n", "b\n")])
        assert result.error.kind is EditErrorKind.STALE_READ
        assert path.read_text() == "a\nmore\n"

    def test_create_new_file(self, session, tmp_path):
        path = tmp_path / "pkg" / "new.py"
        result = session.edit_file(str(path), [("", "print('hi')\n")])
        assert result.written
        assert path.read_text() == "print('hi')\n"

    def test_missing_file_suggests_similar(self, session, tmp_path):
        (tmp_path / "app.ts").write_text("")
        result = session.edit_file(str(tmp_path / "app.js"), [("a", "b")])
        assert result.error.kind is EditErrorKind.FILE_NOT_FOUND
        assert "app.ts" in result.error.message

    def test_notebooks_are_refused(self, session, tmp_path):
        path = tmp_path / "nb.ipynb"
        path.write_text("{}")
        result = session.edit_file(str(path), [("{}", "[]")])
        assert result.error.kind is EditErrorKind.NOTEBOOK_FILE
        assert result.error.code == 5

    def test_rejected_review_leaves_file(self, session, tmp_path):
        path = tmp_path / "a.py"
        path.write_text("a\n")
        session.read_file(str(path))

        seen = []
        result = session.edit_file(
            str(path), [("a", "b")],
            approve=lambda p, r: seen.append(r.hunks) or False,
        )
        assert result.success and not result.written
        assert seen and len(seen[0]) == 1
        assert path.read_text() == "a\n"

    def test_abbreviated_tags_are_repaired(self, session, tmp_path):
        path = tmp_path / "prompt.txt"
        path.write_text("<name>x</name>\n")
        session.read_file(str(path))

        result = session.edit_file(str(path), [("<n>x</n>", "<n>y</n>")])
        assert result.success
        assert path.read_text() == "<name>y</name>\n"

    def test_metrics_recorded(self, session, tmp_path):
        path = tmp_path / "a.py"
        path.write_text("a\n")
        session.read_file(str(path))
        session.edit_file(str(path), [("a", "b")])
        session.edit_file(str(path), [("zzz", "q")])

        stats = read_edit_stats(project_root=str(tmp_path))
        assert stats["total_edits"] == 2
        assert stats["success_rate"] == pytest.approx(50.0)
        assert stats["error_kinds"] == {"no_match": 50.0}

    def test_preview_does_not_write(self, session, tmp_path):
        path = tmp_path / "a.py"
        path.write_text("a\n")
        session.read_file(str(path))

        result = session.preview(str(path), [("a", "b")])
        assert result.success and not result.written
        assert result.updated_content == "b\n"
        assert path.read_text() == "a\n"


class TestInvalidPath:
    def test_edit_file_returns_result(self, session, tmp_path):
        result = session.edit_file("", [("a", "b")])
        assert not result.success
        assert result.error.kind is EditErrorKind.INVALID_PATH
        assert result.path == ""

    def test_edit_file_records_metric(self, session, tmp_path):
        session.edit_file("bad\0path", [("a", "b")])
        stats = read_edit_stats(project_root=str(tmp_path))
        assert stats["total_edits"] == 1
        assert stats["error_kinds"] == {"invalid_path": 100.0}

    def test_preview_returns_result(self, session):
        result = session.preview("", [("a", "b")])
        assert not result.success
        assert result.error.kind is EditErrorKind.INVALID_PATH
