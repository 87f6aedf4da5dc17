"""Tests for the edit-engine command line."""

import json
import os

import pytest

from edit_engine.cli import main


@pytest.fixture(autouse=True)
def workdir(tmp_path, monkeypatch):
    for key in list(os.environ):
        if key.startswith("EDIT_ENGINE_"):
            monkeypatch.delenv(key)
    monkeypatch.setenv("HOME", str(tmp_path / "home"))
    monkeypatch.chdir(tmp_path)
    return tmp_path


class TestDiffCommand:
    def test_identical_files_exit_zero(self, workdir, capsys):
        (workdir / "a.txt").write_text("same\n")
        (workdir / "b.txt").write_text("same\n")
        assert main(["diff", "a.txt", "b.txt", "--no-color"]) == 0
        assert capsys.readouterr().out == ""

    def test_unified_output(self, workdir, capsys):
        (workdir / "a.txt").write_text("line1\nline2\nline3\n")
        (workdir / "b.txt").write_text("line1\nLINE2\nline3\n")
        assert main(["diff", "a.txt", "b.txt", "--no-color"]) == 1
        out = capsys.readouterr().out.splitlines()
        assert out[:2] == ["--- a.txt", "+++ b.txt"]
        assert "@@ -1,3 +1,3 @@" in out
        assert "-line2" in out and "+LINE2" in out

    def test_json_hunks(self, workdir, capsys):
        (workdir / "a.txt").write_text("a\n")
        (workdir / "b.txt").write_text("b\n")
        main(["diff", "a.txt", "b.txt", "--json"])
        hunks = json.loads(capsys.readouterr().out)
        assert hunks[0]["lines"] == ["-a", "+b"]

    def test_word_tokenizer(self, workdir, capsys):
        (workdir / "a.txt").write_text("hello world")
        (workdir / "b.txt").write_text("hello there")
        assert main(["diff", "a.txt", "b.txt", "--tokenizer", "word", "--no-color"]) == 1
        assert capsys.readouterr().out.strip() == "hello [-world-]{+there+}"

    def test_undecodable_file(self, workdir, capsys):
        (workdir / "a.txt").write_bytes(b"\xff\xfe\x00bad\n")
        (workdir / "b.txt").write_text("ok\n")
        assert main(["diff", "a.txt", "b.txt", "--no-color"]) == 2
        assert capsys.readouterr().err.startswith("Error:")

    def test_missing_file(self, workdir, capsys):
        assert main(["diff", "nope.txt", "nope2.txt"]) == 2
        assert "Error" in capsys.readouterr().err


class TestEditCommand:
    def test_single_edit(self, workdir, capsys):
        (workdir / "app.py").write_text("x = 1\n")
        assert main(["edit", "app.py", "--old", "x = 1", "--new", "x = 2"]) == 0
        assert (workdir / "app.py").read_text() == "x = 2\n"
        assert "has been updated" in capsys.readouterr().out

    def test_edits_file(self, workdir):
        (workdir / "app.py").write_text("a\nb\n")
        (workdir / "edits.json").write_text(json.dumps([
            {"old_string": "a", "new_string": "A"},
            {"old_string": "b", "new_string": "B"},
        ]))
        assert main(["edit", "app.py", "--edits", "edits.json"]) == 0
        assert (workdir / "app.py").read_text() == "A\nB\n"

    def test_failure_exit_code(self, workdir, capsys):
        (workdir / "app.py").write_text("dup\ndup\n")
        assert main(["edit", "app.py", "--old", "dup", "--new", "x"]) == 1
        assert "Found 2 matches" in capsys.readouterr().err

    def test_dry_run_does_not_write(self, workdir, capsys):
        (workdir / "app.py").write_text("a\n")
        assert main(["edit", "app.py", "--old", "a", "--new", "b",
                     "--dry-run", "--no-color"]) == 0
        assert (workdir / "app.py").read_text() == "a\n"
        assert "+b" in capsys.readouterr().out.splitlines()

    def test_json_result(self, workdir, capsys):
        (workdir / "app.py").write_text("a\n")
        main(["edit", "app.py", "--old", "a", "--new", "b", "--json"])
        data = json.loads(capsys.readouterr().out)
        assert data["success"] is True
        assert data["written"] is True

    def test_create_file(self, workdir):
        assert main(["edit", "new/file.txt", "--old", "", "--new", "hi\n"]) == 0
        assert (workdir / "new" / "file.txt").read_text() == "hi\n"

    def test_undecodable_file(self, workdir, capsys):
        (workdir / "app.py").write_bytes(b"\xffold\n")
        assert main(["edit", "app.py", "--old", "old", "--new", "new"]) == 1
        assert capsys.readouterr().err.startswith("Error:")
        assert (workdir / "app.py").read_bytes() == b"\xffold\n"

    def test_write_failure(self, workdir, capsys):
        (workdir / "target").mkdir()
        assert main(["edit", "target", "--old", "", "--new", "hi\n"]) == 1
        assert capsys.readouterr().err.startswith("Error:")
        assert (workdir / "target").is_dir()

    def test_string_replace_all_flag(self, workdir):
        (workdir / "app.py").write_text("a\n")
        (workdir / "edits.json").write_text(json.dumps([
            {"old_string": "a", "new_string": "b", "replace_all": "false"},
        ]))
        assert main(["edit", "app.py", "--edits", "edits.json"]) == 0
        assert (workdir / "app.py").read_text() == "b\n"

    def test_bad_replace_all_flag(self, workdir, capsys):
        (workdir / "app.py").write_text("a\n")
        (workdir / "edits.json").write_text(json.dumps([
            {"old_string": "a", "new_string": "b", "replace_all": "maybe"},
        ]))
        assert main(["edit", "app.py", "--edits", "edits.json"]) == 2
        assert "replace_all" in capsys.readouterr().err

    def test_requires_old_and_new(self, workdir, capsys):
        (workdir / "app.py").write_text("a\n")
        assert main(["edit", "app.py", "--old", "a"]) == 2

    def test_writes_log_file(self, workdir):
        (workdir / "app.py").write_text("a\n")
        main(["edit", "app.py", "--old", "a", "--new", "b"])
        assert os.listdir(workdir / ".edit_engine" / "logs")


class TestCatAndStats:
    def test_cat(self, workdir, capsys):
        (workdir / "f.txt").write_text("a\nb\nc\n")
        assert main(["cat", "f.txt", "--offset", "2"]) == 0
        assert capsys.readouterr().out == "     2→b\n     3→c\n"

    def test_cat_undecodable_file(self, workdir, capsys):
        (workdir / "f.bin").write_bytes(b"\xff\n")
        assert main(["cat", "f.bin"]) == 1
        assert capsys.readouterr().err.startswith("Error:")

    def test_cat_empty_path(self, workdir, capsys):
        assert main(["cat", ""]) == 1
        assert "Invalid file path" in capsys.readouterr().err

    def test_stats_after_edits(self, workdir, capsys):
        (workdir / "app.py").write_text("a\n")
        main(["edit", "app.py", "--old", "a", "--new", "b"])
        main(["edit", "app.py", "--old", "zzz", "--new", "q"])
        capsys.readouterr()

        assert main(["stats"]) == 0
        out = capsys.readouterr().out
        assert "Total edits:          2" in out
        assert "no_match" in out

    def test_stats_empty(self, workdir, capsys):
        assert main(["stats"]) == 0
        assert "No edit metrics found yet." in capsys.readouterr().out
