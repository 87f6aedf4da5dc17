"""Tests for edit metrics logging and stats."""

import json
import os

import pytest

from edit_engine.editing.metrics import log_edit_metric, metrics_path, read_edit_stats


@pytest.fixture
def tmp_project(tmp_path):
    return str(tmp_path)


class TestLogEditMetric:
    def test_creates_file_and_writes_entry(self, tmp_project):
        log_edit_metric({"file": "src/auth.py", "success": True, "hunks": 2},
                        project_root=tmp_project)

        path = os.path.join(tmp_project, ".edit_engine", "edit_metrics.jsonl")
        assert os.path.isfile(path)

        with open(path) as f:
            lines = f.readlines()
        assert len(lines) == 1

        entry = json.loads(lines[0])
        assert entry["file"] == "src/auth.py"
        assert entry["hunks"] == 2
        assert "timestamp" in entry

    def test_appends_multiple_entries(self, tmp_project):
        for name in ("a.py", "b.py", "c.py"):
            log_edit_metric({"file": name}, project_root=tmp_project)

        with open(metrics_path(tmp_project)) as f:
            assert len(f.readlines()) == 3

    def test_custom_metrics_dir(self, tmp_project):
        log_edit_metric({"file": "a.py"}, project_root=tmp_project, metrics_dir="stats")
        assert os.path.isfile(os.path.join(tmp_project, "stats", "edit_metrics.jsonl"))


class TestReadEditStats:
    def test_empty_stats(self, tmp_project):
        stats = read_edit_stats(project_root=tmp_project)
        assert stats["total_edits"] == 0
        assert stats["success_rate"] == 0.0
        assert stats["error_kinds"] == {}

    def test_stats_from_entries(self, tmp_project):
        entries = [
            {"file": "a.py", "success": True, "hunks": 1, "lines_added": 2, "lines_removed": 1},
            {"file": "b.py", "success": True, "hunks": 3, "lines_added": 5, "lines_removed": 0},
            {"file": "c.py", "success": False, "error_kind": "not_unique"},
            {"file": "d.py", "success": False, "error_kind": "no_match"},
        ]
        for entry in entries:
            log_edit_metric(entry, project_root=tmp_project)

        stats = read_edit_stats(project_root=tmp_project)
        assert stats["total_edits"] == 4
        assert stats["success_rate"] == pytest.approx(50.0)
        assert stats["avg_hunks"] == pytest.approx(2.0)
        assert stats["lines_added"] == 7
        assert stats["lines_removed"] == 1
        assert stats["error_kinds"] == {"not_unique": 25.0, "no_match": 25.0}

    def test_last_n_limits_window(self, tmp_project):
        for i in range(10):
            log_edit_metric({"file": f"f{i}.py", "success": i >= 5},
                            project_root=tmp_project)

        stats = read_edit_stats(last_n=5, project_root=tmp_project)
        assert stats["total_edits"] == 5
        assert stats["success_rate"] == pytest.approx(100.0)

    def test_malformed_lines_are_skipped(self, tmp_project):
        log_edit_metric({"success": True}, project_root=tmp_project)
        with open(metrics_path(tmp_project), "a") as f:
            f.write("not json\n")
        assert read_edit_stats(project_root=tmp_project)["total_edits"] == 1
