"""
Edit metrics — one JSONL line per edit attempt, plus rolling statistics.
"""

from __future__ import annotations

import json
import logging
import os
from collections import Counter
from datetime import datetime, timezone

logger = logging.getLogger(__name__)

DEFAULT_METRICS_DIR = ".edit_engine"
_METRICS_FILE = "edit_metrics.jsonl"


def metrics_path(project_root: str | None = None,
                 metrics_dir: str = DEFAULT_METRICS_DIR) -> str:
    """Return the absolute path to the metrics file."""
    base = project_root or os.getcwd()
    return os.path.join(base, metrics_dir, _METRICS_FILE)


def log_edit_metric(data: dict, project_root: str | None = None,
                    metrics_dir: str = DEFAULT_METRICS_DIR) -> None:
    """Append a single edit metric entry to the JSONL log.

    Parameters
    ----------
    data:
        Metric fields (file, success, error_kind, hunks, lines_added...).
    project_root:
        Directory the metrics directory lives in. Defaults to CWD.
    metrics_dir:
        Metrics directory relative to *project_root*.
    """
    path = metrics_path(project_root, metrics_dir)

    entry = {"timestamp": datetime.now(timezone.utc).isoformat()}
    entry.update(data)

    try:
        os.makedirs(os.path.dirname(path), exist_ok=True)
        with open(path, "a", encoding="utf-8") as f:
            f.write(json.dumps(entry) + "\n")
    except OSError as exc:
        logger.warning("[Metrics] Failed to write metrics: %s", exc)


def _read_entries(path: str) -> list[dict]:
    entries: list[dict] = []
    if not os.path.isfile(path):
        return entries
    try:
        with open(path, "r", encoding="utf-8") as f:
            for line in f:
                line = line.strip()
                if not line:
                    continue
                try:
                    entries.append(json.loads(line))
                except json.JSONDecodeError:
                    logger.debug("[Metrics] Skipping malformed line in %s", path)
    except OSError as exc:
        logger.warning("[Metrics] Failed to read %s: %s", path, exc)
    return entries


def read_edit_stats(
    last_n: int = 50,
    project_root: str | None = None,
    metrics_dir: str = DEFAULT_METRICS_DIR,
) -> dict:
    """Compute rolling statistics over the most recent *last_n* entries.

    Returns
    -------
    dict
        ``total_edits``, ``success_rate`` (percent), ``error_kinds``
        (kind -> percent of all edits), ``avg_hunks``, ``lines_added``
        and ``lines_removed``.
    """
    entries = _read_entries(metrics_path(project_root, metrics_dir))[-last_n:]

    if not entries:
        return {
            "total_edits": 0,
            "success_rate": 0.0,
            "error_kinds": {},
            "avg_hunks": 0.0,
            "lines_added": 0,
            "lines_removed": 0,
        }

    total = len(entries)
    successes = [e for e in entries if e.get("success", False)]
    kinds = Counter(e["error_kind"] for e in entries if e.get("error_kind"))

    return {
        "total_edits": total,
        "success_rate": len(successes) / total * 100,
        "error_kinds": {
            kind: count / total * 100
            for kind, count in kinds.most_common()
        },
        "avg_hunks": (
            sum(e.get("hunks", 0) for e in successes) / len(successes)
            if successes else 0.0
        ),
        "lines_added": sum(e.get("lines_added", 0) for e in entries),
        "lines_removed": sum(e.get("lines_removed", 0) for e in entries),
    }
