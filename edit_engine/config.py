"""
Configuration — loads settings from .edit_engine.yaml, environment variables,
and built-in defaults (in that priority order: CLI args > env > YAML > defaults).
"""

from __future__ import annotations

import logging
import os

import yaml

logger = logging.getLogger(__name__)


_DEFAULTS = {
    "context_lines": 4,
    "word_diff_threshold": 0.4,
    "metrics_enabled": True,
    "metrics_dir": ".edit_engine",
    "log_dir": ".edit_engine/logs",
    "color": True,
    "review": False,
}

# Config file search locations
_CONFIG_FILENAMES = [".edit_engine.yaml", ".edit_engine.yml"]

_ENV_PREFIX = "EDIT_ENGINE_"


def _find_config_file(explicit_path: str | None = None) -> str | None:
    """Find the config file. Checks explicit path, CWD, then user home."""
    if explicit_path:
        if os.path.isfile(explicit_path):
            return explicit_path
        return None

    for d in (os.getcwd(), os.path.expanduser("~")):
        for name in _CONFIG_FILENAMES:
            path = os.path.join(d, name)
            if os.path.isfile(path):
                return path
    return None


def _load_yaml(path: str) -> dict:
    """Load YAML file, returns empty dict on failure."""
    try:
        with open(path, "r", encoding="utf-8") as f:
            data = yaml.safe_load(f)
        return data if isinstance(data, dict) else {}
    except (OSError, yaml.YAMLError) as exc:
        logger.warning("[Config] Ignoring unreadable config %s: %s", path, exc)
        return {}


class Config:
    """Engine configuration.

    Settings are resolved in priority order:
    1. CLI arguments (handled by caller)
    2. Environment variables (``EDIT_ENGINE_<KEY>``)
    3. .edit_engine.yaml config file
    4. Built-in defaults
    """

    def __init__(self, yaml_data: dict | None = None):
        yd = yaml_data or {}

        # Helper: env var > yaml > default
        def _get(key: str, cast=str):
            env_val = os.getenv(_ENV_PREFIX + key.upper())
            if env_val is not None:
                return cast(env_val)
            yaml_val = yd.get(key)
            if yaml_val is not None:
                return cast(yaml_val)
            return _DEFAULTS[key]

        def _get_bool(key: str) -> bool:
            env_val = os.getenv(_ENV_PREFIX + key.upper())
            if env_val is not None:
                return env_val.strip().lower() in ("1", "true", "yes", "on")
            yaml_val = yd.get(key)
            if yaml_val is not None:
                return bool(yaml_val)
            return _DEFAULTS[key]

        self.CONTEXT_LINES = _get("context_lines", cast=int)
        if self.CONTEXT_LINES < 0:
            raise ValueError(f"context_lines must be >= 0, got {self.CONTEXT_LINES}")

        # Word-diff pairs changing more than this share render as whole lines
        self.WORD_DIFF_THRESHOLD = _get("word_diff_threshold", cast=float)

        self.METRICS_ENABLED = _get_bool("metrics_enabled")
        self.METRICS_DIR = _get("metrics_dir")
        self.LOG_DIR = _get("log_dir")

        self.COLOR = _get_bool("color")
        self.REVIEW = _get_bool("review")

    @classmethod
    def load(cls, config_path: str | None = None) -> "Config":
        """Load config from YAML file (if found) + env vars + defaults."""
        path = _find_config_file(config_path)
        yaml_data = _load_yaml(path) if path else {}
        return cls(yaml_data)
