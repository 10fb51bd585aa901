"""
Configuration — loads settings from .scaffoldmerge.yaml, environment variables,
and built-in defaults (in that priority order: CLI args > env > YAML > defaults).
"""

import os

import yaml

from .engine.markers import (
    DEFAULT_MARKER_BEGIN, DEFAULT_MARKER_END, DEFAULT_MARKER_PREFIX, MarkerPair,
)
from .engine.rules import MergeRules


_DEFAULTS = {
    "method_name": "OnModelCreating",
    "builder_type": "ModelBuilder",
    "partial_method": "OnModelCreatingPartial",
    "marker_begin": DEFAULT_MARKER_BEGIN,
    "marker_end": DEFAULT_MARKER_END,
    "marker_prefix": DEFAULT_MARKER_PREFIX,
    "strict_single_method": False,
    "context_file": "",
    "encoding": "utf-8",
    "log_dir": ".scaffoldmerge/logs",
}

# Config file search locations
_CONFIG_FILENAMES = [".scaffoldmerge.yaml", ".scaffoldmerge.yml"]


def _find_config_file(explicit_path: str | None = None) -> str | None:
    """Find the config file. Checks explicit path, CWD, then user home."""
    if explicit_path:
        if os.path.isfile(explicit_path):
            return explicit_path
        return None

    search_dirs = [os.getcwd(), os.path.expanduser("~")]
    for d in search_dirs:
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
    except (OSError, yaml.YAMLError):
        return {}


class Config:
    """Application configuration.

    Settings are resolved in priority order:
    1. CLI arguments (handled by caller)
    2. Environment variables (``SCAFFOLD_MERGE_*``)
    3. .scaffoldmerge.yaml config file
    4. Built-in defaults
    """

    def __init__(self, yaml_data: dict | None = None):
        yd = yaml_data or {}

        # Helper: env var > yaml > default
        def _get(env_key: str, yaml_key: str, default, cast=str):
            env_val = os.getenv(env_key)
            if env_val is not None:
                return cast(env_val)
            yaml_val = yd.get(yaml_key)
            if yaml_val is not None:
                return cast(yaml_val)
            return default

        def _get_bool(env_key: str, yaml_key: str, default: bool) -> bool:
            env_val = os.getenv(env_key)
            if env_val is not None:
                return env_val.lower() == "true"
            yaml_val = yd.get(yaml_key)
            if yaml_val is not None:
                return bool(yaml_val)
            return default

        self.METHOD_NAME = _get("SCAFFOLD_MERGE_METHOD", "method_name",
                                _DEFAULTS["method_name"])
        self.BUILDER_TYPE = _get("SCAFFOLD_MERGE_BUILDER_TYPE", "builder_type",
                                 _DEFAULTS["builder_type"])
        self.PARTIAL_METHOD = _get("SCAFFOLD_MERGE_PARTIAL_METHOD", "partial_method",
                                   _DEFAULTS["partial_method"])
        self.STRICT_SINGLE_METHOD = _get_bool("SCAFFOLD_MERGE_STRICT",
                                              "strict_single_method",
                                              _DEFAULTS["strict_single_method"])

        # Marker literals, either flat keys or a ``markers:`` section
        markers_section = yd.get("markers", {}) if isinstance(yd.get("markers"), dict) else {}
        self.MARKER_BEGIN = os.getenv("SCAFFOLD_MERGE_MARKER_BEGIN") or markers_section.get(
            "begin", yd.get("marker_begin", _DEFAULTS["marker_begin"]))
        self.MARKER_END = os.getenv("SCAFFOLD_MERGE_MARKER_END") or markers_section.get(
            "end", yd.get("marker_end", _DEFAULTS["marker_end"]))
        self.MARKER_PREFIX = os.getenv("SCAFFOLD_MERGE_MARKER_PREFIX") or markers_section.get(
            "prefix", yd.get("marker_prefix", _DEFAULTS["marker_prefix"]))

        # Context file name skipped when diffing model directories
        self.CONTEXT_FILE = _get("SCAFFOLD_MERGE_CONTEXT_FILE", "context_file",
                                 _DEFAULTS["context_file"])

        self.ENCODING = _get("SCAFFOLD_MERGE_ENCODING", "encoding",
                             _DEFAULTS["encoding"])
        self.LOG_DIR = _get("SCAFFOLD_MERGE_LOG_DIR", "log_dir",
                            _DEFAULTS["log_dir"])

    def merge_rules(self) -> MergeRules:
        """Build the engine's literal contracts from this configuration."""
        return MergeRules(
            method_name=self.METHOD_NAME,
            builder_type=self.BUILDER_TYPE,
            partial_method=self.PARTIAL_METHOD,
            markers=MarkerPair(
                begin=str(self.MARKER_BEGIN),
                end=str(self.MARKER_END),
                prefix=str(self.MARKER_PREFIX),
            ),
            strict=self.STRICT_SINGLE_METHOD,
        )

    @classmethod
    def load(cls, config_path: str | None = None) -> "Config":
        """Load config from YAML file (if found) + env vars + defaults."""
        path = _find_config_file(config_path)
        yaml_data = _load_yaml(path) if path else {}
        return cls(yaml_data)
