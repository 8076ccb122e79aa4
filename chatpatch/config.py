"""
Configuration — loads settings from .chatpatch.yaml, environment variables,
and built-in defaults (in that priority order: CLI args > env > YAML > defaults).
"""

import os

import yaml


_DEFAULTS = {
    "project_root": ".",
    "min_fragment_length": 10,
    "actionable_threshold": 20,
    "classifier_window": 200,
    "filename_window_before": 300,
    "filename_window_after": 100,
    "backup_dir": ".chatpatch/backups",
    "create_backups": True,
    "log_dir": ".chatpatch/logs",
    "metrics_file": ".chatpatch/edit_metrics.jsonl",
    "filename_heuristics": [],
    "inbox_extensions": [".md", ".txt"],
}

# Config file search locations
_CONFIG_FILENAMES = [".chatpatch.yaml", ".chatpatch.yml"]


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
    2. Environment variables
    3. .chatpatch.yaml config file
    4. Built-in defaults
    """

    def __init__(self, yaml_data: dict | None = None):
        yd = yaml_data or {}

        # Helper: env var > yaml > default
        def _get(env_key: str, yaml_key: str, cast=str):
            env_val = os.getenv(env_key)
            if env_val is not None:
                return cast(env_val)
            yaml_val = yd.get(yaml_key)
            if yaml_val is not None:
                return cast(yaml_val)
            return _DEFAULTS[yaml_key]

        def _get_bool(env_key: str, yaml_key: str) -> bool:
            env_val = os.getenv(env_key)
            if env_val is not None:
                return env_val.lower() in ("1", "true", "yes")
            yaml_val = yd.get(yaml_key)
            if yaml_val is not None:
                return bool(yaml_val)
            return _DEFAULTS[yaml_key]

        self.PROJECT_ROOT = _get("CHATPATCH_PROJECT_ROOT", "project_root")

        # Analysis thresholds
        self.MIN_FRAGMENT_LENGTH = _get("CHATPATCH_MIN_FRAGMENT_LENGTH",
                                        "min_fragment_length", cast=int)
        self.ACTIONABLE_THRESHOLD = _get("CHATPATCH_ACTIONABLE_THRESHOLD",
                                         "actionable_threshold", cast=int)
        self.CLASSIFIER_WINDOW = _get("CHATPATCH_CLASSIFIER_WINDOW",
                                      "classifier_window", cast=int)
        self.FILENAME_WINDOW_BEFORE = _get("CHATPATCH_FILENAME_WINDOW_BEFORE",
                                           "filename_window_before", cast=int)
        self.FILENAME_WINDOW_AFTER = _get("CHATPATCH_FILENAME_WINDOW_AFTER",
                                          "filename_window_after", cast=int)

        # Application side
        self.BACKUP_DIR = _get("CHATPATCH_BACKUP_DIR", "backup_dir")
        self.CREATE_BACKUPS = _get_bool("CHATPATCH_CREATE_BACKUPS",
                                        "create_backups")
        self.LOG_DIR = _get("CHATPATCH_LOG_DIR", "log_dir")
        self.METRICS_FILE = _get("CHATPATCH_METRICS_FILE", "metrics_file")

        # Extra filename heuristics (dotted import paths)
        self.FILENAME_HEURISTICS: list[str] = yd.get(
            "filename_heuristics", _DEFAULTS["filename_heuristics"])
        if not isinstance(self.FILENAME_HEURISTICS, list):
            self.FILENAME_HEURISTICS = []

        self.INBOX_EXTENSIONS: list[str] = yd.get(
            "inbox_extensions", _DEFAULTS["inbox_extensions"])
        if not isinstance(self.INBOX_EXTENSIONS, list):
            self.INBOX_EXTENSIONS = list(_DEFAULTS["inbox_extensions"])

    def resolve_path(self, path: str) -> str:
        """Resolve a config-relative path against the project root."""
        if os.path.isabs(path):
            return path
        return os.path.join(os.path.abspath(self.PROJECT_ROOT), path)

    @classmethod
    def load(cls, config_path: str | None = None) -> "Config":
        """Load config from YAML file (if found) + env vars + defaults."""
        path = _find_config_file(config_path)
        yaml_data = _load_yaml(path) if path else {}
        return cls(yaml_data)
