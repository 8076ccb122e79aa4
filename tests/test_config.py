"""Tests for Config loading and priority order."""

import os

import pytest

from chatpatch.config import Config


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    for key in list(os.environ):
        if key.startswith("CHATPATCH_"):
            monkeypatch.delenv(key)


class TestDefaults:
    def test_defaults(self):
        cfg = Config()
        assert cfg.MIN_FRAGMENT_LENGTH == 10
        assert cfg.ACTIONABLE_THRESHOLD == 20
        assert cfg.CLASSIFIER_WINDOW == 200
        assert cfg.FILENAME_WINDOW_BEFORE == 300
        assert cfg.FILENAME_WINDOW_AFTER == 100
        assert cfg.CREATE_BACKUPS is True
        assert cfg.FILENAME_HEURISTICS == []
        assert cfg.INBOX_EXTENSIONS == [".md", ".txt"]


class TestPriority:
    def test_yaml_overrides_defaults(self):
        cfg = Config({"actionable_threshold": 40, "create_backups": False})
        assert cfg.ACTIONABLE_THRESHOLD == 40
        assert cfg.CREATE_BACKUPS is False

    def test_env_overrides_yaml(self, monkeypatch):
        monkeypatch.setenv("CHATPATCH_ACTIONABLE_THRESHOLD", "55")
        monkeypatch.setenv("CHATPATCH_CREATE_BACKUPS", "no")
        cfg = Config({"actionable_threshold": 40, "create_backups": True})
        assert cfg.ACTIONABLE_THRESHOLD == 55
        assert cfg.CREATE_BACKUPS is False

    def test_invalid_list_settings_ignored(self):
        cfg = Config({"filename_heuristics": "not.a.list", "inbox_extensions": 3})
        assert cfg.FILENAME_HEURISTICS == []
        assert cfg.INBOX_EXTENSIONS == [".md", ".txt"]


class TestLoad:
    def test_load_explicit_file(self, tmp_path):
        path = tmp_path / ".chatpatch.yaml"
        path.write_text(
            "min_fragment_length: 25\n"
            "filename_heuristics:\n"
            "  - mypkg.naming.settings_file\n"
        )
        cfg = Config.load(str(path))
        assert cfg.MIN_FRAGMENT_LENGTH == 25
        assert cfg.FILENAME_HEURISTICS == ["mypkg.naming.settings_file"]

    def test_malformed_yaml_uses_defaults(self, tmp_path):
        path = tmp_path / "broken.yaml"
        path.write_text("key: [unclosed\n")
        assert Config.load(str(path)).MIN_FRAGMENT_LENGTH == 10

    def test_non_mapping_yaml_uses_defaults(self, tmp_path):
        path = tmp_path / "list.yaml"
        path.write_text("- a\n- b\n")
        assert Config.load(str(path)).ACTIONABLE_THRESHOLD == 20

    def test_missing_explicit_file(self, tmp_path):
        cfg = Config.load(str(tmp_path / "missing.yaml"))
        assert cfg.MIN_FRAGMENT_LENGTH == 10

    def test_found_in_cwd(self, tmp_path, monkeypatch):
        (tmp_path / ".chatpatch.yml").write_text("classifier_window: 120\n")
        monkeypatch.chdir(tmp_path)
        assert Config.load().CLASSIFIER_WINDOW == 120


class TestResolvePath:
    def test_relative_to_project_root(self, tmp_path):
        cfg = Config({"project_root": str(tmp_path)})
        assert cfg.resolve_path("logs") == os.path.join(str(tmp_path), "logs")

    def test_absolute_unchanged(self, tmp_path):
        cfg = Config({"project_root": "."})
        assert cfg.resolve_path(str(tmp_path)) == str(tmp_path)
