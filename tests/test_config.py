"""Tests for settings loading."""

import pytest

from lessongate.schemas import CompletionPolicy
from lessongate.utils import EngineSettings, load_settings
from lessongate.utils import config_loader


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    for suffix in ("CONFIG", "DB", "PASS_THRESHOLD", "COMPLETION_POLICY", "LOG_LEVEL"):
        monkeypatch.delenv(f"LESSONGATE_{suffix}", raising=False)


class TestLoadSettings:

    def test_defaults_without_file(self, monkeypatch, tmp_path):
        monkeypatch.setattr(config_loader, "CONFIG_PATH", tmp_path / "missing.yaml")
        settings = load_settings()
        assert settings.default_pass_threshold == 100
        assert settings.completion_policy == CompletionPolicy.EVER_PASSED
        assert settings.log_level == "INFO"

    def test_project_config_file(self):
        settings = load_settings(config_loader.CONFIG_PATH)
        assert settings.default_pass_threshold == 100
        assert settings.db_path.name == "lessongate.db"
        assert "~" not in str(settings.db_path)

    def test_yaml_file(self, tmp_path):
        path = tmp_path / "engine.yaml"
        path.write_text(
            "default_pass_threshold: 70\n"
            "completion_policy: latest_attempt\n"
            f"db_path: {tmp_path / 'x.db'}\n"
            "log_level: debug\n",
            encoding="utf-8",
        )
        settings = load_settings(path)
        assert settings.default_pass_threshold == 70
        assert settings.completion_policy == CompletionPolicy.LATEST_ATTEMPT
        assert settings.db_path == tmp_path / "x.db"
        assert settings.log_level == "DEBUG"

    def test_empty_yaml_file(self, tmp_path):
        path = tmp_path / "engine.yaml"
        path.write_text("", encoding="utf-8")
        assert load_settings(path) == EngineSettings()

    def test_missing_explicit_file(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            load_settings(tmp_path / "nope.yaml")

    def test_config_path_from_env(self, monkeypatch, tmp_path):
        path = tmp_path / "env.yaml"
        path.write_text("default_pass_threshold: 60\n", encoding="utf-8")
        monkeypatch.setenv("LESSONGATE_CONFIG", str(path))
        assert load_settings().default_pass_threshold == 60

    def test_env_overrides_file(self, monkeypatch, tmp_path):
        path = tmp_path / "engine.yaml"
        path.write_text("default_pass_threshold: 70\n", encoding="utf-8")
        monkeypatch.setenv("LESSONGATE_PASS_THRESHOLD", "85")
        monkeypatch.setenv("LESSONGATE_DB", str(tmp_path / "env.db"))
        settings = load_settings(path)
        assert settings.default_pass_threshold == 85
        assert settings.db_path == tmp_path / "env.db"

    def test_invalid_values(self, tmp_path):
        path = tmp_path / "engine.yaml"
        path.write_text("log_level: loud\n", encoding="utf-8")
        with pytest.raises(ValueError):
            load_settings(path)
        path.write_text("default_pass_threshold: 150\n", encoding="utf-8")
        with pytest.raises(ValueError):
            load_settings(path)
