"""Tests for settings loading."""

import sys

import pytest

from linear_opencode.config import Settings, get_config_dir, load_settings

ENV_VARS = [
    "LINEAR_API_KEY",
    "LINEAR_WEBHOOK_SECRET",
    "LINEAR_OPENCODE_CONFIG",
    "LINEAR_OPENCODE_LINEAR__API_KEY",
    "LINEAR_OPENCODE_WEBHOOK__SECRET",
    "LINEAR_OPENCODE_WEBHOOK__PORT",
    "LINEAR_OPENCODE_LOG_LEVEL",
]


@pytest.fixture(autouse=True)
def clean_env(monkeypatch, tmp_path):
    for name in ENV_VARS:
        monkeypatch.delenv(name, raising=False)
    monkeypatch.setenv("LINEAR_OPENCODE_CONFIG_DIR", str(tmp_path / "config"))


class TestSettings:
    def test_defaults(self):
        settings = Settings()
        assert settings.linear.api_url == "https://api.linear.app/graphql"
        assert settings.linear.enable_safety_checks is True
        assert settings.webhook.port == 8420
        assert settings.webhook.path == "/webhooks/linear"
        assert settings.webhook.dedupe_deliveries is False
        assert settings.stream.max_history == 1000
        assert settings.executor.binary == "opencode"
        assert settings.log_level == "INFO"

    def test_nested_env_vars(self, monkeypatch):
        monkeypatch.setenv("LINEAR_OPENCODE_WEBHOOK__PORT", "9000")
        monkeypatch.setenv("LINEAR_OPENCODE_LOG_LEVEL", "DEBUG")
        settings = Settings()
        assert settings.webhook.port == 9000
        assert settings.log_level == "DEBUG"


class TestLoadSettings:
    def test_missing_file_uses_defaults(self, tmp_path):
        settings = load_settings(tmp_path / "missing.yaml")
        assert settings.linear.api_key == ""
        assert settings.webhook.secret == ""

    def test_yaml_overlay(self, tmp_path):
        path = tmp_path / "config.yaml"
        path.write_text(
            "webhook:\n"
            "  port: 9100\n"
            "  dedupe_deliveries: true\n"
            "stream:\n"
            "  filters: [ENG-1]\n"
        )
        settings = load_settings(path)
        assert settings.webhook.port == 9100
        assert settings.webhook.dedupe_deliveries is True
        assert settings.stream.filters == ["ENG-1"]

    def test_config_path_from_env(self, monkeypatch, tmp_path):
        path = tmp_path / "other.yaml"
        path.write_text("log_level: WARNING\n")
        monkeypatch.setenv("LINEAR_OPENCODE_CONFIG", str(path))
        assert load_settings().log_level == "WARNING"

    def test_default_config_dir(self, tmp_path):
        config_dir = tmp_path / "config"
        config_dir.mkdir()
        (config_dir / "config.yaml").write_text("executor:\n  timeout: 60\n")
        assert load_settings().executor.timeout == 60

    def test_plain_credential_fallbacks(self, monkeypatch, tmp_path):
        monkeypatch.setenv("LINEAR_API_KEY", "lin_api_plain")
        monkeypatch.setenv("LINEAR_WEBHOOK_SECRET", "plain-secret")
        settings = load_settings(tmp_path / "missing.yaml")
        assert settings.linear.api_key == "lin_api_plain"
        assert settings.webhook.secret == "plain-secret"

    def test_prefixed_credentials_take_precedence(self, monkeypatch, tmp_path):
        monkeypatch.setenv("LINEAR_API_KEY", "lin_api_plain")
        monkeypatch.setenv("LINEAR_OPENCODE_LINEAR__API_KEY", "lin_api_prefixed")
        settings = load_settings(tmp_path / "missing.yaml")
        assert settings.linear.api_key == "lin_api_prefixed"


class TestConfigDir:
    def test_env_override(self, tmp_path):
        assert get_config_dir() == tmp_path / "config"

    def test_xdg_on_linux(self, monkeypatch, tmp_path):
        monkeypatch.delenv("LINEAR_OPENCODE_CONFIG_DIR")
        monkeypatch.setattr(sys, "platform", "linux")
        monkeypatch.setenv("XDG_CONFIG_HOME", str(tmp_path / "xdg"))
        assert get_config_dir() == tmp_path / "xdg" / "linear-opencode"
