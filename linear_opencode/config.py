"""Configuration management with Pydantic Settings + optional YAML."""

from __future__ import annotations

import os
import sys
from pathlib import Path
from typing import Any

import yaml
from pydantic import BaseModel, Field
from pydantic_settings import BaseSettings, SettingsConfigDict

APP_DIR_NAME = "linear-opencode"


def get_config_dir() -> Path:
    """Per-user config directory, overridable with ``LINEAR_OPENCODE_CONFIG_DIR``."""
    env = os.environ.get("LINEAR_OPENCODE_CONFIG_DIR")
    if env:
        return Path(env)
    if sys.platform == "win32":
        base = Path(os.environ.get("APPDATA", Path.home() / "AppData" / "Roaming"))
        return base / APP_DIR_NAME
    if sys.platform == "darwin":
        return Path.home() / "Library" / "Application Support" / APP_DIR_NAME
    # Linux / XDG
    xdg = os.environ.get("XDG_CONFIG_HOME", Path.home() / ".config")
    return Path(xdg) / APP_DIR_NAME


class LinearConfig(BaseModel):
    api_key: str = ""
    api_url: str = "https://api.linear.app/graphql"
    timeout: float = 30.0
    auth_retry_delay: float = 1.0
    enable_safety_checks: bool = True


class WebhookConfig(BaseModel):
    secret: str = ""
    bind: str = "0.0.0.0"
    port: int = 8420
    path: str = "/webhooks/linear"
    dedupe_deliveries: bool = False


class StreamConfig(BaseModel):
    enabled: bool = True
    max_history: int = 1000
    filters: list[str] = Field(default_factory=list)


class ExecutorConfig(BaseModel):
    binary: str = "opencode"
    timeout: int = 300
    working_dir: str = ""
    max_output_chars: int = 8000


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_prefix="LINEAR_OPENCODE_",
        env_nested_delimiter="__",
        case_sensitive=False,
    )

    linear: LinearConfig = Field(default_factory=LinearConfig)
    webhook: WebhookConfig = Field(default_factory=WebhookConfig)
    stream: StreamConfig = Field(default_factory=StreamConfig)
    executor: ExecutorConfig = Field(default_factory=ExecutorConfig)
    log_level: str = "INFO"
    log_json: bool = False


def load_settings(config_path: str | Path | None = None) -> Settings:
    """Load settings from env vars, optionally overlaying a YAML config.

    ``LINEAR_API_KEY`` and ``LINEAR_WEBHOOK_SECRET`` fill in the credentials
    when neither the prefixed variables nor the YAML file set them.
    """
    yaml_data: dict[str, Any] = {}

    # Determine config file path
    if config_path is None:
        config_path = os.environ.get("LINEAR_OPENCODE_CONFIG")
    if config_path is None:
        default = get_config_dir() / "config.yaml"
        if default.exists():
            config_path = default

    # Load YAML if found
    if config_path is not None:
        path = Path(config_path)
        if path.exists():
            with open(path) as f:
                yaml_data = yaml.safe_load(f) or {}

    # YAML values win over env vars; nested sections are merged
    settings = Settings(**yaml_data)

    if not settings.linear.api_key:
        settings.linear.api_key = os.environ.get("LINEAR_API_KEY", "")
    if not settings.webhook.secret:
        settings.webhook.secret = os.environ.get("LINEAR_WEBHOOK_SECRET", "")
    return settings
