"""Configuration management with Pydantic Settings + optional YAML."""

from __future__ import annotations

import os
import sys
from pathlib import Path
from typing import Any

import yaml
from pydantic import BaseModel, Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class DiscordConfig(BaseModel):
    token: str = ""
    api_base: str = "https://discord.com/api/v10"
    timeout: float = 15.0


class SettingsServiceConfig(BaseModel):
    """Remote service holding per-channel ignore records."""
    base_url: str = "http://localhost:8080/api"
    token: str = ""
    timeout: float = 10.0


class PoolConfig(BaseModel):
    size: int = Field(default=2, ge=2, le=9)
    avatar: str | None = None  # URL, file path or data URI
    reason: str | None = None  # audit log reason for created webhooks


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_prefix="HOOKRELAY_",
        env_nested_delimiter="__",
        case_sensitive=False,
    )

    discord: DiscordConfig = Field(default_factory=DiscordConfig)
    settings_service: SettingsServiceConfig = Field(default_factory=SettingsServiceConfig)
    pool: PoolConfig = Field(default_factory=PoolConfig)
    log_level: str = "INFO"
    log_json: bool = False


def get_config_dir() -> Path:
    """Per-user config directory; ``HOOKRELAY_CONFIG_DIR`` wins when set."""
    env = os.environ.get("HOOKRELAY_CONFIG_DIR")
    if env:
        return Path(env)
    if sys.platform == "win32":
        return Path(os.environ.get("APPDATA", Path.home() / "AppData" / "Roaming")) / "hookrelay"
    if sys.platform == "darwin":
        return Path.home() / "Library" / "Application Support" / "hookrelay"
    return Path(os.environ.get("XDG_CONFIG_HOME", Path.home() / ".config")) / "hookrelay"


def _deep_merge(base: dict[str, Any], override: dict[str, Any]) -> dict[str, Any]:
    result = base.copy()
    for key, value in override.items():
        if key in result and isinstance(result[key], dict) and isinstance(value, dict):
            result[key] = _deep_merge(result[key], value)
        else:
            result[key] = value
    return result


def load_settings(config_path: str | Path | None = None) -> Settings:
    """Load settings from env vars, optionally overlaying a YAML config."""
    yaml_data: dict[str, Any] = {}

    if config_path is None:
        config_path = os.environ.get("HOOKRELAY_CONFIG")
    if config_path is None:
        default = get_config_dir() / "config.yaml"
        if default.exists():
            config_path = default

    if config_path is not None:
        path = Path(config_path)
        if path.exists():
            with open(path) as f:
                yaml_data = yaml.safe_load(f) or {}

    # Init kwargs take priority over env in pydantic-settings, so env values
    # are read first and layered on top of the file.
    env_data = Settings().model_dump(exclude_unset=True)
    return Settings(**_deep_merge(yaml_data, env_data))
