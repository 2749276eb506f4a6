"""Application configuration management.

Handles loading and validating configuration from multiple sources:
    - TOML/JSON config file
    - Environment variables (ANANKE_* prefix)
    - Default values

Key components:
    - AppConfig: Main configuration model
    - load_config(): Safe config loading with fallback
    - ConfigLoadResult: Metadata about config source
"""

from __future__ import annotations

import json
import os
import tomllib
from collections.abc import Mapping
from contextlib import nullcontext
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Literal
from unittest.mock import patch

from pydantic import Field, ValidationError, field_validator
from pydantic_settings import BaseSettings, PydanticBaseSettingsSource, SettingsConfigDict

from ananke.core.models import MAX_PRIORITY, MIN_PRIORITY

CONFIG_ENV_VAR = "ANANKE_CONFIG"
DEFAULT_CONFIG_PATH = Path.home() / ".config" / "ananke" / "config.toml"


class ConfigError(RuntimeError):
    """Raised when configuration cannot be loaded or validated."""


@dataclass
class ConfigLoadResult:
    path: Path
    file_loaded: bool
    env_overrides: set[str]
    error: str | None = None


class AppConfig(BaseSettings):
    """Application-wide configuration."""

    model_config = SettingsConfigDict(env_prefix="ANANKE_", extra="ignore")

    log_level: str = Field(default="WARNING", description="Log level for ananke output.")
    json_output: bool = Field(
        default=False, description="Emit JSON envelopes instead of human-readable output."
    )
    workspace_root: Path | None = Field(
        default=None, description="Workspace root used when --root is not given."
    )
    default_priority: int = Field(
        default=2,
        ge=MIN_PRIORITY,
        le=MAX_PRIORITY,
        description="Priority assigned by `task create` when --priority is omitted.",
    )
    max_ready_limit: int = Field(
        default=20, ge=1, description="Upper bound accepted by `ready --limit`."
    )
    default_pack_recent: int = Field(
        default=5, ge=1, le=20, description="Closed tasks included in a context pack."
    )
    default_pack_format: Literal["md", "json"] = Field(
        default="md", description="Format used by `pack` when --format is omitted."
    )

    @field_validator("workspace_root", mode="after")
    @classmethod
    def expand_workspace_root(cls, v: Path | None) -> Path | None:
        return v.expanduser() if v is not None else None

    @classmethod
    def settings_customise_sources(
        cls,
        settings_cls: type[BaseSettings],
        init_settings: PydanticBaseSettingsSource,
        env_settings: PydanticBaseSettingsSource,
        dotenv_settings: PydanticBaseSettingsSource,
        file_secret_settings: PydanticBaseSettingsSource,
    ) -> tuple[
        PydanticBaseSettingsSource,
        PydanticBaseSettingsSource,
        PydanticBaseSettingsSource,
        PydanticBaseSettingsSource,
    ]:
        # Ensure environment variables override config file entries.
        return (env_settings, init_settings, dotenv_settings, file_secret_settings)


def _resolve_config_path(config_path: Path | None, env_vars: Mapping[str, str]) -> Path:
    candidate = config_path or env_vars.get(CONFIG_ENV_VAR) or DEFAULT_CONFIG_PATH
    return Path(candidate).expanduser()


def _read_config_file(path: Path) -> dict[str, Any]:
    if not path.exists():
        return {}

    try:
        raw = path.read_text(encoding="utf-8")
    except OSError as exc:
        raise ConfigError(f"Cannot read {path}: {exc}") from exc

    parser = json.loads if path.suffix.lower() == ".json" else tomllib.loads
    try:
        data = parser(raw)
    except (json.JSONDecodeError, tomllib.TOMLDecodeError) as exc:
        raise ConfigError(f"Syntax error in {path}: {exc}") from exc

    if not isinstance(data, dict):
        raise ConfigError(f"Config root in {path} must be a mapping.")

    return data


def _detect_env_overrides(env_vars: Mapping[str, str]) -> set[str]:
    """Detect which fields are overridden by environment variables."""
    prefix = AppConfig.model_config.get("env_prefix", "")
    return {
        field for field in AppConfig.model_fields if f"{prefix}{field}".upper() in env_vars
    }


def load_config(
    config_path: Path | None = None,
    env: Mapping[str, str] | None = None,
) -> tuple[AppConfig, ConfigLoadResult]:
    """
    Load configuration with Safe Mode fallback.
    If the file is invalid, returns default config + error message.
    """
    env_vars: Mapping[str, str] = os.environ if env is None else {**os.environ, **env}
    resolved_path = _resolve_config_path(config_path, env_vars)
    env_overrides = _detect_env_overrides(env_vars)

    error: str | None = None
    file_loaded = False
    file_data: dict[str, Any] = {}

    try:
        file_data = _read_config_file(resolved_path)
        file_loaded = resolved_path.exists()
    except ConfigError as exc:
        error = str(exc)

    context_manager = (
        patch.dict(os.environ, env_vars, clear=False) if env is not None else nullcontext()
    )

    try:
        with context_manager:
            config = AppConfig(**file_data)
    except ValidationError as exc:
        error = str(exc)
        config = AppConfig.model_construct()

    load_result = ConfigLoadResult(
        path=resolved_path,
        file_loaded=file_loaded,
        env_overrides=env_overrides,
        error=error,
    )

    return config, load_result


__all__ = ["AppConfig", "CONFIG_ENV_VAR", "ConfigError", "ConfigLoadResult", "load_config"]
