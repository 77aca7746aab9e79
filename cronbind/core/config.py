"""
cronbind Configuration: loads and merges config from multiple sources.

Precedence (highest to lowest):
1. Explicit overrides (passed in code)
2. Environment variables (CRONBIND_*)
3. Project config (./cronbind.toml)
4. User config (~/.cronbind/config.toml)
5. Defaults (hardcoded)

Environment variable mapping:
    CRONBIND_JOB_DURABLE → job.durable
    CRONBIND_JOB_REQUESTS_RECOVERY → job.requests_recovery
    CRONBIND_SCHEDULER_POLL_INTERVAL → scheduler.poll_interval
    CRONBIND_LOG_DIR → logging.log_dir
"""

from __future__ import annotations

import os
import re
import tomllib
from pathlib import Path
from typing import Any

from pydantic import BaseModel, Field

from cronbind.core.errors import ConfigError

# ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━
# Config Sub-Models
# ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━


class JobConfig(BaseModel):
    """Defaults applied by JobDefinitionBuilder."""

    durable: bool = True
    requests_recovery: bool = True


class SchedulerConfig(BaseModel):
    """Reference scheduler configuration."""

    enabled: bool = True
    poll_interval: float = 1.0  # seconds


class LoggingConfig(BaseModel):
    """Logging configuration."""

    log_dir: str = "~/.cronbind/logs"
    console_level: str = "WARNING"
    file_level: str = "DEBUG"


# ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━
# Main Config
# ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━


class CronbindConfig(BaseModel):
    """Root configuration for cronbind."""

    job: JobConfig = Field(default_factory=JobConfig)
    scheduler: SchedulerConfig = Field(default_factory=SchedulerConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)

    @staticmethod
    def load(
        overrides: dict[str, Any] | None = None,
        project_path: Path | None = None,
        user_path: Path | None = None,
    ) -> CronbindConfig:
        """
        Load configuration from all sources and merge.

        Precedence: overrides > env vars > project toml > user toml > defaults
        """
        merged: dict[str, Any] = {}

        user_config_path = user_path or Path.home() / ".cronbind" / "config.toml"
        if user_config_path.exists():
            _deep_merge(merged, _load_toml(user_config_path))

        project_config_path = project_path or Path.cwd() / "cronbind.toml"
        if project_config_path.exists():
            _deep_merge(merged, _load_toml(project_config_path))

        _deep_merge(merged, _load_from_env())

        if overrides:
            _deep_merge(merged, overrides)

        _substitute_env_vars(merged)

        try:
            return CronbindConfig(**merged)
        except Exception as e:
            raise ConfigError(f"Invalid configuration: {e}") from e

    def get_log_dir(self) -> Path:
        """Get the resolved log directory."""
        return Path(self.logging.log_dir).expanduser()


# ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━
# Internal Helpers
# ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━


def _load_toml(path: Path) -> dict[str, Any]:
    """Load a TOML file."""
    try:
        with open(path, "rb") as f:
            return tomllib.load(f)
    except Exception as e:
        raise ConfigError(f"Failed to load config from {path}: {e}") from e


def _load_from_env() -> dict[str, Any]:
    """Load configuration from CRONBIND_* environment variables."""
    result: dict[str, Any] = {}

    env_mapping = {
        "CRONBIND_JOB_DURABLE": ("job", "durable"),
        "CRONBIND_JOB_REQUESTS_RECOVERY": ("job", "requests_recovery"),
        "CRONBIND_SCHEDULER_ENABLED": ("scheduler", "enabled"),
        "CRONBIND_SCHEDULER_POLL_INTERVAL": ("scheduler", "poll_interval"),
        "CRONBIND_LOG_DIR": ("logging", "log_dir"),
        "CRONBIND_LOG_LEVEL": ("logging", "console_level"),
    }

    for env_var, (section, key) in env_mapping.items():
        value = os.environ.get(env_var)
        if value is not None:
            result.setdefault(section, {})[key] = _convert_value(value)

    return result


def _convert_value(value: str) -> Any:
    """Convert string value to appropriate type."""
    if value.lower() in ("true", "yes"):
        return True
    if value.lower() in ("false", "no"):
        return False
    try:
        return int(value)
    except ValueError:
        pass
    try:
        return float(value)
    except ValueError:
        pass
    return value


def _deep_merge(base: dict, override: dict) -> None:
    """Deep merge override into base (mutates base)."""
    for key, value in override.items():
        if key in base and isinstance(base[key], dict) and isinstance(value, dict):
            _deep_merge(base[key], value)
        else:
            base[key] = value


def _substitute_env_vars(data: dict) -> None:
    """Recursively substitute ${ENV_VAR} patterns in string values."""
    pattern = re.compile(r"\$\{([^}]+)\}")

    for key, value in data.items():
        if isinstance(value, dict):
            _substitute_env_vars(value)
        elif isinstance(value, str):
            for var_name in pattern.findall(value):
                value = value.replace(f"${{{var_name}}}", os.environ.get(var_name, ""))
            data[key] = value
