"""Tests for the Config system."""

import os

import pytest

from cronbind.core.config import (
    CronbindConfig,
    _convert_value,
    _deep_merge,
    _substitute_env_vars,
)
from cronbind.core.errors import ConfigError


@pytest.fixture
def no_files(tmp_path):
    """Paths that do not exist, so load() ignores the real home directory."""
    return {
        "project_path": tmp_path / "missing-project.toml",
        "user_path": tmp_path / "missing-user.toml",
    }


def test_default_config():
    """Default config has sensible values."""
    config = CronbindConfig()

    assert config.job.durable is True
    assert config.job.requests_recovery is True
    assert config.scheduler.enabled is True
    assert config.scheduler.poll_interval == 1.0
    assert config.logging.console_level == "WARNING"


def test_load_with_overrides(no_files):
    """Explicit overrides take highest precedence."""
    config = CronbindConfig.load(
        overrides={"job": {"durable": False}, "scheduler": {"poll_interval": 5}},
        **no_files,
    )

    assert config.job.durable is False
    assert config.scheduler.poll_interval == 5
    # Defaults still work for non-overridden values
    assert config.job.requests_recovery is True


def test_project_toml_overrides_user_toml(tmp_path):
    user = tmp_path / "user.toml"
    user.write_text("[job]\ndurable = false\nrequests_recovery = false\n")
    project = tmp_path / "cronbind.toml"
    project.write_text("[job]\nrequests_recovery = true\n")

    config = CronbindConfig.load(project_path=project, user_path=user)

    assert config.job.durable is False
    assert config.job.requests_recovery is True


def test_env_var_loading(monkeypatch, no_files):
    """CRONBIND_* environment variables are loaded."""
    monkeypatch.setenv("CRONBIND_JOB_DURABLE", "false")
    monkeypatch.setenv("CRONBIND_SCHEDULER_POLL_INTERVAL", "0.5")
    monkeypatch.setenv("CRONBIND_LOG_DIR", "/tmp/cronbind-logs")

    config = CronbindConfig.load(**no_files)

    assert config.job.durable is False
    assert config.scheduler.poll_interval == 0.5
    assert config.logging.log_dir == "/tmp/cronbind-logs"


def test_overrides_beat_env(monkeypatch, no_files):
    monkeypatch.setenv("CRONBIND_JOB_DURABLE", "false")
    config = CronbindConfig.load(overrides={"job": {"durable": True}}, **no_files)
    assert config.job.durable is True


def test_invalid_config_raises(no_files):
    with pytest.raises(ConfigError, match="Invalid configuration"):
        CronbindConfig.load(
            overrides={"scheduler": {"poll_interval": "often"}}, **no_files
        )


def test_malformed_toml_raises(tmp_path):
    bad = tmp_path / "cronbind.toml"
    bad.write_text("[job\n")
    with pytest.raises(ConfigError, match="Failed to load config"):
        CronbindConfig.load(project_path=bad, user_path=tmp_path / "none.toml")


def test_env_var_substitution(monkeypatch):
    """${VAR} in config values gets replaced with env var values."""
    monkeypatch.setenv("MY_LOGS", "/var/log/jobs")
    data = {"logging": {"log_dir": "${MY_LOGS}/cronbind"}}

    _substitute_env_vars(data)

    assert data["logging"]["log_dir"] == "/var/log/jobs/cronbind"


def test_deep_merge():
    base = {"a": 1, "b": {"c": 2, "d": 3}, "e": 5}
    override = {"b": {"c": 20, "f": 6}, "g": 7}

    _deep_merge(base, override)

    assert base == {"a": 1, "b": {"c": 20, "d": 3, "f": 6}, "e": 5, "g": 7}


def test_convert_value():
    assert _convert_value("true") is True
    assert _convert_value("No") is False
    assert _convert_value("42") == 42
    assert _convert_value("1.5") == 1.5
    assert _convert_value("hello") == "hello"


def test_get_log_dir_expands_user():
    config = CronbindConfig()
    assert "~" not in str(config.get_log_dir())
    assert config.get_log_dir().name == "logs"
    assert os.path.isabs(config.get_log_dir())
