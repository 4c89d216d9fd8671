"""Tests for pidwrap configuration."""

import os
import signal
from pathlib import Path

import pytest

from pidwrap.config import (
    LaunchConfig,
    PidwrapConfig,
    default_config_path,
    default_lock_dir,
    load_config,
    resolve_config_path,
    resolve_lock_dir,
    write_config_template,
)
from pidwrap.errors import ConfigError


def test_defaults():
    config = PidwrapConfig()
    assert config.lock.dir is None
    assert config.lock.grace_seconds == 5.0
    assert config.launch.duplicate_exit_code == 0
    assert config.launch.signals() == [
        signal.SIGTERM,
        signal.SIGHUP,
        signal.SIGINT,
        signal.SIGQUIT,
    ]


def test_load_missing_returns_defaults(tmp_path: Path):
    config = load_config(tmp_path / "missing.toml")
    assert config == PidwrapConfig()


def test_load_valid_config(tmp_path: Path):
    path = tmp_path / "config.toml"
    path.write_text(
        '[lock]\ndir = "/var/run/mylocks"\ngrace_seconds = 2\n\n'
        '[launch]\nduplicate_exit_code = 75\nforward_signals = ["term", "SIGUSR1"]\n'
    )
    config = load_config(path)
    assert config.lock.dir == Path("/var/run/mylocks")
    assert config.lock.grace_seconds == 2
    assert config.launch.duplicate_exit_code == 75
    assert config.launch.forward_signals == ["SIGTERM", "SIGUSR1"]


def test_invalid_toml_raises(tmp_path: Path):
    path = tmp_path / "config.toml"
    path.write_text("[lock\n")
    with pytest.raises(ConfigError, match="Invalid TOML"):
        load_config(path)


def test_invalid_values_raise(tmp_path: Path):
    path = tmp_path / "config.toml"
    path.write_text("[launch]\nduplicate_exit_code = 300\n")
    with pytest.raises(ConfigError, match="Invalid config"):
        load_config(path)


@pytest.mark.parametrize("name", ["SIGNOPE", "SIGKILL", "stop"])
def test_rejects_bad_signals(name: str):
    with pytest.raises(ValueError):
        LaunchConfig(forward_signals=[name])


def test_config_path_resolution(tmp_path: Path, monkeypatch: pytest.MonkeyPatch):
    explicit = tmp_path / "explicit.toml"
    assert resolve_config_path(explicit) == explicit

    monkeypatch.setenv("PIDWRAP_CONFIG", str(tmp_path / "env.toml"))
    assert resolve_config_path() == tmp_path / "env.toml"

    monkeypatch.delenv("PIDWRAP_CONFIG")
    monkeypatch.setenv("XDG_CONFIG_HOME", str(tmp_path / "xdg"))
    assert resolve_config_path() == tmp_path / "xdg" / "pidwrap" / "config.toml"
    assert default_config_path() == tmp_path / "xdg" / "pidwrap" / "config.toml"


def test_lock_dir_precedence(tmp_path: Path, monkeypatch: pytest.MonkeyPatch):
    config = PidwrapConfig.model_validate({"lock": {"dir": str(tmp_path / "from-config")}})

    assert resolve_lock_dir(PidwrapConfig()) == default_lock_dir()
    assert resolve_lock_dir(config) == tmp_path / "from-config"

    monkeypatch.setenv("PIDWRAP_LOCK_DIR", str(tmp_path / "from-env"))
    assert resolve_lock_dir(config) == tmp_path / "from-env"
    assert resolve_lock_dir(config, tmp_path / "flag") == tmp_path / "flag"


def test_default_lock_dir_is_per_user():
    assert default_lock_dir().name == f"pidwrap-{os.getuid()}"


def test_write_config_template_loads_back(tmp_path: Path):
    path = write_config_template(tmp_path / "nested" / "config.toml")
    assert path.exists()
    config = load_config(path)
    assert config.lock.dir == default_lock_dir()
    assert config.launch == LaunchConfig()
