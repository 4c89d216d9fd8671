"""Configuration management for pidwrap."""

import os
import signal
import tempfile
import tomllib
from pathlib import Path

import tomli_w
from pydantic import BaseModel, Field, ValidationError, field_validator

from .constants import (
    DEFAULT_FORWARD_SIGNALS,
    ENV_CONFIG,
    ENV_LOCK_DIR,
    UNCATCHABLE_SIGNALS,
    UNREADABLE_GRACE_SECONDS,
)
from .errors import ConfigError


class LockConfig(BaseModel):
    """Where lock records live and how unreadable ones are judged."""

    dir: Path | None = None  # Defaults to <tempdir>/pidwrap-<uid>
    grace_seconds: float = Field(
        default=UNREADABLE_GRACE_SECONDS,
        ge=0,
        description="Age below which an unreadable record is still honored",
    )


class LaunchConfig(BaseModel):
    """Launch behavior."""

    duplicate_exit_code: int = Field(
        default=0, ge=0, le=255, description="Exit status when a launch is suppressed"
    )
    forward_signals: list[str] = Field(
        default_factory=lambda: list(DEFAULT_FORWARD_SIGNALS),
        description="Signals relayed to the supervised command",
    )

    @field_validator("forward_signals")
    @classmethod
    def validate_signal_names(cls, names: list[str]) -> list[str]:
        """Reject unknown or untrappable signal names."""
        normalized = []
        for name in names:
            upper = name.upper()
            if not upper.startswith("SIG"):
                upper = f"SIG{upper}"
            try:
                signum = signal.Signals[upper]
            except KeyError:
                raise ValueError(f"Unknown signal: {name}") from None
            if signum in UNCATCHABLE_SIGNALS:
                raise ValueError(f"Signal cannot be forwarded: {upper}")
            normalized.append(upper)
        return normalized

    def signals(self) -> list[signal.Signals]:
        """Get forwarded signals as enum members."""
        return [signal.Signals[name] for name in self.forward_signals]


class PidwrapConfig(BaseModel):
    """Root configuration for pidwrap."""

    lock: LockConfig = Field(default_factory=LockConfig)
    launch: LaunchConfig = Field(default_factory=LaunchConfig)


def default_config_path() -> Path:
    """Get the per-user config path, honoring XDG_CONFIG_HOME."""
    base = os.environ.get("XDG_CONFIG_HOME") or str(Path.home() / ".config")
    return Path(base) / "pidwrap" / "config.toml"


def resolve_config_path(explicit: Path | None = None) -> Path:
    """Pick the config file: explicit path, then $PIDWRAP_CONFIG, then the XDG default."""
    if explicit is not None:
        return explicit
    env_path = os.environ.get(ENV_CONFIG)
    if env_path:
        return Path(env_path)
    return default_config_path()


def load_config(path: Path | None = None) -> PidwrapConfig:
    """Load config from TOML.

    Args:
        path: Config file path, resolved with resolve_config_path if omitted

    Returns:
        Loaded configuration, or defaults if the file doesn't exist

    Raises:
        ConfigError: If the file is not valid TOML or fails validation
    """
    config_path = resolve_config_path(path)
    if not config_path.exists():
        return PidwrapConfig()
    try:
        with open(config_path, "rb") as f:
            data = tomllib.load(f)
    except tomllib.TOMLDecodeError as e:
        raise ConfigError(f"Invalid TOML in {config_path}: {e}") from e
    except OSError as e:
        raise ConfigError(f"Cannot read {config_path}: {e}") from e
    try:
        return PidwrapConfig.model_validate(data)
    except ValidationError as e:
        raise ConfigError(f"Invalid config in {config_path}: {e}") from e


def default_lock_dir() -> Path:
    """Get the default lock directory, one per user under the system temp dir."""
    return Path(tempfile.gettempdir()) / f"pidwrap-{os.getuid()}"


def resolve_lock_dir(config: PidwrapConfig, override: Path | None = None) -> Path:
    """Resolve the lock directory.

    Precedence: explicit override > $PIDWRAP_LOCK_DIR > config > default.
    """
    if override is not None:
        return override
    env_dir = os.environ.get(ENV_LOCK_DIR)
    if env_dir:
        return Path(env_dir)
    if config.lock.dir is not None:
        return config.lock.dir.expanduser()
    return default_lock_dir()


def write_config_template(config_path: Path) -> Path:
    """Write default config.toml template.

    Args:
        config_path: Destination file; parent directories are created

    Returns:
        Path to the written config file
    """
    config_path.parent.mkdir(parents=True, exist_ok=True)
    template = {
        "lock": {
            "dir": str(default_lock_dir()),
            "grace_seconds": UNREADABLE_GRACE_SECONDS,
        },
        "launch": {
            "duplicate_exit_code": 0,
            "forward_signals": list(DEFAULT_FORWARD_SIGNALS),
        },
    }
    with open(config_path, "wb") as f:
        tomli_w.dump(template, f)
    return config_path


# Config path chosen with the CLI --config option
_config_path: Path | None = None


def set_config_path(path: Path | None) -> None:
    """Set the config path used by get_config. Called by CLI main callback."""
    global _config_path
    _config_path = path


def get_config_path() -> Path:
    """Get the config path the CLI resolved."""
    return resolve_config_path(_config_path)


def get_config() -> PidwrapConfig:
    """Load the config the CLI resolved."""
    return load_config(_config_path)
