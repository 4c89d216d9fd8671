"""Shared test fixtures for pidwrap tests."""

import logging
import os
import subprocess
import sys
from collections.abc import Generator
from pathlib import Path

import pytest
from typer.testing import CliRunner

from pidwrap.config import set_config_path
from pidwrap.logging import LOGGER_NAME
from pidwrap.output import set_output_context

SRC_DIR = Path(__file__).resolve().parent.parent / "src"


@pytest.fixture(autouse=True)
def isolated_env(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Generator[None, None, None]:
    """Keep user config and lock dirs out of tests, and reset CLI globals."""
    monkeypatch.setenv("PIDWRAP_CONFIG", str(tmp_path / "no-such-config.toml"))
    monkeypatch.delenv("PIDWRAP_LOCK_DIR", raising=False)
    yield
    set_output_context(None)
    set_config_path(None)
    logger = logging.getLogger(LOGGER_NAME)
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
    logger.setLevel(logging.NOTSET)
    logger.propagate = True


@pytest.fixture
def runner() -> CliRunner:
    """Create CLI test runner."""
    return CliRunner()


@pytest.fixture
def lock_dir(tmp_path: Path) -> Path:
    """Directory for lock records (not created up front)."""
    return tmp_path / "locks"


@pytest.fixture
def dead_pid() -> int:
    """PID of a process that has already exited and been reaped."""
    proc = subprocess.Popen(["true"])
    proc.wait()
    return proc.pid


@pytest.fixture
def live_pid() -> Generator[int, None, None]:
    """PID of a process that stays alive for the duration of the test."""
    proc = subprocess.Popen(["sleep", "60"])
    try:
        yield proc.pid
    finally:
        proc.kill()
        proc.wait()


@pytest.fixture
def live_group() -> Generator[int, None, None]:
    """ID of a process group that stays alive for the duration of the test."""
    proc = subprocess.Popen(["sleep", "60"], start_new_session=True)
    try:
        yield proc.pid
    finally:
        proc.kill()
        proc.wait()


def write_record(lock_dir: Path, key: str, content: str) -> Path:
    """Write a raw lock record, as another launcher would have."""
    lock_dir.mkdir(parents=True, exist_ok=True)
    path = lock_dir / f"{key}.pid"
    path.write_text(content)
    return path


def pidwrap_cmd(*args: str) -> list[str]:
    """Command line running pidwrap in a fresh interpreter."""
    return [sys.executable, "-m", "pidwrap", *args]


def subprocess_env(tmp_path: Path) -> dict[str, str]:
    """Environment for pidwrap subprocesses: source tree importable, no user config."""
    env = dict(os.environ)
    env["PYTHONPATH"] = os.pathsep.join(filter(None, [str(SRC_DIR), env.get("PYTHONPATH")]))
    env["PIDWRAP_CONFIG"] = str(tmp_path / "no-such-config.toml")
    env.pop("PIDWRAP_LOCK_DIR", None)
    return env
