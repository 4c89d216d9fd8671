"""Supervised execution of the wrapped command.

The launcher stays alive as the command's parent so it can remove its lock
record afterwards. The command runs in its own session, so it is not
signalled twice by a terminal, and its process group identifies everything
it started. Termination signals received by the launcher are relayed to that
group; the launcher then exits with the command's status.
"""

import contextlib
import logging
import os
import shlex
import signal
import subprocess
import threading
from collections.abc import Callable, Iterable, Iterator, Sequence
from types import FrameType
from typing import Any

from ..constants import (
    DEFAULT_FORWARD_SIGNALS,
    EXIT_NOT_EXECUTABLE,
    EXIT_NOT_FOUND,
    SIGNAL_EXIT_BASE,
)
from ..errors import LaunchError

logger = logging.getLogger(__name__)


def exit_status(returncode: int) -> int:
    """Convert a Popen return code to a shell-style exit status.

    A child killed by signal N reports -N; shells report 128 + N.
    """
    if returncode < 0:
        return SIGNAL_EXIT_BASE - returncode
    return returncode


class Supervisor:
    """Run one command and relay termination signals to it.

    Use as a context manager: handlers are installed on enter and the
    previous handlers restored on exit. A signal that arrives before the
    command has started raises SystemExit, so enclosing ``finally`` blocks
    (lock release) still run. Inside ``deferring()`` such a signal is held
    back until the block completes.
    """

    def __init__(self, forward_signals: Iterable[signal.Signals] | None = None) -> None:
        if forward_signals is None:
            forward_signals = [signal.Signals[name] for name in DEFAULT_FORWARD_SIGNALS]
        self.forward_signals = list(forward_signals)
        self.process: subprocess.Popen[bytes] | None = None
        self.received: list[int] = []
        self._pending: list[int] = []
        self._deferring = False
        self._previous: dict[signal.Signals, Any] = {}

    def __enter__(self) -> "Supervisor":
        if threading.current_thread() is not threading.main_thread():
            logger.debug("Not in the main thread; signals will not be forwarded")
            return self
        for signum in self.forward_signals:
            self._previous[signum] = signal.signal(signum, self._handle)
        return self

    def __exit__(self, *exc_info: object) -> None:
        for signum, previous in self._previous.items():
            signal.signal(signum, previous)
        self._previous.clear()

    @contextlib.contextmanager
    def deferring(self) -> Iterator[None]:
        """Hold back termination until the block has finished.

        Wrap steps that must not be interrupted halfway, such as taking the
        lock. A signal received meanwhile raises SystemExit on leaving the
        block, once the caller has registered its cleanup.
        """
        self._deferring = True
        try:
            yield
        finally:
            self._deferring = False
            if self._pending and self.process is None:
                signum = self._pending[0]
                logger.info(f"Received {signal.Signals(signum).name} while starting; exiting")
                raise SystemExit(SIGNAL_EXIT_BASE + signum)

    def _handle(self, signum: int, frame: FrameType | None) -> None:
        self.received.append(signum)
        name = signal.Signals(signum).name
        if self.process is None:
            if self._deferring:
                self._pending.append(signum)
                return
            logger.info(f"Received {name} before the command started; exiting")
            raise SystemExit(SIGNAL_EXIT_BASE + signum)
        self._forward(signum)

    def _forward(self, signum: int) -> None:
        proc = self.process
        if proc is None or proc.poll() is not None:
            return
        logger.debug(f"Forwarding {signal.Signals(signum).name} to process group {proc.pid}")
        with contextlib.suppress(ProcessLookupError):
            os.killpg(proc.pid, signum)

    def run(
        self,
        command: Sequence[str],
        on_start: Callable[[subprocess.Popen[bytes]], object] | None = None,
    ) -> int:
        """Start command, wait for it, and return its exit status.

        Args:
            command: Program and arguments
            on_start: Called with the process once it has started

        Returns:
            The command's exit status; 127 if it was not found, 126 if it
            could not be executed, 128 + N if signal N arrived while starting

        Raises:
            LaunchError: If command is empty
        """
        argv = list(command)
        if not argv:
            raise LaunchError("No command given")

        self._deferring = True
        try:
            self.process = subprocess.Popen(argv, start_new_session=True)
        except FileNotFoundError:
            logger.error(f"Command not found: {argv[0]}")
            return self._interrupted_status(EXIT_NOT_FOUND)
        except OSError as e:
            logger.error(f"Cannot execute {argv[0]}: {e}")
            return self._interrupted_status(EXIT_NOT_EXECUTABLE)
        finally:
            self._deferring = False

        logger.debug(f"Started PID {self.process.pid}: {shlex.join(argv)}")
        if on_start is not None:
            on_start(self.process)

        for signum in self._pending:
            self._forward(signum)
        self._pending.clear()

        returncode = self.process.wait()
        logger.debug(f"PID {self.process.pid} exited with {returncode}")
        return exit_status(returncode)

    def _interrupted_status(self, status: int) -> int:
        """Prefer a termination signal received while starting over status."""
        if not self._pending:
            return status
        signum = self._pending[0]
        self._pending.clear()
        return SIGNAL_EXIT_BASE + signum


def run_supervised(
    command: Sequence[str],
    forward_signals: Iterable[signal.Signals] | None = None,
) -> int:
    """Run command to completion, relaying forward_signals to it.

    Args:
        command: Program and arguments
        forward_signals: Signals to relay (defaults to TERM, HUP, INT, QUIT)

    Returns:
        The command's exit status, 128 + N if it was killed by signal N
    """
    with Supervisor(forward_signals) as supervisor:
        return supervisor.run(command)
