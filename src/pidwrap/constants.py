"""Constants for pidwrap."""

import os
import signal

LOCK_SUFFIX = ".pid"
GUARD_FILE = ".pidwrap.guard"
MAX_LOCK_RETRIES = 3  # Max retries when clearing stale locks
UNREADABLE_GRACE_SECONDS = 5.0  # Window between exclusive create and PID write

# Environment overrides
ENV_CONFIG = "PIDWRAP_CONFIG"
ENV_LOCK_DIR = "PIDWRAP_LOCK_DIR"

DEFAULT_FORWARD_SIGNALS = ("SIGTERM", "SIGHUP", "SIGINT", "SIGQUIT")

# Exit codes (sysexits.h and shell conventions)
EXIT_USAGE = os.EX_USAGE  # 64
EXIT_CANTCREAT = os.EX_CANTCREAT  # 73
EXIT_CONFIG = os.EX_CONFIG  # 78
EXIT_NOT_EXECUTABLE = 126
EXIT_NOT_FOUND = 127
SIGNAL_EXIT_BASE = 128

# Signals that cannot be trapped and therefore never forwarded
UNCATCHABLE_SIGNALS = frozenset({signal.SIGKILL, signal.SIGSTOP})
