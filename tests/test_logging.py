"""Tests for logging configuration."""

import io
import logging

from pidwrap.logging import LOGGER_NAME, configure_logging


def test_default_level_is_info():
    configure_logging(stream=io.StringIO())
    assert logging.getLogger(LOGGER_NAME).level == logging.INFO


def test_quiet_beats_verbose():
    configure_logging(verbosity=2, quiet=True, stream=io.StringIO())
    assert logging.getLogger(LOGGER_NAME).level == logging.WARNING


def test_verbose_enables_debug():
    configure_logging(verbosity=1, stream=io.StringIO())
    assert logging.getLogger(LOGGER_NAME).level == logging.DEBUG


def test_reconfigure_replaces_handler():
    configure_logging(stream=io.StringIO())
    configure_logging(stream=io.StringIO())
    assert len(logging.getLogger(LOGGER_NAME).handlers) == 1


def test_module_loggers_write_to_stream():
    stream = io.StringIO()
    configure_logging(no_color=True, stream=stream)
    logging.getLogger("pidwrap.core.lock_manager").info("Reclaiming stale lock for 'toolA'")
    assert "Reclaiming stale lock" in stream.getvalue()
