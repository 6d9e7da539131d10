"""Structured logging configuration.

This module initializes structlog once with a stable JSON format.
Read calls bind a ``read_id`` through contextvars so events emitted by
file-group workers can be correlated with the call that spawned them.
"""

from __future__ import annotations

import contextlib
import sys
import threading
import uuid
from typing import Any, Iterator

import structlog

_CONFIGURE_LOCK = threading.Lock()
_CONFIGURED = False


def get_logger(name: str) -> Any:
    """Return a module logger instance.

    Args:
        name: Logger name, usually __name__.

    Returns:
        A structlog logger with JSON output.
    """
    _configure_once()
    return structlog.get_logger(name)


@contextlib.contextmanager
def bound_read_context(**fields: object) -> Iterator[str]:
    """Bind a fresh read id and extra fields for the duration of a read.

    Args:
        fields: Extra key/value pairs attached to every event.

    Yields:
        The generated read id.
    """
    read_id = uuid.uuid4().hex[:12]
    with structlog.contextvars.bound_contextvars(read_id=read_id, **fields):
        yield read_id


def _configure_once() -> None:
    global _CONFIGURED
    with _CONFIGURE_LOCK:
        if _CONFIGURED:
            return
        structlog.configure(
            processors=[
                structlog.contextvars.merge_contextvars,
                structlog.processors.TimeStamper(fmt="iso"),
                structlog.processors.add_log_level,
                structlog.processors.JSONRenderer(sort_keys=True),
            ],
            logger_factory=_stderr_logger,
            cache_logger_on_first_use=False,
        )
        _CONFIGURED = True


def _stderr_logger(*args: object) -> structlog.PrintLogger:
    # Resolved per call so redirected or captured stderr streams are honored.
    return structlog.PrintLogger(file=sys.stderr)
