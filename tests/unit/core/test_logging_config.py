"""Unit tests for structured logging helpers."""

from __future__ import annotations

import structlog

from core.logging_config import bound_read_context, get_logger


def test_bound_read_context_binds_and_clears_fields() -> None:
    """Read context should be visible inside the block and cleared after it."""
    with bound_read_context(dataset_root="/data") as read_id:
        inside = structlog.contextvars.get_contextvars()

    assert (inside, structlog.contextvars.get_contextvars()) == (
        {"read_id": read_id, "dataset_root": "/data"},
        {},
    )


def test_bound_read_context_generates_distinct_ids() -> None:
    """Each read should get its own id."""
    with bound_read_context() as first, bound_read_context() as second:
        pass

    assert first != second and len(first) == 12


def test_get_logger_accepts_keyword_fields() -> None:
    """Loggers should accept event names with keyword fields."""
    get_logger(__name__).info("test_event", answer=42)
