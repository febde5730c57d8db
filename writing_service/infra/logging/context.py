"""Context management for structured logging.

Request-scoped fields (request id, caller id) are stored in a ContextVar and
injected into every LogRecord by ``ContextInjectingFilter``, so log calls do
not have to pass them explicitly. Each asyncio task sees its own copy.
"""

from __future__ import annotations

import logging
from contextvars import ContextVar
from typing import Any

_log_context: ContextVar[dict[str, Any]] = ContextVar("log_context", default={})


def set_log_context(**kwargs: Any) -> None:
    """Add fields to the logging context of the current task.

    Example:
        set_log_context(request_id="abc-123", user_id=str(user_id))
        logger.info("Stored prompt")  # record carries request_id and user_id
    """
    current = _log_context.get().copy()
    current.update(kwargs)
    _log_context.set(current)


def get_log_context() -> dict[str, Any]:
    """Return a copy of the current logging context."""
    return _log_context.get().copy()


def clear_log_context() -> None:
    """Drop every field from the logging context of the current task."""
    _log_context.set({})


class ContextInjectingFilter(logging.Filter):
    """Copy the current logging context onto each LogRecord.

    Attached to handlers by ``configure_logging``; existing record
    attributes (including ``extra`` fields) are never overwritten.
    """

    def filter(self, record: logging.LogRecord) -> bool:
        for key, value in _log_context.get().items():
            if not hasattr(record, key):
                setattr(record, key, value)
        return True
