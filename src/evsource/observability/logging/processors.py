"""Observability – get_logger helper and command context binding."""
from __future__ import annotations

from contextlib import AbstractContextManager
from typing import Any

import structlog


def get_logger(name: str | None = None, **initial_values: Any) -> Any:
    """Return a bound structlog logger.

    Parameters
    ----------
    name:
        Logger name (typically ``__name__`` of the calling module).
    **initial_values:
        Key-value pairs to bind on the returned logger.
    """
    logger = structlog.get_logger(name)
    if initial_values:
        logger = logger.bind(**initial_values)
    return logger


def command_context(command_type: str, aggregate_id: Any = None) -> AbstractContextManager[None]:
    """Bind the command being handled to structlog's context variables.

    Every log line emitted inside the ``with`` block (repository loads,
    saves, snapshot writes) carries ``command`` and ``aggregate_id``.  On
    exit the previous values come back, so a command sent from inside
    another handler leaves the outer command's context intact.
    ``aggregate_id`` is always bound, as ``None`` when the command names no
    aggregate, so an inner command never inherits the outer one's id.
    """
    return structlog.contextvars.bound_contextvars(
        command=command_type,
        aggregate_id=None if aggregate_id is None else str(aggregate_id),
    )


__all__ = ["command_context", "get_logger"]
