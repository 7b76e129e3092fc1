"""Infrastructure errors – failures reported by event and snapshot stores."""

from __future__ import annotations

from typing import Any

from evsource.kernel.errors.base import BaseError


class InfrastructureError(BaseError):
    """Infrastructure / I/O failure that is not a business rule violation."""

    default_code = "infrastructure_error"


class PersistenceError(InfrastructureError):
    """A store failed (connectivity, constraint violation, corrupt data, ...).

    Propagated to the caller unchanged; the core never retries it.
    """

    default_code = "persistence_error"

    def __init__(
        self,
        message: str,
        *,
        store: str | None = None,
        **kwargs: Any,
    ) -> None:
        super().__init__(message, **kwargs)
        self.store = store


class SerializationError(PersistenceError):
    """Failed to serialise or deserialise an event or snapshot payload."""

    default_code = "serialization_error"

    def __init__(
        self,
        message: str,
        *,
        payload_type: str | None = None,
        **kwargs: Any,
    ) -> None:
        super().__init__(message, **kwargs)
        self.payload_type = payload_type


__all__ = ["InfrastructureError", "PersistenceError", "SerializationError"]
