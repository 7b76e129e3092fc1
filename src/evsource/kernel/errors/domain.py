"""Domain errors – aggregate consistency and lookup failures."""

from __future__ import annotations

from typing import Any

from evsource.kernel.errors.base import BaseError


class DomainError(BaseError):
    """Raised when a domain rule is violated or an aggregate cannot be resolved."""

    default_code = "domain_error"


class ValidationError(DomainError):
    """Input data does not meet validation rules."""

    default_code = "validation_error"


class NotFoundError(DomainError):
    """The requested resource does not exist."""

    default_code = "not_found"

    def __init__(
        self,
        resource: str,
        identifier: Any = None,
        **kwargs: Any,
    ) -> None:
        msg = f"{resource} not found"
        if identifier is not None:
            msg = f"{resource} '{identifier}' not found"
        super().__init__(msg, **kwargs)
        self.resource = resource
        self.identifier = identifier


class AggregateNotFoundError(NotFoundError):
    """Neither a snapshot nor any events exist for the requested aggregate id."""

    default_code = "aggregate_not_found"

    def __init__(self, aggregate_id: Any, aggregate_type: str = "Aggregate", **kwargs: Any) -> None:
        super().__init__(
            aggregate_type,
            aggregate_id,
            detail={"aggregate_id": str(aggregate_id), "aggregate_type": aggregate_type},
            **kwargs,
        )
        self.aggregate_id = aggregate_id
        self.aggregate_type = aggregate_type


class ConflictError(DomainError):
    """The operation conflicts with existing state."""

    default_code = "conflict"


class ConcurrencyConflictError(ConflictError):
    """The stored latest sequence did not match the version the writer expected.

    Callers should reload the aggregate and re-run the command.
    """

    default_code = "concurrency_conflict"
    retryable = True

    def __init__(self, aggregate_id: Any, expected: int, actual: int, **kwargs: Any) -> None:
        super().__init__(
            f"Concurrency conflict on aggregate '{aggregate_id}': "
            f"expected version {expected}, found {actual}",
            detail={"aggregate_id": str(aggregate_id), "expected": expected, "actual": actual},
            **kwargs,
        )
        self.aggregate_id = aggregate_id
        self.expected = expected
        self.actual = actual


class ApplyNotSupportedError(DomainError):
    """The target aggregate or entity has no handler for an event type.

    Raised by the dispatch table lookup and absorbed by ``AggregateRoot.apply_event``
    so new event types can be introduced without breaking older aggregate code.
    """

    default_code = "apply_not_supported"

    def __init__(self, target: str, event_type: str) -> None:
        super().__init__(
            f"{target} has no handler for {event_type}",
            detail={"target": target, "event_type": event_type},
        )
        self.target = target
        self.event_type = event_type


class SnapshotNotSupportedError(DomainError):
    """The aggregate type does not implement snapshot capture/restore."""

    default_code = "snapshot_not_supported"

    def __init__(self, aggregate_type: str) -> None:
        super().__init__(f"{aggregate_type} does not support snapshots")
        self.aggregate_type = aggregate_type


__all__ = [
    "AggregateNotFoundError",
    "ApplyNotSupportedError",
    "ConcurrencyConflictError",
    "ConflictError",
    "DomainError",
    "NotFoundError",
    "SnapshotNotSupportedError",
    "ValidationError",
]
