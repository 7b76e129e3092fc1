"""Kernel error hierarchy – public re-export surface.

Hierarchy::

    BaseError
    ├── DomainError                  (domain.py)
    │   ├── ValidationError
    │   ├── NotFoundError
    │   │   └── AggregateNotFoundError
    │   ├── ConflictError
    │   │   └── ConcurrencyConflictError
    │   ├── ApplyNotSupportedError
    │   └── SnapshotNotSupportedError
    ├── ApplicationError             (application.py)
    │   └── HandlerNotFoundError
    └── InfrastructureError          (infrastructure.py)
        └── PersistenceError
            └── SerializationError
"""

from evsource.kernel.errors.application import ApplicationError, HandlerNotFoundError
from evsource.kernel.errors.base import BaseError
from evsource.kernel.errors.domain import (
    AggregateNotFoundError,
    ApplyNotSupportedError,
    ConcurrencyConflictError,
    ConflictError,
    DomainError,
    NotFoundError,
    SnapshotNotSupportedError,
    ValidationError,
)
from evsource.kernel.errors.infrastructure import (
    InfrastructureError,
    PersistenceError,
    SerializationError,
)

__all__ = [
    "AggregateNotFoundError",
    "ApplicationError",
    "ApplyNotSupportedError",
    "BaseError",
    "ConcurrencyConflictError",
    "ConflictError",
    "DomainError",
    "HandlerNotFoundError",
    "InfrastructureError",
    "NotFoundError",
    "PersistenceError",
    "SerializationError",
    "SnapshotNotSupportedError",
    "ValidationError",
]
