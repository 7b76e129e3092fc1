"""Sequential 128-bit identifiers for aggregates, entities and events."""

from __future__ import annotations

import dataclasses
import uuid
from datetime import UTC, datetime
from typing import Any

import uuid_utils
from pydantic_core import core_schema

from evsource.kernel.errors.domain import ValidationError


def new_id() -> uuid.UUID:
    """Return a new time-ordered UUID (version 7).

    The leading 48 bits carry the Unix time in milliseconds and the rest is
    random, so ids generated later sort after earlier ones in byte order.
    ``uuid_utils`` draws from a thread-safe generator, so concurrent callers
    never receive the same value.
    """
    return uuid.UUID(str(uuid_utils.uuid7()))


@dataclasses.dataclass(frozen=True, slots=True, order=True)
class SequentialId:
    """Identifier value object backed by a version-7 UUID.

    Examples::

        sid = SequentialId.generate()
        sid = SequentialId.from_str("0190b6d2-8c6a-7f3e-9d7a-5b2c1e4f6a8b")
        str(sid)  # canonical hyphenated form
    """

    value: uuid.UUID

    def __post_init__(self) -> None:
        if not isinstance(self.value, uuid.UUID):
            raise ValidationError(f"SequentialId expects a UUID, got {type(self.value).__name__}")

    def __str__(self) -> str:
        return str(self.value)

    @classmethod
    def generate(cls) -> "SequentialId":
        """Return a new ``SequentialId``."""
        return cls(new_id())

    @classmethod
    def from_str(cls, value: str) -> "SequentialId":
        """Parse the canonical string form."""
        try:
            return cls(uuid.UUID(value))
        except (TypeError, ValueError) as exc:
            raise ValidationError(f"Invalid SequentialId: {value!r}") from exc

    @classmethod
    def coerce(cls, value: "SequentialId | uuid.UUID | str") -> "SequentialId":
        """Accept an existing id, a ``uuid.UUID`` or its string form."""
        if isinstance(value, SequentialId):
            return value
        if isinstance(value, uuid.UUID):
            return cls(value)
        return cls.from_str(value)

    @property
    def timestamp_ms(self) -> int:
        """Milliseconds since the epoch embedded in the high 48 bits."""
        return self.value.int >> 80

    @property
    def created_at(self) -> datetime:
        return datetime.fromtimestamp(self.timestamp_ms / 1000, tz=UTC)

    @classmethod
    def __get_pydantic_core_schema__(
        cls,
        source_type: Any,
        handler: Any,
    ) -> Any:
        return core_schema.no_info_plain_validator_function(
            cls.coerce,
            serialization=core_schema.to_string_ser_schema(),
        )


__all__ = ["SequentialId", "new_id"]
