"""Kernel value-object types."""

from evsource.kernel.types.ids import SequentialId, new_id

__all__ = ["SequentialId", "new_id"]
