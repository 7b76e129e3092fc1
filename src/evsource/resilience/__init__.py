"""Resilience – opt-in retry helpers (the core itself never retries)."""
from evsource.resilience.retry import ConflictRetryPolicy

__all__ = ["ConflictRetryPolicy"]
