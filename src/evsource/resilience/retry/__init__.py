"""Resilience – retry on optimistic-concurrency conflicts."""
from evsource.resilience.retry.policy import ConflictRetryPolicy

__all__ = ["ConflictRetryPolicy"]
