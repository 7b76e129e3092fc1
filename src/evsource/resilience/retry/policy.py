"""Resilience – ConflictRetryPolicy backed by ``tenacity``."""
from __future__ import annotations

from typing import Any, Callable, TypeVar

import tenacity

from evsource.kernel.errors import BaseError
from evsource.observability.logging import get_logger

T = TypeVar("T")

logger = get_logger(__name__)


def _is_retryable(exc: BaseException) -> bool:
    return isinstance(exc, BaseError) and exc.retryable


class ConflictRetryPolicy:
    """Re-run a whole load-mutate-save cycle after a concurrency conflict.

    Only errors flagged ``retryable`` (that is
    :class:`~evsource.kernel.errors.ConcurrencyConflictError`) are retried;
    every other failure propagates on the first attempt.  The
    callable must reload the aggregate itself, otherwise the retry replays
    the same stale version.

    Parameters
    ----------
    max_attempts:
        Maximum number of call attempts (including the first call).
    wait:
        A ``tenacity`` wait strategy.  Defaults to a short random jitter so
        competing writers do not collide again in lockstep.
    reraise:
        Re-raise the last conflict once attempts are exhausted (default)
        instead of ``tenacity.RetryError``.

    Example
    -------
    ::

        policy = ConflictRetryPolicy(max_attempts=3)

        def debit() -> None:
            account = repository.load(account_id)
            account.debit(Decimal("50"))
            repository.save(account)

        policy.execute(debit)
    """

    def __init__(
        self,
        max_attempts: int = 3,
        wait: Any = None,
        reraise: bool = True,
    ) -> None:
        if max_attempts < 1:
            raise ValueError("max_attempts must be >= 1")
        self._max_attempts = max_attempts
        self._wait = wait if wait is not None else tenacity.wait_random(0, 0.05)
        self._reraise = reraise

    @property
    def max_attempts(self) -> int:
        return self._max_attempts

    def _build_retrying(self) -> tenacity.Retrying:
        return tenacity.Retrying(
            stop=tenacity.stop_after_attempt(self._max_attempts),
            wait=self._wait,
            retry=tenacity.retry_if_exception(_is_retryable),
            reraise=self._reraise,
            before_sleep=self._log_retry,
        )

    @staticmethod
    def _log_retry(retry_state: tenacity.RetryCallState) -> None:
        exc = retry_state.outcome.exception() if retry_state.outcome else None
        logger.info(
            "command.conflict_retry",
            attempt=retry_state.attempt_number,
            **(exc.log_fields() if isinstance(exc, BaseError) else {"error": repr(exc)}),
        )

    def execute(self, func: Callable[[], T]) -> T:
        """Call *func*, retrying it on concurrency conflicts."""
        return self._build_retrying()(func)

    def wrap(self, func: Callable[..., T]) -> Callable[..., T]:
        """Return *func* wrapped so every call goes through :meth:`execute`."""
        def _wrapped(*args: Any, **kwargs: Any) -> T:
            return self.execute(lambda: func(*args, **kwargs))

        _wrapped.__name__ = getattr(func, "__name__", "wrapped")
        _wrapped.__doc__ = func.__doc__
        return _wrapped


__all__ = ["ConflictRetryPolicy"]
