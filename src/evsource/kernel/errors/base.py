"""Root error class for the evsource error hierarchy."""

from __future__ import annotations

from typing import Any, ClassVar


class BaseError(Exception):
    """Root of every error evsource raises.

    ``code`` is a stable slug callers and log pipelines branch on instead of
    the class.  ``retryable`` marks failures that re-running the whole
    load-mutate-save cycle against fresh state can resolve; only version
    conflicts set it.

    Args:
        message: Human-readable description.
        code: Overrides ``default_code``.
        detail: Structured context (aggregate id, versions, setting names).
        cause: Lower-level exception that triggered this error.
    """

    default_code: ClassVar[str] = "evsource_error"
    retryable: ClassVar[bool] = False

    def __init__(
        self,
        message: str,
        *,
        code: str | None = None,
        detail: dict[str, Any] | None = None,
        cause: BaseException | None = None,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.code = code or self.default_code
        self.detail: dict[str, Any] = detail or {}
        self.cause = cause
        if cause is not None:
            self.__cause__ = cause

    def __str__(self) -> str:
        return f"{self.message} [{self.code}]"

    def __repr__(self) -> str:
        return f"{type(self).__name__}(code={self.code!r}, message={self.message!r})"

    def to_dict(self) -> dict[str, Any]:
        """Plain-dict form: error class, code, message, detail and cause."""
        payload: dict[str, Any] = {
            "error": type(self).__name__,
            "code": self.code,
            "message": self.message,
            "detail": self.detail,
            "retryable": self.retryable,
        }
        if self.cause is not None:
            payload["cause"] = repr(self.cause)
        return payload

    def log_fields(self) -> dict[str, Any]:
        """Keyword arguments for a structlog call reporting this error.

        Detail keys are nested under ``error_detail`` so they never shadow
        the ``aggregate_id`` bound in the command context.
        """
        fields: dict[str, Any] = {
            "error": type(self).__name__,
            "error_code": self.code,
            "retryable": self.retryable,
        }
        if self.detail:
            fields["error_detail"] = self.detail
        return fields


__all__ = ["BaseError"]
