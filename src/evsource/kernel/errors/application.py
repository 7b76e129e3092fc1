"""Application-layer errors – command routing and wiring problems."""

from __future__ import annotations

from typing import Any

from evsource.kernel.errors.base import BaseError


class ApplicationError(BaseError):
    """Cross-cutting application-layer concern."""

    default_code = "application_error"


class HandlerNotFoundError(ApplicationError):
    """No handler is registered for the command's concrete type.

    A configuration error: retrying the same command will not help.
    """

    default_code = "handler_not_found"

    def __init__(self, command_type: type[Any], **kwargs: Any) -> None:
        super().__init__(
            f"No handler registered for {command_type.__name__!r}",
            detail={"command_type": command_type.__name__},
            **kwargs,
        )
        self.command_type = command_type


__all__ = ["ApplicationError", "HandlerNotFoundError"]
