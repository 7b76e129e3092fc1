"""Application CQRS – @command_handler auto-registration decorator."""
from __future__ import annotations

from typing import Any, Callable

from evsource.application.cqrs.commands import (
    Command,
    CommandHandler,
    HandlerLike,
    InProcessCommandBus,
)

# ---------------------------------------------------------------------------
# Global registry populated at import time by the decorator
# ---------------------------------------------------------------------------

_COMMAND_REGISTRY: dict[type[Command], Callable[..., CommandHandler[Any]]] = {}


def command_handler(command_type: type[Command]):
    """Class decorator that records a :class:`CommandHandler` for *command_type*.

    Usage::

        @command_handler(DebitAccount)
        class DebitAccountHandler(CommandHandler[DebitAccount]):
            def __init__(self, repository: AggregateRepository[BankAccount]) -> None:
                self._repository = repository

            def handle(self, command: DebitAccount) -> None:
                ...

    Handlers are instantiated by :func:`make_command_bus` through its
    *handler_factory*.
    """
    def decorator(handler_class: type[CommandHandler[Any]]) -> type[CommandHandler[Any]]:
        _COMMAND_REGISTRY[command_type] = handler_class
        return handler_class

    return decorator


def make_command_bus(
    handler_factory: Callable[[type[CommandHandler[Any]]], CommandHandler[Any]] | None = None,
    extra: dict[type[Command], HandlerLike] | None = None,
) -> InProcessCommandBus:
    """Instantiate an :class:`InProcessCommandBus` from the global registry.

    *handler_factory* builds each handler instance (default: no-arg
    constructor); this is the single injection point for repositories.
    *extra* registers or overrides handlers without touching the registry.
    """
    build = handler_factory or (lambda handler_class: handler_class())
    bus = InProcessCommandBus()
    for cmd_type, handler_class in _COMMAND_REGISTRY.items():
        bus.register(cmd_type, build(handler_class))  # type: ignore[arg-type]
    if extra:
        for cmd_type, handler in extra.items():
            bus.register(cmd_type, handler)
    return bus


def registered_commands() -> dict[type[Command], Callable[..., CommandHandler[Any]]]:
    return dict(_COMMAND_REGISTRY)


def clear_registry() -> None:
    """Clear the global registry.  Use in tests to avoid inter-test leakage."""
    _COMMAND_REGISTRY.clear()


__all__ = [
    "clear_registry",
    "command_handler",
    "make_command_bus",
    "registered_commands",
]
