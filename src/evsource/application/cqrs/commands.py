"""Application CQRS – Command, CommandHandler, CommandBus, InProcessCommandBus."""
from __future__ import annotations

import abc
from typing import Any, Callable, Generic, TypeVar, Union

from evsource.kernel.errors import BaseError, HandlerNotFoundError
from evsource.observability.logging import command_context, get_logger

C = TypeVar("C", bound="Command")

logger = get_logger(__name__)


class Command:
    """Marker base for commands (intent to change one aggregate's state).

    Concrete commands are usually frozen dataclasses with an ``aggregate_id``
    field naming the target aggregate.
    """


class CommandHandler(abc.ABC, Generic[C]):
    """Handle a single command type."""

    @abc.abstractmethod
    def handle(self, command: C) -> Any: ...


class _CallableHandler(CommandHandler[Any]):
    """Adapts a plain function to the :class:`CommandHandler` interface."""

    def __init__(self, func: Callable[[Any], Any]) -> None:
        self._func = func

    def handle(self, command: Any) -> Any:
        return self._func(command)

    def __repr__(self) -> str:  # pragma: no cover
        return f"_CallableHandler({getattr(self._func, '__qualname__', self._func)!r})"


HandlerLike = Union[CommandHandler[Any], Callable[[Any], Any]]


class CommandBus(abc.ABC):
    """Routes each command to exactly one registered handler."""

    @abc.abstractmethod
    def register(self, command_type: type[Command], handler: HandlerLike) -> None: ...

    @abc.abstractmethod
    def send(self, command: Command) -> Any: ...

    def dispatch(self, command: Command) -> Any:
        """Alias for :meth:`send`."""
        return self.send(command)


class InProcessCommandBus(CommandBus):
    """Synchronous in-process command bus.

    Registration policy: the last registration for a command type wins; the
    replaced handler is logged at WARNING.  Lookup uses the command's exact
    class, so a handler for a base command does not receive subclasses.
    """

    def __init__(self) -> None:
        self._handlers: dict[type[Command], CommandHandler[Any]] = {}

    def register(self, command_type: type[Command], handler: HandlerLike) -> None:
        if not isinstance(handler, CommandHandler):
            if not callable(handler):
                raise TypeError(f"Handler for {command_type.__name__} must be callable")
            handler = _CallableHandler(handler)
        previous = self._handlers.get(command_type)
        if previous is not None:
            logger.warning(
                "command_handler.replaced",
                command=command_type.__name__,
                previous=repr(previous),
                handler=repr(handler),
            )
        self._handlers[command_type] = handler

    def is_registered(self, command_type: type[Command]) -> bool:
        return command_type in self._handlers

    def send(self, command: Command) -> Any:
        command_type = type(command)
        handler = self._handlers.get(command_type)
        if handler is None:
            raise HandlerNotFoundError(command_type)

        with command_context(command_type.__name__, getattr(command, "aggregate_id", None)):
            logger.debug("command.dispatched", handler=type(handler).__name__)
            try:
                return handler.handle(command)
            except BaseError as exc:
                logger.info("command.failed", **exc.log_fields())
                raise
            except Exception as exc:
                logger.info("command.failed", error=type(exc).__name__)
                raise


__all__ = ["Command", "CommandBus", "CommandHandler", "HandlerLike", "InProcessCommandBus"]
