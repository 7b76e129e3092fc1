"""Application CQRS – commands, handlers and the command bus."""
from evsource.application.cqrs.commands import (
    Command,
    CommandBus,
    CommandHandler,
    HandlerLike,
    InProcessCommandBus,
)
from evsource.application.cqrs.decorators import (
    clear_registry,
    command_handler,
    make_command_bus,
    registered_commands,
)

__all__ = [
    "Command",
    "CommandBus",
    "CommandHandler",
    "HandlerLike",
    "InProcessCommandBus",
    "clear_registry",
    "command_handler",
    "make_command_bus",
    "registered_commands",
]
