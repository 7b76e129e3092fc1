"""Observability – structured logging helpers."""
from evsource.observability.logging.factory import JsonLoggerFactory
from evsource.observability.logging.processors import command_context, get_logger

__all__ = [
    "JsonLoggerFactory",
    "command_context",
    "get_logger",
]
