"""Structured logging helpers."""

import logging
from typing import Optional, Union

from .config import configure_logging
from .context import clear_log_context, get_log_context, log_context, pop_log_context, push_log_context

__all__ = [
    "ComponentLoggerAdapter",
    "get_logger",
    "configure_logging",
    "log_context",
    "get_log_context",
    "push_log_context",
    "pop_log_context",
    "clear_log_context",
]


class ComponentLoggerAdapter(logging.LoggerAdapter):
    """LoggerAdapter that merges its fixed fields with per-call extra."""

    def process(self, msg, kwargs):
        kwargs["extra"] = {**self.extra, **kwargs.get("extra", {})}
        return msg, kwargs


def get_logger(
    name: str, component: Optional[str] = None
) -> Union[logging.Logger, ComponentLoggerAdapter]:
    """
    Return a logger, optionally tagging every record with a component.

    Example:
        >>> logger = get_logger(__name__, component="realtime")
        >>> logger.info("Client joined room", extra={"event": "realtime.room.joined"})
    """
    logger = logging.getLogger(name)
    if component:
        return ComponentLoggerAdapter(logger, {"component": component})
    return logger
