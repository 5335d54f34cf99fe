"""
Engine logging.

Every module logs through ``get_logger(__name__)``, so all engine and host
events land under the ``sparklet`` logger. ``configure_logging`` attaches a
single handler there and leaves the root logger to the embedding host.
"""

import logging
import sys
from typing import Any, TextIO

import structlog
from pythonjsonlogger import jsonlogger

from .config import get_settings

ROOT_LOGGER = "sparklet"

_CONSOLE_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
_JSON_FORMAT = "%(asctime)s %(levelname)s %(name)s %(message)s"


def _processors(json_logs: bool) -> list[Any]:
    # merge_contextvars first so LogContext fields (sparklet_id) reach every event
    return [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.filter_by_level,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.add_log_level,
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
        structlog.processors.JSONRenderer() if json_logs else structlog.dev.ConsoleRenderer(colors=False),
    ]


def _handler(json_logs: bool, stream: TextIO) -> logging.Handler:
    handler = logging.StreamHandler(stream)
    if json_logs:
        handler.setFormatter(jsonlogger.JsonFormatter(_JSON_FORMAT))
    else:
        handler.setFormatter(logging.Formatter(_CONSOLE_FORMAT))
    return handler


def configure_logging(
    level: str | None = None,
    json_logs: bool | None = None,
    stream: TextIO | None = None,
) -> None:
    """
    Route sparklet events to ``stream`` (stdout by default).

    Calling it again replaces the previous handler, so a host may switch
    level or format at runtime.

    Args:
        level: Log level name; defaults to ``Settings.log_level``
        json_logs: JSON lines instead of console text; defaults to ``Settings.json_logs``
        stream: Destination for log lines
    """
    settings = get_settings()
    level = level or settings.log_level
    json_logs = settings.json_logs if json_logs is None else json_logs

    logger = logging.getLogger(ROOT_LOGGER)
    for existing in list(logger.handlers):
        logger.removeHandler(existing)
    logger.addHandler(_handler(json_logs, stream or sys.stdout))
    logger.setLevel(getattr(logging, level.upper(), logging.INFO))
    logger.propagate = False

    structlog.configure(
        processors=_processors(json_logs),
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=False,
    )


def get_logger(name: str) -> structlog.stdlib.BoundLogger:
    """Logger for a sparklet module; pass ``__name__``."""
    return structlog.get_logger(name)


class LogContext:
    """
    Bind fields such as ``sparklet_id`` to every event logged in scope.

    Example:
        with LogContext(sparklet_id="counter"):
            dispatcher.dispatch("increment", state)
    """

    def __init__(self, **kwargs: Any):
        self.context = kwargs

    def __enter__(self) -> "LogContext":
        structlog.contextvars.bind_contextvars(**self.context)
        return self

    def __exit__(self, *args: Any) -> None:
        structlog.contextvars.unbind_contextvars(*self.context.keys())
