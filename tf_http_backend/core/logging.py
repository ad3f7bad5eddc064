"""Logging configuration module."""

from logging import (
    DEBUG,
    INFO,
    Handler,
    Logger,
    StreamHandler,
    getLogger,
)
from typing import cast

import structlog
from structlog import contextvars, dev, processors, stdlib
from structlog.processors import JSONRenderer, TimeStamper, dict_tracebacks
from structlog.stdlib import BoundLogger
from structlog.types import Processor

# Loggers that should share our handler instead of their own
_SERVER_LOGGERS = ("uvicorn", "uvicorn.error", "uvicorn.access")


def configure_logging(
    debug: bool = False, json_logs: bool = True, testing: bool = False
) -> None:
    """Configure structured logging for the application.

    Args:
        debug: Lower the log level to DEBUG
        json_logs: Render log lines as JSON instead of console output
        testing: Whether the application is running in test mode
    """
    level = DEBUG if debug else INFO

    # Define shared processors
    shared_processors: list[Processor] = [
        contextvars.merge_contextvars,
        stdlib.add_logger_name,
        stdlib.add_log_level,
        stdlib.PositionalArgumentsFormatter(),
        TimeStamper(fmt="%Y-%m-%d %H:%M:%S.%f"),
    ]

    # Configure structlog
    structlog.configure(
        processors=[
            stdlib.filter_by_level,
            *shared_processors,
            stdlib.ProcessorFormatter.wrap_for_formatter,
        ],
        context_class=dict,
        logger_factory=stdlib.LoggerFactory(),
        wrapper_class=stdlib.BoundLogger,
        cache_logger_on_first_use=not testing,
    )

    renderer: Processor
    if testing:
        renderer = processors.KeyValueRenderer(key_order=["event"])
    elif json_logs:
        renderer = JSONRenderer()
    else:
        renderer = dev.ConsoleRenderer()

    # Configure handler formatter
    formatter = stdlib.ProcessorFormatter(
        processors=[
            stdlib.ProcessorFormatter.remove_processors_meta,
            dict_tracebacks if json_logs and not testing else processors.format_exc_info,
            renderer,
        ],
        foreign_pre_chain=shared_processors,
    )

    handler: Handler = StreamHandler()
    handler.setLevel(level)
    handler.setFormatter(formatter)

    # Clear existing handlers to prevent duplicates
    root_logger: Logger = getLogger()
    root_logger.handlers = [handler]
    root_logger.setLevel(level)

    for name in _SERVER_LOGGERS:
        server_logger = getLogger(name)
        server_logger.handlers = []
        server_logger.propagate = True

    if debug:
        get_logger().debug("debug_mode_on")


def get_logger() -> BoundLogger:
    """Get a configured logger instance.

    Returns:
        A structured logger instance.
    """
    return cast(BoundLogger, structlog.get_logger())


def get_request_logger(request_id: str | None = None) -> BoundLogger:
    """Get a logger with request context.

    Args:
        request_id: Optional request ID to bind to logger

    Returns:
        Configured logger with request context
    """
    logger: BoundLogger = get_logger()
    if request_id:
        logger = logger.bind(request_id=request_id)
    return logger
