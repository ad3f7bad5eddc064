"""Tests for logging configuration."""

import logging
from collections.abc import Generator

import pytest
import structlog
from structlog.stdlib import BoundLogger, ProcessorFormatter
from structlog.types import BindableLogger

from tf_http_backend.core.logging import (
    configure_logging,
    get_logger,
    get_request_logger,
)


@pytest.fixture(autouse=True)
def restore_logging() -> Generator[None, None, None]:
    yield
    configure_logging(testing=True)


def _renderer() -> object:
    formatter = logging.getLogger().handlers[0].formatter
    assert isinstance(formatter, ProcessorFormatter)
    return formatter.processors[-1]


def test_configure_logging_uses_json_by_default() -> None:
    configure_logging()

    assert logging.getLogger().level == logging.INFO
    assert isinstance(_renderer(), structlog.processors.JSONRenderer)


def test_configure_logging_console_renderer() -> None:
    configure_logging(json_logs=False)

    assert isinstance(_renderer(), structlog.dev.ConsoleRenderer)


def test_configure_logging_debug_level() -> None:
    configure_logging(debug=True)

    assert logging.getLogger().level == logging.DEBUG
    assert logging.getLogger().handlers[0].level == logging.DEBUG


def test_configure_logging_does_not_duplicate_handlers() -> None:
    configure_logging()
    configure_logging()

    assert len(logging.getLogger().handlers) == 1


def test_server_loggers_propagate_to_root() -> None:
    uvicorn_logger = logging.getLogger("uvicorn.error")
    uvicorn_logger.addHandler(logging.NullHandler())

    configure_logging()

    assert uvicorn_logger.handlers == []
    assert uvicorn_logger.propagate is True


def test_get_logger() -> None:
    logger = get_logger()
    assert isinstance(logger, BoundLogger | BindableLogger)


def test_get_request_logger_binds_request_id() -> None:
    with structlog.testing.capture_logs() as logs:
        get_request_logger("test-123").info("test_message")

    assert logs == [
        {"event": "test_message", "log_level": "info", "request_id": "test-123"}
    ]
