"""Test configuration."""

import os
from pathlib import Path
from typing import List

import pytest
from pytest import Config

from tf_http_backend.core.logging import configure_logging

fixture = pytest.fixture


@fixture(scope="session")
def project_root() -> Path:
    """Get the project root directory."""
    return Path(__file__).parent.parent


pytest_plugins: List[str] = [
    "tests.fixtures.state_store",
    "tests.fixtures.api",
]


@fixture(autouse=True)
def isolated_env(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
    """Keep TF_HTTP_* variables and ``.env`` files of the host out of tests."""
    for key in list(os.environ):
        if key.upper().startswith("TF_HTTP_"):
            monkeypatch.delenv(key)
    monkeypatch.chdir(tmp_path)


def pytest_configure(config: Config) -> None:
    """Configure pytest.

    Args:
        config: Pytest configuration object
    """
    # Configure logging for test environment
    configure_logging(testing=True)
    config.addinivalue_line("markers", "integration: mark test as an integration test")
