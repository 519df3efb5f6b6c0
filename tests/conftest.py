"""Pytest configuration and shared fixtures.

This module provides fixtures used across all test modules.
"""

import os
from collections.abc import Generator
from pathlib import Path
from typing import Any
from unittest.mock import patch

import pytest

from graphweave.config import get_settings
from graphweave.graph.identifiers import IdentifierRegistry, reset_default_registry

# Set test environment before any settings are loaded
os.environ["APP_ENV"] = "development"


@pytest.fixture(autouse=True)
def fresh_default_registry() -> Generator[None, None, None]:
    """Give every test a default identifier registry counting from zero."""
    reset_default_registry()
    yield
    reset_default_registry()


@pytest.fixture
def ids() -> IdentifierRegistry:
    """Provide an isolated identifier registry."""
    return IdentifierRegistry()


@pytest.fixture
def temp_data_dir(tmp_path: Path) -> Path:
    """Create a temporary data directory for tests.

    Args:
        tmp_path: Pytest's temporary path fixture.

    Returns:
        Path: Temporary directory for test data.
    """
    data_dir = tmp_path / "data"
    (data_dir / "graphs").mkdir(parents=True)
    return data_dir


@pytest.fixture
def mock_settings(temp_data_dir: Path) -> Generator[Any, None, None]:
    """Provide settings pointing at a temporary storage directory.

    Args:
        temp_data_dir: Temporary data directory.

    Yields:
        Settings instance.
    """
    with patch.dict(
        os.environ,
        {
            "APP_ENV": "development",
            "GRAPH_STORAGE_PATH": str(temp_data_dir / "graphs"),
        },
    ):
        get_settings.cache_clear()
        yield get_settings()
        get_settings.cache_clear()


@pytest.fixture
def reject_settings() -> Generator[Any, None, None]:
    """Provide settings whose graphs reject edges with missing endpoints."""
    with patch.dict(os.environ, {"GRAPH_ON_MISSING_ENDPOINT": "reject"}):
        get_settings.cache_clear()
        yield get_settings()
        get_settings.cache_clear()


# Markers for test categories
def pytest_configure(config: pytest.Config) -> None:
    """Configure pytest with custom markers."""
    config.addinivalue_line("markers", "unit: Unit tests")
    config.addinivalue_line("markers", "slow: Slow tests")
