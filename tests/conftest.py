"""Pytest configuration shared by all test suites.

This configuration provides:
1. Marker registration (unit, integration, api)
2. Automatic asyncio marking of coroutine tests
3. A mock logger satisfying LoggerProtocol
4. Paths and settings for the fixture routes tree
"""

import inspect
from pathlib import Path
from unittest.mock import MagicMock

import pytest

from routespec.core.config import Settings


# Configure pytest-asyncio
pytest_plugins = ("pytest_asyncio",)

FIXTURE_ROUTES_DIR = Path(__file__).parent / "fixtures" / "routes"


@pytest.fixture
def mock_logger() -> MagicMock:
    """Logger double; bind() returns the same mock so calls stay observable."""
    logger = MagicMock()
    logger.bind.return_value = logger
    return logger


@pytest.fixture
def routes_dir() -> Path:
    """Root of the fixture routes tree."""
    return FIXTURE_ROUTES_DIR


@pytest.fixture
def test_settings(routes_dir: Path) -> Settings:
    """Settings pointing at the fixture routes tree."""
    return Settings(
        environment="testing",
        routes_dir=routes_dir,
        app_name="Fixture API",
        app_version="1.2.3",
        docs_base_url="/api",
        additional_json_urls="",
        _env_file=None,
    )


# Pytest markers for different test types
def pytest_configure(config):
    """Register custom markers."""
    config.addinivalue_line("markers", "unit: Unit tests with mocked dependencies")
    config.addinivalue_line(
        "markers", "integration: Integration tests with mocked HTTP transports"
    )
    config.addinivalue_line("markers", "api: API tests through FastAPI TestClient")


# Test execution configuration
def pytest_collection_modifyitems(config, items):
    """Automatically add asyncio marker to async test functions.

    This ensures all async tests are properly marked even if
    the developer forgets to add @pytest.mark.asyncio.
    """
    for item in items:
        if inspect.iscoroutinefunction(getattr(item, "function", None)):
            item.add_marker(pytest.mark.asyncio)
