"""Shared pytest configuration and fixtures for vcal_lite tests."""

from typing import Any

import pytest

from tests.fixtures.mock_ics_data import ICSDataFactory
from vcal_lite.calendar.lite_parser_telemetry import LiteParseTelemetry


def pytest_configure(config: Any) -> None:
    """Register custom markers."""
    config.addinivalue_line("markers", "unit: Fast unit tests")
    config.addinivalue_line("markers", "critical_path: Core functionality tests")
    config.addinivalue_line("markers", "smoke: Basic smoke tests")


@pytest.fixture
def ics_factory() -> type[ICSDataFactory]:
    """Factory producing deterministic sample documents."""
    return ICSDataFactory


@pytest.fixture
def budapest_ics() -> str:
    """Full sample document with CRLF line endings."""
    return ICSDataFactory.create_budapest_ics()


@pytest.fixture
def telemetry() -> LiteParseTelemetry:
    """Fresh per-test telemetry collector."""
    return LiteParseTelemetry()
