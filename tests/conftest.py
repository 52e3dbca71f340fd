"""Shared pytest fixtures for route-validation test suites."""

from collections.abc import Generator
from pathlib import Path
import sys

import pytest

PROJECT_ROOT = Path(__file__).resolve().parents[1]
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))


@pytest.fixture(autouse=True)
def fresh_settings(monkeypatch: pytest.MonkeyPatch) -> Generator[None, None, None]:
    """Isolate each test from environment-driven validation settings."""
    from route_validation.core.config import get_validation_settings

    for name in (
        "ROUTE_VALIDATION_BODY_MESSAGE",
        "ROUTE_VALIDATION_PARAMS_MESSAGE",
        "ROUTE_VALIDATION_QUERY_MESSAGE",
        "ROUTE_VALIDATION_LOG_ISSUES",
    ):
        monkeypatch.delenv(name, raising=False)
    get_validation_settings.cache_clear()
    yield
    get_validation_settings.cache_clear()
