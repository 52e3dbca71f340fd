"""Unit tests for environment-driven validation settings."""

from __future__ import annotations

import logging

import pytest

from route_validation.core.config import DEFAULT_BODY_MESSAGE
from route_validation.core.config import DEFAULT_PARAMS_MESSAGE
from route_validation.core.config import DEFAULT_QUERY_MESSAGE
from route_validation.core.config import get_validation_settings


def test_settings_default_to_builtin_messages() -> None:
    settings = get_validation_settings()

    assert settings.body_message == DEFAULT_BODY_MESSAGE == "Bad Request"
    assert settings.params_message == DEFAULT_PARAMS_MESSAGE == "Bad Request Parameters"
    assert settings.query_message == DEFAULT_QUERY_MESSAGE == "Bad Request Query"
    assert settings.log_issues is False


def test_settings_are_read_from_environment(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("ROUTE_VALIDATION_BODY_MESSAGE", "Invalid payload")
    monkeypatch.setenv("ROUTE_VALIDATION_QUERY_MESSAGE", "   ")
    monkeypatch.setenv("ROUTE_VALIDATION_LOG_ISSUES", "yes")
    get_validation_settings.cache_clear()

    settings = get_validation_settings()

    assert settings.body_message == "Invalid payload"
    assert settings.params_message == "Bad Request Parameters"
    assert settings.query_message == "Bad Request Query"
    assert settings.log_issues is True
    assert settings.safe_for_logging()["body_message"] == "Invalid payload"


def test_settings_are_cached(monkeypatch: pytest.MonkeyPatch) -> None:
    first = get_validation_settings()
    monkeypatch.setenv("ROUTE_VALIDATION_BODY_MESSAGE", "Changed")

    assert get_validation_settings() is first


def test_loading_settings_logs_them_once(caplog: pytest.LogCaptureFixture) -> None:
    get_validation_settings.cache_clear()

    with caplog.at_level(logging.DEBUG, logger="route_validation.core.config"):
        get_validation_settings()
        get_validation_settings()

    loaded = [record for record in caplog.records if record.getMessage().startswith("Loaded validation settings=")]
    assert len(loaded) == 1
    assert "'body_message': 'Bad Request'" in loaded[0].getMessage()
