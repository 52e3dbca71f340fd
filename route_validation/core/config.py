"""Runtime configuration for validating route handlers."""

from __future__ import annotations

from dataclasses import dataclass
from functools import lru_cache
import logging
import os

logger = logging.getLogger(__name__)

DEFAULT_BODY_MESSAGE = "Bad Request"
DEFAULT_PARAMS_MESSAGE = "Bad Request Parameters"
DEFAULT_QUERY_MESSAGE = "Bad Request Query"
INVALID_JSON_MESSAGE = "Invalid JSON in body"

_TRUE_VALUES = frozenset({"1", "true", "yes", "on"})


def _get_bool_env(name: str, default: bool) -> bool:
    raw = os.getenv(name)
    if raw is None:
        return default
    return raw.strip().lower() in _TRUE_VALUES


def _get_message_env(name: str, default: str) -> str:
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return default
    return raw


@dataclass(frozen=True)
class ValidationSettings:
    """Process-wide defaults used when a schema set carries no override."""

    body_message: str
    params_message: str
    query_message: str
    log_issues: bool

    def safe_for_logging(self) -> dict[str, str | bool]:
        """Return settings in a form suitable for log lines."""
        return {
            "body_message": self.body_message,
            "params_message": self.params_message,
            "query_message": self.query_message,
            "log_issues": self.log_issues,
        }


@lru_cache(maxsize=1)
def get_validation_settings() -> ValidationSettings:
    """Load validation settings from the environment."""
    settings = ValidationSettings(
        body_message=_get_message_env("ROUTE_VALIDATION_BODY_MESSAGE", DEFAULT_BODY_MESSAGE),
        params_message=_get_message_env("ROUTE_VALIDATION_PARAMS_MESSAGE", DEFAULT_PARAMS_MESSAGE),
        query_message=_get_message_env("ROUTE_VALIDATION_QUERY_MESSAGE", DEFAULT_QUERY_MESSAGE),
        log_issues=_get_bool_env("ROUTE_VALIDATION_LOG_ISSUES", False),
    )
    logger.debug("Loaded validation settings=%s", settings.safe_for_logging())
    return settings
