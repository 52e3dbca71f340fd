"""400 response construction and exception handler registration."""

from __future__ import annotations

from enum import Enum
from typing import Any

from fastapi import FastAPI
from fastapi import Request
from fastapi import status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from pydantic import ValidationError

from route_validation.core.config import DEFAULT_BODY_MESSAGE
from route_validation.core.config import get_validation_settings
from route_validation.schemas.error import ErrorMessage


class ValidationFailure(str, Enum):
    """Kinds of request validation failure, in checking order."""

    INVALID_JSON = "invalid_json"
    BODY = "body"
    PARAMS = "params"
    QUERY = "query"


def bad_request(message: str) -> JSONResponse:
    """Build the 400 response carrying ``{"message": ...}``."""
    payload = ErrorMessage(message=message)
    return JSONResponse(status_code=status.HTTP_400_BAD_REQUEST, content=payload.model_dump())


def _message_for_location(location: tuple[Any, ...] | list[Any] | Any) -> str:
    settings = get_validation_settings()
    if not isinstance(location, (tuple, list)) or not location:
        return DEFAULT_BODY_MESSAGE

    prefix = location[0]
    if prefix == "body":
        return settings.body_message
    if prefix == "path":
        return settings.params_message
    if prefix == "query":
        return settings.query_message
    return DEFAULT_BODY_MESSAGE


async def request_validation_exception_handler(_: Request, exc: RequestValidationError) -> JSONResponse:
    """Answer FastAPI's native parameter validation errors with the shared 400 payload."""

    errors = exc.errors()
    location = errors[0].get("loc", ()) if errors else ()
    return bad_request(_message_for_location(location))


async def pydantic_validation_exception_handler(_: Request, __: ValidationError) -> JSONResponse:
    """Answer pydantic errors raised inside handlers with the body failure message."""

    return bad_request(get_validation_settings().body_message)


def register_error_handlers(app: FastAPI) -> None:
    """Attach validation error handlers to a FastAPI app instance."""

    app.add_exception_handler(RequestValidationError, request_validation_exception_handler)
    app.add_exception_handler(ValidationError, pydantic_validation_exception_handler)
