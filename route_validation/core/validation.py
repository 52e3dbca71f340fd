"""Schema validation wrapper for Starlette/FastAPI route handlers.

``with_validation`` takes schemas for the request body, path parameters and
query string and returns an endpoint that validates each configured field
before calling the wrapped handler::

    class ItemCreate(BaseModel):
        name: str

    @with_validation(body=ItemCreate, messages={"body": "Invalid item"})
    async def create_item(*, request, body, params, query):
        return JSONResponse({"name": body.name}, status_code=201)

    app.add_route("/items", create_item, methods=["POST"])

Fields are checked in a fixed order (body, params, query). The first failure
short-circuits with a 400 ``{"message": ...}`` response and later fields are
neither read nor parsed.
"""

from __future__ import annotations

from collections.abc import Callable
from collections.abc import Mapping
from dataclasses import dataclass
from dataclasses import field
import functools
import inspect
import json
import logging
from typing import Any
from typing import Awaitable
from typing import Protocol
from typing import Sequence
from typing import Union

from fastapi import Request
from fastapi import Response
from fastapi.concurrency import run_in_threadpool

from route_validation.core.config import INVALID_JSON_MESSAGE
from route_validation.core.config import ValidationSettings
from route_validation.core.config import get_validation_settings
from route_validation.core.errors import ValidationFailure
from route_validation.core.errors import bad_request
from route_validation.core.schema import BodyT
from route_validation.core.schema import ParamsT
from route_validation.core.schema import ParsedBundle
from route_validation.core.schema import ParseResult
from route_validation.core.schema import QueryT
from route_validation.core.schema import SafeParser
from route_validation.core.schema import as_schema
from route_validation.schemas.error import ErrorDetail

logger = logging.getLogger(__name__)

SCHEMA_FIELDS = ("body", "params", "query")
_CONFIG_KEYS = frozenset({*SCHEMA_FIELDS, "options"})


@dataclass(frozen=True)
class ValidationMessages:
    """Optional per-field failure messages overriding the defaults."""

    body: str | None = None
    params: str | None = None
    query: str | None = None

    @classmethod
    def from_mapping(cls, mapping: Mapping[str, str | None]) -> ValidationMessages:
        unknown = set(mapping) - set(SCHEMA_FIELDS)
        if unknown:
            raise ValueError(f"Unknown message keys: {sorted(unknown)}")
        return cls(**mapping)


@dataclass(frozen=True)
class ValidationSchemas:
    """Schemas to apply to a route; any pydantic-compatible type or safe parser."""

    body: Any = None
    params: Any = None
    query: Any = None
    messages: ValidationMessages = field(default_factory=ValidationMessages)

    def __post_init__(self) -> None:
        for name in SCHEMA_FIELDS:
            object.__setattr__(self, name, as_schema(getattr(self, name)))
        if self.messages is None:
            object.__setattr__(self, "messages", ValidationMessages())
        elif isinstance(self.messages, Mapping):
            object.__setattr__(self, "messages", ValidationMessages.from_mapping(self.messages))

    @property
    def enabled_fields(self) -> tuple[str, ...]:
        """Configured field names, in checking order."""
        return tuple(name for name in SCHEMA_FIELDS if getattr(self, name) is not None)

    @classmethod
    def from_mapping(cls, mapping: Mapping[str, Any]) -> ValidationSchemas:
        """Build a schema set from ``{"body": ..., "options": {"messages": {...}}}``."""
        unknown = set(mapping) - _CONFIG_KEYS
        if unknown:
            raise ValueError(f"Unknown schema keys: {sorted(unknown)}")

        options = mapping.get("options") or {}
        messages = options.get("messages") or {}
        return cls(
            body=mapping.get("body"),
            params=mapping.get("params"),
            query=mapping.get("query"),
            messages=ValidationMessages.from_mapping(messages),
        )

    def message_for(self, name: str, settings: ValidationSettings) -> str:
        """Failure message for ``name``: the override if set, else the configured default."""
        override = getattr(self.messages, name)
        if override is not None:
            return override
        return getattr(settings, f"{name}_message")


@dataclass(frozen=True)
class RouteContext:
    """Routing metadata passed alongside the request."""

    params: Mapping[str, Any] | None = None


class ValidatedHandler(Protocol[BodyT, ParamsT, QueryT]):
    """Handler called with the request and the validated values."""

    def __call__(
        self,
        *,
        request: Request,
        body: BodyT | None,
        params: ParamsT | None,
        query: QueryT | None,
    ) -> Union[Awaitable[Response], Response]:
        ...


Endpoint = Callable[..., Awaitable[Response]]

_ENDPOINT_SIGNATURE = inspect.Signature(
    [inspect.Parameter("request", inspect.Parameter.POSITIONAL_OR_KEYWORD, annotation=Request)]
)


def _route_params(context: Any) -> Any:
    if context is None:
        return None
    if isinstance(context, Mapping):
        return context.get("params")
    return getattr(context, "params", None)


def _context_from_request(request: Request) -> RouteContext:
    path_params = dict(request.path_params)
    return RouteContext(params=path_params or None)


def flatten_query(request: Request) -> dict[str, str]:
    """Flatten the query string; the last value wins for repeated keys."""
    return {key: value for key, value in request.query_params.multi_items()}


async def _safe_parse(schema: SafeParser, value: Any) -> ParseResult[Any]:
    result = schema.safe_parse(value)
    if inspect.isawaitable(result):
        result = await result
    return result


def _reject(
    request: Request,
    failure: ValidationFailure,
    message: str,
    settings: ValidationSettings,
    issues: Sequence[ErrorDetail] = (),
) -> Response:
    if settings.log_issues and issues:
        logger.info(
            "Rejected %s %s: %s validation failed issues=%s",
            request.method,
            request.url.path,
            failure.value,
            [issue.model_dump() for issue in issues],
        )
    else:
        logger.info("Rejected %s %s: %s validation failed", request.method, request.url.path, failure.value)
    return bad_request(message)


def _wrap(schemas: ValidationSchemas, handler: ValidatedHandler[Any, Any, Any]) -> Endpoint:
    handler_is_async = inspect.iscoroutinefunction(handler) or inspect.iscoroutinefunction(
        getattr(handler, "__call__", None)
    )

    async def endpoint(request: Request, context: Any = None) -> Response:
        settings = get_validation_settings()
        parsed: ParsedBundle[Any, Any, Any] = ParsedBundle()

        if schemas.body is not None:
            try:
                data = await request.json()
                result = await _safe_parse(schemas.body, data)
            except (json.JSONDecodeError, UnicodeDecodeError):
                return _reject(request, ValidationFailure.INVALID_JSON, INVALID_JSON_MESSAGE, settings)
            except Exception:
                logger.warning("Unexpected error while parsing body for %s", request.url.path, exc_info=True)
                return _reject(request, ValidationFailure.BODY, schemas.message_for("body", settings), settings)
            if not result.success:
                return _reject(
                    request,
                    ValidationFailure.BODY,
                    schemas.message_for("body", settings),
                    settings,
                    result.issues,
                )
            parsed.body = result.data

        if schemas.params is not None:
            if context is None:
                context = _context_from_request(request)
            raw_params = _route_params(context)
            if raw_params is None:
                logger.debug("No route params for %s; skipping params validation", request.url.path)
            else:
                result = await _safe_parse(schemas.params, raw_params)
                if not result.success:
                    return _reject(
                        request,
                        ValidationFailure.PARAMS,
                        schemas.message_for("params", settings),
                        settings,
                        result.issues,
                    )
                parsed.params = result.data

        if schemas.query is not None:
            result = await _safe_parse(schemas.query, flatten_query(request))
            if not result.success:
                return _reject(
                    request,
                    ValidationFailure.QUERY,
                    schemas.message_for("query", settings),
                    settings,
                    result.issues,
                )
            parsed.query = result.data

        kwargs = {"request": request, "body": parsed.body, "params": parsed.params, "query": parsed.query}
        if handler_is_async:
            return await handler(**kwargs)
        response = await run_in_threadpool(handler, **kwargs)
        if inspect.isawaitable(response):
            response = await response
        return response

    functools.update_wrapper(
        endpoint, handler, assigned=("__module__", "__name__", "__qualname__", "__doc__"), updated=()
    )
    # FastAPI route decorators inject only the request; the route context stays positional.
    del endpoint.__wrapped__
    endpoint.__signature__ = _ENDPOINT_SIGNATURE  # type: ignore[attr-defined]
    return endpoint


def with_validation(
    schemas: ValidationSchemas | Mapping[str, Any] | None = None,
    handler: ValidatedHandler[Any, Any, Any] | None = None,
    *,
    body: Any = None,
    params: Any = None,
    query: Any = None,
    messages: ValidationMessages | Mapping[str, str | None] | None = None,
) -> Any:
    """Wrap ``handler`` with body, params and query validation.

    Without ``handler`` a decorator is returned. The resulting endpoint has
    the signature ``(request, context=None)``; when Starlette or a FastAPI
    route decorator calls it with the request only, route params come from
    ``request.path_params``. Plain (non-async) handlers run in the threadpool.
    """
    keywords = (body, params, query, messages)
    if schemas is not None and any(value is not None for value in keywords):
        raise TypeError("Pass either a schema set or schema keyword arguments, not both")

    if schemas is None:
        schemas = ValidationSchemas(body=body, params=params, query=query, messages=messages)
    elif isinstance(schemas, Mapping):
        schemas = ValidationSchemas.from_mapping(schemas)
    elif not isinstance(schemas, ValidationSchemas):
        raise TypeError(f"Expected ValidationSchemas or a mapping, got {type(schemas).__name__}")

    if handler is None:
        resolved = schemas

        def decorator(func: ValidatedHandler[Any, Any, Any]) -> Endpoint:
            return _wrap(resolved, func)

        return decorator
    return _wrap(schemas, handler)
