"""Schema capability used by validating route handlers.

Any object exposing ``safe_parse(value) -> ParseResult`` can validate a
request field. Pydantic models and other types pydantic understands are
wrapped in :class:`PydanticSchema` automatically.
"""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass
from typing import Any
from typing import Awaitable
from typing import Generic
from typing import Optional
from typing import Protocol
from typing import TypeVar
from typing import Union
from typing import runtime_checkable

from pydantic import PydanticUserError
from pydantic import TypeAdapter
from pydantic import ValidationError

from route_validation.schemas.error import ErrorDetail

T = TypeVar("T")
BodyT = TypeVar("BodyT")
ParamsT = TypeVar("ParamsT")
QueryT = TypeVar("QueryT")

InferOrNone = Optional[T]
"""Handler argument type for a field that may be unconfigured: ``InferOrNone[Model]``."""


@dataclass(frozen=True)
class ParseResult(Generic[T]):
    """Outcome of a safe parse: either validated data or a list of issues."""

    success: bool
    data: T | None = None
    issues: tuple[ErrorDetail, ...] = ()

    @classmethod
    def ok(cls, data: T) -> ParseResult[T]:
        return cls(success=True, data=data)

    @classmethod
    def fail(cls, issues: Iterable[ErrorDetail] = ()) -> ParseResult[Any]:
        return cls(success=False, issues=tuple(issues))


@runtime_checkable
class SafeParser(Protocol):
    """Validator capability: validate a raw value without raising."""

    def safe_parse(self, value: Any) -> Union[Awaitable[ParseResult[Any]], ParseResult[Any]]:
        ...


def _format_location(location: tuple[Any, ...] | list[Any] | Any) -> str:
    if not isinstance(location, (tuple, list)):
        return str(location)
    if not location:
        return "value"
    return ".".join(str(part) for part in location)


def issues_from_validation_error(exc: ValidationError) -> list[ErrorDetail]:
    """Flatten pydantic errors into field/issue pairs."""
    details: list[ErrorDetail] = []
    for issue in exc.errors():
        field = _format_location(issue.get("loc", ()))
        message = str(issue.get("msg", "Invalid value"))
        details.append(ErrorDetail(field=field, issue=message))
    return details


class PydanticSchema(Generic[T]):
    """Safe-parse adapter over ``pydantic.TypeAdapter``."""

    def __init__(self, type_: type[T] | Any) -> None:
        try:
            self._adapter: TypeAdapter[T] = TypeAdapter(type_)
        except (PydanticUserError, TypeError) as exc:
            raise TypeError(f"Cannot build a validation schema from {type_!r}") from exc
        self.type_ = type_

    def __repr__(self) -> str:
        return f"PydanticSchema({self.type_!r})"

    async def safe_parse(self, value: Any) -> ParseResult[T]:
        try:
            data = self._adapter.validate_python(value)
        except ValidationError as exc:
            return ParseResult.fail(issues_from_validation_error(exc))
        return ParseResult.ok(data)


def as_schema(schema: Any) -> SafeParser | None:
    """Return ``schema`` as a safe parser, wrapping plain types with pydantic."""
    if schema is None:
        return None
    if isinstance(schema, SafeParser):
        return schema
    return PydanticSchema(schema)


@dataclass
class ParsedBundle(Generic[BodyT, ParamsT, QueryT]):
    """Validated values for one request; ``None`` marks an unconfigured field."""

    body: BodyT | None = None
    params: ParamsT | None = None
    query: QueryT | None = None
