"""Schema validation for Starlette/FastAPI route handlers."""

from route_validation.core.errors import ValidationFailure
from route_validation.core.errors import register_error_handlers
from route_validation.core.schema import InferOrNone
from route_validation.core.schema import ParsedBundle
from route_validation.core.schema import ParseResult
from route_validation.core.schema import PydanticSchema
from route_validation.core.schema import SafeParser
from route_validation.core.validation import RouteContext
from route_validation.core.validation import ValidationMessages
from route_validation.core.validation import ValidationSchemas
from route_validation.core.validation import with_validation

__all__ = [
    "InferOrNone",
    "ParseResult",
    "ParsedBundle",
    "PydanticSchema",
    "RouteContext",
    "SafeParser",
    "ValidationFailure",
    "ValidationMessages",
    "ValidationSchemas",
    "register_error_handlers",
    "with_validation",
]
