"""Error payload schemas returned by validating route handlers."""

from __future__ import annotations

from pydantic import BaseModel
from pydantic import ConfigDict


class ErrorDetail(BaseModel):
    """Single field-level issue reported by a schema."""

    model_config = ConfigDict(frozen=True)

    field: str
    issue: str


class ErrorMessage(BaseModel):
    """Body of every 400 response produced by the adapter."""

    message: str
