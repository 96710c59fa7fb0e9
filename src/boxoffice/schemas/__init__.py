"""Pydantic schemas for request validation and API responses.

parse_fields() turns raw request fields (form or JSON) into a schema
instance, converting pydantic's errors into our ValidationError so the
API renders them as {"error": "..."} like every other domain error.
"""

from collections.abc import Mapping
from typing import Any, TypeVar

from pydantic import BaseModel
from pydantic import ValidationError as SchemaError

from boxoffice.errors import ValidationError

ModelT = TypeVar("ModelT", bound=BaseModel)


def parse_fields(schema: type[ModelT], fields: Mapping[str, Any]) -> ModelT:
    """Validate raw fields against a schema or raise ValidationError."""
    try:
        return schema.model_validate(dict(fields))
    except SchemaError as exc:
        raise ValidationError(describe_schema_error(exc)) from exc


def describe_schema_error(exc: SchemaError) -> str:
    """One human-readable line for the first failing field."""
    first = exc.errors()[0]
    field = ".".join(str(part) for part in first["loc"]) or "body"
    if first["type"] == "missing":
        return f"{field} is required"
    return f"{field}: {first['msg']}"
