"""JSON (de)serialization using the client's shared settings."""

import json
from functools import lru_cache
from typing import Any, Optional, Type, TypeVar

from pydantic import BaseModel, TypeAdapter
from pydantic_core import to_jsonable_python

from ..config import JsonSettings

T = TypeVar("T")


@lru_cache(maxsize=128)
def _type_adapter(response_type: Any) -> TypeAdapter:
    return TypeAdapter(response_type)


class JsonSerializer:
    """Serializes request bodies and decodes responses into typed values."""

    def __init__(self, options: Optional[JsonSettings] = None):
        self.options = options or JsonSettings()

    def to_jsonable(self, body: Any) -> Any:
        """Convert a body into plain JSON compatible values."""
        if isinstance(body, BaseModel):
            return body.model_dump(
                mode="json",
                by_alias=self.options.by_alias,
                exclude_none=self.options.exclude_none,
            )
        value = to_jsonable_python(
            body, by_alias=self.options.by_alias, exclude_none=self.options.exclude_none
        )
        if self.options.exclude_none and isinstance(value, dict):
            value = {k: v for k, v in value.items() if v is not None}
        return value

    def serialize(self, body: Any) -> Optional[str]:
        """Serialize a body to JSON text. Strings are passed through verbatim."""
        if body is None:
            return None
        if isinstance(body, str):
            return body
        return json.dumps(self.to_jsonable(body))

    def serialize_for_trace(self, body: Any) -> Optional[str]:
        if body is None or isinstance(body, str):
            return body
        return json.dumps(self.to_jsonable(body), indent=self.options.trace_indent)

    def deserialize(self, response_type: Type[T], value: Any) -> T:
        """Decode a JSON value into ``response_type``.

        Raises:
            pydantic.ValidationError: If the value does not match the type
        """
        return _type_adapter(response_type).validate_python(value)
