"""Pluggable body encoders and response decoders.

JSON is the default on both sides and is handled by pydantic: encoding
goes through ``pydantic_core.to_json`` so models, dataclasses and plain
containers all serialize the same way, and decoding validates the bytes
against the caller's target type with a ``TypeAdapter``.
"""

from functools import lru_cache
from typing import Any, Optional, Protocol, Type, TypeVar, runtime_checkable

from pydantic import TypeAdapter
from pydantic_core import to_json

T = TypeVar("T")


@runtime_checkable
class Encoder(Protocol):
    """Turns an arbitrary value into request body bytes."""

    def encode(self, value: Any) -> bytes: ...


@runtime_checkable
class Decoder(Protocol):
    """Turns response body bytes into a value of the requested type."""

    def decode(self, data: bytes, response_type: Type[T]) -> T: ...


@lru_cache(maxsize=256)
def _adapter(response_type: Any) -> TypeAdapter:
    return TypeAdapter(response_type)


class JSONEncoder:
    """JSON body encoder backed by pydantic-core.

    :param by_alias: Serialize pydantic models using field aliases
    :type by_alias: bool
    :param exclude_none: Drop fields whose value is None
    :type exclude_none: bool
    :param indent: Optional indentation for pretty output
    :type indent: Optional[int]
    """

    def __init__(
        self,
        by_alias: bool = True,
        exclude_none: bool = False,
        indent: Optional[int] = None,
    ):
        self.by_alias = by_alias
        self.exclude_none = exclude_none
        self.indent = indent

    def encode(self, value: Any) -> bytes:
        """Serialize ``value`` to JSON bytes.

        :raises pydantic_core.PydanticSerializationError: If the value
            holds something pydantic cannot serialize
        """
        return to_json(
            value,
            indent=self.indent,
            by_alias=self.by_alias,
            exclude_none=self.exclude_none,
        )


class JSONDecoder:
    """JSON response decoder that validates into the target type.

    :param strict: Disable pydantic's lax type coercion
    :type strict: bool
    """

    def __init__(self, strict: bool = False):
        self.strict = strict

    def decode(self, data: bytes, response_type: Type[T]) -> T:
        """Parse ``data`` as JSON and validate it as ``response_type``.

        :raises pydantic.ValidationError: If the bytes are not JSON or do
            not match the target shape
        """
        try:
            adapter = _adapter(response_type)
        except TypeError:
            # Unhashable annotations cannot be cached.
            adapter = TypeAdapter(response_type)
        return adapter.validate_json(data, strict=self.strict)
