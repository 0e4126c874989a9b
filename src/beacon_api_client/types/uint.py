"""
Unsigned integer types.

The Beacon API quotes every unsigned integer as a base-10 string so that
values beyond the 53-bit safe range of JSON numbers survive intact. These
types decode such strings into exact Python integers and encode them back to
the same strings.
"""

from __future__ import annotations

import re
from typing import Any, ClassVar, SupportsInt

from pydantic import GetCoreSchemaHandler, GetJsonSchemaHandler
from pydantic.json_schema import JsonSchemaValue
from pydantic_core import core_schema
from typing_extensions import Self

from .exceptions import WireEncodingError, WireOverflowError

_DECIMAL = re.compile(r"0|[1-9][0-9]*")
"""Canonical decimal form: no sign, no leading zeros, no whitespace."""


class BaseUint(int):
    """An `int` bounded to `BITS` bits, quoted as a decimal string on the wire."""

    BITS: ClassVar[int]
    """Width of the integer; set by each subclass."""

    def __new__(cls, value: SupportsInt) -> Self:
        """
        Create an instance, checking the range.

        Raises:
            WireOverflowError: If `value` is outside the allowed range [0, 2**BITS - 1].
        """
        int_value = int(value)
        if not (0 <= int_value < (2**cls.BITS)):
            raise WireOverflowError(int_value, cls.__name__, max_value=2**cls.BITS - 1)
        return super().__new__(cls, int_value)

    @classmethod
    def from_wire(cls, value: Any) -> Self:
        """
        Decode a wire value into an instance.

        Accepts a quoted decimal string, or an existing `int` (but never a
        `bool` or `float`).

        Raises:
            WireEncodingError: If the value is not a canonical decimal.
            WireOverflowError: If the value does not fit in `BITS` bits.
        """
        if isinstance(value, cls):
            return value
        if isinstance(value, str):
            if _DECIMAL.fullmatch(value) is None:
                raise WireEncodingError(cls.__name__, "expected a decimal string", value)
            return cls(int(value))
        if isinstance(value, int) and not isinstance(value, bool):
            return cls(value)
        raise WireEncodingError(cls.__name__, f"unsupported type {type(value).__name__}", value)

    def to_wire(self) -> str:
        """Encode the integer as the quoted decimal string used on the wire."""
        return str(int(self))

    @classmethod
    def __get_pydantic_core_schema__(
        cls, source_type: Any, handler: GetCoreSchemaHandler
    ) -> core_schema.CoreSchema:
        """Hook into Pydantic's validation system."""
        return core_schema.no_info_plain_validator_function(
            cls.from_wire,
            serialization=core_schema.plain_serializer_function_ser_schema(
                lambda instance: str(int(instance)), when_used="json"
            ),
        )

    @classmethod
    def __get_pydantic_json_schema__(
        cls, core_schema: core_schema.CoreSchema, handler: GetJsonSchemaHandler
    ) -> JsonSchemaValue:
        """Hook into Pydantic's JSON Schema generation system."""
        return {"type": "string", "pattern": _DECIMAL.pattern, "format": f"uint{cls.BITS}"}

    def __repr__(self) -> str:
        """E.g. `Uint64(12)`."""
        return f"{type(self).__name__}({int(self)})"

    def __str__(self) -> str:
        return str(int(self))


class Uint8(BaseUint):
    """uint8."""

    BITS = 8


class Uint64(BaseUint):
    """uint64: slots, epochs, indices, balances and timestamps."""

    BITS = 64


class Uint256(BaseUint):
    """uint256, used for execution-layer values such as the base fee."""

    BITS = 256
