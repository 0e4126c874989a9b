"""
Byte array types.

This module provides two families of byte types:

- BaseBytes:    a fixed-length byte vector of exactly LENGTH bytes.
- BaseByteList: a variable-length byte list with an upper bound of LIMIT bytes.

On the wire both are `0x`-prefixed hex strings. Decoding never pads or
truncates: a value of the wrong length is rejected.
"""

from __future__ import annotations

import re
from typing import Any, ClassVar

from pydantic.annotated_handlers import GetCoreSchemaHandler
from pydantic_core import core_schema
from typing_extensions import Self

from .exceptions import WireEncodingError, WireLengthError

_HEX_DIGITS = re.compile(r"[0-9a-fA-F]*")


def decode_hex(value: Any, type_name: str) -> bytes:
    """
    Decode a strict `0x`-prefixed hex string from the wire.

    Raises:
        WireEncodingError: If the value is not a string, lacks the prefix,
            has an odd number of digits or contains non-hex characters.
    """
    if not isinstance(value, str):
        raise WireEncodingError(type_name, "expected a 0x-prefixed hex string", value)
    if not value.startswith("0x"):
        raise WireEncodingError(type_name, "missing 0x prefix", value)

    digits = value[2:]
    if _HEX_DIGITS.fullmatch(digits) is None:
        raise WireEncodingError(type_name, "not valid hex", value)
    if len(digits) % 2:
        raise WireEncodingError(type_name, "odd number of hex digits", value)
    return bytes.fromhex(digits)


def _to_bytes(value: Any, type_name: str) -> bytes:
    """Raw bytes are taken as they are; anything else must be wire hex."""
    if isinstance(value, (bytes, bytearray)):
        return bytes(value)
    return decode_hex(value, type_name)


def encode_hex(data: bytes) -> str:
    """Encode bytes as the lowercase `0x`-prefixed hex used on the wire."""
    return "0x" + bytes(data).hex()


class _WireBytes(bytes):
    """Shared pydantic plumbing for hex-encoded byte types."""

    @classmethod
    def from_wire(cls, value: Any) -> Self:
        """Decode a wire value (hex string) or raw bytes into an instance."""
        if isinstance(value, cls):
            return value
        if isinstance(value, (bytes, bytearray)):
            return cls(value)
        return cls(decode_hex(value, cls.__name__))

    def to_wire(self) -> str:
        """Encode as a `0x`-prefixed hex string."""
        return encode_hex(self)

    @classmethod
    def __get_pydantic_core_schema__(
        cls, source_type: Any, handler: GetCoreSchemaHandler
    ) -> core_schema.CoreSchema:
        """
        Hook into Pydantic's validation system.

        1. Instances of the class are accepted as they are.
        2. Raw bytes and hex strings are validated and converted.
        3. In JSON mode, values serialize to `0x` hex strings.
        """
        return core_schema.no_info_plain_validator_function(
            cls.from_wire,
            serialization=core_schema.plain_serializer_function_ser_schema(
                encode_hex, when_used="json"
            ),
        )

    def __repr__(self) -> str:
        """Return a string representation of the bytes."""
        return f"{type(self).__name__}({encode_hex(self)})"


class BaseBytes(_WireBytes):
    """
    A base class for fixed-length byte types that inherits from `bytes`.

    Subclasses set:
      - `LENGTH`: exact number of bytes the instance must contain.

    Instances are immutable byte objects with strict length checking.
    """

    LENGTH: ClassVar[int]
    """The exact number of bytes (overridden by subclasses)."""

    def __new__(cls, value: Any = b"") -> Self:
        """
        Create and validate a new Bytes instance.

        Args:
            value: Raw bytes or a `0x`-prefixed hex string.

        Raises:
            WireLengthError: If the resulting byte length differs from `LENGTH`.
        """
        if not hasattr(cls, "LENGTH"):
            raise TypeError(f"{cls.__name__} must define LENGTH")

        b = _to_bytes(value, cls.__name__)
        if len(b) != cls.LENGTH:
            raise WireLengthError(cls.__name__, expected=cls.LENGTH, actual=len(b))
        return super().__new__(cls, b)

    @classmethod
    def zero(cls) -> Self:
        """Create a new instance filled with zero bytes."""
        return cls(b"\x00" * cls.LENGTH)


class Bytes4(BaseBytes):
    """Fixed-size byte array of exactly 4 bytes."""

    LENGTH = 4


class Bytes20(BaseBytes):
    """Fixed-size byte array of exactly 20 bytes."""

    LENGTH = 20


class Bytes32(BaseBytes):
    """Fixed-size byte array of exactly 32 bytes."""

    LENGTH = 32


class Bytes48(BaseBytes):
    """Fixed-size byte array of exactly 48 bytes."""

    LENGTH = 48


class Bytes96(BaseBytes):
    """Fixed-size byte array of exactly 96 bytes."""

    LENGTH = 96


class Bytes256(BaseBytes):
    """Fixed-size byte array of exactly 256 bytes."""

    LENGTH = 256


class Blob(BaseBytes):
    """A blob of 4096 field elements of 32 bytes each."""

    LENGTH = 4096 * 32


class BaseByteList(_WireBytes):
    """
    Base class for variable-length byte lists.

    Subclasses set:
      - `LIMIT`: maximum number of bytes the instance may contain.
    """

    LIMIT: ClassVar[int]
    """Maximum number of bytes the instance may contain."""

    def __new__(cls, value: Any = b"") -> Self:
        """
        Create and validate a new byte list.

        Raises:
            WireLengthError: If the byte length exceeds `LIMIT`.
        """
        if not hasattr(cls, "LIMIT"):
            raise TypeError(f"{cls.__name__} must define LIMIT")

        b = _to_bytes(value, cls.__name__)
        if len(b) > cls.LIMIT:
            raise WireLengthError(cls.__name__, expected=cls.LIMIT, actual=len(b), is_limit=True)
        return super().__new__(cls, b)


class ByteList32(BaseByteList):
    """Variable-length byte list with a limit of 32 bytes."""

    LIMIT = 32


class ByteList1G(BaseByteList):
    """Variable-length byte list with a limit of 2**30 bytes."""

    LIMIT = 2**30
