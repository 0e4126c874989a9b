"""Bitvector and Bitlist types.

This module provides two immutable bit collection types:

- BaseBitvector: fixed-length sequence of booleans.
- BaseBitlist: variable-length sequence of booleans with max capacity.

On the wire both are the `0x` hex of their SSZ encoding:
- Bitvector packs bits little-endian within each byte (bit 0 -> LSB).
- Bitlist packs bits the same way and appends a single delimiter bit set to 1
  immediately after the last data bit (may create a new byte).

Concrete types inherit from the base classes and specify LENGTH or LIMIT:
- class MyBitvector(BaseBitvector): LENGTH = 128
- class MyBitlist(BaseBitlist): LIMIT = 2048
"""

from __future__ import annotations

from abc import ABCMeta, abstractmethod
from typing import Any, ClassVar, Iterable

from pydantic import GetCoreSchemaHandler
from pydantic_core import core_schema
from typing_extensions import Self

from .byte_arrays import decode_hex, encode_hex
from .exceptions import WireEncodingError, WireLengthError


def _pack(bits: Iterable[bool], byte_len: int) -> bytearray:
    """Pack bits little-endian: bit i goes to byte i // 8 at position i % 8."""
    byte_array = bytearray(byte_len)
    for i, bit in enumerate(bits):
        if bit:
            byte_array[i // 8] |= 1 << (i % 8)
    return byte_array


def _unpack(data: bytes, num_bits: int) -> tuple[bool, ...]:
    return tuple(bool((data[i // 8] >> (i % 8)) & 1) for i in range(num_bits))


class _WireBits(tuple[bool, ...], metaclass=ABCMeta):
    """Shared pydantic plumbing for hex-encoded bitfields."""

    def __new__(cls, bits: Iterable[Any] = ()) -> Self:
        values = tuple(bool(bit) for bit in bits)
        cls._check_length(len(values))
        return super().__new__(cls, values)

    @classmethod
    @abstractmethod
    def _check_length(cls, num_bits: int) -> None:
        """Reject a bit count the type cannot hold."""

    @abstractmethod
    def encode_bytes(self) -> bytes:
        """Encode to SSZ bytes."""

    @classmethod
    @abstractmethod
    def decode_bytes(cls, data: bytes) -> Self:
        """Decode from SSZ bytes."""

    @classmethod
    def from_wire(cls, value: Any) -> Self:
        """Decode a `0x` hex string (or an iterable of bits) into an instance."""
        if isinstance(value, cls):
            return value
        if isinstance(value, str):
            return cls.decode_bytes(decode_hex(value, cls.__name__))
        if isinstance(value, (list, tuple)):
            return cls(value)
        raise WireEncodingError(cls.__name__, "expected a 0x-prefixed hex string", value)

    def to_wire(self) -> str:
        """Encode the bits as the `0x` hex of their SSZ encoding."""
        return encode_hex(self.encode_bytes())

    @classmethod
    def __get_pydantic_core_schema__(
        cls, source_type: Any, handler: GetCoreSchemaHandler
    ) -> core_schema.CoreSchema:
        """Hook into Pydantic's validation system."""
        return core_schema.no_info_plain_validator_function(
            cls.from_wire,
            serialization=core_schema.plain_serializer_function_ser_schema(
                lambda instance: instance.to_wire(), when_used="json"
            ),
        )

    def __repr__(self) -> str:
        bits = "".join("1" if bit else "0" for bit in self)
        return f"{type(self).__name__}({bits})"


class BaseBitvector(_WireBits):
    """
    Base class for fixed-length bit vectors.

    Immutable collection with exactly LENGTH bits.
    """

    LENGTH: ClassVar[int]
    """Number of bits in the vector."""

    @classmethod
    def _check_length(cls, num_bits: int) -> None:
        if not hasattr(cls, "LENGTH"):
            raise TypeError(f"{cls.__name__} must define LENGTH")
        if num_bits != cls.LENGTH:
            raise WireLengthError(cls.__name__, expected=cls.LENGTH, actual=num_bits, unit="bits")

    @classmethod
    def get_byte_length(cls) -> int:
        """Get the byte length for the fixed-size bitvector."""
        return (cls.LENGTH + 7) // 8  # Ceiling division

    def encode_bytes(self) -> bytes:
        """Encode to SSZ bytes (no delimiter bit)."""
        return bytes(_pack(self, self.get_byte_length()))

    @classmethod
    def decode_bytes(cls, data: bytes) -> Self:
        """
        Decode from SSZ bytes.

        Expects exactly ceil(LENGTH / 8) bytes. Padding bits above LENGTH
        must be zero.
        """
        expected = cls.get_byte_length()
        if len(data) != expected:
            raise WireLengthError(cls.__name__, expected=expected, actual=len(data))
        if cls.LENGTH % 8 and data[-1] >> (cls.LENGTH % 8):
            raise WireEncodingError(cls.__name__, "padding bits must be zero", encode_hex(data))
        return cls(_unpack(data, cls.LENGTH))


class BaseBitlist(_WireBits):
    """
    Base class for variable-length bit lists.

    Immutable collection with 0 to LIMIT bits.
    """

    LIMIT: ClassVar[int]
    """Maximum number of bits allowed."""

    @classmethod
    def _check_length(cls, num_bits: int) -> None:
        if not hasattr(cls, "LIMIT"):
            raise TypeError(f"{cls.__name__} must define LIMIT")
        if num_bits > cls.LIMIT:
            raise WireLengthError(
                cls.__name__, expected=cls.LIMIT, actual=num_bits, is_limit=True, unit="bits"
            )

    def encode_bytes(self) -> bytes:
        """
        Encode to SSZ bytes with a trailing delimiter bit.

        Data bits are packed little-endian within each byte.
        Then a single delimiter bit set to 1 is placed immediately after
        the last data bit. If the last data bit ends a byte (num_bits % 8 == 0),
        the delimiter is a new byte 0b00000001 appended at the end.
        """
        num_bits = len(self)
        byte_array = _pack(self, num_bits // 8 + 1)
        byte_array[num_bits // 8] |= 1 << (num_bits % 8)
        return bytes(byte_array)

    @classmethod
    def decode_bytes(cls, data: bytes) -> Self:
        """
        Decode from SSZ bytes with a delimiter bit.

        The delimiter is the highest set bit of the last byte. A last byte of
        zero has no delimiter and is rejected, which also makes the encoding
        canonical: re-encoding yields the same bytes.
        """
        if len(data) == 0:
            raise WireEncodingError(cls.__name__, "empty bitlist has no delimiter bit")
        if data[-1] == 0:
            raise WireEncodingError(cls.__name__, "last byte has no delimiter bit", encode_hex(data))

        num_bits = (len(data) - 1) * 8 + data[-1].bit_length() - 1
        cls._check_length(num_bits)
        return cls(_unpack(data, num_bits))
