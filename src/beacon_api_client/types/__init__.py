"""Wire-level primitive types for the Beacon API."""

from .base import WireModel
from .bitfields import BaseBitlist, BaseBitvector
from .byte_arrays import (
    BaseByteList,
    BaseBytes,
    Blob,
    ByteList1G,
    ByteList32,
    Bytes4,
    Bytes20,
    Bytes32,
    Bytes48,
    Bytes96,
    Bytes256,
    decode_hex,
    encode_hex,
)
from .exceptions import (
    WireEncodingError,
    WireFormatError,
    WireLengthError,
    WireOverflowError,
)
from .uint import BaseUint, Uint8, Uint64, Uint256

__all__ = [
    # Core types
    "WireModel",
    "BaseUint",
    "Uint8",
    "Uint64",
    "Uint256",
    "BaseBytes",
    "BaseByteList",
    "Bytes4",
    "Bytes20",
    "Bytes32",
    "Bytes48",
    "Bytes96",
    "Bytes256",
    "Blob",
    "ByteList32",
    "ByteList1G",
    "BaseBitvector",
    "BaseBitlist",
    "decode_hex",
    "encode_hex",
    # Exceptions
    "WireFormatError",
    "WireEncodingError",
    "WireLengthError",
    "WireOverflowError",
]
