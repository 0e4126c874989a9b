"""
Encoders for the identifiers used in Beacon API paths and queries.

A state or block can be named by a keyword, a slot or a root. A validator
can be named by its index or its public key.
"""

from __future__ import annotations

import re
from typing import TypeAlias

from beacon_api_client.consensus import BLSPubkey, Root, Slot, ValidatorIndex
from beacon_api_client.types import WireFormatError

StateId: TypeAlias = str | int | bytes
"""`head`, `genesis`, `finalized`, `justified`, a slot, or a state root."""

BlockId: TypeAlias = str | int | bytes
"""`head`, `genesis`, `finalized`, a slot, or a block root."""

ValidatorId: TypeAlias = str | int | bytes
"""A validator index or a 48-byte public key."""

STATE_KEYWORDS = frozenset({"head", "genesis", "finalized", "justified"})
BLOCK_KEYWORDS = frozenset({"head", "genesis", "finalized"})

_DECIMAL = re.compile(r"0|[1-9][0-9]*")


def _encode(value: str | int | bytes, keywords: frozenset[str], kind: str) -> str:
    if isinstance(value, bool):
        raise TypeError(f"A {kind} cannot be a bool")
    try:
        if isinstance(value, int):
            return Slot(value).to_wire()
        if isinstance(value, (bytes, bytearray)):
            return Root(value).to_wire()
        if value in keywords:
            return value
        if _DECIMAL.fullmatch(value):
            return Slot.from_wire(value).to_wire()
        return Root.from_wire(value).to_wire()
    except WireFormatError as exc:
        raise ValueError(f"Invalid {kind}: {value!r}") from exc


def encode_state_id(value: StateId) -> str:
    """
    Encode a state identifier for use in a path.

    Raises:
        ValueError: If the value is not a keyword, slot or 32-byte root.
    """
    return _encode(value, STATE_KEYWORDS, "state id")


def encode_block_id(value: BlockId) -> str:
    """
    Encode a block identifier for use in a path.

    Raises:
        ValueError: If the value is not a keyword, slot or 32-byte root.
    """
    return _encode(value, BLOCK_KEYWORDS, "block id")


def encode_validator_id(value: ValidatorId) -> str:
    """
    Encode a validator identifier (index or public key).

    Raises:
        ValueError: If the value is neither an index nor a 48-byte public key.
    """
    if isinstance(value, bool):
        raise TypeError("A validator id cannot be a bool")
    try:
        if isinstance(value, int):
            return ValidatorIndex(value).to_wire()
        if isinstance(value, (bytes, bytearray)):
            return BLSPubkey(value).to_wire()
        if _DECIMAL.fullmatch(value):
            return ValidatorIndex.from_wire(value).to_wire()
        return BLSPubkey.from_wire(value).to_wire()
    except WireFormatError as exc:
        raise ValueError(f"Invalid validator id: {value!r}") from exc
