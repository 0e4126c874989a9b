"""Bellatrix containers: the execution payload enters the block."""

from beacon_api_client.types import (
    ByteList1G,
    ByteList32,
    Bytes32,
    Bytes256,
    Uint64,
    Uint256,
    WireModel,
)

from . import altair
from .primitives import ExecutionAddress, Hash32


class Transaction(ByteList1G):
    """An opaque RLP-encoded execution transaction."""


class ExecutionPayload(WireModel):
    parent_hash: Hash32
    fee_recipient: ExecutionAddress
    state_root: Bytes32
    receipts_root: Bytes32
    logs_bloom: Bytes256
    prev_randao: Bytes32
    block_number: Uint64
    gas_limit: Uint64
    gas_used: Uint64
    timestamp: Uint64
    extra_data: ByteList32
    base_fee_per_gas: Uint256
    block_hash: Hash32
    transactions: tuple[Transaction, ...]


class BeaconBlockBody(altair.BeaconBlockBody):
    execution_payload: ExecutionPayload


class BeaconBlock(altair.BeaconBlock):
    body: BeaconBlockBody


class SignedBeaconBlock(altair.SignedBeaconBlock):
    message: BeaconBlock
