"""Capella containers: withdrawals and BLS credential changes."""

from beacon_api_client.types import WireModel

from . import bellatrix
from .primitives import (
    BLSPubkey,
    BLSSignature,
    ExecutionAddress,
    Gwei,
    ValidatorIndex,
    WithdrawalIndex,
)


class Withdrawal(WireModel):
    index: WithdrawalIndex
    validator_index: ValidatorIndex
    address: ExecutionAddress
    amount: Gwei


class BLSToExecutionChange(WireModel):
    """Request to move a validator from BLS to execution withdrawal credentials."""

    validator_index: ValidatorIndex
    from_bls_pubkey: BLSPubkey
    to_execution_address: ExecutionAddress


class SignedBLSToExecutionChange(WireModel):
    message: BLSToExecutionChange
    signature: BLSSignature


class ExecutionPayload(bellatrix.ExecutionPayload):
    withdrawals: tuple[Withdrawal, ...]


class BeaconBlockBody(bellatrix.BeaconBlockBody):
    execution_payload: ExecutionPayload
    bls_to_execution_changes: tuple[SignedBLSToExecutionChange, ...]


class BeaconBlock(bellatrix.BeaconBlock):
    body: BeaconBlockBody


class SignedBeaconBlock(bellatrix.SignedBeaconBlock):
    message: BeaconBlock
