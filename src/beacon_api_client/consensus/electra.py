"""
Electra containers.

Attestations may now span every committee of a slot, so the aggregation
bits grow and a committee bitvector is added. Execution-layer requests
(deposits, withdrawals, consolidations) are carried in the block body.

Fulu reuses these shapes unchanged.
"""

from beacon_api_client.types import BaseBitlist, BaseBitvector, Bytes32, Uint64, WireModel

from . import deneb, phase0
from .constants import MAX_COMMITTEES_PER_SLOT, MAX_VALIDATORS_PER_COMMITTEE
from .primitives import (
    BLSPubkey,
    BLSSignature,
    CommitteeIndex,
    ExecutionAddress,
    Gwei,
    ValidatorIndex,
)


class AggregationBits(BaseBitlist):
    """Participation bits across all committees of a slot."""

    LIMIT = MAX_VALIDATORS_PER_COMMITTEE * MAX_COMMITTEES_PER_SLOT


class CommitteeBits(BaseBitvector):
    """Which committees of the slot an attestation covers."""

    LENGTH = MAX_COMMITTEES_PER_SLOT


class Attestation(WireModel):
    aggregation_bits: AggregationBits
    data: phase0.AttestationData
    signature: BLSSignature
    committee_bits: CommitteeBits


class SingleAttestation(WireModel):
    """An unaggregated attestation naming its attester."""

    committee_index: CommitteeIndex
    attester_index: ValidatorIndex
    data: phase0.AttestationData
    signature: BLSSignature


class IndexedAttestation(phase0.IndexedAttestation):
    """Same shape as phase 0, with a larger index limit."""


class AttesterSlashing(phase0.AttesterSlashing):
    attestation_1: IndexedAttestation
    attestation_2: IndexedAttestation


class DepositRequest(WireModel):
    pubkey: BLSPubkey
    withdrawal_credentials: Bytes32
    amount: Gwei
    signature: BLSSignature
    index: Uint64


class WithdrawalRequest(WireModel):
    source_address: ExecutionAddress
    validator_pubkey: BLSPubkey
    amount: Gwei


class ConsolidationRequest(WireModel):
    source_address: ExecutionAddress
    source_pubkey: BLSPubkey
    target_pubkey: BLSPubkey


class ExecutionRequests(WireModel):
    deposits: tuple[DepositRequest, ...]
    withdrawals: tuple[WithdrawalRequest, ...]
    consolidations: tuple[ConsolidationRequest, ...]


class BeaconBlockBody(deneb.BeaconBlockBody):
    attester_slashings: tuple[AttesterSlashing, ...]  # type: ignore[assignment]
    attestations: tuple[Attestation, ...]  # type: ignore[assignment]
    execution_requests: ExecutionRequests


class BeaconBlock(deneb.BeaconBlock):
    body: BeaconBlockBody


class SignedBeaconBlock(deneb.SignedBeaconBlock):
    message: BeaconBlock
