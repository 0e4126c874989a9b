"""Phase 0 containers."""

from pydantic import field_validator

from beacon_api_client.types import BaseBitlist, Bytes32, Uint64, WireLengthError, WireModel

from .constants import DEPOSIT_CONTRACT_TREE_DEPTH, MAX_VALIDATORS_PER_COMMITTEE
from .primitives import (
    BLSPubkey,
    BLSSignature,
    CommitteeIndex,
    Epoch,
    Gwei,
    Root,
    Slot,
    ValidatorIndex,
    Version,
)


class AggregationBits(BaseBitlist):
    """Participation bits of one committee."""

    LIMIT = MAX_VALIDATORS_PER_COMMITTEE


class Fork(WireModel):
    """Fork versions around the most recent fork of a state."""

    previous_version: Version
    current_version: Version
    epoch: Epoch


class Checkpoint(WireModel):
    """Represents a checkpoint in the chain's history."""

    epoch: Epoch
    """The epoch of the checkpoint."""

    root: Root
    """The root of the checkpoint's block."""


class BeaconBlockHeader(WireModel):
    """A block with its body replaced by the body root."""

    slot: Slot
    proposer_index: ValidatorIndex
    parent_root: Root
    state_root: Root
    body_root: Root


class SignedBeaconBlockHeader(WireModel):
    message: BeaconBlockHeader
    signature: BLSSignature


class AttestationData(WireModel):
    """The vote cast by an attestation."""

    slot: Slot
    index: CommitteeIndex
    beacon_block_root: Root
    source: Checkpoint
    target: Checkpoint


class Attestation(WireModel):
    """An aggregate attestation of one committee."""

    aggregation_bits: AggregationBits
    data: AttestationData
    signature: BLSSignature


class IndexedAttestation(WireModel):
    attesting_indices: tuple[ValidatorIndex, ...]
    data: AttestationData
    signature: BLSSignature


class AttesterSlashing(WireModel):
    """Two conflicting attestations signed by overlapping validators."""

    attestation_1: IndexedAttestation
    attestation_2: IndexedAttestation


class ProposerSlashing(WireModel):
    """Two conflicting block headers signed by the same proposer."""

    signed_header_1: SignedBeaconBlockHeader
    signed_header_2: SignedBeaconBlockHeader


class Eth1Data(WireModel):
    deposit_root: Root
    deposit_count: Uint64
    block_hash: Bytes32


class DepositData(WireModel):
    pubkey: BLSPubkey
    withdrawal_credentials: Bytes32
    amount: Gwei
    signature: BLSSignature


class Deposit(WireModel):
    proof: tuple[Bytes32, ...]
    """Merkle branch of `DEPOSIT_CONTRACT_TREE_DEPTH + 1` nodes."""

    data: DepositData

    @field_validator("proof")
    @classmethod
    def _check_proof_depth(cls, proof: tuple[Bytes32, ...]) -> tuple[Bytes32, ...]:
        if len(proof) != DEPOSIT_CONTRACT_TREE_DEPTH + 1:
            raise WireLengthError(
                "Deposit.proof",
                expected=DEPOSIT_CONTRACT_TREE_DEPTH + 1,
                actual=len(proof),
                unit="nodes",
            )
        return proof


class VoluntaryExit(WireModel):
    epoch: Epoch
    validator_index: ValidatorIndex


class SignedVoluntaryExit(WireModel):
    message: VoluntaryExit
    signature: BLSSignature


class Validator(WireModel):
    """A validator registry record."""

    pubkey: BLSPubkey
    withdrawal_credentials: Bytes32
    effective_balance: Gwei
    slashed: bool
    activation_eligibility_epoch: Epoch
    activation_epoch: Epoch
    exit_epoch: Epoch
    withdrawable_epoch: Epoch


class BeaconBlockBody(WireModel):
    randao_reveal: BLSSignature
    eth1_data: Eth1Data
    graffiti: Bytes32
    proposer_slashings: tuple[ProposerSlashing, ...]
    attester_slashings: tuple[AttesterSlashing, ...]
    attestations: tuple[Attestation, ...]
    deposits: tuple[Deposit, ...]
    voluntary_exits: tuple[SignedVoluntaryExit, ...]


class BeaconBlock(WireModel):
    slot: Slot
    proposer_index: ValidatorIndex
    parent_root: Root
    state_root: Root
    body: BeaconBlockBody


class SignedBeaconBlock(WireModel):
    message: BeaconBlock
    signature: BLSSignature
