"""
Beacon API models that are not consensus containers.

These describe node views (genesis, finality, validator summaries), node
status, validator duties, and the structured error body.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum, StrEnum
from typing import Generic, TypeVar

from beacon_api_client.consensus import (
    BLSPubkey,
    CommitteeIndex,
    ExecutionAddress,
    ForkName,
    Gwei,
    Root,
    Slot,
    ValidatorIndex,
    Version,
)
from beacon_api_client.consensus.phase0 import Checkpoint, SignedBeaconBlockHeader, Validator
from beacon_api_client.types import BaseBitvector, Uint64, WireModel

T = TypeVar("T")


@dataclass(frozen=True, slots=True)
class Versioned(Generic[T]):
    """
    A fork-dependent response, together with the fork that shaped it.

    `execution_optimistic` and `finalized` are `None` when the node did not
    report them.
    """

    version: ForkName
    """Fork whose shape `data` was decoded with."""

    data: T
    """The decoded value."""

    execution_optimistic: bool | None = None
    finalized: bool | None = None


class IndexedError(WireModel):
    """Failure of one item of a batch submission."""

    index: int
    message: str


class ErrorMessage(WireModel):
    """The structured error body returned with non-2xx statuses."""

    code: int
    message: str
    stacktraces: tuple[str, ...] | None = None
    failures: tuple[IndexedError, ...] = ()


# -----------------------------------------------------------------------------
# Beacon
# -----------------------------------------------------------------------------


class GenesisDetails(WireModel):
    genesis_time: Uint64
    genesis_validators_root: Root
    genesis_fork_version: Version


class RootData(WireModel):
    root: Root


class FinalityCheckpoints(WireModel):
    previous_justified: Checkpoint
    current_justified: Checkpoint
    finalized: Checkpoint


class ValidatorStatus(StrEnum):
    """Lifecycle status of a validator, fine-grained and coarse."""

    PENDING_INITIALIZED = "pending_initialized"
    PENDING_QUEUED = "pending_queued"
    ACTIVE_ONGOING = "active_ongoing"
    ACTIVE_EXITING = "active_exiting"
    ACTIVE_SLASHED = "active_slashed"
    EXITED_UNSLASHED = "exited_unslashed"
    EXITED_SLASHED = "exited_slashed"
    WITHDRAWAL_POSSIBLE = "withdrawal_possible"
    WITHDRAWAL_DONE = "withdrawal_done"

    # Coarse statuses, accepted as query filters.
    ACTIVE = "active"
    PENDING = "pending"
    EXITED = "exited"
    WITHDRAWAL = "withdrawal"


class ValidatorSummary(WireModel):
    index: ValidatorIndex
    balance: Gwei
    status: ValidatorStatus
    validator: Validator


class BalanceSummary(WireModel):
    index: ValidatorIndex
    balance: Gwei


class CommitteeSummary(WireModel):
    index: CommitteeIndex
    slot: Slot
    validators: tuple[ValidatorIndex, ...]


class SyncCommitteeSummary(WireModel):
    validators: tuple[ValidatorIndex, ...]
    validator_aggregates: tuple[tuple[ValidatorIndex, ...], ...]


class BeaconHeaderSummary(WireModel):
    root: Root
    canonical: bool
    header: SignedBeaconBlockHeader


# -----------------------------------------------------------------------------
# Config
# -----------------------------------------------------------------------------


class DepositContract(WireModel):
    chain_id: Uint64
    address: ExecutionAddress


# -----------------------------------------------------------------------------
# Node
# -----------------------------------------------------------------------------


class AttnetsBits(BaseBitvector):
    """Attestation subnets a node is subscribed to."""

    LENGTH = 64


class SyncnetsBits(BaseBitvector):
    """Sync committee subnets a node is subscribed to."""

    LENGTH = 4


class NodeMetadata(WireModel):
    seq_number: Uint64
    attnets: AttnetsBits
    syncnets: SyncnetsBits | None = None


class NetworkIdentity(WireModel):
    peer_id: str
    enr: str
    p2p_addresses: tuple[str, ...]
    discovery_addresses: tuple[str, ...]
    metadata: NodeMetadata


class PeerState(StrEnum):
    DISCONNECTED = "disconnected"
    CONNECTING = "connecting"
    CONNECTED = "connected"
    DISCONNECTING = "disconnecting"


class ConnectionDirection(StrEnum):
    INBOUND = "inbound"
    OUTBOUND = "outbound"


class PeerDescription(WireModel):
    peer_id: str
    enr: str | None = None
    last_seen_p2p_address: str
    state: PeerState
    direction: ConnectionDirection


class PeerCount(WireModel):
    disconnected: Uint64
    connecting: Uint64
    connected: Uint64
    disconnecting: Uint64


class NodeVersion(WireModel):
    version: str


class SyncStatus(WireModel):
    head_slot: Slot
    sync_distance: Slot
    is_syncing: bool
    is_optimistic: bool | None = None
    el_offline: bool | None = None


class HealthStatus(Enum):
    """Node health, reported through the status code alone."""

    READY = 200
    SYNCING = 206
    NOT_INITIALIZED = 503


# -----------------------------------------------------------------------------
# Validator
# -----------------------------------------------------------------------------


class AttesterDuty(WireModel):
    pubkey: BLSPubkey
    validator_index: ValidatorIndex
    committee_index: CommitteeIndex
    committee_length: Uint64
    committees_at_slot: Uint64
    validator_committee_index: Uint64
    slot: Slot


class AttesterDuties(WireModel):
    """Attester duties of one epoch, valid while `dependent_root` is canonical."""

    dependent_root: Root
    execution_optimistic: bool | None = None
    data: tuple[AttesterDuty, ...]


class ProposerDuty(WireModel):
    pubkey: BLSPubkey
    validator_index: ValidatorIndex
    slot: Slot


class ProposerDuties(WireModel):
    """Proposer duties of one epoch, valid while `dependent_root` is canonical."""

    dependent_root: Root
    execution_optimistic: bool | None = None
    data: tuple[ProposerDuty, ...]


class SyncCommitteeDuty(WireModel):
    pubkey: BLSPubkey
    validator_index: ValidatorIndex
    validator_sync_committee_indices: tuple[Uint64, ...]


class ProposerPreparation(WireModel):
    """Fee recipient to use when the validator proposes."""

    validator_index: ValidatorIndex
    fee_recipient: ExecutionAddress
