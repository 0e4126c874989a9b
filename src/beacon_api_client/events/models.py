"""
Typed events of the Beacon API event stream.

Each `EventKind` names one SSE topic. Its payload is decoded into a wire
model, then wrapped in a domain event class tagged with that kind. Every
domain event corresponds to exactly one SSE frame.

Payloads that are full consensus objects (attestations, slashings, exits,
...) reuse the consensus containers. The remaining payloads are the
event-specific summaries defined below.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import StrEnum
from typing import ClassVar

from beacon_api_client.consensus import (
    BlobIndex,
    ColumnIndex,
    Epoch,
    ExecutionAddress,
    ForkName,
    ForkVariants,
    Hash32,
    KZGCommitment,
    Root,
    Slot,
    ValidatorIndex,
)
from beacon_api_client.consensus import altair, capella, electra, phase0
from beacon_api_client.types import Bytes32, Uint64, WireModel


class EventKind(StrEnum):
    """
    Known event topics.

    Tags are matched exactly and case-sensitively.
    """

    HEAD = "head"
    BLOCK = "block"
    BLOCK_GOSSIP = "block_gossip"
    ATTESTATION = "attestation"
    SINGLE_ATTESTATION = "single_attestation"
    VOLUNTARY_EXIT = "voluntary_exit"
    BLS_TO_EXECUTION_CHANGE = "bls_to_execution_change"
    PROPOSER_SLASHING = "proposer_slashing"
    ATTESTER_SLASHING = "attester_slashing"
    FINALIZED_CHECKPOINT = "finalized_checkpoint"
    CHAIN_REORG = "chain_reorg"
    CONTRIBUTION_AND_PROOF = "contribution_and_proof"
    PAYLOAD_ATTRIBUTES = "payload_attributes"
    BLOB_SIDECAR = "blob_sidecar"
    DATA_COLUMN_SIDECAR = "data_column_sidecar"


# -----------------------------------------------------------------------------
# Payloads
# -----------------------------------------------------------------------------


class Head(WireModel):
    """The node's canonical head changed."""

    slot: Slot
    block: Root
    state: Root
    epoch_transition: bool
    previous_duty_dependent_root: Root
    current_duty_dependent_root: Root
    execution_optimistic: bool = False


class Block(WireModel):
    """A block was imported into the fork choice."""

    slot: Slot
    block: Root
    execution_optimistic: bool = False


class BlockGossip(WireModel):
    """A block passed gossip validation, before import."""

    slot: Slot
    block: Root


class FinalizedCheckpoint(WireModel):
    block: Root
    state: Root
    epoch: Epoch
    execution_optimistic: bool = False


class ChainReorg(WireModel):
    """The head moved to a block that does not descend from the old head."""

    slot: Slot
    depth: Uint64
    old_head_block: Root
    new_head_block: Root
    old_head_state: Root
    new_head_state: Root
    epoch: Epoch
    execution_optimistic: bool = False


class BlobSidecarSummary(WireModel):
    """A blob sidecar was received, identified by its commitment."""

    block_root: Root
    index: BlobIndex
    slot: Slot
    kzg_commitment: KZGCommitment
    versioned_hash: Hash32


class DataColumnSidecarSummary(WireModel):
    """A data column sidecar was received."""

    block_root: Root
    index: ColumnIndex
    slot: Slot
    kzg_commitments: tuple[KZGCommitment, ...]


class PayloadAttributesV1(WireModel):
    timestamp: Uint64
    prev_randao: Bytes32
    suggested_fee_recipient: ExecutionAddress


class PayloadAttributesV2(PayloadAttributesV1):
    withdrawals: tuple[capella.Withdrawal, ...]


class PayloadAttributesV3(PayloadAttributesV2):
    parent_beacon_block_root: Root


class PayloadAttributesData(WireModel):
    """Everything an execution client needs to build the next payload."""

    proposer_index: ValidatorIndex
    proposal_slot: Slot
    parent_block_number: Uint64
    parent_block_root: Root
    parent_block_hash: Hash32
    payload_attributes: PayloadAttributesV1


class PayloadAttributesDataV2(PayloadAttributesData):
    payload_attributes: PayloadAttributesV2


class PayloadAttributesDataV3(PayloadAttributesData):
    payload_attributes: PayloadAttributesV3


PAYLOAD_ATTRIBUTES = ForkVariants(
    "PayloadAttributes",
    {
        ForkName.BELLATRIX: PayloadAttributesData,
        ForkName.CAPELLA: PayloadAttributesDataV2,
        ForkName.DENEB: PayloadAttributesDataV3,
        ForkName.ELECTRA: PayloadAttributesDataV3,
        ForkName.FULU: PayloadAttributesDataV3,
    },
)
"""Payload attributes are only emitted from Bellatrix on."""


# -----------------------------------------------------------------------------
# Domain events
# -----------------------------------------------------------------------------


@dataclass(frozen=True, slots=True)
class HeadEvent:
    KIND: ClassVar[EventKind] = EventKind.HEAD

    head: Head


@dataclass(frozen=True, slots=True)
class BlockEvent:
    KIND: ClassVar[EventKind] = EventKind.BLOCK

    block: Block


@dataclass(frozen=True, slots=True)
class BlockGossipEvent:
    KIND: ClassVar[EventKind] = EventKind.BLOCK_GOSSIP

    block: BlockGossip


@dataclass(frozen=True, slots=True)
class AttestationEvent:
    """An aggregate or unaggregated attestation passed validation."""

    KIND: ClassVar[EventKind] = EventKind.ATTESTATION

    attestation: phase0.Attestation | electra.Attestation
    fork: ForkName
    """Fork whose shape the attestation was decoded with."""


@dataclass(frozen=True, slots=True)
class SingleAttestationEvent:
    KIND: ClassVar[EventKind] = EventKind.SINGLE_ATTESTATION

    attestation: electra.SingleAttestation


@dataclass(frozen=True, slots=True)
class VoluntaryExitEvent:
    KIND: ClassVar[EventKind] = EventKind.VOLUNTARY_EXIT

    exit: phase0.SignedVoluntaryExit


@dataclass(frozen=True, slots=True)
class BlsToExecutionChangeEvent:
    KIND: ClassVar[EventKind] = EventKind.BLS_TO_EXECUTION_CHANGE

    change: capella.SignedBLSToExecutionChange


@dataclass(frozen=True, slots=True)
class ProposerSlashingEvent:
    KIND: ClassVar[EventKind] = EventKind.PROPOSER_SLASHING

    slashing: phase0.ProposerSlashing


@dataclass(frozen=True, slots=True)
class AttesterSlashingEvent:
    KIND: ClassVar[EventKind] = EventKind.ATTESTER_SLASHING

    slashing: phase0.AttesterSlashing
    fork: ForkName


@dataclass(frozen=True, slots=True)
class FinalizedCheckpointEvent:
    KIND: ClassVar[EventKind] = EventKind.FINALIZED_CHECKPOINT

    checkpoint: FinalizedCheckpoint


@dataclass(frozen=True, slots=True)
class ChainReorgEvent:
    KIND: ClassVar[EventKind] = EventKind.CHAIN_REORG

    reorg: ChainReorg


@dataclass(frozen=True, slots=True)
class ContributionAndProofEvent:
    KIND: ClassVar[EventKind] = EventKind.CONTRIBUTION_AND_PROOF

    contribution: altair.SignedContributionAndProof


@dataclass(frozen=True, slots=True)
class PayloadAttributesEvent:
    """
    Attributes for the next execution payload.

    The shape of `data` depends on `version`, taken from the payload itself.
    """

    KIND: ClassVar[EventKind] = EventKind.PAYLOAD_ATTRIBUTES

    version: ForkName
    data: PayloadAttributesData


@dataclass(frozen=True, slots=True)
class BlobSidecarEvent:
    KIND: ClassVar[EventKind] = EventKind.BLOB_SIDECAR

    sidecar: BlobSidecarSummary


@dataclass(frozen=True, slots=True)
class DataColumnSidecarEvent:
    KIND: ClassVar[EventKind] = EventKind.DATA_COLUMN_SIDECAR

    sidecar: DataColumnSidecarSummary


DomainEvent = (
    HeadEvent
    | BlockEvent
    | BlockGossipEvent
    | AttestationEvent
    | SingleAttestationEvent
    | VoluntaryExitEvent
    | BlsToExecutionChangeEvent
    | ProposerSlashingEvent
    | AttesterSlashingEvent
    | FinalizedCheckpointEvent
    | ChainReorgEvent
    | ContributionAndProofEvent
    | PayloadAttributesEvent
    | BlobSidecarEvent
    | DataColumnSidecarEvent
)
"""Tagged union of the known events; `KIND` is the tag."""


@dataclass(frozen=True, slots=True)
class StreamGap:
    """
    Events may have been missed while the stream was disconnected.

    Yielded once per disconnection, after the stream is connected again.
    """

    reason: str
    """Why the previous connection ended."""

    last_event_id: str | None
    """Id of the last event seen before the gap, if the node sends ids."""

    resumed: bool
    """Whether the new connection asked the node to resume from that id."""
