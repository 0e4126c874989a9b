"""Altair containers: sync committees."""

from beacon_api_client.types import BaseBitvector, Uint64, WireModel

from . import phase0
from .constants import SYNC_COMMITTEE_SIZE, SYNC_COMMITTEE_SUBNET_COUNT
from .primitives import BLSSignature, Root, Slot, ValidatorIndex


class SyncCommitteeBits(BaseBitvector):
    """Participation bits of the whole sync committee."""

    LENGTH = SYNC_COMMITTEE_SIZE


class SyncCommitteeAggregationBits(BaseBitvector):
    """Participation bits of one sync subcommittee."""

    LENGTH = SYNC_COMMITTEE_SIZE // SYNC_COMMITTEE_SUBNET_COUNT


class SyncAggregate(WireModel):
    sync_committee_bits: SyncCommitteeBits
    sync_committee_signature: BLSSignature


class SyncCommitteeContribution(WireModel):
    """Aggregated sync committee signatures of one subcommittee."""

    slot: Slot
    beacon_block_root: Root
    subcommittee_index: Uint64
    aggregation_bits: SyncCommitteeAggregationBits
    signature: BLSSignature


class ContributionAndProof(WireModel):
    aggregator_index: ValidatorIndex
    contribution: SyncCommitteeContribution
    selection_proof: BLSSignature


class SignedContributionAndProof(WireModel):
    message: ContributionAndProof
    signature: BLSSignature


class BeaconBlockBody(phase0.BeaconBlockBody):
    sync_aggregate: SyncAggregate


class BeaconBlock(phase0.BeaconBlock):
    body: BeaconBlockBody


class SignedBeaconBlock(phase0.SignedBeaconBlock):
    message: BeaconBlock
