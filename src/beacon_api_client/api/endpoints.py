"""
Endpoint descriptors of the Beacon API.

An `EndpointDescriptor` is an immutable description of one REST call: its
method, its path template and the shape of its successful response. The
catalog below names every endpoint this client speaks; `BeaconApiClient`
methods are thin wrappers over `call(descriptor, params)`.

Path templates match the published Beacon API paths exactly.
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from enum import StrEnum
from typing import Any

from beacon_api_client.consensus import ForkName, ForkVariants, variants
from beacon_api_client.consensus.capella import SignedBLSToExecutionChange
from beacon_api_client.consensus.deneb import BlobSidecar
from beacon_api_client.consensus.phase0 import (
    AttestationData,
    Fork,
    ProposerSlashing,
    SignedVoluntaryExit,
)

from .mapper import type_name
from .models import (
    AttesterDuties,
    BalanceSummary,
    BeaconHeaderSummary,
    CommitteeSummary,
    DepositContract,
    FinalityCheckpoints,
    GenesisDetails,
    NetworkIdentity,
    NodeVersion,
    PeerCount,
    PeerDescription,
    ProposerDuties,
    RootData,
    SyncCommitteeDuty,
    SyncCommitteeSummary,
    SyncStatus,
    ValidatorSummary,
)


class HttpMethod(StrEnum):
    GET = "GET"
    POST = "POST"


@dataclass(frozen=True, slots=True, eq=False)
class EndpointDescriptor:
    """Immutable description of one Beacon API endpoint."""

    name: str
    """Stable name, used in errors, logs and metrics."""

    method: HttpMethod
    """HTTP method."""

    path: str
    """Path template with `{placeholders}` for path parameters."""

    response: Any = None
    """Type of the (unwrapped) response data; None if there is no body."""

    versioned: ForkVariants | None = None
    """Fork-dependent response type; the result is then `Versioned`."""

    many: bool = False
    """Whether a versioned response holds a list of the variant."""

    unwrap: bool = True
    """Whether the response wraps its payload in a `data` field."""

    status_only: bool = False
    """Whether the result is carried by the status code alone."""

    sends_version: bool = False
    """Whether requests must carry the `Eth-Consensus-Version` header."""

    @property
    def response_name(self) -> str:
        """Readable name of the response type."""
        if self.versioned is not None:
            return f"{self.versioned.name}[]" if self.many else self.versioned.name
        return type_name(self.response) if self.response is not None else self.name


@dataclass(frozen=True, slots=True)
class RequestParams:
    """Values for one call of an endpoint."""

    path: Mapping[str, Any] = field(default_factory=dict)
    """Values substituted into the path template."""

    query: Mapping[str, Any] = field(default_factory=dict)
    """Query parameters; `None` values are dropped."""

    body: Any = None
    """Request body, encoded to JSON by the Type Mapper."""

    fork: ForkName | None = None
    """Fork of the body (POST) or expected fork of the response (GET)."""

    headers: Mapping[str, str] = field(default_factory=dict)
    """Extra request headers."""


GET = HttpMethod.GET
POST = HttpMethod.POST

# -----------------------------------------------------------------------------
# Beacon
# -----------------------------------------------------------------------------

GET_GENESIS = EndpointDescriptor("get_genesis", GET, "/eth/v1/beacon/genesis", GenesisDetails)

GET_STATE_ROOT = EndpointDescriptor(
    "get_state_root", GET, "/eth/v1/beacon/states/{state_id}/root", RootData
)

GET_STATE_FORK = EndpointDescriptor(
    "get_state_fork", GET, "/eth/v1/beacon/states/{state_id}/fork", Fork
)

GET_FINALITY_CHECKPOINTS = EndpointDescriptor(
    "get_finality_checkpoints",
    GET,
    "/eth/v1/beacon/states/{state_id}/finality_checkpoints",
    FinalityCheckpoints,
)

GET_VALIDATORS = EndpointDescriptor(
    "get_validators",
    GET,
    "/eth/v1/beacon/states/{state_id}/validators",
    tuple[ValidatorSummary, ...],
)

GET_VALIDATOR = EndpointDescriptor(
    "get_validator",
    GET,
    "/eth/v1/beacon/states/{state_id}/validators/{validator_id}",
    ValidatorSummary,
)

GET_VALIDATOR_BALANCES = EndpointDescriptor(
    "get_validator_balances",
    GET,
    "/eth/v1/beacon/states/{state_id}/validator_balances",
    tuple[BalanceSummary, ...],
)

GET_COMMITTEES = EndpointDescriptor(
    "get_committees",
    GET,
    "/eth/v1/beacon/states/{state_id}/committees",
    tuple[CommitteeSummary, ...],
)

GET_SYNC_COMMITTEES = EndpointDescriptor(
    "get_sync_committees",
    GET,
    "/eth/v1/beacon/states/{state_id}/sync_committees",
    SyncCommitteeSummary,
)

GET_HEADERS = EndpointDescriptor(
    "get_headers", GET, "/eth/v1/beacon/headers", tuple[BeaconHeaderSummary, ...]
)

GET_HEADER = EndpointDescriptor(
    "get_header", GET, "/eth/v1/beacon/headers/{block_id}", BeaconHeaderSummary
)

GET_BLOCK = EndpointDescriptor(
    "get_block",
    GET,
    "/eth/v2/beacon/blocks/{block_id}",
    versioned=variants.SIGNED_BEACON_BLOCK,
)

POST_BLOCK = EndpointDescriptor("post_block", POST, "/eth/v2/beacon/blocks", sends_version=True)

GET_BLOCK_ROOT = EndpointDescriptor(
    "get_block_root", GET, "/eth/v1/beacon/blocks/{block_id}/root", RootData
)

GET_BLOCK_ATTESTATIONS = EndpointDescriptor(
    "get_block_attestations",
    GET,
    "/eth/v2/beacon/blocks/{block_id}/attestations",
    versioned=variants.ATTESTATION,
    many=True,
)

GET_BLOB_SIDECARS = EndpointDescriptor(
    "get_blob_sidecars",
    GET,
    "/eth/v1/beacon/blob_sidecars/{block_id}",
    tuple[BlobSidecar, ...],
)

GET_POOL_ATTESTATIONS = EndpointDescriptor(
    "get_pool_attestations",
    GET,
    "/eth/v2/beacon/pool/attestations",
    versioned=variants.ATTESTATION,
    many=True,
)

POST_POOL_ATTESTATIONS = EndpointDescriptor(
    "post_pool_attestations", POST, "/eth/v2/beacon/pool/attestations", sends_version=True
)

GET_POOL_ATTESTER_SLASHINGS = EndpointDescriptor(
    "get_pool_attester_slashings",
    GET,
    "/eth/v2/beacon/pool/attester_slashings",
    versioned=variants.ATTESTER_SLASHING,
    many=True,
)

GET_POOL_PROPOSER_SLASHINGS = EndpointDescriptor(
    "get_pool_proposer_slashings",
    GET,
    "/eth/v1/beacon/pool/proposer_slashings",
    tuple[ProposerSlashing, ...],
)

POST_POOL_PROPOSER_SLASHINGS = EndpointDescriptor(
    "post_pool_proposer_slashings", POST, "/eth/v1/beacon/pool/proposer_slashings"
)

GET_POOL_VOLUNTARY_EXITS = EndpointDescriptor(
    "get_pool_voluntary_exits",
    GET,
    "/eth/v1/beacon/pool/voluntary_exits",
    tuple[SignedVoluntaryExit, ...],
)

POST_POOL_VOLUNTARY_EXITS = EndpointDescriptor(
    "post_pool_voluntary_exits", POST, "/eth/v1/beacon/pool/voluntary_exits"
)

GET_POOL_BLS_TO_EXECUTION_CHANGES = EndpointDescriptor(
    "get_pool_bls_to_execution_changes",
    GET,
    "/eth/v1/beacon/pool/bls_to_execution_changes",
    tuple[SignedBLSToExecutionChange, ...],
)

POST_POOL_BLS_TO_EXECUTION_CHANGES = EndpointDescriptor(
    "post_pool_bls_to_execution_changes", POST, "/eth/v1/beacon/pool/bls_to_execution_changes"
)

# -----------------------------------------------------------------------------
# Config
# -----------------------------------------------------------------------------

GET_FORK_SCHEDULE = EndpointDescriptor(
    "get_fork_schedule", GET, "/eth/v1/config/fork_schedule", tuple[Fork, ...]
)

GET_SPEC = EndpointDescriptor("get_spec", GET, "/eth/v1/config/spec", dict[str, Any])

GET_DEPOSIT_CONTRACT = EndpointDescriptor(
    "get_deposit_contract", GET, "/eth/v1/config/deposit_contract", DepositContract
)

# -----------------------------------------------------------------------------
# Node
# -----------------------------------------------------------------------------

GET_NODE_IDENTITY = EndpointDescriptor(
    "get_node_identity", GET, "/eth/v1/node/identity", NetworkIdentity
)

GET_PEERS = EndpointDescriptor("get_peers", GET, "/eth/v1/node/peers", tuple[PeerDescription, ...])

GET_PEER = EndpointDescriptor("get_peer", GET, "/eth/v1/node/peers/{peer_id}", PeerDescription)

GET_PEER_COUNT = EndpointDescriptor("get_peer_count", GET, "/eth/v1/node/peer_count", PeerCount)

GET_NODE_VERSION = EndpointDescriptor("get_node_version", GET, "/eth/v1/node/version", NodeVersion)

GET_SYNCING = EndpointDescriptor("get_syncing", GET, "/eth/v1/node/syncing", SyncStatus)

GET_HEALTH = EndpointDescriptor("get_health", GET, "/eth/v1/node/health", status_only=True)

# -----------------------------------------------------------------------------
# Validator
# -----------------------------------------------------------------------------

POST_ATTESTER_DUTIES = EndpointDescriptor(
    "get_attester_duties",
    POST,
    "/eth/v1/validator/duties/attester/{epoch}",
    AttesterDuties,
    unwrap=False,
)

GET_PROPOSER_DUTIES = EndpointDescriptor(
    "get_proposer_duties",
    GET,
    "/eth/v1/validator/duties/proposer/{epoch}",
    ProposerDuties,
    unwrap=False,
)

POST_SYNC_DUTIES = EndpointDescriptor(
    "get_sync_duties",
    POST,
    "/eth/v1/validator/duties/sync/{epoch}",
    tuple[SyncCommitteeDuty, ...],
)

GET_ATTESTATION_DATA = EndpointDescriptor(
    "get_attestation_data", GET, "/eth/v1/validator/attestation_data", AttestationData
)

GET_AGGREGATE_ATTESTATION = EndpointDescriptor(
    "get_aggregate_attestation",
    GET,
    "/eth/v2/validator/aggregate_attestation",
    versioned=variants.ATTESTATION,
)

POST_PREPARE_BEACON_PROPOSER = EndpointDescriptor(
    "prepare_beacon_proposer", POST, "/eth/v1/validator/prepare_beacon_proposer"
)

# -----------------------------------------------------------------------------
# Events
# -----------------------------------------------------------------------------

GET_EVENTS = EndpointDescriptor("get_events", GET, "/eth/v1/events")
"""The SSE event stream; consumed by `Subscription`, not by `call`."""


ENDPOINTS: dict[str, EndpointDescriptor] = {
    descriptor.name: descriptor
    for descriptor in globals().copy().values()
    if isinstance(descriptor, EndpointDescriptor)
}
"""All endpoints by name."""
