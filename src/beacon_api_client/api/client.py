"""
Beacon API client: the request layer and its typed operations.

Every typed method is a thin wrapper over `call(endpoint, params)`, which
performs one HTTP round trip and maps the outcome:

- 2xx: the body is decoded through the Type Mapper.
- non-2xx: `HttpStatusError` with the raw body and, when present, the
  structured error message.
- transport failure: `NetworkError` (`RequestTimeout` for timeouts).

Calls are never retried implicitly. A client holds no per-call state, so
concurrent calls on one instance are independent of each other and of any
open subscription.
"""

from __future__ import annotations

import json
import logging
import time
from collections.abc import Iterable, Sequence
from typing import Any

import httpx

from beacon_api_client import metrics
from beacon_api_client.config import ClientConfig
from beacon_api_client.consensus import (
    CommitteeIndex,
    Epoch,
    ForkName,
    ForkSchedule,
    Root,
    Slot,
    ValidatorIndex,
)
from beacon_api_client.consensus.capella import SignedBLSToExecutionChange
from beacon_api_client.consensus.deneb import BlobSidecar
from beacon_api_client.consensus.phase0 import (
    AttestationData,
    Fork,
    ProposerSlashing,
    SignedVoluntaryExit,
)
from beacon_api_client.events import (
    EventKind,
    EventStreamTransport,
    HttpxEventStreamTransport,
    Subscription,
    SubscriptionConfig,
)

from . import endpoints
from .endpoints import EndpointDescriptor, HttpMethod, RequestParams
from .errors import ApiError, DecodeError, NetworkError, RequestTimeout
from .identifiers import (
    BlockId,
    StateId,
    ValidatorId,
    encode_block_id,
    encode_state_id,
    encode_validator_id,
)
from .mapper import (
    VERSION_HEADER,
    decode_response,
    encode,
    encode_path,
    encode_query,
    status_error,
)
from .models import (
    AttesterDuties,
    BalanceSummary,
    BeaconHeaderSummary,
    CommitteeSummary,
    ConnectionDirection,
    DepositContract,
    FinalityCheckpoints,
    GenesisDetails,
    HealthStatus,
    NetworkIdentity,
    NodeVersion,
    PeerCount,
    PeerDescription,
    PeerState,
    ProposerDuties,
    ProposerPreparation,
    SyncCommitteeDuty,
    SyncCommitteeSummary,
    SyncStatus,
    ValidatorStatus,
    ValidatorSummary,
    Versioned,
)
from .result import Err, Ok, Result

logger = logging.getLogger(__name__)


def _validator_ids(ids: Iterable[ValidatorId] | None) -> list[str] | None:
    return None if ids is None else [encode_validator_id(value) for value in ids]


class BeaconApiClient:
    """
    Typed asyncio client for one beacon node.

    Use as an async context manager, or call `aclose()` when done:

        async with BeaconApiClient(ClientConfig(base_url=url)) as client:
            genesis = await client.get_genesis()
    """

    def __init__(
        self,
        config: ClientConfig | None = None,
        *,
        http_client: httpx.AsyncClient | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
        event_transport: EventStreamTransport | None = None,
    ) -> None:
        """
        Args:
            config: Node address and timeouts. Defaults to `ClientConfig()`.
            http_client: Client to use instead of an owned one. It is not
                closed by `aclose()`.
            transport: httpx transport for the owned client (e.g. a mock).
            event_transport: Transport for event streams. Defaults to
                streaming over the HTTP client.
        """
        self.config = config or ClientConfig()
        self._owns_http = http_client is None
        if http_client is None:
            http_client = httpx.AsyncClient(
                timeout=httpx.Timeout(
                    self.config.request_timeout, connect=self.config.connect_timeout
                ),
                headers={"User-Agent": self.config.user_agent, **self.config.headers},
                transport=transport,
            )
        self._http = http_client
        self._events = event_transport or HttpxEventStreamTransport(
            http_client, connect_timeout=self.config.connect_timeout
        )

    async def __aenter__(self) -> BeaconApiClient:
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        """Close the owned HTTP client."""
        if self._owns_http:
            await self._http.aclose()

    # -------------------------------------------------------------------------
    # Request layer
    # -------------------------------------------------------------------------

    def build_url(self, endpoint: EndpointDescriptor, path: dict[str, Any] | None = None) -> str:
        """Absolute URL of `endpoint` with its path parameters filled in."""
        return f"{self.config.root_url}{encode_path(endpoint.path, path or {})}"

    async def call(self, endpoint: EndpointDescriptor, params: RequestParams | None = None) -> Any:
        """
        Perform one request and decode its response.

        Returns:
            The decoded response; see `EndpointDescriptor` for its shape.

        Raises:
            NetworkError: If the transport failed.
            HttpStatusError: If the node answered with a non-2xx status.
            DecodeError: If the response did not match the expected shape.
            ValueError: If a versioned submission has no fork.
        """
        params = params or RequestParams()
        url = self.build_url(endpoint, dict(params.path))
        headers = {"Accept": "application/json", **params.headers}

        content: bytes | None = None
        if params.body is not None:
            content = json.dumps(encode(params.body)).encode()
            headers["Content-Type"] = "application/json"
        if endpoint.sends_version:
            if params.fork is None:
                raise ValueError(f"{endpoint.name} requires the fork of the submitted objects")
            headers[VERSION_HEADER] = params.fork.value

        logger.debug(f"{endpoint.method} {url}")
        outcome = "network_error"
        started = time.perf_counter()
        try:
            try:
                response = await self._http.request(
                    endpoint.method.value,
                    url,
                    params=encode_query(params.query),
                    headers=headers,
                    content=content,
                )
            except httpx.TimeoutException as exc:
                raise RequestTimeout(
                    f"Request timed out: {exc}", url=url, endpoint=endpoint.name
                ) from exc
            except httpx.TransportError as exc:
                raise NetworkError(
                    f"Request failed: {exc}", url=url, endpoint=endpoint.name
                ) from exc

            outcome = "http_error"
            if endpoint.status_only:
                try:
                    result: Any = HealthStatus(response.status_code)
                except ValueError:
                    raise status_error(
                        response.status_code, response.content, endpoint=endpoint.name
                    ) from None
                outcome = "ok"
                return result

            if not response.is_success:
                raise status_error(response.status_code, response.content, endpoint=endpoint.name)

            outcome = "decode_error"
            result = decode_response(
                endpoint,
                response.content,
                header_version=response.headers.get(VERSION_HEADER),
                fork=params.fork if endpoint.method is HttpMethod.GET else None,
            )
            outcome = "ok"
            return result
        finally:
            elapsed = time.perf_counter() - started
            metrics.requests_total.labels(endpoint=endpoint.name, outcome=outcome).inc()
            metrics.request_duration.labels(endpoint=endpoint.name).observe(elapsed)
            logger.debug(f"{endpoint.name}: {outcome} in {elapsed * 1000:.1f}ms")

    async def try_call(
        self, endpoint: EndpointDescriptor, params: RequestParams | None = None
    ) -> Result[Any]:
        """Like `call`, but return `Ok(value)` or `Err(error)` instead of raising."""
        try:
            return Ok(await self.call(endpoint, params))
        except ApiError as exc:
            return Err(exc)

    # -------------------------------------------------------------------------
    # Beacon
    # -------------------------------------------------------------------------

    async def get_genesis(self) -> GenesisDetails:
        return await self.call(endpoints.GET_GENESIS)

    async def get_state_root(self, state_id: StateId) -> Root:
        data = await self.call(
            endpoints.GET_STATE_ROOT, RequestParams(path={"state_id": encode_state_id(state_id)})
        )
        return data.root

    async def get_fork(self, state_id: StateId) -> Fork:
        """Fork versions in effect at the given state."""
        return await self.call(
            endpoints.GET_STATE_FORK, RequestParams(path={"state_id": encode_state_id(state_id)})
        )

    async def get_finality_checkpoints(self, state_id: StateId) -> FinalityCheckpoints:
        return await self.call(
            endpoints.GET_FINALITY_CHECKPOINTS,
            RequestParams(path={"state_id": encode_state_id(state_id)}),
        )

    async def get_validators(
        self,
        state_id: StateId,
        *,
        ids: Iterable[ValidatorId] | None = None,
        statuses: Iterable[ValidatorStatus] | None = None,
    ) -> tuple[ValidatorSummary, ...]:
        """
        Validators of a state, optionally filtered.

        Args:
            state_id: State to read.
            ids: Only these validators (indices or public keys).
            statuses: Only validators in one of these statuses.
        """
        return await self.call(
            endpoints.GET_VALIDATORS,
            RequestParams(
                path={"state_id": encode_state_id(state_id)},
                query={
                    "id": _validator_ids(ids),
                    "status": None if statuses is None else list(statuses),
                },
            ),
        )

    async def get_validator(self, state_id: StateId, validator_id: ValidatorId) -> ValidatorSummary:
        return await self.call(
            endpoints.GET_VALIDATOR,
            RequestParams(
                path={
                    "state_id": encode_state_id(state_id),
                    "validator_id": encode_validator_id(validator_id),
                }
            ),
        )

    async def get_validator_balances(
        self, state_id: StateId, *, ids: Iterable[ValidatorId] | None = None
    ) -> tuple[BalanceSummary, ...]:
        return await self.call(
            endpoints.GET_VALIDATOR_BALANCES,
            RequestParams(
                path={"state_id": encode_state_id(state_id)}, query={"id": _validator_ids(ids)}
            ),
        )

    async def get_committees(
        self,
        state_id: StateId,
        *,
        epoch: Epoch | int | None = None,
        index: CommitteeIndex | int | None = None,
        slot: Slot | int | None = None,
    ) -> tuple[CommitteeSummary, ...]:
        return await self.call(
            endpoints.GET_COMMITTEES,
            RequestParams(
                path={"state_id": encode_state_id(state_id)},
                query={"epoch": epoch, "index": index, "slot": slot},
            ),
        )

    async def get_sync_committees(
        self, state_id: StateId, *, epoch: Epoch | int | None = None
    ) -> SyncCommitteeSummary:
        return await self.call(
            endpoints.GET_SYNC_COMMITTEES,
            RequestParams(path={"state_id": encode_state_id(state_id)}, query={"epoch": epoch}),
        )

    async def get_headers(
        self, *, slot: Slot | int | None = None, parent_root: Root | None = None
    ) -> tuple[BeaconHeaderSummary, ...]:
        return await self.call(
            endpoints.GET_HEADERS,
            RequestParams(query={"slot": slot, "parent_root": parent_root}),
        )

    async def get_header(self, block_id: BlockId) -> BeaconHeaderSummary:
        return await self.call(
            endpoints.GET_HEADER, RequestParams(path={"block_id": encode_block_id(block_id)})
        )

    async def get_block(self, block_id: BlockId, *, fork: ForkName | None = None) -> Versioned[Any]:
        """
        A signed block, decoded with the shape of its fork.

        Args:
            block_id: Block to fetch.
            fork: Expected fork. When given, it must match the fork the node
                reports.
        """
        return await self.call(
            endpoints.GET_BLOCK,
            RequestParams(path={"block_id": encode_block_id(block_id)}, fork=fork),
        )

    async def get_block_root(self, block_id: BlockId) -> Root:
        data = await self.call(
            endpoints.GET_BLOCK_ROOT, RequestParams(path={"block_id": encode_block_id(block_id)})
        )
        return data.root

    async def get_block_attestations(self, block_id: BlockId) -> Versioned[tuple[Any, ...]]:
        return await self.call(
            endpoints.GET_BLOCK_ATTESTATIONS,
            RequestParams(path={"block_id": encode_block_id(block_id)}),
        )

    async def get_blob_sidecars(
        self, block_id: BlockId, *, indices: Iterable[int] | None = None
    ) -> tuple[BlobSidecar, ...]:
        return await self.call(
            endpoints.GET_BLOB_SIDECARS,
            RequestParams(
                path={"block_id": encode_block_id(block_id)},
                query={"indices": None if indices is None else list(indices)},
            ),
        )

    async def post_block(self, block: Any, *, fork: ForkName) -> None:
        """Publish a signed block of the given fork."""
        await self.call(endpoints.POST_BLOCK, RequestParams(body=block, fork=fork))

    async def get_pool_attestations(
        self,
        *,
        slot: Slot | int | None = None,
        committee_index: CommitteeIndex | int | None = None,
    ) -> Versioned[tuple[Any, ...]]:
        return await self.call(
            endpoints.GET_POOL_ATTESTATIONS,
            RequestParams(query={"slot": slot, "committee_index": committee_index}),
        )

    async def post_attestations(self, attestations: Sequence[Any], *, fork: ForkName) -> None:
        """
        Submit attestations to the pool.

        Raises:
            HttpStatusError: If any attestation is rejected; `failures` lists
                them by index.
        """
        await self.call(
            endpoints.POST_POOL_ATTESTATIONS, RequestParams(body=list(attestations), fork=fork)
        )

    async def get_pool_attester_slashings(self) -> Versioned[tuple[Any, ...]]:
        return await self.call(endpoints.GET_POOL_ATTESTER_SLASHINGS)

    async def get_pool_proposer_slashings(self) -> tuple[ProposerSlashing, ...]:
        return await self.call(endpoints.GET_POOL_PROPOSER_SLASHINGS)

    async def post_proposer_slashing(self, slashing: ProposerSlashing) -> None:
        await self.call(endpoints.POST_POOL_PROPOSER_SLASHINGS, RequestParams(body=slashing))

    async def get_pool_voluntary_exits(self) -> tuple[SignedVoluntaryExit, ...]:
        return await self.call(endpoints.GET_POOL_VOLUNTARY_EXITS)

    async def post_voluntary_exit(self, exit: SignedVoluntaryExit) -> None:
        await self.call(endpoints.POST_POOL_VOLUNTARY_EXITS, RequestParams(body=exit))

    async def get_pool_bls_to_execution_changes(self) -> tuple[SignedBLSToExecutionChange, ...]:
        return await self.call(endpoints.GET_POOL_BLS_TO_EXECUTION_CHANGES)

    async def post_bls_to_execution_changes(
        self, changes: Sequence[SignedBLSToExecutionChange]
    ) -> None:
        await self.call(
            endpoints.POST_POOL_BLS_TO_EXECUTION_CHANGES, RequestParams(body=list(changes))
        )

    # -------------------------------------------------------------------------
    # Config
    # -------------------------------------------------------------------------

    async def get_fork_schedule(self) -> tuple[Fork, ...]:
        return await self.call(endpoints.GET_FORK_SCHEDULE)

    async def get_spec(self) -> dict[str, Any]:
        """Raw configuration values of the node, as served."""
        return await self.call(endpoints.GET_SPEC)

    async def get_deposit_contract(self) -> DepositContract:
        return await self.call(endpoints.GET_DEPOSIT_CONTRACT)

    async def get_fork_schedule_table(self) -> ForkSchedule:
        """
        Fork activation epochs of the node's network.

        Raises:
            DecodeError: If the configuration holds an invalid fork epoch.
        """
        spec = await self.get_spec()
        try:
            return ForkSchedule.from_spec(spec)
        except ValueError as exc:
            raise DecodeError("ForkSchedule", str(exc), endpoint=endpoints.GET_SPEC.name) from exc

    # -------------------------------------------------------------------------
    # Node
    # -------------------------------------------------------------------------

    async def get_node_identity(self) -> NetworkIdentity:
        return await self.call(endpoints.GET_NODE_IDENTITY)

    async def get_peers(
        self,
        *,
        states: Iterable[PeerState] | None = None,
        directions: Iterable[ConnectionDirection] | None = None,
    ) -> tuple[PeerDescription, ...]:
        return await self.call(
            endpoints.GET_PEERS,
            RequestParams(
                query={
                    "state": None if states is None else list(states),
                    "direction": None if directions is None else list(directions),
                }
            ),
        )

    async def get_peer(self, peer_id: str) -> PeerDescription:
        return await self.call(endpoints.GET_PEER, RequestParams(path={"peer_id": peer_id}))

    async def get_peer_count(self) -> PeerCount:
        return await self.call(endpoints.GET_PEER_COUNT)

    async def get_node_version(self) -> NodeVersion:
        return await self.call(endpoints.GET_NODE_VERSION)

    async def get_syncing(self) -> SyncStatus:
        return await self.call(endpoints.GET_SYNCING)

    async def get_health(self, *, syncing_status: int | None = None) -> HealthStatus:
        """
        Health of the node, from the status code alone.

        Args:
            syncing_status: Status code the node should use while syncing.

        Raises:
            HttpStatusError: For any status other than 200, 206 and 503.
        """
        return await self.call(
            endpoints.GET_HEALTH, RequestParams(query={"syncing_status": syncing_status})
        )

    # -------------------------------------------------------------------------
    # Validator
    # -------------------------------------------------------------------------

    async def get_attester_duties(
        self, epoch: Epoch | int, indices: Iterable[ValidatorIndex | int]
    ) -> AttesterDuties:
        return await self.call(
            endpoints.POST_ATTESTER_DUTIES,
            RequestParams(
                path={"epoch": Epoch(epoch)}, body=[ValidatorIndex(index) for index in indices]
            ),
        )

    async def get_proposer_duties(self, epoch: Epoch | int) -> ProposerDuties:
        return await self.call(
            endpoints.GET_PROPOSER_DUTIES, RequestParams(path={"epoch": Epoch(epoch)})
        )

    async def get_sync_duties(
        self, epoch: Epoch | int, indices: Iterable[ValidatorIndex | int]
    ) -> tuple[SyncCommitteeDuty, ...]:
        return await self.call(
            endpoints.POST_SYNC_DUTIES,
            RequestParams(
                path={"epoch": Epoch(epoch)}, body=[ValidatorIndex(index) for index in indices]
            ),
        )

    async def get_attestation_data(
        self, slot: Slot | int, committee_index: CommitteeIndex | int
    ) -> AttestationData:
        return await self.call(
            endpoints.GET_ATTESTATION_DATA,
            RequestParams(
                query={"slot": Slot(slot), "committee_index": CommitteeIndex(committee_index)}
            ),
        )

    async def get_aggregate_attestation(
        self,
        attestation_data_root: Root | bytes,
        slot: Slot | int,
        committee_index: CommitteeIndex | int,
    ) -> Versioned[Any]:
        return await self.call(
            endpoints.GET_AGGREGATE_ATTESTATION,
            RequestParams(
                query={
                    "attestation_data_root": Root(attestation_data_root),
                    "slot": Slot(slot),
                    "committee_index": CommitteeIndex(committee_index),
                }
            ),
        )

    async def prepare_beacon_proposer(self, preparations: Sequence[ProposerPreparation]) -> None:
        """Register fee recipients for upcoming proposals."""
        await self.call(
            endpoints.POST_PREPARE_BEACON_PROPOSER, RequestParams(body=list(preparations))
        )

    # -------------------------------------------------------------------------
    # Events
    # -------------------------------------------------------------------------

    def subscribe(
        self, topics: Iterable[EventKind | str], config: SubscriptionConfig
    ) -> Subscription:
        """
        Subscribe to event topics.

        The connection opens lazily, on first iteration of the returned
        subscription.

        Raises:
            ValueError: If no topic is given.
        """
        names = list(dict.fromkeys(str(topic) for topic in topics))
        return Subscription(
            self._events,
            self.build_url(endpoints.GET_EVENTS),
            topics=names,
            config=config,
        )

