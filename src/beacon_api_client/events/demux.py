"""
Event demultiplexer: SSE envelopes to typed domain events.

The tag of each envelope is looked up in the closed set of `EventKind`s.
Known tags have their payload decoded through the Type Mapper; unknown tags
are never coerced into a known kind.

Fork-dependent payloads need an explicit fork:

- `payload_attributes` carries a `version` field.
- `attestation` and `attester_slashing` carry none. Their fork is derived
  from the slot inside the payload through a `ForkSchedule`, or taken from
  a fixed fork configured on the demultiplexer.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from enum import Enum
from typing import Any

from beacon_api_client.api.errors import ApiError, DecodeError, UnrecognizedEventKind
from beacon_api_client.api.mapper import decode, parse_json, resolve_fork
from beacon_api_client.api.result import Err, Ok, Result
from beacon_api_client.consensus import (
    ForkName,
    ForkSchedule,
    ForkVariants,
    Slot,
    UnsupportedForkError,
    variants,
)
from beacon_api_client.consensus import altair, capella, electra, phase0

from . import models
from .models import DomainEvent, EventKind
from .sse import EventEnvelope

logger = logging.getLogger(__name__)


class UnknownEventPolicy(Enum):
    """What to do with an envelope whose tag is not a known event kind."""

    REPORT = "report"
    """Deliver an `UnrecognizedEventKind` error value; the stream continues."""

    FAIL = "fail"
    """Treat the unknown tag as fatal for the stream."""


_SIMPLE: dict[EventKind, tuple[type, Callable[[Any], DomainEvent]]] = {
    EventKind.HEAD: (models.Head, models.HeadEvent),
    EventKind.BLOCK: (models.Block, models.BlockEvent),
    EventKind.BLOCK_GOSSIP: (models.BlockGossip, models.BlockGossipEvent),
    EventKind.SINGLE_ATTESTATION: (electra.SingleAttestation, models.SingleAttestationEvent),
    EventKind.VOLUNTARY_EXIT: (phase0.SignedVoluntaryExit, models.VoluntaryExitEvent),
    EventKind.BLS_TO_EXECUTION_CHANGE: (
        capella.SignedBLSToExecutionChange,
        models.BlsToExecutionChangeEvent,
    ),
    EventKind.PROPOSER_SLASHING: (phase0.ProposerSlashing, models.ProposerSlashingEvent),
    EventKind.FINALIZED_CHECKPOINT: (
        models.FinalizedCheckpoint,
        models.FinalizedCheckpointEvent,
    ),
    EventKind.CHAIN_REORG: (models.ChainReorg, models.ChainReorgEvent),
    EventKind.CONTRIBUTION_AND_PROOF: (
        altair.SignedContributionAndProof,
        models.ContributionAndProofEvent,
    ),
    EventKind.BLOB_SIDECAR: (models.BlobSidecarSummary, models.BlobSidecarEvent),
    EventKind.DATA_COLUMN_SIDECAR: (
        models.DataColumnSidecarSummary,
        models.DataColumnSidecarEvent,
    ),
}
"""Kinds whose payload has a single shape across forks."""


class EventDemultiplexer:
    """
    Decodes envelopes into `Ok(DomainEvent)` or `Err(ApiError)`.

    Stateless apart from its configuration; safe to share.
    """

    def __init__(
        self,
        *,
        unknown_events: UnknownEventPolicy = UnknownEventPolicy.REPORT,
        fork_schedule: ForkSchedule | None = None,
        fork: ForkName | None = None,
    ) -> None:
        """
        Args:
            unknown_events: Policy for tags outside `EventKind`.
            fork_schedule: Maps payload slots to forks.
            fork: Fixed fork for payloads without a version; overrides the
                schedule.
        """
        self.unknown_events = unknown_events
        self.fork_schedule = fork_schedule
        self.fork = fork

    def decode(self, envelope: EventEnvelope) -> Result[DomainEvent]:
        """
        Decode one envelope.

        Never raises for bad input: an unknown tag yields
        `Err(UnrecognizedEventKind)` and a malformed payload yields
        `Err(DecodeError)` with the tag as context.
        """
        try:
            kind = EventKind(envelope.event)
        except ValueError:
            logger.debug(f"Unrecognized event kind {envelope.event!r}")
            return Err(UnrecognizedEventKind(envelope.event, envelope.data))

        try:
            return Ok(self._decode_kind(kind, envelope.data))
        except DecodeError as exc:
            logger.warning(f"Failed to decode {kind} event: {exc.detail}")
            return Err(exc)

    def is_fatal(self, error: ApiError) -> bool:
        """Whether `error`, produced by `decode`, must end the stream."""
        return (
            isinstance(error, UnrecognizedEventKind)
            and self.unknown_events is UnknownEventPolicy.FAIL
        )

    def _decode_kind(self, kind: EventKind, data: str) -> DomainEvent:
        raw = parse_json(data, context=kind)

        if kind in _SIMPLE:
            payload_type, wrap = _SIMPLE[kind]
            return wrap(decode(payload_type, raw, context=kind))

        if kind is EventKind.PAYLOAD_ATTRIBUTES:
            return self._decode_payload_attributes(raw)

        if kind is EventKind.ATTESTATION:
            fork = self._fork_of(kind, raw, slot_of=lambda value: value["data"]["slot"])
            attestation = decode(
                self._select(kind, variants.ATTESTATION, fork), raw, context=kind
            )
            return models.AttestationEvent(attestation=attestation, fork=fork)

        if kind is EventKind.ATTESTER_SLASHING:
            fork = self._fork_of(
                kind, raw, slot_of=lambda value: value["attestation_1"]["data"]["slot"]
            )
            slashing = decode(
                self._select(kind, variants.ATTESTER_SLASHING, fork), raw, context=kind
            )
            return models.AttesterSlashingEvent(slashing=slashing, fork=fork)

        raise AssertionError(f"No decoder for event kind {kind}")

    def _decode_payload_attributes(self, raw: Any) -> DomainEvent:
        kind = EventKind.PAYLOAD_ATTRIBUTES
        if not isinstance(raw, dict) or "data" not in raw:
            raise DecodeError(kind, "expected an object with 'version' and 'data'", raw_fragment=raw)

        version = resolve_fork(embedded=raw.get("version"), context=kind)
        target = self._select(kind, models.PAYLOAD_ATTRIBUTES, version)
        return models.PayloadAttributesEvent(
            version=version, data=decode(target, raw["data"], context=kind)
        )

    def _fork_of(self, kind: EventKind, raw: Any, *, slot_of: Callable[[Any], Any]) -> ForkName:
        if self.fork is not None:
            return self.fork
        if self.fork_schedule is None:
            raise DecodeError(
                kind, "no fork or fork schedule configured for a fork-dependent event"
            )
        try:
            slot = Slot.from_wire(slot_of(raw))
        except (KeyError, TypeError, ValueError) as exc:
            raise DecodeError(kind, "cannot read the slot of the payload", raw_fragment=raw) from exc
        return self.fork_schedule.fork_at_slot(slot)

    @staticmethod
    def _select(kind: EventKind, table: ForkVariants, fork: ForkName) -> Any:
        try:
            return table.select(fork)
        except UnsupportedForkError as exc:
            raise DecodeError(kind, str(exc)) from exc
