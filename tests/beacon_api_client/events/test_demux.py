"""Tests for decoding envelopes into typed events."""

from __future__ import annotations

import json
from typing import Any

import pytest

from beacon_api_client.api import DecodeError, Err, Ok, UnrecognizedEventKind
from beacon_api_client.consensus import Epoch, ForkName, ForkSchedule, electra, phase0
from beacon_api_client.events import (
    AttestationEvent,
    AttesterSlashingEvent,
    EventDemultiplexer,
    EventEnvelope,
    EventKind,
    FinalizedCheckpointEvent,
    HeadEvent,
    PayloadAttributesEvent,
    SingleAttestationEvent,
    UnknownEventPolicy,
    VoluntaryExitEvent,
)
from beacon_api_client.events.models import (
    PayloadAttributesData,
    PayloadAttributesDataV2,
    PayloadAttributesDataV3,
)
from tests.beacon_api_client.helpers import (
    SIGNATURE,
    attestation_data_json,
    electra_attestation_json,
    finalized_checkpoint_json,
    head_json,
    hex_root,
    phase0_attestation_json,
)

ELECTRA_AT_EPOCH_10 = ForkSchedule(
    activations=((Epoch(0), ForkName.DENEB), (Epoch(10), ForkName.ELECTRA))
)


def envelope(event: str, data: Any) -> EventEnvelope:
    return EventEnvelope(event=event, data=data if isinstance(data, str) else json.dumps(data))


def payload_attributes_json(version: str) -> dict[str, Any]:
    attributes: dict[str, Any] = {
        "timestamp": "1700000000",
        "prev_randao": hex_root(20),
        "suggested_fee_recipient": "0x" + "ab" * 20,
    }
    if version != "bellatrix":
        attributes["withdrawals"] = [
            {
                "index": "1",
                "validator_index": "2",
                "address": "0x" + "cd" * 20,
                "amount": "32000000000",
            }
        ]
    if version not in ("bellatrix", "capella"):
        attributes["parent_beacon_block_root"] = hex_root(21)
    return {
        "version": version,
        "data": {
            "proposer_index": "123",
            "proposal_slot": "10",
            "parent_block_number": "9",
            "parent_block_root": hex_root(22),
            "parent_block_hash": hex_root(23),
            "payload_attributes": attributes,
        },
    }


class TestKnownKinds:
    """Tests for kinds with a single payload shape."""

    def test_head(self) -> None:
        """A head payload becomes a HeadEvent."""
        result = EventDemultiplexer().decode(envelope("head", head_json(64)))

        assert isinstance(result, Ok)
        event = result.value
        assert isinstance(event, HeadEvent)
        assert event.KIND is EventKind.HEAD
        assert event.head.slot == 64
        assert event.head.epoch_transition is True

    def test_finalized_checkpoint(self) -> None:
        """A finalized checkpoint payload keeps its epoch exactly."""
        result = EventDemultiplexer().decode(
            envelope("finalized_checkpoint", finalized_checkpoint_json(2**63))
        )

        event = result.unwrap()
        assert isinstance(event, FinalizedCheckpointEvent)
        assert event.checkpoint.epoch == 2**63

    def test_voluntary_exit(self) -> None:
        """Full consensus objects are decoded with their container."""
        payload = {"message": {"epoch": "5", "validator_index": "9"}, "signature": SIGNATURE}

        event = EventDemultiplexer().decode(envelope("voluntary_exit", payload)).unwrap()

        assert isinstance(event, VoluntaryExitEvent)
        assert isinstance(event.exit, phase0.SignedVoluntaryExit)
        assert event.exit.message.validator_index == 9

    def test_single_attestation(self) -> None:
        """Single attestations have one shape and need no fork."""
        payload = {
            "committee_index": "3",
            "attester_index": "44",
            "data": attestation_data_json(12),
            "signature": SIGNATURE,
        }

        event = EventDemultiplexer().decode(envelope("single_attestation", payload)).unwrap()

        assert isinstance(event, SingleAttestationEvent)
        assert event.attestation.attester_index == 44


class TestErrors:
    """Tests for payloads that cannot be decoded."""

    def test_unknown_tag(self) -> None:
        """Unknown tags are reported with the raw payload, never coerced."""
        result = EventDemultiplexer().decode(envelope("light_client_update", "{\"x\": 1}"))

        assert isinstance(result, Err)
        assert isinstance(result.error, UnrecognizedEventKind)
        assert result.error.tag == "light_client_update"
        assert result.error.raw_payload == "{\"x\": 1}"

    def test_tags_are_case_sensitive(self) -> None:
        """`Head` is not `head`."""
        result = EventDemultiplexer().decode(envelope("Head", head_json(1)))

        assert isinstance(result.error, UnrecognizedEventKind)

    @pytest.mark.parametrize(
        "policy, fatal", [(UnknownEventPolicy.REPORT, False), (UnknownEventPolicy.FAIL, True)]
    )
    def test_unknown_policy(self, policy: UnknownEventPolicy, fatal: bool) -> None:
        """Only the FAIL policy makes an unknown tag fatal."""
        demux = EventDemultiplexer(unknown_events=policy)
        result = demux.decode(envelope("mystery", "{}"))

        assert isinstance(result, Err)
        assert demux.is_fatal(result.error) is fatal

    def test_malformed_payload(self) -> None:
        """A payload of the wrong shape is a decode error for that kind."""
        payload = head_json(1)
        payload["slot"] = 1

        result = EventDemultiplexer().decode(envelope("head", payload))

        assert isinstance(result, Err)
        assert isinstance(result.error, DecodeError)
        assert result.error.context == "head"

    def test_invalid_json(self) -> None:
        """A payload that is not JSON is a decode error."""
        result = EventDemultiplexer().decode(envelope("head", "{not json"))

        assert isinstance(result.error, DecodeError)
        assert result.error.raw_fragment == "{not json"

    def test_decode_errors_are_not_fatal(self) -> None:
        """Decode errors never make the demultiplexer itself fail."""
        demux = EventDemultiplexer(unknown_events=UnknownEventPolicy.FAIL)
        result = demux.decode(envelope("head", "[]"))

        assert not demux.is_fatal(result.error)


class TestPayloadAttributes:
    """Tests for the versioned payload attributes event."""

    @pytest.mark.parametrize(
        "version, shape",
        [
            ("bellatrix", PayloadAttributesData),
            ("capella", PayloadAttributesDataV2),
            ("deneb", PayloadAttributesDataV3),
            ("electra", PayloadAttributesDataV3),
        ],
    )
    def test_version_selects_shape(self, version: str, shape: type) -> None:
        """The embedded version picks the payload shape."""
        event = (
            EventDemultiplexer()
            .decode(envelope("payload_attributes", payload_attributes_json(version)))
            .unwrap()
        )

        assert isinstance(event, PayloadAttributesEvent)
        assert event.version is ForkName(version)
        assert type(event.data) is shape
        assert event.data.proposer_index == 123

    def test_shape_must_match_version(self) -> None:
        """A capella payload labelled deneb is rejected."""
        payload = payload_attributes_json("capella")
        payload["version"] = "deneb"

        result = EventDemultiplexer().decode(envelope("payload_attributes", payload))

        assert isinstance(result.error, DecodeError)

    def test_unknown_version(self) -> None:
        """An unknown version is a decode error."""
        payload = payload_attributes_json("deneb")
        payload["version"] = "gloas"

        result = EventDemultiplexer().decode(envelope("payload_attributes", payload))

        assert isinstance(result.error, DecodeError)

    def test_pre_merge_version(self) -> None:
        """Payload attributes do not exist before Bellatrix."""
        payload = payload_attributes_json("bellatrix")
        payload["version"] = "altair"

        result = EventDemultiplexer().decode(envelope("payload_attributes", payload))

        assert isinstance(result.error, DecodeError)

    def test_missing_version(self) -> None:
        """Without a version there is no fork to decode with."""
        payload = payload_attributes_json("deneb")
        del payload["version"]

        result = EventDemultiplexer().decode(envelope("payload_attributes", payload))

        assert isinstance(result.error, DecodeError)


class TestForkDependentEvents:
    """Tests for attestations and attester slashings, which carry no version."""

    def test_schedule_selects_pre_electra_shape(self) -> None:
        """Slots before the Electra epoch decode the phase0 shape."""
        demux = EventDemultiplexer(fork_schedule=ELECTRA_AT_EPOCH_10)

        event = demux.decode(envelope("attestation", phase0_attestation_json(319))).unwrap()

        assert isinstance(event, AttestationEvent)
        assert event.fork is ForkName.DENEB
        assert type(event.attestation) is phase0.Attestation

    def test_schedule_selects_electra_shape(self) -> None:
        """Slots from the Electra epoch on decode the Electra shape."""
        demux = EventDemultiplexer(fork_schedule=ELECTRA_AT_EPOCH_10)

        event = demux.decode(envelope("attestation", electra_attestation_json(320))).unwrap()

        assert event.fork is ForkName.ELECTRA
        assert type(event.attestation) is electra.Attestation

    def test_electra_slot_requires_committee_bits(self) -> None:
        """A phase0-shaped attestation in an Electra slot is rejected."""
        demux = EventDemultiplexer(fork_schedule=ELECTRA_AT_EPOCH_10)

        result = demux.decode(envelope("attestation", phase0_attestation_json(320)))

        assert isinstance(result.error, DecodeError)

    def test_fixed_fork_overrides_schedule(self) -> None:
        """A fixed fork is used regardless of the slot."""
        demux = EventDemultiplexer(fork_schedule=ELECTRA_AT_EPOCH_10, fork=ForkName.ELECTRA)

        event = demux.decode(envelope("attestation", electra_attestation_json(1))).unwrap()

        assert event.fork is ForkName.ELECTRA

    def test_no_fork_information(self) -> None:
        """Without a schedule or a fork the event cannot be decoded."""
        result = EventDemultiplexer().decode(envelope("attestation", phase0_attestation_json(1)))

        assert isinstance(result, Err)
        assert isinstance(result.error, DecodeError)
        assert "fork" in result.error.detail

    def test_unreadable_slot(self) -> None:
        """The slot used for the schedule must be a valid quoted integer."""
        payload = phase0_attestation_json(1)
        payload["data"]["slot"] = "-1"
        demux = EventDemultiplexer(fork_schedule=ELECTRA_AT_EPOCH_10)

        result = demux.decode(envelope("attestation", payload))

        assert isinstance(result.error, DecodeError)

    def test_attester_slashing(self) -> None:
        """Attester slashings take their fork from the first attestation."""
        indexed = {
            "attesting_indices": ["1", "2"],
            "data": attestation_data_json(400),
            "signature": SIGNATURE,
        }
        payload = {"attestation_1": indexed, "attestation_2": indexed}
        demux = EventDemultiplexer(fork_schedule=ELECTRA_AT_EPOCH_10)

        event = demux.decode(envelope("attester_slashing", payload)).unwrap()

        assert isinstance(event, AttesterSlashingEvent)
        assert event.fork is ForkName.ELECTRA
        assert event.slashing.attestation_1.attesting_indices == (1, 2)
