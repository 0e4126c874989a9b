"""Tests for the Type Mapper."""

import json
from typing import Any

import pytest

from beacon_api_client.api import endpoints
from beacon_api_client.api.errors import DecodeError, HttpStatusError
from beacon_api_client.api.mapper import (
    decode,
    decode_response,
    encode,
    encode_path,
    encode_query,
    resolve_fork,
    status_error,
)
from beacon_api_client.api.models import GenesisDetails, ValidatorStatus, Versioned
from beacon_api_client.consensus import Epoch, ForkName, Root, Slot, ValidatorIndex, altair, phase0
from tests.beacon_api_client.helpers import (
    altair_block_json,
    hex_root,
    phase0_attestation_json,
    phase0_block_json,
)

GENESIS = {
    "genesis_time": "1606824023",
    "genesis_validators_root": hex_root(0x4B),
    "genesis_fork_version": "0x00000000",
}


class TestDecode:
    """Tests for decoding values against a target type."""

    def test_success(self) -> None:
        """Valid input decodes to the typed value."""
        genesis = decode(GenesisDetails, GENESIS)
        assert genesis.genesis_time == 1606824023
        assert genesis.genesis_validators_root == Root(b"\x4b" * 32)

    def test_failure_carries_context_and_fragment(self) -> None:
        """Failures name the target and keep the offending fragment."""
        with pytest.raises(DecodeError) as exc_info:
            decode(GenesisDetails, {**GENESIS, "genesis_time": "12.5"})

        error = exc_info.value
        assert error.context == "GenesisDetails"
        assert "genesis_time" in error.detail
        assert error.raw_fragment == "12.5"

    def test_number_beyond_uint64_is_rejected(self) -> None:
        """Values beyond 2**64 - 1 are a decode error, never truncated."""
        with pytest.raises(DecodeError):
            decode(GenesisDetails, {**GENESIS, "genesis_time": str(2**64)})

    def test_tuple_targets(self) -> None:
        """Typing constructs such as `tuple[T, ...]` are valid targets."""
        slots = decode(tuple[Slot, ...], ["1", "2"])
        assert slots == (Slot(1), Slot(2))


class TestResolveFork:
    """Tests for combining fork discriminants."""

    def test_single_source(self) -> None:
        """Any single source decides the fork."""
        assert resolve_fork(header="deneb", context="x") is ForkName.DENEB
        assert resolve_fork(embedded="altair", context="x") is ForkName.ALTAIR
        assert resolve_fork(caller=ForkName.CAPELLA, context="x") is ForkName.CAPELLA

    def test_agreeing_sources(self) -> None:
        """Sources that agree resolve to their common fork."""
        fork = resolve_fork(caller=ForkName.DENEB, header="deneb", embedded="deneb", context="x")
        assert fork is ForkName.DENEB

    def test_conflict_is_an_error(self) -> None:
        """A header and body that disagree are never silently resolved."""
        with pytest.raises(DecodeError, match="conflicting"):
            resolve_fork(header="deneb", embedded="electra", context="x")

    def test_no_source_is_an_error(self) -> None:
        """Without any discriminant the fork is not guessed."""
        with pytest.raises(DecodeError, match="no fork"):
            resolve_fork(context="x")

    def test_unknown_fork_is_an_error(self) -> None:
        """Fork names are matched exactly."""
        with pytest.raises(DecodeError, match="unknown fork"):
            resolve_fork(header="Deneb", context="x")


class TestDecodeResponse:
    """Tests for decoding response bodies per endpoint."""

    def test_unwraps_data(self) -> None:
        """Plain endpoints return the decoded `data` field."""
        body = json.dumps({"data": GENESIS})
        genesis = decode_response(endpoints.GET_GENESIS, body)
        assert isinstance(genesis, GenesisDetails)

    def test_missing_data_field(self) -> None:
        """A body without `data` is a decode error."""
        with pytest.raises(DecodeError, match="data"):
            decode_response(endpoints.GET_GENESIS, json.dumps(GENESIS))

    def test_invalid_json(self) -> None:
        """A body that is not JSON is a decode error carrying the body."""
        with pytest.raises(DecodeError) as exc_info:
            decode_response(endpoints.GET_GENESIS, b"<html>oops</html>")
        assert exc_info.value.raw_fragment == "<html>oops</html>"
        assert exc_info.value.endpoint == "get_genesis"

    def test_versioned_block_uses_header(self) -> None:
        """The version header selects the block shape."""
        body = json.dumps({"data": altair_block_json(100), "execution_optimistic": False})
        result = decode_response(endpoints.GET_BLOCK, body, header_version="altair")

        assert isinstance(result, Versioned)
        assert result.version is ForkName.ALTAIR
        assert isinstance(result.data, altair.SignedBeaconBlock)
        assert result.execution_optimistic is False
        assert result.finalized is None

    def test_versioned_block_uses_embedded_version(self) -> None:
        """The embedded version selects the block shape without a header."""
        body = json.dumps({"version": "phase0", "data": phase0_block_json(100)})
        result = decode_response(endpoints.GET_BLOCK, body)
        assert type(result.data) is phase0.SignedBeaconBlock

    def test_versioned_block_shape_must_match_fork(self) -> None:
        """A phase 0 body labelled Altair fails instead of being reclassified."""
        body = json.dumps({"version": "altair", "data": phase0_block_json(100)})
        with pytest.raises(DecodeError):
            decode_response(endpoints.GET_BLOCK, body)

    def test_header_and_embedded_mismatch(self) -> None:
        """Disagreeing header and body versions are a decode error."""
        body = json.dumps({"version": "phase0", "data": phase0_block_json(100)})
        with pytest.raises(DecodeError, match="conflicting"):
            decode_response(endpoints.GET_BLOCK, body, header_version="altair")

    def test_versioned_list(self) -> None:
        """List endpoints decode every item with the selected variant."""
        body = json.dumps(
            {"version": "deneb", "data": [phase0_attestation_json(1), phase0_attestation_json(2)]}
        )
        result = decode_response(endpoints.GET_POOL_ATTESTATIONS, body)
        assert [item.data.slot for item in result.data] == [1, 2]

    def test_endpoint_without_body(self) -> None:
        """Submission endpoints decode to None, whatever the body."""
        assert decode_response(endpoints.POST_POOL_VOLUNTARY_EXITS, b"") is None

    def test_not_unwrapped_endpoint(self) -> None:
        """Duties keep their top-level dependent root."""
        body = json.dumps(
            {
                "dependent_root": hex_root(1),
                "execution_optimistic": False,
                "data": [
                    {"pubkey": "0x" + "aa" * 48, "validator_index": "5", "slot": "64"},
                ],
            }
        )
        duties = decode_response(endpoints.GET_PROPOSER_DUTIES, body)
        assert duties.dependent_root == Root(b"\x01" * 32)
        assert duties.data[0].validator_index == ValidatorIndex(5)


class TestStatusError:
    """Tests for building errors from non-2xx responses."""

    def test_structured_body(self) -> None:
        """A structured error body exposes its message and failures."""
        body = json.dumps(
            {
                "code": 400,
                "message": "some failed",
                "failures": [{"index": 1, "message": "bad signature"}],
            }
        )
        error = status_error(400, body, endpoint="post_pool_attestations")

        assert isinstance(error, HttpStatusError)
        assert error.code == 400
        assert error.server_message == "some failed"
        assert error.failures[0].index == 1
        assert error.body == body

    def test_unstructured_body(self) -> None:
        """Any other body is kept raw."""
        error = status_error(502, b"Bad Gateway")
        assert error.server_message is None
        assert error.body == "Bad Gateway"
        assert "Bad Gateway" in str(error)


class TestEncode:
    """Tests for encoding values for the wire."""

    def test_scalars(self) -> None:
        """Integers are quoted; bytes become hex; bools and strings pass."""
        assert encode(Slot(5)) == "5"
        assert encode(7) == "7"
        assert encode(b"\x01\x02") == "0x0102"
        assert encode(True) is True
        assert encode("x") == "x"

    def test_containers(self) -> None:
        """Models dump in JSON mode; sequences and mappings recurse."""
        attestation = phase0.Attestation.model_validate(phase0_attestation_json(3))
        assert encode([attestation]) == [phase0_attestation_json(3)]
        assert encode({"epoch": Epoch(2)}) == {"epoch": "2"}

    def test_enums(self) -> None:
        """Enums encode to their value."""
        assert encode(ValidatorStatus.ACTIVE_ONGOING) == "active_ongoing"

    def test_unsupported(self) -> None:
        """Objects without a wire form are rejected."""
        with pytest.raises(TypeError):
            encode(object())

    def test_query(self) -> None:
        """None is dropped, sequences are joined, sets are sorted."""
        query: dict[str, Any] = {
            "slot": Slot(3),
            "missing": None,
            "id": ["1", "0xab"],
            "status": {"pending", "active"},
            "flag": False,
        }
        assert encode_query(query) == [
            ("slot", "3"),
            ("id", "1,0xab"),
            ("status", "active,pending"),
            ("flag", "false"),
        ]

    def test_path(self) -> None:
        """Path values are substituted and quoted."""
        path = encode_path("/eth/v1/node/peers/{peer_id}", {"peer_id": "a/b"})
        assert path == "/eth/v1/node/peers/a%2Fb"

    def test_path_missing_value(self) -> None:
        """A missing path value is reported by name."""
        with pytest.raises(ValueError, match="state_id"):
            encode_path("/eth/v1/beacon/states/{state_id}/root", {})
