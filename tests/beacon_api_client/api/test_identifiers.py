"""Tests for state, block and validator identifier encoding."""

import pytest

from beacon_api_client.api.identifiers import (
    encode_block_id,
    encode_state_id,
    encode_validator_id,
)


class TestStateAndBlockIds:
    """Tests for state and block identifiers."""

    @pytest.mark.parametrize("keyword", ["head", "genesis", "finalized", "justified"])
    def test_state_keywords(self, keyword: str) -> None:
        """State keywords pass through unchanged."""
        assert encode_state_id(keyword) == keyword

    def test_justified_is_not_a_block_keyword(self) -> None:
        """Blocks cannot be named `justified`."""
        with pytest.raises(ValueError):
            encode_block_id("justified")

    def test_slots(self) -> None:
        """Slots encode as decimal, from ints or decimal strings."""
        assert encode_block_id(123) == "123"
        assert encode_state_id("4567") == "4567"

    def test_roots(self) -> None:
        """Roots encode as 0x hex, from bytes or hex strings."""
        root = b"\xab" * 32
        assert encode_block_id(root) == "0x" + "ab" * 32
        assert encode_state_id("0x" + "AB" * 32) == "0x" + "ab" * 32

    @pytest.mark.parametrize("value", ["latest", "-1", "0x1234", b"\x00" * 31, -5, 2**64])
    def test_invalid_values(self, value: object) -> None:
        """Unknown keywords, short roots and out of range slots are rejected."""
        with pytest.raises(ValueError):
            encode_state_id(value)  # type: ignore[arg-type]

    def test_bool_is_rejected(self) -> None:
        """A bool is never taken as slot 0 or 1."""
        with pytest.raises(TypeError):
            encode_block_id(True)


class TestValidatorIds:
    """Tests for validator identifiers."""

    def test_index(self) -> None:
        """Indices encode as decimal."""
        assert encode_validator_id(42) == "42"
        assert encode_validator_id("42") == "42"

    def test_pubkey(self) -> None:
        """Public keys encode as 0x hex of 48 bytes."""
        assert encode_validator_id(b"\x01" * 48) == "0x" + "01" * 48

    def test_root_sized_key_is_rejected(self) -> None:
        """A 32-byte value is not a public key."""
        with pytest.raises(ValueError):
            encode_validator_id("0x" + "01" * 32)
