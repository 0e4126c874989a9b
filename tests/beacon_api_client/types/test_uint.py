"""Unsigned Integer Type Tests."""

from typing import Any

import pytest
from hypothesis import given
from hypothesis import strategies as st
from pydantic import ValidationError, create_model

from beacon_api_client.types import (
    BaseUint,
    Uint8,
    Uint64,
    Uint256,
    WireEncodingError,
    WireOverflowError,
)

ALL_UINT_TYPES = (Uint8, Uint64, Uint256)
"""A collection of all Uint types to test against."""


class TestConstruction:
    """Tests for direct instantiation."""

    @pytest.mark.parametrize("uint_class", ALL_UINT_TYPES)
    def test_instances_are_ints(self, uint_class: type[BaseUint]) -> None:
        """Uint types are instances of `int` and of their own class."""
        value = uint_class(5)
        assert isinstance(value, int)
        assert isinstance(value, uint_class)
        assert value == 5

    @pytest.mark.parametrize("uint_class", ALL_UINT_TYPES)
    def test_bounds(self, uint_class: type[BaseUint]) -> None:
        """Zero and the maximum are accepted; one past either end is rejected."""
        maximum = 2**uint_class.BITS - 1
        assert uint_class(0) == 0
        assert uint_class(maximum) == maximum

        with pytest.raises(WireOverflowError):
            uint_class(maximum + 1)
        with pytest.raises(WireOverflowError):
            uint_class(-1)

    def test_overflow_error_carries_range(self) -> None:
        """The overflow error names the type and its maximum."""
        with pytest.raises(WireOverflowError) as exc_info:
            Uint8(256)
        assert exc_info.value.type_name == "Uint8"
        assert exc_info.value.max_value == 255


class TestWireDecoding:
    """Tests for decoding quoted decimal strings."""

    @pytest.mark.parametrize(
        "wire, expected",
        [
            ("0", 0),
            ("1", 1),
            ("18446744073709551615", 2**64 - 1),
        ],
    )
    def test_canonical_decimals_decode(self, wire: str, expected: int) -> None:
        """Canonical decimal strings decode to the exact integer."""
        assert Uint64.from_wire(wire) == expected

    @pytest.mark.parametrize("wire", ["", "01", "+1", "-1", " 1", "1 ", "1.0", "0x10", "1e3"])
    def test_non_canonical_strings_are_rejected(self, wire: str) -> None:
        """Signs, leading zeros, whitespace and other notations are rejected."""
        with pytest.raises(WireEncodingError):
            Uint64.from_wire(wire)

    def test_value_beyond_range_is_rejected(self) -> None:
        """A decimal one past the maximum overflows."""
        with pytest.raises(WireOverflowError):
            Uint64.from_wire("18446744073709551616")

    @pytest.mark.parametrize("value", [True, False, 1.0, None, b"1"])
    def test_other_types_are_rejected(self, value: Any) -> None:
        """Bools, floats, bytes and None never decode as integers."""
        with pytest.raises(WireEncodingError):
            Uint64.from_wire(value)

    def test_plain_ints_are_accepted(self) -> None:
        """Unquoted JSON integers are accepted."""
        assert Uint64.from_wire(42) == 42

    @given(st.integers(min_value=0, max_value=2**256 - 1))
    def test_uint256_is_exact(self, value: int) -> None:
        """Every 256-bit value survives a trip through its quoted form."""
        wire = Uint256(value).to_wire()
        assert wire == str(value)
        assert Uint256.from_wire(wire) == value

    @given(st.integers(min_value=2**53, max_value=2**64 - 1))
    def test_uint64_beyond_float_precision(self, value: int) -> None:
        """Values beyond the 53-bit float range stay exact."""
        assert int(Uint64.from_wire(str(value))) == value


class TestPydanticIntegration:
    """Tests for use as pydantic fields."""

    def test_model_field_decodes_quoted_string(self) -> None:
        """A model field accepts the quoted form and yields the Uint type."""
        model = create_model("Model", value=(Uint64, ...))
        instance: Any = model.model_validate({"value": "12345"})
        assert isinstance(instance.value, Uint64)
        assert instance.value == 12345

    def test_model_field_rejects_bool(self) -> None:
        """Pydantic reports a bool as a validation error."""
        model = create_model("Model", value=(Uint64, ...))
        with pytest.raises(ValidationError):
            model.model_validate({"value": True})

    def test_json_dump_quotes_the_value(self) -> None:
        """JSON serialization produces the quoted decimal form."""
        model = create_model("Model", value=(Uint64, ...))
        instance: Any = model.model_validate({"value": "7"})
        assert instance.model_dump(mode="json") == {"value": "7"}

    def test_repr_and_str(self) -> None:
        """The repr names the type; str is the bare number."""
        assert repr(Uint64(3)) == "Uint64(3)"
        assert str(Uint64(3)) == "3"
