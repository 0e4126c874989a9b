"""Tests for the wire model base class."""

import pytest
from pydantic import BaseModel, ValidationError

from beacon_api_client.types import Bytes4, WireModel


class Sample(WireModel):
    name: str
    version: Bytes4


class TestWireModel:
    """Tests for WireModel behaviour shared by all response models."""

    def test_unknown_fields_are_ignored(self) -> None:
        """Fields added by newer nodes do not break validation."""
        sample = Sample.model_validate(
            {"name": "a", "version": "0x01000000", "added_later": True}
        )

        assert sample.version == b"\x01\x00\x00\x00"
        assert not hasattr(sample, "added_later")

    def test_frozen(self) -> None:
        """Models cannot be mutated after validation."""
        sample = Sample(name="a", version=Bytes4.zero())

        with pytest.raises(ValidationError):
            sample.name = "b"

    def test_to_wire(self) -> None:
        """The wire form uses JSON-compatible values."""
        sample = Sample(name="a", version=Bytes4(b"\x00\x00\x00\x02"))

        assert sample.to_wire() == {"name": "a", "version": "0x00000002"}

    def test_updates_use_pydantic_copy(self) -> None:
        """Copying is left to pydantic's `model_copy`."""
        sample = Sample(name="a", version=Bytes4.zero())

        assert WireModel.copy is BaseModel.copy
        assert sample.model_copy(update={"name": "b"}).name == "b"
