"""Reusable base model for Beacon API wire objects."""

from typing import Any

from pydantic import BaseModel, ConfigDict


class WireModel(BaseModel):
    """
    An immutable pydantic model mirroring one JSON object of the Beacon API.

    Field names are the snake_case names used on the wire, so no alias
    generator is needed.

    Unknown fields are ignored so that a node running a newer version of the
    API does not break older clients. Missing required fields still fail
    validation.
    """

    model_config = ConfigDict(
        extra="ignore",
        frozen=True,
        validate_default=True,
        arbitrary_types_allowed=True,
    )

    def to_wire(self) -> dict[str, Any]:
        """Encode the model into its JSON-compatible wire form."""
        return self.model_dump(mode="json")
