"""
Fork names, fork activation schedules and fork-dependent type dispatch.

Several consensus objects change shape at fork boundaries. A block from
Deneb and a block from Electra are both well-formed JSON objects, and the
fields present in one are largely present in the other. Picking a shape by
looking at which fields exist would silently misclassify data.

Instead, every fork-dependent decode is keyed by an explicit discriminant:

- a fork name supplied by the caller,
- the `Eth-Consensus-Version` response header,
- an embedded `version` field,
- or a fork schedule applied to an embedded slot.

`ForkVariants` maps that discriminant to exactly one type.
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass
from enum import StrEnum
from typing import Any

from beacon_api_client.types import WireFormatError
from beacon_api_client.types.exceptions import WireEncodingError

from .constants import FAR_FUTURE_EPOCH, SLOTS_PER_EPOCH
from .primitives import Epoch, Slot


class ForkName(StrEnum):
    """Protocol forks, in activation order."""

    PHASE0 = "phase0"
    ALTAIR = "altair"
    BELLATRIX = "bellatrix"
    CAPELLA = "capella"
    DENEB = "deneb"
    ELECTRA = "electra"
    FULU = "fulu"

    @classmethod
    def parse(cls, value: Any) -> ForkName:
        """
        Parse a fork name from the wire.

        Matching is exact: `"Deneb"` is not `"deneb"`.

        Raises:
            UnknownForkError: If the name is not a known fork.
        """
        if isinstance(value, cls):
            return value
        try:
            return cls(value)
        except ValueError as exc:
            raise UnknownForkError(value) from exc

    @property
    def position(self) -> int:
        """Zero-based activation order of the fork."""
        return list(ForkName).index(self)

    def is_at_least(self, other: ForkName) -> bool:
        """Whether this fork activates at or after `other`."""
        return self.position >= other.position


class UnknownForkError(WireEncodingError):
    """Raised when a fork name is not one this client knows about."""

    def __init__(self, value: Any) -> None:
        super().__init__("ForkName", "unknown fork", value)


class UnsupportedForkError(WireFormatError):
    """
    Raised when a type has no variant for the requested fork.

    Attributes:
        type_name: The fork-dependent type.
        fork: The fork that was requested.
    """

    def __init__(self, type_name: str, fork: ForkName) -> None:
        self.type_name = type_name
        self.fork = fork
        super().__init__(f"{type_name} has no variant for fork {fork}")


@dataclass(frozen=True, slots=True, eq=False)
class ForkVariants:
    """
    A fork-dependent type: one concrete type per fork.

    Forks are looked up exactly. A fork that reuses an earlier shape must be
    listed explicitly, so adding a new fork never silently inherits a shape.
    """

    name: str
    """Name of the abstract type (for error messages)."""

    variants: Mapping[ForkName, Any]
    """Concrete type for each supported fork."""

    def select(self, fork: ForkName) -> Any:
        """
        Return the concrete type for `fork`.

        Raises:
            UnsupportedForkError: If the fork has no variant.
        """
        try:
            return self.variants[fork]
        except KeyError:
            raise UnsupportedForkError(self.name, fork) from None

    @property
    def forks(self) -> tuple[ForkName, ...]:
        """Supported forks in activation order."""
        return tuple(fork for fork in ForkName if fork in self.variants)


_SPEC_EPOCH_KEYS: dict[ForkName, str] = {
    fork: f"{fork.name}_FORK_EPOCH" for fork in ForkName if fork is not ForkName.PHASE0
}
"""Keys of `/eth/v1/config/spec` holding each fork's activation epoch."""


@dataclass(frozen=True, slots=True)
class ForkSchedule:
    """
    Activation epochs of each fork on one network.

    Used to derive the fork of an object from an embedded slot when the
    object carries no version tag of its own.
    """

    activations: tuple[tuple[Epoch, ForkName], ...]
    """(activation epoch, fork) pairs sorted by epoch."""

    slots_per_epoch: int = SLOTS_PER_EPOCH
    """Number of slots in an epoch on this network."""

    def __post_init__(self) -> None:
        if not self.activations or self.activations[0][0] != 0:
            raise ValueError("A fork schedule must start with a fork active at epoch 0")
        epochs = [int(epoch) for epoch, _ in self.activations]
        if epochs != sorted(epochs):
            raise ValueError("Fork activations must be sorted by epoch")

    @classmethod
    def from_spec(cls, spec: Mapping[str, Any]) -> ForkSchedule:
        """
        Build a schedule from the values of `/eth/v1/config/spec`.

        Forks whose epoch is missing or set to FAR_FUTURE_EPOCH are not
        scheduled. `SLOTS_PER_EPOCH` is read when present.

        Raises:
            ValueError: If an epoch value is not a decimal integer.
        """
        activations: list[tuple[Epoch, ForkName]] = [(Epoch(0), ForkName.PHASE0)]
        for fork, key in _SPEC_EPOCH_KEYS.items():
            if key not in spec:
                continue
            epoch = Epoch.from_wire(spec[key])
            if epoch == FAR_FUTURE_EPOCH:
                continue
            activations.append((epoch, fork))

        # Forks activated at the same epoch are ordered by fork order, so the
        # latest one wins in `fork_at_epoch`.
        activations.sort(key=lambda item: (int(item[0]), item[1].position))

        slots_per_epoch = int(spec.get("SLOTS_PER_EPOCH", SLOTS_PER_EPOCH))
        return cls(activations=tuple(activations), slots_per_epoch=slots_per_epoch)

    @classmethod
    def single(cls, fork: ForkName) -> ForkSchedule:
        """A schedule where `fork` has been active since genesis."""
        return cls(activations=((Epoch(0), fork),))

    def fork_at_epoch(self, epoch: int) -> ForkName:
        """Return the fork active at `epoch`."""
        current = self.activations[0][1]
        for activation_epoch, fork in self.activations:
            if activation_epoch > epoch:
                break
            current = fork
        return current

    def fork_at_slot(self, slot: int) -> ForkName:
        """Return the fork active at `slot`."""
        return self.fork_at_epoch(Slot(slot) // self.slots_per_epoch)
