"""Tests for fork names, fork schedules and fork-dependent dispatch."""

import pytest

from beacon_api_client.consensus import (
    Epoch,
    ForkName,
    ForkSchedule,
    ForkVariants,
    UnknownForkError,
    UnsupportedForkError,
)
from beacon_api_client.consensus.constants import FAR_FUTURE_EPOCH


class TestForkName:
    """Tests for fork name parsing and ordering."""

    def test_parse_known_fork(self) -> None:
        """Known names parse to their member."""
        assert ForkName.parse("deneb") is ForkName.DENEB

    @pytest.mark.parametrize("value", ["Deneb", "DENEB", "unknown", "", 5])
    def test_parse_is_exact(self, value: object) -> None:
        """Matching is exact and case-sensitive."""
        with pytest.raises(UnknownForkError):
            ForkName.parse(value)

    def test_ordering(self) -> None:
        """Forks are ordered by activation."""
        assert ForkName.ELECTRA.is_at_least(ForkName.DENEB)
        assert ForkName.DENEB.is_at_least(ForkName.DENEB)
        assert not ForkName.ALTAIR.is_at_least(ForkName.BELLATRIX)
        assert ForkName.PHASE0.position == 0


class TestForkVariants:
    """Tests for selecting a type by fork."""

    def test_select_is_exact(self) -> None:
        """A listed fork selects its type; an unlisted fork is an error."""
        variants = ForkVariants("Thing", {ForkName.PHASE0: int, ForkName.ALTAIR: str})

        assert variants.select(ForkName.ALTAIR) is str
        with pytest.raises(UnsupportedForkError) as exc_info:
            variants.select(ForkName.BELLATRIX)
        assert exc_info.value.fork is ForkName.BELLATRIX
        assert exc_info.value.type_name == "Thing"

    def test_forks_in_activation_order(self) -> None:
        """`forks` lists supported forks in activation order."""
        variants = ForkVariants("Thing", {ForkName.DENEB: int, ForkName.PHASE0: str})
        assert variants.forks == (ForkName.PHASE0, ForkName.DENEB)


class TestForkSchedule:
    """Tests for mapping epochs and slots to forks."""

    @pytest.fixture
    def schedule(self) -> ForkSchedule:
        return ForkSchedule(
            activations=(
                (Epoch(0), ForkName.PHASE0),
                (Epoch(10), ForkName.ALTAIR),
                (Epoch(20), ForkName.BELLATRIX),
            )
        )

    def test_fork_at_epoch(self, schedule: ForkSchedule) -> None:
        """The latest activation at or before the epoch wins."""
        assert schedule.fork_at_epoch(0) is ForkName.PHASE0
        assert schedule.fork_at_epoch(9) is ForkName.PHASE0
        assert schedule.fork_at_epoch(10) is ForkName.ALTAIR
        assert schedule.fork_at_epoch(1000) is ForkName.BELLATRIX

    def test_fork_at_slot(self, schedule: ForkSchedule) -> None:
        """Slots map to epochs with the schedule's slots per epoch."""
        assert schedule.fork_at_slot(319) is ForkName.PHASE0
        assert schedule.fork_at_slot(320) is ForkName.ALTAIR

    def test_must_start_at_genesis(self) -> None:
        """A schedule without a fork at epoch 0 is rejected."""
        with pytest.raises(ValueError):
            ForkSchedule(activations=((Epoch(5), ForkName.PHASE0),))

    def test_must_be_sorted(self) -> None:
        """Activations out of order are rejected."""
        with pytest.raises(ValueError):
            ForkSchedule(
                activations=(
                    (Epoch(0), ForkName.PHASE0),
                    (Epoch(20), ForkName.BELLATRIX),
                    (Epoch(10), ForkName.ALTAIR),
                )
            )

    def test_single(self) -> None:
        """A single-fork schedule answers that fork for every slot."""
        schedule = ForkSchedule.single(ForkName.ELECTRA)
        assert schedule.fork_at_slot(0) is ForkName.ELECTRA
        assert schedule.fork_at_slot(10**9) is ForkName.ELECTRA

    def test_from_spec(self) -> None:
        """Spec values build a schedule, skipping unscheduled forks."""
        schedule = ForkSchedule.from_spec(
            {
                "ALTAIR_FORK_EPOCH": "74240",
                "BELLATRIX_FORK_EPOCH": "144896",
                "CAPELLA_FORK_EPOCH": "194048",
                "DENEB_FORK_EPOCH": "269568",
                "ELECTRA_FORK_EPOCH": str(FAR_FUTURE_EPOCH),
                "SLOTS_PER_EPOCH": "32",
                "SECONDS_PER_SLOT": "12",
            }
        )
        assert schedule.fork_at_epoch(74239) is ForkName.PHASE0
        assert schedule.fork_at_epoch(74240) is ForkName.ALTAIR
        assert schedule.fork_at_epoch(10**12) is ForkName.DENEB
        assert schedule.slots_per_epoch == 32

    def test_from_spec_same_epoch_prefers_later_fork(self) -> None:
        """Forks activated together resolve to the latest of them."""
        schedule = ForkSchedule.from_spec(
            {"ALTAIR_FORK_EPOCH": "0", "BELLATRIX_FORK_EPOCH": "0", "CAPELLA_FORK_EPOCH": "0"}
        )
        assert schedule.fork_at_epoch(0) is ForkName.CAPELLA

    def test_from_spec_rejects_bad_epochs(self) -> None:
        """Non-decimal epochs are rejected."""
        with pytest.raises(ValueError):
            ForkSchedule.from_spec({"ALTAIR_FORK_EPOCH": "soon"})
