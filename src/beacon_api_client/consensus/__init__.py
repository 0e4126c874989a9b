"""
Consensus containers of the beacon chain, in their Beacon API JSON form.

Each fork lives in its own module and extends the previous one. The
`variants` module maps fork names to the concrete shape of every
fork-dependent object.
"""

from . import altair, bellatrix, capella, deneb, electra, phase0, variants
from .constants import SLOTS_PER_EPOCH
from .forks import (
    ForkName,
    ForkSchedule,
    ForkVariants,
    UnknownForkError,
    UnsupportedForkError,
)
from .primitives import (
    BlobIndex,
    BLSPubkey,
    BLSSignature,
    ColumnIndex,
    CommitteeIndex,
    Epoch,
    ExecutionAddress,
    Gwei,
    Hash32,
    KZGCommitment,
    KZGProof,
    Root,
    Slot,
    ValidatorIndex,
    Version,
    WithdrawalIndex,
)

__all__ = [
    # Forks
    "ForkName",
    "ForkSchedule",
    "ForkVariants",
    "UnknownForkError",
    "UnsupportedForkError",
    "SLOTS_PER_EPOCH",
    # Primitives
    "BlobIndex",
    "BLSPubkey",
    "BLSSignature",
    "ColumnIndex",
    "CommitteeIndex",
    "Epoch",
    "ExecutionAddress",
    "Gwei",
    "Hash32",
    "KZGCommitment",
    "KZGProof",
    "Root",
    "Slot",
    "ValidatorIndex",
    "Version",
    "WithdrawalIndex",
    # Fork modules
    "phase0",
    "altair",
    "bellatrix",
    "capella",
    "deneb",
    "electra",
    "variants",
]
