"""Named primitive types of the consensus layer."""

from beacon_api_client.types import Bytes4, Bytes20, Bytes32, Bytes48, Bytes96, Uint64


class Slot(Uint64):
    """A slot number."""


class Epoch(Uint64):
    """An epoch number."""


class CommitteeIndex(Uint64):
    """Index of a committee within a slot."""


class ValidatorIndex(Uint64):
    """Index of a validator in the registry."""


class Gwei(Uint64):
    """An amount in Gwei."""


class WithdrawalIndex(Uint64):
    """Global index of a withdrawal."""


class BlobIndex(Uint64):
    """Index of a blob within a block."""


class ColumnIndex(Uint64):
    """Index of a data column."""


class Root(Bytes32):
    """A 32-byte hash tree root."""


class Hash32(Bytes32):
    """A 32-byte execution-layer hash."""


class Version(Bytes4):
    """A 4-byte fork version."""


class ExecutionAddress(Bytes20):
    """A 20-byte execution-layer address."""


class BLSPubkey(Bytes48):
    """A compressed BLS12-381 public key."""


class BLSSignature(Bytes96):
    """A compressed BLS12-381 signature."""


class KZGCommitment(Bytes48):
    """A KZG commitment to a blob."""


class KZGProof(Bytes48):
    """A KZG proof."""
