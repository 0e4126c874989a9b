"""Mainnet preset constants that shape the wire types."""

from typing_extensions import Final

SLOTS_PER_EPOCH: Final = 32
"""Number of slots in an epoch."""

FAR_FUTURE_EPOCH: Final = 2**64 - 1
"""Epoch value used for forks (and exits) that are not scheduled."""

MAX_VALIDATORS_PER_COMMITTEE: Final = 2**11
"""Maximum number of validators in a single beacon committee."""

MAX_COMMITTEES_PER_SLOT: Final = 2**6
"""Maximum number of committees per slot."""

SYNC_COMMITTEE_SIZE: Final = 2**9
"""Number of validators in the sync committee."""

SYNC_COMMITTEE_SUBNET_COUNT: Final = 4
"""Number of sync committee subnets."""

DEPOSIT_CONTRACT_TREE_DEPTH: Final = 2**5
"""Depth of the deposit contract Merkle tree."""

KZG_COMMITMENT_INCLUSION_PROOF_DEPTH: Final = 17
"""Depth of the blob KZG commitment inclusion proof."""
