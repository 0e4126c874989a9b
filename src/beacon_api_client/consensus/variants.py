"""Fork dispatch tables for the fork-dependent consensus objects."""

from . import altair, bellatrix, capella, deneb, electra, phase0
from .forks import ForkName, ForkVariants

SIGNED_BEACON_BLOCK = ForkVariants(
    "SignedBeaconBlock",
    {
        ForkName.PHASE0: phase0.SignedBeaconBlock,
        ForkName.ALTAIR: altair.SignedBeaconBlock,
        ForkName.BELLATRIX: bellatrix.SignedBeaconBlock,
        ForkName.CAPELLA: capella.SignedBeaconBlock,
        ForkName.DENEB: deneb.SignedBeaconBlock,
        ForkName.ELECTRA: electra.SignedBeaconBlock,
        ForkName.FULU: electra.SignedBeaconBlock,
    },
)
"""Signed blocks, as served by `/eth/v2/beacon/blocks/{block_id}`."""

ATTESTATION = ForkVariants(
    "Attestation",
    {
        ForkName.PHASE0: phase0.Attestation,
        ForkName.ALTAIR: phase0.Attestation,
        ForkName.BELLATRIX: phase0.Attestation,
        ForkName.CAPELLA: phase0.Attestation,
        ForkName.DENEB: phase0.Attestation,
        ForkName.ELECTRA: electra.Attestation,
        ForkName.FULU: electra.Attestation,
    },
)
"""Aggregate attestations; Electra adds `committee_bits`."""

ATTESTER_SLASHING = ForkVariants(
    "AttesterSlashing",
    {
        ForkName.PHASE0: phase0.AttesterSlashing,
        ForkName.ALTAIR: phase0.AttesterSlashing,
        ForkName.BELLATRIX: phase0.AttesterSlashing,
        ForkName.CAPELLA: phase0.AttesterSlashing,
        ForkName.DENEB: phase0.AttesterSlashing,
        ForkName.ELECTRA: electra.AttesterSlashing,
        ForkName.FULU: electra.AttesterSlashing,
    },
)
"""Attester slashings; Electra raises the attesting index limit."""
