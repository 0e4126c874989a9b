"""Deneb containers: blobs."""

from pydantic import field_validator

from beacon_api_client.types import Blob, Bytes32, Uint64, WireLengthError, WireModel

from . import capella, phase0
from .constants import KZG_COMMITMENT_INCLUSION_PROOF_DEPTH
from .primitives import BlobIndex, KZGCommitment, KZGProof


class ExecutionPayload(capella.ExecutionPayload):
    blob_gas_used: Uint64
    excess_blob_gas: Uint64


class BeaconBlockBody(capella.BeaconBlockBody):
    execution_payload: ExecutionPayload
    blob_kzg_commitments: tuple[KZGCommitment, ...]


class BeaconBlock(capella.BeaconBlock):
    body: BeaconBlockBody


class SignedBeaconBlock(capella.SignedBeaconBlock):
    message: BeaconBlock


class BlobSidecar(WireModel):
    """A blob together with the proofs tying it to its block."""

    index: BlobIndex
    blob: Blob
    kzg_commitment: KZGCommitment
    kzg_proof: KZGProof
    signed_block_header: phase0.SignedBeaconBlockHeader
    kzg_commitment_inclusion_proof: tuple[Bytes32, ...]

    @field_validator("kzg_commitment_inclusion_proof")
    @classmethod
    def _check_proof_depth(cls, proof: tuple[Bytes32, ...]) -> tuple[Bytes32, ...]:
        if len(proof) != KZG_COMMITMENT_INCLUSION_PROOF_DEPTH:
            raise WireLengthError(
                "BlobSidecar.kzg_commitment_inclusion_proof",
                expected=KZG_COMMITMENT_INCLUSION_PROOF_DEPTH,
                actual=len(proof),
                unit="nodes",
            )
        return proof
