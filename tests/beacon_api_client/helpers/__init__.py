"""Wire JSON builders shared by the beacon_api_client tests."""

from __future__ import annotations

import json
from typing import Any

SIGNATURE = "0x" + "c0" * 96
PUBKEY = "0x" + "a0" * 48


def hex_root(byte: int) -> str:
    """A 32-byte root filled with `byte`."""
    return "0x" + f"{byte:02x}" * 32


def checkpoint_json(epoch: int, byte: int = 1) -> dict[str, Any]:
    return {"epoch": str(epoch), "root": hex_root(byte)}


def attestation_data_json(slot: int, index: int = 0) -> dict[str, Any]:
    return {
        "slot": str(slot),
        "index": str(index),
        "beacon_block_root": hex_root(2),
        "source": checkpoint_json(0, 3),
        "target": checkpoint_json(slot // 32, 4),
    }


def phase0_attestation_json(slot: int) -> dict[str, Any]:
    return {
        "aggregation_bits": "0x0d",
        "data": attestation_data_json(slot),
        "signature": SIGNATURE,
    }


def electra_attestation_json(slot: int) -> dict[str, Any]:
    return {
        **phase0_attestation_json(slot),
        "committee_bits": "0x0100000000000000",
    }


def head_json(slot: int) -> dict[str, Any]:
    return {
        "slot": str(slot),
        "block": hex_root(5),
        "state": hex_root(6),
        "epoch_transition": slot % 32 == 0,
        "previous_duty_dependent_root": hex_root(7),
        "current_duty_dependent_root": hex_root(8),
        "execution_optimistic": False,
    }


def finalized_checkpoint_json(epoch: int) -> dict[str, Any]:
    return {
        "block": hex_root(9),
        "state": hex_root(10),
        "epoch": str(epoch),
        "execution_optimistic": False,
    }


def phase0_block_json(slot: int) -> dict[str, Any]:
    return {
        "message": {
            "slot": str(slot),
            "proposer_index": "1",
            "parent_root": hex_root(11),
            "state_root": hex_root(12),
            "body": {
                "randao_reveal": SIGNATURE,
                "eth1_data": {
                    "deposit_root": hex_root(13),
                    "deposit_count": "64",
                    "block_hash": hex_root(14),
                },
                "graffiti": hex_root(0),
                "proposer_slashings": [],
                "attester_slashings": [],
                "attestations": [phase0_attestation_json(slot - 1)],
                "deposits": [],
                "voluntary_exits": [],
            },
        },
        "signature": SIGNATURE,
    }


def altair_block_json(slot: int) -> dict[str, Any]:
    block = phase0_block_json(slot)
    block["message"]["body"]["sync_aggregate"] = {
        "sync_committee_bits": "0x" + "ff" * 64,
        "sync_committee_signature": SIGNATURE,
    }
    return block


def sse_frame(event: str, data: Any, *, event_id: str | None = None) -> str:
    """One SSE frame, with `data` JSON-encoded unless it is already text."""
    payload = data if isinstance(data, str) else json.dumps(data)
    lines = [f"event: {event}", f"data: {payload}"]
    if event_id is not None:
        lines.append(f"id: {event_id}")
    return "\n".join(lines) + "\n\n"
