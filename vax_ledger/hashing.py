from __future__ import annotations

import hashlib
import json
from typing import Any

from eth_utils import keccak


def canonical(obj: Any) -> bytes:
    """Canonical JSON serialization for deterministic hashing."""
    return json.dumps(obj, sort_keys=True, separators=(",", ":")).encode("utf-8")

def sha256(data: bytes) -> str:
    return hashlib.sha256(data).hexdigest()

# Domain-separated hashing (prevents structural collisions)
def h_state(state: dict) -> str:
    """Hash a ledger state snapshot body."""
    return sha256(b"VAXSTATE\x00" + canonical(state))

def event_topic(signature: str) -> str:
    """
    Keccak-256 topic of an event signature, e.g. "IssuerAdded(address)".

    Matches the topic an EVM log indexer would filter on.
    """
    return "0x" + keccak(text=signature).hex()
