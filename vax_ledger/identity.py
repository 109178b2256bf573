"""
Account identifiers.

Identities are Ethereum-style 20-byte addresses, normalized to EIP-55
checksum form so that one account has exactly one spelling in ledger state.
"""

from __future__ import annotations

from typing import Final

from eth_utils import is_hex_address, to_checksum_address

from vax_ledger.errors import InvalidAddress

ZERO_ADDRESS: Final[str] = "0x" + "00" * 20


def normalize_address(addr: str) -> str:
    """
    Validate and checksum an account address.

    Raises:
        InvalidAddress: If addr is not a 0x-prefixed 20-byte hex string
    """
    if not isinstance(addr, str) or not is_hex_address(addr):
        raise InvalidAddress(f"not an account address: {addr!r}")
    return to_checksum_address(addr)


def is_zero_address(addr: str) -> bool:
    return int(addr, 16) == 0
