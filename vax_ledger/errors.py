"""
Ledger rejection taxonomy.

Every rejected operation raises one of these before any state is touched,
so a caught LedgerError always means "state unchanged".
"""

from __future__ import annotations


class LedgerError(Exception):
    """Base class for all rejected ledger operations."""
    pass


class Unauthorized(LedgerError):
    """Caller is not the administrator, or not a current issuer."""

    def __init__(self, caller: str, role: str):
        self.caller = caller
        self.role = role
        super().__init__(f"{caller} is not {role}")


class InvalidTarget(LedgerError):
    """Supplied identifier is the zero address or a self-transfer."""
    pass


class InvalidAddress(LedgerError, ValueError):
    """Identifier is not a 20-byte hex account address."""
    pass


class InvalidVaccineCode(LedgerError, ValueError):
    """Vaccine-type code is not an integer in 0-255."""
    pass


class AlreadyIssuer(LedgerError):
    pass


class NotIssuer(LedgerError):
    pass


class TypeAlreadyDefined(LedgerError):
    pass


class AlreadyIssued(LedgerError):
    """Subject already holds a credential (id != 0)."""
    pass


class NotYetIssued(LedgerError):
    """Subject has no credential to amend."""
    pass


class SnapshotError(LedgerError):
    """Snapshot is internally inconsistent and cannot be restored."""
    pass
