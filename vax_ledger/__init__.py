"""
Vax Ledger - Authorization-gated vaccination credential ledger.

An administrator manages a set of trusted issuers; issuers record one
credential per subject and amend its dose count.

Schema Version: vax-ledger/v1
"""

__version__ = "0.1.0"
__schema__ = "vax-ledger/v1"

from vax_ledger.access import AccessControlRegistry
from vax_ledger.errors import (
    AlreadyIssued,
    AlreadyIssuer,
    InvalidAddress,
    InvalidTarget,
    InvalidVaccineCode,
    LedgerError,
    NotIssuer,
    NotYetIssued,
    SnapshotError,
    TypeAlreadyDefined,
    Unauthorized,
)
from vax_ledger.ledger import WAITING_PERIOD_SECONDS, CredentialLedger
from vax_ledger.models import CredentialRecord, LedgerSnapshot

__all__ = [
    "AccessControlRegistry",
    "AlreadyIssued",
    "AlreadyIssuer",
    "CredentialLedger",
    "CredentialRecord",
    "InvalidAddress",
    "InvalidTarget",
    "InvalidVaccineCode",
    "LedgerError",
    "LedgerSnapshot",
    "NotIssuer",
    "NotYetIssued",
    "SnapshotError",
    "TypeAlreadyDefined",
    "Unauthorized",
    "WAITING_PERIOD_SECONDS",
]
