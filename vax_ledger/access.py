"""
Administrator and issuer role management.

Single source of truth for who may administer and who may issue. Holds
exactly one administrator and a boolean issuer map; removal clears the
flag but keeps the key, so a removed issuer can be re-added.
"""

from __future__ import annotations

import logging
from typing import Dict, Optional

from vax_ledger.errors import AlreadyIssuer, InvalidTarget, NotIssuer, Unauthorized
from vax_ledger.events import EventLog
from vax_ledger.guards import administrator_only
from vax_ledger.identity import is_zero_address, normalize_address
from vax_ledger.metrics import Metrics
from vax_ledger.models import AdministratorTransferProposed, IssuerAdded, IssuerRemoved

logger = logging.getLogger(__name__)


class AccessControlRegistry:
    """
    Administrator/issuer state machine.

    The deploying identity becomes both administrator and first issuer.
    Mutating operations take the calling identity as their first argument.

    Usage:
        access = AccessControlRegistry(deployer)
        access.add_issuer(deployer, clinic)
        access.is_issuer(clinic)  # True
    """

    def __init__(
        self,
        deployer: str,
        *,
        events: Optional[EventLog] = None,
        metrics: Optional[Metrics] = None,
    ):
        deployer = normalize_address(deployer)
        if is_zero_address(deployer):
            raise InvalidTarget("deployer cannot be the zero address")
        self._administrator = deployer
        self._issuers: Dict[str, bool] = {deployer: True}
        # EventLog defines __len__, so an empty injected log is falsy
        self.events = events if events is not None else EventLog()
        self.metrics = metrics if metrics is not None else Metrics()
        logger.info(f"AccessControlRegistry deployed by {deployer}")

    @property
    def administrator(self) -> str:
        return self._administrator

    # ------------------------------------------------------------------
    # Authorization predicates
    # ------------------------------------------------------------------

    def require_administrator(self, caller: str) -> str:
        """
        Raises:
            Unauthorized: If caller is not the current administrator
        """
        caller = normalize_address(caller)
        if caller != self._administrator:
            raise Unauthorized(caller, "administrator")
        return caller

    def require_issuer(self, caller: str) -> str:
        """
        Raises:
            Unauthorized: If caller is not a current issuer
        """
        caller = normalize_address(caller)
        if not self._issuers.get(caller, False):
            raise Unauthorized(caller, "issuer")
        return caller

    # ------------------------------------------------------------------
    # Operations
    # ------------------------------------------------------------------

    @administrator_only
    def transfer_administrator(self, caller: str, new_admin: str) -> None:
        """
        Hand the administrator role to new_admin, effective immediately.

        The emitted event is named "Proposed" but no acceptance is required.

        Raises:
            Unauthorized: If caller is not the administrator
            InvalidTarget: If new_admin is the zero address or already administrator
        """
        new_admin = normalize_address(new_admin)
        if is_zero_address(new_admin):
            raise InvalidTarget("new administrator cannot be the zero address")
        if new_admin == self._administrator:
            raise InvalidTarget(f"{new_admin} is already administrator")

        previous = self._administrator
        self._administrator = new_admin
        logger.info(f"Administrator transferred {previous} -> {new_admin}")
        self.events.emit(AdministratorTransferProposed(
            previous_administrator=previous,
            proposed_administrator=new_admin,
        ))

    @administrator_only
    def add_issuer(self, caller: str, addr: str) -> bool:
        """
        Raises:
            Unauthorized: If caller is not the administrator
            InvalidTarget: If addr is the zero address
            AlreadyIssuer: If addr is already a member
        """
        addr = normalize_address(addr)
        if is_zero_address(addr):
            raise InvalidTarget("issuer cannot be the zero address")
        if self._issuers.get(addr, False):
            raise AlreadyIssuer(f"{addr} is already an issuer")

        self._issuers[addr] = True
        logger.info(f"Issuer added: {addr}")
        self.events.emit(IssuerAdded(issuer=addr))
        return True

    @administrator_only
    def remove_issuer(self, caller: str, addr: str) -> bool:
        """
        Clear addr's membership flag. The key stays in the map.

        Raises:
            Unauthorized: If caller is not the administrator
            NotIssuer: If addr is not currently a member
        """
        addr = normalize_address(addr)
        if not self._issuers.get(addr, False):
            raise NotIssuer(f"{addr} is not an issuer")

        self._issuers[addr] = False
        logger.info(f"Issuer removed: {addr}")
        self.events.emit(IssuerRemoved(issuer=addr))
        return True

    def is_issuer(self, addr: str) -> bool:
        return self._issuers.get(normalize_address(addr), False)

    def issuer_flags(self) -> Dict[str, bool]:
        """Copy of the membership map, including cleared flags."""
        return dict(self._issuers)

    @classmethod
    def from_state(
        cls,
        administrator: str,
        issuers: Dict[str, bool],
        *,
        events: Optional[EventLog] = None,
        metrics: Optional[Metrics] = None,
    ) -> AccessControlRegistry:
        """Rebuild a registry from persisted state without emitting events."""
        registry = cls(administrator, events=events, metrics=metrics)
        registry._issuers = {normalize_address(a): bool(f) for a, f in issuers.items()}
        return registry
