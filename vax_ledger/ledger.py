"""
Vaccination credential ledger.

Owns the vaccine-type reference table and one credential record per
subject. All mutations are issuer-only; authorization is delegated to an
AccessControlRegistry.

Record lifecycle:
    Absent (id 0) --issue_credential--> Issued (dose 1)
    Issued (dose k) --increment_dose_count--> Issued (dose k + 1)

There is no way back to Absent and no terminal state.
"""

from __future__ import annotations

import logging
import time
from typing import Callable, Dict, Final, Optional

from vax_ledger.access import AccessControlRegistry
from vax_ledger.errors import (
    AlreadyIssued,
    InvalidTarget,
    InvalidVaccineCode,
    NotYetIssued,
    SnapshotError,
    TypeAlreadyDefined,
)
from vax_ledger.events import EventLog
from vax_ledger.guards import issuer_only
from vax_ledger.identity import is_zero_address, normalize_address
from vax_ledger.metrics import Metrics
from vax_ledger.models import CredentialRecord, LedgerSnapshot
from vax_ledger.settings import Settings

logger = logging.getLogger(__name__)

WAITING_PERIOD_SECONDS: Final[int] = 14 * 24 * 60 * 60

DEFAULT_VACCINE_TYPES: Final[Dict[int, str]] = {
    0: "Pfizer-BioNTech",
    1: "Moderna",
    2: "AstraZeneca",
}

Clock = Callable[[], int]


def _system_clock() -> int:
    return int(time.time())


def _check_code(code: int) -> int:
    if isinstance(code, bool) or not isinstance(code, int) or not (0 <= code <= 0xFF):
        raise InvalidVaccineCode(f"vaccine type code must be 0-255, got {code!r}")
    return code


class CredentialLedger:
    """
    Issuer-gated credential store.

    Usage:
        ledger = CredentialLedger(AccessControlRegistry(deployer))
        ledger.issue_credential(deployer, subject, 0, "signed-payload")
        ledger.increment_dose_count(deployer, subject)
        ledger.get_credential(subject).dose_count  # 2

    Args:
        access: Registry consulted for every issuer-only operation
        clock: Returns current unix time in seconds
        seed_vaccine_types: Pre-populate DEFAULT_VACCINE_TYPES
    """

    def __init__(
        self,
        access: AccessControlRegistry,
        *,
        clock: Optional[Clock] = None,
        seed_vaccine_types: bool = True,
    ):
        self.access = access
        self.clock: Clock = clock or _system_clock
        self._vaccine_types: Dict[int, str] = dict(DEFAULT_VACCINE_TYPES) if seed_vaccine_types else {}
        self._credentials: Dict[str, CredentialRecord] = {}
        self._next_id = 1

    @classmethod
    def deploy(
        cls,
        deployer: str,
        *,
        clock: Optional[Clock] = None,
        seed_vaccine_types: bool = True,
        events: Optional[EventLog] = None,
        metrics: Optional[Metrics] = None,
    ) -> CredentialLedger:
        """Create registry and ledger together; deployer becomes administrator and issuer."""
        access = AccessControlRegistry(deployer, events=events, metrics=metrics)
        return cls(access, clock=clock, seed_vaccine_types=seed_vaccine_types)

    @classmethod
    def from_settings(cls, settings: Settings, *, clock: Optional[Clock] = None) -> CredentialLedger:
        return cls.deploy(
            settings.DEPLOYER,
            clock=clock,
            seed_vaccine_types=settings.SEED_VACCINE_TYPES,
        )

    @property
    def events(self) -> EventLog:
        return self.access.events

    @property
    def metrics(self) -> Metrics:
        return self.access.metrics

    @property
    def next_credential_id(self) -> int:
        return self._next_id

    # ------------------------------------------------------------------
    # Vaccine types
    # ------------------------------------------------------------------

    @issuer_only
    def register_vaccine_type(self, caller: str, code: int, name: str) -> bool:
        """
        Bind code -> name permanently.

        Raises:
            Unauthorized: If caller is not an issuer
            InvalidVaccineCode: If code is outside 0-255
            TypeAlreadyDefined: If code is already bound to a non-empty name
        """
        code = _check_code(code)
        if self._vaccine_types.get(code):
            raise TypeAlreadyDefined(f"vaccine type {code} already defined as {self._vaccine_types[code]!r}")

        self._vaccine_types[code] = name
        logger.info(f"Vaccine type {code} registered as {name!r} by {caller}")
        return True

    def get_vaccine_type(self, code: int) -> str:
        return self._vaccine_types.get(_check_code(code), "")

    def vaccine_types(self) -> Dict[int, str]:
        return dict(self._vaccine_types)

    # ------------------------------------------------------------------
    # Credentials
    # ------------------------------------------------------------------

    @issuer_only
    def issue_credential(self, caller: str, subject: str, vaccine_type: int, payload: str) -> bool:
        """
        Issue the subject's one and only credential.

        vaccine_type is stored as given; it is not required to be registered.

        Raises:
            Unauthorized: If caller is not an issuer
            InvalidTarget: If subject is the zero address
            InvalidVaccineCode: If vaccine_type is outside 0-255
            AlreadyIssued: If the subject already has a credential
        """
        subject = normalize_address(subject)
        if is_zero_address(subject):
            raise InvalidTarget("subject cannot be the zero address")
        vaccine_type = _check_code(vaccine_type)
        if self._record(subject).id != 0:
            raise AlreadyIssued(f"credential already issued for {subject}")

        record = CredentialRecord(
            id=self._next_id,
            issuer=caller,
            vaccine_type=vaccine_type,
            dose_count=1,
            payload=payload,
            created_at=int(self.clock()),
        )
        self._credentials[subject] = record
        self._next_id += 1
        self.metrics.observe("credentials_issued", record.id)
        logger.info(f"Credential {record.id} issued by {caller} (type {vaccine_type})")
        return True

    def get_credential(self, subject: str) -> CredentialRecord:
        """Return a copy of the subject's record, or the zero-id record if absent."""
        return self._record(normalize_address(subject)).model_copy()

    @issuer_only
    def increment_dose_count(self, caller: str, subject: str) -> bool:
        """
        Record one more dose. Any current issuer may amend any record.

        Raises:
            Unauthorized: If caller is not an issuer
            NotYetIssued: If the subject has no credential
        """
        subject = normalize_address(subject)
        record = self._record(subject)
        if record.dose_count < 1:
            raise NotYetIssued(f"no credential issued for {subject}")

        record.dose_count += 1
        logger.info(f"Credential {record.id} dose count -> {record.dose_count} by {caller}")
        return True

    @issuer_only
    def is_fully_dosed(self, caller: str, subject: str) -> bool:
        """True once at least one dose is recorded; there is no regimen notion."""
        return self._record(normalize_address(subject)).dose_count >= 1

    @issuer_only
    def has_elapsed_waiting_period(self, caller: str, subject: str) -> bool:
        """True iff more than two weeks have passed since the record was created."""
        record = self._record(normalize_address(subject))
        return int(self.clock()) - record.created_at > WAITING_PERIOD_SECONDS

    def _record(self, subject: str) -> CredentialRecord:
        return self._credentials.get(subject) or CredentialRecord()

    # ------------------------------------------------------------------
    # Snapshots
    # ------------------------------------------------------------------

    def snapshot(self) -> LedgerSnapshot:
        """Capture the full persisted state, sealed with a state hash."""
        return LedgerSnapshot(
            administrator=self.access.administrator,
            issuers=self.access.issuer_flags(),
            vaccine_types=dict(self._vaccine_types),
            credentials={s: r.model_copy() for s, r in self._credentials.items()},
            next_credential_id=self._next_id,
        ).seal()

    @classmethod
    def restore(
        cls,
        snapshot: LedgerSnapshot,
        *,
        clock: Optional[Clock] = None,
        events: Optional[EventLog] = None,
        metrics: Optional[Metrics] = None,
    ) -> CredentialLedger:
        """
        Rebuild a ledger from a snapshot.

        Raises:
            SnapshotError: If the snapshot is unsealed, the state hash does
                not match, a stored record is not in the Issued state,
                credential ids collide, or the counter does not exceed
                every stored id
        """
        if snapshot.state_hash is None:
            raise SnapshotError(f"unsealed snapshot {snapshot.snapshot_id}")
        if snapshot.state_hash != snapshot.compute_hash():
            raise SnapshotError(f"state hash mismatch for snapshot {snapshot.snapshot_id}")

        ids = [r.id for r in snapshot.credentials.values()]
        if snapshot.next_credential_id < 1:
            raise SnapshotError("next_credential_id must be at least 1")
        for subject, record in snapshot.credentials.items():
            if record.id < 1:
                raise SnapshotError(f"stored credential for {subject} with non-positive id")
            if record.dose_count < 1:
                raise SnapshotError(f"issued credential {record.id} has dose count {record.dose_count}")
            try:
                _check_code(record.vaccine_type)
            except InvalidVaccineCode as e:
                raise SnapshotError(f"credential {record.id}: {e}") from e
        for code in snapshot.vaccine_types:
            try:
                _check_code(code)
            except InvalidVaccineCode as e:
                raise SnapshotError(f"vaccine type table: {e}") from e
        if len(ids) != len(set(ids)):
            raise SnapshotError("duplicate credential ids")
        if ids and snapshot.next_credential_id <= max(ids):
            raise SnapshotError(
                f"next_credential_id {snapshot.next_credential_id} does not exceed stored id {max(ids)}"
            )

        access = AccessControlRegistry.from_state(
            snapshot.administrator, snapshot.issuers, events=events, metrics=metrics
        )
        ledger = cls(access, clock=clock, seed_vaccine_types=False)
        for code, name in snapshot.vaccine_types.items():
            ledger._vaccine_types[code] = name
        ledger._credentials = {
            normalize_address(s): r.model_copy() for s, r in snapshot.credentials.items()
        }
        ledger._next_id = snapshot.next_credential_id
        logger.info(f"Ledger restored from {snapshot.snapshot_id} ({len(ids)} credentials)")
        return ledger
