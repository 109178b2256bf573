"""
Executable ledger invariants.

These tests drive longer operation sequences and check the properties that
must hold after every step. Any regression that breaks them fails CI.

INVARIANTS TESTED:
1. Exactly one non-zero administrator at all times
2. Credential ids are 1, 2, 3, ... with no gaps, repeats or reassignment
3. A record is issued at most once per subject
4. Dose count never decreases
5. Rejected operations leave state unchanged
6. Bound vaccine types never change
"""

from __future__ import annotations

import random

import pytest

from vax_ledger.errors import LedgerError
from vax_ledger.identity import is_zero_address
from vax_ledger.ledger import CredentialLedger


def addr(n: int) -> str:
    return "0x" + f"{n:040x}"


ADMIN = addr(1)
ACTORS = [addr(n) for n in range(1, 6)]
SUBJECTS = [addr(n) for n in range(100, 112)]


class InvariantViolation(Exception):
    """Raised when a ledger invariant is violated."""
    pass


def state_of(ledger: CredentialLedger) -> dict:
    return ledger.snapshot().state_body()


def random_operation(ledger: CredentialLedger, rng: random.Random):
    actor = rng.choice(ACTORS)
    subject = rng.choice(SUBJECTS)
    op = rng.randrange(7)
    if op == 0:
        return lambda: ledger.access.add_issuer(actor, rng.choice(ACTORS))
    if op == 1:
        return lambda: ledger.access.remove_issuer(actor, rng.choice(ACTORS))
    if op == 2:
        return lambda: ledger.access.transfer_administrator(actor, rng.choice(ACTORS))
    if op == 3:
        return lambda: ledger.register_vaccine_type(actor, rng.randrange(256), f"type-{rng.randrange(10)}")
    if op == 4:
        return lambda: ledger.issue_credential(actor, subject, rng.randrange(256), f"payload-{rng.random()}")
    if op == 5:
        return lambda: ledger.increment_dose_count(actor, subject)
    return lambda: ledger.is_fully_dosed(actor, subject)


class TestLedgerInvariants:

    @pytest.mark.parametrize("seed", range(8))
    def test_random_sequences_preserve_invariants(self, seed):
        rng = random.Random(seed)
        ledger = CredentialLedger.deploy(ADMIN, clock=lambda: 1_700_000_000)

        assigned_ids = {}
        doses = {}
        bound_types = dict(ledger.vaccine_types())

        for _ in range(400):
            before = state_of(ledger)
            try:
                random_operation(ledger, rng)()
            except LedgerError:
                # INVARIANT 5: rejection is all-or-nothing
                if state_of(ledger) != before:
                    raise InvariantViolation("rejected operation mutated state")
                continue

            # INVARIANT 1
            admin = ledger.access.administrator
            if is_zero_address(admin):
                raise InvariantViolation("administrator is the zero address")

            for subject in SUBJECTS:
                record = ledger.get_credential(subject)
                if record.id == 0:
                    continue
                # INVARIANT 2 + 3: never reassigned
                if assigned_ids.setdefault(subject, record.id) != record.id:
                    raise InvariantViolation(f"id of {subject} changed")
                # INVARIANT 4
                if record.dose_count < doses.get(subject, 1):
                    raise InvariantViolation(f"dose count of {subject} decreased")
                doses[subject] = record.dose_count

            # INVARIANT 6
            for code, name in ledger.vaccine_types().items():
                if name and bound_types.get(code, name) != name:
                    raise InvariantViolation(f"vaccine type {code} rebound")
                if name:
                    bound_types[code] = name

        ids = sorted(assigned_ids.values())
        assert ids == list(range(1, len(ids) + 1))
        assert ledger.next_credential_id == len(ids) + 1

    def test_ids_follow_issuance_order(self):
        ledger = CredentialLedger.deploy(ADMIN)
        for subject in SUBJECTS:
            ledger.issue_credential(ADMIN, subject, 0, "payload")

        ids = [ledger.get_credential(s).id for s in SUBJECTS]
        assert ids == list(range(1, len(SUBJECTS) + 1))

    def test_failed_issuance_leaves_no_gap(self):
        ledger = CredentialLedger.deploy(ADMIN)
        ledger.issue_credential(ADMIN, SUBJECTS[0], 0, "payload")
        with pytest.raises(LedgerError):
            ledger.issue_credential(ADMIN, SUBJECTS[0], 0, "payload")
        ledger.issue_credential(ADMIN, SUBJECTS[1], 0, "payload")

        assert ledger.get_credential(SUBJECTS[1]).id == 2

    @pytest.mark.parametrize("n", [0, 1, 2, 7])
    def test_n_increments_yield_one_plus_n(self, n):
        ledger = CredentialLedger.deploy(ADMIN)
        ledger.issue_credential(ADMIN, SUBJECTS[0], 0, "payload")
        for _ in range(n):
            ledger.increment_dose_count(ADMIN, SUBJECTS[0])

        assert ledger.get_credential(SUBJECTS[0]).dose_count == 1 + n
