"""
Role-change notification tests.

Verifies:
- Event payload shape (kind, schema stamp, time-ordered id)
- Keccak topics match the EVM event signatures
- Subscribers receive events in order
"""

from __future__ import annotations

import pytest

from vax_ledger import __schema__
from vax_ledger.access import AccessControlRegistry
from vax_ledger.events import EventLog
from vax_ledger.hashing import event_topic
from vax_ledger.ledger import CredentialLedger
from vax_ledger.metrics import Metrics
from vax_ledger.models import AdministratorTransferProposed, IssuerAdded, IssuerRemoved

ADMIN = "0x" + "11" * 20
ISSUER_B = "0x" + "22" * 20


def test_issuer_added_topic_matches_signature():
    # keccak256("Transfer(address,address,uint256)") is a well-known ERC-20 topic
    assert event_topic("Transfer(address,address,uint256)") == (
        "0xddf252ad1be2c89b69c2b068fc378daa952ba7f163c4a11628f55a4df523b3ef"
    )
    assert IssuerAdded(issuer=ISSUER_B).topic == event_topic("IssuerAdded(address)")


def test_topics_are_distinct():
    topics = {
        AdministratorTransferProposed(
            previous_administrator=ADMIN, proposed_administrator=ISSUER_B
        ).topic,
        IssuerAdded(issuer=ISSUER_B).topic,
        IssuerRemoved(issuer=ISSUER_B).topic,
    }
    assert len(topics) == 3


def test_event_payload_shape():
    event = IssuerAdded(issuer=ISSUER_B)
    payload = event.model_dump(by_alias=True)

    assert payload["kind"] == "IssuerAdded"
    assert payload["schema"] == __schema__
    assert payload["event_id"].startswith("ev_")
    assert payload["issuer"] == ISSUER_B


def test_subscribers_receive_events_in_order():
    log = EventLog()
    seen = []
    log.subscribe(lambda e: seen.append(e.kind))

    registry = AccessControlRegistry(ADMIN, events=log)
    registry.add_issuer(ADMIN, ISSUER_B)
    registry.remove_issuer(ADMIN, ISSUER_B)
    registry.transfer_administrator(ADMIN, ISSUER_B)

    assert seen == ["IssuerAdded", "IssuerRemoved", "AdministratorTransferProposed"]
    assert [e.kind for e in log.all()] == seen


def test_unsubscribe():
    log = EventLog()
    seen = []
    unsubscribe = log.subscribe(seen.append)

    registry = AccessControlRegistry(ADMIN, events=log)
    registry.add_issuer(ADMIN, ISSUER_B)
    unsubscribe()
    registry.remove_issuer(ADMIN, ISSUER_B)

    assert len(seen) == 1
    assert len(log) == 2


def test_subscriber_errors_propagate():
    log = EventLog()

    def boom(_event):
        raise RuntimeError("indexer down")

    log.subscribe(boom)
    registry = AccessControlRegistry(ADMIN, events=log)

    with pytest.raises(RuntimeError, match="indexer down"):
        registry.add_issuer(ADMIN, ISSUER_B)


def test_registry_keeps_injected_empty_log_and_metrics():
    # An empty EventLog has len() == 0 and must still be used as given
    log = EventLog()
    metrics = Metrics()
    registry = AccessControlRegistry(ADMIN, events=log, metrics=metrics)

    assert registry.events is log
    assert registry.metrics is metrics

    registry.add_issuer(ADMIN, ISSUER_B)
    assert len(log) == 1
    assert metrics.get("add_issuer_total") == 1


def test_deployed_ledger_delivers_to_injected_log():
    log = EventLog()
    seen = []
    log.subscribe(seen.append)

    ledger = CredentialLedger.deploy(ADMIN, events=log)
    assert ledger.events is log

    ledger.access.add_issuer(ADMIN, ISSUER_B)
    assert [e.kind for e in seen] == ["IssuerAdded"]
    assert [e.kind for e in log.all()] == ["IssuerAdded"]


def test_restored_ledger_delivers_to_injected_log():
    snap = CredentialLedger.deploy(ADMIN).snapshot()
    log = EventLog()
    seen = []
    log.subscribe(seen.append)

    restored = CredentialLedger.restore(snap, events=log)
    assert restored.events is log
    assert len(log) == 0

    restored.access.add_issuer(ADMIN, ISSUER_B)
    assert len(log) == 1
    assert seen[0].issuer == ISSUER_B
