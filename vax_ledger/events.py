"""
In-process notification log.

Keeps emitted events in order and fans them out to subscribers. Delivery
to off-system observers (persistence, indexing) is the host's concern;
a host wires that in with subscribe().
"""

from __future__ import annotations

import logging
from typing import Callable, List, Type

from vax_ledger.models import Event, LedgerEvent

logger = logging.getLogger(__name__)

Subscriber = Callable[[LedgerEvent], None]


class EventLog:
    def __init__(self) -> None:
        self._events: List[LedgerEvent] = []
        self._subscribers: List[Subscriber] = []

    def subscribe(self, callback: Subscriber) -> Callable[[], None]:
        """
        Register a callback for every future event.

        Returns:
            Function that removes the subscription
        """
        self._subscribers.append(callback)

        def unsubscribe() -> None:
            if callback in self._subscribers:
                self._subscribers.remove(callback)

        return unsubscribe

    def emit(self, event: Event) -> None:
        self._events.append(event)
        logger.info(f"{event.kind} {event.topic[:10]} {event.event_id}")
        for callback in list(self._subscribers):
            callback(event)

    def all(self) -> List[LedgerEvent]:
        return list(self._events)

    def of_kind(self, kind: Type[LedgerEvent]) -> List[LedgerEvent]:
        return [e for e in self._events if isinstance(e, kind)]

    def __len__(self) -> int:
        return len(self._events)
