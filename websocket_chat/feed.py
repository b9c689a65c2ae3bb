"""
In-process change feed.

Committed row changes are published per table; subscribers register a handler
with optional equality filters and get back a :class:`Subscription` handle.
Handlers run after the transaction commits, in commit order, once per row.
"""

import logging
import threading
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, FrozenSet, List, Optional

from django.db import transaction

logger = logging.getLogger(__name__)

INSERT = 'INSERT'
UPDATE = 'UPDATE'


@dataclass(frozen=True)
class ChangeEvent:
    table: str
    event_type: str
    record: Any


@dataclass(eq=False)
class Subscription:
    feed: 'ChangeFeed'
    table: str
    handler: Callable[[ChangeEvent], None]
    filters: Dict[str, Any] = field(default_factory=dict)
    events: Optional[FrozenSet[str]] = None
    active: bool = True

    def matches(self, event: ChangeEvent) -> bool:
        if self.events is not None and event.event_type not in self.events:
            return False
        for name, expected in self.filters.items():
            if str(getattr(event.record, name, None)) != str(expected):
                return False
        return True

    def cancel(self) -> None:
        """Stop receiving events. Safe to call more than once."""
        if not self.active:
            return
        self.active = False
        self.feed._discard(self)

    def __enter__(self):
        return self

    def __exit__(self, *exc_info):
        self.cancel()


class ChangeFeed:
    def __init__(self):
        self._lock = threading.Lock()
        self._subscriptions: Dict[str, List[Subscription]] = {}

    def subscribe(self, table, handler, filters=None, events=None) -> Subscription:
        subscription = Subscription(
            feed=self,
            table=table,
            handler=handler,
            filters=dict(filters or {}),
            events=frozenset(events) if events else None,
        )
        with self._lock:
            self._subscriptions.setdefault(table, []).append(subscription)
        return subscription

    def _discard(self, subscription: Subscription) -> None:
        with self._lock:
            subscribers = self._subscriptions.get(subscription.table, [])
            if subscription in subscribers:
                subscribers.remove(subscription)

    def subscriber_count(self, table) -> int:
        with self._lock:
            return len(self._subscriptions.get(table, []))

    def publish(self, table, event_type, record) -> None:
        """Deliver an event to every matching subscriber now."""
        event = ChangeEvent(table=table, event_type=event_type, record=record)
        with self._lock:
            subscribers = list(self._subscriptions.get(table, []))

        for subscription in subscribers:
            # A subscription cancelled by an earlier handler gets nothing more
            if not subscription.active or not subscription.matches(event):
                continue
            try:
                subscription.handler(event)
            except Exception:
                logger.exception("Change feed handler failed for %s %s", table, event_type)

    def publish_on_commit(self, table, event_type, record, using=None) -> None:
        """Deliver the event once the surrounding transaction commits."""
        transaction.on_commit(lambda: self.publish(table, event_type, record), using=using)


change_feed = ChangeFeed()
