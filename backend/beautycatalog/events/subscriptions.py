"""
In-process subscription fan-out for live catalog queries.

Subscribers register a CatalogQuery and a callback. They receive the full
result list once on subscribe and again after every committed change to
the query's collection. Subscriptions on an identical query share one
snapshot load per change but are otherwise independent.
"""

from __future__ import annotations

from dataclasses import dataclass, field
import itertools
import logging
import threading
from typing import Any, Callable, Dict, List, Optional, Tuple

from ..core.exceptions import (
    RepositoryException,
    TransientStoreException,
    ValidationException,
)
from ..core.ulid_helper import generate_ulid
from ..monitoring.prometheus_metrics import prometheus_metrics
from .catalog_queries import CatalogQuery, Collection

logger = logging.getLogger(__name__)

Snapshot = List[Dict[str, Any]]
SnapshotListener = Callable[[Snapshot], None]
SnapshotLoaderFn = Callable[[CatalogQuery], Snapshot]
Unsubscribe = Callable[[], None]


@dataclass(eq=False)
class Subscription:
    """One registered consumer of a catalog query."""

    id: str
    query: CatalogQuery
    callback: SnapshotListener
    active: bool = True
    last_sequence: int = -1
    _delivery_lock: threading.Lock = field(default_factory=threading.Lock, repr=False)

    def deliver(self, snapshot: Snapshot, sequence: int) -> bool:
        """
        Hand a snapshot to the callback unless it is stale or unsubscribed.

        Returns True if the callback ran without raising.
        """
        with self._delivery_lock:
            if not self.active or sequence <= self.last_sequence:
                return True
            self.last_sequence = sequence
            try:
                self.callback(list(snapshot))
            except Exception:
                logger.exception(
                    "Catalog subscriber %s failed on %s", self.id, self.query.collection.value
                )
                return False
            return True


class SubscriptionFanout:
    """
    Registry of live catalog queries keyed by query signature.

    The registry is guarded by a single lock. Snapshot loading and callback
    invocation happen outside it, so a slow consumer never blocks writers
    or other subscribers from registering.
    """

    def __init__(self, loader: SnapshotLoaderFn):
        self._loader = loader
        self._lock = threading.Lock()
        self._registry: Dict[str, Dict[str, Subscription]] = {}
        self._sequence = itertools.count()

    def subscribe(self, query: CatalogQuery, on_change: SnapshotListener) -> Unsubscribe:
        """
        Register ``on_change`` for ``query`` and deliver the initial snapshot.

        Returns:
            A callable that cancels the subscription; calling it twice is a no-op.

        Raises:
            TransientStoreException: If the store fails while loading the initial snapshot
            ValidationException: If the query names fields the collection lacks
        """
        subscription = Subscription(id=generate_ulid(), query=query, callback=on_change)
        with self._lock:
            self._registry.setdefault(query.signature, {})[subscription.id] = subscription
            sequence = next(self._sequence)
        self._update_gauge(query.collection)
        logger.debug("Subscribed %s to %s", subscription.id, query.signature)

        try:
            snapshot = self._loader(query)
        except RepositoryException as exc:
            self._remove(subscription)
            if exc.transient:
                raise TransientStoreException(
                    "Could not load the initial catalog snapshot", code="SNAPSHOT_UNAVAILABLE"
                ) from exc
            raise ValidationException(
                "The catalog query cannot be run",
                code="INVALID_QUERY",
                details={"collection": query.collection.value, "reason": str(exc)},
            ) from exc

        delivered = subscription.deliver(snapshot, sequence)
        prometheus_metrics.record_subscription_delivery(query.collection.value, delivered)

        def unsubscribe() -> None:
            self._remove(subscription)

        return unsubscribe

    def notify(self, collection: Collection) -> None:
        """
        Re-run every live query on ``collection`` and deliver the results.

        Called after a write has committed. Never raises: load failures and
        consumer errors are logged.
        """
        with self._lock:
            groups: List[Tuple[CatalogQuery, List[Subscription]]] = [
                (next(iter(subs.values())).query, list(subs.values()))
                for subs in self._registry.values()
                if subs and next(iter(subs.values())).query.collection == collection
            ]
            sequence = next(self._sequence)

        for query, subscriptions in groups:
            try:
                snapshot = self._loader(query)
            except Exception:
                logger.exception("Failed to reload catalog snapshot for %s", query.signature)
                prometheus_metrics.record_subscription_delivery(collection.value, False)
                continue
            for subscription in subscriptions:
                delivered = subscription.deliver(snapshot, sequence)
                prometheus_metrics.record_subscription_delivery(collection.value, delivered)

    def subscription_count(self, query: Optional[CatalogQuery] = None) -> int:
        with self._lock:
            if query is not None:
                return len(self._registry.get(query.signature, {}))
            return sum(len(subs) for subs in self._registry.values())

    def _remove(self, subscription: Subscription) -> None:
        subscription.active = False
        signature = subscription.query.signature
        with self._lock:
            subs = self._registry.get(signature)
            if subs is None or subs.pop(subscription.id, None) is None:
                return
            if not subs:
                del self._registry[signature]
        self._update_gauge(subscription.query.collection)
        logger.debug("Unsubscribed %s from %s", subscription.id, signature)

    def _update_gauge(self, collection: Collection) -> None:
        with self._lock:
            count = sum(
                len(subs)
                for subs in self._registry.values()
                if subs and next(iter(subs.values())).query.collection == collection
            )
        prometheus_metrics.set_active_subscriptions(collection.value, count)


_fanout: Optional[SubscriptionFanout] = None
_fanout_lock = threading.Lock()


def get_subscription_fanout() -> SubscriptionFanout:
    """Process-wide fan-out loading snapshots through SessionLocal."""
    global _fanout
    with _fanout_lock:
        if _fanout is None:
            from ..database import SessionLocal
            from .snapshot_loader import SnapshotLoader

            _fanout = SubscriptionFanout(SnapshotLoader(SessionLocal))
        return _fanout
