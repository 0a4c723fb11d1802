# backend/tests/unit/events/test_subscriptions.py
"""
SubscriptionFanout with an in-memory snapshot loader.
"""

import threading
from typing import Any, Dict, List
from unittest.mock import MagicMock

import pytest

from beautycatalog.core.exceptions import (
    RepositoryException,
    TransientStoreException,
    ValidationException,
)
from beautycatalog.events.catalog_queries import (
    CatalogQuery,
    Collection,
    all_categories,
    providers_for_service,
)
from beautycatalog.events.subscriptions import SubscriptionFanout


class FakeLoader:
    """Returns whatever rows are currently stored for a signature."""

    def __init__(self) -> None:
        self.rows: Dict[str, List[Dict[str, Any]]] = {}
        self.calls: List[str] = []

    def __call__(self, query: CatalogQuery) -> List[Dict[str, Any]]:
        self.calls.append(query.signature)
        return list(self.rows.get(query.signature, []))


@pytest.fixture
def loader() -> FakeLoader:
    return FakeLoader()


@pytest.fixture
def fanout(loader: FakeLoader) -> SubscriptionFanout:
    return SubscriptionFanout(loader)


def test_initial_snapshot_is_delivered_on_subscribe(fanout, loader):
    query = providers_for_service("svc-1")
    loader.rows[query.signature] = [{"id": "a"}]
    received: List[List[Dict[str, Any]]] = []

    fanout.subscribe(query, received.append)

    assert received == [[{"id": "a"}]]


def test_notify_delivers_full_current_list(fanout, loader):
    query = providers_for_service("svc-1")
    received: List[List[Dict[str, Any]]] = []
    fanout.subscribe(query, received.append)

    loader.rows[query.signature] = [{"id": "a"}, {"id": "b"}]
    fanout.notify(Collection.PROVIDERS)

    assert received == [[], [{"id": "a"}, {"id": "b"}]]


def test_notify_only_reaches_queries_on_that_collection(fanout):
    providers: List[Any] = []
    categories: List[Any] = []
    fanout.subscribe(providers_for_service("svc-1"), providers.append)
    fanout.subscribe(all_categories(), categories.append)

    fanout.notify(Collection.CATEGORIES)

    assert len(providers) == 1
    assert len(categories) == 2


def test_identical_queries_share_one_load_per_change(fanout, loader):
    query = providers_for_service("svc-1")
    fanout.subscribe(query, lambda rows: None)
    fanout.subscribe(providers_for_service("svc-1"), lambda rows: None)
    loader.calls.clear()

    fanout.notify(Collection.PROVIDERS)

    assert loader.calls == [query.signature]
    assert fanout.subscription_count(query) == 2


def test_unsubscribe_stops_delivery_and_is_idempotent(fanout):
    query = providers_for_service("svc-1")
    first: List[Any] = []
    second: List[Any] = []
    unsubscribe_first = fanout.subscribe(query, first.append)
    fanout.subscribe(query, second.append)

    unsubscribe_first()
    unsubscribe_first()
    fanout.notify(Collection.PROVIDERS)

    assert len(first) == 1
    assert len(second) == 2
    assert fanout.subscription_count(query) == 1


def test_failing_consumer_does_not_affect_others(fanout):
    query = providers_for_service("svc-1")
    healthy: List[Any] = []
    broken = MagicMock(side_effect=RuntimeError("consumer crashed"))
    fanout.subscribe(query, broken)
    fanout.subscribe(query, healthy.append)

    fanout.notify(Collection.PROVIDERS)

    assert broken.call_count == 2
    assert len(healthy) == 2


def test_loader_failure_on_notify_is_logged_not_raised(fanout, loader, caplog):
    query = providers_for_service("svc-1")
    received: List[Any] = []
    fanout.subscribe(query, received.append)

    def failing(_query: CatalogQuery) -> List[Dict[str, Any]]:
        raise RepositoryException("store down", transient=True)

    fanout._loader = failing
    fanout.notify(Collection.PROVIDERS)

    assert len(received) == 1
    assert "Failed to reload catalog snapshot" in caplog.text


def test_initial_load_failure_raises_transient_and_unregisters(loader):
    def failing(_query: CatalogQuery) -> List[Dict[str, Any]]:
        raise RepositoryException("store down", transient=True)

    fanout = SubscriptionFanout(failing)
    with pytest.raises(TransientStoreException):
        fanout.subscribe(providers_for_service("svc-1"), lambda rows: None)
    assert fanout.subscription_count() == 0


def test_unrunnable_query_is_rejected_as_invalid(loader):
    def failing(_query: CatalogQuery) -> List[Dict[str, Any]]:
        raise RepositoryException("no such column: services.popularity")

    fanout = SubscriptionFanout(failing)
    with pytest.raises(ValidationException) as exc:
        fanout.subscribe(providers_for_service("svc-1"), lambda rows: None)
    assert exc.value.code == "INVALID_QUERY"
    assert "popularity" in exc.value.details["reason"]
    assert fanout.subscription_count() == 0


def test_callback_may_unsubscribe_itself(fanout):
    query = providers_for_service("svc-1")
    received: List[Any] = []
    handle: Dict[str, Any] = {}

    def on_change(rows: List[Dict[str, Any]]) -> None:
        received.append(rows)
        if len(received) == 2:
            handle["unsubscribe"]()

    handle["unsubscribe"] = fanout.subscribe(query, on_change)
    fanout.notify(Collection.PROVIDERS)
    fanout.notify(Collection.PROVIDERS)

    assert len(received) == 2


def test_concurrent_subscribe_and_notify(fanout, loader):
    query = providers_for_service("svc-1")
    loader.rows[query.signature] = [{"id": "a"}]
    errors: List[BaseException] = []

    def subscribe_many() -> None:
        try:
            for _ in range(50):
                fanout.subscribe(query, lambda rows: None)()
        except BaseException as exc:  # pragma: no cover - surfaced by the assert below
            errors.append(exc)

    def notify_many() -> None:
        try:
            for _ in range(50):
                fanout.notify(Collection.PROVIDERS)
        except BaseException as exc:  # pragma: no cover
            errors.append(exc)

    threads = [threading.Thread(target=subscribe_many) for _ in range(4)]
    threads.append(threading.Thread(target=notify_many))
    for thread in threads:
        thread.start()
    for thread in threads:
        thread.join()

    assert errors == []
    assert fanout.subscription_count() == 0
