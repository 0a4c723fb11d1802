# backend/beautycatalog/services/discovery_stream.py
"""
SSE stream of a live catalog query.

Bridges the thread-side SubscriptionFanout callbacks onto the event loop:
each delivered snapshot is handed to an asyncio.Queue with
call_soon_threadsafe and streamed as a ``snapshot`` event. Heartbeats
keep idle connections open.

Event types:
- snapshot: full current result list ({"items": [...], "count": n})
- heartbeat: keep-alive with a timestamp
"""

from __future__ import annotations

import asyncio
from datetime import datetime, timezone
import json
import logging
from typing import Any, AsyncGenerator, Dict, List, Optional

from ..core.config import settings
from ..core.deadline import run_with_deadline
from ..events.catalog_queries import CatalogQuery
from ..events.subscriptions import SubscriptionFanout, Unsubscribe

logger = logging.getLogger(__name__)


def format_snapshot_event(snapshot: List[Dict[str, Any]]) -> Dict[str, str]:
    return {
        "event": "snapshot",
        "data": json.dumps({"items": snapshot, "count": len(snapshot)}, default=str),
    }


def format_heartbeat_event() -> Dict[str, str]:
    return {
        "event": "heartbeat",
        "data": json.dumps(
            {"type": "heartbeat", "timestamp": datetime.now(timezone.utc).isoformat()}
        ),
    }


async def create_catalog_stream(
    fanout: SubscriptionFanout,
    query: CatalogQuery,
    heartbeat_interval: Optional[float] = None,
    queue_size: Optional[int] = None,
    subscribe_timeout: Optional[float] = None,
) -> AsyncGenerator[Dict[str, str], None]:
    """
    Yield SSE events for ``query`` until the client disconnects.

    Snapshots are full lists, so when a slow client falls behind the
    oldest buffered snapshot is dropped rather than blocking the writer.
    If subscribing outlives ``subscribe_timeout`` the stream fails with
    TransientStoreException and the late subscription is cancelled as
    soon as it completes.
    """
    interval = heartbeat_interval or settings.sse_heartbeat_interval
    loop = asyncio.get_running_loop()
    snapshots: asyncio.Queue[List[Dict[str, Any]]] = asyncio.Queue(
        maxsize=queue_size or settings.subscription_queue_size
    )

    def enqueue(snapshot: List[Dict[str, Any]]) -> None:
        if snapshots.full():
            snapshots.get_nowait()
            logger.debug("[SSE-STREAM] Dropped stale snapshot for %s", query.collection.value)
        snapshots.put_nowait(snapshot)

    def on_change(snapshot: List[Dict[str, Any]]) -> None:
        # Called on whichever thread committed the change
        loop.call_soon_threadsafe(enqueue, snapshot)

    def cancel_late_subscription(late_unsubscribe: Unsubscribe) -> None:
        late_unsubscribe()
        logger.info("[SSE-STREAM] Cancelled late subscription to %s", query.signature)

    unsubscribe = await run_with_deadline(
        fanout.subscribe,
        query,
        on_change,
        timeout=subscribe_timeout,
        on_late_result=cancel_late_subscription,
    )
    logger.info("[SSE-STREAM] Subscribed to %s", query.signature)
    try:
        while True:
            try:
                snapshot = await asyncio.wait_for(snapshots.get(), timeout=interval)
            except asyncio.TimeoutError:
                yield format_heartbeat_event()
                continue
            yield format_snapshot_event(snapshot)
    except asyncio.CancelledError:
        logger.info("[SSE-STREAM] Stream cancelled for %s", query.signature)
        raise
    finally:
        unsubscribe()
        logger.info("[SSE-STREAM] Unsubscribed from %s", query.signature)
