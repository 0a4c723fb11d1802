# backend/beautycatalog/routes/v1/discovery.py
"""
Client discovery routes.

    GET /discovery/services                                → Page of published base services
    GET /discovery/services/{id}/providers                 → Active providers, cheapest first
    GET /discovery/categories/{id}/providers               → Active providers in a category
    GET /discovery/services/{id}/providers/stream          → SSE: live provider list
"""

import logging
from typing import AsyncGenerator, List, Optional

from fastapi import APIRouter, Depends, Path, Query
from sse_starlette.sse import EventSourceResponse

from ...api.dependencies.services import get_discovery_service, get_fanout
from ...core.config import settings
from ...core.constants import DEFAULT_PAGE_SIZE
from ...core.deadline import run_with_deadline
from ...core.exceptions import DomainException
from ...events.catalog_queries import providers_for_service
from ...events.subscriptions import SubscriptionFanout
from ...schemas.discovery import BaseServicePage, ServiceProviderResponse
from ...services.discovery_service import DiscoveryService
from ...services.discovery_stream import create_catalog_stream

logger = logging.getLogger(__name__)

ULID_PATH_PATTERN = r"^[0-9A-HJKMNP-TV-Z]{26}$"

router = APIRouter(prefix="/discovery", tags=["discovery-v1"])


@router.get("/services", response_model=BaseServicePage)
async def browse_services(
    category_id: Optional[str] = Query(None),
    order_by: str = Query("name"),
    descending: bool = Query(False),
    page_size: int = Query(DEFAULT_PAGE_SIZE),
    cursor: Optional[str] = Query(None, description="next_cursor from the previous page"),
    service: DiscoveryService = Depends(get_discovery_service),
) -> BaseServicePage:
    try:
        data = await run_with_deadline(
            service.browse_services,
            category_id=category_id,
            order_by=order_by,
            descending=descending,
            page_size=page_size,
            cursor=cursor,
        )
    except DomainException as exc:
        raise exc.to_http_exception() from exc
    return BaseServicePage(**data)


@router.get("/services/{base_service_id}/providers", response_model=List[ServiceProviderResponse])
async def list_providers_for_service(
    base_service_id: str = Path(..., pattern=ULID_PATH_PATTERN),
    service: DiscoveryService = Depends(get_discovery_service),
) -> List[ServiceProviderResponse]:
    try:
        data = await run_with_deadline(service.list_providers_for_service, base_service_id)
    except DomainException as exc:
        raise exc.to_http_exception() from exc
    return [ServiceProviderResponse(**item) for item in data]


@router.get(
    "/categories/{category_id}/providers", response_model=List[ServiceProviderResponse]
)
async def list_providers_for_category(
    category_id: str = Path(..., pattern=ULID_PATH_PATTERN),
    service: DiscoveryService = Depends(get_discovery_service),
) -> List[ServiceProviderResponse]:
    try:
        data = await run_with_deadline(service.list_providers_for_category, category_id)
    except DomainException as exc:
        raise exc.to_http_exception() from exc
    return [ServiceProviderResponse(**item) for item in data]


@router.get("/services/{base_service_id}/providers/stream")
async def stream_providers_for_service(
    base_service_id: str = Path(..., pattern=ULID_PATH_PATTERN),
    fanout: SubscriptionFanout = Depends(get_fanout),
) -> EventSourceResponse:
    """
    Live provider list for a base service.

    Sends the current list immediately, then the full list again after
    every committed change to provider listings. Heartbeats are sent
    every ``sse_heartbeat_interval`` seconds while idle.
    """
    query = providers_for_service(base_service_id)

    async def event_generator() -> AsyncGenerator[dict[str, str], None]:
        async for event in create_catalog_stream(
            fanout,
            query,
            heartbeat_interval=settings.sse_heartbeat_interval,
            queue_size=settings.subscription_queue_size,
        ):
            yield event

    return EventSourceResponse(
        event_generator(),
        headers={
            "Cache-Control": "no-cache, no-store, must-revalidate",
            "X-Accel-Buffering": "no",
        },
        media_type="text/event-stream",
    )
