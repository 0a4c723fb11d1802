# backend/beautycatalog/routes/v1/offerings.py
"""
Professional offering routes.

    POST   /offerings/validate                       → Pre-submit price/duration check
    GET    /professionals/{professional_id}/offerings → A professional's offerings
    POST   /professionals/{professional_id}/offerings → Offer a base service
    GET    /offerings/{id}                           → Offering detail
    PATCH  /offerings/{id}                           → Change price, duration or active flag
    PATCH  /offerings/{id}/metrics                   → Overwrite booking/review counters
    DELETE /offerings/{id}                           → Delete offering and its listing

Authorization (a professional may only edit their own offerings) is
enforced upstream.
"""

import logging
from typing import List, Optional

from fastapi import APIRouter, Depends, Path, Query, status

from ...api.dependencies.services import get_offering_service
from ...core.deadline import run_with_deadline
from ...core.exceptions import DomainException
from ...schemas.catalog import CreatedResponse
from ...schemas.offering import (
    OfferingCreate,
    OfferingMetricsUpdate,
    OfferingResponse,
    OfferingUpdate,
    OfferingValidationRequest,
    OfferingValidationResponse,
)
from ...services.offering_service import OfferingService

logger = logging.getLogger(__name__)

ULID_PATH_PATTERN = r"^[0-9A-HJKMNP-TV-Z]{26}$"

router = APIRouter(tags=["offerings-v1"])


@router.post("/offerings/validate", response_model=OfferingValidationResponse)
async def validate_offering(
    payload: OfferingValidationRequest,
    service: OfferingService = Depends(get_offering_service),
) -> OfferingValidationResponse:
    """
    Check a price/duration pair against the base service bounds.

    Always 200 for a known base service; ``valid`` and ``error`` carry
    the outcome so forms can show the message inline.
    """
    try:
        data = await run_with_deadline(
            service.check_offering, payload.base_service_id, payload.price, payload.duration
        )
    except DomainException as exc:
        raise exc.to_http_exception() from exc
    return OfferingValidationResponse(**data)


@router.get("/professionals/{professional_id}/offerings", response_model=List[OfferingResponse])
async def list_offerings(
    professional_id: str = Path(..., min_length=1, max_length=64),
    category_id: Optional[str] = Query(None),
    is_active: Optional[bool] = Query(None),
    sort_field: Optional[str] = Query(None, description="price, duration, bookings, ..."),
    direction: str = Query("asc", description="asc or desc"),
    service: OfferingService = Depends(get_offering_service),
) -> List[OfferingResponse]:
    """Offerings in insertion order unless a sort field is given; ties keep that order."""
    try:
        data = await run_with_deadline(
            service.list_offerings,
            professional_id,
            category_id=category_id,
            is_active=is_active,
            sort_field=sort_field,
            direction=direction,
        )
    except DomainException as exc:
        raise exc.to_http_exception() from exc
    return [OfferingResponse(**item) for item in data]


@router.post(
    "/professionals/{professional_id}/offerings",
    response_model=CreatedResponse,
    status_code=status.HTTP_201_CREATED,
)
async def create_offering(
    payload: OfferingCreate,
    professional_id: str = Path(..., min_length=1, max_length=64),
    service: OfferingService = Depends(get_offering_service),
) -> CreatedResponse:
    try:
        offering_id = await run_with_deadline(
            service.create_offering,
            professional_id,
            payload.base_service_id,
            payload.price,
            payload.duration,
        )
    except DomainException as exc:
        raise exc.to_http_exception() from exc
    return CreatedResponse(id=offering_id)


@router.get("/offerings/{offering_id}", response_model=OfferingResponse)
async def get_offering(
    offering_id: str = Path(..., pattern=ULID_PATH_PATTERN),
    service: OfferingService = Depends(get_offering_service),
) -> OfferingResponse:
    try:
        data = await run_with_deadline(service.get_offering, offering_id)
    except DomainException as exc:
        raise exc.to_http_exception() from exc
    return OfferingResponse(**data)


@router.patch("/offerings/{offering_id}", response_model=OfferingResponse)
async def update_offering(
    payload: OfferingUpdate,
    offering_id: str = Path(..., pattern=ULID_PATH_PATTERN),
    service: OfferingService = Depends(get_offering_service),
) -> OfferingResponse:
    try:
        data = await run_with_deadline(
            service.update_offering,
            offering_id,
            price=payload.price,
            duration=payload.duration,
            is_active=payload.is_active,
        )
    except DomainException as exc:
        raise exc.to_http_exception() from exc
    return OfferingResponse(**data)


@router.patch("/offerings/{offering_id}/metrics", response_model=OfferingResponse)
async def record_offering_metrics(
    payload: OfferingMetricsUpdate,
    offering_id: str = Path(..., pattern=ULID_PATH_PATTERN),
    service: OfferingService = Depends(get_offering_service),
) -> OfferingResponse:
    try:
        data = await run_with_deadline(
            service.record_offering_metrics, offering_id, **payload.model_dump(exclude_none=True)
        )
    except DomainException as exc:
        raise exc.to_http_exception() from exc
    return OfferingResponse(**data)


@router.delete("/offerings/{offering_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_offering(
    offering_id: str = Path(..., pattern=ULID_PATH_PATTERN),
    service: OfferingService = Depends(get_offering_service),
) -> None:
    try:
        await run_with_deadline(service.delete_offering, offering_id)
    except DomainException as exc:
        raise exc.to_http_exception() from exc
