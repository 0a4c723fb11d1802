# backend/beautycatalog/routes/v1/base_services.py
"""
Base service catalog routes (admin).

    GET    /base-services                 → List, optionally by category / published only
    POST   /base-services                 → Create and register with its category
    GET    /base-services/{id}            → Detail
    PATCH  /base-services/{id}            → Partial update (offerings are not re-validated)
    DELETE /base-services/{id}            → Delete when no offering references it
"""

import logging
from typing import List, Optional

from fastapi import APIRouter, Depends, Path, Query, status

from ...api.dependencies.services import get_base_service_catalog
from ...core.deadline import run_with_deadline
from ...core.exceptions import DomainException
from ...schemas.catalog import (
    BaseServiceCreate,
    BaseServiceResponse,
    BaseServiceUpdate,
    CreatedResponse,
)
from ...services.base_service_catalog import BaseServiceCatalog

logger = logging.getLogger(__name__)

ULID_PATH_PATTERN = r"^[0-9A-HJKMNP-TV-Z]{26}$"

router = APIRouter(prefix="/base-services", tags=["base-services-v1"])


@router.get("", response_model=List[BaseServiceResponse])
async def list_base_services(
    category_id: Optional[str] = Query(None),
    published_only: bool = Query(False),
    service: BaseServiceCatalog = Depends(get_base_service_catalog),
) -> List[BaseServiceResponse]:
    try:
        data = await run_with_deadline(
            service.list_base_services, category_id=category_id, published_only=published_only
        )
    except DomainException as exc:
        raise exc.to_http_exception() from exc
    return [BaseServiceResponse(**item) for item in data]


@router.post("", response_model=CreatedResponse, status_code=status.HTTP_201_CREATED)
async def create_base_service(
    payload: BaseServiceCreate,
    service: BaseServiceCatalog = Depends(get_base_service_catalog),
) -> CreatedResponse:
    try:
        base_service_id = await run_with_deadline(
            service.create_base_service,
            payload.category_id,
            payload.name,
            payload.description,
            payload.base_price,
            payload.base_duration,
            is_published=payload.is_published,
            media=[item.model_dump() for item in payload.media],
        )
    except DomainException as exc:
        raise exc.to_http_exception() from exc
    return CreatedResponse(id=base_service_id)


@router.get("/{base_service_id}", response_model=BaseServiceResponse)
async def get_base_service(
    base_service_id: str = Path(..., pattern=ULID_PATH_PATTERN),
    service: BaseServiceCatalog = Depends(get_base_service_catalog),
) -> BaseServiceResponse:
    try:
        data = await run_with_deadline(service.get_base_service, base_service_id)
    except DomainException as exc:
        raise exc.to_http_exception() from exc
    return BaseServiceResponse(**data)


@router.patch("/{base_service_id}", response_model=BaseServiceResponse)
async def update_base_service(
    payload: BaseServiceUpdate,
    base_service_id: str = Path(..., pattern=ULID_PATH_PATTERN),
    service: BaseServiceCatalog = Depends(get_base_service_catalog),
) -> BaseServiceResponse:
    """
    Partial update. Raising base_price or base_duration leaves existing
    offerings as they are.
    """
    changes = payload.model_dump(exclude_unset=True)
    try:
        data = await run_with_deadline(service.update_base_service, base_service_id, **changes)
    except DomainException as exc:
        raise exc.to_http_exception() from exc
    return BaseServiceResponse(**data)


@router.delete("/{base_service_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_base_service(
    base_service_id: str = Path(..., pattern=ULID_PATH_PATTERN),
    service: BaseServiceCatalog = Depends(get_base_service_catalog),
) -> None:
    try:
        await run_with_deadline(service.delete_base_service, base_service_id)
    except DomainException as exc:
        raise exc.to_http_exception() from exc
