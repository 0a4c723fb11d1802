# backend/beautycatalog/routes/v1/categories.py
"""
Category registry routes.

    GET    /categories              → All categories ordered by name
    POST   /categories              → Create a category
    GET    /categories/{id}         → Category detail with base service ids
    PATCH  /categories/{id}         → Edit name, description or image
    DELETE /categories/{id}         → Delete an empty category
"""

import logging
from typing import List

from fastapi import APIRouter, Depends, Path, status

from ...api.dependencies.services import get_category_service
from ...core.deadline import run_with_deadline
from ...core.exceptions import DomainException
from ...schemas.catalog import CategoryCreate, CategoryResponse, CategoryUpdate, CreatedResponse
from ...services.category_service import CategoryService

logger = logging.getLogger(__name__)

ULID_PATH_PATTERN = r"^[0-9A-HJKMNP-TV-Z]{26}$"

router = APIRouter(prefix="/categories", tags=["categories-v1"])


@router.get("", response_model=List[CategoryResponse])
async def list_categories(
    service: CategoryService = Depends(get_category_service),
) -> List[CategoryResponse]:
    try:
        data = await run_with_deadline(service.list_categories)
    except DomainException as exc:
        raise exc.to_http_exception() from exc
    return [CategoryResponse(**item) for item in data]


@router.post("", response_model=CreatedResponse, status_code=status.HTTP_201_CREATED)
async def create_category(
    payload: CategoryCreate,
    service: CategoryService = Depends(get_category_service),
) -> CreatedResponse:
    """Create a category with no services."""
    try:
        category_id = await run_with_deadline(
            service.create_category,
            payload.name,
            description=payload.description,
            image_url=payload.image_url,
        )
    except DomainException as exc:
        raise exc.to_http_exception() from exc
    return CreatedResponse(id=category_id)


@router.get("/{category_id}", response_model=CategoryResponse)
async def get_category(
    category_id: str = Path(..., pattern=ULID_PATH_PATTERN),
    service: CategoryService = Depends(get_category_service),
) -> CategoryResponse:
    try:
        data = await run_with_deadline(service.get_category, category_id)
    except DomainException as exc:
        raise exc.to_http_exception() from exc
    return CategoryResponse(**data)


@router.patch("/{category_id}", response_model=CategoryResponse)
async def update_category(
    payload: CategoryUpdate,
    category_id: str = Path(..., pattern=ULID_PATH_PATTERN),
    service: CategoryService = Depends(get_category_service),
) -> CategoryResponse:
    """Only fields present in the body are changed."""
    try:
        data = await run_with_deadline(
            service.update_category, category_id, **payload.model_dump(exclude_unset=True)
        )
    except DomainException as exc:
        raise exc.to_http_exception() from exc
    return CategoryResponse(**data)


@router.delete("/{category_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_category(
    category_id: str = Path(..., pattern=ULID_PATH_PATTERN),
    service: CategoryService = Depends(get_category_service),
) -> None:
    """409 while the category still has base services."""
    try:
        await run_with_deadline(service.delete_category, category_id)
    except DomainException as exc:
        raise exc.to_http_exception() from exc
