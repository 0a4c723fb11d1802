# backend/beautycatalog/schemas/catalog.py
"""
Schemas for category and base service endpoints.

Bounds (non-negative base price, minimum base duration) are enforced by
the services so violations come back as structured 400 errors rather
than request-parsing failures.
"""

from datetime import datetime
from typing import List, Literal, Optional

from pydantic import ConfigDict, Field

from ._strict_base import StrictModel, StrictRequestModel


class MediaItem(StrictModel):
    """Image or video attached to a base service."""

    url: str
    type: Literal["image", "video"]


class CategoryCreate(StrictRequestModel):
    name: str = Field(..., description="Display name, e.g. 'Hair'")
    description: Optional[str] = None
    image_url: Optional[str] = Field(None, description="URL returned by media storage")


class CategoryUpdate(StrictRequestModel):
    """Partial category update; omitted fields are left unchanged."""

    name: Optional[str] = None
    description: Optional[str] = None
    image_url: Optional[str] = None


class CategoryResponse(StrictModel):
    """Service category with its base service ids."""

    id: str
    name: str
    description: Optional[str] = None
    image_url: Optional[str] = None
    services: List[str] = Field(default_factory=list)
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


class BaseServiceCreate(StrictRequestModel):
    """Create a canonical base service."""

    category_id: str
    name: str
    description: str = ""
    base_price: float = Field(..., allow_inf_nan=False, description="Price floor for offerings")
    base_duration: int = Field(..., description="Baseline duration in minutes")
    is_published: bool = False
    media: List[MediaItem] = Field(default_factory=list)

    model_config = ConfigDict(
        **StrictRequestModel.model_config,
        json_schema_extra={
            "example": {
                "category_id": "01HZY3B6N8X1C2D3E4F5G6H7J8",
                "name": "Balayage",
                "description": "Hand-painted highlights",
                "base_price": 100.0,
                "base_duration": 60,
                "is_published": True,
                "media": [{"url": "https://cdn.example.com/balayage.jpg", "type": "image"}],
            }
        },
    )


class BaseServiceUpdate(StrictRequestModel):
    """Partial base service update; omitted fields are left unchanged."""

    category_id: Optional[str] = None
    name: Optional[str] = None
    description: Optional[str] = None
    base_price: Optional[float] = Field(None, allow_inf_nan=False)
    base_duration: Optional[int] = None
    is_published: Optional[bool] = None
    media: Optional[List[MediaItem]] = None


class BaseServiceResponse(StrictModel):
    id: str
    category_id: str
    name: str
    description: str = ""
    base_price: float
    base_duration: int
    is_published: bool
    media: List[MediaItem] = Field(default_factory=list)
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


class CreatedResponse(StrictModel):
    """Id of a newly created record."""

    id: str
