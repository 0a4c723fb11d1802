# backend/beautycatalog/schemas/discovery.py
"""
Schemas for discovery endpoints.
"""

from datetime import datetime
from typing import List, Optional

from pydantic import Field

from ._strict_base import StrictModel
from .catalog import BaseServiceResponse


class ServiceProviderResponse(StrictModel):
    """A professional offering a base service, as shown in discovery."""

    id: str
    professional_id: str
    base_service_id: str
    offering_id: str
    professional_name: str
    professional_image_url: Optional[str] = None
    service_name: str
    category_id: str
    category_name: str
    price: float
    duration: int
    is_active: bool
    source_updated_at: Optional[datetime] = None


class BaseServicePage(StrictModel):
    """One page of published base services."""

    items: List[BaseServiceResponse] = Field(default_factory=list)
    next_cursor: Optional[str] = Field(
        None, description="Pass as `cursor` to fetch the next page; null on the last page"
    )
