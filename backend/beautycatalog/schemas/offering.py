# backend/beautycatalog/schemas/offering.py
"""
Schemas for professional offering endpoints.
"""

from datetime import datetime
from typing import Optional

from pydantic import ConfigDict, Field

from ._strict_base import StrictModel, StrictRequestModel


class OfferingCreate(StrictRequestModel):
    """Offer a base service at a chosen price and duration."""

    base_service_id: str = Field(..., description="ID of the base service")
    price: float = Field(
        ..., allow_inf_nan=False, description="Price, not lower than the base price"
    )
    duration: int = Field(..., description="Duration in minutes, within 50%-200% of base")

    model_config = ConfigDict(
        **StrictRequestModel.model_config,
        json_schema_extra={
            "example": {
                "base_service_id": "01HZY3B6N8X1C2D3E4F5G6H7J8",
                "price": 120.0,
                "duration": 75,
            }
        },
    )


class OfferingUpdate(StrictRequestModel):
    price: Optional[float] = Field(None, allow_inf_nan=False)
    duration: Optional[int] = None
    is_active: Optional[bool] = None


class OfferingMetricsUpdate(StrictRequestModel):
    """Counters maintained by booking and review flows."""

    bookings: Optional[int] = None
    earnings: Optional[float] = Field(None, allow_inf_nan=False)
    reviews: Optional[int] = None
    average_rating: Optional[float] = Field(None, allow_inf_nan=False)


class OfferingResponse(StrictModel):
    id: str
    professional_id: str
    base_service_id: str
    name: str
    category_id: Optional[str] = None
    price: float
    duration: int
    is_active: bool
    bookings: int = 0
    earnings: float = 0.0
    reviews: int = 0
    average_rating: float = 0.0
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


class OfferingValidationRequest(StrictRequestModel):
    """Pre-submit check of a price/duration pair."""

    base_service_id: str
    price: float = Field(..., allow_inf_nan=False)
    duration: int


class OfferingBoundsResponse(StrictModel):
    min_price: float
    min_duration: float
    max_duration: float


class ValidationErrorDetail(StrictModel):
    message: str
    code: str
    field: Optional[str] = None


class OfferingValidationResponse(StrictModel):
    """Outcome of validating an offering without saving it."""

    valid: bool
    bounds: OfferingBoundsResponse
    error: Optional[ValidationErrorDetail] = None


