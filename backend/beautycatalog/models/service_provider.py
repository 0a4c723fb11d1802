# backend/beautycatalog/models/service_provider.py
"""
Discovery projection of professional offerings.

One row per (professional, base service) pair, denormalizing the display
data discovery screens need so browse reads never join. Rows are derived
and may be regenerated at any time from the offering tables.
"""

from typing import Any, Dict

from sqlalchemy import Boolean, Column, DateTime, Float, Integer, String

from ..database import Base
from .service_catalog import _isoformat


def aggregate_key(professional_id: str, base_service_id: str) -> str:
    """Composite key of a provider aggregate."""
    return f"{base_service_id}_{professional_id}"


class ServiceProviderAggregate(Base):
    """Denormalized provider listing for a base service."""

    __tablename__ = "service_providers"

    id = Column(String(128), primary_key=True)
    professional_id = Column(String(64), nullable=False, index=True)
    base_service_id = Column(String(26), nullable=False, index=True)
    offering_id = Column(String(26), nullable=False)
    professional_name = Column(String(200), nullable=False)
    professional_image_url = Column(String(1024), nullable=True)
    service_name = Column(String(200), nullable=False)
    category_id = Column(String(26), nullable=False, index=True)
    category_name = Column(String(120), nullable=False)
    price = Column(Float, nullable=False)
    duration = Column(Integer, nullable=False)
    is_active = Column(Boolean, nullable=False, default=True, index=True)
    source_updated_at = Column(DateTime(timezone=True), nullable=True)

    def __repr__(self) -> str:
        return f"<ServiceProviderAggregate {self.id} ${self.price}>"

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for API responses."""
        return {
            "id": self.id,
            "professional_id": self.professional_id,
            "base_service_id": self.base_service_id,
            "offering_id": self.offering_id,
            "professional_name": self.professional_name,
            "professional_image_url": self.professional_image_url,
            "service_name": self.service_name,
            "category_id": self.category_id,
            "category_name": self.category_name,
            "price": self.price,
            "duration": self.duration,
            "is_active": self.is_active,
            "source_updated_at": _isoformat(self.source_updated_at),
        }
