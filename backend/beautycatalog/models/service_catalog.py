# backend/beautycatalog/models/service_catalog.py
from __future__ import annotations

"""
Service catalog models for the beauty marketplace.

This module defines the owned side of the catalog with three models:
1. ServiceCategory - Categories like Hair, Nails, Makeup
2. ServiceDefinition - Admin-owned canonical base services with price/duration baselines
3. ProfessionalService - A professional's priced offering of one base service
"""

import logging
from typing import Any, Dict, List, Optional

from sqlalchemy import (
    JSON,
    Boolean,
    Column,
    DateTime,
    Float,
    ForeignKey,
    Integer,
    String,
    Text,
    UniqueConstraint,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship

from ..core.ulid_helper import generate_ulid
from ..database import Base
from .types import StringArrayType, utcnow

logger = logging.getLogger(__name__)


def _isoformat(value: Any) -> Optional[str]:
    return value.isoformat() if value is not None else None


class ServiceCategory(Base):
    """
    Model representing a service category.

    Categories group base services (Hair, Nails, Makeup...). The
    ``service_ids`` column is the membership back-reference list kept in
    step with base service creation and deletion.

    Attributes:
        id: Primary key (ULID)
        name: Display name
        description: Optional description
        image_url: Optional image URL returned by media storage
        service_ids: Ids of base services belonging to this category
        created_at: Timestamp when created
        updated_at: Timestamp when last updated
    """

    __tablename__ = "service_categories"

    id = Column(String(26), primary_key=True, default=generate_ulid)
    name = Column(String(120), nullable=False)
    description = Column(Text, nullable=True)
    image_url = Column(String(1024), nullable=True)
    service_ids: Mapped[List[str]] = mapped_column(StringArrayType, nullable=False, default=list)
    created_at = Column(DateTime(timezone=True), nullable=False, default=utcnow)
    updated_at = Column(DateTime(timezone=True), nullable=True, onupdate=utcnow)

    base_services = relationship(
        "ServiceDefinition",
        back_populates="category",
        order_by="ServiceDefinition.name",
    )

    def __repr__(self) -> str:
        """String representation."""
        return f"<ServiceCategory {self.name} ({len(self.service_ids or [])} services)>"

    @property
    def is_empty(self) -> bool:
        return not self.service_ids

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for API responses."""
        return {
            "id": self.id,
            "name": self.name,
            "description": self.description,
            "image_url": self.image_url,
            "services": list(self.service_ids or []),
            "created_at": _isoformat(self.created_at),
            "updated_at": _isoformat(self.updated_at),
        }


class ServiceDefinition(Base):
    """
    Canonical base service defined by admins.

    The base service is the only writer of the price floor and duration
    baseline that professional offerings are validated against.

    Attributes:
        id: Primary key (ULID)
        category_id: Foreign key to service_categories
        name: Service name (e.g., "Balayage")
        description: Default description
        base_price: Minimum price a professional may charge (>= 0)
        base_duration: Baseline duration in minutes (>= 15)
        is_published: Whether clients can browse it
        media: List of {"url", "type"} media references
    """

    __tablename__ = "base_services"

    id = Column(String(26), primary_key=True, default=generate_ulid)
    category_id = Column(
        String(26),
        ForeignKey("service_categories.id", ondelete="RESTRICT"),
        nullable=False,
        index=True,
    )
    name = Column(String(200), nullable=False, index=True)
    description = Column(Text, nullable=False, default="")
    base_price = Column(Float, nullable=False)
    base_duration = Column(Integer, nullable=False)
    is_published = Column(Boolean, nullable=False, default=False, index=True)
    media = Column(JSON, nullable=False, default=list)
    created_at = Column(DateTime(timezone=True), nullable=False, default=utcnow)
    updated_at = Column(DateTime(timezone=True), nullable=True, onupdate=utcnow)

    category = relationship("ServiceCategory", back_populates="base_services")
    offerings = relationship(
        "ProfessionalService",
        back_populates="base_service",
        cascade="save-update, merge",
    )

    def __repr__(self) -> str:
        """String representation."""
        status = "" if self.is_published else " (draft)"
        return f"<ServiceDefinition {self.name} ${self.base_price}/{self.base_duration}min{status}>"

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for API responses."""
        return {
            "id": self.id,
            "category_id": self.category_id,
            "name": self.name,
            "description": self.description,
            "base_price": self.base_price,
            "base_duration": self.base_duration,
            "is_published": self.is_published,
            "media": list(self.media or []),
            "created_at": _isoformat(self.created_at),
            "updated_at": _isoformat(self.updated_at),
        }


class ProfessionalService(Base):
    """
    Model representing a professional's offering of a base service.

    Price and duration are chosen by the professional within bounds
    derived from the base service. Counters are maintained by booking and
    review flows and never copied into the discovery aggregate.

    Attributes:
        id: Primary key (ULID)
        professional_id: Id of the professional (identity provider id)
        base_service_id: Foreign key to base_services
        price: Professional's price (>= base price at write time)
        duration: Session duration in minutes
        is_active: Whether the offering is currently listed
        bookings, earnings, reviews, average_rating: Offering metrics
    """

    __tablename__ = "professional_services"
    __table_args__ = (
        UniqueConstraint(
            "professional_id", "base_service_id", name="uq_professional_services_pair"
        ),
    )

    id = Column(String(26), primary_key=True, default=generate_ulid)
    professional_id = Column(String(64), nullable=False, index=True)
    base_service_id = Column(
        String(26),
        ForeignKey("base_services.id", ondelete="RESTRICT"),
        nullable=False,
        index=True,
    )
    price = Column(Float, nullable=False)
    duration = Column(Integer, nullable=False)
    is_active = Column(Boolean, nullable=False, default=True, index=True)
    bookings = Column(Integer, nullable=False, default=0)
    earnings = Column(Float, nullable=False, default=0.0)
    reviews = Column(Integer, nullable=False, default=0)
    average_rating = Column(Float, nullable=False, default=0.0)
    created_at = Column(DateTime(timezone=True), nullable=False, default=utcnow, index=True)
    updated_at = Column(DateTime(timezone=True), nullable=True, onupdate=utcnow)

    base_service = relationship("ServiceDefinition", back_populates="offerings")

    def __repr__(self) -> str:
        """String representation."""
        status = " (inactive)" if not self.is_active else ""
        return f"<ProfessionalService {self.name} ${self.price}/{self.duration}min{status}>"

    @property
    def name(self) -> str:
        """Get service name from the base service."""
        name_value = getattr(self.base_service, "name", None)
        if isinstance(name_value, str):
            return name_value
        return "Unknown Service"

    @property
    def category_id(self) -> Optional[str]:
        return getattr(self.base_service, "category_id", None)

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for API responses."""
        return {
            "id": self.id,
            "professional_id": self.professional_id,
            "base_service_id": self.base_service_id,
            "name": self.name,
            "category_id": self.category_id,
            "price": self.price,
            "duration": self.duration,
            "is_active": self.is_active,
            "bookings": self.bookings,
            "earnings": self.earnings,
            "reviews": self.reviews,
            "average_rating": self.average_rating,
            "created_at": _isoformat(self.created_at),
            "updated_at": _isoformat(self.updated_at),
        }
