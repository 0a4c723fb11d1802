# backend/beautycatalog/services/aggregate_projector.py
"""
Discovery Aggregate Projector

Maintains one ServiceProviderAggregate per (professional, base service)
pair so discovery screens can list providers without joins. Each upsert
overwrites every field from the current offering, professional and
category data; nothing is incremented, so replaying an upsert with the
same inputs leaves the row unchanged.
"""

from dataclasses import dataclass
import logging
from typing import Any, Dict, Optional

from sqlalchemy.orm import Session

from ..events.catalog_queries import Collection
from ..events.subscriptions import SubscriptionFanout
from ..models.service_catalog import ProfessionalService
from ..models.service_provider import ServiceProviderAggregate
from ..monitoring.prometheus_metrics import prometheus_metrics
from ..repositories.factory import RepositoryFactory
from .base import BaseService

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ProfessionalDisplayInfo:
    """Display data of the professional behind an offering."""

    professional_id: str
    display_name: str
    photo_url: Optional[str] = None


@dataclass(frozen=True)
class CategoryDisplayInfo:
    """Names the aggregate denormalizes from the base service and its category."""

    category_id: str
    name: str
    service_name: str


def build_aggregate_fields(
    offering: ProfessionalService,
    professional: ProfessionalDisplayInfo,
    category: CategoryDisplayInfo,
) -> Dict[str, Any]:
    """Map an offering and its display data to aggregate columns."""
    return {
        "professional_id": str(offering.professional_id),
        "base_service_id": str(offering.base_service_id),
        "offering_id": str(offering.id),
        "professional_name": professional.display_name,
        "professional_image_url": professional.photo_url,
        "service_name": category.service_name,
        "category_id": category.category_id,
        "category_name": category.name,
        "price": float(offering.price),
        "duration": int(offering.duration),
        "is_active": bool(offering.is_active),
        "source_updated_at": offering.updated_at or offering.created_at,
    }


class AggregateProjector(BaseService):
    """Writes and removes discovery aggregates for offerings."""

    def __init__(self, db: Session, fanout: Optional[SubscriptionFanout] = None) -> None:
        super().__init__(db, fanout)
        self.provider_repo = RepositoryFactory.create_service_provider_repository(db)

    @BaseService.measure_operation("upsert_aggregate")
    def upsert_aggregate(
        self,
        offering: ProfessionalService,
        professional: ProfessionalDisplayInfo,
        category: CategoryDisplayInfo,
    ) -> ServiceProviderAggregate:
        """
        Create or fully overwrite the aggregate for the offering's pair.

        Counters (bookings, earnings, reviews, rating) are never copied.
        """
        fields = build_aggregate_fields(offering, professional, category)
        try:
            with self.transaction():
                aggregate = self.provider_repo.put(fields)
        except Exception:
            prometheus_metrics.record_aggregate_sync("upsert", False)
            raise
        prometheus_metrics.record_aggregate_sync("upsert", True)
        self.publish_change(Collection.PROVIDERS)
        return aggregate

    @BaseService.measure_operation("delete_aggregate")
    def delete_aggregate(self, professional_id: str, base_service_id: str) -> bool:
        """
        Remove the aggregate for a pair.

        Returns:
            True if a row was removed, False if there was none
        """
        try:
            with self.transaction():
                removed = self.provider_repo.delete_for_pair(professional_id, base_service_id)
        except Exception:
            prometheus_metrics.record_aggregate_sync("delete", False)
            raise
        prometheus_metrics.record_aggregate_sync("delete", True)
        if removed:
            self.publish_change(Collection.PROVIDERS)
        return removed
