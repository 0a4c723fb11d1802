# backend/beautycatalog/repositories/service_provider_repository.py
"""
Repository for discovery provider aggregates.

The only write is a full-row overwrite keyed by (professional, base
service); nothing here merges or increments.
"""

import logging
from typing import Any, Dict, List, cast

from sqlalchemy.orm import Session

from ..models.service_provider import ServiceProviderAggregate, aggregate_key
from .base_repository import BaseRepository

logger = logging.getLogger(__name__)


class ServiceProviderRepository(BaseRepository[ServiceProviderAggregate]):
    """Repository for ServiceProviderAggregate rows."""

    def __init__(self, db: Session) -> None:
        super().__init__(db, ServiceProviderAggregate)

    def put(self, fields: Dict[str, Any]) -> ServiceProviderAggregate:
        """
        Overwrite the aggregate for a (professional, base service) pair.

        Every column is replaced from ``fields``; the row is created if absent.
        """
        key = aggregate_key(fields["professional_id"], fields["base_service_id"])
        existing = self.get_by_id(key)
        if existing is None:
            return self.create(id=key, **fields)
        updated = self.update(key, **fields)
        return cast(ServiceProviderAggregate, updated)

    def delete_for_pair(self, professional_id: str, base_service_id: str) -> bool:
        """Remove the aggregate for a pair; False if there was none."""
        return self.delete(aggregate_key(professional_id, base_service_id))

    def list_active_for_service(self, base_service_id: str) -> List[ServiceProviderAggregate]:
        return self.query(
            filters={"base_service_id": base_service_id, "is_active": True}, order_by="price"
        ).items

    def list_active_for_category(self, category_id: str) -> List[ServiceProviderAggregate]:
        return self.query(
            filters={"category_id": category_id, "is_active": True}, order_by="price"
        ).items
