# backend/beautycatalog/repositories/service_definition_repository.py
"""
Repository for canonical base services.
"""

import logging
from typing import List, Optional, cast

from sqlalchemy.orm import Session, joinedload

from ..models.service_catalog import ServiceDefinition
from .base_repository import BaseRepository

logger = logging.getLogger(__name__)


class ServiceDefinitionRepository(BaseRepository[ServiceDefinition]):
    """Repository for ServiceDefinition (base service) queries."""

    def __init__(self, db: Session) -> None:
        super().__init__(db, ServiceDefinition)

    def get_with_category(self, base_service_id: str) -> Optional[ServiceDefinition]:
        """Load a base service with its category eagerly loaded."""
        return cast(
            Optional[ServiceDefinition],
            self._build_query()
            .options(joinedload(ServiceDefinition.category))
            .filter(ServiceDefinition.id == base_service_id)
            .first(),
        )

    def list_filtered(
        self, category_id: Optional[str] = None, published_only: bool = False
    ) -> List[ServiceDefinition]:
        """Base services ordered by name, optionally scoped to a category."""
        query = self._build_query()
        if category_id:
            query = query.filter(ServiceDefinition.category_id == category_id)
        if published_only:
            query = query.filter(ServiceDefinition.is_published.is_(True))
        return cast(
            List[ServiceDefinition],
            self._execute_query(query.order_by(ServiceDefinition.name, ServiceDefinition.id)),
        )
