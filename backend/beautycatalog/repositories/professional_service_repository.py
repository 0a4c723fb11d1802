# backend/beautycatalog/repositories/professional_service_repository.py
"""
Repository for professional offerings.

Every query here is scoped by professional or base service; offerings of
different professionals never share a write path.
"""

import logging
from typing import List, Optional, cast

from sqlalchemy.orm import Session, joinedload

from ..models.service_catalog import ProfessionalService, ServiceDefinition
from .base_repository import BaseRepository

logger = logging.getLogger(__name__)


class ProfessionalServiceRepository(BaseRepository[ProfessionalService]):
    """Repository for ProfessionalService queries."""

    def __init__(self, db: Session) -> None:
        super().__init__(db, ProfessionalService)

    def get_with_base_service(self, offering_id: str) -> Optional[ProfessionalService]:
        return cast(
            Optional[ProfessionalService],
            self._build_query()
            .options(joinedload(ProfessionalService.base_service))
            .filter(ProfessionalService.id == offering_id)
            .first(),
        )

    def find_for_pair(
        self, professional_id: str, base_service_id: str
    ) -> Optional[ProfessionalService]:
        """The offering of a base service by a professional, if any."""
        return self.find_one_by(professional_id=professional_id, base_service_id=base_service_id)

    def count_for_base_service(self, base_service_id: str) -> int:
        """Number of offerings (active or not) referencing a base service."""
        return self.count(base_service_id=base_service_id)

    def list_for_professional(
        self,
        professional_id: str,
        category_id: Optional[str] = None,
        is_active: Optional[bool] = None,
    ) -> List[ProfessionalService]:
        """
        Offerings of one professional in insertion order.

        Args:
            professional_id: Owner of the offerings
            category_id: Only offerings whose base service is in this category
            is_active: Only active (True) or inactive (False) offerings
        """
        query = (
            self._build_query()
            .options(joinedload(ProfessionalService.base_service))
            .filter(ProfessionalService.professional_id == professional_id)
        )
        if category_id:
            query = query.join(ProfessionalService.base_service).filter(
                ServiceDefinition.category_id == category_id
            )
        if is_active is not None:
            query = query.filter(ProfessionalService.is_active.is_(is_active))
        query = query.order_by(ProfessionalService.created_at, ProfessionalService.id)
        return cast(List[ProfessionalService], self._execute_query(query))
