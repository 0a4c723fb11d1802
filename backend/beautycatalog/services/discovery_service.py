# backend/beautycatalog/services/discovery_service.py
"""
Read-only discovery queries.

Provider listings come straight from the denormalized aggregates; the
service browser pages through published base services with an opaque
cursor (the id of the last item on the previous page).
"""

import logging
from typing import Any, Dict, List, Optional

from sqlalchemy.orm import Session

from ..core.constants import DEFAULT_PAGE_SIZE, MAX_PAGE_SIZE
from ..core.exceptions import (
    RepositoryException,
    TransientStoreException,
    ValidationException,
)
from ..repositories.factory import RepositoryFactory
from .base import BaseService

logger = logging.getLogger(__name__)

BROWSE_ORDER_FIELDS = frozenset({"name", "base_price", "base_duration", "created_at"})


class DiscoveryService(BaseService):
    """Client-facing browse reads. Never writes."""

    def __init__(self, db: Session) -> None:
        super().__init__(db)
        self.provider_repo = RepositoryFactory.create_service_provider_repository(db)
        self.base_service_repo = RepositoryFactory.create_service_definition_repository(db)

    @BaseService.measure_operation("list_providers_for_service")
    def list_providers_for_service(self, base_service_id: str) -> List[Dict[str, Any]]:
        """Active providers of a base service, cheapest first."""
        return [
            aggregate.to_dict()
            for aggregate in self.provider_repo.list_active_for_service(base_service_id)
        ]

    @BaseService.measure_operation("list_providers_for_category")
    def list_providers_for_category(self, category_id: str) -> List[Dict[str, Any]]:
        return [
            aggregate.to_dict()
            for aggregate in self.provider_repo.list_active_for_category(category_id)
        ]

    @BaseService.measure_operation("browse_services")
    def browse_services(
        self,
        category_id: Optional[str] = None,
        order_by: str = "name",
        descending: bool = False,
        page_size: int = DEFAULT_PAGE_SIZE,
        cursor: Optional[str] = None,
    ) -> Dict[str, Any]:
        """
        One page of published base services.

        Returns:
            {"items": [...], "next_cursor": str | None}

        Raises:
            ValidationException: Bad ordering field, page size or cursor
        """
        if order_by not in BROWSE_ORDER_FIELDS:
            raise ValidationException(
                f"Cannot order services by '{order_by}'",
                code="INVALID_ORDER_FIELD",
                details={"order_by": order_by, "allowed": sorted(BROWSE_ORDER_FIELDS)},
            )
        if not 1 <= page_size <= MAX_PAGE_SIZE:
            raise ValidationException(
                f"Page size must be between 1 and {MAX_PAGE_SIZE}",
                code="INVALID_PAGE_SIZE",
                details={"page_size": page_size, "max_page_size": MAX_PAGE_SIZE},
            )

        filters: Dict[str, Any] = {"is_published": True}
        if category_id:
            filters["category_id"] = category_id

        try:
            page = self.base_service_repo.query(
                filters=filters,
                order_by=order_by,
                descending=descending,
                page_size=page_size,
                cursor=cursor,
            )
        except RepositoryException as exc:
            if exc.transient:
                raise TransientStoreException(
                    "The catalog store is temporarily unavailable", code="STORE_UNAVAILABLE"
                ) from exc
            raise ValidationException(
                "Invalid page cursor", code="INVALID_CURSOR", details={"cursor": cursor}
            ) from exc

        return {
            "items": [base_service.to_dict() for base_service in page.items],
            "next_cursor": page.next_cursor,
        }
