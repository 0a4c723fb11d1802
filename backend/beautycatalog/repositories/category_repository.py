# backend/beautycatalog/repositories/category_repository.py
"""
Repository for service category data access.

Besides CRUD, owns the membership back-reference list: base service ids
are added and removed as set operations so repeated calls are no-ops.
"""

import logging
from typing import List, Optional, cast

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Query, Session

from ..models.service_catalog import ServiceCategory
from .base_repository import BaseRepository, _wrap_store_error

logger = logging.getLogger(__name__)


class CategoryRepository(BaseRepository[ServiceCategory]):
    """Repository for ServiceCategory queries."""

    def __init__(self, db: Session) -> None:
        super().__init__(db, ServiceCategory)

    def get_all_ordered(self) -> List[ServiceCategory]:
        """All categories ordered by name."""
        return cast(
            List[ServiceCategory],
            self._execute_query(self._build_query().order_by(ServiceCategory.name)),
        )

    def locked_query(self, category_id: str) -> Query:
        return (
            self._build_query()
            .filter(ServiceCategory.id == category_id)
            .with_for_update()
            .populate_existing()
        )

    def get_for_update(self, category_id: str) -> Optional[ServiceCategory]:
        """
        Load a category and hold its row lock until the transaction ends.

        The membership list is re-read from the store even when the session
        already holds the row, so read-modify-write of ``service_ids`` never
        starts from a stale copy.
        """
        try:
            return cast(Optional[ServiceCategory], self.locked_query(category_id).first())
        except SQLAlchemyError as e:
            self.logger.error(f"Error locking category {category_id}: {str(e)}")
            raise _wrap_store_error("Failed to lock category", e) from e

    def add_service_ref(self, category: ServiceCategory, base_service_id: str) -> bool:
        """
        Add a base service id to the category's membership list.

        ``category`` must come from get_for_update in the current transaction.

        Returns:
            True if the list changed, False if the id was already present
        """
        current = list(category.service_ids or [])
        if base_service_id in current:
            return False
        # Assign a new list so the change is tracked
        category.service_ids = current + [base_service_id]
        self.db.flush()
        return True

    def remove_service_ref(self, category: ServiceCategory, base_service_id: str) -> bool:
        """
        Remove a base service id from the category's membership list.

        Returns:
            True if the list changed, False if the id was absent
        """
        current = list(category.service_ids or [])
        if base_service_id not in current:
            return False
        category.service_ids = [sid for sid in current if sid != base_service_id]
        self.db.flush()
        return True
