# backend/beautycatalog/services/category_service.py
"""
Category registry.

Owns service categories and their membership list of base service ids.
A category with members cannot be deleted.
"""

import logging
from typing import Any, Dict, List, Optional

from sqlalchemy.orm import Session

from ..core.exceptions import ConflictException, NotFoundException, ValidationException
from ..events.catalog_queries import Collection
from ..events.subscriptions import SubscriptionFanout
from ..models.service_catalog import ServiceCategory
from ..repositories.factory import RepositoryFactory
from .base import BaseService

logger = logging.getLogger(__name__)

_UNSET: Any = object()


def _require_name(name: Optional[str]) -> str:
    cleaned = (name or "").strip()
    if not cleaned:
        raise ValidationException(
            "Category name is required", code="NAME_REQUIRED", details={"field": "name"}
        )
    return cleaned


class CategoryService(BaseService):
    """Create, edit and delete categories; maintain membership lists."""

    def __init__(self, db: Session, fanout: Optional[SubscriptionFanout] = None) -> None:
        super().__init__(db, fanout)
        self.category_repo = RepositoryFactory.create_category_repository(db)

    def require_category(self, category_id: str, for_update: bool = False) -> ServiceCategory:
        """
        Load a category or raise NotFoundException.

        ``for_update`` takes the row lock needed before changing the
        membership list.
        """
        if for_update:
            category = self.category_repo.get_for_update(category_id)
        else:
            category = self.category_repo.get_by_id(category_id)
        if category is None:
            raise NotFoundException(
                f"Category {category_id} not found",
                code="CATEGORY_NOT_FOUND",
                details={"category_id": category_id},
            )
        return category

    @BaseService.measure_operation("create_category")
    def create_category(
        self,
        name: str,
        description: Optional[str] = None,
        image_url: Optional[str] = None,
    ) -> str:
        """
        Create a category with an empty membership list.

        Returns:
            The new category id

        Raises:
            ValidationException: If name is empty
        """
        cleaned = _require_name(name)
        with self.transaction():
            category = self.category_repo.create(
                name=cleaned, description=description, image_url=image_url, service_ids=[]
            )
        self.log_operation("create_category", category_id=category.id)
        self.publish_change(Collection.CATEGORIES)
        return str(category.id)

    @BaseService.measure_operation("update_category")
    def update_category(
        self,
        category_id: str,
        name: Optional[str] = _UNSET,
        description: Optional[str] = _UNSET,
        image_url: Optional[str] = _UNSET,
    ) -> Dict[str, Any]:
        """Edit display fields; the membership list is not editable here."""
        changes: Dict[str, Any] = {}
        if name is not _UNSET:
            changes["name"] = _require_name(name)
        if description is not _UNSET:
            changes["description"] = description
        if image_url is not _UNSET:
            changes["image_url"] = image_url

        with self.transaction():
            self.require_category(category_id)
            category = self.category_repo.update(category_id, **changes)
        self.publish_change(Collection.CATEGORIES)
        return category.to_dict()  # type: ignore[union-attr]

    @BaseService.measure_operation("get_category")
    def get_category(self, category_id: str) -> Dict[str, Any]:
        return self.require_category(category_id).to_dict()

    @BaseService.measure_operation("list_categories")
    def list_categories(self) -> List[Dict[str, Any]]:
        """All categories ordered by name."""
        return [category.to_dict() for category in self.category_repo.get_all_ordered()]

    @BaseService.measure_operation("delete_category")
    def delete_category(self, category_id: str) -> None:
        """
        Delete an empty category.

        Raises:
            NotFoundException: If the category does not exist
            ConflictException: If base services still belong to it
        """
        with self.transaction():
            category = self.require_category(category_id, for_update=True)
            if not category.is_empty:
                raise ConflictException(
                    "Cannot delete a category that still has services",
                    code="CATEGORY_NOT_EMPTY",
                    details={
                        "category_id": category_id,
                        "service_count": len(category.service_ids),
                    },
                )
            self.category_repo.delete(category_id)
        self.log_operation("delete_category", category_id=category_id)
        self.publish_change(Collection.CATEGORIES)

    @BaseService.measure_operation("add_base_service_ref")
    def add_base_service_ref(
        self, category_id: str, base_service_id: str, commit: bool = True
    ) -> bool:
        """
        Add a base service to the category's membership list (set semantics).

        Args:
            commit: False when the caller owns the surrounding transaction

        Returns:
            True if the list changed, False if the id was already a member
        """
        if not commit:
            category = self.require_category(category_id, for_update=True)
            return self.category_repo.add_service_ref(category, base_service_id)
        with self.transaction():
            changed = self.category_repo.add_service_ref(
                self.require_category(category_id, for_update=True), base_service_id
            )
        if changed:
            self.publish_change(Collection.CATEGORIES)
        return changed

    @BaseService.measure_operation("remove_base_service_ref")
    def remove_base_service_ref(
        self, category_id: str, base_service_id: str, commit: bool = True
    ) -> bool:
        """Remove a base service from the membership list; absent ids are a no-op."""
        if not commit:
            return self.category_repo.remove_service_ref(
                self.require_category(category_id, for_update=True), base_service_id
            )
        with self.transaction():
            changed = self.category_repo.remove_service_ref(
                self.require_category(category_id, for_update=True), base_service_id
            )
        if changed:
            self.publish_change(Collection.CATEGORIES)
        return changed
