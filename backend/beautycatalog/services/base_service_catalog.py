# backend/beautycatalog/services/base_service_catalog.py
"""
Base Service Catalog

Admin-owned canonical services: name, description, price floor, duration
baseline, publication flag and media. Every write keeps the owning
category's membership list in step within the same transaction.

Changing base_price or base_duration never touches existing offerings;
offerings that no longer satisfy the new bounds are grandfathered until
the professional next edits that field.
"""

import logging
import math
from typing import Any, Dict, List, Optional

from sqlalchemy.orm import Session

from ..core.constants import MIN_BASE_DURATION_MINUTES, MIN_BASE_PRICE
from ..core.exceptions import ConflictException, NotFoundException, ValidationException
from ..events.catalog_queries import Collection
from ..events.subscriptions import SubscriptionFanout
from ..models.service_catalog import ServiceDefinition
from ..repositories.factory import RepositoryFactory
from .base import BaseService
from .category_service import CategoryService

logger = logging.getLogger(__name__)

UPDATABLE_FIELDS = frozenset(
    {"name", "description", "base_price", "base_duration", "is_published", "media", "category_id"}
)
MEDIA_TYPES = frozenset({"image", "video"})


def _check_name(name: Optional[str]) -> str:
    cleaned = (name or "").strip()
    if not cleaned:
        raise ValidationException(
            "Service name is required", code="NAME_REQUIRED", details={"field": "name"}
        )
    return cleaned


def _check_base_price(base_price: Any) -> float:
    if base_price is None or not math.isfinite(float(base_price)):
        raise ValidationException(
            "Base price must be a finite number",
            code="BASE_PRICE_NOT_FINITE",
            details={"field": "base_price", "base_price": str(base_price)},
        )
    if float(base_price) < MIN_BASE_PRICE:
        raise ValidationException(
            "Base price cannot be negative",
            code="BASE_PRICE_NEGATIVE",
            details={"field": "base_price", "min_price": MIN_BASE_PRICE, "base_price": base_price},
        )
    return float(base_price)


def _check_base_duration(base_duration: Any) -> int:
    if base_duration is None or not math.isfinite(float(base_duration)):
        raise ValidationException(
            "Base duration must be a finite number of minutes",
            code="BASE_DURATION_NOT_FINITE",
            details={"field": "base_duration", "base_duration": str(base_duration)},
        )
    if float(base_duration) < MIN_BASE_DURATION_MINUTES:
        raise ValidationException(
            f"Base duration must be at least {MIN_BASE_DURATION_MINUTES} minutes",
            code="BASE_DURATION_TOO_SHORT",
            details={
                "field": "base_duration",
                "min_duration": MIN_BASE_DURATION_MINUTES,
                "base_duration": base_duration,
            },
        )
    return int(base_duration)


def _check_media(media: Optional[List[Dict[str, Any]]]) -> List[Dict[str, str]]:
    cleaned: List[Dict[str, str]] = []
    for index, item in enumerate(media or []):
        url = str(item.get("url") or "").strip()
        media_type = item.get("type")
        if not url or media_type not in MEDIA_TYPES:
            raise ValidationException(
                "Media entries need a url and a type of 'image' or 'video'",
                code="INVALID_MEDIA",
                details={"field": "media", "index": index},
            )
        cleaned.append({"url": url, "type": str(media_type)})
    return cleaned


class BaseServiceCatalog(BaseService):
    """CRUD for canonical base services."""

    def __init__(self, db: Session, fanout: Optional[SubscriptionFanout] = None) -> None:
        super().__init__(db, fanout)
        self.base_service_repo = RepositoryFactory.create_service_definition_repository(db)
        self.offering_repo = RepositoryFactory.create_professional_service_repository(db)
        self.categories = CategoryService(db)

    def _get_or_404(self, base_service_id: str) -> ServiceDefinition:
        base_service = self.base_service_repo.get_by_id(base_service_id)
        if base_service is None:
            raise NotFoundException(
                f"Base service {base_service_id} not found",
                code="BASE_SERVICE_NOT_FOUND",
                details={"base_service_id": base_service_id},
            )
        return base_service

    @BaseService.measure_operation("create_base_service")
    def create_base_service(
        self,
        category_id: str,
        name: str,
        description: str,
        base_price: float,
        base_duration: int,
        is_published: bool = False,
        media: Optional[List[Dict[str, Any]]] = None,
    ) -> str:
        """
        Create a base service and register it with its category.

        Returns:
            The new base service id

        Raises:
            ValidationException: Empty name, negative price, duration under 15 minutes
            NotFoundException: Unknown category
        """
        fields = {
            "name": _check_name(name),
            "description": description or "",
            "base_price": _check_base_price(base_price),
            "base_duration": _check_base_duration(base_duration),
            "is_published": bool(is_published),
            "media": _check_media(media),
        }
        with self.transaction():
            # Raises NotFoundException before anything is written
            self.categories.require_category(category_id, for_update=True)
            base_service = self.base_service_repo.create(category_id=category_id, **fields)
            self.categories.add_base_service_ref(category_id, base_service.id, commit=False)

        self.log_operation(
            "create_base_service", base_service_id=base_service.id, category_id=category_id
        )
        self.publish_change(Collection.BASE_SERVICES, Collection.CATEGORIES)
        return str(base_service.id)

    @BaseService.measure_operation("update_base_service")
    def update_base_service(self, base_service_id: str, **changes: Any) -> Dict[str, Any]:
        """
        Apply a partial update.

        Only the supplied fields are checked and written. Moving the service
        to another category moves its membership entry too. Existing
        offerings are not re-validated.

        Raises:
            ValidationException: Unknown field or a value outside its bounds
            NotFoundException: Unknown base service or target category
        """
        unknown = sorted(set(changes) - UPDATABLE_FIELDS)
        if unknown:
            raise ValidationException(
                f"Unknown base service field(s): {', '.join(unknown)}",
                code="UNKNOWN_FIELD",
                details={"fields": unknown},
            )

        fields: Dict[str, Any] = {}
        if "name" in changes:
            fields["name"] = _check_name(changes["name"])
        if "description" in changes:
            fields["description"] = changes["description"] or ""
        if "base_price" in changes:
            fields["base_price"] = _check_base_price(changes["base_price"])
        if "base_duration" in changes:
            fields["base_duration"] = _check_base_duration(changes["base_duration"])
        if "is_published" in changes:
            fields["is_published"] = bool(changes["is_published"])
        if "media" in changes:
            fields["media"] = _check_media(changes["media"])

        collections = [Collection.BASE_SERVICES]
        with self.transaction():
            base_service = self._get_or_404(base_service_id)
            new_category_id = changes.get("category_id")
            if new_category_id and new_category_id != base_service.category_id:
                # Both membership rows are locked in id order
                for locked_id in sorted({str(base_service.category_id), new_category_id}):
                    self.categories.require_category(locked_id, for_update=True)
                self.categories.remove_base_service_ref(
                    str(base_service.category_id), base_service_id, commit=False
                )
                self.categories.add_base_service_ref(new_category_id, base_service_id, commit=False)
                fields["category_id"] = new_category_id
                collections.append(Collection.CATEGORIES)
            updated = self.base_service_repo.update(base_service_id, **fields)

        self.log_operation(
            "update_base_service", base_service_id=base_service_id, fields=sorted(fields)
        )
        self.publish_change(*collections)
        return updated.to_dict()  # type: ignore[union-attr]

    @BaseService.measure_operation("delete_base_service")
    def delete_base_service(self, base_service_id: str) -> None:
        """
        Delete a base service no offering references.

        Raises:
            NotFoundException: Unknown base service
            ConflictException: Offerings still reference it
        """
        with self.transaction():
            base_service = self._get_or_404(base_service_id)
            offering_count = self.offering_repo.count_for_base_service(base_service_id)
            if offering_count:
                raise ConflictException(
                    "Cannot delete: remove offerings before deleting this base service",
                    code="BASE_SERVICE_IN_USE",
                    details={"base_service_id": base_service_id, "offering_count": offering_count},
                )
            self.categories.remove_base_service_ref(
                str(base_service.category_id), base_service_id, commit=False
            )
            self.base_service_repo.delete(base_service_id)

        self.log_operation("delete_base_service", base_service_id=base_service_id)
        self.publish_change(Collection.BASE_SERVICES, Collection.CATEGORIES)

    @BaseService.measure_operation("get_base_service")
    def get_base_service(self, base_service_id: str) -> Dict[str, Any]:
        return self._get_or_404(base_service_id).to_dict()

    @BaseService.measure_operation("list_base_services")
    def list_base_services(
        self, category_id: Optional[str] = None, published_only: bool = False
    ) -> List[Dict[str, Any]]:
        """Base services ordered by name, optionally scoped to a category."""
        return [
            base_service.to_dict()
            for base_service in self.base_service_repo.list_filtered(category_id, published_only)
        ]
