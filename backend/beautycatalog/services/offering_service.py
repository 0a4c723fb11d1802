# backend/beautycatalog/services/offering_service.py
"""
Professional Offering Store

A professional's priced, duration-customized offering of a base service.
Writes are validated against the base service before anything is stored,
committed, and then projected into the discovery aggregate. The projection
is a separate commit: if it fails the offering write stands and the
failure is logged, leaving the aggregate stale until the next write.
"""

from datetime import datetime, timezone
import logging
import math
from typing import Any, Dict, List, Optional

from sqlalchemy.orm import Session

from ..core.constants import FALLBACK_PROFESSIONAL_NAME, MAX_AVERAGE_RATING
from ..core.exceptions import (
    DuplicateOfferingException,
    NotFoundException,
    RepositoryException,
    ValidationException,
)
from ..domain.offering_rules import ensure_valid_offering, validate_offering
from ..events.catalog_queries import Collection
from ..events.subscriptions import SubscriptionFanout
from ..models.service_catalog import ProfessionalService, ServiceDefinition
from ..repositories.factory import RepositoryFactory
from .aggregate_projector import AggregateProjector, CategoryDisplayInfo, ProfessionalDisplayInfo
from .base import BaseService

logger = logging.getLogger(__name__)

SORTABLE_FIELDS = frozenset(
    {
        "price",
        "duration",
        "bookings",
        "earnings",
        "reviews",
        "average_rating",
        "created_at",
        "updated_at",
        "name",
    }
)
SORT_DIRECTIONS = frozenset({"asc", "desc"})

# Fields copied into the discovery aggregate
DISPLAYED_FIELDS = frozenset({"price", "duration", "is_active"})


def _sort_value(offering: ProfessionalService, sort_field: str) -> Any:
    value = getattr(offering, sort_field)
    if isinstance(value, datetime) and value.tzinfo is None:
        # SQLite hands back naive datetimes; rows written in this session are aware
        value = value.replace(tzinfo=timezone.utc)
    if isinstance(value, str):
        value = value.lower()
    # Missing values sort after present ones in ascending order
    return (value is None, value)


class OfferingService(BaseService):
    """
    Create, edit, list and delete professional offerings.

    Validation always precedes the write; an offering that fails the
    price or duration rules is never persisted.
    """

    def __init__(
        self,
        db: Session,
        fanout: Optional[SubscriptionFanout] = None,
        projector: Optional[AggregateProjector] = None,
    ) -> None:
        super().__init__(db, fanout)
        self.offering_repo = RepositoryFactory.create_professional_service_repository(db)
        self.base_service_repo = RepositoryFactory.create_service_definition_repository(db)
        self.profile_repo = RepositoryFactory.create_professional_profile_repository(db)
        self.projector = projector or AggregateProjector(db, fanout)

    def _get_base_service_or_404(self, base_service_id: str) -> ServiceDefinition:
        base_service = self.base_service_repo.get_with_category(base_service_id)
        if base_service is None:
            raise NotFoundException(
                f"Base service {base_service_id} not found",
                code="BASE_SERVICE_NOT_FOUND",
                details={"base_service_id": base_service_id},
            )
        return base_service

    def _get_offering_or_404(self, offering_id: str) -> ProfessionalService:
        offering = self.offering_repo.get_with_base_service(offering_id)
        if offering is None:
            raise NotFoundException(
                f"Offering {offering_id} not found",
                code="OFFERING_NOT_FOUND",
                details={"offering_id": offering_id},
            )
        return offering

    # ── Writes ────────────────────────────────────────────────────

    @BaseService.measure_operation("create_offering")
    def create_offering(
        self,
        professional_id: str,
        base_service_id: str,
        price: float,
        duration: int,
    ) -> str:
        """
        Offer a base service at a chosen price and duration.

        Returns:
            The new offering id

        Raises:
            NotFoundException: Unknown base service
            ValidationException: Price below the base price or duration outside its band
            DuplicateOfferingException: The professional already offers this service
        """
        base_service = self._get_base_service_or_404(base_service_id)
        ensure_valid_offering(base_service, price=price, duration=duration)

        if self.offering_repo.find_for_pair(professional_id, base_service_id) is not None:
            raise DuplicateOfferingException(professional_id, base_service_id)

        with self.transaction():
            try:
                offering = self.offering_repo.create(
                    professional_id=professional_id,
                    base_service_id=base_service_id,
                    price=float(price),
                    duration=int(duration),
                    is_active=True,
                    bookings=0,
                    earnings=0.0,
                    reviews=0,
                    average_rating=0.0,
                )
            except RepositoryException as exc:
                # Only a committed row for the pair means a concurrent create won the
                # unique constraint; other integrity failures are classified by transaction()
                if exc.integrity and (
                    self.offering_repo.find_for_pair(professional_id, base_service_id) is not None
                ):
                    raise DuplicateOfferingException(professional_id, base_service_id) from exc
                raise

        self.log_operation(
            "create_offering",
            offering_id=offering.id,
            professional_id=professional_id,
            base_service_id=base_service_id,
        )
        self.publish_change(Collection.OFFERINGS)
        self._sync_aggregate(offering, base_service)
        return str(offering.id)

    @BaseService.measure_operation("update_offering")
    def update_offering(
        self,
        offering_id: str,
        price: Optional[float] = None,
        duration: Optional[int] = None,
        is_active: Optional[bool] = None,
    ) -> Dict[str, Any]:
        """
        Change price, duration or active flag.

        Only fields whose value actually changes are validated, so an
        offering grandfathered below a raised base price can still have
        its duration edited.
        """
        offering = self._get_offering_or_404(offering_id)
        base_service = self._get_base_service_or_404(str(offering.base_service_id))

        changes: Dict[str, Any] = {}
        if price is not None and float(price) != offering.price:
            changes["price"] = float(price)
        if duration is not None and float(duration) != offering.duration:
            changes["duration"] = duration
        if is_active is not None and bool(is_active) != offering.is_active:
            changes["is_active"] = bool(is_active)

        if not changes:
            return offering.to_dict()

        ensure_valid_offering(
            base_service, price=changes.get("price"), duration=changes.get("duration")
        )
        if "duration" in changes:
            changes["duration"] = int(changes["duration"])

        with self.transaction():
            updated = self.offering_repo.update(offering_id, **changes)

        self.log_operation("update_offering", offering_id=offering_id, fields=sorted(changes))
        self.publish_change(Collection.OFFERINGS)
        if DISPLAYED_FIELDS.intersection(changes):
            self._sync_aggregate(updated, base_service)  # type: ignore[arg-type]
        return updated.to_dict()  # type: ignore[union-attr]

    @BaseService.measure_operation("delete_offering")
    def delete_offering(self, offering_id: str) -> None:
        """Delete an offering and its discovery aggregate."""
        with self.transaction():
            offering = self._get_offering_or_404(offering_id)
            professional_id = str(offering.professional_id)
            base_service_id = str(offering.base_service_id)
            self.offering_repo.delete(offering_id)

        self.log_operation("delete_offering", offering_id=offering_id)
        self.publish_change(Collection.OFFERINGS)
        self._remove_aggregate(professional_id, base_service_id)

    @BaseService.measure_operation("record_offering_metrics")
    def record_offering_metrics(
        self,
        offering_id: str,
        bookings: Optional[int] = None,
        earnings: Optional[float] = None,
        reviews: Optional[int] = None,
        average_rating: Optional[float] = None,
    ) -> Dict[str, Any]:
        """
        Overwrite booking and review counters.

        Counters are not part of the discovery aggregate, so this never
        triggers a projection.
        """
        counters = {
            name: value
            for name, value in (
                ("bookings", bookings),
                ("earnings", earnings),
                ("reviews", reviews),
                ("average_rating", average_rating),
            )
            if value is not None
        }
        for name, value in counters.items():
            if not math.isfinite(value):
                raise ValidationException(
                    f"{name} must be a finite number",
                    code="METRIC_NOT_FINITE",
                    details={"field": name, "value": str(value)},
                )
            if value < 0:
                raise ValidationException(
                    f"{name} cannot be negative",
                    code="NEGATIVE_METRIC",
                    details={"field": name, "value": value},
                )
        if average_rating is not None and average_rating > MAX_AVERAGE_RATING:
            raise ValidationException(
                f"Average rating cannot exceed {MAX_AVERAGE_RATING:g}",
                code="RATING_OUT_OF_RANGE",
                details={"field": "average_rating", "value": average_rating},
            )

        with self.transaction():
            self._get_offering_or_404(offering_id)
            offering = self.offering_repo.update(offering_id, **counters)

        if counters:
            self.publish_change(Collection.OFFERINGS)
        return offering.to_dict()  # type: ignore[union-attr]

    # ── Reads ─────────────────────────────────────────────────────

    @BaseService.measure_operation("check_offering")
    def check_offering(self, base_service_id: str, price: float, duration: int) -> Dict[str, Any]:
        """
        Validate a price/duration pair without writing anything.

        Returns:
            {"valid": bool, "bounds": {...}, "error": {...} | None}
        """
        base_service = self._get_base_service_or_404(base_service_id)
        result = validate_offering(base_service, price, duration)
        error = None
        if result.error is not None:
            error = {
                "message": result.error.message,
                "code": result.error.code,
                "field": result.error.details.get("field"),
            }
        return {"valid": result.ok, "bounds": result.bounds.to_dict(), "error": error}

    @BaseService.measure_operation("get_offering")
    def get_offering(self, offering_id: str) -> Dict[str, Any]:
        return self._get_offering_or_404(offering_id).to_dict()

    @BaseService.measure_operation("list_offerings")
    def list_offerings(
        self,
        professional_id: str,
        category_id: Optional[str] = None,
        is_active: Optional[bool] = None,
        sort_field: Optional[str] = None,
        direction: str = "asc",
    ) -> List[Dict[str, Any]]:
        """
        A professional's offerings, optionally filtered and sorted.

        The sort is stable: offerings with equal sort values keep their
        insertion order in both directions.

        Raises:
            ValidationException: Unknown sort field or direction
        """
        if sort_field is not None and sort_field not in SORTABLE_FIELDS:
            raise ValidationException(
                f"Cannot sort offerings by '{sort_field}'",
                code="INVALID_SORT_FIELD",
                details={"sort_field": sort_field, "allowed": sorted(SORTABLE_FIELDS)},
            )
        if direction not in SORT_DIRECTIONS:
            raise ValidationException(
                f"Sort direction must be 'asc' or 'desc', not '{direction}'",
                code="INVALID_SORT_DIRECTION",
                details={"direction": direction},
            )

        offerings = self.offering_repo.list_for_professional(
            professional_id, category_id=category_id, is_active=is_active
        )
        if sort_field is not None:
            offerings = self._stable_sort(offerings, sort_field, descending=direction == "desc")
        return [offering.to_dict() for offering in offerings]

    @staticmethod
    def _stable_sort(
        offerings: List[ProfessionalService], sort_field: str, descending: bool
    ) -> List[ProfessionalService]:
        # sorted() is stable with reverse=True too: ties keep insertion order
        return sorted(
            offerings, key=lambda offering: _sort_value(offering, sort_field), reverse=descending
        )

    # ── Projection ────────────────────────────────────────────────

    def _professional_display(self, professional_id: str) -> ProfessionalDisplayInfo:
        profile = self.profile_repo.get_by_id(professional_id)
        if profile is None:
            return ProfessionalDisplayInfo(
                professional_id=professional_id, display_name=FALLBACK_PROFESSIONAL_NAME
            )
        return ProfessionalDisplayInfo(
            professional_id=professional_id,
            display_name=profile.display_name or FALLBACK_PROFESSIONAL_NAME,
            photo_url=profile.photo_url,
        )

    @staticmethod
    def _category_display(base_service: ServiceDefinition) -> CategoryDisplayInfo:
        category = base_service.category
        return CategoryDisplayInfo(
            category_id=str(base_service.category_id),
            name=category.name if category is not None else "",
            service_name=str(base_service.name),
        )

    def _sync_aggregate(
        self, offering: ProfessionalService, base_service: ServiceDefinition
    ) -> None:
        if not offering.is_active:
            self._remove_aggregate(str(offering.professional_id), str(offering.base_service_id))
            return
        try:
            self.projector.upsert_aggregate(
                offering,
                self._professional_display(str(offering.professional_id)),
                self._category_display(base_service),
            )
        except Exception:
            logger.exception(
                "Aggregate upsert failed for offering %s; discovery data is stale", offering.id
            )

    def _remove_aggregate(self, professional_id: str, base_service_id: str) -> None:
        try:
            self.projector.delete_aggregate(professional_id, base_service_id)
        except Exception:
            logger.exception(
                "Aggregate delete failed for %s/%s; discovery data is stale",
                professional_id,
                base_service_id,
            )
