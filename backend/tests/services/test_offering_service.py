# backend/tests/services/test_offering_service.py
"""
OfferingService against an in-memory SQLite catalog.

Covers validation before writes, pair uniqueness, stable listing order,
metrics updates and the projection into discovery aggregates.
"""

from typing import Any, Dict, List
from unittest.mock import MagicMock

import pytest

from beautycatalog.core.exceptions import (
    ConflictException,
    NotFoundException,
    RepositoryException,
    ValidationException,
)
from beautycatalog.events.catalog_queries import providers_for_service
from beautycatalog.models.service_catalog import ProfessionalService
from beautycatalog.models.service_provider import ServiceProviderAggregate, aggregate_key
from beautycatalog.services.base_service_catalog import BaseServiceCatalog
from beautycatalog.services.offering_service import OfferingService


@pytest.fixture
def service(db, fanout) -> OfferingService:
    return OfferingService(db, fanout)


@pytest.fixture
def base_service_id(seed) -> str:
    return seed.base_service(base_price=100.0, base_duration=60)


def _aggregate(db, professional_id: str, base_service_id: str):
    db.expire_all()
    return db.get(ServiceProviderAggregate, aggregate_key(professional_id, base_service_id))


class TestCreateOffering:
    def test_scenario_price_and_duration_limits(self, service, base_service_id):
        with pytest.raises(ValidationException) as price_error:
            service.create_offering("pro-1", base_service_id, price=90, duration=60)
        assert "100" in price_error.value.message

        with pytest.raises(ValidationException) as duration_error:
            service.create_offering("pro-1", base_service_id, price=100, duration=25)
        assert "30" in duration_error.value.message

        offering_id = service.create_offering("pro-1", base_service_id, price=120, duration=90)
        assert service.get_offering(offering_id)["price"] == 120

    @pytest.mark.parametrize("duration", [30, 120])
    def test_boundary_durations_succeed(self, service, base_service_id, duration):
        service.create_offering("pro-1", base_service_id, price=100, duration=duration)

    @pytest.mark.parametrize("duration", [29, 121])
    def test_durations_outside_band_fail(self, service, base_service_id, duration):
        with pytest.raises(ValidationException):
            service.create_offering("pro-1", base_service_id, price=100, duration=duration)

    def test_failed_validation_writes_nothing(self, service, db, base_service_id):
        with pytest.raises(ValidationException):
            service.create_offering("pro-1", base_service_id, price=1, duration=60)
        assert db.query(ProfessionalService).count() == 0
        assert db.query(ServiceProviderAggregate).count() == 0

    def test_unknown_base_service(self, service):
        with pytest.raises(NotFoundException):
            service.create_offering("pro-1", "01HZZZZZZZZZZZZZZZZZZZZZZZ", price=100, duration=60)

    def test_second_offering_for_same_pair_conflicts(self, service, db, base_service_id):
        service.create_offering("pro-1", base_service_id, price=100, duration=60)
        with pytest.raises(ConflictException) as exc:
            service.create_offering("pro-1", base_service_id, price=150, duration=60)
        assert exc.value.code == "DUPLICATE_OFFERING"
        assert db.query(ProfessionalService).count() == 1

    def test_unique_constraint_race_maps_to_conflict(self, service, base_service_id):
        service.create_offering("pro-1", base_service_id, price=100, duration=60)
        existing = service.offering_repo.find_for_pair("pro-1", base_service_id)
        # A concurrent writer passed the pre-check and committed first
        service.offering_repo.find_for_pair = MagicMock(side_effect=[None, existing])
        with pytest.raises(ConflictException) as exc:
            service.create_offering("pro-1", base_service_id, price=100, duration=60)
        assert exc.value.code == "DUPLICATE_OFFERING"

    def test_integrity_error_without_existing_pair_is_not_a_duplicate(
        self, service, db, base_service_id
    ):
        service.offering_repo.create = MagicMock(
            side_effect=RepositoryException("NOT NULL constraint failed", integrity=True)
        )
        with pytest.raises(ConflictException) as exc:
            service.create_offering("pro-1", base_service_id, price=100, duration=60)
        assert exc.value.code == "INTEGRITY_CONFLICT"
        assert db.query(ProfessionalService).count() == 0

    @pytest.mark.parametrize(
        "price, duration",
        [(float("nan"), 60), (float("inf"), 60), (100, float("nan")), (100, float("inf"))],
    )
    def test_non_finite_values_rejected_before_write(
        self, service, db, base_service_id, price, duration
    ):
        with pytest.raises(ValidationException) as exc:
            service.create_offering("pro-1", base_service_id, price=price, duration=duration)
        assert exc.value.code in ("PRICE_NOT_FINITE", "DURATION_NOT_FINITE")
        assert db.query(ProfessionalService).count() == 0
        assert db.query(ServiceProviderAggregate).count() == 0

    def test_other_professionals_may_offer_the_same_service(self, service, base_service_id):
        service.create_offering("pro-1", base_service_id, price=100, duration=60)
        service.create_offering("pro-2", base_service_id, price=100, duration=60)

    def test_new_offering_starts_active_with_zero_counters(self, service, base_service_id):
        offering = service.get_offering(
            service.create_offering("pro-1", base_service_id, price=100, duration=60)
        )
        assert offering["is_active"] is True
        assert offering["bookings"] == 0
        assert offering["earnings"] == 0.0
        assert offering["reviews"] == 0
        assert offering["average_rating"] == 0.0


class TestProjection:
    def test_create_projects_aggregate_with_display_data(
        self, service, seed, db, base_service_id
    ):
        seed.profile("pro-1", "Ada Styles", photo_url="https://cdn.example.com/ada.jpg")
        offering_id = service.create_offering("pro-1", base_service_id, price=120, duration=90)

        aggregate = _aggregate(db, "pro-1", base_service_id)
        assert aggregate.offering_id == offering_id
        assert aggregate.professional_name == "Ada Styles"
        assert aggregate.professional_image_url == "https://cdn.example.com/ada.jpg"
        assert aggregate.service_name == "Balayage"
        assert aggregate.category_name == "Hair"
        assert aggregate.price == 120
        assert aggregate.duration == 90

    def test_missing_profile_falls_back_to_generic_name(self, service, db, base_service_id):
        service.create_offering("pro-1", base_service_id, price=100, duration=60)
        aggregate = _aggregate(db, "pro-1", base_service_id)
        assert aggregate.professional_name == "Professional"
        assert aggregate.professional_image_url is None

    def test_subscription_sees_offering_then_loses_it_on_delete(
        self, service, fanout, base_service_id
    ):
        snapshots: List[List[Dict[str, Any]]] = []
        fanout.subscribe(providers_for_service(base_service_id), snapshots.append)

        offering_id = service.create_offering("pro-1", base_service_id, price=100, duration=60)
        matching = [row for row in snapshots[-1] if row["professional_id"] == "pro-1"]
        assert len(matching) == 1

        service.delete_offering(offering_id)
        assert all(row["professional_id"] != "pro-1" for row in snapshots[-1])

    def test_deactivating_removes_listing(self, service, fanout, db, base_service_id):
        snapshots: List[List[Dict[str, Any]]] = []
        offering_id = service.create_offering("pro-1", base_service_id, price=100, duration=60)
        fanout.subscribe(providers_for_service(base_service_id), snapshots.append)
        assert len(snapshots[-1]) == 1

        service.update_offering(offering_id, is_active=False)

        assert snapshots[-1] == []
        assert _aggregate(db, "pro-1", base_service_id) is None

    def test_reactivating_restores_listing(self, service, db, base_service_id):
        offering_id = service.create_offering("pro-1", base_service_id, price=100, duration=60)
        service.update_offering(offering_id, is_active=False)
        service.update_offering(offering_id, is_active=True)
        assert _aggregate(db, "pro-1", base_service_id) is not None

    def test_price_change_is_projected(self, service, db, base_service_id):
        offering_id = service.create_offering("pro-1", base_service_id, price=100, duration=60)
        service.update_offering(offering_id, price=140)
        assert _aggregate(db, "pro-1", base_service_id).price == 140

    def test_projector_failure_does_not_fail_the_write(self, db, fanout, base_service_id, caplog):
        projector = MagicMock()
        projector.upsert_aggregate.side_effect = RuntimeError("projection store down")
        service = OfferingService(db, fanout, projector=projector)

        offering_id = service.create_offering("pro-1", base_service_id, price=100, duration=60)

        assert service.get_offering(offering_id)["id"] == offering_id
        assert "Aggregate upsert failed" in caplog.text

    def test_metrics_update_does_not_touch_aggregate(self, db, fanout, base_service_id):
        projector = MagicMock()
        service = OfferingService(db, fanout, projector=projector)
        offering_id = service.create_offering("pro-1", base_service_id, price=100, duration=60)
        projector.reset_mock()

        service.record_offering_metrics(offering_id, bookings=3, earnings=300.0)

        projector.upsert_aggregate.assert_not_called()
        projector.delete_aggregate.assert_not_called()


class TestUpdateOffering:
    def test_price_below_floor_rejected(self, service, base_service_id):
        offering_id = service.create_offering("pro-1", base_service_id, price=100, duration=60)
        with pytest.raises(ValidationException):
            service.update_offering(offering_id, price=99)
        assert service.get_offering(offering_id)["price"] == 100

    def test_unknown_offering(self, service):
        with pytest.raises(NotFoundException):
            service.update_offering("01HZZZZZZZZZZZZZZZZZZZZZZZ", price=100)

    def test_grandfathered_price_survives_duration_edit(self, service, db, base_service_id):
        offering_id = service.create_offering("pro-1", base_service_id, price=100, duration=60)
        BaseServiceCatalog(db).update_base_service(base_service_id, base_price=150)

        updated = service.update_offering(offering_id, duration=90)

        assert updated["price"] == 100
        assert updated["duration"] == 90

    def test_grandfathered_price_cannot_be_changed_to_another_low_price(
        self, service, db, base_service_id
    ):
        offering_id = service.create_offering("pro-1", base_service_id, price=100, duration=60)
        BaseServiceCatalog(db).update_base_service(base_service_id, base_price=150)
        with pytest.raises(ValidationException):
            service.update_offering(offering_id, price=120)

    def test_no_change_is_a_no_op(self, service, base_service_id):
        offering_id = service.create_offering("pro-1", base_service_id, price=100, duration=60)
        assert service.update_offering(offering_id)["price"] == 100

    @pytest.mark.parametrize(
        "changes, code",
        [
            ({"price": float("nan")}, "PRICE_NOT_FINITE"),
            ({"price": float("inf")}, "PRICE_NOT_FINITE"),
            ({"duration": float("nan")}, "DURATION_NOT_FINITE"),
            ({"duration": float("inf")}, "DURATION_NOT_FINITE"),
        ],
    )
    def test_non_finite_values_leave_offering_unchanged(
        self, service, base_service_id, changes, code
    ):
        offering_id = service.create_offering("pro-1", base_service_id, price=100, duration=60)
        with pytest.raises(ValidationException) as exc:
            service.update_offering(offering_id, **changes)
        assert exc.value.code == code
        offering = service.get_offering(offering_id)
        assert offering["price"] == 100
        assert offering["duration"] == 60


class TestListOfferings:
    @pytest.fixture
    def offerings(self, seed, service) -> List[str]:
        category_id = seed.category("Nails")
        cheap = seed.base_service(category_id, name="Manicure", base_price=30, base_duration=30)
        mid = seed.base_service(category_id, name="Gel", base_price=50, base_duration=45)
        other = seed.base_service(name="Cut", base_price=40, base_duration=30)
        return [
            service.create_offering("pro-1", cheap, price=60, duration=30),
            service.create_offering("pro-1", mid, price=60, duration=45),
            service.create_offering("pro-1", other, price=45, duration=30),
        ]

    def test_default_is_insertion_order(self, service, offerings):
        assert [o["id"] for o in service.list_offerings("pro-1")] == offerings

    def test_sort_ascending_keeps_ties_in_insertion_order(self, service, offerings):
        result = service.list_offerings("pro-1", sort_field="price", direction="asc")
        assert [o["id"] for o in result] == [offerings[2], offerings[0], offerings[1]]

    def test_sort_descending_keeps_ties_in_insertion_order(self, service, offerings):
        result = service.list_offerings("pro-1", sort_field="price", direction="desc")
        assert [o["id"] for o in result] == [offerings[0], offerings[1], offerings[2]]

    def test_sort_by_name(self, service, offerings):
        result = service.list_offerings("pro-1", sort_field="name")
        assert [o["name"] for o in result] == ["Cut", "Gel", "Manicure"]

    def test_filter_by_category(self, service, offerings, seed):
        nails = service.get_offering(offerings[0])["category_id"]
        result = service.list_offerings("pro-1", category_id=nails)
        assert [o["id"] for o in result] == offerings[:2]

    def test_filter_by_active_flag(self, service, offerings):
        service.update_offering(offerings[1], is_active=False)
        assert [o["id"] for o in service.list_offerings("pro-1", is_active=True)] == [
            offerings[0],
            offerings[2],
        ]
        assert [o["id"] for o in service.list_offerings("pro-1", is_active=False)] == [
            offerings[1]
        ]

    def test_only_own_offerings(self, service, offerings):
        assert service.list_offerings("pro-2") == []

    def test_unknown_sort_field_rejected(self, service):
        with pytest.raises(ValidationException) as exc:
            service.list_offerings("pro-1", sort_field="popularity")
        assert exc.value.code == "INVALID_SORT_FIELD"

    def test_unknown_direction_rejected(self, service):
        with pytest.raises(ValidationException):
            service.list_offerings("pro-1", sort_field="price", direction="up")


class TestMetricsAndDelete:
    def test_record_metrics(self, service, base_service_id):
        offering_id = service.create_offering("pro-1", base_service_id, price=100, duration=60)
        result = service.record_offering_metrics(
            offering_id, bookings=4, earnings=400.0, reviews=2, average_rating=4.5
        )
        assert result["bookings"] == 4
        assert result["average_rating"] == 4.5

    @pytest.mark.parametrize(
        "kwargs",
        [
            {"bookings": -1},
            {"earnings": -5.0},
            {"average_rating": 5.5},
            {"earnings": float("nan")},
            {"average_rating": float("inf")},
        ],
    )
    def test_invalid_metrics_rejected(self, service, base_service_id, kwargs):
        offering_id = service.create_offering("pro-1", base_service_id, price=100, duration=60)
        with pytest.raises(ValidationException):
            service.record_offering_metrics(offering_id, **kwargs)

    def test_delete_removes_offering_and_listing(self, service, db, base_service_id):
        offering_id = service.create_offering("pro-1", base_service_id, price=100, duration=60)
        service.delete_offering(offering_id)
        with pytest.raises(NotFoundException):
            service.get_offering(offering_id)
        assert _aggregate(db, "pro-1", base_service_id) is None

    def test_delete_then_recreate_pair(self, service, base_service_id):
        offering_id = service.create_offering("pro-1", base_service_id, price=100, duration=60)
        service.delete_offering(offering_id)
        service.create_offering("pro-1", base_service_id, price=110, duration=60)

    def test_delete_unknown_offering(self, service):
        with pytest.raises(NotFoundException):
            service.delete_offering("01HZZZZZZZZZZZZZZZZZZZZZZZ")


class TestCheckOffering:
    def test_reports_bounds_and_error(self, service, base_service_id):
        result = service.check_offering(base_service_id, price=90, duration=60)
        assert result["valid"] is False
        assert result["bounds"] == {"min_price": 100.0, "min_duration": 30.0, "max_duration": 120.0}
        assert result["error"]["code"] == "PRICE_BELOW_BASE"
        assert result["error"]["field"] == "price"

    def test_valid_pair(self, service, base_service_id):
        result = service.check_offering(base_service_id, price=120, duration=90)
        assert result == {
            "valid": True,
            "bounds": {"min_price": 100.0, "min_duration": 30.0, "max_duration": 120.0},
            "error": None,
        }
