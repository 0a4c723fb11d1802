# backend/tests/services/test_category_service.py
import pytest

from beautycatalog.core.exceptions import (
    ConflictException,
    NotFoundException,
    ValidationException,
)
from beautycatalog.services.base_service_catalog import BaseServiceCatalog
from beautycatalog.services.category_service import CategoryService

MISSING_ID = "01HZZZZZZZZZZZZZZZZZZZZZZZ"


@pytest.fixture
def service(db, fanout) -> CategoryService:
    return CategoryService(db, fanout)


def test_create_and_get(service):
    category_id = service.create_category("Hair", description="Cuts and color")
    category = service.get_category(category_id)
    assert category["name"] == "Hair"
    assert category["description"] == "Cuts and color"
    assert category["services"] == []


@pytest.mark.parametrize("name", ["", "   ", None])
def test_blank_name_rejected(service, name):
    with pytest.raises(ValidationException):
        service.create_category(name)


def test_list_is_ordered_by_name(service):
    service.create_category("Nails")
    service.create_category("Hair")
    assert [c["name"] for c in service.list_categories()] == ["Hair", "Nails"]


def test_update_changes_only_supplied_fields(service):
    category_id = service.create_category("Hair", description="Cuts")
    updated = service.update_category(category_id, image_url="https://cdn.example.com/hair.png")
    assert updated["name"] == "Hair"
    assert updated["description"] == "Cuts"
    assert updated["image_url"] == "https://cdn.example.com/hair.png"


def test_update_rejects_blank_name(service):
    category_id = service.create_category("Hair")
    with pytest.raises(ValidationException):
        service.update_category(category_id, name=" ")


def test_update_unknown_category(service):
    with pytest.raises(NotFoundException):
        service.update_category(MISSING_ID, name="Hair")


def test_delete_lifecycle(service, db, fanout):
    """Empty deletes; a member blocks deletion until it is removed."""
    empty_id = service.create_category("Hair")
    service.delete_category(empty_id)
    with pytest.raises(NotFoundException):
        service.get_category(empty_id)

    category_id = service.create_category("Hair")
    catalog = BaseServiceCatalog(db, fanout)
    base_service_id = catalog.create_base_service(category_id, "Balayage", "", 100, 60)
    with pytest.raises(ConflictException) as exc:
        service.delete_category(category_id)
    assert exc.value.code == "CATEGORY_NOT_EMPTY"

    catalog.delete_base_service(base_service_id)
    service.delete_category(category_id)


def test_delete_unknown_category(service):
    with pytest.raises(NotFoundException):
        service.delete_category(MISSING_ID)


def test_membership_refs_are_set_operations(service):
    category_id = service.create_category("Hair")
    assert service.add_base_service_ref(category_id, "svc-1") is True
    assert service.add_base_service_ref(category_id, "svc-1") is False
    assert service.get_category(category_id)["services"] == ["svc-1"]

    assert service.remove_base_service_ref(category_id, "svc-1") is True
    assert service.remove_base_service_ref(category_id, "svc-1") is False
    assert service.get_category(category_id)["services"] == []


def test_membership_refs_on_unknown_category(service):
    with pytest.raises(NotFoundException):
        service.add_base_service_ref(MISSING_ID, "svc-1")


def test_concurrent_membership_adds_are_both_kept(service, session_factory, fanout):
    category_id = service.create_category("Hair")
    # This session caches the empty membership list before the other write lands
    assert service.get_category(category_id)["services"] == []

    other_session = session_factory()
    try:
        CategoryService(other_session, fanout).add_base_service_ref(category_id, "svc-1")
    finally:
        other_session.close()

    assert service.add_base_service_ref(category_id, "svc-2") is True
    assert service.get_category(category_id)["services"] == ["svc-1", "svc-2"]
