# backend/tests/repositories/test_category_repository.py
"""Row locking and membership refs on CategoryRepository."""

import pytest
from sqlalchemy.dialects import postgresql

from beautycatalog.repositories.factory import RepositoryFactory


@pytest.fixture
def repo(db):
    return RepositoryFactory.create_category_repository(db)


@pytest.fixture
def category_id(repo, db) -> str:
    category = repo.create(name="Hair", description="", service_ids=[])
    db.commit()
    return str(category.id)


def test_locked_query_selects_for_update(repo, category_id):
    sql = str(repo.locked_query(category_id).statement.compile(dialect=postgresql.dialect()))
    assert "FOR UPDATE" in sql


def test_get_for_update_rereads_membership(repo, db, session_factory, category_id):
    stale = repo.get_by_id(category_id)
    assert stale.service_ids == []

    other = session_factory()
    try:
        other_repo = RepositoryFactory.create_category_repository(other)
        other_repo.add_service_ref(other_repo.get_for_update(category_id), "svc-1")
        other.commit()
    finally:
        other.close()

    locked = repo.get_for_update(category_id)
    assert locked is stale
    assert locked.service_ids == ["svc-1"]


def test_get_for_update_unknown_category(repo):
    assert repo.get_for_update("01HZZZZZZZZZZZZZZZZZZZZZZZ") is None
