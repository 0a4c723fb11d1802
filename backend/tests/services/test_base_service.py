# backend/tests/services/test_base_service.py
"""Transaction classification, change publishing and operation metrics."""

from unittest.mock import Mock

import pytest
from sqlalchemy.exc import IntegrityError, OperationalError

from beautycatalog.core.exceptions import (
    ConflictException,
    NotFoundException,
    RepositoryException,
    ServiceException,
    TransientStoreException,
)
from beautycatalog.events.catalog_queries import Collection
from beautycatalog.services.base import BaseService


class SampleService(BaseService):
    @BaseService.measure_operation("do_work")
    def do_work(self, fail: bool = False) -> str:
        if fail:
            raise ValueError("boom")
        return "done"


@pytest.fixture
def session() -> Mock:
    return Mock()


@pytest.fixture
def service(session) -> SampleService:
    sample = SampleService(session)
    sample.reset_metrics()
    return sample


class TestTransaction:
    def test_commits_on_success(self, service, session):
        with service.transaction():
            pass
        session.commit.assert_called_once()
        session.rollback.assert_not_called()

    def test_domain_errors_pass_through(self, service, session):
        with pytest.raises(NotFoundException):
            with service.transaction():
                raise NotFoundException("missing")
        session.rollback.assert_called_once()
        session.commit.assert_not_called()

    @pytest.mark.parametrize(
        "error,expected",
        [
            (RepositoryException("down", transient=True), TransientStoreException),
            (RepositoryException("dup", integrity=True), ConflictException),
            (RepositoryException("odd"), ServiceException),
            (OperationalError("SELECT 1", {}, Exception("timeout")), TransientStoreException),
            (IntegrityError("INSERT", {}, Exception("unique")), ConflictException),
        ],
    )
    def test_store_errors_are_classified(self, service, session, error, expected):
        with pytest.raises(expected):
            with service.transaction():
                raise error
        session.rollback.assert_called_once()

    def test_commit_failure_is_classified(self, service, session):
        session.commit.side_effect = OperationalError("COMMIT", {}, Exception("gone"))
        with pytest.raises(TransientStoreException):
            with service.transaction():
                pass
        session.rollback.assert_called_once()


def test_publish_change_notifies_each_collection(session):
    fanout = Mock()
    SampleService(session, fanout).publish_change(Collection.OFFERINGS, Collection.PROVIDERS)
    assert [c.args[0] for c in fanout.notify.call_args_list] == [
        Collection.OFFERINGS,
        Collection.PROVIDERS,
    ]


def test_publish_change_without_fanout_is_noop(service):
    service.publish_change(Collection.CATEGORIES)


def test_measure_operation_records_success_and_failure(service):
    assert service.do_work() == "done"
    with pytest.raises(ValueError):
        service.do_work(fail=True)

    metrics = service.get_metrics()["do_work"]
    assert metrics["count"] == 2
    assert metrics["success_rate"] == 0.5
