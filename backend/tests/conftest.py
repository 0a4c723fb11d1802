# backend/tests/conftest.py
"""
Shared fixtures for the catalog test suite.

Each test gets its own in-memory SQLite engine (StaticPool, foreign keys
enforced), a session factory bound to it, and a SubscriptionFanout whose
snapshots are loaded through that same factory.
"""

import os

# Set testing mode BEFORE any beautycatalog imports
os.environ["IS_TESTING"] = "true"

from typing import Generator, Optional

from fastapi.testclient import TestClient
import pytest
from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session, sessionmaker

from beautycatalog.database import Base, build_engine, init_db
from beautycatalog.events.snapshot_loader import SnapshotLoader
from beautycatalog.events.subscriptions import SubscriptionFanout
from beautycatalog.models.professional import ProfessionalProfile
from beautycatalog.services.base_service_catalog import BaseServiceCatalog
from beautycatalog.services.category_service import CategoryService


@pytest.fixture
def engine() -> Generator[Engine, None, None]:
    engine = build_engine("sqlite+pysqlite:///:memory:")
    init_db(bind=engine)
    yield engine
    Base.metadata.drop_all(engine)
    engine.dispose()


@pytest.fixture
def session_factory(engine: Engine) -> sessionmaker:
    return sessionmaker(bind=engine, autoflush=False, expire_on_commit=False)


@pytest.fixture
def db(session_factory: sessionmaker) -> Generator[Session, None, None]:
    session = session_factory()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def fanout(session_factory: sessionmaker) -> SubscriptionFanout:
    return SubscriptionFanout(SnapshotLoader(session_factory))


class CatalogSeeder:
    """Creates categories, base services and profiles through the services."""

    def __init__(self, db: Session, fanout: SubscriptionFanout) -> None:
        self.db = db
        self.categories = CategoryService(db, fanout)
        self.base_services = BaseServiceCatalog(db, fanout)

    def category(self, name: str = "Hair") -> str:
        return self.categories.create_category(name, description=f"{name} services")

    def base_service(
        self,
        category_id: Optional[str] = None,
        name: str = "Balayage",
        base_price: float = 100.0,
        base_duration: int = 60,
        is_published: bool = True,
    ) -> str:
        return self.base_services.create_base_service(
            category_id or self.category(),
            name,
            f"{name} description",
            base_price,
            base_duration,
            is_published=is_published,
        )

    def profile(
        self, professional_id: str, display_name: str, photo_url: Optional[str] = None
    ) -> None:
        self.db.add(
            ProfessionalProfile(
                id=professional_id, display_name=display_name, photo_url=photo_url
            )
        )
        self.db.commit()


@pytest.fixture
def seed(db: Session, fanout: SubscriptionFanout) -> CatalogSeeder:
    return CatalogSeeder(db, fanout)


@pytest.fixture
def client(
    session_factory: sessionmaker, fanout: SubscriptionFanout
) -> Generator[TestClient, None, None]:
    """TestClient with the database and fan-out dependencies overridden."""
    from beautycatalog.api.dependencies.database import get_db
    from beautycatalog.api.dependencies.services import get_fanout
    from beautycatalog.main import app

    def _get_test_db() -> Generator[Session, None, None]:
        session = session_factory()
        try:
            yield session
        finally:
            session.close()

    app.dependency_overrides[get_db] = _get_test_db
    app.dependency_overrides[get_fanout] = lambda: fanout
    try:
        yield TestClient(app)
    finally:
        app.dependency_overrides.clear()
