"""Loads the current result list of a catalog query in its own session."""

from __future__ import annotations

import logging
from typing import Any, Callable, Dict, List, Type

from sqlalchemy.orm import Session

from ..models.service_catalog import ProfessionalService, ServiceCategory, ServiceDefinition
from ..models.service_provider import ServiceProviderAggregate
from ..repositories.factory import RepositoryFactory
from .catalog_queries import CatalogQuery, Collection

logger = logging.getLogger(__name__)

MODEL_FOR_COLLECTION: Dict[Collection, Type[Any]] = {
    Collection.CATEGORIES: ServiceCategory,
    Collection.BASE_SERVICES: ServiceDefinition,
    Collection.OFFERINGS: ProfessionalService,
    Collection.PROVIDERS: ServiceProviderAggregate,
}


class SnapshotLoader:
    """
    Runs a CatalogQuery against committed data.

    Each load opens a fresh session from ``session_factory`` so the
    snapshot reflects what other sessions have committed, never a
    writer's uncommitted state.
    """

    def __init__(self, session_factory: Callable[[], Session]):
        self.session_factory = session_factory

    def __call__(self, query: CatalogQuery) -> List[Dict[str, Any]]:
        return self.load(query)

    def load(self, query: CatalogQuery) -> List[Dict[str, Any]]:
        model = MODEL_FOR_COLLECTION[query.collection]
        db = self.session_factory()
        try:
            repository = RepositoryFactory.create_base_repository(db, model)
            page = repository.query(
                filters=query.filters,
                order_by=query.order_by,
                descending=query.descending,
            )
            return [item.to_dict() for item in page.items]
        finally:
            db.close()
