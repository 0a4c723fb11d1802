"""Typed catalog queries that subscribers register for."""

from __future__ import annotations

from enum import Enum
import json
from typing import Any, Dict, Optional

from pydantic import BaseModel, ConfigDict, Field


class Collection(str, Enum):
    """Catalog collections a query can target."""

    CATEGORIES = "service_categories"
    BASE_SERVICES = "base_services"
    OFFERINGS = "professional_services"
    PROVIDERS = "service_providers"


class CatalogQuery(BaseModel):
    """
    Equality predicates plus ordering over one collection.

    Two queries with the same collection, filters and ordering share a
    signature and therefore a snapshot load on every change.
    """

    model_config = ConfigDict(extra="forbid", frozen=True)

    collection: Collection
    filters: Dict[str, Any] = Field(default_factory=dict)
    order_by: Optional[str] = None
    descending: bool = False

    @property
    def signature(self) -> str:
        return json.dumps(
            {
                "collection": self.collection.value,
                "filters": self.filters,
                "order_by": self.order_by,
                "descending": self.descending,
            },
            sort_keys=True,
            default=str,
        )


def providers_for_service(base_service_id: str) -> CatalogQuery:
    """Active providers of a base service, cheapest first."""
    return CatalogQuery(
        collection=Collection.PROVIDERS,
        filters={"base_service_id": base_service_id, "is_active": True},
        order_by="price",
    )


def providers_for_category(category_id: str) -> CatalogQuery:
    return CatalogQuery(
        collection=Collection.PROVIDERS,
        filters={"category_id": category_id, "is_active": True},
        order_by="price",
    )


def offerings_for_professional(professional_id: str) -> CatalogQuery:
    """A professional's offerings in insertion order."""
    return CatalogQuery(
        collection=Collection.OFFERINGS,
        filters={"professional_id": professional_id},
        order_by="created_at",
    )


def published_services(category_id: Optional[str] = None) -> CatalogQuery:
    filters: Dict[str, Any] = {"is_published": True}
    if category_id:
        filters["category_id"] = category_id
    return CatalogQuery(collection=Collection.BASE_SERVICES, filters=filters, order_by="name")


def all_categories() -> CatalogQuery:
    return CatalogQuery(collection=Collection.CATEGORIES, order_by="name")
