"""Change fan-out for live catalog queries."""

from .catalog_queries import (
    CatalogQuery,
    Collection,
    all_categories,
    offerings_for_professional,
    providers_for_category,
    providers_for_service,
    published_services,
)
from .subscriptions import Subscription, SubscriptionFanout, get_subscription_fanout

__all__ = [
    "CatalogQuery",
    "Collection",
    "Subscription",
    "SubscriptionFanout",
    "all_categories",
    "get_subscription_fanout",
    "offerings_for_professional",
    "providers_for_category",
    "providers_for_service",
    "published_services",
]
