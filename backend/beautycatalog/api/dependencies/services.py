# backend/beautycatalog/api/dependencies/services.py
"""
Service layer dependencies for dependency injection.

Every writing service gets the process-wide subscription fan-out so
committed changes reach live subscribers.
"""

import logging

from fastapi import Depends
from sqlalchemy.orm import Session

from ...events.subscriptions import SubscriptionFanout, get_subscription_fanout
from ...services.base_service_catalog import BaseServiceCatalog
from ...services.category_service import CategoryService
from ...services.discovery_service import DiscoveryService
from ...services.offering_service import OfferingService
from .database import get_db

logger = logging.getLogger(__name__)


def get_fanout() -> SubscriptionFanout:
    """Get the subscription fan-out shared by all requests."""
    return get_subscription_fanout()


def get_category_service(
    db: Session = Depends(get_db),
    fanout: SubscriptionFanout = Depends(get_fanout),
) -> CategoryService:
    return CategoryService(db, fanout)


def get_base_service_catalog(
    db: Session = Depends(get_db),
    fanout: SubscriptionFanout = Depends(get_fanout),
) -> BaseServiceCatalog:
    return BaseServiceCatalog(db, fanout)


def get_offering_service(
    db: Session = Depends(get_db),
    fanout: SubscriptionFanout = Depends(get_fanout),
) -> OfferingService:
    """
    Get offering service instance with all dependencies.

    Args:
        db: Database session
        fanout: Subscription fan-out notified after commits

    Returns:
        OfferingService instance with its aggregate projector
    """
    return OfferingService(db, fanout)


def get_discovery_service(db: Session = Depends(get_db)) -> DiscoveryService:
    return DiscoveryService(db)
