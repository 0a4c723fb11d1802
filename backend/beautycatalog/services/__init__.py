"""Service layer for the service catalog."""

from .aggregate_projector import AggregateProjector, CategoryDisplayInfo, ProfessionalDisplayInfo
from .base import BaseService
from .base_service_catalog import BaseServiceCatalog
from .category_service import CategoryService
from .discovery_service import DiscoveryService
from .discovery_stream import create_catalog_stream
from .offering_service import OfferingService

__all__ = [
    "AggregateProjector",
    "BaseService",
    "BaseServiceCatalog",
    "CategoryDisplayInfo",
    "CategoryService",
    "DiscoveryService",
    "OfferingService",
    "ProfessionalDisplayInfo",
    "create_catalog_stream",
]
