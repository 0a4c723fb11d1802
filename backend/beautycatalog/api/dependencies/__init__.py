# backend/beautycatalog/api/dependencies/__init__.py
"""
Central export point for all dependencies.
"""

from .database import get_db
from .services import (
    get_base_service_catalog,
    get_category_service,
    get_discovery_service,
    get_fanout,
    get_offering_service,
)

__all__ = [
    # Database
    "get_db",
    # Services
    "get_base_service_catalog",
    "get_category_service",
    "get_discovery_service",
    "get_fanout",
    "get_offering_service",
]
