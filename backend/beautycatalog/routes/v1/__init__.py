"""Version 1 API routers mounted under /api/v1."""

from . import base_services, categories, discovery, offerings

__all__ = ["base_services", "categories", "discovery", "offerings"]
