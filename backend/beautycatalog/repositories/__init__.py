"""Repositories (document store adapter) for catalog collections."""

from .base_repository import BaseRepository, IRepository, Page
from .category_repository import CategoryRepository
from .factory import RepositoryFactory
from .professional_profile_repository import ProfessionalProfileRepository
from .professional_service_repository import ProfessionalServiceRepository
from .service_definition_repository import ServiceDefinitionRepository
from .service_provider_repository import ServiceProviderRepository

__all__ = [
    "BaseRepository",
    "CategoryRepository",
    "IRepository",
    "Page",
    "ProfessionalProfileRepository",
    "ProfessionalServiceRepository",
    "RepositoryFactory",
    "ServiceDefinitionRepository",
    "ServiceProviderRepository",
]
