# backend/beautycatalog/repositories/factory.py
"""
Repository Factory for the service catalog

Provides centralized creation of repository instances,
ensuring consistent initialization and dependency injection.
"""

from typing import TYPE_CHECKING, Any

from sqlalchemy.orm import Session

from .base_repository import BaseRepository

# Avoid circular imports
if TYPE_CHECKING:
    from .category_repository import CategoryRepository
    from .professional_profile_repository import ProfessionalProfileRepository
    from .professional_service_repository import ProfessionalServiceRepository
    from .service_definition_repository import ServiceDefinitionRepository
    from .service_provider_repository import ServiceProviderRepository


class RepositoryFactory:
    """
    Factory class for creating repository instances.

    Centralizes repository creation to ensure consistent initialization
    and makes it easy to swap implementations if needed.
    """

    @staticmethod
    def create_base_repository(db: Session, model: Any) -> BaseRepository:
        """Create a generic base repository for any model."""
        return BaseRepository(db, model)

    @staticmethod
    def create_category_repository(db: Session) -> "CategoryRepository":
        """Create repository for service categories."""
        from .category_repository import CategoryRepository

        return CategoryRepository(db)

    @staticmethod
    def create_service_definition_repository(db: Session) -> "ServiceDefinitionRepository":
        """Create repository for base services."""
        from .service_definition_repository import ServiceDefinitionRepository

        return ServiceDefinitionRepository(db)

    @staticmethod
    def create_professional_service_repository(db: Session) -> "ProfessionalServiceRepository":
        """Create repository for professional offerings."""
        from .professional_service_repository import ProfessionalServiceRepository

        return ProfessionalServiceRepository(db)

    @staticmethod
    def create_service_provider_repository(db: Session) -> "ServiceProviderRepository":
        """Create repository for discovery provider aggregates."""
        from .service_provider_repository import ServiceProviderRepository

        return ServiceProviderRepository(db)

    @staticmethod
    def create_professional_profile_repository(db: Session) -> "ProfessionalProfileRepository":
        """Create repository for professional display profiles."""
        from .professional_profile_repository import ProfessionalProfileRepository

        return ProfessionalProfileRepository(db)
