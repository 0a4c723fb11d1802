"""SQLAlchemy models for the service catalog."""

from .professional import ProfessionalProfile
from .service_catalog import ProfessionalService, ServiceCategory, ServiceDefinition
from .service_provider import ServiceProviderAggregate, aggregate_key

__all__ = [
    "ProfessionalProfile",
    "ProfessionalService",
    "ServiceCategory",
    "ServiceDefinition",
    "ServiceProviderAggregate",
    "aggregate_key",
]
