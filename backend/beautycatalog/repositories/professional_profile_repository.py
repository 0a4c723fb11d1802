# backend/beautycatalog/repositories/professional_profile_repository.py
"""Repository for professional display profiles."""

from sqlalchemy.orm import Session

from ..models.professional import ProfessionalProfile
from .base_repository import BaseRepository


class ProfessionalProfileRepository(BaseRepository[ProfessionalProfile]):
    """Repository for ProfessionalProfile rows."""

    def __init__(self, db: Session) -> None:
        super().__init__(db, ProfessionalProfile)
