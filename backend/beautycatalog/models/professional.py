# backend/beautycatalog/models/professional.py
"""
Professional display profile.

The identity provider owns professionals; this table only mirrors the
display data (name, photo URL) that discovery listings denormalize.
"""

from typing import Any, Dict

from sqlalchemy import Column, DateTime, String

from ..database import Base
from .types import utcnow


class ProfessionalProfile(Base):
    """Display name and photo of a professional."""

    __tablename__ = "professional_profiles"

    id = Column(String(64), primary_key=True)
    display_name = Column(String(200), nullable=False)
    photo_url = Column(String(1024), nullable=True)
    updated_at = Column(DateTime(timezone=True), nullable=False, default=utcnow, onupdate=utcnow)

    def __repr__(self) -> str:
        return f"<ProfessionalProfile {self.display_name}>"

    def to_dict(self) -> Dict[str, Any]:
        return {"id": self.id, "display_name": self.display_name, "photo_url": self.photo_url}
