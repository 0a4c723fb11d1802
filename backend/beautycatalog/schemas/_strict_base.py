"""Strict schema baselines with forbidden extras by default."""

from pydantic import BaseModel, ConfigDict


class StrictModel(BaseModel):
    """Strict base for response DTOs built from service dicts or ORM rows."""

    model_config = ConfigDict(from_attributes=True, extra="forbid", validate_assignment=True)


class StrictRequestModel(BaseModel):
    """Request DTO base that rejects unexpected fields."""

    model_config = ConfigDict(extra="forbid", validate_assignment=True)
