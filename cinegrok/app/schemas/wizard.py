"""
Profile builder (wizard) request schemas
"""
from typing import Any, Literal

from pydantic import BaseModel, Field


class DraftUpdate(BaseModel):
    """Fields for the current step, camelCase as in ProfileData."""
    fields: dict[str, Any] = Field(default_factory=dict)


class RoleToggleRequest(BaseModel):
    role: str
    kind: Literal["primary", "secondary"]


class CustomRoleRequest(BaseModel):
    value: str
    kind: Literal["primary", "secondary"] = "secondary"


class FilmUpdate(BaseModel):
    fields: dict[str, Any] = Field(default_factory=dict)


class AchievementUpdate(BaseModel):
    field: str
    value: Any = None
