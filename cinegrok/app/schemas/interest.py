"""
Collaboration interest schemas
"""
from typing import Optional

from pydantic import BaseModel


class InterestRequest(BaseModel):
    """Body for POST/DELETE /api/interested-profiles"""
    filmmakerId: Optional[str] = None


class InterestUpdate(BaseModel):
    """Body for PATCH /api/v1/collaboration-interests. Omitted fields stay unchanged."""
    filmmakerId: Optional[str] = None
    status: Optional[str] = None
    notes: Optional[str] = None
