"""
Analytics tracking schemas
"""
from typing import Optional

from pydantic import BaseModel


class TrackEvent(BaseModel):
    """Fields are checked by the endpoint so bad input is a 400, like the rest of the tracker."""
    type: Optional[str] = None
    filmmakerId: Optional[str] = None
    clickType: Optional[str] = None
    targetId: Optional[str] = None
