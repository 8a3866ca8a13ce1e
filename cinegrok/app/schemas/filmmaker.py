"""
Filmmaker API schemas - browse listing, ingestion and AI processing
"""
from typing import Any, Optional

from pydantic import BaseModel


class FilmmakerListResponse(BaseModel):
    data: list[dict[str, Any]]
    count: int
    page: int
    limit: int
    total_pages: int
    has_previous: bool
    has_next: bool


class IngestResponse(BaseModel):
    message: str
    id: str


class ProcessAIRequest(BaseModel):
    id: Optional[str] = None


class ProcessAIResponse(BaseModel):
    success: bool
    bio: str
    source: str
