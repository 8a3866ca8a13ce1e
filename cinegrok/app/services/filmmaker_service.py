"""
Filmmaker queries - browse filters, pagination, text and vector search.
Filtering happens in SQL on the flattened columns; nothing is filtered in Python.
"""
import math
import uuid
from typing import Optional

from sqlalchemy import or_
from sqlalchemy.orm import Session

from cinegrok.app.core.logging_config import get_logger
from cinegrok.app.models.filmmaker import Filmmaker
from cinegrok.app.services.field_reconciliation import (
    resolve_display_location,
    resolve_display_name,
    resolve_roles,
)
from cinegrok.app.services.profile_renderer import theme_for_roles
from cinegrok.app.services.profile_service import profile_for
from cinegrok.app.services.statistics import aggregate, aggregate_achievements

logger = get_logger("services.filmmaker")

MIN_SEARCH_LENGTH = 2
SEARCH_RESULT_LIMIT = 20


def is_uuid(value: str) -> bool:
    try:
        uuid.UUID(str(value))
        return True
    except (TypeError, ValueError):
        return False


def total_pages(count: int, limit: int) -> int:
    if limit <= 0:
        return 0
    return math.ceil(count / limit)


def _like(value: str) -> str:
    return f"%{value.strip()}%"


def get_filmmakers_with_filters(
    db: Session,
    page: int = 1,
    limit: int = 12,
    search: Optional[str] = None,
    role: Optional[str] = None,
    state: Optional[str] = None,
    genre: Optional[str] = None,
    collab: bool = False,
    has_contents: bool = False,
) -> tuple[list[Filmmaker], int]:
    """Published filmmakers matching the filters, newest first. Returns (page rows, total count)."""
    page = max(1, page)
    query = db.query(Filmmaker).filter(Filmmaker.status == "published")

    if search and search.strip():
        pattern = _like(search)
        query = query.filter(
            or_(
                Filmmaker.name.ilike(pattern),
                Filmmaker.generated_bio.ilike(pattern),
                Filmmaker.current_city.ilike(pattern),
            )
        )
    if role and role.strip():
        query = query.filter(Filmmaker.roles_text.ilike(_like(role)))
    if state and state.strip():
        query = query.filter(Filmmaker.current_state.ilike(_like(state)))
    if genre and genre.strip():
        query = query.filter(Filmmaker.genres_text.ilike(_like(genre)))
    if collab:
        query = query.filter(Filmmaker.open_to_collab.is_(True))
    if has_contents:
        query = query.filter(Filmmaker.generated_bio.isnot(None))

    count = query.count()
    rows = (
        query.order_by(Filmmaker.created_at.desc(), Filmmaker.id)
        .offset((page - 1) * limit)
        .limit(limit)
        .all()
    )
    return rows, count


def get_filmmaker(db: Session, filmmaker_id: str, published_only: bool = True) -> Optional[Filmmaker]:
    query = db.query(Filmmaker).filter(Filmmaker.id == filmmaker_id)
    if published_only:
        query = query.filter(Filmmaker.status == "published")
    return query.first()


def search_filmmakers(db: Session, q: str, limit: int = SEARCH_RESULT_LIMIT) -> list[Filmmaker]:
    """Case-insensitive name search. Queries shorter than 2 characters return nothing."""
    q = (q or "").strip()
    if len(q) < MIN_SEARCH_LENGTH:
        return []
    return (
        db.query(Filmmaker)
        .filter(Filmmaker.status == "published", Filmmaker.name.ilike(_like(q)))
        .order_by(Filmmaker.name)
        .limit(limit)
        .all()
    )


def cosine_similarity(a: list[float], b: list[float]) -> float:
    if not a or not b or len(a) != len(b):
        return 0.0
    dot = sum(x * y for x, y in zip(a, b))
    norm_a = math.sqrt(sum(x * x for x in a))
    norm_b = math.sqrt(sum(y * y for y in b))
    if not norm_a or not norm_b:
        return 0.0
    return dot / (norm_a * norm_b)


def rank_by_vector(
    db: Session, embedding: list[float], limit: int = SEARCH_RESULT_LIMIT
) -> list[Filmmaker]:
    """Published filmmakers with a style vector, most similar first."""
    rows = (
        db.query(Filmmaker)
        .filter(Filmmaker.status == "published", Filmmaker.style_vector.isnot(None))
        .all()
    )
    scored = [(cosine_similarity(embedding, row.style_vector or []), row) for row in rows]
    scored.sort(key=lambda pair: pair[0], reverse=True)
    return [row for score, row in scored[:limit] if score > 0]


def serialize_card(filmmaker: Filmmaker) -> dict:
    """Browse card / search result summary."""
    profile = profile_for(filmmaker)
    return {
        "id": filmmaker.id,
        "name": resolve_display_name(profile) or filmmaker.name,
        "profile_url": filmmaker.profile_url,
        "location": resolve_display_location(profile),
        "primaryRoles": resolve_roles(profile),
        "secondaryRoles": profile.secondaryRoles,
        "genres": profile.preferredGenres,
        "profilePhoto": profile.profilePhoto,
        "bio": filmmaker.generated_bio,
        "openToCollaborations": profile.openToCollaborations,
        "availability": profile.availability,
        "themeColor": theme_for_roles(profile.primaryRoles),
        "filmCount": len(profile.filmography),
        "created_at": filmmaker.created_at.isoformat() if filmmaker.created_at else None,
    }


def serialize_detail(filmmaker: Filmmaker) -> dict:
    profile = profile_for(filmmaker)
    return {
        "id": filmmaker.id,
        "name": resolve_display_name(profile) or filmmaker.name,
        "profile_url": filmmaker.profile_url,
        "status": filmmaker.status,
        "generated_bio": filmmaker.generated_bio,
        "location": resolve_display_location(profile),
        "profile": profile.model_dump(mode="json"),
        "stats": aggregate(profile.filmography).model_dump(),
        "achievements": aggregate_achievements(profile.filmography).model_dump(mode="json"),
        "profile_views": filmmaker.profile_views or 0,
        "created_at": filmmaker.created_at.isoformat() if filmmaker.created_at else None,
        "published_at": filmmaker.published_at.isoformat() if filmmaker.published_at else None,
    }
