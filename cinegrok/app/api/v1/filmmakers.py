"""
Filmmaker endpoints - browse listing, detail, search, legacy ingestion, AI bio, export
"""
from typing import Any, Optional

from fastapi import APIRouter, Body, Depends, Header, HTTPException, Query, Request, status
from fastapi.concurrency import run_in_threadpool
from fastapi.responses import HTMLResponse, Response
from pydantic import ValidationError
from sqlalchemy.orm import Session

from cinegrok.app.core.config import settings
from cinegrok.app.core.dependencies import get_current_user, get_db
from cinegrok.app.core.logging_config import get_logger
from cinegrok.app.models.filmmaker import Filmmaker
from cinegrok.app.models.user import User
from cinegrok.app.schemas.filmmaker import (
    FilmmakerListResponse,
    IngestResponse,
    ProcessAIRequest,
    ProcessAIResponse,
)
from cinegrok.app.schemas.profile import LegacyIngestRow
from cinegrok.app.services import bio_service, export_service
from cinegrok.app.services.filmmaker_service import (
    get_filmmaker,
    get_filmmakers_with_filters,
    is_uuid,
    rank_by_vector,
    search_filmmakers,
    serialize_card,
    serialize_detail,
    total_pages,
)
from cinegrok.app.services.profile_service import ProfileService, profile_for
from cinegrok.app.utils import cache

logger = get_logger("api.filmmakers")

router = APIRouter()

LIST_CACHE_PREFIX = "filmmakers_list:"
PROFILE_CACHE_PREFIX = "filmmaker_profile:"


async def invalidate_filmmaker_cache(filmmaker_id: Optional[str] = None) -> None:
    await cache.delete_prefix(LIST_CACHE_PREFIX)
    if filmmaker_id:
        await cache.delete(f"{PROFILE_CACHE_PREFIX}{filmmaker_id}")


def build_listing(
    db: Session,
    page: int,
    limit: int,
    search: Optional[str],
    role: Optional[str],
    state: Optional[str],
    genre: Optional[str],
    collab: bool,
) -> dict:
    limit = max(1, min(limit, settings.browse_max_limit))
    page = max(1, page)
    rows, count = get_filmmakers_with_filters(
        db, page=page, limit=limit, search=search, role=role, state=state, genre=genre, collab=collab
    )
    pages = total_pages(count, limit)
    return {
        "data": [serialize_card(row) for row in rows],
        "count": count,
        "page": page,
        "limit": limit,
        "total_pages": pages,
        "has_previous": page > 1,
        "has_next": page < pages,
    }


@router.get("/filmmakers", response_model=FilmmakerListResponse)
async def list_filmmakers(
    request: Request,
    page: int = Query(1, ge=1),
    limit: int = Query(settings.browse_default_limit, ge=1),
    search: Optional[str] = None,
    role: Optional[str] = None,
    state: Optional[str] = None,
    genre: Optional[str] = None,
    collab: bool = False,
    db: Session = Depends(get_db),
):
    """Published filmmakers, newest first. `count` is the total match count, not the page size."""
    cache_key = f"{LIST_CACHE_PREFIX}{request.url.query}"
    try:
        cached = await cache.get(cache_key)
        if cached is not None:
            return cached
    except Exception:
        pass

    try:
        result = build_listing(db, page, limit, search, role, state, genre, collab)
    except Exception as e:
        logger.exception("Filmmaker listing failed: %s", e)
        raise HTTPException(status_code=500, detail="Failed to fetch filmmakers")

    try:
        await cache.set(cache_key, result, ttl=settings.filmmaker_list_cache_ttl)
    except Exception:
        pass
    return result


@router.get("/filmmakers/{filmmaker_id}")
async def get_filmmaker_detail(filmmaker_id: str, db: Session = Depends(get_db)):
    if not is_uuid(filmmaker_id):
        raise HTTPException(status_code=400, detail="Invalid filmmaker id")
    cache_key = f"{PROFILE_CACHE_PREFIX}{filmmaker_id}"
    try:
        cached = await cache.get(cache_key)
        if cached is not None:
            return cached
    except Exception:
        pass

    filmmaker = get_filmmaker(db, filmmaker_id)
    if not filmmaker:
        raise HTTPException(status_code=404, detail="Filmmaker not found")
    result = serialize_detail(filmmaker)
    try:
        await cache.set(cache_key, result, ttl=settings.filmmaker_profile_cache_ttl)
    except Exception:
        pass
    return result


@router.get("/search")
def search(
    q: str = "",
    vector: bool = False,
    db: Session = Depends(get_db),
):
    """Name search; vector=true ranks by style similarity when an embedding is available."""
    q = q.strip()
    if len(q) < 2:
        return []
    rows = []
    if vector:
        embedding = bio_service.embed_text(q)
        if embedding:
            rows = rank_by_vector(db, embedding)
        else:
            logger.info("Vector search unavailable, using text search q=%s", q)
    if not rows:
        rows = search_filmmakers(db, q)
    return [serialize_card(row) for row in rows]


@router.post("/ingest", response_model=IngestResponse, status_code=status.HTTP_201_CREATED)
async def ingest(
    body: dict[str, Any] = Body(...),
    x_ingest_key: Optional[str] = Header(None),
    db: Session = Depends(get_db),
):
    """Legacy bulk-ingestion row: `name` required, everything else kept as the raw form blob."""
    if settings.ingest_api_key and x_ingest_key != settings.ingest_api_key:
        logger.warning("Ingest rejected: bad or missing ingest key")
        raise HTTPException(status_code=401, detail="Invalid ingest key")
    try:
        row = LegacyIngestRow.model_validate({k: v for k, v in body.items() if k != "source"})
    except ValidationError:
        raise HTTPException(status_code=400, detail="Name is required")
    if not row.name:
        raise HTTPException(status_code=400, detail="Name is required")

    try:
        filmmaker = ProfileService.ingest_legacy(db, row)
    except Exception as e:
        logger.exception("Ingest failed: %s", e)
        raise HTTPException(status_code=500, detail="Internal Server Error")
    await invalidate_filmmaker_cache()
    return IngestResponse(message="Data ingested successfully", id=filmmaker.id)


def _generate_and_store_bio(db: Session, filmmaker: Filmmaker) -> tuple[str, str]:
    """Blocking part of process-ai: LLM bio, style embedding and the commit."""
    bio, source = bio_service.generate_bio(profile_for(filmmaker))
    filmmaker.generated_bio = bio
    embedding = bio_service.embed_text(bio)
    if embedding:
        filmmaker.style_vector = embedding
    db.commit()
    return bio, source


@router.post("/process-ai", response_model=ProcessAIResponse)
async def process_ai(payload: ProcessAIRequest, db: Session = Depends(get_db)):
    """Generate the bio (and style vector when possible) for one filmmaker."""
    if not payload.id:
        raise HTTPException(status_code=400, detail="ID is required")
    filmmaker = get_filmmaker(db, payload.id, published_only=False) if is_uuid(payload.id) else None
    if not filmmaker:
        raise HTTPException(status_code=404, detail="Filmmaker not found")

    try:
        bio, source = await run_in_threadpool(_generate_and_store_bio, db, filmmaker)
    except Exception as e:
        db.rollback()
        logger.exception("AI processing failed filmmaker_id=%s: %s", payload.id, e)
        raise HTTPException(status_code=500, detail="AI processing failed")

    logger.info("Bio generated filmmaker_id=%s source=%s", filmmaker.id, source)
    await invalidate_filmmaker_cache(filmmaker.id)
    return ProcessAIResponse(success=True, bio=bio, source=source)


@router.get("/filmmakers/{filmmaker_id}/export")
def export_filmmaker(
    filmmaker_id: str,
    format: str = Query("html"),
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    """Download a profile as standalone HTML or PDF."""
    if format not in export_service.EXPORT_FORMATS:
        raise HTTPException(status_code=400, detail="format must be html or pdf")
    if not is_uuid(filmmaker_id):
        raise HTTPException(status_code=400, detail="Invalid filmmaker id")
    filmmaker = get_filmmaker(db, filmmaker_id)
    if not filmmaker:
        raise HTTPException(status_code=404, detail="Filmmaker not found")

    profile = profile_for(filmmaker)
    try:
        if format == "pdf":
            content = export_service.export_pdf(profile, filmmaker.id)
            media_type = "application/pdf"
        else:
            content = export_service.export_html(profile, filmmaker.id)
            media_type = "text/html"
    except Exception as e:
        logger.exception("Export failed filmmaker_id=%s format=%s: %s", filmmaker_id, format, e)
        raise HTTPException(status_code=500, detail="Export failed")

    filename = export_service.export_filename(profile, format)
    logger.info("Profile exported filmmaker_id=%s format=%s user_id=%s", filmmaker_id, format, current_user.id)
    headers = {"Content-Disposition": f'attachment; filename="{filename}"'}
    if format == "html":
        return HTMLResponse(content=content, headers=headers)
    return Response(content=content, media_type=media_type, headers=headers)
