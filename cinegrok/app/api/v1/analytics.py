"""
Analytics endpoints - view/click tracking, tracked outbound redirects and owner stats
"""
from typing import Optional

from fastapi import APIRouter, BackgroundTasks, Depends, HTTPException, Query, Request
from fastapi.responses import JSONResponse, RedirectResponse
from sqlalchemy.orm import Session

from cinegrok.app.core.config import BOT_USER_AGENT_PATTERN, CLICK_TYPES, settings
from cinegrok.app.core.dependencies import get_current_user, get_db
from cinegrok.app.core.logging_config import get_logger
from cinegrok.app.db import session as db_session
from cinegrok.app.models.user import User
from cinegrok.app.schemas.analytics import TrackEvent
from cinegrok.app.services.analytics_service import (
    AnalyticsService,
    calculate_profile_completeness,
    get_improvement_tips,
    parse_device,
    parse_referrer,
)
from cinegrok.app.services.filmmaker_service import get_filmmaker, is_uuid
from cinegrok.app.services.profile_renderer import outbound_urls
from cinegrok.app.services.profile_service import ProfileService, profile_for
from cinegrok.app.services.statistics import aggregate, aggregate_achievements
from cinegrok.app.utils import cache
from cinegrok.app.utils.rate_limit import SlidingWindowLimiter

logger = get_logger("api.analytics")

router = APIRouter()

limiter = SlidingWindowLimiter(
    settings.analytics_rate_limit_requests, settings.analytics_rate_limit_window
)


def client_ip(request: Request) -> str:
    forwarded = request.headers.get("x-forwarded-for", "")
    ip = forwarded.split(",")[0].strip() or request.headers.get("x-real-ip", "")
    if not ip and request.client:
        ip = request.client.host
    return ip or "unknown"


def is_bot(user_agent: Optional[str]) -> bool:
    return bool(user_agent and BOT_USER_AGENT_PATTERN.search(user_agent))


def _not_tracked(status_code: int, error: str) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"error": error, "tracked": False})


def record_click(filmmaker_id: str, click_type: str, target_id: str) -> None:
    """Best-effort click write on its own session; failures are logged, never raised or retried."""
    db = db_session.SessionLocal()
    try:
        AnalyticsService.track_click(db, filmmaker_id, click_type, target_id)
    except Exception as e:
        db.rollback()
        logger.warning("Click tracking failed filmmaker_id=%s click_type=%s: %s", filmmaker_id, click_type, e)
    finally:
        db.close()


@router.post("/track")
def track(payload: TrackEvent, request: Request, db: Session = Depends(get_db)):
    """
    Record a profile view or click.

    - **type**: "view" or "click"
    - **filmmakerId**: profile being viewed
    - **clickType**: film | watch | trailer | social (clicks only)
    - **targetId**: film id or platform (clicks only)
    """
    ip = client_ip(request)
    if not limiter.check(f"analytics:{ip}").allowed:
        logger.warning("Analytics rate limit exceeded ip=%s", ip)
        return _not_tracked(429, "Rate limited")

    user_agent = request.headers.get("user-agent", "")
    if is_bot(user_agent):
        logger.info("Analytics bot request filtered user_agent=%s", user_agent[:50])
        return {"tracked": False, "reason": "bot"}

    if not payload.filmmakerId or not payload.type:
        return _not_tracked(400, "Missing required fields: type, filmmakerId")
    if payload.type not in ("view", "click"):
        return _not_tracked(400, 'Invalid type. Must be "view" or "click"')
    if payload.type == "click" and not payload.clickType:
        return _not_tracked(400, "Missing clickType for click event")
    if payload.type == "click" and payload.clickType not in CLICK_TYPES:
        return _not_tracked(400, f"Invalid clickType. Must be one of {', '.join(CLICK_TYPES)}")
    if not is_uuid(payload.filmmakerId) or not get_filmmaker(db, payload.filmmakerId):
        return _not_tracked(404, "Filmmaker not found")

    try:
        if payload.type == "view":
            referrer = parse_referrer(request.headers.get("referer"))
            device = parse_device(user_agent)
            AnalyticsService.track_view(db, payload.filmmakerId, referrer, device)
            logger.info(
                "Profile view tracked filmmaker_id=%s referrer=%s device=%s",
                payload.filmmakerId, referrer, device,
            )
        else:
            AnalyticsService.track_click(db, payload.filmmakerId, payload.clickType, payload.targetId or "")
            logger.info(
                "Click tracked filmmaker_id=%s click_type=%s target_id=%s",
                payload.filmmakerId, payload.clickType, payload.targetId,
            )
    except Exception as e:
        db.rollback()
        logger.exception("Failed to track analytics: %s", e)
        return _not_tracked(500, "Internal server error")
    return {"tracked": True}


@router.get("/out")
def tracked_redirect(
    background_tasks: BackgroundTasks,
    request: Request,
    filmmaker_id: str = Query(...),
    click_type: str = Query(...),
    target_id: str = Query(""),
    url: str = Query(...),
    db: Session = Depends(get_db),
):
    """Outbound link from a profile page: redirect now, record the click after the response."""
    if click_type not in CLICK_TYPES:
        raise HTTPException(status_code=400, detail="Invalid click type")
    filmmaker = get_filmmaker(db, filmmaker_id) if is_uuid(filmmaker_id) else None
    if not filmmaker:
        raise HTTPException(status_code=404, detail="Filmmaker not found")
    if url not in outbound_urls(profile_for(filmmaker), filmmaker.id):
        logger.warning("Outbound link rejected filmmaker_id=%s url=%s", filmmaker_id, url)
        raise HTTPException(status_code=400, detail="Link does not belong to this profile")

    if not is_bot(request.headers.get("user-agent")):
        background_tasks.add_task(record_click, filmmaker.id, click_type, target_id)
    return RedirectResponse(url=url, status_code=302)


@router.get("/stats")
async def get_stats(
    days: int = Query(30, ge=1, le=365),
    trend: bool = False,
    clicks: bool = False,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    """Analytics for the caller's own filmmaker profile, cached briefly per query."""
    filmmaker = ProfileService.get_filmmaker_for_user(db, current_user)
    if not filmmaker:
        raise HTTPException(status_code=404, detail="No filmmaker profile found")

    cache_key = f"analytics_stats:{filmmaker.id}:{days}:{int(trend)}:{int(clicks)}"
    try:
        cached = await cache.get(cache_key)
        if cached is not None:
            return cached
    except Exception:
        pass

    try:
        profile = profile_for(filmmaker)
        result = AnalyticsService.get_stats(db, filmmaker, days=days)
        if trend:
            result["dailyTrend"] = AnalyticsService.get_daily_trend(db, filmmaker.id, days)
        if clicks:
            result["clickBreakdown"] = AnalyticsService.get_click_breakdown(db, filmmaker.id, days)
        result["profileCompleteness"] = calculate_profile_completeness(profile)
        result["improvementTips"] = get_improvement_tips(profile)
        result["filmography"] = aggregate(profile.filmography).model_dump()
        achievements = aggregate_achievements(profile.filmography)
        result["achievements"] = achievements.model_dump(exclude={"flat_list"})
    except Exception as e:
        logger.exception("Analytics stats failed filmmaker_id=%s: %s", filmmaker.id, e)
        raise HTTPException(status_code=500, detail="Failed to fetch analytics")

    try:
        await cache.set(cache_key, result, ttl=settings.analytics_stats_cache_ttl)
    except Exception:
        pass
    return result
