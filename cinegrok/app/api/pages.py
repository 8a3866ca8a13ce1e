"""
Server-rendered HTML pages - browse grid and the dual-mode filmmaker profile
"""
from typing import Optional
from urllib.parse import urlencode

from fastapi import APIRouter, Depends, Query, Request
from fastapi.responses import HTMLResponse
from sqlalchemy.orm import Session

from cinegrok.app.api.v1.analytics import is_bot
from cinegrok.app.api.v1.filmmakers import build_listing
from cinegrok.app.core.config import GENRES, STANDARD_ROLES, settings
from cinegrok.app.core.dependencies import get_db, get_optional_user
from cinegrok.app.core.logging_config import get_logger
from cinegrok.app.models.user import User
from cinegrok.app.services.analytics_service import AnalyticsService, parse_device, parse_referrer
from cinegrok.app.services.filmmaker_service import get_filmmaker, is_uuid
from cinegrok.app.services.interest_service import InterestService
from cinegrok.app.services.profile_renderer import (
    build_audience_view,
    build_producer_view,
    profile_path,
    resolve_view_mode,
)
from cinegrok.app.services.profile_service import profile_for
from cinegrok.app.utils.templates import render_template

logger = get_logger("api.pages")

router = APIRouter(include_in_schema=False)


def browse_link(filters: dict, page: int) -> str:
    """Browse URL for another page with the current filters kept."""
    params = {key: value for key, value in filters.items() if value}
    params["page"] = page
    return "/browse?" + urlencode(params)


def _not_found(user: Optional[User]) -> HTMLResponse:
    return HTMLResponse(render_template("not_found.html", user=user), status_code=404)


@router.get("/browse", response_class=HTMLResponse)
def browse_page(
    page: int = Query(1, ge=1),
    search: Optional[str] = None,
    role: Optional[str] = None,
    state: Optional[str] = None,
    genre: Optional[str] = None,
    collab: bool = False,
    db: Session = Depends(get_db),
    user: Optional[User] = Depends(get_optional_user),
):
    filters = {
        "search": (search or "").strip(),
        "role": (role or "").strip(),
        "state": (state or "").strip(),
        "genre": (genre or "").strip(),
        "collab": "true" if collab else "",
    }
    listing = build_listing(
        db, page, settings.browse_default_limit,
        filters["search"], filters["role"], filters["state"], filters["genre"], collab,
    )
    return render_template(
        "browse.html",
        user=user,
        listing=listing,
        filters=filters,
        roles=STANDARD_ROLES,
        genres=GENRES,
        previous_href=browse_link(filters, listing["page"] - 1) if listing["has_previous"] else None,
        next_href=browse_link(filters, listing["page"] + 1) if listing["has_next"] else None,
    )


@router.get("/filmmakers/{filmmaker_id}", response_class=HTMLResponse)
def profile_page(
    filmmaker_id: str,
    request: Request,
    view: Optional[str] = None,
    film: Optional[str] = None,
    db: Session = Depends(get_db),
    user: Optional[User] = Depends(get_optional_user),
):
    """Audience view by default; ?view=producer for logged-in viewers."""
    filmmaker = get_filmmaker(db, filmmaker_id) if is_uuid(filmmaker_id) else None
    if not filmmaker:
        return _not_found(user)

    profile = profile_for(filmmaker)
    decision = resolve_view_mode(view, user is not None)

    user_agent = request.headers.get("user-agent", "")
    if not is_bot(user_agent):
        try:
            AnalyticsService.track_view(
                db, filmmaker.id, parse_referrer(request.headers.get("referer")), parse_device(user_agent)
            )
        except Exception as e:
            db.rollback()
            logger.warning("View tracking failed filmmaker_id=%s: %s", filmmaker.id, e)

    context = {
        "user": user,
        "filmmaker_id": filmmaker.id,
        "decision": decision,
        "audience_href": profile_path(filmmaker.id),
        "producer_href": profile_path(filmmaker.id, view="producer"),
    }
    if decision.mode == "producer":
        context["view"] = build_producer_view(profile, filmmaker.id)
        context["is_interested"] = InterestService.is_interested(db, user.id, filmmaker.id)
        return render_template("profile_producer.html", **context)

    context["view"] = build_audience_view(profile, filmmaker.id, open_film_id=film)
    return render_template("profile_audience.html", **context)
