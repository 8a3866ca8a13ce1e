"""
Collaboration interest endpoints - mark filmmakers of interest, then track status and notes
"""
from typing import Optional

from fastapi import APIRouter, Body, Depends, HTTPException, Query, status
from sqlalchemy.orm import Session

from cinegrok.app.core.config import INTEREST_STATUSES
from cinegrok.app.core.dependencies import get_current_user, get_db
from cinegrok.app.core.logging_config import get_logger
from cinegrok.app.models.user import User
from cinegrok.app.schemas.interest import InterestRequest, InterestUpdate
from cinegrok.app.services.filmmaker_service import get_filmmaker, is_uuid
from cinegrok.app.services.interest_service import InterestService, serialize_interest

logger = get_logger("api.interests")

# /api/interested-profiles
router = APIRouter()
# /api/v1/collaboration-interests
collaboration_router = APIRouter()


def _require_filmmaker_id(filmmaker_id: Optional[str]) -> str:
    filmmaker_id = (filmmaker_id or "").strip()
    if not filmmaker_id:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Filmmaker ID is required")
    return filmmaker_id


@router.get("")
def get_interested_profiles(
    filmmakerId: Optional[str] = Query(None),
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    """With filmmakerId: {isInterested}. Without: every profile this user marked."""
    if filmmakerId:
        return {"isInterested": InterestService.is_interested(db, current_user.id, filmmakerId)}
    interests = InterestService.list_interests(db, current_user.id)
    return {"profiles": [serialize_interest(i) for i in interests]}


@router.post("", status_code=status.HTTP_200_OK)
def express_interest(
    payload: InterestRequest,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    filmmaker_id = _require_filmmaker_id(payload.filmmakerId)
    if not is_uuid(filmmaker_id) or not get_filmmaker(db, filmmaker_id):
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Filmmaker not found")
    try:
        interest = InterestService.express_interest(db, current_user.id, filmmaker_id)
    except Exception as e:
        logger.exception("Express interest failed user_id=%s filmmaker_id=%s: %s", current_user.id, filmmaker_id, e)
        raise HTTPException(status_code=500, detail="Failed to save interest")
    return {"success": True, "interest": serialize_interest(interest)}


@router.delete("")
def remove_interest(
    payload: Optional[InterestRequest] = Body(None),
    filmmakerId: Optional[str] = Query(None),
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    """filmmakerId in the JSON body (query string also accepted). Removing twice is fine."""
    filmmaker_id = _require_filmmaker_id((payload.filmmakerId if payload else None) or filmmakerId)
    removed = InterestService.remove_interest(db, current_user.id, filmmaker_id)
    return {"success": True, "removed": removed}


@collaboration_router.get("")
def list_collaboration_interests(
    status_filter: str = Query("all", alias="status"),
    role: Optional[str] = None,
    location: Optional[str] = None,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    if status_filter != "all" and status_filter not in INTEREST_STATUSES:
        raise HTTPException(status_code=400, detail="Invalid status value")
    interests = InterestService.list_interests(db, current_user.id, status_filter, role, location)
    return {
        "interests": [serialize_interest(i) for i in interests],
        "count": len(interests),
        "filters": {"status": status_filter, "role": role or "", "location": location or ""},
    }


@collaboration_router.patch("")
def update_collaboration_interest(
    payload: InterestUpdate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    """Status and notes update independently; omitted fields are left as they are."""
    filmmaker_id = _require_filmmaker_id(payload.filmmakerId)
    if payload.status is None and payload.notes is None:
        raise HTTPException(status_code=400, detail="Nothing to update")
    try:
        interest = InterestService.update_interest(
            db, current_user.id, filmmaker_id, status=payload.status, notes=payload.notes
        )
    except ValueError as e:
        logger.warning("Interest update rejected user_id=%s status=%s", current_user.id, payload.status)
        raise HTTPException(status_code=400, detail=str(e))
    if not interest:
        raise HTTPException(status_code=404, detail="Interest not found")
    return {"success": True, "interest": serialize_interest(interest)}
