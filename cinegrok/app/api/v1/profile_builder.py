"""
Profile builder endpoints - the six-step wizard over the user's persisted draft
"""
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query, status
from pydantic import ValidationError
from sqlalchemy.orm import Session

from cinegrok.app.api.v1.filmmakers import invalidate_filmmaker_cache
from cinegrok.app.core.config import (
    ACHIEVEMENT_RESULTS,
    AVAILABILITY_OPTIONS,
    AWARD_CATEGORIES,
    COLLABORATION_OPTIONS,
    CREW_SCALES,
    EVENT_CATEGORIES,
    FILM_FORMATS,
    GENRES,
    MAX_PRIMARY_ROLES,
    MAX_SECONDARY_ROLES,
    MAX_TOTAL_ROLES,
    PRODUCTION_STATUSES,
    STANDARD_ROLES,
    WIZARD_STEPS,
)
from cinegrok.app.core.dependencies import get_current_user, get_db
from cinegrok.app.core.logging_config import get_logger
from cinegrok.app.models.user import User
from cinegrok.app.schemas.wizard import (
    AchievementUpdate,
    CustomRoleRequest,
    DraftUpdate,
    FilmUpdate,
    RoleToggleRequest,
)
from cinegrok.app.services.profile_service import ProfileService
from cinegrok.app.services.wizard import ProfileWizard, parse_step

logger = get_logger("api.profile_builder")

router = APIRouter()


def _validation_errors(e: ValidationError) -> dict[str, str]:
    return {".".join(str(p) for p in err["loc"]) or "profile": err["msg"] for err in e.errors()}


def _unprocessable(errors: dict[str, str]) -> HTTPException:
    return HTTPException(status_code=status.HTTP_422_UNPROCESSABLE_ENTITY, detail={"errors": errors})


class _Session:
    """Loads the draft and wizard for one request; `save()` persists both."""

    def __init__(self, db: Session, user: User):
        self.db = db
        self.user = user
        self.draft = ProfileService.get_or_create_draft(db, user)
        self.wizard: ProfileWizard = ProfileService.load_wizard(self.draft)

    def save(self) -> ProfileWizard:
        ProfileService.save_wizard(self.db, self.draft, self.wizard)
        return self.wizard


def get_wizard_session(
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
) -> _Session:
    return _Session(db, current_user)


@router.get("/options")
def get_options():
    """Choice lists for the wizard's selects. No auth: the lists are static."""
    return {
        "steps": list(WIZARD_STEPS),
        "roles": STANDARD_ROLES,
        "roleLimits": {"primary": MAX_PRIMARY_ROLES, "secondary": MAX_SECONDARY_ROLES, "total": MAX_TOTAL_ROLES},
        "genres": GENRES,
        "formats": FILM_FORMATS,
        "statuses": PRODUCTION_STATUSES,
        "crewScales": CREW_SCALES,
        "collaboration": COLLABORATION_OPTIONS,
        "availability": AVAILABILITY_OPTIONS,
        "achievementTypes": list(ACHIEVEMENT_RESULTS),
        "eventCategories": EVENT_CATEGORIES,
        "awardCategories": AWARD_CATEGORIES,
    }


@router.get("")
def get_wizard(
    step: Optional[str] = Query(None),
    session: _Session = Depends(get_wizard_session),
):
    """Wizard state. A `step` in the address wins over the stored step (clamped, non-numeric -> 1)."""
    if step is not None:
        session.wizard.set_step(parse_step(step))
        session.save()
    return session.wizard.state()


@router.put("/draft")
def update_draft(payload: DraftUpdate, session: _Session = Depends(get_wizard_session)):
    """Merge the current step's fields into the draft. Other steps' keys are ignored and reported."""
    try:
        result = session.wizard.update(payload.fields)
    except ValidationError as e:
        raise _unprocessable(_validation_errors(e))
    session.save()
    return {**session.wizard.state(), "applied": result.applied, "ignored": result.ignored}


@router.post("/next")
def next_step(session: _Session = Depends(get_wizard_session)):
    errors = session.wizard.next()
    if errors:
        raise _unprocessable(errors)
    session.save()
    return session.wizard.state()


@router.post("/back")
def previous_step(session: _Session = Depends(get_wizard_session)):
    session.wizard.back()
    session.save()
    return session.wizard.state()


@router.post("/goto/{step}")
def go_to_step(step: int, session: _Session = Depends(get_wizard_session)):
    """Step indicator click. Only earlier steps are reachable; anything else is a no-op."""
    moved = session.wizard.go_to(step)
    if moved:
        session.save()
    return {**session.wizard.state(), "moved": moved}


@router.post("/popstate")
def popstate(step: str = Query(""), session: _Session = Depends(get_wizard_session)):
    """Browser back/forward: sync to the address without pushing history."""
    session.wizard.on_popstate(f"?step={step}")
    session.save()
    return session.wizard.state()


@router.post("/roles/toggle")
def toggle_role(payload: RoleToggleRequest, session: _Session = Depends(get_wizard_session)):
    selection = session.wizard.toggle_role(payload.role, payload.kind)
    if selection.changed:
        session.save()
    return selection


@router.post("/roles/custom")
def add_custom_role(payload: CustomRoleRequest, session: _Session = Depends(get_wizard_session)):
    selection = session.wizard.add_custom_role(payload.value, payload.kind)
    session.save()
    return {**selection.model_dump(), "displayRoles": session.wizard.display_roles()}


@router.post("/films", status_code=status.HTTP_201_CREATED)
def add_film(payload: Optional[FilmUpdate] = None, session: _Session = Depends(get_wizard_session)):
    try:
        film = session.wizard.add_film(payload.fields if payload else None)
    except ValidationError as e:
        raise _unprocessable(_validation_errors(e))
    session.save()
    return film


@router.patch("/films/{film_id}")
def update_film(film_id: str, payload: FilmUpdate, session: _Session = Depends(get_wizard_session)):
    try:
        film = session.wizard.update_film(film_id, payload.fields)
    except ValidationError as e:
        raise _unprocessable(_validation_errors(e))
    if film is None:
        raise HTTPException(status_code=404, detail="Film not found")
    session.save()
    return film


@router.delete("/films/{film_id}")
def remove_film(film_id: str, session: _Session = Depends(get_wizard_session)):
    if not session.wizard.remove_film(film_id):
        raise HTTPException(status_code=404, detail="Film not found")
    session.save()
    return {"success": True}


@router.post("/films/{film_id}/achievements", status_code=status.HTTP_201_CREATED)
def add_achievement(film_id: str, session: _Session = Depends(get_wizard_session)):
    achievement = session.wizard.add_achievement(film_id)
    if achievement is None:
        raise HTTPException(status_code=404, detail="Film not found")
    session.save()
    return achievement


@router.patch("/films/{film_id}/achievements/{achievement_id}")
def update_achievement(
    film_id: str,
    achievement_id: str,
    payload: AchievementUpdate,
    session: _Session = Depends(get_wizard_session),
):
    """Edit one achievement field. Changing `type` re-derives `result`."""
    try:
        achievement = session.wizard.update_achievement(film_id, achievement_id, payload.field, payload.value)
    except ValidationError as e:
        raise _unprocessable(_validation_errors(e))
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    if achievement is None:
        raise HTTPException(status_code=404, detail="Achievement not found")
    session.save()
    return achievement


@router.delete("/films/{film_id}/achievements/{achievement_id}")
def remove_achievement(film_id: str, achievement_id: str, session: _Session = Depends(get_wizard_session)):
    if not session.wizard.remove_achievement(film_id, achievement_id):
        raise HTTPException(status_code=404, detail="Achievement not found")
    session.save()
    return {"success": True}


@router.post("/publish")
async def publish(session: _Session = Depends(get_wizard_session)):
    """Publish the draft as the user's filmmaker profile. 422 with the missing fields otherwise."""
    errors = session.wizard.publish_errors()
    if errors:
        logger.info("Publish blocked user_id=%s fields=%s", session.user.id, sorted(errors))
        raise _unprocessable(errors)
    try:
        filmmaker = ProfileService.publish(session.db, session.user, session.draft, session.wizard)
    except Exception as e:
        session.db.rollback()
        logger.exception("Publish failed user_id=%s: %s", session.user.id, e)
        raise HTTPException(status_code=500, detail="Failed to publish profile")

    try:
        await invalidate_filmmaker_cache(filmmaker.id)
    except Exception as e:
        logger.warning("Cache invalidation failed after publish filmmaker_id=%s: %s", filmmaker.id, e)
    return {"success": True, "id": filmmaker.id, "profileUrl": f"/filmmakers/{filmmaker.id}"}
