"""
Collaboration interest tracker - (viewer, filmmaker) -> status + private notes
"""
from datetime import datetime
from typing import Optional

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session, joinedload

from cinegrok.app.core.config import INTEREST_STATUSES
from cinegrok.app.core.logging_config import get_logger
from cinegrok.app.models.filmmaker import Filmmaker
from cinegrok.app.models.interested_profile import InterestedProfile
from cinegrok.app.services.filmmaker_service import serialize_card

logger = get_logger("services.interest")


def _find(db: Session, user_id: int, filmmaker_id: str) -> Optional[InterestedProfile]:
    return (
        db.query(InterestedProfile)
        .filter(
            InterestedProfile.inquirer_id == user_id,
            InterestedProfile.target_profile_id == filmmaker_id,
        )
        .first()
    )


def serialize_interest(interest: InterestedProfile) -> dict:
    filmmaker = interest.filmmaker
    return {
        "id": interest.id,
        "filmmakerId": interest.target_profile_id,
        "filmmaker": serialize_card(filmmaker) if filmmaker else None,
        "status": interest.status or "interested",
        "privateNotes": interest.private_notes,
        "addedAt": interest.created_at.isoformat() if interest.created_at else None,
        "updatedAt": (interest.updated_at or interest.created_at).isoformat() if interest.created_at else None,
        "isAvailable": bool(filmmaker and filmmaker.status == "published"),
    }


class InterestService:
    @staticmethod
    def express_interest(db: Session, user_id: int, filmmaker_id: str) -> InterestedProfile:
        """Upsert keyed by (user, filmmaker). Expressing interest twice keeps one row."""
        existing = _find(db, user_id, filmmaker_id)
        if existing:
            return existing
        interest = InterestedProfile(inquirer_id=user_id, target_profile_id=filmmaker_id, status="interested")
        db.add(interest)
        try:
            db.commit()
        except IntegrityError:
            # Concurrent insert of the same pair
            db.rollback()
            return _find(db, user_id, filmmaker_id)
        db.refresh(interest)
        logger.info("Interest expressed user_id=%s filmmaker_id=%s", user_id, filmmaker_id)
        return interest

    @staticmethod
    def remove_interest(db: Session, user_id: int, filmmaker_id: str) -> bool:
        deleted = (
            db.query(InterestedProfile)
            .filter(
                InterestedProfile.inquirer_id == user_id,
                InterestedProfile.target_profile_id == filmmaker_id,
            )
            .delete()
        )
        db.commit()
        if deleted:
            logger.info("Interest removed user_id=%s filmmaker_id=%s", user_id, filmmaker_id)
        return bool(deleted)

    @staticmethod
    def is_interested(db: Session, user_id: int, filmmaker_id: str) -> bool:
        return _find(db, user_id, filmmaker_id) is not None

    @staticmethod
    def list_interests(
        db: Session,
        user_id: int,
        status: Optional[str] = None,
        role: Optional[str] = None,
        location: Optional[str] = None,
    ) -> list[InterestedProfile]:
        """Newest first. status="all" (or empty) means every status."""
        query = (
            db.query(InterestedProfile)
            .join(Filmmaker, Filmmaker.id == InterestedProfile.target_profile_id)
            .options(joinedload(InterestedProfile.filmmaker))
            .filter(InterestedProfile.inquirer_id == user_id)
        )
        if status and status != "all":
            query = query.filter(InterestedProfile.status == status)
        if role and role.strip():
            query = query.filter(Filmmaker.roles_text.ilike(f"%{role.strip()}%"))
        if location and location.strip():
            query = query.filter(Filmmaker.current_state.ilike(f"%{location.strip()}%"))
        return query.order_by(InterestedProfile.created_at.desc(), InterestedProfile.id.desc()).all()

    @staticmethod
    def update_interest(
        db: Session,
        user_id: int,
        filmmaker_id: str,
        status: Optional[str] = None,
        notes: Optional[str] = None,
    ) -> Optional[InterestedProfile]:
        """Status and notes are independent partial updates. None leaves a field untouched."""
        if status is not None and status not in INTEREST_STATUSES:
            raise ValueError("Invalid status value")
        interest = _find(db, user_id, filmmaker_id)
        if not interest:
            return None
        if status is not None:
            interest.status = status
            logger.info("Interest status updated user_id=%s filmmaker_id=%s status=%s", user_id, filmmaker_id, status)
        if notes is not None:
            interest.private_notes = notes
            logger.info("Interest notes updated user_id=%s filmmaker_id=%s has_notes=%s", user_id, filmmaker_id, bool(notes))
        interest.updated_at = datetime.utcnow()
        db.commit()
        db.refresh(interest)
        return interest
