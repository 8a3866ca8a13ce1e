"""
Profile service - wizard drafts, publishing and legacy ingestion of filmmaker profiles
"""
from datetime import datetime
from typing import Optional

from sqlalchemy.orm import Session

from cinegrok.app.core.logging_config import get_logger
from cinegrok.app.models.filmmaker import Filmmaker
from cinegrok.app.models.profile_draft import ProfileDraft
from cinegrok.app.models.user import User
from cinegrok.app.schemas.profile import LegacyIngestRow, ProfileData, WizardIntake
from cinegrok.app.services.field_reconciliation import flatten_for_search, normalize_intake, parse_intake
from cinegrok.app.services.wizard import ProfileWizard

logger = get_logger("services.profile")


def intake_for(filmmaker: Filmmaker) -> WizardIntake | LegacyIngestRow:
    """
    Tagged intake for a stored row: rows owned by a user were published from the
    wizard, ownerless rows came in through legacy ingestion.
    """
    raw = dict(filmmaker.raw_form_data or {})
    raw.pop("source", None)
    if filmmaker.generated_bio:
        raw["aiBio"] = filmmaker.generated_bio
    if filmmaker.user_id is not None:
        raw.setdefault("name", filmmaker.name)
        return parse_intake({"source": "wizard", "data": raw})
    return parse_intake({**raw, "source": "legacy", "name": raw.get("name") or filmmaker.name or ""})


def profile_for(filmmaker: Filmmaker) -> ProfileData:
    """Canonical profile for a stored filmmaker row, whichever convention wrote it."""
    return normalize_intake(intake_for(filmmaker))


def apply_flattened(filmmaker: Filmmaker, profile: ProfileData) -> None:
    for key, value in flatten_for_search(profile).items():
        setattr(filmmaker, key, value)


class ProfileService:
    @staticmethod
    def get_filmmaker_for_user(db: Session, user: User) -> Optional[Filmmaker]:
        return db.query(Filmmaker).filter(Filmmaker.user_id == user.id).first()

    @staticmethod
    def get_or_create_draft(db: Session, user: User) -> ProfileDraft:
        """Get the user's draft or create one. A published profile seeds a fresh draft for editing."""
        draft = db.query(ProfileDraft).filter(ProfileDraft.user_id == user.id).first()
        if draft:
            return draft
        seed: dict = {"email": user.email}
        filmmaker = ProfileService.get_filmmaker_for_user(db, user)
        if filmmaker:
            seed = profile_for(filmmaker).model_dump(mode="json")
        draft = ProfileDraft(user_id=user.id, draft_data=seed, current_step=1, custom_roles=[])
        db.add(draft)
        db.commit()
        db.refresh(draft)
        return draft

    @staticmethod
    def load_wizard(draft: ProfileDraft) -> ProfileWizard:
        return ProfileWizard.from_draft(draft.draft_data, draft.current_step or 1, draft.custom_roles)

    @staticmethod
    def save_wizard(db: Session, draft: ProfileDraft, wizard: ProfileWizard) -> ProfileDraft:
        state = wizard.to_draft()
        draft.draft_data = state["draft_data"]
        draft.current_step = state["current_step"]
        draft.custom_roles = state["custom_roles"]
        draft.last_saved_at = datetime.utcnow()
        db.commit()
        db.refresh(draft)
        return draft

    @staticmethod
    def publish(db: Session, user: User, draft: ProfileDraft, wizard: ProfileWizard) -> Filmmaker:
        """Write the wizard's profile as the user's published filmmaker row in one commit."""
        now = datetime.utcnow()
        profile = wizard.profile.model_copy(update={"isComplete": True, "lastUpdated": now})
        filmmaker = ProfileService.get_filmmaker_for_user(db, user)
        if not filmmaker:
            filmmaker = Filmmaker(user_id=user.id)
            db.add(filmmaker)
        filmmaker.raw_form_data = profile.model_dump(mode="json")
        filmmaker.status = "published"
        filmmaker.published_at = filmmaker.published_at or now
        apply_flattened(filmmaker, profile)

        wizard.profile = profile
        state = wizard.to_draft()
        draft.draft_data = state["draft_data"]
        draft.current_step = state["current_step"]
        draft.custom_roles = state["custom_roles"]
        draft.is_complete = True
        db.commit()
        db.refresh(filmmaker)
        logger.info("Profile published user_id=%s filmmaker_id=%s", user.id, filmmaker.id)
        return filmmaker

    @staticmethod
    def ingest_legacy(db: Session, row: LegacyIngestRow) -> Filmmaker:
        """Store a legacy bulk-ingestion row as a published filmmaker (raw blob kept as received)."""
        profile = normalize_intake(row)
        filmmaker = Filmmaker(
            profile_url=row.profile_url or None,
            raw_form_data=row.raw_form_data(),
            status="published",
            published_at=datetime.utcnow(),
        )
        apply_flattened(filmmaker, profile)
        db.add(filmmaker)
        db.commit()
        db.refresh(filmmaker)
        logger.info("Legacy row ingested filmmaker_id=%s name=%s", filmmaker.id, filmmaker.name)
        return filmmaker
