"""
ProfileDraft - persisted wizard state (one draft per user)
"""
from datetime import datetime

from sqlalchemy import JSON, Boolean, Column, DateTime, ForeignKey, Integer

from cinegrok.app.db.base import Base


class ProfileDraft(Base):
    __tablename__ = "profile_drafts"

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), unique=True, nullable=False, index=True)

    draft_data = Column(JSON, default=dict)
    current_step = Column(Integer, default=1)
    # Custom roles typed during the session, kept so they stay selectable
    custom_roles = Column(JSON, default=list)
    is_complete = Column(Boolean, default=False)

    last_saved_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)
    created_at = Column(DateTime, default=datetime.utcnow)
