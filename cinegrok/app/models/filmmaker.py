"""
Filmmaker database model - published profile blob plus flattened search columns
"""
import uuid
from datetime import datetime

from sqlalchemy import JSON, Boolean, Column, DateTime, ForeignKey, Integer, String, Text

from cinegrok.app.db.base import Base


def _new_id() -> str:
    return str(uuid.uuid4())


class Filmmaker(Base):
    __tablename__ = "filmmakers"

    id = Column(String(36), primary_key=True, default=_new_id)
    # Null for rows that came in through legacy bulk ingestion
    user_id = Column(Integer, ForeignKey("users.id", ondelete="SET NULL"), unique=True, nullable=True, index=True)

    name = Column(String(255), nullable=False, default="")
    profile_url = Column(String(1024), nullable=True)
    raw_form_data = Column(JSON, default=dict)
    generated_bio = Column(Text, nullable=True)
    style_vector = Column(JSON, nullable=True)

    status = Column(String(20), default="draft", index=True)  # draft | published
    published_at = Column(DateTime, nullable=True)

    # Flattened copies of raw_form_data, recomputed on every write
    current_city = Column(String(255), default="")
    current_state = Column(String(255), default="")
    roles_text = Column(String(512), default="")
    genres_text = Column(String(512), default="")
    open_to_collab = Column(Boolean, default=False, index=True)

    profile_views = Column(Integer, default=0)
    profile_clicks = Column(Integer, default=0)

    created_at = Column(DateTime, default=datetime.utcnow, index=True)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)
