"""
ProfileEvent - profile views and outbound clicks
"""
from datetime import datetime

from sqlalchemy import Column, DateTime, ForeignKey, Integer, String

from cinegrok.app.db.base import Base


class ProfileEvent(Base):
    __tablename__ = "profile_events"

    id = Column(Integer, primary_key=True, index=True)
    filmmaker_id = Column(String(36), ForeignKey("filmmakers.id", ondelete="CASCADE"), nullable=False, index=True)

    # event_type: view | click
    event_type = Column(String(10), nullable=False)
    # click_type: film, watch, trailer, social (clicks only)
    click_type = Column(String(20), nullable=True)
    # target_id: film id or social platform name
    target_id = Column(String(255), nullable=True)
    # referrer: direct, instagram, youtube, twitter, other (views only)
    referrer = Column(String(20), nullable=True)
    # device: mobile, desktop, tablet (views only)
    device = Column(String(20), nullable=True)

    created_at = Column(DateTime, default=datetime.utcnow, index=True)
