"""
InterestedProfile - a viewer's collaboration interest in a filmmaker
"""
from datetime import datetime

from sqlalchemy import Column, DateTime, ForeignKey, Integer, String, Text, UniqueConstraint
from sqlalchemy.orm import relationship

from cinegrok.app.db.base import Base


class InterestedProfile(Base):
    __tablename__ = "interested_profiles"
    __table_args__ = (
        UniqueConstraint("inquirer_id", "target_profile_id", name="uq_interest_inquirer_target"),
    )

    id = Column(Integer, primary_key=True, index=True)
    inquirer_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    target_profile_id = Column(String(36), ForeignKey("filmmakers.id", ondelete="CASCADE"), nullable=False, index=True)

    status = Column(String(20), default="interested")  # interested, shortlisted, contacted, archived
    private_notes = Column(Text, nullable=True)

    created_at = Column(DateTime, default=datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    filmmaker = relationship("Filmmaker")
