# backend/app/models/professional.py
"""
Professional profile model for the MindBridge platform.

Counselors, psychiatrists and management-team members all carry a
ProfessionalProfile. The is_available flag is the policy-level switch
for accepting new bookings; it is independent of per-slot availability.
"""

import logging

from sqlalchemy import Boolean, Column, DateTime, ForeignKey, Numeric, String
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
import ulid

from ..database import Base

logger = logging.getLogger(__name__)


class ProfessionalProfile(Base):
    """
    Model representing a bookable professional.

    Attributes:
        user_id: Foreign key to users table (one-to-one relationship)
        title: Display title, e.g. "Clinical Psychologist"
        is_available: Whether the professional accepts new bookings
        session_fee: Advertised fee per session
    """

    __tablename__ = "professional_profiles"

    id = Column(String(26), primary_key=True, default=lambda: str(ulid.ULID()))
    user_id = Column(
        String(26),
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
        unique=True,
        index=True,
    )
    title = Column(String(100), nullable=True)
    is_available = Column(Boolean, nullable=False, default=True)
    session_fee = Column(Numeric(10, 2), nullable=False, default=0)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), onupdate=func.now())

    user = relationship("User", back_populates="professional_profile")

    def __repr__(self) -> str:
        return f"<ProfessionalProfile user={self.user_id} available={self.is_available}>"
