# backend/app/models/time_slot.py
"""
Time slot model for the MindBridge platform.

A TimeSlot is one bookable (professional, date, time) opportunity.
Slots are created lazily when a date is first queried, or explicitly
when a professional opens availability.

Flags:
    is_available: the professional has opened this slot
    is_booked: a non-cancelled session currently holds this slot
"""

from sqlalchemy import (
    Boolean,
    Column,
    Date,
    DateTime,
    ForeignKey,
    Index,
    String,
    UniqueConstraint,
)
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
import ulid

from ..database import Base


class TimeSlot(Base):
    """Per-professional, per-date, per-hour booking slot."""

    __tablename__ = "time_slots"

    id = Column(String(26), primary_key=True, default=lambda: str(ulid.ULID()))
    professional_id = Column(
        String(26), ForeignKey("users.id", ondelete="CASCADE"), nullable=False
    )
    date = Column(Date, nullable=False)
    # Wall-clock label in the platform timezone, "HH:MM"
    time = Column(String(5), nullable=False)
    is_booked = Column(Boolean, nullable=False, default=False)
    is_available = Column(Boolean, nullable=False, default=False)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), onupdate=func.now())

    professional = relationship("User", foreign_keys=[professional_id])

    __table_args__ = (
        UniqueConstraint(
            "professional_id", "date", "time", name="uq_time_slots_professional_date_time"
        ),
        Index("ix_time_slots_professional_date", "professional_id", "date"),
    )

    @property
    def is_open(self) -> bool:
        """Bookable right now: opened by the professional and not held."""
        return bool(self.is_available and not self.is_booked)

    def __repr__(self) -> str:
        return f"<TimeSlot {self.professional_id} {self.date} {self.time} booked={self.is_booked}>"
