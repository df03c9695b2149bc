# backend/app/models/session.py
"""
Counseling session model for the MindBridge platform.

A CounselingSession is created only after its slot has been claimed.
The link to the slot is the (professional_id, date, time) triple rather
than a slot id, so the session record survives availability changes.
"""

from enum import Enum
import logging

from sqlalchemy import (
    CheckConstraint,
    Column,
    Date,
    DateTime,
    ForeignKey,
    Index,
    Integer,
    Numeric,
    String,
    Text,
)
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
import ulid

from ..database import Base

logger = logging.getLogger(__name__)


class SessionStatus(str, Enum):
    """Session lifecycle statuses."""

    SCHEDULED = "scheduled"
    CONFIRMED = "confirmed"  # Default - instant booking
    ONGOING = "ongoing"
    COMPLETED = "completed"
    CANCELLED = "cancelled"


CANCELLABLE_STATUSES = frozenset({SessionStatus.SCHEDULED, SessionStatus.CONFIRMED})
TERMINAL_STATUSES = frozenset({SessionStatus.COMPLETED, SessionStatus.CANCELLED})

# Allowed forward moves when a professional updates a session.
STATUS_TRANSITIONS = {
    SessionStatus.SCHEDULED: frozenset({SessionStatus.CONFIRMED, SessionStatus.ONGOING}),
    SessionStatus.CONFIRMED: frozenset({SessionStatus.ONGOING, SessionStatus.COMPLETED}),
    SessionStatus.ONGOING: frozenset({SessionStatus.COMPLETED}),
    SessionStatus.COMPLETED: frozenset(),
    SessionStatus.CANCELLED: frozenset(),
}


class CounselingSession(Base):
    """
    Booked session between a client and a professional.

    Price is the amount actually charged: zero for a free student
    session, discounted for a paying student.
    """

    __tablename__ = "sessions"

    id = Column(String(26), primary_key=True, index=True, default=lambda: str(ulid.ULID()))
    client_id = Column(String(26), ForeignKey("users.id"), nullable=False, index=True)
    professional_id = Column(String(26), ForeignKey("users.id"), nullable=False)

    date = Column(Date, nullable=False, index=True)
    time = Column(String(5), nullable=False)
    duration_minutes = Column(Integer, nullable=False, default=50)
    price = Column(Numeric(10, 2), nullable=False, default=0)
    concerns = Column(Text, nullable=True)

    status = Column(String(20), nullable=False, default=SessionStatus.CONFIRMED.value, index=True)

    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), onupdate=func.now())
    cancelled_at = Column(DateTime(timezone=True), nullable=True)
    cancelled_by_id = Column(String(26), ForeignKey("users.id"), nullable=True)

    client = relationship("User", foreign_keys=[client_id])
    professional = relationship("User", foreign_keys=[professional_id])
    cancelled_by = relationship("User", foreign_keys=[cancelled_by_id])

    __table_args__ = (
        CheckConstraint(
            "status IN ('scheduled', 'confirmed', 'ongoing', 'completed', 'cancelled')",
            name="ck_sessions_status",
        ),
        CheckConstraint("duration_minutes > 0", name="ck_sessions_duration_positive"),
        CheckConstraint("price >= 0", name="ck_sessions_price_non_negative"),
        Index("ix_sessions_professional_date_time", "professional_id", "date", "time"),
        Index("ix_sessions_client_date", "client_id", "date"),
    )

    @property
    def is_cancellable(self) -> bool:
        return self.status in {s.value for s in CANCELLABLE_STATUSES}

    def is_participant(self, user_id: str) -> bool:
        return user_id in (self.client_id, self.professional_id)

    def __repr__(self) -> str:
        return f"<CounselingSession {self.id} {self.date} {self.time} {self.status}>"
