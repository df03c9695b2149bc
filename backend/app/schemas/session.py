# backend/app/schemas/session.py
"""
Session schemas for the MindBridge platform.

Requests accept both snake_case and the camelCase names used by the
mobile client (professionalId, timeSlot).
"""

from datetime import date, datetime
from decimal import Decimal
from typing import List, Optional

from pydantic import AliasChoices, Field, field_serializer, field_validator

from ..core.constants import (
    MAX_CONCERNS_LENGTH,
    MAX_SESSION_DURATION,
    MIN_SESSION_DURATION,
    SLOT_TIME_PATTERN,
)
from ..models.session import SessionStatus
from ._strict_base import StrictModel, StrictRequestModel


class SessionBookRequest(StrictRequestModel):
    """Book one slot with a professional."""

    professional_id: str = Field(
        ...,
        min_length=1,
        validation_alias=AliasChoices("professional_id", "professionalId"),
        description="Professional to book",
    )
    date: date
    time_slot: str = Field(
        ...,
        pattern=SLOT_TIME_PATTERN,
        validation_alias=AliasChoices("time_slot", "timeSlot", "time"),
        description='Slot start, "HH:MM"',
    )
    duration: Optional[int] = Field(
        None, ge=MIN_SESSION_DURATION, le=MAX_SESSION_DURATION, description="Minutes"
    )
    price: Decimal = Field(Decimal("0"), ge=0, max_digits=10, decimal_places=2)
    concerns: Optional[str] = Field(None, max_length=MAX_CONCERNS_LENGTH)

    @field_validator("concerns")
    @classmethod
    def blank_concerns_to_none(cls, v: Optional[str]) -> Optional[str]:
        return v or None


class SessionStatusUpdate(StrictRequestModel):
    status: SessionStatus


class SessionResponse(StrictModel):
    """Session as returned to either participant."""

    id: str
    client_id: str
    professional_id: str
    date: date
    time: str
    duration_minutes: int
    price: Decimal
    concerns: Optional[str] = None
    status: SessionStatus
    created_at: Optional[datetime] = None
    cancelled_at: Optional[datetime] = None

    @field_serializer("price")
    def serialize_price(self, price: Decimal) -> str:
        return f"{price:.2f}"


class SessionBookingResponse(StrictModel):
    """Response for a successful booking."""

    booking_id: str
    session_id: str
    session: SessionResponse


class ProfessionalSessionResponse(SessionResponse):
    """Session row for the professional's schedule."""

    client_name: Optional[str] = None
    client_is_student: bool = False


class SessionListResponse(StrictModel):
    sessions: List[SessionResponse]


class ProfessionalSessionListResponse(StrictModel):
    sessions: List[ProfessionalSessionResponse]


class StudentQuotaResponse(StrictModel):
    """Free-session quota for the current period."""

    remaining_sessions: int
    next_reset_date: str = Field(..., description='ISO date, or "" for non-students')
    total_sessions_this_period: int
    is_student: bool
