# backend/app/schemas/__init__.py
"""
Pydantic schemas for the MindBridge platform.
"""

from .availability import (
    BookingStatusResponse,
    BookingStatusUpdate,
    DateAvailabilityResponse,
    DateAvailabilityUpdate,
    DaySummary,
    MonthlyAvailabilityResponse,
    SlotBatchRequest,
    SlotBatchResponse,
    SlotKey,
    TimeSlotResponse,
)
from .payment import (
    PaymentCheckoutResponse,
    PaymentCreateRequest,
    PaymentResponse,
    PlatformFeeStatusResponse,
)
from .session import (
    ProfessionalSessionListResponse,
    ProfessionalSessionResponse,
    SessionBookingResponse,
    SessionBookRequest,
    SessionListResponse,
    SessionResponse,
    SessionStatusUpdate,
    StudentQuotaResponse,
)

__all__ = [
    # Availability
    "SlotKey",
    "SlotBatchRequest",
    "SlotBatchResponse",
    "DateAvailabilityUpdate",
    "DateAvailabilityResponse",
    "BookingStatusUpdate",
    "BookingStatusResponse",
    "TimeSlotResponse",
    "DaySummary",
    "MonthlyAvailabilityResponse",
    # Sessions
    "SessionBookRequest",
    "SessionStatusUpdate",
    "SessionResponse",
    "SessionBookingResponse",
    "SessionListResponse",
    "ProfessionalSessionResponse",
    "ProfessionalSessionListResponse",
    "StudentQuotaResponse",
    # Payments
    "PaymentCreateRequest",
    "PaymentResponse",
    "PaymentCheckoutResponse",
    "PlatformFeeStatusResponse",
]
