# backend/app/schemas/availability.py
"""
Availability schemas for the MindBridge platform.

Slots are identified by (date, "HH:MM") in the platform timezone.
"""

from datetime import date
from typing import Dict, List

from pydantic import Field

from ..core.constants import MAX_SLOTS_PER_REQUEST, SLOT_TIME_PATTERN
from ._strict_base import StrictModel, StrictRequestModel


class SlotKey(StrictRequestModel):
    date: date
    time: str = Field(..., pattern=SLOT_TIME_PATTERN)


class SlotBatchRequest(StrictRequestModel):
    """Slots to open or close in one call."""

    slots: List[SlotKey] = Field(..., min_length=1, max_length=MAX_SLOTS_PER_REQUEST)

    def keys(self) -> List[tuple]:
        return [(slot.date, slot.time) for slot in self.slots]


class DateAvailabilityUpdate(StrictRequestModel):
    is_available: bool


class BookingStatusUpdate(StrictRequestModel):
    """Professional-level switch for accepting new bookings."""

    is_available: bool


class TimeSlotResponse(StrictModel):
    id: str
    professional_id: str
    date: date
    time: str
    is_booked: bool
    is_available: bool


class DateAvailabilityResponse(StrictModel):
    date: str
    availability: List[TimeSlotResponse]


class SlotBatchResponse(StrictModel):
    slots: List[TimeSlotResponse]
    count: int


class DaySummary(StrictModel):
    is_available: bool
    total_slots: int
    available_slots: int


class MonthlyAvailabilityResponse(StrictModel):
    professional_id: str
    year: int
    month: int
    days: Dict[str, DaySummary]


class BookingStatusResponse(StrictModel):
    professional_id: str
    is_available: bool
