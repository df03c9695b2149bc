# backend/app/routes/v1/professionals.py
"""
Professional availability routes - API v1

Versioned endpoints under /api/v1/professionals.

Endpoints:
    GET /me/sessions - The caller's schedule as a professional
    POST /me/availability - Open slots
    POST /me/unavailability - Close unbooked slots
    PUT /me/availability/{date} - Open or close a whole date
    PATCH /me/booking-status - Pause or resume new bookings
    GET /{professional_id}/availability - Monthly calendar summary
    GET /{professional_id}/availability/{date} - Open slots for one date
"""

import asyncio
from datetime import date
import logging
from typing import NoReturn

from fastapi import APIRouter, Depends, HTTPException, Path, Query, status

from ...api.dependencies.auth import get_current_active_user, require_professional
from ...api.dependencies.services import get_availability_service, get_session_service
from ...core.exceptions import DomainException
from ...models.user import User
from ...schemas.availability import (
    BookingStatusResponse,
    BookingStatusUpdate,
    DateAvailabilityResponse,
    DateAvailabilityUpdate,
    MonthlyAvailabilityResponse,
    SlotBatchRequest,
    SlotBatchResponse,
    TimeSlotResponse,
)
from ...schemas.session import ProfessionalSessionListResponse, ProfessionalSessionResponse
from ...services.availability_service import AvailabilityService
from ...services.session_service import SessionService

logger = logging.getLogger(__name__)

router = APIRouter(tags=["professionals-v1"])

ULID_PATH_PATTERN = r"^[0-9A-HJKMNP-TV-Z]{26}$"


def handle_domain_exception(exc: DomainException) -> NoReturn:
    """Convert domain exceptions to HTTP exceptions."""
    if hasattr(exc, "to_http_exception"):
        raise exc.to_http_exception()
    raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail=str(exc))


def _slot_batch(slots) -> SlotBatchResponse:
    items = [TimeSlotResponse.model_validate(slot) for slot in slots]
    return SlotBatchResponse(slots=items, count=len(items))


# ============================================================================
# SECTION 1: Routes for the authenticated professional
# ============================================================================


@router.get("/me/sessions", response_model=ProfessionalSessionListResponse)
async def list_professional_sessions(
    current_user: User = Depends(require_professional),
    session_service: SessionService = Depends(get_session_service),
) -> ProfessionalSessionListResponse:
    try:
        rows = await asyncio.to_thread(session_service.get_professional_sessions, current_user.id)
    except DomainException as e:
        handle_domain_exception(e)

    sessions = []
    for session, is_student in rows:
        item = ProfessionalSessionResponse.model_validate(session)
        item.client_name = session.client.name if session.client else None
        item.client_is_student = bool(is_student)
        sessions.append(item)
    return ProfessionalSessionListResponse(sessions=sessions)


@router.post("/me/availability", response_model=SlotBatchResponse)
async def open_slots(
    payload: SlotBatchRequest,
    current_user: User = Depends(require_professional),
    availability_service: AvailabilityService = Depends(get_availability_service),
) -> SlotBatchResponse:
    """Open slots, creating any that do not exist yet."""
    try:
        slots = await asyncio.to_thread(
            availability_service.set_slots_available, current_user.id, payload.keys()
        )
    except DomainException as e:
        handle_domain_exception(e)
    return _slot_batch(slots)


@router.post("/me/unavailability", response_model=SlotBatchResponse)
async def close_slots(
    payload: SlotBatchRequest,
    current_user: User = Depends(require_professional),
    availability_service: AvailabilityService = Depends(get_availability_service),
) -> SlotBatchResponse:
    """Close slots; booked slots are left alone and not returned."""
    try:
        slots = await asyncio.to_thread(
            availability_service.set_slots_unavailable, current_user.id, payload.keys()
        )
    except DomainException as e:
        handle_domain_exception(e)
    return _slot_batch(slots)


@router.put("/me/availability/{slot_date}", response_model=SlotBatchResponse)
async def set_date_availability(
    payload: DateAvailabilityUpdate,
    slot_date: date = Path(..., description="YYYY-MM-DD"),
    current_user: User = Depends(require_professional),
    availability_service: AvailabilityService = Depends(get_availability_service),
) -> SlotBatchResponse:
    try:
        slots = await asyncio.to_thread(
            availability_service.set_date_availability,
            current_user.id,
            slot_date,
            payload.is_available,
        )
    except DomainException as e:
        handle_domain_exception(e)
    return _slot_batch(slots)


@router.patch("/me/booking-status", response_model=BookingStatusResponse)
async def set_booking_status(
    payload: BookingStatusUpdate,
    current_user: User = Depends(require_professional),
    availability_service: AvailabilityService = Depends(get_availability_service),
) -> BookingStatusResponse:
    try:
        profile = await asyncio.to_thread(
            availability_service.set_professional_accepting,
            current_user.id,
            payload.is_available,
        )
    except DomainException as e:
        handle_domain_exception(e)
    return BookingStatusResponse(professional_id=current_user.id, is_available=profile.is_available)


# ============================================================================
# SECTION 2: Public availability (any authenticated user)
# ============================================================================


@router.get(
    "/{professional_id}/availability",
    response_model=MonthlyAvailabilityResponse,
    responses={404: {"description": "Professional not found"}},
)
async def get_monthly_availability(
    professional_id: str = Path(..., pattern=ULID_PATH_PATTERN),
    year: int = Query(..., ge=1, le=9999),
    month: int = Query(..., ge=1, le=12),
    current_user: User = Depends(get_current_active_user),
    availability_service: AvailabilityService = Depends(get_availability_service),
) -> MonthlyAvailabilityResponse:
    """Per-date slot counts for a month."""
    try:
        days = await asyncio.to_thread(
            availability_service.get_monthly_availability, professional_id, year, month
        )
    except DomainException as e:
        handle_domain_exception(e)
    return MonthlyAvailabilityResponse(
        professional_id=professional_id, year=year, month=month, days=days
    )


@router.get(
    "/{professional_id}/availability/{slot_date}",
    response_model=DateAvailabilityResponse,
    responses={404: {"description": "Professional not found"}},
)
async def get_date_availability(
    professional_id: str = Path(..., pattern=ULID_PATH_PATTERN),
    slot_date: date = Path(..., description="YYYY-MM-DD"),
    current_user: User = Depends(get_current_active_user),
    availability_service: AvailabilityService = Depends(get_availability_service),
) -> DateAvailabilityResponse:
    """Slots for one date, generating the closed defaults on first access."""
    try:
        result = await asyncio.to_thread(
            availability_service.get_date_availability, professional_id, slot_date
        )
    except DomainException as e:
        handle_domain_exception(e)
    return DateAvailabilityResponse(
        date=result["date"],
        availability=[TimeSlotResponse.model_validate(s) for s in result["availability"]],
    )
