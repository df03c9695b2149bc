# backend/app/routes/v1/sessions.py
"""
Client session routes - API v1

Versioned session endpoints under /api/v1/sessions.
All business logic delegated to SessionService and StudentQuotaService.

Endpoints:
    POST /book - Book a slot with a professional
    GET /student-quota - Free-session quota of the caller
    GET /mine - Caller's sessions as a client
    GET /{session_id} - One session, for either participant
    POST /{session_id}/cancel - Cancel a session
    DELETE /{session_id} - Cancel a session (alias)
    PATCH /{session_id}/status - Professional moves a session forward
"""

import asyncio
import logging
from typing import NoReturn

from fastapi import APIRouter, Depends, HTTPException, Path, status

from ...api.dependencies.auth import (
    get_current_active_user,
    require_client,
    require_professional,
)
from ...api.dependencies.services import get_session_service, get_student_quota_service
from ...core.exceptions import DomainException
from ...models.user import User
from ...schemas.session import (
    SessionBookingResponse,
    SessionBookRequest,
    SessionListResponse,
    SessionResponse,
    SessionStatusUpdate,
    StudentQuotaResponse,
)
from ...services.session_service import SessionService
from ...services.student_quota_service import StudentQuotaService

logger = logging.getLogger(__name__)

# V1 router - no prefix here, will be added when mounting in main.py
router = APIRouter(tags=["sessions-v1"])

ULID_PATH_PATTERN = r"^[0-9A-HJKMNP-TV-Z]{26}$"


def handle_domain_exception(exc: DomainException) -> NoReturn:
    """Convert domain exceptions to HTTP exceptions."""
    if hasattr(exc, "to_http_exception"):
        raise exc.to_http_exception()
    raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail=str(exc))


# ============================================================================
# SECTION 1: Static routes (no path parameters)
# ============================================================================


@router.post(
    "/book",
    response_model=SessionBookingResponse,
    status_code=status.HTTP_201_CREATED,
    responses={
        400: {"description": "Slot unavailable, professional paused or free session refused"},
        404: {"description": "Professional not found"},
    },
)
async def book_session(
    payload: SessionBookRequest,
    current_user: User = Depends(require_client),
    session_service: SessionService = Depends(get_session_service),
) -> SessionBookingResponse:
    """Book a professional's open slot."""
    try:
        session = await asyncio.to_thread(
            session_service.book_session,
            user_id=current_user.id,
            professional_id=payload.professional_id,
            session_date=payload.date,
            session_time=payload.time_slot,
            duration=payload.duration,
            price=payload.price,
            concerns=payload.concerns,
        )
    except DomainException as e:
        handle_domain_exception(e)

    return SessionBookingResponse(
        booking_id=session.id,
        session_id=session.id,
        session=SessionResponse.model_validate(session),
    )


@router.get("/student-quota", response_model=StudentQuotaResponse)
async def get_student_quota(
    current_user: User = Depends(require_client),
    quota_service: StudentQuotaService = Depends(get_student_quota_service),
) -> StudentQuotaResponse:
    """Remaining free sessions for the caller in the current period."""
    try:
        quota = await asyncio.to_thread(
            quota_service.get_remaining_student_sessions, current_user.id
        )
    except DomainException as e:
        handle_domain_exception(e)
    return StudentQuotaResponse(**quota)


@router.get("/mine", response_model=SessionListResponse)
async def list_my_sessions(
    current_user: User = Depends(get_current_active_user),
    session_service: SessionService = Depends(get_session_service),
) -> SessionListResponse:
    sessions = await asyncio.to_thread(session_service.get_user_sessions, current_user.id)
    return SessionListResponse(sessions=[SessionResponse.model_validate(s) for s in sessions])


# ============================================================================
# SECTION 2: Session-scoped routes
# ============================================================================


@router.get(
    "/{session_id}",
    response_model=SessionResponse,
    responses={404: {"description": "Session not found"}},
)
async def get_session(
    session_id: str = Path(..., description="Session ULID", pattern=ULID_PATH_PATTERN),
    current_user: User = Depends(get_current_active_user),
    session_service: SessionService = Depends(get_session_service),
) -> SessionResponse:
    try:
        session = await asyncio.to_thread(
            session_service.get_session_for_participant, session_id, current_user.id
        )
    except DomainException as e:
        handle_domain_exception(e)
    return SessionResponse.model_validate(session)


async def _cancel(
    session_id: str, current_user: User, session_service: SessionService
) -> SessionResponse:
    try:
        session = await asyncio.to_thread(
            session_service.cancel_session, session_id, current_user.id
        )
    except DomainException as e:
        handle_domain_exception(e)
    return SessionResponse.model_validate(session)


_CANCEL_RESPONSES = {
    400: {"description": "Too late to cancel"},
    403: {"description": "Not a participant"},
    404: {"description": "Session not found or not cancellable"},
}


@router.post("/{session_id}/cancel", response_model=SessionResponse, responses=_CANCEL_RESPONSES)
async def cancel_session(
    session_id: str = Path(..., description="Session ULID", pattern=ULID_PATH_PATTERN),
    current_user: User = Depends(get_current_active_user),
    session_service: SessionService = Depends(get_session_service),
) -> SessionResponse:
    """Cancel a session at least the notice window ahead."""
    return await _cancel(session_id, current_user, session_service)


@router.delete("/{session_id}", response_model=SessionResponse, responses=_CANCEL_RESPONSES)
async def delete_session(
    session_id: str = Path(..., description="Session ULID", pattern=ULID_PATH_PATTERN),
    current_user: User = Depends(get_current_active_user),
    session_service: SessionService = Depends(get_session_service),
) -> SessionResponse:
    """Same as POST /{session_id}/cancel."""
    return await _cancel(session_id, current_user, session_service)


@router.patch("/{session_id}/status", response_model=SessionResponse)
async def update_session_status(
    payload: SessionStatusUpdate,
    session_id: str = Path(..., description="Session ULID", pattern=ULID_PATH_PATTERN),
    current_user: User = Depends(require_professional),
    session_service: SessionService = Depends(get_session_service),
) -> SessionResponse:
    try:
        session = await asyncio.to_thread(
            session_service.update_session_status, session_id, current_user.id, payload.status
        )
    except DomainException as e:
        handle_domain_exception(e)
    return SessionResponse.model_validate(session)
