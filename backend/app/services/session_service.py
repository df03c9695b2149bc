# backend/app/services/session_service.py
"""
Session Service for the MindBridge platform

Handles all session-related business logic including:
- Booking a slot inside one locked transaction
- Student pricing (discount or free session against the quota)
- Cancellation with a minimum-notice window
- Session reads for clients and professionals
- Status progression by the professional

Notifications are sent after the primary transaction has committed and
never fail the operation that triggered them.
"""

from __future__ import annotations

from datetime import date, datetime, timedelta, timezone
from decimal import ROUND_HALF_UP, Decimal
import logging
from typing import List, Optional, Tuple, Union

from sqlalchemy.orm import Session

from ..core.config import settings
from ..core.exceptions import (
    ForbiddenException,
    FreeSessionQuotaException,
    LateCancellationException,
    NotFoundException,
    SlotNotAvailableException,
    ValidationException,
)
from ..core.timezone_utils import platform_now, to_platform_datetime
from ..models.session import (
    STATUS_TRANSITIONS,
    CounselingSession,
    SessionStatus,
)
from ..models.time_slot import TimeSlot
from ..monitoring.prometheus_metrics import prometheus_metrics
from ..repositories.factory import RepositoryFactory
from ..repositories.session_repository import SessionRepository
from ..repositories.time_slot_repository import TimeSlotRepository
from ..repositories.user_repository import UserRepository
from .base import BaseService
from .notification_service import NotificationService
from .student_quota_service import StudentQuotaService

logger = logging.getLogger(__name__)

CENTS = Decimal("0.01")


def apply_student_discount(price: Decimal, rate: Optional[float] = None) -> Decimal:
    """Discounted price for a paying student, rounded to cents."""
    rate = settings.student_discount_rate if rate is None else rate
    discounted = price * (Decimal("1") - Decimal(str(rate)))
    return discounted.quantize(CENTS, rounding=ROUND_HALF_UP)


class SessionService(BaseService):
    """
    Service layer for counseling session operations.

    Booking correctness rests on the slot row: it is locked for the
    duration of the transaction and flipped with a guarded update, so of
    two concurrent callers only one can claim it.
    """

    def __init__(
        self,
        db: Session,
        notification_service: Optional[NotificationService] = None,
        quota_service: Optional[StudentQuotaService] = None,
        time_slot_repository: Optional[TimeSlotRepository] = None,
        session_repository: Optional[SessionRepository] = None,
        user_repository: Optional[UserRepository] = None,
    ):
        super().__init__(db)
        self.time_slot_repository = (
            time_slot_repository or RepositoryFactory.create_time_slot_repository(db)
        )
        self.session_repository = (
            session_repository or RepositoryFactory.create_session_repository(db)
        )
        self.user_repository = user_repository or RepositoryFactory.create_user_repository(db)
        self.notification_service = notification_service or NotificationService(db)
        self.quota_service = quota_service or StudentQuotaService(
            db,
            user_repository=self.user_repository,
            session_repository=self.session_repository,
        )

    # ==========================================
    # Booking
    # ==========================================

    @BaseService.measure_operation("book_session")
    def book_session(
        self,
        user_id: str,
        professional_id: str,
        session_date: date,
        session_time: str,
        duration: Optional[int] = None,
        price: Union[Decimal, int, float, str] = Decimal("0"),
        concerns: Optional[str] = None,
    ) -> CounselingSession:
        """
        Book a session on a professional's slot.

        Checks, in order:
            1. the professional exists
            2. the professional accepts bookings
            3. the slot is open and not in the past
            4. for price 0, the caller is a student with quota left

        Returns:
            The confirmed session

        Raises:
            NotFoundException: Professional does not exist
            ValidationException: Professional paused, free session not allowed
            SlotNotAvailableException: Slot missing, closed, booked or lost to a concurrent booking
            FreeSessionQuotaException: Student has no free sessions left
        """
        self.log_operation(
            "book_session",
            user_id=user_id,
            professional_id=professional_id,
            date=session_date.isoformat(),
            time=session_time,
        )

        # 1-2. Professional
        profile = self.user_repository.get_professional_profile(professional_id)
        if not profile:
            raise NotFoundException("Professional not found", code="PROFESSIONAL_NOT_FOUND")
        if not profile.is_available:
            prometheus_metrics.inc_booking("rejected")
            raise ValidationException(
                "Professional is not accepting bookings at the moment",
                code="PROFESSIONAL_UNAVAILABLE",
            )

        # 3. Slot
        slot = self.time_slot_repository.get_slot(professional_id, session_date, session_time)
        if not self._is_bookable(slot):
            prometheus_metrics.inc_booking("slot_taken")
            raise SlotNotAvailableException(
                professional_id, session_date.isoformat(), session_time
            )

        # 4. Pricing
        charged = self._resolve_price(user_id, Decimal(str(price)).quantize(CENTS))

        # Effects: lock, claim, record
        with self.transaction():
            locked = self.time_slot_repository.get_slot(
                professional_id, session_date, session_time, for_update=True
            )
            if locked is None or not locked.is_open or not self.time_slot_repository.claim(
                locked.id
            ):
                prometheus_metrics.inc_booking("slot_taken")
                raise SlotNotAvailableException(
                    professional_id, session_date.isoformat(), session_time
                )

            session = self.session_repository.create(
                client_id=user_id,
                professional_id=professional_id,
                date=session_date,
                time=session_time,
                duration_minutes=duration or settings.default_session_duration_minutes,
                price=charged,
                concerns=concerns,
                status=SessionStatus.CONFIRMED.value,
            )

        prometheus_metrics.inc_booking("booked")
        self.logger.info(
            "Session %s booked: client=%s professional=%s %s %s price=%s",
            session.id,
            user_id,
            professional_id,
            session_date,
            session_time,
            charged,
        )
        self._notify_booked(session)
        return session

    def _is_bookable(self, slot: Optional[TimeSlot]) -> bool:
        if slot is None or not slot.is_open:
            return False
        return to_platform_datetime(slot.date, slot.time) > platform_now()

    def _resolve_price(self, user_id: str, price: Decimal) -> Decimal:
        """Apply the free-session rules and the student discount."""
        if price < 0:
            raise ValidationException("Price cannot be negative", code="INVALID_PRICE")

        is_student = self.user_repository.is_student(user_id)
        if price == 0:
            if not is_student:
                prometheus_metrics.inc_booking("rejected")
                raise ValidationException(
                    "Free sessions are only available for students",
                    code="FREE_SESSION_NOT_ALLOWED",
                )
            quota = self.quota_service.get_remaining_student_sessions(user_id)
            if quota["remaining_sessions"] <= 0:
                prometheus_metrics.inc_booking("rejected")
                raise FreeSessionQuotaException(quota["next_reset_date"])
            return Decimal("0.00")

        if is_student:
            return apply_student_discount(price)
        return price

    def _notify_booked(self, session: CounselingSession) -> None:
        """Best effort: the session is already committed."""
        try:
            client = self.user_repository.get_by_id(session.client_id)
            professional = self.user_repository.get_by_id(session.professional_id)
            self.notification_service.session_booked(
                session.client_id,
                professional.name if professional else "your professional",
                session.date,
                session.time,
            )
            self.notification_service.session_booked_professional(
                session.professional_id,
                client.name if client else "a client",
                session.date,
                session.time,
            )
        except Exception as exc:
            self._log_notify_failure("session_booked", session.id, exc)

    # ==========================================
    # Cancellation
    # ==========================================

    @BaseService.measure_operation("cancel_session")
    def cancel_session(self, session_id: str, acting_user_id: str) -> CounselingSession:
        """
        Cancel a scheduled or confirmed session.

        Either participant may cancel, but never within the minimum notice
        window. The slot is released; its availability flag is kept.

        Raises:
            NotFoundException: Missing session, or status not cancellable
            ForbiddenException: Caller is not a participant
            LateCancellationException: Less than the notice window remains
        """
        session = self.session_repository.get_by_id(session_id)
        if not session:
            raise NotFoundException("Session not found", code="SESSION_NOT_FOUND")
        if not session.is_participant(acting_user_id):
            raise ForbiddenException(
                "You are not a participant of this session", code="NOT_SESSION_PARTICIPANT"
            )
        if not session.is_cancellable:
            raise NotFoundException(
                "Session not found or cannot be cancelled", code="SESSION_NOT_CANCELLABLE"
            )

        self._check_notice_window(session)

        with self.transaction():
            locked = self.session_repository.get_for_update(session_id)
            if locked is None or not locked.is_cancellable:
                raise NotFoundException(
                    "Session not found or cannot be cancelled", code="SESSION_NOT_CANCELLABLE"
                )
            locked.status = SessionStatus.CANCELLED.value
            locked.cancelled_at = datetime.now(timezone.utc)
            locked.cancelled_by_id = acting_user_id
            self.time_slot_repository.release(locked.professional_id, locked.date, locked.time)

        prometheus_metrics.inc_cancellation("cancelled")
        self.log_operation("cancel_session", session_id=session_id, cancelled_by=acting_user_id)
        self._notify_cancelled(locked, acting_user_id)
        return locked

    def _check_notice_window(self, session: CounselingSession) -> None:
        notice = timedelta(hours=settings.cancellation_notice_hours)
        remaining = to_platform_datetime(session.date, session.time) - platform_now()
        if remaining < notice:
            prometheus_metrics.inc_cancellation("too_late")
            raise LateCancellationException(
                settings.cancellation_notice_hours, remaining.total_seconds() / 3600
            )

    def _notify_cancelled(self, session: CounselingSession, acting_user_id: str) -> None:
        other_party = (
            session.professional_id if acting_user_id == session.client_id else session.client_id
        )
        try:
            actor = self.user_repository.get_by_id(acting_user_id)
            self.notification_service.session_cancelled(
                other_party,
                session.date,
                session.time,
                actor.name if actor else "the other participant",
            )
        except Exception as exc:
            self._log_notify_failure("session_cancelled", session.id, exc)

    def _log_notify_failure(self, event: str, session_id: str, exc: Exception) -> None:
        self.logger.error(
            "Notification for %s on session %s failed: %s",
            event,
            session_id,
            exc,
            extra={"event": event, "session_id": session_id},
        )
        prometheus_metrics.inc_notification(event, "failed")

    # ==========================================
    # Reads
    # ==========================================

    @BaseService.measure_operation("get_user_sessions")
    def get_user_sessions(self, user_id: str) -> List[CounselingSession]:
        return self.session_repository.get_client_sessions(user_id)

    @BaseService.measure_operation("get_session_for_participant")
    def get_session_for_participant(self, session_id: str, user_id: str) -> CounselingSession:
        """A single session, visible only to its client or professional."""
        session = self.session_repository.get_by_id(session_id)
        if not session or not session.is_participant(user_id):
            raise NotFoundException("Session not found", code="SESSION_NOT_FOUND")
        return session

    @BaseService.measure_operation("get_professional_sessions")
    def get_professional_sessions(
        self, professional_id: str
    ) -> List[Tuple[CounselingSession, bool]]:
        """A professional's sessions paired with each client's student flag."""
        if not self.user_repository.get_professional_profile(professional_id):
            raise NotFoundException("Professional not found", code="PROFESSIONAL_NOT_FOUND")
        rows = self.session_repository.get_professional_sessions(professional_id)
        return [(session, bool(is_student)) for session, is_student in rows]

    # ==========================================
    # Status progression
    # ==========================================

    @BaseService.measure_operation("update_session_status")
    def update_session_status(
        self, session_id: str, professional_id: str, status: Union[SessionStatus, str]
    ) -> CounselingSession:
        """
        Move a session forward (scheduled/confirmed -> ongoing -> completed).

        Cancellation is not a status update; it goes through cancel_session.
        """
        target = SessionStatus(status)
        session = self.session_repository.get_by_id(session_id)
        if not session:
            raise NotFoundException("Session not found", code="SESSION_NOT_FOUND")
        if session.professional_id != professional_id:
            raise ForbiddenException(
                "Only the session's professional can update its status",
                code="NOT_SESSION_PROFESSIONAL",
            )
        if target == SessionStatus.CANCELLED:
            raise ValidationException(
                "Use the cancel endpoint to cancel a session", code="USE_CANCEL"
            )

        current = SessionStatus(session.status)
        if target not in STATUS_TRANSITIONS[current]:
            raise ValidationException(
                f"Cannot change session status from {current.value} to {target.value}",
                code="INVALID_STATUS_TRANSITION",
                details={"from": current.value, "to": target.value},
            )

        with self.transaction():
            session.status = target.value

        self.log_operation(
            "update_session_status", session_id=session_id, status=target.value
        )
        return session
