# backend/app/services/notification_service.py
"""
Notification Service for the MindBridge platform

Writes in-app notification rows after bookings, cancellations and
payment outcomes. Every public method is fire-and-forget: failures are
logged, the pending work is rolled back, and nothing is raised to the
caller, so a notification problem never fails the primary operation.
"""

from datetime import date
import logging
from typing import Optional

from sqlalchemy.orm import Session

from ..core.constants import BRAND_NAME
from ..models.notification import Notification, NotificationType
from ..monitoring.prometheus_metrics import prometheus_metrics
from ..repositories.factory import RepositoryFactory
from ..repositories.notification_repository import NotificationRepository
from .base import BaseService

logger = logging.getLogger(__name__)

UPCOMING_SESSIONS_URL = "/sessions/upcoming"
PROFESSIONAL_SESSIONS_URL = "/sessions"
SESSION_HISTORY_URL = "/sessions/history"
PAYMENT_HISTORY_URL = "/payments/history"


class NotificationService(BaseService):
    """Creates notification rows; never raises."""

    def __init__(
        self, db: Session, notification_repository: Optional[NotificationRepository] = None
    ):
        super().__init__(db)
        self.notification_repository = (
            notification_repository or RepositoryFactory.create_notification_repository(db)
        )

    def _send(
        self,
        event: str,
        *,
        user_id: str,
        type: NotificationType,
        title: str,
        message: str,
        related_url: Optional[str] = None,
    ) -> Optional[Notification]:
        try:
            notification = self.notification_repository.create_notification(
                user_id=user_id,
                type=type,
                title=title,
                message=message,
                related_url=related_url,
            )
            self.db.commit()
        except Exception as exc:
            self.logger.error(
                "Failed to send %s notification to %s: %s",
                event,
                user_id,
                exc,
                extra={"event": event, "user_id": user_id},
            )
            self.db.rollback()
            prometheus_metrics.inc_notification(event, "failed")
            return None

        prometheus_metrics.inc_notification(event, "created")
        return notification

    @BaseService.measure_operation("session_booked")
    def session_booked(
        self, client_id: str, professional_name: str, session_date: date, session_time: str
    ) -> Optional[Notification]:
        """Booking confirmation to the client."""
        return self._send(
            "session_booked",
            user_id=client_id,
            type=NotificationType.SUCCESS,
            title="Session Booked Successfully",
            message=(
                f"Your session with {professional_name} has been confirmed for "
                f"{session_date.isoformat()} at {session_time}."
            ),
            related_url=UPCOMING_SESSIONS_URL,
        )

    @BaseService.measure_operation("session_booked_professional")
    def session_booked_professional(
        self, professional_id: str, client_name: str, session_date: date, session_time: str
    ) -> Optional[Notification]:
        """New-booking alert to the professional."""
        return self._send(
            "session_booked_professional",
            user_id=professional_id,
            type=NotificationType.INFO,
            title="New Session Booked",
            message=(
                f"You have a new session with {client_name} for "
                f"{session_date.isoformat()} at {session_time}."
            ),
            related_url=PROFESSIONAL_SESSIONS_URL,
        )

    @BaseService.measure_operation("session_cancelled")
    def session_cancelled(
        self, user_id: str, session_date: date, session_time: str, cancelled_by: str
    ) -> Optional[Notification]:
        """Tell the other participant that a session was cancelled."""
        return self._send(
            "session_cancelled",
            user_id=user_id,
            type=NotificationType.WARNING,
            title="Session Cancelled",
            message=(
                f"Your session scheduled for {session_date.isoformat()} at {session_time} "
                f"has been cancelled by {cancelled_by}."
            ),
            related_url=SESSION_HISTORY_URL,
        )

    @BaseService.measure_operation("payment_successful")
    def payment_successful(self, user_id: str, amount: str, service: str) -> Optional[Notification]:
        return self._send(
            "payment_successful",
            user_id=user_id,
            type=NotificationType.SUCCESS,
            title="Payment Successful",
            message=f"Your payment of {amount} for {service} has been processed successfully.",
            related_url=PAYMENT_HISTORY_URL,
        )

    @BaseService.measure_operation("payment_failed")
    def payment_failed(self, user_id: str, amount: str, service: str) -> Optional[Notification]:
        return self._send(
            "payment_failed",
            user_id=user_id,
            type=NotificationType.DANGER,
            title="Payment Failed",
            message=(
                f"Your payment of {amount} for {service} could not be processed. "
                f"Please try again or contact {BRAND_NAME} support."
            ),
            related_url=PAYMENT_HISTORY_URL,
        )
