# backend/tests/unit/services/test_notification_service.py
from datetime import date
from unittest.mock import Mock

from sqlalchemy.orm import Session

from app.models.notification import Notification, NotificationType
from app.services.notification_service import NotificationService


class TestNotificationService:
    def test_session_booked_creates_success_row(self, db, client_user):
        notification = NotificationService(db).session_booked(
            client_user.id, "Dr Perera", date(2025, 3, 13), "10:00"
        )

        stored = db.get(Notification, notification.id)
        assert stored.type == NotificationType.SUCCESS.value
        assert stored.title == "Session Booked Successfully"
        assert "Dr Perera" in stored.message
        assert "2025-03-13 at 10:00" in stored.message
        assert stored.is_read is False

    def test_session_cancelled_names_the_canceller(self, db, professional):
        notification = NotificationService(db).session_cancelled(
            professional.id, date(2025, 3, 13), "10:00", "Nimal Silva"
        )

        assert notification.type == NotificationType.WARNING.value
        assert notification.message.endswith("has been cancelled by Nimal Silva.")

    def test_payment_notifications(self, db, client_user):
        service = NotificationService(db)

        ok = service.payment_successful(client_user.id, "LKR 3000.00", "your session")
        failed = service.payment_failed(client_user.id, "LKR 3000.00", "your session")

        assert ok.type == NotificationType.SUCCESS.value
        assert failed.type == NotificationType.DANGER.value
        assert db.query(Notification).filter_by(user_id=client_user.id).count() == 2

    def test_failures_are_swallowed_and_rolled_back(self):
        db = Mock(spec=Session)
        repo = Mock()
        repo.create_notification.side_effect = RuntimeError("insert failed")
        service = NotificationService(db, notification_repository=repo)

        result = service.session_booked_professional("pro-1", "Nimal", date(2025, 3, 13), "10:00")

        assert result is None
        db.rollback.assert_called_once()
        db.commit.assert_not_called()

    def test_unknown_user_does_not_raise(self, db):
        # Foreign key violation on SQLite with PRAGMA foreign_keys=ON
        result = NotificationService(db).session_booked(
            "01HZZZZZZZZZZZZZZZZZZZZZZZ", "Dr Perera", date(2025, 3, 13), "10:00"
        )
        assert result is None
