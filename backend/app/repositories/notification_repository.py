"""Repository for in-app notification inbox entries."""

from __future__ import annotations

from typing import List, Optional, cast

from sqlalchemy.orm import Session

from ..models.notification import Notification, NotificationType
from .base_repository import BaseRepository


class NotificationRepository(BaseRepository[Notification]):
    """Data access for notification rows."""

    def __init__(self, db: Session) -> None:
        super().__init__(db, Notification)

    def create_notification(
        self,
        *,
        user_id: str,
        title: str,
        message: str,
        type: NotificationType = NotificationType.INFO,
        related_url: Optional[str] = None,
    ) -> Notification:
        return self.create(
            user_id=user_id,
            title=title,
            message=message,
            type=type.value,
            related_url=related_url,
            is_read=False,
        )

    def get_user_notifications(self, user_id: str, limit: int = 50) -> List[Notification]:
        query = (
            self.db.query(Notification)
            .filter(Notification.user_id == user_id)
            .order_by(Notification.created_at.desc(), Notification.id.desc())
            .limit(limit)
        )
        return cast(List[Notification], query.all())
