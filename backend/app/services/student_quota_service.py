# backend/app/services/student_quota_service.py
"""
Student free-session quota for the MindBridge platform.

Students get a fixed number of zero-price sessions per period. A period
runs from one registration anniversary day to the next; months shorter
than the anniversary day clamp to their last day, so a student who
registered on the 31st resets on Feb 28 (or 29), Mar 31, Apr 30 and so on.

Nothing is stored: every call recomputes the count from session history.
"""

import calendar
from datetime import date, datetime
import logging
from typing import Any, Dict, Optional, Tuple

import pytz
from sqlalchemy.orm import Session

from ..core.config import settings
from ..core.exceptions import NotFoundException
from ..core.timezone_utils import get_platform_timezone, platform_today
from ..repositories.factory import RepositoryFactory
from ..repositories.session_repository import SessionRepository
from ..repositories.user_repository import UserRepository
from .base import BaseService

logger = logging.getLogger(__name__)


def clamp_to_month(year: int, month: int, day: int) -> date:
    """date(year, month, day) with day clamped to the month's last day."""
    last_day = calendar.monthrange(year, month)[1]
    return date(year, month, min(day, last_day))


def _shift_month(year: int, month: int, delta: int) -> Tuple[int, int]:
    index = year * 12 + (month - 1) + delta
    return index // 12, index % 12 + 1


def quota_period(anchor_day: int, today: date) -> Tuple[date, date]:
    """
    Current quota window as [start, end).

    start is the latest anniversary date on or before today; end is the
    anniversary in the following month.
    """
    start = clamp_to_month(today.year, today.month, anchor_day)
    if start > today:
        prev_year, prev_month = _shift_month(today.year, today.month, -1)
        start = clamp_to_month(prev_year, prev_month, anchor_day)

    next_year, next_month = _shift_month(start.year, start.month, 1)
    end = clamp_to_month(next_year, next_month, anchor_day)
    return start, end


def registration_anchor_day(created_at: datetime) -> int:
    """Day-of-month of registration, read in the platform timezone."""
    if created_at.tzinfo is None:
        created_at = pytz.UTC.localize(created_at)
    return created_at.astimezone(get_platform_timezone()).day


class StudentQuotaService(BaseService):
    """Computes how many free sessions a student has left in the current period."""

    def __init__(
        self,
        db: Session,
        user_repository: Optional[UserRepository] = None,
        session_repository: Optional[SessionRepository] = None,
    ):
        super().__init__(db)
        self.user_repository = user_repository or RepositoryFactory.create_user_repository(db)
        self.session_repository = (
            session_repository or RepositoryFactory.create_session_repository(db)
        )
        self.free_sessions_per_period = settings.student_free_sessions_per_period

    @BaseService.measure_operation("get_remaining_student_sessions")
    def get_remaining_student_sessions(
        self, user_id: str, today: Optional[date] = None
    ) -> Dict[str, Any]:
        """
        Remaining free sessions for a user.

        Args:
            user_id: Client user id
            today: Override for the current platform date

        Returns:
            remaining_sessions, next_reset_date (ISO date or ""),
            total_sessions_this_period, is_student

        Raises:
            NotFoundException: If the user does not exist
        """
        user = self.user_repository.get_by_id(user_id)
        if not user:
            raise NotFoundException("User not found", code="USER_NOT_FOUND")

        if not user.is_student:
            return {
                "remaining_sessions": 0,
                "next_reset_date": "",
                "total_sessions_this_period": 0,
                "is_student": False,
            }

        today = today or platform_today()
        start, end = quota_period(registration_anchor_day(user.created_at), today)
        used = self.session_repository.count_free_sessions(user_id, start, end)
        remaining = max(0, self.free_sessions_per_period - used)

        self.logger.debug(
            "Quota for %s: period %s..%s used=%d remaining=%d",
            user_id,
            start,
            end,
            used,
            remaining,
        )
        return {
            "remaining_sessions": remaining,
            "next_reset_date": end.isoformat(),
            "total_sessions_this_period": used,
            "is_student": True,
        }
