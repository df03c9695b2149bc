# backend/app/repositories/session_repository.py
"""
Session Repository for the MindBridge platform

Implements all data access operations for counseling session management:
participant lookups, free-session counting for the student quota, and
professional schedules.
"""

from datetime import date
import logging
from typing import List, Optional, Tuple

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, joinedload

from ..core.exceptions import RepositoryException
from ..models.client import ClientProfile
from ..models.session import CounselingSession, SessionStatus
from ..models.user import User
from .base_repository import BaseRepository

logger = logging.getLogger(__name__)


class SessionRepository(BaseRepository[CounselingSession]):
    """Repository for CounselingSession data access."""

    def __init__(self, db: Session):
        super().__init__(db, CounselingSession)

    def get_for_update(self, session_id: str) -> Optional[CounselingSession]:
        """Load a session row and lock it for the surrounding transaction."""
        try:
            return (
                self._build_query()
                .filter(CounselingSession.id == session_id)
                .with_for_update()
                .populate_existing()
                .first()
            )
        except SQLAlchemyError as e:
            self.logger.error(f"Error locking session {session_id}: {str(e)}")
            raise RepositoryException(f"Failed to load session: {str(e)}")

    def count_free_sessions(self, client_id: str, start: date, end: date) -> int:
        """
        Count zero-price, non-cancelled sessions with date in [start, end).

        Used by the student free-session quota.
        """
        query = self.db.query(CounselingSession).filter(
            CounselingSession.client_id == client_id,
            CounselingSession.date >= start,
            CounselingSession.date < end,
            CounselingSession.status != SessionStatus.CANCELLED.value,
            CounselingSession.price == 0,
        )
        try:
            return query.count()
        except SQLAlchemyError as e:
            self.logger.error(f"Error counting free sessions: {str(e)}")
            raise RepositoryException(f"Failed to count free sessions: {str(e)}")

    def get_client_sessions(self, client_id: str) -> List[CounselingSession]:
        """A client's sessions, newest date first."""
        query = (
            self._build_query()
            .options(joinedload(CounselingSession.professional))
            .filter(CounselingSession.client_id == client_id)
            .order_by(CounselingSession.date.desc(), CounselingSession.time.desc())
        )
        return self._execute_query(query)

    def get_professional_sessions(
        self, professional_id: str
    ) -> List[Tuple[CounselingSession, Optional[bool]]]:
        """
        A professional's sessions, each paired with the client's student flag.

        The flag is None when the client has no client profile.
        """
        try:
            return (
                self.db.query(CounselingSession, ClientProfile.is_student)
                .join(User, User.id == CounselingSession.client_id)
                .outerjoin(ClientProfile, ClientProfile.user_id == User.id)
                .options(joinedload(CounselingSession.client))
                .filter(CounselingSession.professional_id == professional_id)
                .order_by(CounselingSession.date.asc(), CounselingSession.time.asc())
                .all()
            )
        except SQLAlchemyError as e:
            self.logger.error(f"Error loading professional sessions: {str(e)}")
            raise RepositoryException(f"Failed to load sessions: {str(e)}")
