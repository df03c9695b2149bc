# backend/app/repositories/user_repository.py
"""
User Repository for the MindBridge platform

Handles User data access plus the role profiles hanging off it:
client profiles (student flag) and professional profiles (accepting
bookings flag).
"""

import logging
from typing import Optional

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, joinedload

from ..core.exceptions import RepositoryException
from ..models.client import ClientProfile
from ..models.professional import ProfessionalProfile
from ..models.user import User
from .base_repository import BaseRepository

logger = logging.getLogger(__name__)


class UserRepository(BaseRepository[User]):
    """Repository for User data access."""

    def __init__(self, db: Session):
        super().__init__(db, User)

    def get_by_id(self, id: str) -> Optional[User]:
        """Get user by ID with both role profiles eagerly loaded."""
        if id is None:
            return None
        try:
            return (
                self.db.query(User)
                .options(joinedload(User.client_profile), joinedload(User.professional_profile))
                .filter(User.id == str(id))
                .first()
            )
        except SQLAlchemyError as e:
            self.logger.error(f"Error getting user by ID {id}: {str(e)}")
            raise RepositoryException(f"Failed to retrieve user: {str(e)}")

    def get_active_user(self, user_id: str) -> Optional[User]:
        """User by id, only when the account is active."""
        user = self.get_by_id(user_id)
        if user is None or not user.is_active:
            return None
        return user

    # ==========================================
    # Role profiles
    # ==========================================

    def get_professional_profile(self, user_id: str) -> Optional[ProfessionalProfile]:
        try:
            return (
                self.db.query(ProfessionalProfile)
                .filter(ProfessionalProfile.user_id == user_id)
                .first()
            )
        except SQLAlchemyError as e:
            self.logger.error(f"Error getting professional profile {user_id}: {str(e)}")
            raise RepositoryException(f"Failed to retrieve professional: {str(e)}")

    def get_client_profile(self, user_id: str) -> Optional[ClientProfile]:
        try:
            return self.db.query(ClientProfile).filter(ClientProfile.user_id == user_id).first()
        except SQLAlchemyError as e:
            self.logger.error(f"Error getting client profile {user_id}: {str(e)}")
            raise RepositoryException(f"Failed to retrieve client: {str(e)}")

    def is_student(self, user_id: str) -> bool:
        profile = self.get_client_profile(user_id)
        return bool(profile is not None and profile.is_student)
