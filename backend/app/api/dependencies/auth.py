# backend/app/api/dependencies/auth.py
"""
Authentication and authorization dependencies.

User lookups run in a worker thread so the sync SQLAlchemy session never
blocks the event loop.
"""

import asyncio
import logging

from fastapi import Depends
from sqlalchemy.orm import Session

from ...auth import get_current_user_id
from ...core.exceptions import ForbiddenException, UnauthorizedException
from ...models.user import User
from ...repositories.factory import RepositoryFactory
from .database import get_db

logger = logging.getLogger(__name__)


async def get_current_active_user(
    user_id: str = Depends(get_current_user_id),
    db: Session = Depends(get_db),
) -> User:
    """
    Load the authenticated, active user.

    Raises:
        UnauthorizedException: if the user is unknown or deactivated
    """
    repo = RepositoryFactory.create_user_repository(db)
    user = await asyncio.to_thread(repo.get_active_user, user_id)
    if user is None:
        logger.info("Token for unknown or inactive user %s", user_id)
        raise UnauthorizedException("Not authenticated", code="NOT_AUTHENTICATED")
    return user


async def require_professional(current_user: User = Depends(get_current_active_user)) -> User:
    """Only counselors, psychiatrists and management-team members pass."""
    if not current_user.is_professional:
        raise ForbiddenException("Professional role required", code="PROFESSIONAL_REQUIRED")
    return current_user


async def require_client(current_user: User = Depends(get_current_active_user)) -> User:
    if not current_user.is_client:
        raise ForbiddenException("Client role required", code="CLIENT_REQUIRED")
    return current_user
