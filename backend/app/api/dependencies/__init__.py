# backend/app/api/dependencies/__init__.py
"""
Central export point for all dependencies.

This module re-exports all dependencies from submodules
for convenient access throughout the application.
"""

from .auth import get_current_active_user, require_client, require_professional
from .database import get_db
from .services import (
    get_availability_service,
    get_notification_service,
    get_payment_service,
    get_session_service,
    get_student_quota_service,
)

__all__ = [
    # Auth
    "get_current_active_user",
    "require_client",
    "require_professional",
    # Database
    "get_db",
    # Services
    "get_availability_service",
    "get_notification_service",
    "get_payment_service",
    "get_session_service",
    "get_student_quota_service",
]
