# backend/app/api/dependencies/services.py
"""
Service layer dependencies for dependency injection.

This module provides factory functions that create service instances
with their required dependencies properly injected.
"""

import logging

from fastapi import Depends
from sqlalchemy.orm import Session

from ...core.config import settings
from ...services.availability_service import AvailabilityService
from ...services.notification_service import NotificationService
from ...services.payment_service import PaymentService
from ...services.session_service import SessionService
from ...services.student_quota_service import StudentQuotaService
from .database import get_db

logger = logging.getLogger(__name__)


def get_notification_service(db: Session = Depends(get_db)) -> NotificationService:
    return NotificationService(db)


def get_availability_service(db: Session = Depends(get_db)) -> AvailabilityService:
    """Get availability service instance for dependency injection."""
    return AvailabilityService(db)


def get_student_quota_service(db: Session = Depends(get_db)) -> StudentQuotaService:
    return StudentQuotaService(db)


def get_session_service(
    db: Session = Depends(get_db),
    notification_service: NotificationService = Depends(get_notification_service),
) -> SessionService:
    """Get session service instance for dependency injection."""
    return SessionService(db, notification_service=notification_service)


def get_payment_service(
    db: Session = Depends(get_db),
    notification_service: NotificationService = Depends(get_notification_service),
) -> PaymentService:
    """Payment service with merchant credentials read once from settings."""
    return PaymentService(
        db,
        gateway_config=settings.payment_gateway(),
        notification_service=notification_service,
    )
