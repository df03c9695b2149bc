"""
Database models for the MindBridge platform.

This module exports all SQLAlchemy models used in the application.
The models are organized by functionality:
- Users and role profiles
- Time slots and counseling sessions
- Notifications
- Payments
"""

from .client import ClientProfile
from .notification import Notification, NotificationType
from .payment import PaymentPurpose, PaymentStatus, PaymentTransaction
from .professional import ProfessionalProfile
from .session import CounselingSession, SessionStatus
from .time_slot import TimeSlot
from .user import User

__all__ = [
    "User",
    "ClientProfile",
    "ProfessionalProfile",
    "TimeSlot",
    "CounselingSession",
    "SessionStatus",
    "Notification",
    "NotificationType",
    "PaymentTransaction",
    "PaymentPurpose",
    "PaymentStatus",
]
