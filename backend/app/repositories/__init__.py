# backend/app/repositories/__init__.py
"""
Repository Pattern Implementation for the MindBridge platform

This package provides the repository layer for data access,
separating business logic from database queries.

Key Components:
- BaseRepository: Foundation for all repositories with generic CRUD operations
- RepositoryFactory: Factory for creating repository instances
- TimeSlotRepository: Slot generation, locking and the booking flip
- SessionRepository: Counseling sessions and the free-session count
- UserRepository: Users with their client/professional profiles
- NotificationRepository: Alert rows
- PaymentRepository: Gateway transactions

Usage:
    from app.repositories import RepositoryFactory

    # In a service:
    repository = RepositoryFactory.create_time_slot_repository(db)
    slots = repository.find_for_date(professional_id, slot_date)
"""

from .base_repository import BaseRepository
from .factory import RepositoryFactory
from .notification_repository import NotificationRepository
from .payment_repository import PaymentRepository
from .session_repository import SessionRepository
from .time_slot_repository import TimeSlotRepository
from .user_repository import UserRepository

__all__ = [
    "BaseRepository",
    "RepositoryFactory",
    "TimeSlotRepository",
    "SessionRepository",
    "UserRepository",
    "NotificationRepository",
    "PaymentRepository",
]
