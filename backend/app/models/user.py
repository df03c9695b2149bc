# backend/app/models/user.py
"""
User model for the MindBridge platform.

A single users table holds clients, professionals (counselors,
psychiatrists, management-team members) and admins, differentiated by
the role column. Role-specific data lives in ClientProfile and
ProfessionalProfile.

Classes:
    User: Main user model for identity and role management
"""

import logging

from sqlalchemy import Boolean, CheckConstraint, Column, DateTime, String
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
import ulid

from ..core.enums import PROFESSIONAL_ROLES, RoleName
from ..database import Base

logger = logging.getLogger(__name__)


class User(Base):
    """
    Main user model.

    Attributes:
        id: ULID primary key
        email: Unique email address
        name: Display name
        role: One of RoleName values
        is_active: Whether the account may authenticate
        created_at: Registration timestamp; anchors the student quota window

    Relationships:
        client_profile: One-to-one with ClientProfile (clients only)
        professional_profile: One-to-one with ProfessionalProfile (professionals only)
    """

    __tablename__ = "users"

    id = Column(String(26), primary_key=True, index=True, default=lambda: str(ulid.ULID()))
    email = Column(String, unique=True, index=True, nullable=False)
    name = Column(String(100), nullable=False)
    role = Column(String(20), nullable=False, default=RoleName.CLIENT.value)
    is_active = Column(Boolean, nullable=False, default=True)
    created_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now())
    updated_at = Column(DateTime(timezone=True), onupdate=func.now())

    client_profile = relationship(
        "ClientProfile", back_populates="user", uselist=False, cascade="all, delete-orphan"
    )
    professional_profile = relationship(
        "ProfessionalProfile", back_populates="user", uselist=False, cascade="all, delete-orphan"
    )

    __table_args__ = (
        CheckConstraint(
            "role IN ('client', 'counselor', 'psychiatrist', 'mt_member', 'admin')",
            name="ck_users_role",
        ),
    )

    @property
    def is_client(self) -> bool:
        return self.role == RoleName.CLIENT.value

    @property
    def is_professional(self) -> bool:
        return self.role in {r.value for r in PROFESSIONAL_ROLES}

    @property
    def is_student(self) -> bool:
        """True when the user is a client flagged as a student."""
        return bool(self.client_profile is not None and self.client_profile.is_student)

    def __repr__(self) -> str:
        return f"<User {self.email} ({self.role})>"
