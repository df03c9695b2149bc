# backend/app/core/enums.py
"""
Core enums for the MindBridge platform.

This module contains enumeration types used throughout the application
for type safety and consistency.
"""

from enum import Enum


class RoleName(str, Enum):
    """
    Roles a platform user can hold.

    Counselors, psychiatrists and management-team members are all
    professionals who can be booked for sessions.
    """

    CLIENT = "client"
    COUNSELOR = "counselor"
    PSYCHIATRIST = "psychiatrist"
    MT_MEMBER = "mt_member"
    ADMIN = "admin"


PROFESSIONAL_ROLES = frozenset({RoleName.COUNSELOR, RoleName.PSYCHIATRIST, RoleName.MT_MEMBER})
