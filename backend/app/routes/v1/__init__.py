# backend/app/routes/v1/__init__.py
"""
API v1 Routes

Versioned API endpoints under /api/v1.
"""

from . import health, payments, professionals, prometheus, sessions

__all__ = [
    "health",
    "payments",
    "professionals",
    "prometheus",
    "sessions",
]
