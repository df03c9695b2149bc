# backend/app/core/exceptions.py
"""
Domain-specific exceptions for the MindBridge platform.

These exceptions provide clear, business-focused error messages
that can be caught and handled appropriately at the API layer.
"""

from typing import Any, Dict, Optional

from fastapi import HTTPException, status


class DomainException(Exception):
    """Base exception for all domain-specific errors."""

    status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR

    def __init__(
        self,
        message: str,
        code: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None,
    ) -> None:
        self.message = message
        self.code = code or self.__class__.__name__
        self.details = details or {}
        super().__init__(self.message)

    def to_http_exception(self) -> HTTPException:
        """Convert to an HTTPException carrying the stable error payload."""
        return HTTPException(
            status_code=self.status_code,
            detail={
                "message": self.message,
                "code": self.code,
                "details": self.details,
            },
        )


class ValidationException(DomainException):
    """Raised when business validation fails."""

    status_code = status.HTTP_400_BAD_REQUEST


class NotFoundException(DomainException):
    """Raised when a requested resource is not found."""

    status_code = status.HTTP_404_NOT_FOUND


class ConflictException(DomainException):
    """Raised when there's a conflict with existing data."""

    status_code = status.HTTP_409_CONFLICT


class UnauthorizedException(DomainException):
    """Raised when user is not authenticated."""

    status_code = status.HTTP_401_UNAUTHORIZED


class ForbiddenException(DomainException):
    """Raised when user lacks permission for an action."""

    status_code = status.HTTP_403_FORBIDDEN


class ServiceException(DomainException):
    """Raised when a service operation fails."""

    def to_http_exception(self) -> HTTPException:
        # Internal failures never leak the underlying driver message.
        return HTTPException(
            status_code=self.status_code,
            detail={
                "message": "An error occurred processing your request",
                "code": self.code,
                "details": {},
            },
        )


# Specific business exceptions


class SlotNotAvailableException(ValidationException):
    """Raised when the requested time slot is closed or already booked."""

    def __init__(self, professional_id: str, slot_date: str, slot_time: str):
        super().__init__(
            message="Selected time slot is not available",
            code="SLOT_NOT_AVAILABLE",
            details={
                "professional_id": professional_id,
                "date": slot_date,
                "time": slot_time,
            },
        )


class LateCancellationException(ValidationException):
    """Raised when a cancellation comes inside the minimum notice window."""

    def __init__(self, required_hours: int, remaining_hours: float):
        super().__init__(
            message=(
                f"Too late to cancel: sessions can only be cancelled at least "
                f"{required_hours} hours in advance"
            ),
            code="LATE_CANCELLATION",
            details={
                "required_hours": required_hours,
                "remaining_hours": round(remaining_hours, 2),
            },
        )


class FreeSessionQuotaException(ValidationException):
    """Raised when a student has used every free session of the period."""

    def __init__(self, next_reset_date: str):
        super().__init__(
            message="No free sessions remaining for this period",
            code="FREE_SESSION_QUOTA_EXHAUSTED",
            details={"next_reset_date": next_reset_date},
        )


class RepositoryException(Exception):
    """
    Exception raised for repository layer errors.

    This exception is used when data access operations fail,
    such as database connection issues, query failures, or
    constraint violations.
    """
