# backend/app/models/payment.py
"""
Payment models for the MindBridge platform.

PaymentTransaction records a checkout handed to the PayHere gateway,
either for a session or for the platform fee that unlocks booking.
"""

from enum import Enum

from sqlalchemy import (
    CheckConstraint,
    Column,
    DateTime,
    ForeignKey,
    Index,
    Numeric,
    String,
)
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
from sqlalchemy.types import JSON
import ulid

from ..database import Base


class PaymentPurpose(str, Enum):
    SESSION = "session"
    PLATFORM_FEE = "platform_fee"


class PaymentStatus(str, Enum):
    PENDING = "pending"
    COMPLETED = "completed"
    FAILED = "failed"
    REFUNDED = "refunded"


# Gateway outcomes a payment may move to. Replays and late notifies outside
# this table leave the row as it is.
PAYMENT_TRANSITIONS = {
    PaymentStatus.PENDING: frozenset(
        {PaymentStatus.COMPLETED, PaymentStatus.FAILED, PaymentStatus.REFUNDED}
    ),
    PaymentStatus.COMPLETED: frozenset({PaymentStatus.REFUNDED}),
    PaymentStatus.FAILED: frozenset(),
    PaymentStatus.REFUNDED: frozenset(),
}


class PaymentTransaction(Base):
    """
    Gateway checkout and its outcome.

    transaction_id doubles as the PayHere order id; gateway_response
    stores the raw notify payload for audit.
    """

    __tablename__ = "payment_transactions"

    id = Column(String(26), primary_key=True, default=lambda: str(ulid.ULID()))
    transaction_id = Column(String(64), nullable=False, unique=True, index=True)
    user_id = Column(String(26), ForeignKey("users.id"), nullable=False, index=True)
    purpose = Column(String(20), nullable=False, default=PaymentPurpose.SESSION.value)
    amount = Column(Numeric(10, 2), nullable=False)
    currency = Column(String(3), nullable=False, default="LKR")
    status = Column(String(20), nullable=False, default=PaymentStatus.PENDING.value)
    payment_date = Column(DateTime(timezone=True), nullable=True)
    session_data = Column(JSON, nullable=True)
    gateway_response = Column(JSON, nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), onupdate=func.now())

    user = relationship("User", foreign_keys=[user_id])

    __table_args__ = (
        CheckConstraint(
            "status IN ('pending', 'completed', 'failed', 'refunded')",
            name="ck_payment_transactions_status",
        ),
        CheckConstraint(
            "purpose IN ('session', 'platform_fee')",
            name="ck_payment_transactions_purpose",
        ),
        CheckConstraint("amount >= 0", name="ck_payment_transactions_amount"),
        Index("ix_payment_transactions_user_purpose_status", "user_id", "purpose", "status"),
    )

    def __repr__(self) -> str:
        return f"<PaymentTransaction {self.transaction_id} {self.status}>"
