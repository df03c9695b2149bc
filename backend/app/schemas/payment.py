# backend/app/schemas/payment.py
"""Payment schemas for PayHere checkouts."""

from datetime import datetime
from decimal import Decimal
from typing import Any, Dict, Optional

from pydantic import Field, field_serializer

from ..models.payment import PaymentPurpose, PaymentStatus
from ._strict_base import StrictModel, StrictRequestModel


class PaymentCreateRequest(StrictRequestModel):
    amount: Decimal = Field(..., gt=0, max_digits=10, decimal_places=2)
    currency: Optional[str] = Field(None, min_length=3, max_length=3)
    purpose: PaymentPurpose = PaymentPurpose.SESSION
    session_data: Optional[Dict[str, Any]] = None


class PaymentResponse(StrictModel):
    id: str
    transaction_id: str
    user_id: str
    purpose: PaymentPurpose
    amount: Decimal
    currency: str
    status: PaymentStatus
    payment_date: Optional[datetime] = None

    @field_serializer("amount")
    def serialize_amount(self, amount: Decimal) -> str:
        return f"{amount:.2f}"


class PaymentCheckoutResponse(StrictModel):
    """Everything the client needs to open the PayHere checkout."""

    payment: PaymentResponse
    hash: str
    merchant_id: str


class PlatformFeeStatusResponse(StrictModel):
    is_active: bool
    paid_at: Optional[datetime] = None
    expires_at: Optional[datetime] = None
