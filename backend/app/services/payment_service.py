# backend/app/services/payment_service.py
"""
Payment Service for the MindBridge platform

PayHere checkout support:
- Pending transaction records and the checkout hash the client hands to PayHere
- Gateway notify handling (signature check, status update, user notification)
- Platform-fee status: a completed platform-fee payment unlocks booking
  for a fixed number of days

Merchant credentials are passed in as a PaymentGatewayConfig; this module
never reads them from the environment.
"""

from datetime import datetime, timedelta, timezone
from decimal import Decimal
import hashlib
import hmac
import logging
from typing import Any, Dict, Optional, Union

import pytz
from sqlalchemy.orm import Session

from ..core.config import PaymentGatewayConfig, settings
from ..core.exceptions import NotFoundException, ServiceException, ValidationException
from ..core.ulid_helper import generate_ulid
from ..models.payment import (
    PAYMENT_TRANSITIONS,
    PaymentPurpose,
    PaymentStatus,
    PaymentTransaction,
)
from ..monitoring.prometheus_metrics import prometheus_metrics
from ..repositories.factory import RepositoryFactory
from ..repositories.payment_repository import PaymentRepository
from .base import BaseService
from .notification_service import NotificationService

logger = logging.getLogger(__name__)

# PayHere notify status_code values
PAYHERE_STATUS_MAP = {
    2: PaymentStatus.COMPLETED,
    0: PaymentStatus.PENDING,
    -1: PaymentStatus.FAILED,  # cancelled by the customer
    -2: PaymentStatus.FAILED,
    -3: PaymentStatus.REFUNDED,  # charged back
}


def _md5_upper(value: str) -> str:
    return hashlib.md5(value.encode("utf-8")).hexdigest().upper()


def format_amount(amount: Union[Decimal, float, str]) -> str:
    """Amount with exactly two decimals, as PayHere expects."""
    return f"{Decimal(str(amount)):.2f}"


def calculate_payhere_hash(
    config: PaymentGatewayConfig, order_id: str, amount: Union[Decimal, float, str], currency: str
) -> str:
    """
    Checkout hash:
    upper(md5(merchant_id + order_id + amount + currency + upper(md5(secret))))
    """
    if not config.is_configured:
        raise ServiceException("Payment gateway is not configured", code="PAYMENT_NOT_CONFIGURED")
    secret_hash = _md5_upper(config.merchant_secret.get_secret_value())
    return _md5_upper(
        f"{config.merchant_id}{order_id}{format_amount(amount)}{currency}{secret_hash}"
    )


def calculate_notify_signature(
    config: PaymentGatewayConfig,
    order_id: str,
    amount: str,
    currency: str,
    status_code: int,
) -> str:
    """md5sig PayHere attaches to its server-to-server notification."""
    secret_hash = _md5_upper(config.merchant_secret.get_secret_value())
    return _md5_upper(f"{config.merchant_id}{order_id}{amount}{currency}{status_code}{secret_hash}")


class PaymentService(BaseService):
    """Service layer for gateway payments."""

    def __init__(
        self,
        db: Session,
        gateway_config: PaymentGatewayConfig,
        payment_repository: Optional[PaymentRepository] = None,
        notification_service: Optional[NotificationService] = None,
    ):
        super().__init__(db)
        self.gateway_config = gateway_config
        self.payment_repository = (
            payment_repository or RepositoryFactory.create_payment_repository(db)
        )
        self.notification_service = notification_service or NotificationService(db)

    @BaseService.measure_operation("create_transaction")
    def create_transaction(
        self,
        user_id: str,
        amount: Union[Decimal, float, str],
        currency: Optional[str] = None,
        purpose: Union[PaymentPurpose, str] = PaymentPurpose.SESSION,
        session_data: Optional[Dict[str, Any]] = None,
    ) -> Dict[str, Any]:
        """
        Record a pending checkout and compute its PayHere hash.

        Returns:
            {"payment": PaymentTransaction, "hash": str}
        """
        amount = Decimal(str(amount))
        if amount <= 0:
            raise ValidationException("Payment amount must be positive", code="INVALID_AMOUNT")
        purpose = PaymentPurpose(purpose)
        currency = (currency or self.gateway_config.default_currency).upper()

        order_id = generate_ulid()
        # Hash first so a misconfigured gateway leaves no pending row behind.
        checkout_hash = calculate_payhere_hash(self.gateway_config, order_id, amount, currency)

        with self.transaction():
            payment = self.payment_repository.create(
                transaction_id=order_id,
                user_id=user_id,
                purpose=purpose.value,
                amount=amount,
                currency=currency,
                status=PaymentStatus.PENDING.value,
                session_data=session_data,
            )

        prometheus_metrics.inc_payment(purpose.value, PaymentStatus.PENDING.value)
        self.log_operation(
            "create_transaction",
            user_id=user_id,
            transaction_id=order_id,
            purpose=purpose.value,
        )
        return {"payment": payment, "hash": checkout_hash}

    @BaseService.measure_operation("update_payment_status")
    def update_payment_status(
        self,
        transaction_id: str,
        status: Union[PaymentStatus, str],
        gateway_response: Optional[Dict[str, Any]] = None,
    ) -> PaymentTransaction:
        """
        Record a gateway outcome and notify the payer.

        Raises:
            NotFoundException: Unknown transaction id
        """
        status = PaymentStatus(status)
        with self.transaction():
            payment = self.payment_repository.get_by_transaction_id(
                transaction_id, for_update=True
            )
            if not payment:
                raise NotFoundException(
                    f"Payment with transaction ID {transaction_id} not found",
                    code="PAYMENT_NOT_FOUND",
                )
            current = PaymentStatus(payment.status)
            if status not in PAYMENT_TRANSITIONS[current]:
                self.logger.warning(
                    "Ignoring %s notification for payment %s already %s",
                    status.value,
                    transaction_id,
                    current.value,
                )
                return payment
            payment.status = status.value
            payment.gateway_response = gateway_response
            payment.payment_date = datetime.now(timezone.utc)

        prometheus_metrics.inc_payment(payment.purpose, status.value)
        self.log_operation(
            "update_payment_status", transaction_id=transaction_id, status=status.value
        )
        self._notify_outcome(payment, status)
        return payment

    def _notify_outcome(self, payment: PaymentTransaction, status: PaymentStatus) -> None:
        amount = f"{payment.currency} {format_amount(payment.amount)}"
        service = (
            "the platform fee"
            if payment.purpose == PaymentPurpose.PLATFORM_FEE.value
            else "your session"
        )
        if status == PaymentStatus.COMPLETED:
            self.notification_service.payment_successful(payment.user_id, amount, service)
        elif status == PaymentStatus.FAILED:
            self.notification_service.payment_failed(payment.user_id, amount, service)

    @BaseService.measure_operation("handle_gateway_notification")
    def handle_gateway_notification(
        self,
        merchant_id: str,
        order_id: str,
        amount: str,
        currency: str,
        status_code: int,
        signature: str,
        payload: Optional[Dict[str, Any]] = None,
    ) -> PaymentTransaction:
        """
        Verify a PayHere notify callback and apply its status.

        Raises:
            ValidationException: Bad merchant, bad signature or unknown status code
        """
        if merchant_id != self.gateway_config.merchant_id:
            raise ValidationException("Unknown merchant", code="INVALID_MERCHANT")
        expected = calculate_notify_signature(
            self.gateway_config, order_id, amount, currency, status_code
        )
        if not hmac.compare_digest(expected, (signature or "").upper()):
            self.logger.warning("Rejected gateway notification for %s: bad signature", order_id)
            raise ValidationException("Invalid payment signature", code="INVALID_SIGNATURE")
        if status_code not in PAYHERE_STATUS_MAP:
            raise ValidationException(
                f"Unknown payment status code {status_code}", code="INVALID_STATUS_CODE"
            )
        return self.update_payment_status(order_id, PAYHERE_STATUS_MAP[status_code], payload)

    @BaseService.measure_operation("get_platform_fee_status")
    def get_platform_fee_status(
        self, user_id: str, now: Optional[datetime] = None
    ) -> Dict[str, Any]:
        """
        Whether the user's platform fee is currently paid.

        Returns:
            {"is_active": bool, "paid_at": datetime | None, "expires_at": datetime | None}
        """
        payment = self.payment_repository.get_latest_completed_platform_fee(user_id)
        if not payment:
            return {"is_active": False, "paid_at": None, "expires_at": None}

        paid_at = payment.payment_date
        if paid_at.tzinfo is None:
            paid_at = pytz.UTC.localize(paid_at)
        expires_at = paid_at + timedelta(days=settings.platform_fee_validity_days)
        now = now or datetime.now(timezone.utc)
        return {"is_active": now < expires_at, "paid_at": paid_at, "expires_at": expires_at}
