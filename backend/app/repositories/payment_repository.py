"""
Payment Repository for the MindBridge platform

Implements data access operations for PayHere checkouts: pending
transaction records, gateway status updates, and the latest completed
platform-fee payment of a user.
"""

import logging
from typing import Optional

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from ..core.exceptions import RepositoryException
from ..models.payment import PaymentPurpose, PaymentStatus, PaymentTransaction
from .base_repository import BaseRepository

logger = logging.getLogger(__name__)


class PaymentRepository(BaseRepository[PaymentTransaction]):
    """Repository for payment transaction data access."""

    def __init__(self, db: Session):
        super().__init__(db, PaymentTransaction)

    def get_by_transaction_id(
        self, transaction_id: str, for_update: bool = False
    ) -> Optional[PaymentTransaction]:
        """Look up a payment by its gateway order id."""
        try:
            query = self._build_query().filter(
                PaymentTransaction.transaction_id == transaction_id
            )
            if for_update:
                query = query.with_for_update()
            return query.first()
        except SQLAlchemyError as e:
            self.logger.error(f"Error loading payment {transaction_id}: {str(e)}")
            raise RepositoryException(f"Failed to load payment: {str(e)}")

    def get_latest_completed_platform_fee(self, user_id: str) -> Optional[PaymentTransaction]:
        """Most recent completed platform-fee payment for a user."""
        try:
            return (
                self._build_query()
                .filter(
                    PaymentTransaction.user_id == user_id,
                    PaymentTransaction.purpose == PaymentPurpose.PLATFORM_FEE.value,
                    PaymentTransaction.status == PaymentStatus.COMPLETED.value,
                    PaymentTransaction.payment_date.isnot(None),
                )
                .order_by(PaymentTransaction.payment_date.desc())
                .first()
            )
        except SQLAlchemyError as e:
            self.logger.error(f"Error loading platform fee for {user_id}: {str(e)}")
            raise RepositoryException(f"Failed to load platform fee: {str(e)}")
