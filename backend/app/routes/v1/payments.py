# backend/app/routes/v1/payments.py
"""
Payment routes - API v1

Endpoints:
    POST / - Create a pending PayHere checkout
    POST /notify - PayHere server-to-server notification (form encoded, unauthenticated)
    GET /platform-fee - Whether the caller's platform fee is currently paid
"""

import asyncio
import logging
from typing import NoReturn

from fastapi import APIRouter, Depends, Form, HTTPException, Request, status
from fastapi.responses import PlainTextResponse

from ...api.dependencies.auth import get_current_active_user
from ...api.dependencies.services import get_payment_service
from ...core.exceptions import DomainException
from ...models.user import User
from ...schemas.payment import (
    PaymentCheckoutResponse,
    PaymentCreateRequest,
    PaymentResponse,
    PlatformFeeStatusResponse,
)
from ...services.payment_service import PaymentService

logger = logging.getLogger(__name__)

router = APIRouter(tags=["payments-v1"])


def handle_domain_exception(exc: DomainException) -> NoReturn:
    """Convert domain exceptions to HTTP exceptions."""
    if hasattr(exc, "to_http_exception"):
        raise exc.to_http_exception()
    raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail=str(exc))


@router.post("", response_model=PaymentCheckoutResponse, status_code=status.HTTP_201_CREATED)
async def create_payment(
    payload: PaymentCreateRequest,
    current_user: User = Depends(get_current_active_user),
    payment_service: PaymentService = Depends(get_payment_service),
) -> PaymentCheckoutResponse:
    """Record a pending checkout and return the hash for the PayHere SDK."""
    try:
        result = await asyncio.to_thread(
            payment_service.create_transaction,
            user_id=current_user.id,
            amount=payload.amount,
            currency=payload.currency,
            purpose=payload.purpose,
            session_data=payload.session_data,
        )
    except DomainException as e:
        handle_domain_exception(e)
    return PaymentCheckoutResponse(
        payment=PaymentResponse.model_validate(result["payment"]),
        hash=result["hash"],
        merchant_id=payment_service.gateway_config.merchant_id,
    )


@router.post("/notify", response_class=PlainTextResponse)
async def payment_notify(
    request: Request,
    merchant_id: str = Form(...),
    order_id: str = Form(...),
    payhere_amount: str = Form(...),
    payhere_currency: str = Form(...),
    status_code: int = Form(...),
    md5sig: str = Form(...),
    payment_service: PaymentService = Depends(get_payment_service),
) -> str:
    """PayHere notify_url callback."""
    form = await request.form()
    payload = {key: str(value) for key, value in form.items()}
    try:
        await asyncio.to_thread(
            payment_service.handle_gateway_notification,
            merchant_id=merchant_id,
            order_id=order_id,
            amount=payhere_amount,
            currency=payhere_currency,
            status_code=status_code,
            signature=md5sig,
            payload=payload,
        )
    except DomainException as e:
        logger.warning("Gateway notification for %s rejected: %s", order_id, e.message)
        handle_domain_exception(e)
    return "OK"


@router.get("/platform-fee", response_model=PlatformFeeStatusResponse)
async def get_platform_fee_status(
    current_user: User = Depends(get_current_active_user),
    payment_service: PaymentService = Depends(get_payment_service),
) -> PlatformFeeStatusResponse:
    status_data = await asyncio.to_thread(payment_service.get_platform_fee_status, current_user.id)
    return PlatformFeeStatusResponse(**status_data)
