"""
TutorMatch Backend — Payment Route Handlers (stubs)
=====================================================

What:  Payment-intent creation for a confirmed booking, and the webhook that
       marks bookings paid or refunded.

The webhook is authenticated by a shared secret in the X-Webhook-Secret
header rather than a bearer token; the caller is the payment provider.
"""

from fastapi import APIRouter, Depends, Header
from sqlalchemy.ext.asyncio import AsyncSession

from tutormatch.database import get_db_session
from tutormatch.dependencies import require_student
from tutormatch.schemas.common import ErrorResponse
from tutormatch.schemas.payment import (
    PaymentIntentCreate,
    PaymentIntentResponse,
    PaymentWebhookEvent,
    WebhookAck,
)
from tutormatch.security import Principal
from tutormatch.services.payment_service import payment_service

router = APIRouter(prefix="/api/payments", tags=["Payments"])


@router.post(
    "/intents",
    response_model=PaymentIntentResponse,
    responses={
        400: {"description": "Booking is not confirmed", "model": ErrorResponse},
        401: {"description": "Not the booking's student", "model": ErrorResponse},
        404: {"description": "Booking not found", "model": ErrorResponse},
        409: {"description": "Booking already paid", "model": ErrorResponse},
    },
    summary="Create a payment intent for a confirmed booking",
)
async def create_payment_intent(
    payload: PaymentIntentCreate,
    principal: Principal = Depends(require_student),
    db: AsyncSession = Depends(get_db_session),
) -> PaymentIntentResponse:
    return await payment_service.create_intent(db, principal, payload)


@router.post(
    "/webhook",
    response_model=WebhookAck,
    responses={
        401: {"description": "Bad webhook secret", "model": ErrorResponse},
        404: {"description": "Unknown transaction", "model": ErrorResponse},
    },
    summary="Payment provider webhook",
)
async def payment_webhook(
    event: PaymentWebhookEvent,
    x_webhook_secret: str | None = Header(default=None),
    db: AsyncSession = Depends(get_db_session),
) -> WebhookAck:
    return await payment_service.handle_webhook(db, event, x_webhook_secret)
