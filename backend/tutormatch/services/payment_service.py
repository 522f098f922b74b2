"""
TutorMatch Backend — Payment Service (stub)
=============================================

What:  Issues payment intents for confirmed bookings and applies payment
       webhook events to booking.payment_status.
Who:   Called by routes/payments.py.

No payment provider is contacted. An intent is a locally generated id
("pi_<hex>") stored on the booking as transaction_id together with the
computed amount; a provider integration would replace create_intent()'s
id generation and keep the rest. While payment is pending, repeated calls
return the stored intent, so a webhook for it still finds the booking. A
refunded booking gets a fresh intent.

Amount:
    price is hourly, in major units of settings.payment_currency.
    amount (minor units) = round(price × minutes / 60 × 100)
    e.g. 500.0/h for a 90-minute slot → 75000

Webhook events:
    payment_intent.succeeded → payment_status = "paid"
    charge.refunded          → payment_status = "refunded"
    anything else            → acknowledged, no change
"""

import hmac
import logging
import uuid
from typing import Optional

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from tutormatch.config import settings
from tutormatch.exceptions import ConflictError, NotFoundError, UnauthorizedError, ValidationError
from tutormatch.models import Booking, Tutor
from tutormatch.models.booking import CONFIRMED, PAYMENT_PAID, PAYMENT_PENDING, PAYMENT_REFUNDED
from tutormatch.schemas.payment import (
    PaymentIntentCreate,
    PaymentIntentResponse,
    PaymentWebhookEvent,
    WebhookAck,
)
from tutormatch.security import Principal

logger = logging.getLogger(__name__)

WEBHOOK_EVENT_STATUS = {
    "payment_intent.succeeded": PAYMENT_PAID,
    "charge.refunded": PAYMENT_REFUNDED,
}


def compute_amount(price: float, minutes: int) -> int:
    """Session price in minor currency units."""
    return int(round(price * minutes / 60 * 100))


class PaymentService:

    async def create_intent(
        self, db: AsyncSession, principal: Principal, payload: PaymentIntentCreate
    ) -> PaymentIntentResponse:
        """
        Create a payment intent for one of the student's confirmed bookings.

        Raises:
            NotFoundError: booking does not exist
            UnauthorizedError: booking belongs to another student
            ValidationError: booking is not confirmed
            ConflictError: booking already paid
        """
        result = await db.execute(
            select(Booking).where(Booking.id == payload.booking_id).with_for_update()
        )
        booking = result.scalar_one_or_none()
        if booking is None:
            raise NotFoundError(resource="booking", resource_id=str(payload.booking_id))
        if not principal.is_student(booking.student_id):
            raise UnauthorizedError("Not authorized")
        if booking.status != CONFIRMED:
            raise ValidationError("Booking is not confirmed", field="booking_id")
        if booking.payment_status == PAYMENT_PAID:
            raise ConflictError("Booking is already paid")

        tutor = await db.get(Tutor, booking.tutor_id)
        amount = compute_amount(tutor.price, booking.duration_minutes)

        if booking.transaction_id and booking.payment_status == PAYMENT_PENDING:
            # An outstanding intent is still what the webhook will report
            logger.info(
                "Reusing payment intent %s for booking %s", booking.transaction_id, booking.id
            )
            return PaymentIntentResponse(
                transaction_id=booking.transaction_id,
                booking_id=booking.id,
                amount=amount,
                currency=settings.payment_currency,
            )

        booking.transaction_id = f"pi_{uuid.uuid4().hex}"
        await db.flush()

        logger.info(
            "Payment intent %s for booking %s: %d %s",
            booking.transaction_id, booking.id, amount, settings.payment_currency,
        )
        return PaymentIntentResponse(
            transaction_id=booking.transaction_id,
            booking_id=booking.id,
            amount=amount,
            currency=settings.payment_currency,
        )

    def verify_webhook_secret(self, provided: Optional[str]) -> None:
        """
        Constant-time comparison against settings.payment_webhook_secret.
        An unset secret rejects every webhook.
        """
        expected = settings.payment_webhook_secret
        if not expected or not provided or not hmac.compare_digest(
            provided.encode("utf-8"), expected.encode("utf-8")
        ):
            raise UnauthorizedError("Invalid webhook signature")

    async def handle_webhook(
        self, db: AsyncSession, event: PaymentWebhookEvent, secret: Optional[str]
    ) -> WebhookAck:
        self.verify_webhook_secret(secret)

        new_status = WEBHOOK_EVENT_STATUS.get(event.type)
        if new_status is None:
            logger.info("Ignoring payment webhook event type '%s'", event.type)
            return WebhookAck()

        result = await db.execute(
            select(Booking)
            .where(Booking.transaction_id == event.transaction_id)
            .with_for_update()
        )
        booking = result.scalar_one_or_none()
        if booking is None:
            raise NotFoundError(resource="booking", resource_id=event.transaction_id)

        previous = booking.payment_status
        booking.payment_status = new_status
        await db.flush()
        logger.info(
            "Booking %s payment %s -> %s (%s)",
            booking.id, previous, new_status, event.type,
        )
        return WebhookAck()


payment_service = PaymentService()
