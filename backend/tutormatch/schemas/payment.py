"""
TutorMatch Backend — Payment Schemas
======================================

Payment intents are stubs: the backend computes the amount and issues an
intent id, but never talks to a payment provider. The webhook payload is a
flattened version of the provider event (type + intent id).
"""

import uuid

from pydantic import BaseModel, ConfigDict, Field


class PaymentIntentCreate(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    booking_id: uuid.UUID = Field(alias="bookingId")


class PaymentIntentResponse(BaseModel):
    transaction_id: str
    booking_id: uuid.UUID
    amount: int = Field(description="Amount in the currency's minor unit")
    currency: str
    status: str = "requires_payment"


class PaymentWebhookEvent(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    type: str = Field(min_length=1)
    transaction_id: str = Field(alias="transactionId", min_length=1)


class WebhookAck(BaseModel):
    received: bool = True
