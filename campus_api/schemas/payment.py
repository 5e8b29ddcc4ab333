"""Payment function schemas."""

from datetime import datetime
from typing import Any, Literal

from pydantic import BaseModel, Field

PaymentType = Literal["sms_topup", "subscription"]


class InitializePaymentRequest(BaseModel):
    """Body of the initialize-paystack-payment function.

    ``amount`` is in major currency units (cedis).
    """

    email: str | None = None
    amount: float | None = None
    metadata: dict[str, Any] | None = None


class InitializePaymentResponse(BaseModel):
    success: bool = True
    authorization_url: str
    access_code: str
    reference: str


class VerifyPaymentRequest(BaseModel):
    """Body of the verify-paystack-payment function."""

    reference: str | None = None
    seller_id: str | None = None


class PaymentVerificationResponse(BaseModel):
    """Outcome of a verified payment.

    SMS top-ups carry ``units``; subscriptions carry
    ``subscription_end_date``. ``already_processed`` is set when the
    reference had been settled by an earlier call and nothing was re-applied.
    """

    success: bool = True
    type: PaymentType
    message: str
    amount: float
    units: int | None = None
    subscription_end_date: datetime | None = None
    already_processed: bool = Field(default=False)
