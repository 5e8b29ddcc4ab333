"""Payment functions: initialize-paystack-payment and verify-paystack-payment."""

from fastapi import APIRouter, Depends, status
from fastapi.responses import JSONResponse
from sqlalchemy.ext.asyncio import AsyncSession

from campus_api.core.clients import get_payment_gateway
from campus_api.core.errors import FunctionError
from campus_api.database import get_db
from campus_api.integrations.paystack import PaystackClient
from campus_api.logging_config import get_logger
from campus_api.schemas.payment import (
    InitializePaymentRequest,
    InitializePaymentResponse,
    PaymentVerificationResponse,
    VerifyPaymentRequest,
)
from campus_api.services.payments import initialize_payment, verify_payment

logger = get_logger(__name__)

router = APIRouter(prefix="/functions/v1", tags=["payments"])


def _error_response(exc: Exception) -> JSONResponse:
    if isinstance(exc, FunctionError):
        return JSONResponse(status_code=exc.status_code, content=exc.to_payload())
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={"error": str(exc)},
    )


@router.post(
    "/initialize-paystack-payment",
    response_model=InitializePaymentResponse,
)
async def initialize_paystack_payment(
    body: InitializePaymentRequest,
    gateway: PaystackClient | None = Depends(get_payment_gateway),
) -> InitializePaymentResponse | JSONResponse:
    """Start a Paystack checkout for a seller subscription or SMS top-up."""
    try:
        return await initialize_payment(body.email, body.amount, body.metadata, gateway)
    except FunctionError as exc:
        return _error_response(exc)
    except Exception as exc:
        logger.exception("initialize-paystack-payment failed")
        return _error_response(exc)


@router.post(
    "/verify-paystack-payment",
    response_model=PaymentVerificationResponse,
    response_model_exclude_none=True,
)
async def verify_paystack_payment(
    body: VerifyPaymentRequest,
    db: AsyncSession = Depends(get_db),
    gateway: PaystackClient | None = Depends(get_payment_gateway),
) -> PaymentVerificationResponse | JSONResponse:
    """Verify a Paystack transaction and settle it.

    Responds with ``type`` 'sms_topup' or 'subscription'.
    """
    try:
        return await verify_payment(body.reference, body.seller_id, db, gateway)
    except FunctionError as exc:
        return _error_response(exc)
    except Exception as exc:
        logger.exception("verify-paystack-payment failed", reference=body.reference)
        return _error_response(exc)
