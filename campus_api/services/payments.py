"""Payment initialization and verification.

A verified transaction settles into exactly one record, chosen by the
``type`` tag the client put in the transaction metadata:

- ``sms_topup``: an ``SmsTopup`` row crediting SMS units
- anything else: a ``SubscriptionPayment`` row, plus the seller's
  subscription window moved forward

Settlement rows are unique on the gateway reference. Verifying a
reference that has already settled returns the stored outcome and
applies nothing again.
"""

import calendar
import json
from datetime import UTC, datetime, timedelta
from typing import Any

from sqlalchemy import select, update
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from campus_api.config import settings
from campus_api.core.errors import (
    ConfigurationError,
    PaymentGatewayError,
    PersistenceError,
    ValidationError,
)
from campus_api.integrations.paystack import PaystackClient, to_major_units
from campus_api.logging_config import get_logger
from campus_api.models.marketplace import SellerApplication, SellerProfile
from campus_api.models.sms import SmsTopup
from campus_api.models.subscription_payment import SubscriptionPayment
from campus_api.schemas.payment import (
    InitializePaymentResponse,
    PaymentVerificationResponse,
)

logger = get_logger(__name__)

SMS_TOPUP = "sms_topup"
SUBSCRIPTION = "subscription"

SUBSCRIPTION_TAG = "seller_monthly"


def add_months(moment: datetime, months: int) -> datetime:
    """Shift ``moment`` by whole calendar months.

    The day is clamped to the length of the target month
    (Jan 31 + 1 month = Feb 28, or 29 in leap years).
    """
    month_index = moment.month - 1 + months
    year = moment.year + month_index // 12
    month = month_index % 12 + 1
    day = min(moment.day, calendar.monthrange(year, month)[1])
    return moment.replace(year=year, month=month, day=day)


def subscription_window(start: datetime) -> tuple[datetime, datetime]:
    """Paid period starting at ``start``: the billing period plus grace days."""
    end = add_months(start, settings.subscription_period_months) + timedelta(
        days=settings.subscription_grace_days
    )
    return start, end


def _transaction_metadata(data: dict[str, Any]) -> dict[str, Any]:
    """Metadata as a dict. Paystack may echo it back JSON-encoded or empty."""
    metadata = data.get("metadata")
    if isinstance(metadata, str):
        try:
            metadata = json.loads(metadata)
        except ValueError:
            return {}
    return metadata if isinstance(metadata, dict) else {}


async def initialize_payment(
    email: str | None,
    amount: float | None,
    metadata: dict[str, Any] | None,
    gateway: PaystackClient | None,
) -> InitializePaymentResponse:
    """Open a Paystack checkout and return where to send the payer.

    Raises:
        ValidationError: If email or a positive amount is missing.
        ConfigurationError: If no Paystack secret key is configured.
        PaymentGatewayError: If Paystack refuses the transaction.
    """
    if not email or not amount:
        raise ValidationError("Missing required fields")
    if amount <= 0:
        raise ValidationError("Amount must be greater than zero")
    if gateway is None:
        raise ConfigurationError("Paystack not configured")

    body = await gateway.initialize_transaction(
        email=email,
        amount=amount,
        currency=settings.payment_currency,
        metadata={**(metadata or {}), "subscription_type": SUBSCRIPTION_TAG},
    )

    data = body.get("data") or {}
    if not body.get("status") or not data.get("authorization_url"):
        raise PaymentGatewayError("Payment initialization failed", details=body)

    logger.info("Payment initialized", reference=data.get("reference"))
    return InitializePaymentResponse(
        authorization_url=data["authorization_url"],
        access_code=data.get("access_code", ""),
        reference=data.get("reference", ""),
    )


async def find_settlement(
    reference: str,
    payer_id: str,
    db: AsyncSession,
) -> PaymentVerificationResponse | None:
    """Return the stored outcome for an already settled reference, if any.

    Raises:
        ValidationError: If the reference was settled for a different
            seller or admin than ``payer_id``.
    """
    result = await db.execute(
        select(SubscriptionPayment).where(
            SubscriptionPayment.payment_reference == reference
        )
    )
    payment = result.scalar_one_or_none()
    if payment is not None:
        _check_payer(reference, payment.seller_id, payer_id)
        return PaymentVerificationResponse(
            type=SUBSCRIPTION,
            message="Payment already verified",
            amount=payment.amount,
            subscription_end_date=payment.subscription_end_date,
            already_processed=True,
        )

    result = await db.execute(
        select(SmsTopup).where(SmsTopup.payment_reference == reference)
    )
    topup = result.scalar_one_or_none()
    if topup is not None:
        _check_payer(reference, topup.admin_id, payer_id)
        return PaymentVerificationResponse(
            type=SMS_TOPUP,
            message="Payment already verified",
            amount=topup.amount,
            units=topup.units,
            already_processed=True,
        )

    return None


def _check_payer(reference: str, settled_for: str, payer_id: str) -> None:
    if settled_for != payer_id:
        logger.warning(
            "Settled reference presented by another account",
            reference=reference,
            payer_id=payer_id,
        )
        raise ValidationError("Payment reference belongs to another account")


async def _settled_by_concurrent_call(
    reference: str,
    payer_id: str,
    db: AsyncSession,
    exc: IntegrityError,
) -> PaymentVerificationResponse:
    """Resolve a unique-violation race on the reference."""
    await db.rollback()
    existing = await find_settlement(reference, payer_id, db)
    if existing is None:
        raise PersistenceError(
            "Failed to record payment",
            details=str(exc.orig),
        ) from exc
    logger.info("Payment settled by a concurrent call", reference=reference)
    return existing


def _topup_units(metadata: dict[str, Any]) -> int:
    """SMS units bought, as tagged on the transaction by the top-up screen."""
    try:
        units = int(metadata.get("units") or 0)
    except (TypeError, ValueError) as exc:
        raise PaymentGatewayError(
            "Invalid SMS units in payment metadata",
            details=metadata,
        ) from exc
    if units < 0:
        raise PaymentGatewayError(
            "Invalid SMS units in payment metadata",
            details=metadata,
        )
    return units


async def _settle_sms_topup(
    reference: str,
    seller_id: str,
    amount: float,
    metadata: dict[str, Any],
    db: AsyncSession,
) -> PaymentVerificationResponse:
    units = _topup_units(metadata)
    admin_id = str(metadata.get("admin_id") or seller_id)

    db.add(
        SmsTopup(
            admin_id=admin_id,
            units=units,
            amount=amount,
            payment_reference=reference,
            status="success",
        )
    )
    try:
        await db.commit()
    except IntegrityError as exc:
        return await _settled_by_concurrent_call(reference, admin_id, db, exc)
    except SQLAlchemyError as exc:
        await db.rollback()
        logger.error("SMS top-up record error", reference=reference, error=str(exc))
        raise PersistenceError("Failed to record SMS top-up", details=str(exc)) from exc

    logger.info(
        "SMS top-up settled",
        reference=reference,
        admin_id=admin_id,
        units=units,
        amount=amount,
    )
    return PaymentVerificationResponse(
        type=SMS_TOPUP,
        message=f"Payment verified. {units} SMS units added",
        amount=amount,
        units=units,
    )


async def _settle_subscription(
    reference: str,
    seller_id: str,
    amount: float,
    data: dict[str, Any],
    db: AsyncSession,
) -> PaymentVerificationResponse:
    start, end = subscription_window(datetime.now(UTC))

    db.add(
        SubscriptionPayment(
            seller_id=seller_id,
            amount=amount,
            currency=data.get("currency") or settings.payment_currency,
            payment_reference=reference,
            payment_status="success",
            payment_method="paystack",
            subscription_start_date=start,
            subscription_end_date=end,
            gateway_data=data,
        )
    )
    try:
        await db.flush()
    except IntegrityError as exc:
        return await _settled_by_concurrent_call(reference, seller_id, db, exc)
    except SQLAlchemyError as exc:
        await db.rollback()
        logger.error("Payment record error", reference=reference, error=str(exc))
        raise PersistenceError("Failed to record payment", details=str(exc)) from exc

    try:
        result = await db.execute(
            update(SellerProfile)
            .where(SellerProfile.user_id == seller_id)
            .values(
                subscription_status="active",
                subscription_start_date=start,
                subscription_end_date=end,
                last_payment_date=start,
                last_payment_amount=amount,
                payment_reference=reference,
            )
        )
    except SQLAlchemyError as exc:
        await db.rollback()
        logger.error("Profile update error", seller_id=seller_id, error=str(exc))
        raise PersistenceError(
            "Failed to update subscription",
            details=str(exc),
        ) from exc

    if result.rowcount == 0:
        logger.warning(
            "Subscription paid for seller without a seller profile",
            seller_id=seller_id,
            reference=reference,
        )

    # Paying approves a pending application; a failure here is not fatal
    try:
        async with db.begin_nested():
            await db.execute(
                update(SellerApplication)
                .where(SellerApplication.user_id == seller_id)
                .where(SellerApplication.status == "pending")
                .values(status="approved")
            )
    except SQLAlchemyError as exc:
        logger.warning(
            "Could not approve pending seller application",
            seller_id=seller_id,
            error=str(exc),
        )

    try:
        await db.commit()
    except SQLAlchemyError as exc:
        await db.rollback()
        logger.error("Payment commit error", reference=reference, error=str(exc))
        raise PersistenceError("Failed to record payment", details=str(exc)) from exc

    logger.info(
        "Subscription settled",
        reference=reference,
        seller_id=seller_id,
        amount=amount,
        subscription_end_date=end.isoformat(),
    )
    return PaymentVerificationResponse(
        type=SUBSCRIPTION,
        message="Payment verified and subscription activated",
        amount=amount,
        subscription_end_date=end,
    )


async def verify_payment(
    reference: str | None,
    seller_id: str | None,
    db: AsyncSession,
    gateway: PaystackClient | None,
) -> PaymentVerificationResponse:
    """Verify a transaction with Paystack and settle it.

    Raises:
        ValidationError: If reference or seller_id is missing, or the
            reference was already settled for another account.
        ConfigurationError: If no Paystack secret key is configured.
        PaymentGatewayError: If Paystack does not report the transaction
            as successful (``details`` holds the gateway body), or an SMS
            top-up carries unusable units.
        PersistenceError: If the settlement could not be written.
    """
    if not reference or not seller_id:
        raise ValidationError("Missing reference or seller_id")
    if gateway is None:
        raise ConfigurationError("Paystack not configured")

    existing = await find_settlement(reference, seller_id, db)
    if existing is not None:
        logger.info("Payment reference already settled", reference=reference)
        return existing
    # Release the lookup transaction before waiting on the gateway
    await db.rollback()

    body = await gateway.verify_transaction(reference)
    data = body.get("data")
    if not body.get("status") or not isinstance(data, dict) or data.get(
        "status"
    ) != "success":
        logger.warning("Payment verification failed", reference=reference)
        raise PaymentGatewayError("Payment verification failed", details=body)

    amount = to_major_units(data.get("amount") or 0)
    metadata = _transaction_metadata(data)

    if metadata.get("type") == SMS_TOPUP:
        return await _settle_sms_topup(reference, seller_id, amount, metadata, db)
    return await _settle_subscription(reference, seller_id, amount, data, db)
