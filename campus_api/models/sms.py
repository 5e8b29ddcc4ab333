"""SMS scheduling and SMS credit top-up models."""

import uuid
from datetime import datetime

from sqlalchemy import DateTime, Float, Integer, String, Text
from sqlalchemy.dialects.postgresql import JSON, UUID
from sqlalchemy.orm import Mapped, mapped_column

from campus_api.models.base import Base, TimestampMixin


class ScheduledSms(Base, TimestampMixin):
    """A bulk SMS queued by an admin for later delivery."""

    __tablename__ = "scheduled_sms"

    id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True),
        primary_key=True,
        default=uuid.uuid4,
    )
    created_by: Mapped[str] = mapped_column(String(64), nullable=False, index=True)
    message: Mapped[str] = mapped_column(Text, nullable=False)
    recipients: Mapped[list] = mapped_column(JSON, nullable=False, default=list)
    scheduled_for: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
    )
    status: Mapped[str] = mapped_column(String(20), nullable=False, default="pending")


class SmsTopup(Base, TimestampMixin):
    """Settlement record for a purchased block of SMS units.

    ``payment_reference`` is unique: a gateway reference settles at most once.
    """

    __tablename__ = "sms_topups"

    id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True),
        primary_key=True,
        default=uuid.uuid4,
    )
    admin_id: Mapped[str] = mapped_column(String(64), nullable=False, index=True)
    units: Mapped[int] = mapped_column(Integer, nullable=False)
    amount: Mapped[float] = mapped_column(Float, nullable=False)
    payment_reference: Mapped[str] = mapped_column(
        String(100),
        nullable=False,
        unique=True,
    )
    status: Mapped[str] = mapped_column(String(20), nullable=False, default="success")

    def __repr__(self) -> str:
        return f"<SmsTopup(reference={self.payment_reference}, units={self.units})>"
