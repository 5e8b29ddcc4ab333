"""Marketplace models: products, seller profiles and seller applications."""

import uuid
from datetime import datetime

from sqlalchemy import DateTime, Float, Integer, String, Text
from sqlalchemy.dialects.postgresql import JSON, UUID
from sqlalchemy.orm import Mapped, mapped_column

from campus_api.models.base import Base, TimestampMixin


class Product(Base, TimestampMixin):
    """A listing posted by a seller."""

    __tablename__ = "products"

    id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True),
        primary_key=True,
        default=uuid.uuid4,
    )
    seller_id: Mapped[str] = mapped_column(String(64), nullable=False, index=True)
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    price: Mapped[float] = mapped_column(Float, nullable=False)
    category: Mapped[str] = mapped_column(String(50), nullable=False)
    condition: Mapped[str] = mapped_column(String(20), nullable=False, default="used")
    images: Mapped[list] = mapped_column(JSON, nullable=False, default=list)
    is_active: Mapped[bool] = mapped_column(default=True)
    views: Mapped[int] = mapped_column(Integer, nullable=False, default=0)


class SellerProfile(Base, TimestampMixin):
    """Seller storefront and subscription window.

    Attributes:
        user_id: Owning user (one seller profile per user)
        subscription_status: 'inactive', 'active' or 'expired'
        subscription_start_date / subscription_end_date: Paid window
        last_payment_date / last_payment_amount / payment_reference:
            Most recent settled subscription payment
    """

    __tablename__ = "seller_profiles"

    id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True),
        primary_key=True,
        default=uuid.uuid4,
    )
    user_id: Mapped[str] = mapped_column(
        String(64),
        nullable=False,
        unique=True,
        index=True,
    )
    business_name: Mapped[str] = mapped_column(String(255), nullable=False)
    subscription_status: Mapped[str] = mapped_column(
        String(20),
        nullable=False,
        default="inactive",
    )
    subscription_start_date: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True),
        nullable=True,
    )
    subscription_end_date: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True),
        nullable=True,
    )
    last_payment_date: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True),
        nullable=True,
    )
    last_payment_amount: Mapped[float | None] = mapped_column(Float, nullable=True)
    payment_reference: Mapped[str | None] = mapped_column(String(100), nullable=True)

    def __repr__(self) -> str:
        return (
            f"<SellerProfile(user_id={self.user_id}, "
            f"status={self.subscription_status})>"
        )


class SellerApplication(Base, TimestampMixin):
    """A buyer's request to become a seller, reviewed by admins."""

    __tablename__ = "seller_applications"

    id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True),
        primary_key=True,
        default=uuid.uuid4,
    )
    user_id: Mapped[str] = mapped_column(String(64), nullable=False, index=True)
    business_name: Mapped[str] = mapped_column(String(255), nullable=False)
    business_category: Mapped[str | None] = mapped_column(String(100), nullable=True)
    status: Mapped[str] = mapped_column(String(20), nullable=False, default="pending")
