"""Profile model.

One row per identity, keyed by the identity provider's user id.
"""

import enum

from sqlalchemy import Enum, String
from sqlalchemy.orm import Mapped, mapped_column

from campus_api.models.base import Base, TimestampMixin


class ProfileRole(str, enum.Enum):
    """Marketplace roles.

    - BUYER: default role assigned at registration
    - SELLER: approved seller with an active or lapsed subscription
    - NEWS_PUBLISHER: may publish campus news
    - ADMIN / SUPER_ADMIN: back-office access
    """

    BUYER = "buyer"
    SELLER = "seller"
    NEWS_PUBLISHER = "news_publisher"
    ADMIN = "admin"
    SUPER_ADMIN = "super_admin"


class Profile(Base, TimestampMixin):
    """Application profile for a user identity.

    Attributes:
        id: Identity provider user id (shared identifier)
        email: Login email, copied from the identity
        full_name: Display name
        student_id, department, faculty, phone: Optional campus attributes
        role: Marketplace role
        is_active: Whether the account is active
    """

    __tablename__ = "profiles"

    id: Mapped[str] = mapped_column(String(64), primary_key=True)
    email: Mapped[str] = mapped_column(String(255), nullable=False, index=True)
    full_name: Mapped[str] = mapped_column(String(255), nullable=False)
    student_id: Mapped[str | None] = mapped_column(String(50), nullable=True)
    department: Mapped[str | None] = mapped_column(String(255), nullable=True)
    faculty: Mapped[str | None] = mapped_column(String(255), nullable=True)
    phone: Mapped[str | None] = mapped_column(String(30), nullable=True)
    role: Mapped[ProfileRole] = mapped_column(
        Enum(
            ProfileRole,
            name="profilerole",
            create_type=False,  # Created in migration
            values_callable=lambda e: [member.value for member in e],
        ),
        nullable=False,
        default=ProfileRole.BUYER,
    )
    is_active: Mapped[bool] = mapped_column(default=True)

    def __repr__(self) -> str:
        return f"<Profile {self.email} ({self.role.value})>"
