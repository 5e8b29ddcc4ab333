"""Create profiles table.

Revision ID: 0001_profiles
Revises:
Create Date: 2026-10-19

"""

from collections.abc import Sequence

import sqlalchemy as sa
from alembic import op
from sqlalchemy.dialects import postgresql

# revision identifiers, used by Alembic.
revision: str = "0001_profiles"
down_revision: str | None = None
branch_labels: str | Sequence[str] | None = None
depends_on: str | Sequence[str] | None = None

PROFILE_ROLES = ("buyer", "seller", "news_publisher", "admin", "super_admin")


def upgrade() -> None:
    profile_role = postgresql.ENUM(*PROFILE_ROLES, name="profilerole")
    profile_role.create(op.get_bind())

    op.create_table(
        "profiles",
        sa.Column("id", sa.String(length=64), nullable=False),
        sa.Column("email", sa.String(length=255), nullable=False),
        sa.Column("full_name", sa.String(length=255), nullable=False),
        sa.Column("student_id", sa.String(length=50), nullable=True),
        sa.Column("department", sa.String(length=255), nullable=True),
        sa.Column("faculty", sa.String(length=255), nullable=True),
        sa.Column("phone", sa.String(length=30), nullable=True),
        sa.Column(
            "role",
            postgresql.ENUM(*PROFILE_ROLES, name="profilerole", create_type=False),
            nullable=False,
            server_default="buyer",
        ),
        sa.Column("is_active", sa.Boolean(), nullable=False, server_default="true"),
        sa.Column(
            "created_at",
            sa.DateTime(timezone=True),
            server_default=sa.text("now()"),
            nullable=False,
        ),
        sa.Column(
            "updated_at",
            sa.DateTime(timezone=True),
            server_default=sa.text("now()"),
            nullable=False,
        ),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index(op.f("ix_profiles_email"), "profiles", ["email"])


def downgrade() -> None:
    op.drop_index(op.f("ix_profiles_email"), table_name="profiles")
    op.drop_table("profiles")

    profile_role = postgresql.ENUM(*PROFILE_ROLES, name="profilerole")
    profile_role.drop(op.get_bind())
