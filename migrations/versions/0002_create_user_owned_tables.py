"""Create user-owned marketplace, news, poll and messaging tables.

User id columns carry no foreign key: identities live in the auth
server, so account deletion purges these rows explicitly.

Revision ID: 0002_user_owned_tables
Revises: 0001_profiles
Create Date: 2026-10-19

"""

from collections.abc import Sequence

import sqlalchemy as sa
from alembic import op
from sqlalchemy.dialects import postgresql

# revision identifiers, used by Alembic.
revision: str = "0002_user_owned_tables"
down_revision: str | None = "0001_profiles"
branch_labels: str | Sequence[str] | None = None
depends_on: str | Sequence[str] | None = None


def _id() -> sa.Column:
    return sa.Column("id", postgresql.UUID(as_uuid=True), nullable=False)


def _user(name: str) -> sa.Column:
    return sa.Column(name, sa.String(length=64), nullable=False)


def _timestamps() -> list[sa.Column]:
    return [
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
    ]


def upgrade() -> None:
    # ── Marketplace ──
    op.create_table(
        "products",
        _id(),
        _user("seller_id"),
        sa.Column("name", sa.String(length=255), nullable=False),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column("price", sa.Float(), nullable=False),
        sa.Column("category", sa.String(length=50), nullable=False),
        sa.Column("condition", sa.String(length=20), nullable=False, server_default="used"),
        sa.Column("images", postgresql.JSON(), nullable=False, server_default="[]"),
        sa.Column("is_active", sa.Boolean(), nullable=False, server_default="true"),
        sa.Column("views", sa.Integer(), nullable=False, server_default="0"),
        *_timestamps(),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_products_seller_id", "products", ["seller_id"])

    op.create_table(
        "seller_profiles",
        _id(),
        _user("user_id"),
        sa.Column("business_name", sa.String(length=255), nullable=False),
        sa.Column(
            "subscription_status",
            sa.String(length=20),
            nullable=False,
            server_default="inactive",
        ),
        sa.Column("subscription_start_date", sa.DateTime(timezone=True), nullable=True),
        sa.Column("subscription_end_date", sa.DateTime(timezone=True), nullable=True),
        sa.Column("last_payment_date", sa.DateTime(timezone=True), nullable=True),
        sa.Column("last_payment_amount", sa.Float(), nullable=True),
        sa.Column("payment_reference", sa.String(length=100), nullable=True),
        *_timestamps(),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index(
        "ix_seller_profiles_user_id", "seller_profiles", ["user_id"], unique=True
    )

    op.create_table(
        "seller_applications",
        _id(),
        _user("user_id"),
        sa.Column("business_name", sa.String(length=255), nullable=False),
        sa.Column("business_category", sa.String(length=100), nullable=True),
        sa.Column("status", sa.String(length=20), nullable=False, server_default="pending"),
        *_timestamps(),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_seller_applications_user_id", "seller_applications", ["user_id"])

    op.create_table(
        "saved_items",
        _id(),
        _user("user_id"),
        sa.Column(
            "product_id",
            postgresql.UUID(as_uuid=True),
            sa.ForeignKey("products.id", ondelete="CASCADE"),
            nullable=False,
        ),
        *_timestamps(),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("user_id", "product_id", name="uq_saved_items_user_product"),
    )
    op.create_index("ix_saved_items_user_id", "saved_items", ["user_id"])

    # ── Messaging ──
    op.create_table(
        "messages",
        _id(),
        _user("sender_id"),
        _user("receiver_id"),
        sa.Column(
            "product_id",
            postgresql.UUID(as_uuid=True),
            sa.ForeignKey("products.id", ondelete="SET NULL"),
            nullable=True,
        ),
        sa.Column("content", sa.Text(), nullable=False),
        sa.Column("is_read", sa.Boolean(), nullable=False, server_default="false"),
        *_timestamps(),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_messages_conversation", "messages", ["sender_id", "receiver_id"])
    op.create_index("ix_messages_receiver_id", "messages", ["receiver_id"])

    op.create_table(
        "notifications",
        _id(),
        _user("user_id"),
        sa.Column("title", sa.String(length=255), nullable=False),
        sa.Column("message", sa.Text(), nullable=False),
        sa.Column("type", sa.String(length=30), nullable=False, server_default="info"),
        sa.Column("link", sa.String(length=500), nullable=True),
        sa.Column("is_read", sa.Boolean(), nullable=False, server_default="false"),
        *_timestamps(),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_notifications_user_id", "notifications", ["user_id"])

    op.create_table(
        "scheduled_sms",
        _id(),
        _user("created_by"),
        sa.Column("message", sa.Text(), nullable=False),
        sa.Column("recipients", postgresql.JSON(), nullable=False, server_default="[]"),
        sa.Column("scheduled_for", sa.DateTime(timezone=True), nullable=False),
        sa.Column("status", sa.String(length=20), nullable=False, server_default="pending"),
        *_timestamps(),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_scheduled_sms_created_by", "scheduled_sms", ["created_by"])

    # ── News, polls, support ──
    op.create_table(
        "campus_news",
        _id(),
        _user("author_id"),
        sa.Column("title", sa.String(length=255), nullable=False),
        sa.Column("content", sa.Text(), nullable=False),
        sa.Column("category", sa.String(length=50), nullable=False, server_default="general"),
        sa.Column("image_url", sa.String(length=500), nullable=True),
        sa.Column("status", sa.String(length=20), nullable=False, server_default="draft"),
        sa.Column("views", sa.Integer(), nullable=False, server_default="0"),
        *_timestamps(),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_campus_news_author_id", "campus_news", ["author_id"])

    op.create_table(
        "polls",
        _id(),
        sa.Column("question", sa.Text(), nullable=False),
        _user("created_by"),
        sa.Column("is_active", sa.Boolean(), nullable=False, server_default="true"),
        sa.Column("ends_at", sa.DateTime(timezone=True), nullable=True),
        *_timestamps(),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_polls_created_by", "polls", ["created_by"])

    op.create_table(
        "poll_options",
        _id(),
        sa.Column(
            "poll_id",
            postgresql.UUID(as_uuid=True),
            sa.ForeignKey("polls.id"),
            nullable=False,
        ),
        sa.Column("option_text", sa.String(length=255), nullable=False),
        sa.Column("vote_count", sa.Integer(), nullable=False, server_default="0"),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_poll_options_poll_id", "poll_options", ["poll_id"])

    op.create_table(
        "poll_votes",
        _id(),
        sa.Column(
            "poll_id",
            postgresql.UUID(as_uuid=True),
            sa.ForeignKey("polls.id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column(
            "option_id",
            postgresql.UUID(as_uuid=True),
            sa.ForeignKey("poll_options.id", ondelete="CASCADE"),
            nullable=False,
        ),
        _user("user_id"),
        *_timestamps(),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("poll_id", "user_id", name="uq_poll_votes_poll_user"),
    )
    op.create_index("ix_poll_votes_user_id", "poll_votes", ["user_id"])

    op.create_table(
        "support_tickets",
        _id(),
        _user("user_id"),
        sa.Column("subject", sa.String(length=255), nullable=False),
        sa.Column("message", sa.Text(), nullable=False),
        sa.Column("status", sa.String(length=20), nullable=False, server_default="open"),
        sa.Column("priority", sa.String(length=20), nullable=False, server_default="normal"),
        sa.Column("admin_response", sa.Text(), nullable=True),
        *_timestamps(),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_support_tickets_user_id", "support_tickets", ["user_id"])

    op.create_table(
        "activity_logs",
        _id(),
        _user("user_id"),
        sa.Column("action", sa.String(length=100), nullable=False),
        sa.Column("details", postgresql.JSON(), nullable=False, server_default="{}"),
        *_timestamps(),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_activity_logs_user_id", "activity_logs", ["user_id"])


def downgrade() -> None:
    # Children before parents
    for table in (
        "activity_logs",
        "support_tickets",
        "poll_votes",
        "poll_options",
        "polls",
        "campus_news",
        "scheduled_sms",
        "notifications",
        "messages",
        "saved_items",
        "seller_applications",
        "seller_profiles",
        "products",
    ):
        op.drop_table(table)
