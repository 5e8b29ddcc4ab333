"""User ownership schema.

Declares, in one place, every table holding rows that belong to a user
and how that ownership is expressed. Account deletion walks this list in
order; nothing else in the codebase knows which tables reference a user.

Ownership is either direct (a column holds the user id) or indirect,
through a parent row the user owns (poll options belong to the user who
created the poll). The database enforces no referential integrity on user
ids, so a user-owned table missing from this list keeps orphaned rows
forever after the user is deleted. Register new tables here.
"""

from dataclasses import dataclass

from sqlalchemy.orm import InstrumentedAttribute

from campus_api.models import (
    ActivityLog,
    Base,
    CampusNews,
    Message,
    Notification,
    Poll,
    PollOption,
    PollVote,
    Product,
    ScheduledSms,
    SellerApplication,
    SellerProfile,
    SavedItem,
    SupportTicket,
)


@dataclass(frozen=True)
class ParentLink:
    """Indirect ownership: the parent model and the column naming its owner."""

    model: type[Base]
    owner_column: str
    key_column: str = "id"

    @property
    def owner_attr(self) -> InstrumentedAttribute:
        return getattr(self.model, self.owner_column)

    @property
    def key_attr(self) -> InstrumentedAttribute:
        return getattr(self.model, self.key_column)


@dataclass(frozen=True)
class OwnedTable:
    """A table whose rows are purged when their owning user is deleted.

    Attributes:
        model: Mapped model class
        column: Column matched against the user id, or against the parent
            keys when ``parent`` is set
        parent: Parent link for indirectly owned rows
    """

    model: type[Base]
    column: str
    parent: ParentLink | None = None

    @property
    def table_name(self) -> str:
        return self.model.__tablename__

    @property
    def label(self) -> str:
        return f"{self.table_name}.{self.column}"

    @property
    def attr(self) -> InstrumentedAttribute:
        return getattr(self.model, self.column)


# Purge order. Children go before the rows they reference (votes and
# options before polls, saved items and messages before products).
USER_OWNED_TABLES: tuple[OwnedTable, ...] = (
    OwnedTable(PollVote, "user_id"),
    OwnedTable(PollOption, "poll_id", parent=ParentLink(Poll, "created_by")),
    OwnedTable(Poll, "created_by"),
    OwnedTable(SupportTicket, "user_id"),
    OwnedTable(ScheduledSms, "created_by"),
    OwnedTable(ActivityLog, "user_id"),
    OwnedTable(Notification, "user_id"),
    OwnedTable(SavedItem, "user_id"),
    OwnedTable(Message, "sender_id"),
    OwnedTable(Message, "receiver_id"),
    OwnedTable(CampusNews, "author_id"),
    OwnedTable(Product, "seller_id"),
    OwnedTable(SellerProfile, "user_id"),
    OwnedTable(SellerApplication, "user_id"),
)

# Column names that hold a user id wherever they appear
USER_REFERENCE_COLUMNS = frozenset(
    {
        "user_id",
        "created_by",
        "sender_id",
        "receiver_id",
        "author_id",
        "seller_id",
        "admin_id",
    }
)

# Tables that reference users but outlive them: financial settlement
# records are kept for bookkeeping.
RETAINED_TABLES = frozenset({"subscription_payments", "sms_topups"})


def unregistered_user_columns() -> list[str]:
    """List ``table.column`` pairs that look user-owned but are not registered.

    Scans every mapped table for columns named like a user reference.
    An empty list means the ownership schema covers the whole data model.
    """
    registered = {(entry.table_name, entry.column) for entry in USER_OWNED_TABLES}
    missing = []
    for table_name, table in sorted(Base.metadata.tables.items()):
        if table_name in RETAINED_TABLES:
            continue
        for column in table.columns:
            if column.name not in USER_REFERENCE_COLUMNS:
                continue
            if (table_name, column.name) not in registered:
                missing.append(f"{table_name}.{column.name}")
    return missing
