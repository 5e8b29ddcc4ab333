"""Account deletion.

Removes a user in three phases:

1. Dependent records, table by table, in ``USER_OWNED_TABLES`` order.
   Best effort: each table runs in its own SAVEPOINT, and a failing table
   is rolled back on its own, logged, and skipped.
2. The profile row.
3. The login identity at the identity provider.

Phases 1 and 2 share one database transaction, committed before phase 3.
Only phase 3 decides the outcome reported to the caller: if the identity
provider refuses, the caller gets an error even though the data is gone.
"""

from dataclasses import dataclass, field

from sqlalchemy import delete, select
from sqlalchemy.ext.asyncio import AsyncSession

from campus_api.core.clients import PrivilegedClient
from campus_api.core.errors import IdentityProviderError, ValidationError
from campus_api.core.ownership import USER_OWNED_TABLES, OwnedTable
from campus_api.logging_config import get_logger
from campus_api.models.profile import Profile

logger = get_logger(__name__)

PROFILE_LABEL = "profiles.id"


@dataclass
class CascadeReport:
    """What the dependent-record purge did, per ``table.column``.

    Attributes:
        deleted: Rows removed by each step that ran
        skipped: Indirect steps whose user owned no parent rows
        failed: Steps that raised and were rolled back
    """

    deleted: dict[str, int] = field(default_factory=dict)
    skipped: list[str] = field(default_factory=list)
    failed: list[str] = field(default_factory=list)

    @property
    def total_deleted(self) -> int:
        return sum(self.deleted.values())


@dataclass
class AccountDeletionResult:
    user_id: str
    report: CascadeReport


async def _purge_owned_table(
    entry: OwnedTable,
    user_id: str,
    db: AsyncSession,
) -> int | None:
    """Delete one table's rows owned by ``user_id``.

    Returns the deleted row count, or None when an indirectly owned table
    was skipped because the user owns no parent rows.
    """
    if entry.parent is not None:
        result = await db.execute(
            select(entry.parent.key_attr).where(entry.parent.owner_attr == user_id)
        )
        parent_ids = list(result.scalars().all())
        if not parent_ids:
            return None
        stmt = delete(entry.model).where(entry.attr.in_(parent_ids))
    else:
        stmt = delete(entry.model).where(entry.attr == user_id)

    result = await db.execute(stmt)
    return result.rowcount


async def purge_dependent_records(user_id: str, db: AsyncSession) -> CascadeReport:
    """Best-effort purge of every user-owned table.

    Tables are processed sequentially. A failure in one table never stops
    the remaining ones. Does not commit.
    """
    report = CascadeReport()

    for entry in USER_OWNED_TABLES:
        try:
            async with db.begin_nested():
                count = await _purge_owned_table(entry, user_id, db)
        except Exception as exc:
            logger.error(
                "Error cleaning up table",
                table=entry.table_name,
                column=entry.column,
                user_id=user_id,
                error=str(exc),
            )
            report.failed.append(entry.label)
            continue

        if count is None:
            report.skipped.append(entry.label)
        else:
            report.deleted[entry.label] = count

    return report


async def delete_profile(user_id: str, db: AsyncSession) -> int:
    """Delete the user's profile row. Errors propagate. Does not commit."""
    result = await db.execute(delete(Profile).where(Profile.id == user_id))
    return result.rowcount


async def delete_account(
    user_id: str | None,
    client: PrivilegedClient,
) -> AccountDeletionResult:
    """Purge a user's records, profile and login identity.

    Args:
        user_id: Identity provider user id.
        client: Privileged (service-role) client.

    Returns:
        The result with the per-table cascade report.

    Raises:
        ValidationError: If ``user_id`` is missing. Nothing is touched.
        IdentityProviderError: If the identity could not be deleted. The
            records and profile are already gone at that point.
        Exception: Re-raised after rollback if the profile delete or the
            commit fails.
    """
    if not user_id or not user_id.strip():
        raise ValidationError("User ID is required")

    logger.warning("Account deletion initiated", user_id=user_id)

    db = client.db
    try:
        report = await purge_dependent_records(user_id, db)
        report.deleted[PROFILE_LABEL] = await delete_profile(user_id, db)
        await db.commit()
    except Exception:
        await db.rollback()
        logger.error(
            "Account data purge failed, transaction rolled back",
            user_id=user_id,
        )
        raise

    if report.failed:
        # Not escalated: the remaining rows stay orphaned until a later run
        logger.warning(
            "Account purge left records behind",
            user_id=user_id,
            failed_tables=report.failed,
        )

    try:
        await client.identity.delete_user(user_id)
    except IdentityProviderError as exc:
        logger.error(
            "Identity deletion failed after data purge",
            user_id=user_id,
            error=exc.message,
            total_deleted=report.total_deleted,
        )
        raise

    logger.warning(
        "Account deletion completed",
        user_id=user_id,
        deleted=report.deleted,
        total_deleted=report.total_deleted,
        failed_tables=report.failed,
    )
    return AccountDeletionResult(user_id=user_id, report=report)
