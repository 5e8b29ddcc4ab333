"""Mock builders for database sessions."""

from unittest.mock import AsyncMock, MagicMock


class FakeSavepoint:
    """Stands in for ``AsyncSession.begin_nested()``; never swallows errors."""

    async def __aenter__(self):
        return self

    async def __aexit__(self, exc_type, exc, tb):
        return False


def make_result(rowcount: int = 0, parent_ids=None, scalar=None) -> MagicMock:
    """A mock ``Result`` usable for deletes, updates and lookups."""
    result = MagicMock()
    result.rowcount = rowcount
    result.scalars.return_value.all.return_value = list(parent_ids or [])
    result.scalar_one_or_none.return_value = scalar
    return result


def make_session(result: MagicMock | None = None) -> AsyncMock:
    """A mock ``AsyncSession`` whose every ``execute`` returns ``result``."""
    db = AsyncMock()
    db.add = MagicMock()
    db.begin_nested = MagicMock(side_effect=lambda: FakeSavepoint())
    db.execute.return_value = result if result is not None else make_result()
    return db


def statement_table(stmt) -> str | None:
    """Target table name of an INSERT/UPDATE/DELETE, None for SELECTs."""
    if not getattr(stmt, "is_dml", False):
        return None
    return stmt.table.name
