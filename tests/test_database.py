"""Tests for database connectivity and session management."""

from unittest.mock import AsyncMock, MagicMock, patch

import pytest

from campus_api import database
from campus_api.database import check_database_connection, close_database, get_db


class TestDatabaseConnection:
    """Tests for database connection utilities."""

    @pytest.mark.asyncio
    async def test_returns_true_when_connected(self):
        with patch("campus_api.database.get_engine") as mock_get_engine:
            mock_conn = AsyncMock()

            mock_connect = AsyncMock()
            mock_connect.__aenter__ = AsyncMock(return_value=mock_conn)
            mock_connect.__aexit__ = AsyncMock(return_value=None)

            mock_engine = MagicMock()
            mock_engine.connect.return_value = mock_connect
            mock_get_engine.return_value = mock_engine

            result = await check_database_connection()

        assert result is True
        mock_conn.execute.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_returns_false_on_exception(self):
        with patch("campus_api.database.get_engine") as mock_get_engine:
            mock_engine = MagicMock()
            mock_engine.connect.side_effect = Exception("Connection refused")
            mock_get_engine.return_value = mock_engine

            result = await check_database_connection()

        assert result is False


class TestGetDb:
    @pytest.mark.asyncio
    async def test_closes_session_after_request(self):
        session = AsyncMock()
        session_cm = AsyncMock()
        session_cm.__aenter__ = AsyncMock(return_value=session)
        session_cm.__aexit__ = AsyncMock(return_value=None)

        with patch(
            "campus_api.database.get_session_maker",
            return_value=MagicMock(return_value=session_cm),
        ):
            gen = get_db()
            assert await gen.__anext__() is session
            with pytest.raises(StopAsyncIteration):
                await gen.__anext__()

        session.close.assert_awaited_once()


class TestCloseDatabase:
    @pytest.mark.asyncio
    async def test_disposes_engine_and_forgets_it(self):
        engine = AsyncMock()
        with patch("campus_api.database._engine", engine), patch(
            "campus_api.database._async_session_maker", MagicMock()
        ):
            await close_database()

            assert database._engine is None
            assert database._async_session_maker is None

        engine.dispose.assert_awaited_once()
