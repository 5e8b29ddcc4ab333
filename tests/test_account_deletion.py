"""Tests for account deletion.

Covers the cascade purge (order, indirect ownership, per-table failure
isolation), the profile and identity phases, and the delete-user function.
"""

import uuid
from unittest.mock import AsyncMock

import pytest

from campus_api.core.clients import PrivilegedClient, get_privileged_client
from campus_api.core.errors import IdentityProviderError, ValidationError
from campus_api.core.ownership import USER_OWNED_TABLES
from campus_api.main import app
from campus_api.services.account_deletion import (
    PROFILE_LABEL,
    delete_account,
    purge_dependent_records,
)
from tests.helpers import make_result, make_session, statement_table

ALL_LABELS = [entry.label for entry in USER_OWNED_TABLES]


def failing_on(result, *tables: str):
    """An execute side effect that raises for statements on ``tables``."""

    async def execute(stmt, *args, **kwargs):
        if statement_table(stmt) in tables:
            raise RuntimeError(f"relation {statement_table(stmt)} is locked")
        return result

    return execute


# ── Cascade purge ──


class TestPurgeDependentRecords:
    """Tests for purge_dependent_records."""

    @pytest.mark.asyncio
    async def test_deletes_every_registered_table(self):
        db = make_session(make_result(rowcount=2, parent_ids=[uuid.uuid4()]))

        report = await purge_dependent_records("user-1", db)

        assert list(report.deleted) == ALL_LABELS
        assert all(count == 2 for count in report.deleted.values())
        assert report.failed == []
        assert report.skipped == []
        # One statement per table plus the parent lookup for poll options
        assert db.execute.await_count == len(USER_OWNED_TABLES) + 1
        # Each table ran in its own savepoint
        assert db.begin_nested.call_count == len(USER_OWNED_TABLES)
        db.commit.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_tables_processed_in_registry_order(self):
        db = make_session(make_result(rowcount=1, parent_ids=[uuid.uuid4()]))

        await purge_dependent_records("user-1", db)

        touched = [
            statement_table(call.args[0])
            for call in db.execute.await_args_list
            if statement_table(call.args[0]) is not None
        ]
        assert touched == [entry.table_name for entry in USER_OWNED_TABLES]

    @pytest.mark.asyncio
    async def test_indirect_table_skipped_without_parents(self):
        """Poll options are left alone when the user created no polls."""
        db = make_session(make_result(rowcount=0, parent_ids=[]))

        report = await purge_dependent_records("user-1", db)

        assert report.skipped == ["poll_options.poll_id"]
        assert "poll_options.poll_id" not in report.deleted
        # Parent lookup ran, child delete did not
        assert db.execute.await_count == len(USER_OWNED_TABLES)

    @pytest.mark.asyncio
    async def test_failing_table_does_not_stop_later_tables(self):
        result = make_result(rowcount=3, parent_ids=[uuid.uuid4()])
        db = make_session()
        db.execute.side_effect = failing_on(result, "support_tickets")

        report = await purge_dependent_records("user-1", db)

        assert report.failed == ["support_tickets.user_id"]
        later = ALL_LABELS[ALL_LABELS.index("support_tickets.user_id") + 1 :]
        for label in later:
            assert report.deleted[label] == 3

    @pytest.mark.asyncio
    async def test_every_table_failing_still_attempts_all(self):
        db = make_session()
        tables = {entry.table_name for entry in USER_OWNED_TABLES}
        db.execute.side_effect = failing_on(make_result(), *tables)

        report = await purge_dependent_records("user-1", db)

        assert report.deleted == {}
        # The poll lookup is a SELECT and finds nothing, so options are skipped
        assert report.skipped == ["poll_options.poll_id"]
        assert report.failed == [
            label for label in ALL_LABELS if label != "poll_options.poll_id"
        ]

    @pytest.mark.asyncio
    async def test_failure_is_logged_with_table(self, caplog):
        db = make_session()
        db.execute.side_effect = failing_on(make_result(), "notifications")

        with caplog.at_level("ERROR"):
            await purge_dependent_records("user-1", db)

        assert "Error cleaning up table" in caplog.text


# ── Orchestration ──


class TestDeleteAccount:
    """Tests for delete_account."""

    @pytest.mark.asyncio
    async def test_missing_user_id_rejected_before_any_work(self, mock_db, identity):
        client = PrivilegedClient(db=mock_db, identity=identity)

        with pytest.raises(ValidationError, match="User ID is required"):
            await delete_account(None, client)
        with pytest.raises(ValidationError):
            await delete_account("   ", client)

        mock_db.execute.assert_not_awaited()
        identity.delete_user.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_full_success(self, identity):
        db = make_session(make_result(rowcount=1, parent_ids=[uuid.uuid4()]))
        client = PrivilegedClient(db=db, identity=identity)

        result = await delete_account("user-1", client)

        assert result.user_id == "user-1"
        assert result.report.deleted[PROFILE_LABEL] == 1
        assert result.report.total_deleted == len(USER_OWNED_TABLES) + 1
        db.commit.assert_awaited_once()
        identity.delete_user.assert_awaited_once_with("user-1")

    @pytest.mark.asyncio
    async def test_profile_deleted_after_dependents(self, identity):
        db = make_session(make_result(rowcount=1, parent_ids=[uuid.uuid4()]))
        client = PrivilegedClient(db=db, identity=identity)

        await delete_account("user-1", client)

        tables = [
            statement_table(call.args[0])
            for call in db.execute.await_args_list
            if statement_table(call.args[0]) is not None
        ]
        assert tables[-1] == "profiles"
        assert tables.count("profiles") == 1

    @pytest.mark.asyncio
    async def test_identity_deleted_only_after_commit(self, mock_db):
        identity = AsyncMock()

        async def delete_user(user_id):
            assert mock_db.commit.await_count == 1

        identity.delete_user.side_effect = delete_user
        client = PrivilegedClient(db=mock_db, identity=identity)

        await delete_account("user-1", client)

        identity.delete_user.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_cascade_failure_still_deletes_profile_and_identity(self, identity):
        db = make_session()
        db.execute.side_effect = failing_on(make_result(rowcount=1), "products")
        client = PrivilegedClient(db=db, identity=identity)

        result = await delete_account("user-1", client)

        assert result.report.failed == ["products.seller_id"]
        assert result.report.deleted[PROFILE_LABEL] == 1
        identity.delete_user.assert_awaited_once_with("user-1")

    @pytest.mark.asyncio
    async def test_identity_failure_is_fatal_after_data_is_gone(self, mock_db, identity):
        identity.delete_user.side_effect = IdentityProviderError("User not found")
        client = PrivilegedClient(db=mock_db, identity=identity)

        with pytest.raises(IdentityProviderError, match="User not found"):
            await delete_account("user-1", client)

        # Dependents and profile were already committed
        mock_db.commit.assert_awaited_once()
        mock_db.rollback.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_profile_failure_rolls_back_and_propagates(self, identity):
        db = make_session()
        db.execute.side_effect = failing_on(make_result(), "profiles")
        client = PrivilegedClient(db=db, identity=identity)

        with pytest.raises(RuntimeError):
            await delete_account("user-1", client)

        db.rollback.assert_awaited_once()
        db.commit.assert_not_awaited()
        identity.delete_user.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_repeat_deletion_is_harmless(self, identity):
        """Second run over an already purged user deletes nothing and does not crash."""
        db = make_session(make_result(rowcount=0))
        client = PrivilegedClient(db=db, identity=identity)

        first = await delete_account("user-1", client)
        second = await delete_account("user-1", client)

        assert first.report.total_deleted == 0
        assert second.report.total_deleted == 0
        assert second.report.failed == []


# ── Endpoint ──


def override_client(db, identity) -> None:
    app.dependency_overrides[get_privileged_client] = lambda: PrivilegedClient(
        db=db, identity=identity
    )


class TestDeleteUserEndpoint:
    """Tests for POST /functions/v1/delete-user."""

    @pytest.mark.asyncio
    async def test_success(self, client, mock_db, identity):
        override_client(mock_db, identity)

        response = await client.post(
            "/functions/v1/delete-user", json={"userId": "user-1"}
        )

        assert response.status_code == 200
        data = response.json()
        assert data["success"] is True
        assert data["message"] == "User account and all related data purged successfully."
        assert data["failed_tables"] == []
        assert PROFILE_LABEL in data["deleted_records"]

    @pytest.mark.asyncio
    async def test_missing_user_id_returns_400(self, client, mock_db, identity):
        override_client(mock_db, identity)

        response = await client.post("/functions/v1/delete-user", json={})

        assert response.status_code == 400
        assert response.json() == {"error": "User ID is required"}
        mock_db.execute.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_unknown_user_returns_provider_error(self, client, mock_db, identity):
        """Nothing to delete anywhere, yet the identity step decides: 400."""
        identity.delete_user.side_effect = IdentityProviderError("User not found")
        override_client(mock_db, identity)

        response = await client.post(
            "/functions/v1/delete-user", json={"userId": "u-404"}
        )

        assert response.status_code == 400
        assert response.json() == {"error": "User not found"}
        mock_db.commit.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_unexpected_failure_returns_500(self, client, identity):
        db = make_session()
        db.commit.side_effect = RuntimeError("connection reset")
        override_client(db, identity)

        response = await client.post(
            "/functions/v1/delete-user", json={"userId": "user-1"}
        )

        assert response.status_code == 500
        assert response.json() == {"error": "connection reset"}

    @pytest.mark.asyncio
    async def test_malformed_body_returns_400(self, client, mock_db, identity):
        override_client(mock_db, identity)

        response = await client.post(
            "/functions/v1/delete-user",
            content=b"not json",
            headers={"Content-Type": "application/json"},
        )

        assert response.status_code == 400
        assert "error" in response.json()

    @pytest.mark.asyncio
    async def test_cors_preflight(self, client):
        response = await client.options(
            "/functions/v1/delete-user",
            headers={
                "Origin": "http://localhost:5173",
                "Access-Control-Request-Method": "POST",
                "Access-Control-Request-Headers": "authorization, content-type",
            },
        )

        assert response.status_code == 200
        assert response.headers["access-control-allow-origin"] == "*"
        assert "apikey" in response.headers["access-control-allow-headers"]
