"""Pytest configuration and shared fixtures.

No test here needs a live database or identity provider: sessions are
``AsyncMock`` objects and the HTTP client talks to the app in-process.
"""

import os
from collections.abc import AsyncGenerator
from unittest.mock import AsyncMock

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient

# Set testing mode BEFORE importing app to use NullPool
os.environ["TESTING"] = "true"

from campus_api.config import settings

settings.testing = True
settings.identity_propagation_delay_seconds = 0

from campus_api.integrations.identity_admin import IdentityAdminClient
from campus_api.integrations.paystack import PaystackClient
from campus_api.main import app
from tests.helpers import make_session


@pytest.fixture
def mock_db() -> AsyncMock:
    return make_session()


@pytest.fixture
def identity() -> AsyncMock:
    """Identity admin client that accepts every call."""
    client = AsyncMock(spec=IdentityAdminClient)
    client.create_user.return_value = "user-123"
    client.delete_user.return_value = None
    return client


@pytest.fixture
def gateway() -> AsyncMock:
    return AsyncMock(spec=PaystackClient)


@pytest_asyncio.fixture
async def client() -> AsyncGenerator[AsyncClient, None]:
    """Async HTTP client bound to the app. Clears dependency overrides after."""
    async with AsyncClient(
        transport=ASGITransport(app=app),
        base_url="http://test",
    ) as ac:
        yield ac
    app.dependency_overrides.clear()
