"""Privileged client factory.

Functions act on behalf of the platform, not of a signed-in user, so
every dependency here carries service-role credentials: a database
session that bypasses row-level policies and an identity admin client.
"""

from dataclasses import dataclass

from fastapi import Depends
from sqlalchemy.ext.asyncio import AsyncSession

from campus_api.config import settings
from campus_api.database import get_db
from campus_api.integrations.identity_admin import IdentityAdminClient
from campus_api.integrations.paystack import PaystackClient


@dataclass
class PrivilegedClient:
    """Service-role access to the relational store and the identity provider."""

    db: AsyncSession
    identity: IdentityAdminClient


def create_identity_admin() -> IdentityAdminClient:
    return IdentityAdminClient(
        base_url=settings.identity_url,
        service_role_key=settings.service_role_key,
        timeout=settings.identity_timeout_seconds,
    )


async def get_privileged_client(
    db: AsyncSession = Depends(get_db),
) -> PrivilegedClient:
    """FastAPI dependency: a request-scoped privileged client."""
    return PrivilegedClient(db=db, identity=create_identity_admin())


def get_payment_gateway() -> PaystackClient | None:
    """FastAPI dependency: the Paystack client, or None when not configured."""
    if not settings.paystack_secret_key:
        return None
    return PaystackClient(
        secret_key=settings.paystack_secret_key,
        base_url=settings.paystack_base_url,
        timeout=settings.paystack_timeout_seconds,
    )
