"""Account registration.

Creates the login identity first, then the profile keyed by the same id.
If the profile cannot be written the identity is deleted again, so a
failed registration never leaves a login without a profile and the same
email can be registered on the next attempt.
"""

import asyncio

from sqlalchemy import func
from sqlalchemy.dialects.postgresql import insert as pg_insert
from sqlalchemy.ext.asyncio import AsyncSession

from campus_api.config import settings
from campus_api.core.clients import PrivilegedClient
from campus_api.core.errors import (
    IdentityProviderError,
    PersistenceError,
    ValidationError,
)
from campus_api.logging_config import get_logger
from campus_api.models.profile import Profile, ProfileRole
from campus_api.schemas.account import RegisterUserRequest

logger = get_logger(__name__)


def _db_error_message(exc: Exception) -> str:
    """Prefer the driver's message over SQLAlchemy's wrapped statement dump."""
    orig = getattr(exc, "orig", None)
    return str(orig) if orig is not None else str(exc)


async def upsert_profile(
    user_id: str,
    request: RegisterUserRequest,
    db: AsyncSession,
) -> None:
    """Insert the profile row, or overwrite it if one already exists for the id.

    New accounts always start as active buyers. Blank optional attributes
    are stored as NULL. Does not commit.
    """
    values = {
        "email": request.email,
        "full_name": request.full_name,
        "student_id": request.student_id or None,
        "department": request.department or None,
        "faculty": request.faculty or None,
        "phone": request.phone or None,
        "role": ProfileRole.BUYER,
        "is_active": True,
    }
    stmt = (
        pg_insert(Profile)
        .values(id=user_id, **values)
        .on_conflict_do_update(
            index_elements=[Profile.id],
            set_={**values, "updated_at": func.now()},
        )
    )
    await db.execute(stmt)


async def register_account(
    request: RegisterUserRequest,
    client: PrivilegedClient,
) -> str:
    """Register a new user and return the new user id.

    Raises:
        ValidationError: If email, password or full name is missing. The
            identity provider is not contacted.
        IdentityProviderError: If the identity could not be created.
        PersistenceError: If the profile could not be written. The identity
            created by this call has been deleted by then.
    """
    if not request.email or not request.password or not request.full_name:
        raise ValidationError("Email, password, and full name are required")

    user_id = await client.identity.create_user(
        email=request.email,
        password=request.password,
        user_metadata={
            "full_name": request.full_name,
            "student_id": request.student_id,
            "department": request.department,
            "faculty": request.faculty,
            "phone": request.phone,
        },
    )
    logger.info("Identity created", user_id=user_id)

    # Give the auth server time to make the new identity visible
    if settings.identity_propagation_delay_seconds > 0:
        await asyncio.sleep(settings.identity_propagation_delay_seconds)

    db = client.db
    try:
        await upsert_profile(user_id, request, db)
        await db.commit()
    except Exception as exc:
        message = _db_error_message(exc)
        logger.error(
            "Profile creation failed, removing identity",
            user_id=user_id,
            error=message,
        )
        # A broken session must not prevent the identity compensation
        try:
            await db.rollback()
        except Exception as session_exc:
            logger.error(
                "Session rollback failed",
                user_id=user_id,
                error=str(session_exc),
            )
        try:
            await client.identity.delete_user(user_id)
        except IdentityProviderError as rollback_exc:
            logger.error(
                "Identity rollback failed, identity left without profile",
                user_id=user_id,
                error=rollback_exc.message,
            )
        raise PersistenceError(
            f"Database error: {message}",
            status_code=400,
        ) from exc

    logger.info("Account registered", user_id=user_id)
    return user_id
