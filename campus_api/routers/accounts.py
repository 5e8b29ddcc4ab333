"""Account lifecycle functions: register-user and delete-user.

Both respond with ``{"error": ...}`` payloads rather than FastAPI's
``detail`` shape, because the web client reads ``error`` from every
function response.
"""

from fastapi import APIRouter, Depends, status
from fastapi.responses import JSONResponse

from campus_api.core.clients import PrivilegedClient, get_privileged_client
from campus_api.core.errors import FunctionError
from campus_api.logging_config import get_logger
from campus_api.schemas.account import (
    DeleteUserRequest,
    DeleteUserResponse,
    RegisterUserRequest,
    RegisterUserResponse,
)
from campus_api.services.account_deletion import delete_account
from campus_api.services.registration import register_account

logger = get_logger(__name__)

router = APIRouter(prefix="/functions/v1", tags=["accounts"])


@router.post("/delete-user", response_model=DeleteUserResponse)
async def delete_user(
    body: DeleteUserRequest,
    client: PrivilegedClient = Depends(get_privileged_client),
) -> DeleteUserResponse | JSONResponse:
    """Purge a user's records, profile and login identity.

    Returns 400 when ``userId`` is missing or when the identity provider
    refuses the deletion (the records are already gone in that case),
    500 on any unexpected failure.
    """
    try:
        result = await delete_account(body.user_id, client)
    except FunctionError as exc:
        return JSONResponse(status_code=exc.status_code, content=exc.to_payload())
    except Exception as exc:
        logger.exception("delete-user failed", user_id=body.user_id)
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content={"error": str(exc)},
        )

    return DeleteUserResponse(
        message="User account and all related data purged successfully.",
        deleted_records=result.report.deleted,
        failed_tables=result.report.failed,
    )


@router.post("/register-user", response_model=RegisterUserResponse)
async def register_user(
    body: RegisterUserRequest,
    client: PrivilegedClient = Depends(get_privileged_client),
) -> RegisterUserResponse | JSONResponse:
    """Create a login identity and its buyer profile.

    If the profile cannot be written the new identity is deleted before
    the 400 response is returned.
    """
    try:
        user_id = await register_account(body, client)
    except FunctionError as exc:
        return JSONResponse(
            status_code=exc.status_code,
            content={"success": False, **exc.to_payload()},
        )
    except Exception as exc:
        logger.exception("register-user failed")
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content={"success": False, "error": str(exc) or "An unexpected error occurred"},
        )

    return RegisterUserResponse(message="Account created successfully", user_id=user_id)
