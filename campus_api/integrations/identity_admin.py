"""Identity provider admin client.

Talks to the hosted auth server's admin endpoints
(``/auth/v1/admin/users``) with the service-role key. Only trusted
server-side code holds that key; these calls bypass every user-facing
auth rule (email confirmation, signup restrictions).
"""

from typing import Any
from urllib.parse import quote

import httpx

from campus_api.core.errors import IdentityProviderError
from campus_api.logging_config import get_logger

logger = get_logger(__name__)

_ADMIN_USERS_PATH = "/auth/v1/admin/users"

# Keys the auth server uses for the human-readable error message
_ERROR_KEYS = ("msg", "message", "error_description", "error")


def _error_message(resp: httpx.Response) -> str:
    """Pull the provider's error message out of a failed response."""
    try:
        body = resp.json()
    except ValueError:
        body = None

    if isinstance(body, dict):
        for key in _ERROR_KEYS:
            value = body.get(key)
            if isinstance(value, str) and value:
                return value

    return resp.text or f"Identity provider returned HTTP {resp.status_code}"


class IdentityAdminClient:
    """Admin operations on login identities."""

    def __init__(
        self,
        base_url: str,
        service_role_key: str,
        timeout: float = 10.0,
    ) -> None:
        self._base_url = base_url.rstrip("/")
        self._service_role_key = service_role_key
        self._timeout = timeout

    def _headers(self) -> dict[str, str]:
        return {
            "apikey": self._service_role_key,
            "Authorization": f"Bearer {self._service_role_key}",
            "Content-Type": "application/json",
        }

    async def _request(
        self,
        method: str,
        path: str,
        json: dict[str, Any] | None = None,
    ) -> dict[str, Any]:
        try:
            async with httpx.AsyncClient(timeout=self._timeout) as client:
                resp = await client.request(
                    method,
                    f"{self._base_url}{path}",
                    headers=self._headers(),
                    json=json,
                )
        except httpx.HTTPError as exc:
            logger.warning(
                "Identity provider unreachable",
                method=method,
                path=path,
                error=str(exc),
            )
            raise IdentityProviderError(
                f"Identity provider unreachable: {exc}"
            ) from exc

        if resp.status_code >= 400:
            raise IdentityProviderError(_error_message(resp))

        if not resp.content:
            return {}
        return resp.json()

    async def create_user(
        self,
        email: str,
        password: str,
        user_metadata: dict[str, Any] | None = None,
        email_confirm: bool = True,
    ) -> str:
        """Create a login identity and return its id.

        Raises:
            IdentityProviderError: If the provider rejects the user (for
                example, the email is already registered) or returns no id.
        """
        data = await self._request(
            "POST",
            _ADMIN_USERS_PATH,
            json={
                "email": email,
                "password": password,
                "email_confirm": email_confirm,
                "user_metadata": user_metadata or {},
            },
        )

        # Older auth servers wrap the user object
        user = data.get("user") if isinstance(data.get("user"), dict) else data
        user_id = user.get("id")
        if not user_id:
            raise IdentityProviderError("Failed to create user account")
        return str(user_id)

    async def delete_user(self, user_id: str) -> None:
        """Delete a login identity.

        Raises:
            IdentityProviderError: If the provider refuses, including when
                no identity with that id exists.
        """
        await self._request(
            "DELETE",
            f"{_ADMIN_USERS_PATH}/{quote(user_id, safe='')}",
        )
