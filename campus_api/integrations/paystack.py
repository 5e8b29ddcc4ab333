"""Paystack payment gateway client.

Paystack reports the outcome in the JSON body (``status`` plus
``data.status``) for both successful and rejected calls, so callers
inspect the body instead of the HTTP status code.
"""

from typing import Any
from urllib.parse import quote

import httpx

from campus_api.core.errors import PaymentGatewayError
from campus_api.logging_config import get_logger

logger = get_logger(__name__)

# Paystack amounts are in the currency's minor unit (pesewas, kobo)
MINOR_UNITS_PER_MAJOR = 100


def to_minor_units(amount: float) -> int:
    return int(round(amount * MINOR_UNITS_PER_MAJOR))


def to_major_units(amount: int | float) -> float:
    return amount / MINOR_UNITS_PER_MAJOR


class PaystackClient:
    """Thin async wrapper over the Paystack transaction API."""

    def __init__(
        self,
        secret_key: str,
        base_url: str = "https://api.paystack.co",
        timeout: float = 15.0,
    ) -> None:
        self._secret_key = secret_key
        self._base_url = base_url.rstrip("/")
        self._timeout = timeout

    def _headers(self) -> dict[str, str]:
        return {
            "Authorization": f"Bearer {self._secret_key}",
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
            logger.error("Paystack request failed", path=path, error=str(exc))
            raise PaymentGatewayError(
                "Payment gateway unreachable",
                status_code=500,
                details=str(exc),
            ) from exc

        try:
            body = resp.json()
        except ValueError as exc:
            raise PaymentGatewayError(
                "Payment gateway returned an invalid response",
                status_code=500,
                details=resp.text,
            ) from exc

        if not isinstance(body, dict):
            raise PaymentGatewayError(
                "Payment gateway returned an invalid response",
                status_code=500,
                details=body,
            )
        return body

    async def initialize_transaction(
        self,
        email: str,
        amount: float,
        currency: str,
        metadata: dict[str, Any] | None = None,
    ) -> dict[str, Any]:
        """POST /transaction/initialize.

        ``amount`` is in major units and converted here. Returns the raw
        gateway body; ``data`` carries ``authorization_url``,
        ``access_code`` and ``reference`` on success.
        """
        return await self._request(
            "POST",
            "/transaction/initialize",
            json={
                "email": email,
                "amount": to_minor_units(amount),
                "currency": currency,
                "metadata": metadata or {},
            },
        )

    async def verify_transaction(self, reference: str) -> dict[str, Any]:
        """GET /transaction/verify/{reference} and return the raw gateway body."""
        return await self._request(
            "GET",
            f"/transaction/verify/{quote(reference, safe='')}",
        )
