"""Function error taxonomy.

Every failure a function reports to its caller is one of these. The
HTTP status travels with the exception; the routers render it as
``{"error": message}`` (plus ``details`` when the failure carries
provider output).

Advisory failures (a single cascade table that could not be purged) are
not exceptions at all: they are logged and recorded on the cascade report.
"""

from typing import Any

from fastapi import status


class FunctionError(Exception):
    """Base class for failures surfaced to the caller."""

    status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR

    def __init__(
        self,
        message: str,
        *,
        status_code: int | None = None,
        details: Any = None,
    ) -> None:
        super().__init__(message)
        self.message = message
        if status_code is not None:
            self.status_code = status_code
        self.details = details

    def to_payload(self) -> dict[str, Any]:
        payload: dict[str, Any] = {"error": self.message}
        if self.details is not None:
            payload["details"] = self.details
        return payload


class ValidationError(FunctionError):
    """A required request field is missing. No work has been performed."""

    status_code = status.HTTP_400_BAD_REQUEST


class IdentityProviderError(FunctionError):
    """The identity provider rejected an admin call.

    The provider's own message is passed through unchanged.
    """

    status_code = status.HTTP_400_BAD_REQUEST


class PersistenceError(FunctionError):
    """A fatal write (profile upsert, settlement record) failed."""

    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR


class PaymentGatewayError(FunctionError):
    """The payment gateway reported a non-success outcome."""

    status_code = status.HTTP_400_BAD_REQUEST


class ConfigurationError(FunctionError):
    """A required integration is not configured on this deployment."""

    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
