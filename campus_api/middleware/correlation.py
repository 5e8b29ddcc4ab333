"""Correlation ID middleware.

Tags every request with a correlation ID so all log lines of one
function invocation can be grouped. Callers may pass their own ID in
``X-Correlation-ID``; otherwise one is generated.

Pure ASGI rather than BaseHTTPMiddleware, which interferes with asyncpg
connections held across the request.
"""

import time
import uuid

from starlette.types import ASGIApp, Message, Receive, Scope, Send

from campus_api.logging_config import correlation_id_ctx, get_logger

logger = get_logger(__name__)

CORRELATION_ID_HEADER = "X-Correlation-ID"
_HEADER_KEY = CORRELATION_ID_HEADER.lower().encode()
MAX_CORRELATION_ID_LENGTH = 128


def _correlation_id(raw: bytes | None) -> str:
    """Caller-supplied ID reduced to printable ASCII, or a fresh UUID."""
    value = "".join(
        ch for ch in (raw or b"").decode("ascii", errors="ignore") if ch.isprintable()
    ).strip()[:MAX_CORRELATION_ID_LENGTH]
    return value or str(uuid.uuid4())


class CorrelationIdMiddleware:
    """Set the correlation ID context, echo it back, and log request timing."""

    def __init__(self, app: ASGIApp) -> None:
        self.app = app

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        if scope["type"] != "http":
            await self.app(scope, receive, send)
            return

        headers = dict(scope.get("headers", []))
        correlation_id = _correlation_id(headers.get(_HEADER_KEY))
        token = correlation_id_ctx.set(correlation_id)

        start_time = time.perf_counter()
        status_code: int | None = None
        method = scope.get("method", "")
        path = scope.get("path", "")
        client = scope.get("client")

        logger.info(
            "Request started",
            method=method,
            path=path,
            client_ip=client[0] if client else None,
        )

        async def send_wrapper(message: Message) -> None:
            nonlocal status_code
            if message["type"] == "http.response.start":
                status_code = message.get("status")
                response_headers = list(message.get("headers", []))
                response_headers.append((_HEADER_KEY, correlation_id.encode()))
                message = {**message, "headers": response_headers}
            await send(message)

        try:
            await self.app(scope, receive, send_wrapper)
            logger.info(
                "Request completed",
                method=method,
                path=path,
                status_code=status_code,
                duration_ms=round((time.perf_counter() - start_time) * 1000, 2),
            )
        except Exception:
            logger.exception(
                "Request failed",
                method=method,
                path=path,
                duration_ms=round((time.perf_counter() - start_time) * 1000, 2),
            )
            raise
        finally:
            correlation_id_ctx.reset(token)
