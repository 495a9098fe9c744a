"""ASGI middleware for observability.

Provides request ID generation and logging for all HTTP requests.

Written as a plain ASGI middleware rather than BaseHTTPMiddleware: streamed
download bodies must reach the server chunk by chunk, and an exception raised
after the response has started must propagate untouched so the server can
drop the connection.
"""

import time

from starlette.datastructures import Headers, MutableHeaders
from starlette.types import ASGIApp, Message, Receive, Scope, Send

from .logging_config import get_logger
from .request_id import generate_request_id, request_id_var, set_request_id

logger = get_logger(__name__)


class RequestIDMiddleware:
    """Middleware to generate and inject request IDs."""

    def __init__(self, app: ASGIApp):
        self.app = app

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        if scope["type"] != "http":
            await self.app(scope, receive, send)
            return

        headers = Headers(scope=scope)
        request_id = headers.get("x-request-id") or generate_request_id()
        token = set_request_id(request_id)

        method = scope.get("method")
        path = scope.get("path")
        logger.info(f"{method} {path}", extra={"method": method, "path": path})

        start_time = time.time()
        status_code = None

        async def send_with_request_id(message: Message) -> None:
            nonlocal status_code
            if message["type"] == "http.response.start":
                status_code = message["status"]
                response_headers = MutableHeaders(scope=message)
                response_headers["X-Request-ID"] = request_id
            await send(message)

        try:
            await self.app(scope, receive, send_with_request_id)
        except Exception as e:
            duration_ms = (time.time() - start_time) * 1000
            logger.error(
                f"Request failed: {type(e).__name__}: {e}",
                extra={
                    "status_code": status_code,
                    "duration_ms": round(duration_ms, 2),
                },
            )
            raise
        else:
            duration_ms = (time.time() - start_time) * 1000
            logger.info(
                f"Request completed: {status_code}",
                extra={
                    "status_code": status_code,
                    "duration_ms": round(duration_ms, 2),
                },
            )
        finally:
            request_id_var.reset(token)
