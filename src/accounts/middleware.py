"""ASGI middleware for the fixed-origin CORS policy."""

import logging

from starlette.datastructures import MutableHeaders
from starlette.responses import JSONResponse
from starlette.types import ASGIApp, Message, Receive, Scope, Send

logger = logging.getLogger(__name__)


class FixedOriginCORSMiddleware:
    """
    Stamp one allow-listed origin on every HTTP response.

    The caller's Origin header is never echoed. Plain ASGI: `receive` must
    reach the route unwrapped for `request.is_disconnected()` to see the
    client go away.

    Exceptions that escape the app before a response started get a JSON 500
    with the same headers, then propagate to Starlette's error middleware.
    """

    def __init__(
        self,
        app: ASGIApp,
        allow_origin: str,
        allow_methods: str = "POST, OPTIONS",
        allow_headers: str = "Content-Type",
    ) -> None:
        self.app = app
        self.cors_headers = {
            "Access-Control-Allow-Origin": allow_origin,
            "Access-Control-Allow-Methods": allow_methods,
            "Access-Control-Allow-Headers": allow_headers,
        }

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        if scope["type"] != "http":
            await self.app(scope, receive, send)
            return

        response_started = False

        async def send_with_cors(message: Message) -> None:
            nonlocal response_started
            if message["type"] == "http.response.start":
                response_started = True
                headers = MutableHeaders(scope=message)
                for name, value in self.cors_headers.items():
                    headers[name] = value
            await send(message)

        try:
            await self.app(scope, receive, send_with_cors)
        except Exception as e:
            if response_started:
                raise
            logger.error(f"Unhandled error for {scope.get('path')}: {e}", extra={"error_type": "unhandled"})
            response = JSONResponse(status_code=500, content={"error": "Server error"})
            await response(scope, receive, send_with_cors)
            raise
