"""Access log middleware.

One INFO line per HTTP request: method, path, status and duration.
Raw ASGI (no BaseHTTPMiddleware) so streaming responses pass through untouched.
"""

import logging
import time
from typing import Callable

logger = logging.getLogger("app.access")


def RequestLogMiddleware(app: Callable) -> Callable:
    """Log every HTTP request once its response has started."""

    async def asgi_app(scope: dict, receive: Callable, send: Callable) -> None:
        if scope["type"] != "http":
            await app(scope, receive, send)
            return
        started = time.perf_counter()
        status_code = 500

        async def send_wrapper(message: dict) -> None:
            nonlocal status_code
            if message["type"] == "http.response.start":
                status_code = message["status"]
            await send(message)

        try:
            await app(scope, receive, send_wrapper)
        finally:
            logger.info(
                "%s %s %s %.1fms",
                scope["method"],
                scope["path"],
                status_code,
                (time.perf_counter() - started) * 1000,
            )

    return asgi_app
