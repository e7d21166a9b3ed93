from fastapi import Request
import logging
import time
from starlette.middleware.base import BaseHTTPMiddleware

logger = logging.getLogger("app")


class RequestLoggingMiddleware(BaseHTTPMiddleware):
    """Logs every request with its status and duration"""

    async def dispatch(self, request: Request, call_next):
        start_time = time.perf_counter()
        client = request.client.host if request.client else "-"
        target = request.url.path
        if request.url.query:
            target = f"{target}?{request.url.query}"

        logger.info(f"{client} -> {request.method} {target}")

        response = await call_next(request)

        elapsed = time.perf_counter() - start_time
        response.headers["X-Process-Time"] = f"{elapsed:.4f}"
        logger.info(f"{client} <- {response.status_code} {request.method} {target} ({elapsed:.4f}s)")

        return response
