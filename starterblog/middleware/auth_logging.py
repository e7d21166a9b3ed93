from fastapi import Request
import logging
from starlette.middleware.base import BaseHTTPMiddleware

logger = logging.getLogger("app")

PROTECTED_SUFFIXES = ("/change-avatar", "/edit-user", "/validate-token")


class AuthLoggingMiddleware(BaseHTTPMiddleware):
    async def dispatch(self, request: Request, call_next):
        path = request.url.path

        if not request.headers.get("Authorization"):
            # Mutating post routes and profile routes need a token
            if path.endswith(PROTECTED_SUFFIXES) or (
                "/posts" in path and request.method in ("POST", "PATCH", "DELETE")
            ):
                logger.warning(f"Protected endpoint {request.method} {path} accessed without auth header")

        response = await call_next(request)

        if response.status_code in (401, 403):
            logger.warning(f"Auth error: {response.status_code} on {request.method} {path}")

        return response
