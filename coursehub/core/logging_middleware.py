import logging
import time

from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request

logger = logging.getLogger(__name__)


class RequestLoggingMiddleware(BaseHTTPMiddleware):
    """Logs one line per request, tagged with the caller's uid once authenticated."""

    async def dispatch(self, request: Request, call_next):
        start = time.monotonic()

        try:
            response = await call_next(request)
        except Exception:
            logger.exception(
                "%s %s failed after %.2fs",
                request.method,
                request.url.path,
                time.monotonic() - start,
            )
            raise

        identity = getattr(request.state, "identity", None)
        logger.info(
            "%s %s -> %s (%.2fs) uid=%s",
            request.method,
            request.url.path,
            response.status_code,
            time.monotonic() - start,
            identity.uid if identity is not None else "-",
        )

        return response
