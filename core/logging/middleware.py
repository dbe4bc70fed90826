import logging
import time

from fastapi import Request
from starlette.middleware.base import BaseHTTPMiddleware

from core.logging.providers import LOGGER_NAME


class RequestLoggingMiddleware(BaseHTTPMiddleware):
    """
    Log one line per HTTP request with status, method, path, client and latency.
    """

    def __init__(self, app, logger: logging.Logger | None = None):
        super().__init__(app)
        self.logger = logger or logging.getLogger(LOGGER_NAME)

    async def dispatch(self, request: Request, call_next):
        start = time.perf_counter()
        response = await call_next(request)
        latency_ms = (time.perf_counter() - start) * 1000

        path = request.url.path
        if request.url.query:
            path = f"{path}?{request.url.query}"
        client = request.client.host if request.client else "-"

        self.logger.info(
            f"HTTP {request.method} {path} -> {response.status_code} "
            f"({latency_ms:.1f} ms, ip={client}, ua={request.headers.get('user-agent', '-')})"
        )
        return response
