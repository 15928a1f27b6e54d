"""API middleware for rate limiting and request logging."""

import time
from collections import defaultdict, deque
from typing import Deque, Dict

from fastapi import Request
from fastapi.responses import JSONResponse
from starlette.middleware.base import BaseHTTPMiddleware

from stylist.analytics.logger import logger


def _client_host(request: Request) -> str:
    return request.client.host if request.client else "unknown"


class RateLimitMiddleware(BaseHTTPMiddleware):
    """Sliding-window rate limit per client address."""

    def __init__(self, app, calls: int = 60, period: int = 60):
        super().__init__(app)
        self.calls = calls
        self.period = period
        self.clients: Dict[str, Deque[float]] = defaultdict(deque)

    async def dispatch(self, request: Request, call_next):
        client_ip = _client_host(request)
        now = time.monotonic()

        window = self.clients[client_ip]
        while window and now - window[0] >= self.period:
            window.popleft()

        if len(window) >= self.calls:
            logger.warning(f"Rate limit exceeded for {client_ip}")
            return JSONResponse(
                status_code=429,
                content={"detail": f"Rate limit exceeded: {self.calls} requests per {self.period} seconds"},
            )

        window.append(now)
        return await call_next(request)


class LoggingMiddleware(BaseHTTPMiddleware):
    """Request logging middleware."""

    async def dispatch(self, request: Request, call_next):
        start = time.perf_counter()
        logger.info(f"{request.method} {request.url.path} - {_client_host(request)}")

        response = await call_next(request)

        process_time = time.perf_counter() - start
        response.headers["X-Process-Time"] = f"{process_time:.3f}"
        logger.info(
            f"{request.method} {request.url.path} - "
            f"Status: {response.status_code} - "
            f"Time: {process_time:.3f}s"
        )
        return response
