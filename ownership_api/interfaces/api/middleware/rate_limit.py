from __future__ import annotations

import time
from collections import deque

from fastapi import Request, Response
from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint

from ownership_api.infrastructure.config import get_settings

WINDOW_SECONDS = 60.0


class RateLimitMiddleware(BaseHTTPMiddleware):
    """Sliding one-minute window per client address.

    API_RATE_LIMIT_PER_MINUTE=0 disables the limit. Callers presenting an
    X-API-Key (service-to-service traffic) are not counted. A client whose
    window has drained is forgotten, so the map only holds recent callers.
    """

    def __init__(self, app: object) -> None:
        super().__init__(app)  # type: ignore[arg-type]
        self._hits: dict[str, deque[float]] = {}
        self._last_sweep = time.monotonic()

    async def dispatch(
        self,
        request: Request,
        call_next: RequestResponseEndpoint,
    ) -> Response:
        limit = get_settings().rate_limit_per_minute
        if limit == 0 or request.headers.get("X-API-Key"):
            return await call_next(request)

        client = request.client.host if request.client else "unknown"
        retry_after = self.register_hit(client, limit, time.monotonic())
        if retry_after is not None:
            return Response(
                content='{"detail": "Rate limit exceeded. Try again later."}',
                status_code=429,
                media_type="application/json",
                headers={"Retry-After": str(retry_after)},
            )
        return await call_next(request)

    def register_hit(self, client: str, limit: int, now: float) -> int | None:
        """Count one request. Returns the Retry-After seconds when over the limit."""
        if now - self._last_sweep >= WINDOW_SECONDS:
            self._sweep(now)

        hits = self._hits.get(client)
        if hits is not None:
            _expire(hits, now)
            if len(hits) >= limit:
                return int(WINDOW_SECONDS - (now - hits[0])) + 1
        else:
            hits = self._hits[client] = deque()
        hits.append(now)
        return None

    @property
    def tracked_clients(self) -> int:
        return len(self._hits)

    def _sweep(self, now: float) -> None:
        for client in list(self._hits):
            hits = self._hits[client]
            _expire(hits, now)
            if not hits:
                del self._hits[client]
        self._last_sweep = now


def _expire(hits: deque[float], now: float) -> None:
    while hits and now - hits[0] >= WINDOW_SECONDS:
        hits.popleft()
