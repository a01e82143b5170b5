"""Request throttling kept outside the ledger core.

The limiter is looked up through :func:`get_rate_limiter` so deployments can
swap the in-memory implementation for a shared one.
"""

from __future__ import annotations

import threading
import time
from dataclasses import dataclass
from typing import Callable

from fastapi import HTTPException, Request, status

from .config import get_settings


@dataclass
class RateLimitExceeded(Exception):
    reset_in: float


class RateLimiter:
    """Fixed-window counter keyed by caller identity."""

    def __init__(self, clock: Callable[[], float] = time.monotonic) -> None:
        self._clock = clock
        self._windows: dict[str, tuple[int, float]] = {}
        self._lock = threading.Lock()

    def check(self, key: str, limit: int, period_seconds: int) -> float:
        """Count a hit and return seconds left in the window."""

        now = self._clock()
        with self._lock:
            count, reset_at = self._windows.get(key, (0, now + period_seconds))
            if now >= reset_at:
                count = 0
                reset_at = now + period_seconds
            if count >= limit:
                raise RateLimitExceeded(reset_in=max(0.0, reset_at - now))
            self._windows[key] = (count + 1, reset_at)
            return max(0.0, reset_at - now)

    def purge(self) -> int:
        """Drop expired windows; returns how many were removed."""

        now = self._clock()
        with self._lock:
            expired = [key for key, (_, reset_at) in self._windows.items() if now >= reset_at]
            for key in expired:
                del self._windows[key]
        return len(expired)


_rate_limiter: RateLimiter | None = None


def get_rate_limiter() -> RateLimiter:
    global _rate_limiter
    if _rate_limiter is None:
        _rate_limiter = RateLimiter()
    return _rate_limiter


def set_rate_limiter(limiter: RateLimiter | None) -> None:
    """Replace the process-wide limiter (``None`` resets to a fresh default)."""

    global _rate_limiter
    _rate_limiter = limiter


def _client_identity(request: Request) -> str:
    return request.client.host if request.client else "anonymous"


def rate_limit(
    scope: str,
    limit: int | None = None,
    period_seconds: int = 60,
    identifier: Callable[[Request], str] | None = None,
) -> Callable[[Request], None]:
    identify = identifier or _client_identity

    def dependency(request: Request) -> None:
        allowed = limit if limit is not None else get_settings().rate_limit_per_minute
        key = f"{scope}:{identify(request)}"
        try:
            get_rate_limiter().check(key, limit=allowed, period_seconds=period_seconds)
        except RateLimitExceeded as exc:
            headers = {"Retry-After": str(int(max(1, round(exc.reset_in))))}
            raise HTTPException(
                status_code=status.HTTP_429_TOO_MANY_REQUESTS,
                detail="Too many requests, please slow down.",
                headers=headers,
            ) from exc

    return dependency
