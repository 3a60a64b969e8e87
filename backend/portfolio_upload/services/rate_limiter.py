"""
Upload rate limiting.

``SlidingWindowRateLimiter`` keeps per-client timestamps in process memory.
It is not shared between instances; swap in another ``RateLimiter`` through
the ``get_rate_limiter`` dependency for multi-instance deployments.
"""

import threading
import time
from abc import ABC, abstractmethod
from typing import Callable, Dict, List, Mapping, Optional

from portfolio_upload.core.config import settings


class RateLimiter(ABC):
    """Decides whether a client may make another request."""

    @abstractmethod
    def hit(self, identifier: str) -> bool:
        """Record a request for ``identifier``; return False when over the limit."""


class SlidingWindowRateLimiter(RateLimiter):
    def __init__(
        self,
        max_requests: int,
        window_seconds: float,
        clock: Callable[[], float] = time.monotonic,
    ):
        self.max_requests = max_requests
        self.window_seconds = window_seconds
        self._clock = clock
        self._requests: Dict[str, List[float]] = {}
        self._lock = threading.Lock()

    def hit(self, identifier: str) -> bool:
        now = self._clock()
        with self._lock:
            recent = [t for t in self._requests.get(identifier, []) if now - t < self.window_seconds]

            if len(recent) >= self.max_requests:
                self._requests[identifier] = recent
                return False

            recent.append(now)
            self._requests[identifier] = recent
            return True

    def reset(self):
        with self._lock:
            self._requests.clear()


def get_client_identifier(headers: Mapping[str, str], client_host: Optional[str] = None) -> str:
    """Best-effort client id: first X-Forwarded-For hop, X-Real-IP, then socket address."""
    forwarded_for = headers.get("x-forwarded-for")
    if forwarded_for:
        client_ip = forwarded_for.split(",")[0].strip()
        if client_ip:
            return client_ip

    real_ip = headers.get("x-real-ip")
    if real_ip:
        return real_ip.strip()

    return client_host or "unknown"


_upload_rate_limiter = SlidingWindowRateLimiter(
    max_requests=settings.RATE_LIMIT_MAX_UPLOADS,
    window_seconds=settings.RATE_LIMIT_WINDOW_SECONDS,
)


def get_rate_limiter() -> RateLimiter:
    return _upload_rate_limiter
