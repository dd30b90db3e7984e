"""
Process-local token buckets.

Each key owns a bucket of ``limit`` tokens refilled continuously over
``window`` seconds. A request spends one token; an empty bucket rejects the
request straight away (no queueing).
"""
import logging
import math
import threading
import time
from dataclasses import dataclass

from fastapi import Depends, Request

from app.core.auth import get_current_user
from app.core.config import settings
from app.core.errors import ApiError, ErrorCode, Failure
from app.models.user import User

logger = logging.getLogger(__name__)


@dataclass
class _Bucket:
    tokens: float
    updated: float


class RateLimiter:
    def __init__(self, name: str, limit: int, window: float, clock=time.monotonic, max_keys: int = 10_000):
        self.name = name
        self.limit = limit
        self.window = window
        self.max_keys = max_keys
        self._clock = clock
        self._buckets: dict[str, _Bucket] = {}
        self._lock = threading.Lock()
        self._last_sweep = clock()

    @property
    def rate(self) -> float:
        return self.limit / self.window

    @property
    def tracked_keys(self) -> int:
        return len(self._buckets)

    def _sweep(self, now: float) -> None:
        # un bucket lleno otra vez equivale a no tenerlo
        full = [
            key for key, b in self._buckets.items()
            if b.tokens + (now - b.updated) * self.rate >= self.limit
        ]
        for key in full:
            del self._buckets[key]
        self._last_sweep = now

    def hit(self, key: str) -> float:
        """Spend a token for ``key``. Returns 0 if allowed, else seconds until the next token."""
        now = self._clock()
        with self._lock:
            if now - self._last_sweep >= self.window:
                self._sweep(now)

            b = self._buckets.get(key)
            if b is None:
                if len(self._buckets) >= self.max_keys:
                    self._sweep(now)
                    # sigue lleno: se descarta el bucket más antiguo
                    while len(self._buckets) >= self.max_keys:
                        del self._buckets[next(iter(self._buckets))]
                b = self._buckets[key] = _Bucket(tokens=float(self.limit), updated=now)
            else:
                b.tokens = min(float(self.limit), b.tokens + (now - b.updated) * self.rate)
                b.updated = now

            if b.tokens >= 1:
                b.tokens -= 1
                return 0.0
            return (1 - b.tokens) / self.rate

    def check(self, key: str) -> None:
        retry_after = self.hit(key)
        if retry_after:
            logger.info("rate limit %s exceeded for %s", self.name, key)
            raise ApiError(
                Failure(ErrorCode.RATE_LIMITED, "Too many requests"),
                headers={"Retry-After": str(max(1, math.ceil(retry_after)))},
            )

    def reset(self) -> None:
        with self._lock:
            self._buckets.clear()


_MAX_KEYS = settings.RATE_LIMIT_MAX_KEYS

register_limiter = RateLimiter(
    "register", settings.REGISTER_RATE_LIMIT, settings.RATE_WINDOW_SECONDS, max_keys=_MAX_KEYS
)
login_limiter = RateLimiter("login", settings.LOGIN_RATE_LIMIT, settings.RATE_WINDOW_SECONDS, max_keys=_MAX_KEYS)
write_limiter = RateLimiter("write", settings.WRITE_RATE_LIMIT, settings.RATE_WINDOW_SECONDS, max_keys=_MAX_KEYS)
public_share_limiter = RateLimiter(
    "public_share", settings.PUBLIC_SHARE_RATE_LIMIT, settings.PUBLIC_SHARE_RATE_WINDOW_SECONDS, max_keys=_MAX_KEYS
)

ALL_LIMITERS = (register_limiter, login_limiter, write_limiter, public_share_limiter)


def client_ip(request: Request) -> str:
    xff = request.headers.get("x-forwarded-for")
    if xff:
        return xff.split(",")[0].strip()
    return request.client.host if request.client else ""


def limit_by_ip(limiter: RateLimiter):
    def dep(request: Request) -> None:
        limiter.check(client_ip(request))
    return dep


def limit_by_user(limiter: RateLimiter):
    def dep(request: Request, current_user: User = Depends(get_current_user)) -> None:
        # mismo bucket para todas las escrituras sensibles de la cuenta
        limiter.check(f"user:{current_user.id}")
    return dep


def limit_public_share(request: Request, slug: str) -> None:
    public_share_limiter.check(f"{client_ip(request)}|{slug}")
