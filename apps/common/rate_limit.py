from __future__ import annotations

import logging
import math
import threading
from dataclasses import dataclass
from time import time
from typing import Callable, Optional, Protocol

from django.conf import settings
from django.core.cache import caches


log = logging.getLogger(__name__)


@dataclass
class Window:
    count: int
    reset_at: float


@dataclass
class LimitResult:
    allowed: bool
    limit: int
    remaining: int
    reset_at: float
    retry_after: int

    def headers(self) -> dict[str, str]:
        out = {
            "X-RateLimit-Limit": str(self.limit),
            "X-RateLimit-Remaining": str(max(self.remaining, 0)),
            "X-RateLimit-Reset": str(math.ceil(self.reset_at)),
        }
        if not self.allowed:
            out["Retry-After"] = str(self.retry_after)
        return out


class RateLimitStore(Protocol):
    def hit(self, key: str, window_seconds: int, now: float) -> Window:
        ...


class MemoryStore:
    """Process-local fixed windows. Lost on restart.

    Holds at most `max_keys` windows: expired ones are dropped first, then the
    oldest live ones, whose clients start a fresh window on their next hit.
    """

    max_keys = 10_000

    def __init__(self) -> None:
        self._windows: dict[str, Window] = {}
        self._lock = threading.Lock()

    def hit(self, key: str, window_seconds: int, now: float) -> Window:
        with self._lock:
            current = self._windows.get(key)
            if current is None or now >= current.reset_at:
                if key not in self._windows and len(self._windows) >= self.max_keys:
                    self._prune(now)
                current = Window(count=1, reset_at=now + window_seconds)
                self._windows[key] = current
            else:
                current.count += 1
            return Window(current.count, current.reset_at)

    def _prune(self, now: float) -> None:
        expired = [k for k, w in self._windows.items() if now >= w.reset_at]
        for k in expired:
            del self._windows[k]
        overflow = len(self._windows) - self.max_keys + 1
        if overflow > 0:
            oldest = sorted(self._windows, key=lambda k: self._windows[k].reset_at)[:overflow]
            for k in oldest:
                del self._windows[k]

    def clear(self) -> None:
        with self._lock:
            self._windows.clear()

    def __len__(self) -> int:
        return len(self._windows)


class CacheStore:
    """Fixed windows kept in a Django cache, shared by every worker using it."""

    def __init__(self, alias: str = "default", prefix: str = "rl") -> None:
        self.alias = alias
        self.prefix = prefix

    def hit(self, key: str, window_seconds: int, now: float) -> Window:
        cache = caches[self.alias]
        count_key = f"{self.prefix}:{key}:count"
        reset_key = f"{self.prefix}:{key}:reset"
        if cache.add(reset_key, now + window_seconds, timeout=window_seconds):
            cache.set(count_key, 1, timeout=window_seconds)
            return Window(1, now + window_seconds)
        reset_at = cache.get(reset_key) or now + window_seconds
        cache.add(count_key, 0, timeout=window_seconds)
        try:
            count = cache.incr(count_key)
        except ValueError:
            # count expired between add() and incr()
            cache.set(count_key, 1, timeout=window_seconds)
            count = 1
        return Window(int(count), float(reset_at))


_memory_store = MemoryStore()


def default_store() -> RateLimitStore:
    kind = getattr(settings, "RATE_LIMIT_STORE", "memory")
    if kind == "cache":
        return CacheStore()
    return _memory_store


class RateLimiter:
    def __init__(
        self,
        namespace: str,
        limit: int,
        window_seconds: int,
        *,
        store: Optional[RateLimitStore] = None,
        clock: Callable[[], float] = time,
    ) -> None:
        self.namespace = namespace
        self.limit = limit
        self.window_seconds = window_seconds
        self.store = store if store is not None else default_store()
        self.clock = clock

    def allow(self, ident: str) -> LimitResult:
        now = self.clock()
        window = self.store.hit(f"{self.namespace}:{ident}", self.window_seconds, now)
        allowed = window.count <= self.limit
        retry_after = 0 if allowed else max(1, math.ceil(window.reset_at - now))
        if not allowed:
            log.info("Rate limit hit namespace=%s ident=%s", self.namespace, ident)
        return LimitResult(
            allowed=allowed,
            limit=self.limit,
            remaining=max(0, self.limit - window.count),
            reset_at=window.reset_at,
            retry_after=retry_after,
        )


def limiter_for(name: str, *, store: Optional[RateLimitStore] = None) -> RateLimiter:
    """Build the limiter configured for an endpoint class in settings.RATE_LIMITS."""
    conf = settings.RATE_LIMITS[name]
    return RateLimiter(name, int(conf["limit"]), int(conf["window_seconds"]), store=store)
