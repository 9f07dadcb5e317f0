# ─────────────────────────────────────────────────────────────────────────────
# Rate Limiting — outer slowapi limiter + per-address sliding-window gate
# ─────────────────────────────────────────────────────────────────────────────
# `limiter` lives here to avoid circular imports between main.py (which
# imports route modules) and route modules (which need the decorator).
#
# SlidingWindowRateLimiter is the AI-generation quota. It uses the same
# `limits` library slowapi is built on, with the moving-window strategy and
# an async storage picked by URI (memory for one process, redis for many).
# ─────────────────────────────────────────────────────────────────────────────


import time
from dataclasses import dataclass

import structlog
from limits import RateLimitItem, parse
from limits.aio.storage import Storage
from limits.aio.strategies import MovingWindowRateLimiter
from limits.storage import storage_from_string
from slowapi import Limiter
from slowapi.util import get_remote_address

from eventara.config import Settings

logger = structlog.get_logger(__name__)

# Key function: rate-limit by client IP.
# Behind a proxy, X-Forwarded-For handling belongs to uvicorn --proxy-headers.
limiter = Limiter(key_func=get_remote_address)

_NAMESPACE = "generate-event"


@dataclass(frozen=True)
class RateLimitDecision:
    """Outcome of one check-and-consume against the window."""

    allowed: bool
    limit: int
    remaining: int
    reset_at: float  # epoch seconds when the oldest counted hit leaves the window

    @property
    def retry_after_seconds(self) -> float:
        return max(0.0, self.reset_at - time.time())


class SlidingWindowRateLimiter:
    """Per-address moving-window quota (default 5 requests / 30 seconds).

    ``check()`` is a single ``hit()`` on the storage, which serializes per
    key (asyncio lock in memory storage, Lua script in redis), so concurrent
    requests from one address can neither double-spend nor double-grant.
    Denied checks do not consume quota.

    Created in the lifespan, stored in app.state, injected via Depends().
    """

    def __init__(
        self,
        rate: str | RateLimitItem = "5/30 seconds",
        *,
        storage: Storage | None = None,
        storage_uri: str = "async+memory://",
    ) -> None:
        self._item = parse(rate) if isinstance(rate, str) else rate
        self._storage = storage if storage is not None else storage_from_string(storage_uri)
        self._strategy = MovingWindowRateLimiter(self._storage)

    @classmethod
    def from_settings(cls, settings: Settings) -> "SlidingWindowRateLimiter":
        return cls(settings.ai_rate_limit, storage_uri=settings.rate_limit_storage_uri)

    @property
    def limit(self) -> int:
        return self._item.amount

    @property
    def window_seconds(self) -> int:
        return self._item.get_expiry()

    async def check(self, address: str) -> RateLimitDecision:
        """Consume one unit of quota for ``address`` if any is left."""
        allowed = await self._strategy.hit(self._item, _NAMESPACE, address)
        stats = await self._strategy.get_window_stats(self._item, _NAMESPACE, address)
        decision = RateLimitDecision(
            allowed=allowed,
            limit=self._item.amount,
            remaining=max(0, stats.remaining),
            reset_at=stats.reset_time,
        )
        if not allowed:
            logger.warning(
                "sliding_window_exhausted",
                address=address,
                limit=decision.limit,
                window_s=self.window_seconds,
                retry_after=round(decision.retry_after_seconds, 1),
            )
        return decision

    async def reset(self) -> None:
        """Drop all counters (tests and admin tooling)."""
        await self._storage.reset()
