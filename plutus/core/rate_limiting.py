import threading
import time
from collections import deque
from typing import Callable, Deque, Dict, Optional

from fastapi import FastAPI, HTTPException, Request, status
from limits import parse
from slowapi.util import get_remote_address

from plutus.core.config import settings
from plutus.utils.logging import get_logger

FORWARDED_FOR_HEADER = "X-Forwarded-For"


class SlidingWindowRateLimiter:
    """Per-client sliding-window request counter.

    Every decision prunes, checks and appends under one lock shared by all
    clients. Rejected requests are not recorded, and windows are only pruned
    when the same client comes back. Clients whose newest hit has aged out
    are dropped at most once per window, so one-off identifiers do not
    accumulate.
    """

    def __init__(
        self,
        limit: int = 100,
        window: float = 60.0,
        clock: Callable[[], float] = time.monotonic,
    ):
        self.limit = limit
        self.window = window
        self._clock = clock
        self._hits: Dict[str, Deque[float]] = {}
        self._lock = threading.Lock()
        self._last_sweep = clock()

    def __len__(self) -> int:
        with self._lock:
            return len(self._hits)

    @classmethod
    def from_rate_string(cls, rate: str, **kwargs) -> "SlidingWindowRateLimiter":
        item = parse(rate)
        return cls(limit=item.amount, window=float(item.get_expiry()), **kwargs)

    def hit(self, client_id: str) -> bool:
        with self._lock:
            now = self._clock()
            cutoff = now - self.window
            if now - self._last_sweep >= self.window:
                self._sweep(cutoff)
                self._last_sweep = now
            hits = self._hits.setdefault(client_id, deque())
            while hits and hits[0] <= cutoff:
                hits.popleft()
            if len(hits) >= self.limit:
                return False
            hits.append(now)
            return True

    def _sweep(self, cutoff: float) -> None:
        # Caller holds the lock
        idle = [
            client_id
            for client_id, hits in self._hits.items()
            if not hits or hits[-1] <= cutoff
        ]
        for client_id in idle:
            del self._hits[client_id]

    def usage(self, client_id: str) -> int:
        """Requests recorded for a client, as of its last pruning."""
        with self._lock:
            return len(self._hits.get(client_id, ()))


def client_identifier(request: Request) -> str:
    # The forwarding header is trusted verbatim when present
    forwarded = request.headers.get(FORWARDED_FOR_HEADER)
    if forwarded:
        return forwarded
    return get_remote_address(request)


def setup_rate_limiting(app: FastAPI) -> Optional[SlidingWindowRateLimiter]:
    limiter = None
    if settings.RATE_LIMIT_ENABLED:
        limiter = SlidingWindowRateLimiter.from_rate_string(settings.RATE_LIMIT)
        get_logger().info(
            f"Rate limiting enabled ({limiter.limit} req per {limiter.window:g}s)"
        )
    app.state.rate_limiter = limiter
    return limiter


async def enforce_rate_limit(request: Request) -> None:
    limiter: Optional[SlidingWindowRateLimiter] = getattr(
        request.app.state, "rate_limiter", None
    )
    if limiter is None:
        return
    client_id = client_identifier(request)
    if not limiter.hit(client_id):
        get_logger().warning(f"Rate limit exceeded for {client_id}")
        raise HTTPException(
            status_code=status.HTTP_429_TOO_MANY_REQUESTS,
            detail="Rate limit exceeded",
        )
