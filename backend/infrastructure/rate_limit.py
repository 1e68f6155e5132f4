"""
Fixed-window rate limiter on top of KeyValueStore.
"""
from dataclasses import dataclass
import logging

from infrastructure.cache import KeyValueStore
from infrastructure.errors import KeyValueStoreError

logger = logging.getLogger(__name__)


@dataclass
class RateLimitDecision:
    allowed: bool
    limit: int
    window_seconds: int
    retry_after: int = 0


class FixedWindowRateLimiter:
    """
    INCR a per-window counter and start the window on the first hit.

    Fails open: if the store is down every request is allowed, since
    limiting is protection, not correctness.
    """

    def __init__(self, store: KeyValueStore, prefix: str, max_requests: int, window_seconds: int):
        self._store = store
        self._prefix = prefix
        self._max = max_requests
        self._window = window_seconds

    def hit(self, identity: str) -> RateLimitDecision:
        key = f"{self._prefix}_{identity}"
        try:
            count = self._store.increment(key)
            if count == 1:
                self._store.expire(key, self._window)

            if count <= self._max:
                return RateLimitDecision(True, self._max, self._window)

            remaining = self._store.ttl(key)
        except KeyValueStoreError as e:
            logger.warning(f"Rate limiter unavailable, allowing request: {e}", extra={'rate_limit_key': key})
            return RateLimitDecision(True, self._max, self._window)

        if remaining < 0:
            # Window key lost its expiry (e.g. expire failed after incr)
            try:
                self._store.expire(key, self._window)
            except KeyValueStoreError as e:
                logger.warning(f"Failed to restore rate limit window: {e}", extra={'rate_limit_key': key})
        retry_after = remaining if remaining > 0 else self._window
        return RateLimitDecision(False, self._max, self._window, retry_after=retry_after)
