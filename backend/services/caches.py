"""
Cache and guard instances configured from settings.
"""
from django.conf import settings

from infrastructure.cache import KeyValueStore
from infrastructure.idempotency import IdempotencyStore
from infrastructure.rate_limit import FixedWindowRateLimiter
from infrastructure.versioned_cache import SimpleTTLCache, VersionedCache

CHECKIN_LIST_PARAMS = ('from', 'to', 'limit', 'cursor')


def checkins_cache(store: KeyValueStore) -> VersionedCache:
    """Paginated check-in lists, invalidated by bumping the client's version."""
    return VersionedCache(
        store,
        namespace='checkins',
        param_names=CHECKIN_LIST_PARAMS,
        version_ttl=settings.CHECKINS_VERSION_TTL_SECONDS,
        min_ttl=settings.CHECKINS_CACHE_TTL_MIN_SECONDS,
        max_ttl=settings.CHECKINS_CACHE_TTL_MAX_SECONDS,
    )


def insight_cache(store: KeyValueStore) -> SimpleTTLCache:
    """Insight per (client, range), evicted by the worker after each computation."""
    return SimpleTTLCache(store, namespace='insight', ttl=settings.INSIGHTS_CACHE_TTL_SECONDS)


def idempotency_store(store: KeyValueStore) -> IdempotencyStore:
    return IdempotencyStore(
        store,
        ttl=settings.IDEMPOTENCY_TTL_SECONDS,
        lock_ttl=settings.IDEMPOTENCY_LOCK_TTL_SECONDS,
    )


def insights_rate_limiter(store: KeyValueStore) -> FixedWindowRateLimiter:
    return FixedWindowRateLimiter(
        store,
        prefix='rl_insights',
        max_requests=settings.INSIGHTS_RATE_LIMIT_MAX,
        window_seconds=settings.INSIGHTS_RATE_LIMIT_WINDOW_SECONDS,
    )
