"""
Cache layers built on top of KeyValueStore.

VersionedCache
    Generation-tagged entries for paginated list reads. Every cache key
    embeds the entity's current version counter, so a single INCR on write
    makes all previously cached pages unreachable. Orphaned entries are left
    to expire on their own (short, jittered TTL).

SimpleTTLCache
    One derived value per (entity, range) with explicit invalidation.

Both are read-optimisation layers: lookups and writes fail open (store
errors become a miss). Version bumps do NOT fail open, since a missed bump
would leave stale pages reachable.
"""
from typing import Any, Dict, Iterable, Optional
import json
import logging
import random

from infrastructure.cache import KeyValueStore
from infrastructure.errors import KeyValueStoreError

logger = logging.getLogger(__name__)


def _decode(store: KeyValueStore, key: str) -> Optional[Any]:
    """Load a JSON value; a corrupt value is deleted and treated as a miss."""
    try:
        raw = store.get(key)
    except KeyValueStoreError as e:
        logger.warning(f"Cache read failed, treating as miss: {e}", extra={'cache_key': key})
        return None

    if raw is None:
        return None

    try:
        return json.loads(raw)
    except (TypeError, ValueError):
        logger.warning("Corrupt cache entry dropped", extra={'cache_key': key})
        try:
            store.delete(key)
        except KeyValueStoreError as e:
            logger.warning(f"Failed to drop corrupt cache entry: {e}", extra={'cache_key': key})
        return None


def _encode(store: KeyValueStore, key: str, value: Any, ttl: int) -> None:
    try:
        store.set(key, json.dumps(value, ensure_ascii=False, default=str), ttl=ttl)
    except KeyValueStoreError as e:
        logger.warning(f"Cache write failed, skipping: {e}", extra={'cache_key': key})


class VersionedCache:
    """
    Version-salted cache for paginated queries of one entity collection.

    Args:
        store: backing key/value store
        namespace: key prefix, e.g. 'checkins'
        param_names: canonical order of query params that make up the key;
            every call must supply exactly these params
        version_ttl: TTL of the version counter, refreshed on every bump
        min_ttl / max_ttl: bounds of the jittered entry TTL
    """

    def __init__(
        self,
        store: KeyValueStore,
        namespace: str,
        param_names: Iterable[str],
        version_ttl: int = 60 * 60 * 24 * 30,
        min_ttl: int = 60,
        max_ttl: int = 180,
        rng: Optional[random.Random] = None,
    ):
        if min_ttl <= 0 or max_ttl < min_ttl:
            raise ValueError("invalid TTL bounds")
        self._store = store
        self._namespace = namespace
        self._param_names = tuple(param_names)
        self._version_ttl = version_ttl
        self._min_ttl = min_ttl
        self._max_ttl = max_ttl
        self._rng = rng or random.Random()

    def version_key(self, entity_id: str) -> str:
        return f"{self._namespace}_version:{entity_id}"

    def entry_key(self, entity_id: str, version: int, params: Dict[str, Any]) -> str:
        if set(params) != set(self._param_names):
            raise ValueError(
                f"cache params must be exactly {self._param_names}, got {tuple(sorted(params))}"
            )
        parts = ['' if params[name] is None else str(params[name]) for name in self._param_names]
        return ':'.join([f"{self._namespace}:v{version}", str(entity_id), *parts])

    def entry_ttl(self) -> int:
        return self._rng.randint(self._min_ttl, self._max_ttl)

    def current_version(self, entity_id: str) -> int:
        """
        Current generation of the collection.
        0 when never written, and also for a malformed or negative stored value.
        Store errors propagate; callers on the read path bypass the cache.
        """
        raw = self._store.get(self.version_key(entity_id))
        if raw is None:
            return 0
        try:
            version = int(raw)
        except (TypeError, ValueError):
            return 0
        return version if version >= 0 else 0

    def bump_version(self, entity_id: str) -> int:
        """Atomically move the collection to its next generation."""
        key = self.version_key(entity_id)
        version = self._store.increment(key)
        self._store.expire(key, self._version_ttl)
        return version

    def get(self, entity_id: str, version: int, params: Dict[str, Any]) -> Optional[Any]:
        return _decode(self._store, self.entry_key(entity_id, version, params))

    def put(self, entity_id: str, version: int, params: Dict[str, Any], value: Any) -> None:
        _encode(self._store, self.entry_key(entity_id, version, params), value, self.entry_ttl())


class SimpleTTLCache:
    """Single cached value per (entity, range), invalidated explicitly."""

    def __init__(self, store: KeyValueStore, namespace: str, ttl: int = 600):
        self._store = store
        self._namespace = namespace
        self._ttl = ttl

    def key(self, entity_id: str, range_start: str, range_end: str) -> str:
        return f"{self._namespace}:{entity_id}:{range_start}:{range_end}"

    def get(self, entity_id: str, range_start: str, range_end: str) -> Optional[Any]:
        return _decode(self._store, self.key(entity_id, range_start, range_end))

    def put(
        self,
        entity_id: str,
        range_start: str,
        range_end: str,
        value: Any,
        ttl_seconds: Optional[int] = None,
    ) -> None:
        _encode(
            self._store,
            self.key(entity_id, range_start, range_end),
            value,
            ttl_seconds or self._ttl,
        )

    def invalidate(self, entity_id: str, range_start: str, range_end: str) -> None:
        """Unconditional delete. Errors propagate to the caller."""
        self._store.delete(self.key(entity_id, range_start, range_end))
