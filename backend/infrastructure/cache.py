"""
Key-value store abstraction used for caching, counters and idempotency records.
"""
from abc import ABC, abstractmethod
from enum import Enum
from typing import Dict, Optional, Tuple
import logging
import threading

from infrastructure.clock import Clock, FakeClock
from infrastructure.errors import KeyValueStoreError

logger = logging.getLogger(__name__)


class ConnectionState(str, Enum):
    DISCONNECTED = 'disconnected'
    CONNECTING = 'connecting'
    CONNECTED = 'connected'


class KeyValueStore(ABC):
    """
    Abstract TTL-capable key/value store.

    Only atomic primitives are exposed; callers must not build
    read-modify-write sequences on shared keys.
    """

    @abstractmethod
    def get(self, key: str) -> Optional[str]:
        """Get value by key. Returns None if not found or expired."""
        pass

    @abstractmethod
    def set(self, key: str, value: str, ttl: int) -> None:
        """Set value with TTL in seconds."""
        pass

    @abstractmethod
    def set_if_absent(self, key: str, value: str, ttl: int) -> bool:
        """Set value only if key does not exist. Returns True if it was set."""
        pass

    @abstractmethod
    def delete(self, key: str) -> None:
        """Delete key."""
        pass

    @abstractmethod
    def increment(self, key: str) -> int:
        """Atomically increment an integer counter and return the new value."""
        pass

    @abstractmethod
    def expire(self, key: str, ttl: int) -> None:
        """Refresh TTL of an existing key without touching its value."""
        pass

    @abstractmethod
    def ttl(self, key: str) -> int:
        """
        Remaining TTL in seconds.
        -1 if the key has no expiry, -2 if the key does not exist.
        """
        pass

    def ping(self) -> bool:
        """Check if store is reachable."""
        return True


class RedisKeyValueStore(KeyValueStore):
    """
    Redis implementation.

    One client per process. connect() is idempotent and disconnect() is
    safe to call when never connected. Every command runs with short
    connect/socket timeouts so a dead Redis fails the caller quickly.
    """

    def __init__(
        self,
        redis_url: str,
        connect_timeout: float = 5.0,
        socket_timeout: float = 5.0,
    ):
        self._url = redis_url
        self._connect_timeout = connect_timeout
        self._socket_timeout = socket_timeout
        self._client = None
        self._state = ConnectionState.DISCONNECTED
        self._lock = threading.Lock()

    @property
    def state(self) -> ConnectionState:
        return self._state

    def connect(self):
        """Create the client and verify it with PING. Returns the client."""
        import redis

        with self._lock:
            if self._state == ConnectionState.CONNECTED:
                return self._client

            self._state = ConnectionState.CONNECTING
            try:
                client = redis.from_url(
                    self._url,
                    decode_responses=True,
                    socket_connect_timeout=self._connect_timeout,
                    socket_timeout=self._socket_timeout,
                )
                client.ping()
            except redis.RedisError as e:
                self._state = ConnectionState.DISCONNECTED
                logger.error(f"Failed to connect to Redis: {e}")
                raise KeyValueStoreError(f"Redis unavailable: {e}") from e

            self._client = client
            self._state = ConnectionState.CONNECTED
            logger.info("Redis connection established")
            return client

    def disconnect(self) -> None:
        """Close the client and reset state."""
        with self._lock:
            client = self._client
            self._client = None
            self._state = ConnectionState.DISCONNECTED

        if client is not None:
            try:
                client.close()
            except Exception as e:
                logger.warning(f"Error while closing Redis connection: {e}")

    def _redis(self):
        if self._state == ConnectionState.CONNECTED:
            return self._client
        return self.connect()

    def _run(self, command: str, *args):
        import redis

        client = self._redis()
        try:
            return getattr(client, command)(*args)
        except redis.RedisError as e:
            raise KeyValueStoreError(f"Redis {command} failed: {e}") from e

    def get(self, key: str) -> Optional[str]:
        return self._run('get', key)

    def set(self, key: str, value: str, ttl: int) -> None:
        self._run('setex', key, ttl, value)

    def set_if_absent(self, key: str, value: str, ttl: int) -> bool:
        import redis

        client = self._redis()
        try:
            return bool(client.set(key, value, ex=ttl, nx=True))
        except redis.RedisError as e:
            raise KeyValueStoreError(f"Redis SET NX failed: {e}") from e

    def delete(self, key: str) -> None:
        self._run('delete', key)

    def increment(self, key: str) -> int:
        return int(self._run('incr', key))

    def expire(self, key: str, ttl: int) -> None:
        self._run('expire', key, ttl)

    def ttl(self, key: str) -> int:
        return int(self._run('ttl', key))

    def ping(self) -> bool:
        return bool(self._run('ping'))


class FakeKeyValueStore(KeyValueStore):
    """
    In-memory store for testing.
    Expiry follows the injected clock, so tests advance time with FakeClock.
    """

    def __init__(self, clock: Optional[Clock] = None):
        self._clock = clock or FakeClock()
        self._store: Dict[str, Tuple[str, int]] = {}  # key -> (value, expiry_unix)
        self._lock = threading.Lock()
        self.available = True

    def _check_available(self) -> None:
        if not self.available:
            raise KeyValueStoreError("Fake store is unavailable")

    def _live(self, key: str) -> Optional[Tuple[str, int]]:
        entry = self._store.get(key)
        if entry is None:
            return None
        _, expiry = entry
        if expiry > 0 and self._clock.now_unix() >= expiry:
            del self._store[key]
            return None
        return entry

    def _expiry(self, ttl: int) -> int:
        return self._clock.now_unix() + ttl if ttl > 0 else 0

    def get(self, key: str) -> Optional[str]:
        self._check_available()
        with self._lock:
            entry = self._live(key)
            return entry[0] if entry else None

    def set(self, key: str, value: str, ttl: int) -> None:
        self._check_available()
        with self._lock:
            self._store[key] = (value, self._expiry(ttl))

    def set_if_absent(self, key: str, value: str, ttl: int) -> bool:
        self._check_available()
        with self._lock:
            if self._live(key) is not None:
                return False
            self._store[key] = (value, self._expiry(ttl))
            return True

    def delete(self, key: str) -> None:
        self._check_available()
        with self._lock:
            self._store.pop(key, None)

    def increment(self, key: str) -> int:
        self._check_available()
        with self._lock:
            entry = self._live(key)
            if entry is None:
                value, expiry = 0, 0
            else:
                try:
                    value = int(entry[0])
                except ValueError:
                    raise KeyValueStoreError("value is not an integer or out of range")
                expiry = entry[1]
            value += 1
            self._store[key] = (str(value), expiry)
            return value

    def expire(self, key: str, ttl: int) -> None:
        self._check_available()
        with self._lock:
            entry = self._live(key)
            if entry is not None:
                self._store[key] = (entry[0], self._expiry(ttl))

    def ttl(self, key: str) -> int:
        self._check_available()
        with self._lock:
            entry = self._live(key)
            if entry is None:
                return -2
            if entry[1] == 0:
                return -1
            return entry[1] - self._clock.now_unix()

    def ping(self) -> bool:
        self._check_available()
        return True

    def keys(self) -> list:
        """Live keys (for test assertions)."""
        with self._lock:
            return [k for k in list(self._store) if self._live(k) is not None]

    def clear(self) -> None:
        """Clear all keys (for test cleanup)."""
        with self._lock:
            self._store.clear()
