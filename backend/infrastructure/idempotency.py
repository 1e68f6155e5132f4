"""
Idempotency records for retry-safe writes.

Per (actor, route, key) a record goes through:

    unseen --reserve--> pending --2xx--> completed (replayed until TTL)
                           |
                           +--error / non-2xx--> released (retry re-executes)

The pending reservation is taken with SET NX before the handler runs, so two
concurrent first calls with the same key cannot both execute the handler.
"""
from dataclasses import dataclass
from typing import Any, Optional
import json
import logging

from infrastructure.cache import KeyValueStore
from infrastructure.errors import KeyValueStoreError

logger = logging.getLogger(__name__)

_PENDING = json.dumps({'state': 'pending'})


@dataclass(frozen=True)
class ResponseSnapshot:
    """Status and body of the first successful response."""
    status: int
    body: Any


@dataclass(frozen=True)
class Reservation:
    """Result of trying to start a guarded request."""
    key: str
    acquired: bool = False
    replay: Optional[ResponseSnapshot] = None

    @property
    def in_progress(self) -> bool:
        """Another request with the same key holds the reservation."""
        return not self.acquired and self.replay is None


class IdempotencyStore:
    """
    Reservation and snapshot storage on top of KeyValueStore.

    begin() surfaces store errors: without a working lookup the guard cannot
    promise anything. complete() and release() swallow them, since by then the
    handler already ran and the current response must not change.
    """

    def __init__(self, store: KeyValueStore, ttl: int = 24 * 60 * 60, lock_ttl: int = 60):
        self._store = store
        self._ttl = ttl
        self._lock_ttl = lock_ttl

    @staticmethod
    def key(actor_id: Any, route_id: str, idempotency_key: str) -> str:
        return f"idem|{actor_id}|{route_id}|{idempotency_key}"

    def begin(self, actor_id: Any, route_id: str, idempotency_key: str) -> Reservation:
        key = self.key(actor_id, route_id, idempotency_key)

        # A reservation can expire between the failed SET NX and the GET; one
        # more attempt covers that window.
        for _ in range(2):
            if self._store.set_if_absent(key, _PENDING, ttl=self._lock_ttl):
                return Reservation(key=key, acquired=True)

            raw = self._store.get(key)
            if raw is None:
                continue

            record = self._parse(raw)
            if record is None:
                logger.warning("Corrupt idempotency record dropped", extra={'idempotency_record': key})
                self._store.delete(key)
                continue

            if record.get('state') == 'completed':
                return Reservation(
                    key=key,
                    replay=ResponseSnapshot(status=int(record['status']), body=record.get('body')),
                )
            return Reservation(key=key)

        return Reservation(key=key)

    @staticmethod
    def _parse(raw: str) -> Optional[dict]:
        try:
            record = json.loads(raw)
        except (TypeError, ValueError):
            return None
        if not isinstance(record, dict) or 'state' not in record:
            return None
        if record['state'] == 'completed' and not isinstance(record.get('status'), int):
            return None
        return record

    def complete(self, reservation: Reservation, status: int, body: Any) -> None:
        """Persist a 2xx response; any other status releases the reservation."""
        if not 200 <= status < 300:
            self.release(reservation)
            return

        record = json.dumps(
            {'state': 'completed', 'status': status, 'body': body},
            ensure_ascii=False,
            default=str,
        )
        try:
            self._store.set(reservation.key, record, ttl=self._ttl)
        except KeyValueStoreError as e:
            logger.error(
                f"Failed to persist idempotency record: {e}. "
                f"A retry with the same key may repeat the side effect.",
                extra={'idempotency_record': reservation.key}
            )

    def release(self, reservation: Reservation) -> None:
        try:
            self._store.delete(reservation.key)
        except KeyValueStoreError as e:
            logger.warning(
                f"Failed to release idempotency reservation: {e}",
                extra={'idempotency_record': reservation.key}
            )
