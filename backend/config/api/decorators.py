"""
API decorators: idempotency and rate limiting.
"""
from functools import wraps
from typing import Callable, Optional
from uuid import UUID

from rest_framework import status
from rest_framework.response import Response

from config.api.contracts import ErrorResponse
from infrastructure.cache import KeyValueStore
from services.caches import idempotency_store

IDEMPOTENCY_HEADER = 'Idempotency-Key'


def _error(message: str, code: str, status_code: int, details: Optional[dict] = None, headers=None) -> Response:
    return Response(
        ErrorResponse(error=message, code=code, details=details).model_dump(),
        status=status_code,
        headers=headers,
    )


def _canonical_uuid(raw: str) -> Optional[str]:
    """Lower-cased UUID, or None unless raw is in 8-4-4-4-12 hyphenated form."""
    candidate = raw.strip().lower()
    try:
        parsed = UUID(candidate)
    except ValueError:
        return None
    # UUID() also takes braces, urn:uuid: and bare hex
    if str(parsed) != candidate:
        return None
    return candidate


def idempotent(route_id: str):
    """
    Make a write endpoint safe to retry.

    Requires an ``Idempotency-Key`` header holding a hyphenated UUID. Per
    (user, route_id, key):
    - first call: the key is reserved, the view runs, and a 2xx response
      (status + data) is stored for 24h
    - retry after success: the stored response is replayed, the view does
      not run
    - retry while the first call is still running: 409
    - retry after an error response: the view runs again

    The response is taken from the view's return value, so views must
    return a DRF Response.
    """

    def decorator(func):

        @wraps(func)
        def wrapper(self, request, *args, **kwargs):
            raw_key = request.headers.get(IDEMPOTENCY_HEADER)

            if not raw_key:
                return _error(
                    'Missing Idempotency-Key header',
                    'BAD_REQUEST',
                    status.HTTP_400_BAD_REQUEST,
                    details={'header': IDEMPOTENCY_HEADER},
                )

            idem_key = _canonical_uuid(raw_key)
            if idem_key is None:
                return _error(
                    'Invalid Idempotency-Key format (UUID expected)',
                    'BAD_REQUEST',
                    status.HTTP_400_BAD_REQUEST,
                    details={'header': IDEMPOTENCY_HEADER},
                )

            store = idempotency_store(self.get_container().get(KeyValueStore))
            reservation = store.begin(request.user.id, route_id, idem_key)

            if reservation.replay is not None:
                return Response(
                    reservation.replay.body,
                    status=reservation.replay.status,
                    headers={'Idempotent-Replayed': 'true'},
                )

            if reservation.in_progress:
                return _error(
                    'A request with this Idempotency-Key is still in progress',
                    'CONFLICT',
                    status.HTTP_409_CONFLICT,
                )

            try:
                response = func(self, request, *args, **kwargs)
            except Exception:
                store.release(reservation)
                raise

            store.complete(reservation, response.status_code, response.data)
            return response

        return wrapper

    return decorator


def by_user(request) -> Optional[str]:
    user_id = getattr(request.user, 'id', None)
    return str(user_id) if user_id is not None else None


def rate_limited(limiter_factory: Callable, key: Callable = by_user):
    """
    Fixed-window rate limit.

    Args:
        limiter_factory: builds a FixedWindowRateLimiter from a KeyValueStore
        key: request -> identity string, or None to skip limiting
    """

    def decorator(func):

        @wraps(func)
        def wrapper(self, request, *args, **kwargs):
            identity = key(request)
            if identity is None:
                return func(self, request, *args, **kwargs)

            limiter = limiter_factory(self.get_container().get(KeyValueStore))
            decision = limiter.hit(identity)

            if not decision.allowed:
                return _error(
                    'Too many requests',
                    'RATE_LIMITED',
                    status.HTTP_429_TOO_MANY_REQUESTS,
                    details={
                        'limit': decision.limit,
                        'windowSeconds': decision.window_seconds,
                        'retryAfterSeconds': decision.retry_after,
                    },
                    headers={'Retry-After': str(decision.retry_after)},
                )

            return func(self, request, *args, **kwargs)

        return wrapper

    return decorator
