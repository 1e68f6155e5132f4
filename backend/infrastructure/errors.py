"""
Infrastructure exceptions.

Adapters wrap client-library errors in these so callers never depend on
redis/pika exception types directly.
"""


class InfrastructureError(Exception):
    """Base class for external store / broker failures."""


class KeyValueStoreError(InfrastructureError):
    """Key/value store unavailable or command failed."""


class JobQueueError(InfrastructureError):
    """Job queue unavailable or publish failed."""
