# Commands package (Write operations)
from .base import BaseCommand
from .create_client import CreateClientCommand
from .upsert_checkin import UpsertCheckinCommand
from .enqueue_insight import EnqueueInsightCommand

__all__ = [
    'BaseCommand',
    'CreateClientCommand',
    'UpsertCheckinCommand',
    'EnqueueInsightCommand',
]
