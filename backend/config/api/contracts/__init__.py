# Request/response contracts (Pydantic)
from .base import ErrorResponse, DateRangeParams
from .clients import CreateClientRequest, ListClientsParams
from .checkins import UpsertCheckinRequest, ListCheckinsParams

__all__ = [
    'ErrorResponse',
    'DateRangeParams',
    'CreateClientRequest',
    'ListClientsParams',
    'UpsertCheckinRequest',
    'ListCheckinsParams',
]
