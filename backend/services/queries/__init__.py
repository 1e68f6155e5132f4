# Queries package (Read operations)
from .base import BaseQuery
from .get_clients import ListClientsQuery, GetClientQuery
from .list_checkins import ListCheckinsQuery
from .get_insight import GetInsightQuery

__all__ = [
    'BaseQuery',
    'ListClientsQuery',
    'GetClientQuery',
    'ListCheckinsQuery',
    'GetInsightQuery',
]
