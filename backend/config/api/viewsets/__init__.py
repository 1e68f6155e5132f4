# ViewSets package
from .base import BaseViewSet
from .clients import ClientsViewSet
from .checkins import CheckinsViewSet
from .insights import InsightsViewSet

__all__ = [
    'BaseViewSet',
    'ClientsViewSet',
    'CheckinsViewSet',
    'InsightsViewSet',
]
