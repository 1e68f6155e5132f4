"""
Get Insight Query - the computed insight of a client for a date range.

GET /clients/{clientId}/insights
"""
from typing import Any, Dict, Optional
from dataclasses import dataclass

from .base import BaseQuery
from services.caches import insight_cache


@dataclass
class GetInsightResult:
    """Result of getting an insight."""
    found: bool
    insight: Optional[Dict[str, Any]] = None
    error: Optional[str] = None
    error_code: Optional[str] = None


class GetInsightQuery(BaseQuery[GetInsightResult]):
    """
    Not-found until the worker has finished the first computation for the
    range; that window is expected after an enqueue.
    """

    def execute(
        self,
        coach_user_id: int,
        client_id: str,
        range_start: str,
        range_end: str,
    ) -> GetInsightResult:
        from apps.clients.models import Client
        from apps.insights.models import Insight

        client = Client.objects.find_owned(coach_user_id, client_id)
        if client is None:
            return GetInsightResult(found=False, error="Client not found", error_code="CLIENT_NOT_FOUND")

        entity_id = str(client.id)
        cache = insight_cache(self._store) if self._store else None

        if cache is not None:
            cached = cache.get(entity_id, range_start, range_end)
            if cached is not None:
                return GetInsightResult(found=True, insight=cached)

        insight = Insight.objects.for_range(client.id, range_start, range_end)
        if insight is None:
            return GetInsightResult(found=False, error="Insight not found", error_code="INSIGHT_NOT_FOUND")

        payload = insight.to_dict()
        if cache is not None:
            cache.put(entity_id, range_start, range_end, payload)

        return GetInsightResult(found=True, insight=payload)
