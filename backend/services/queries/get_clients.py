"""
Client queries.

GET /clients
GET /clients/{clientId}
"""
from typing import Any, Dict, List, Optional
from dataclasses import dataclass, field

from .base import BaseQuery

DEFAULT_PAGE_SIZE = 20
MAX_PAGE_SIZE = 100


def clamp_limit(limit: Optional[int]) -> int:
    if limit is None:
        return DEFAULT_PAGE_SIZE
    return min(MAX_PAGE_SIZE, max(1, int(limit)))


def _client_data(link) -> Dict[str, Any]:
    client = link.client
    return {
        'id': str(client.id),
        'userId': client.user_id,
        'name': client.display_name,
        'email': client.email,
        'status': link.status,
        'createdAt': client.created_at.isoformat(),
        'linkedAt': link.created_at.isoformat(),
    }


@dataclass
class ListClientsResult:
    """Result of listing a coach's clients."""
    clients: List[Dict[str, Any]] = field(default_factory=list)
    next_cursor: Optional[str] = None


class ListClientsQuery(BaseQuery[ListClientsResult]):
    """Coach's clients, newest link first; cursor is the last link's timestamp."""

    def execute(
        self,
        coach_user_id: int,
        limit: Optional[int] = None,
        cursor: Optional[str] = None,
        include_archived: bool = False,
    ) -> ListClientsResult:
        from django.utils.dateparse import parse_datetime
        from apps.clients.models import CoachClient

        limit = clamp_limit(limit)

        queryset = CoachClient.objects.select_related('client').filter(coach_user_id=coach_user_id)
        if not include_archived:
            queryset = queryset.filter(status=CoachClient.Status.ACTIVE)

        if cursor:
            cursor_date = parse_datetime(cursor)
            if cursor_date:
                queryset = queryset.filter(created_at__lt=cursor_date)

        links = list(queryset.order_by('-created_at', '-client_id')[:limit + 1])
        has_more = len(links) > limit
        links = links[:limit]

        next_cursor = links[-1].created_at.isoformat() if has_more and links else None

        return ListClientsResult(
            clients=[_client_data(link) for link in links],
            next_cursor=next_cursor,
        )


@dataclass
class GetClientResult:
    """Result of getting one client."""
    found: bool
    client: Optional[Dict[str, Any]] = None
    error: Optional[str] = None


class GetClientQuery(BaseQuery[GetClientResult]):

    def execute(self, coach_user_id: int, client_id: str) -> GetClientResult:
        from apps.clients.models import Client, CoachClient

        client = Client.objects.find_owned(coach_user_id, client_id)
        if client is None:
            return GetClientResult(found=False, error="Client not found")

        link = CoachClient.objects.select_related('client').get(
            coach_user_id=coach_user_id,
            client=client,
        )
        return GetClientResult(found=True, client=_client_data(link))
