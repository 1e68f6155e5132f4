"""
List Check-ins Query - a client's check-ins in a date range, cursor paginated.

GET /clients/{clientId}/checkins

Pages are cached under the client's current check-in version; any check-in
write bumps the version, so earlier pages are never served again.
"""
from typing import Any, Dict, List, Optional
from dataclasses import dataclass, field

from .base import BaseQuery
from infrastructure.errors import KeyValueStoreError
from services.caches import checkins_cache


@dataclass
class ListCheckinsResult:
    """Result of listing check-ins."""
    found: bool
    items: List[Dict[str, Any]] = field(default_factory=list)
    next_cursor: Optional[str] = None
    cached: bool = False
    error: Optional[str] = None

    def to_payload(self) -> Dict[str, Any]:
        return {'items': self.items, 'nextCursor': self.next_cursor}


class ListCheckinsQuery(BaseQuery[ListCheckinsResult]):

    def execute(
        self,
        coach_user_id: int,
        client_id: str,
        range_start: str,
        range_end: str,
        limit: int = 30,
        cursor: Optional[str] = None,
    ) -> ListCheckinsResult:
        from apps.clients.models import Client
        from apps.checkins.models import CheckIn

        client = Client.objects.find_owned(coach_user_id, client_id)
        if client is None:
            return ListCheckinsResult(found=False, error="Client not found")

        entity_id = str(client.id)
        cache = checkins_cache(self._store) if self._store else None
        params = {'from': range_start, 'to': range_end, 'limit': limit, 'cursor': cursor}

        version = None
        if cache is not None:
            try:
                version = cache.current_version(entity_id)
            except KeyValueStoreError as e:
                # Without a trustworthy version, neither read nor fill the cache
                self.log_warning(f"Check-in version unavailable, bypassing cache: {e}", client_id=entity_id)

        if version is not None:
            cached = cache.get(entity_id, version, params)
            if cached is not None:
                return ListCheckinsResult(
                    found=True,
                    items=cached.get('items', []),
                    next_cursor=cached.get('nextCursor'),
                    cached=True,
                )

        page = CheckIn.objects.page_for_client(
            client_id=client.id,
            range_start=range_start,
            range_end=range_end,
            limit=limit,
            cursor=cursor,
        )
        result = ListCheckinsResult(
            found=True,
            items=[checkin.to_dict() for checkin in page.items],
            next_cursor=page.next_cursor,
        )

        if version is not None:
            cache.put(entity_id, version, params, result.to_payload())

        return result
