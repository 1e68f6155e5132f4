"""
Upsert Check-in Command - records a client's daily check-in.

POST /clients/{clientId}/checkins
"""
from datetime import date
from typing import Any, Dict, Optional
from dataclasses import dataclass

from .base import BaseCommand
from services.caches import checkins_cache


@dataclass
class UpsertCheckinResult:
    """Result of upserting a check-in."""
    success: bool
    checkin_id: Optional[str] = None
    created: bool = False
    error: Optional[str] = None
    error_code: Optional[str] = None


class UpsertCheckinCommand(BaseCommand[UpsertCheckinResult]):
    """
    Create or merge the check-in for (client, date), then move the client's
    check-in list cache to a new version.

    The version bump is not best-effort: if it fails, the request fails,
    because cached pages of the old version would otherwise stay reachable.
    """

    def execute(
        self,
        coach_user_id: int,
        client_id: str,
        checkin_date: date,
        metrics: Dict[str, Any],
        notes: Optional[str] = None,
    ) -> UpsertCheckinResult:
        from apps.clients.models import Client
        from apps.checkins.models import CheckIn

        client = Client.objects.find_owned(coach_user_id, client_id)
        if client is None:
            return UpsertCheckinResult(
                success=False,
                error="Client not found",
                error_code="CLIENT_NOT_FOUND"
            )

        checkin, created = CheckIn.objects.upsert_for_date(
            client_id=client.id,
            date=checkin_date,
            metrics=metrics,
            notes=notes,
        )

        version = checkins_cache(self._store).bump_version(str(client.id))

        self.log_info(
            "Check-in upserted",
            checkin_id=str(checkin.id),
            client_id=str(client.id),
            checkin_created=created,
            checkins_version=version,
        )

        return UpsertCheckinResult(success=True, checkin_id=str(checkin.id), created=created)
