"""
Check-ins Domain Models

- CheckIn (one daily record of free-form metrics per client)

Metrics are stored as a JSON document; the field names inside vary between
clients and apps, so readers must tolerate aliases.
"""
from dataclasses import dataclass
from datetime import date as date_type
from typing import Any, Dict, List, Optional, Tuple, Union
import uuid

from django.db import models, transaction


@dataclass
class CheckInPage:
    """One page of check-ins, newest first."""
    items: List['CheckIn']
    next_cursor: Optional[str] = None


class CheckInQuerySet(models.QuerySet):

    def page_for_client(
        self,
        client_id,
        range_start: Union[str, date_type],
        range_end: Union[str, date_type],
        limit: int,
        cursor: Optional[Union[str, date_type]] = None,
    ) -> CheckInPage:
        """
        Cursor page of a client's check-ins inside [range_start, range_end].

        Ordered by date desc with id as tie-break. The cursor is the date of
        the last item of the previous page; one extra row is fetched to know
        whether another page exists.
        """
        queryset = self.filter(
            client_id=client_id,
            date__gte=range_start,
            date__lte=range_end,
        )
        if cursor:
            queryset = queryset.filter(date__lt=cursor)

        rows = list(queryset.order_by('-date', '-id')[:limit + 1])
        has_more = len(rows) > limit
        rows = rows[:limit]

        next_cursor = rows[-1].date.isoformat() if has_more and rows else None
        return CheckInPage(items=rows, next_cursor=next_cursor)

    def upsert_for_date(
        self,
        client_id,
        date: Union[str, date_type],
        metrics: Dict[str, Any],
        notes: Optional[str] = None,
    ) -> Tuple['CheckIn', bool]:
        """
        Create the check-in for (client, date) or merge metric keys into it.
        Returns (check-in, created).
        """
        with transaction.atomic():
            checkin, created = self.select_for_update().get_or_create(
                client_id=client_id,
                date=date,
                defaults={'metrics': dict(metrics), 'notes': notes or ''},
            )
            if not created:
                checkin.metrics = {**(checkin.metrics or {}), **metrics}
                if notes is not None:
                    checkin.notes = notes
                checkin.save(update_fields=['metrics', 'notes', 'updated_at'])
        return checkin, created


class CheckIn(models.Model):
    """Daily check-in of a client."""

    id = models.UUIDField(
        primary_key=True,
        default=uuid.uuid4,
        editable=False
    )
    client_id = models.UUIDField(db_index=True, verbose_name='Client id')
    date = models.DateField(verbose_name='Date')

    metrics = models.JSONField(
        default=dict,
        verbose_name='Metrics',
        help_text='e.g. {"sleep": 7.5, "soreness": 3, "weight": 81.2}'
    )
    notes = models.TextField(blank=True, verbose_name='Notes')

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    objects = CheckInQuerySet.as_manager()

    class Meta:
        verbose_name = 'Check-in'
        verbose_name_plural = 'Check-ins'
        constraints = [
            models.UniqueConstraint(fields=['client_id', 'date'], name='uq_checkins_client_date'),
        ]
        indexes = [
            models.Index(fields=['client_id', '-date'], name='idx_checkins_client_date_desc'),
        ]

    def __str__(self):
        return f'{self.client_id} @ {self.date}'

    def to_dict(self) -> Dict[str, Any]:
        return {
            'id': str(self.id),
            'clientId': str(self.client_id),
            'date': self.date.isoformat(),
            'metrics': self.metrics,
            'notes': self.notes,
            'createdAt': self.created_at.isoformat(),
        }
