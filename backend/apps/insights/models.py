"""
Insights Domain Models

- Insight (aggregate signals computed from a client's check-ins over a date range)

Rows are written only by the insight worker.
"""
from datetime import date as date_type
from typing import Any, Dict, Optional, Union
import uuid

from django.db import models


class InsightQuerySet(models.QuerySet):

    def upsert_for_range(
        self,
        client_id,
        range_start: Union[str, date_type],
        range_end: Union[str, date_type],
        avg_sleep: Optional[float],
        avg_soreness: Optional[float],
        weight_delta: Optional[float],
        summary: str,
    ) -> None:
        """
        Single-statement upsert (INSERT ... ON CONFLICT DO UPDATE) keyed by
        (client, range). created_at is kept on recomputation.
        """
        self.bulk_create(
            [self.model(
                client_id=client_id,
                range_start=range_start,
                range_end=range_end,
                avg_sleep=avg_sleep,
                avg_soreness=avg_soreness,
                weight_delta=weight_delta,
                summary=summary,
            )],
            update_conflicts=True,
            unique_fields=['client_id', 'range_start', 'range_end'],
            update_fields=['avg_sleep', 'avg_soreness', 'weight_delta', 'summary', 'updated_at'],
        )

    def for_range(self, client_id, range_start, range_end) -> Optional['Insight']:
        return self.filter(
            client_id=client_id,
            range_start=range_start,
            range_end=range_end,
        ).first()


class Insight(models.Model):
    """Computed insight for one client and date range."""

    id = models.UUIDField(
        primary_key=True,
        default=uuid.uuid4,
        editable=False
    )
    client_id = models.UUIDField(db_index=True, verbose_name='Client id')
    range_start = models.DateField(verbose_name='From')
    range_end = models.DateField(verbose_name='To')

    avg_sleep = models.FloatField(null=True, blank=True, verbose_name='Average sleep')
    avg_soreness = models.FloatField(null=True, blank=True, verbose_name='Average soreness')
    weight_delta = models.FloatField(
        null=True,
        blank=True,
        verbose_name='Weight delta',
        help_text='Newest minus oldest weight in the range'
    )
    summary = models.TextField(verbose_name='Summary')

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    objects = InsightQuerySet.as_manager()

    class Meta:
        verbose_name = 'Insight'
        verbose_name_plural = 'Insights'
        constraints = [
            models.UniqueConstraint(
                fields=['client_id', 'range_start', 'range_end'],
                name='uq_insights_client_range'
            ),
        ]

    def __str__(self):
        return f'{self.client_id} [{self.range_start}..{self.range_end}]'

    def to_dict(self) -> Dict[str, Any]:
        return {
            'id': str(self.id),
            'clientId': str(self.client_id),
            'from': self.range_start.isoformat(),
            'to': self.range_end.isoformat(),
            'avgSleep': self.avg_sleep,
            'avgSoreness': self.avg_soreness,
            'weightDelta': self.weight_delta,
            'summary': self.summary,
            'createdAt': self.created_at.isoformat(),
            'updatedAt': self.updated_at.isoformat(),
        }
