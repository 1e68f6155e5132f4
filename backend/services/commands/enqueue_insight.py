"""
Enqueue Insight Command - schedules insight computation for a date range.

POST /clients/{clientId}/insights
"""
from typing import Optional
from dataclasses import dataclass

from .base import BaseCommand
from services.insights.jobs import InsightJob, INSIGHT_JOB_NAME


@dataclass
class EnqueueInsightResult:
    """Result of enqueueing an insight job."""
    success: bool
    job_id: Optional[str] = None
    error: Optional[str] = None
    error_code: Optional[str] = None


class EnqueueInsightCommand(BaseCommand[EnqueueInsightResult]):
    """
    Fire-and-forget: returns as soon as the job is on the queue.

    Enqueue errors are raised, not swallowed; a 202 promises that the work
    is scheduled.
    """

    def execute(
        self,
        coach_user_id: int,
        client_id: str,
        range_start: str,
        range_end: str,
    ) -> EnqueueInsightResult:
        from apps.clients.models import Client

        client = Client.objects.find_owned(coach_user_id, client_id)
        if client is None:
            return EnqueueInsightResult(
                success=False,
                error="Client not found",
                error_code="CLIENT_NOT_FOUND"
            )

        job = InsightJob(client_id=str(client.id), range_start=range_start, range_end=range_end)
        job_id = self._job_queue.enqueue(INSIGHT_JOB_NAME, job.to_payload(), job_id=job.job_id)

        self.log_info("Insight generation enqueued", job_id=job_id, client_id=job.client_id)

        return EnqueueInsightResult(success=True, job_id=job_id)
