"""
Insight Worker - consumes insight jobs and writes computed insights.

Per job:
1. page through the client's check-ins in the range (bounded page count)
2. aggregate metrics and build the summary
3. upsert the insight row for (client, range)
4. evict the cached insight so the next read sees the new row
"""
from typing import Any, List, Mapping, Optional, Tuple
from datetime import date
import logging

from django.conf import settings
from django.db import close_old_connections

from infrastructure.cache import KeyValueStore
from infrastructure.job_queue import Job, JobQueue, WorkerHandle
from services.caches import insight_cache
from .aggregation import InsightSignals, build_summary, compute_signals
from .jobs import InsightJob

logger = logging.getLogger(__name__)


class InsightWorker:

    def __init__(
        self,
        job_queue: JobQueue,
        store: KeyValueStore,
        page_size: Optional[int] = None,
        max_pages: Optional[int] = None,
        recycle_connections: bool = False,
    ):
        self._job_queue = job_queue
        self._cache = insight_cache(store)
        self._page_size = page_size or settings.INSIGHT_SCAN_PAGE_SIZE
        self._max_pages = max_pages or settings.INSIGHT_SCAN_MAX_PAGES
        # Long-running processes must drop stale DB connections between jobs
        self._recycle_connections = recycle_connections
        self._handle: Optional[WorkerHandle] = None

    def start(self, concurrency: Optional[int] = None) -> WorkerHandle:
        """Attach to the queue. Calling it twice returns the running handle."""
        if self._handle is None:
            concurrency = concurrency or settings.INSIGHT_WORKER_CONCURRENCY
            self._handle = self._job_queue.consume(self.handle, concurrency=concurrency)
            logger.info("Insight worker started", extra={'concurrency': concurrency})
        return self._handle

    def stop(self) -> None:
        """Wait for in-flight jobs and detach from the queue."""
        if self._handle is None:
            return
        self._handle.close()
        self._handle = None
        logger.info("Insight worker stopped")

    def handle(self, job: Job) -> None:
        if not self._recycle_connections:
            self.process(InsightJob.from_job(job))
            return

        close_old_connections()
        try:
            self.process(InsightJob.from_job(job))
        finally:
            close_old_connections()

    def process(self, job: InsightJob) -> InsightSignals:
        from apps.insights.models import Insight

        records = self._scan(job)
        signals = compute_signals(records)
        summary = build_summary(signals)

        Insight.objects.upsert_for_range(
            client_id=job.client_id,
            range_start=job.range_start,
            range_end=job.range_end,
            avg_sleep=signals.avg_sleep,
            avg_soreness=signals.avg_soreness,
            weight_delta=signals.weight_delta,
            summary=summary,
        )

        self._cache.invalidate(job.client_id, job.range_start, job.range_end)

        logger.info(
            "Insight computed",
            extra={
                'client_id': job.client_id,
                'range_start': job.range_start,
                'range_end': job.range_end,
                'checkins': len(records),
            }
        )
        return signals

    def _scan(self, job: InsightJob) -> List[Tuple[date, Mapping[str, Any]]]:
        from apps.checkins.models import CheckIn

        records: List[Tuple[date, Mapping[str, Any]]] = []
        cursor = None

        for _ in range(self._max_pages):
            page = CheckIn.objects.page_for_client(
                client_id=job.client_id,
                range_start=job.range_start,
                range_end=job.range_end,
                limit=self._page_size,
                cursor=cursor,
            )
            records.extend((checkin.date, checkin.metrics) for checkin in page.items)
            if not page.next_cursor:
                break
            cursor = page.next_cursor
        else:
            logger.warning(
                "Check-in scan stopped at page cap",
                extra={'client_id': job.client_id, 'max_pages': self._max_pages}
            )

        return records
