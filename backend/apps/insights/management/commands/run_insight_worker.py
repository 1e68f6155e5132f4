"""
Run the insight worker.

    python manage.py run_insight_worker --concurrency 5

Consumes the insight queue until SIGTERM/SIGINT, then waits for in-flight
jobs before exiting.
"""
import signal
import threading

from django.conf import settings
from django.core.management.base import BaseCommand

from infrastructure.bootstrap import get_container
from infrastructure.cache import KeyValueStore
from infrastructure.job_queue import JobQueue
from infrastructure.logging import configure_logging
from services.insights import InsightWorker


class Command(BaseCommand):
    help = 'Consume insight jobs and write computed insights'

    def add_arguments(self, parser):
        parser.add_argument(
            '--concurrency',
            type=int,
            default=settings.INSIGHT_WORKER_CONCURRENCY,
            help='Number of jobs processed in parallel',
        )

    def handle(self, *args, **options):
        configure_logging(is_production=not settings.DEBUG, level=settings.LOG_LEVEL)

        concurrency = options['concurrency']
        if concurrency < 1:
            self.stderr.write(self.style.ERROR('--concurrency must be >= 1'))
            return

        container = get_container()
        worker = InsightWorker(
            job_queue=container.get(JobQueue),
            store=container.get(KeyValueStore),
            recycle_connections=True,
        )

        stopping = threading.Event()

        def request_stop(signum, frame):
            self.stdout.write(f'Received signal {signum}, draining in-flight jobs...')
            stopping.set()

        signal.signal(signal.SIGTERM, request_stop)
        signal.signal(signal.SIGINT, request_stop)

        worker.start(concurrency=concurrency)
        self.stdout.write(self.style.SUCCESS(
            f'Insight worker consuming "{settings.INSIGHT_QUEUE_NAME}" (concurrency={concurrency})'
        ))

        try:
            while not stopping.wait(timeout=1.0):
                pass
        finally:
            worker.stop()
            container.shutdown()

        self.stdout.write(self.style.SUCCESS('Insight worker stopped'))
