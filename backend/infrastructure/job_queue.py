"""
Durable job queue abstraction (at-least-once delivery).

Jobs carry a deterministic id. While a job with a given id is outstanding,
enqueueing the same id again collapses into the existing job; the in-flight
marker lives in the key/value store and is cleared once the job settles
(completed or out of attempts).

Failed jobs are retried by the queue itself with exponential backoff up to
``max_attempts``; handlers never retry on their own.
"""
from abc import ABC, abstractmethod
from collections import deque
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field, replace
from functools import partial
from typing import Any, Callable, Deque, Dict, List, Optional, Set, Tuple
import json
import logging
import threading
import time
import uuid

from infrastructure.cache import KeyValueStore
from infrastructure.errors import JobQueueError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Job:
    id: str
    name: str
    payload: Dict[str, Any] = field(default_factory=dict)
    attempt: int = 1

    def to_message(self) -> bytes:
        return json.dumps({
            'id': self.id,
            'name': self.name,
            'payload': self.payload,
            'attempt': self.attempt,
        }, ensure_ascii=False).encode('utf-8')

    @classmethod
    def from_message(cls, body: bytes) -> 'Job':
        data = json.loads(body)
        return cls(
            id=str(data['id']),
            name=str(data['name']),
            payload=dict(data.get('payload') or {}),
            attempt=int(data.get('attempt', 1)),
        )


JobHandler = Callable[[Job], Any]


class WorkerHandle(ABC):
    """Handle of a running consumer."""

    @abstractmethod
    def close(self) -> None:
        """Stop taking new jobs and wait for in-flight jobs to settle."""
        pass


class JobQueue(ABC):
    """
    Abstract job queue bound to one queue name.

    Args:
        queue_name: broker queue name
        store: key/value store holding in-flight job markers
        max_attempts: total executions per job before it is dropped
        retention_seconds: upper bound on how long a job id stays reserved
        backoff_seconds: base delay for the first retry, doubled per attempt
    """

    MAX_BACKOFF_SECONDS = 300.0

    def __init__(
        self,
        queue_name: str,
        store: KeyValueStore,
        max_attempts: int = 3,
        retention_seconds: int = 3600,
        backoff_seconds: float = 2.0,
    ):
        self.queue_name = queue_name
        self._store = store
        self._max_attempts = max(1, max_attempts)
        self._retention_seconds = retention_seconds
        self._backoff_seconds = backoff_seconds

    def marker_key(self, job_id: str) -> str:
        return f"jobs:{self.queue_name}:{job_id}"

    def enqueue(self, name: str, payload: Dict[str, Any], job_id: Optional[str] = None) -> str:
        """
        Submit a job and return its id.

        Raises JobQueueError (or KeyValueStoreError from the marker store) if
        the job could not be scheduled; callers must not report it accepted.
        """
        job_id = job_id or uuid.uuid4().hex
        marker = self.marker_key(job_id)

        if not self._store.set_if_absent(marker, str(int(time.time())), ttl=self._retention_seconds):
            logger.info(
                "Job already outstanding, enqueue collapsed",
                extra={'queue': self.queue_name, 'job_id': job_id}
            )
            return job_id

        try:
            self._publish(Job(id=job_id, name=name, payload=payload))
        except Exception as e:
            self._store.delete(marker)
            if isinstance(e, JobQueueError):
                raise
            raise JobQueueError(f"Failed to enqueue job {job_id}: {e}") from e

        logger.info("Job enqueued", extra={'queue': self.queue_name, 'job_id': job_id, 'job_name': name})
        return job_id

    @abstractmethod
    def _publish(self, job: Job, delay_seconds: float = 0) -> None:
        pass

    @abstractmethod
    def consume(self, handler: JobHandler, concurrency: int = 5) -> WorkerHandle:
        pass

    def is_healthy(self) -> bool:
        return True

    def backoff_delay(self, attempt: int) -> float:
        return min(self._backoff_seconds * (2 ** (attempt - 1)), self.MAX_BACKOFF_SECONDS)

    def _execute(self, handler: JobHandler, job: Job) -> None:
        """
        Run one delivery of a job.

        A handler failure never escapes: the job is either rescheduled or
        dropped after the last attempt. Only a failure to reschedule raises,
        leaving the delivery unacknowledged for the broker to redeliver.
        """
        extra = {'queue': self.queue_name, 'job_id': job.id, 'attempt': job.attempt}
        try:
            handler(job)
        except Exception as e:
            if job.attempt < self._max_attempts:
                delay = self.backoff_delay(job.attempt)
                logger.warning(f"Job failed, retrying in {delay}s: {e}", extra=extra)
                self._publish(replace(job, attempt=job.attempt + 1), delay_seconds=delay)
                return
            logger.error(f"Job failed after {job.attempt} attempts: {e}", exc_info=True, extra=extra)
        else:
            logger.info("Job completed", extra=extra)

        self._release(job.id)

    def _release(self, job_id: str) -> None:
        try:
            self._store.delete(self.marker_key(job_id))
        except Exception as e:
            logger.warning(
                f"Failed to clear job marker, it will expire on its own: {e}",
                extra={'queue': self.queue_name, 'job_id': job_id}
            )


class RabbitMQJobQueue(JobQueue):
    """
    RabbitMQ implementation.

    - Durable queue, persistent messages, manual acks after the handler settles
    - Retries go through ``<queue>.retry.<delay_ms>``, one queue per backoff
      delay. Each has a fixed queue TTL and dead-letters back into the main
      queue. RabbitMQ only expires messages at the head of a queue, so a
      shared queue with mixed per-message TTLs would hold short delays behind
      long ones
    - Publishing shares one connection guarded by a lock; each consumer owns
      its own connection and runs jobs on a thread pool sized to the prefetch
    """

    MAX_RETRIES = 3
    INITIAL_RETRY_DELAY = 0.5  # seconds
    MAX_RETRY_DELAY = 5.0  # seconds

    def __init__(self, rabbitmq_url: str, queue_name: str, store: KeyValueStore, **kwargs):
        super().__init__(queue_name, store, **kwargs)
        self._url = rabbitmq_url
        self._connection = None
        self._channel = None
        self._connection_lock = threading.Lock()
        self._retry_queues: Set[int] = set()

    def retry_queue_name(self, delay_ms: int) -> str:
        return f"{self.queue_name}.retry.{delay_ms}"

    def _parameters(self):
        import pika

        params = pika.URLParameters(self._url)
        params.heartbeat = 180
        params.blocked_connection_timeout = 300
        params.socket_timeout = 10
        return params

    def declare(self, channel) -> None:
        """Declare the work queue."""
        channel.queue_declare(queue=self.queue_name, durable=True)

    def declare_retry_queue(self, channel, delay_ms: int) -> str:
        """Declare the retry queue for one delay and return its name."""
        name = self.retry_queue_name(delay_ms)
        channel.queue_declare(
            queue=name,
            durable=True,
            arguments={
                'x-message-ttl': delay_ms,
                'x-dead-letter-exchange': '',
                'x-dead-letter-routing-key': self.queue_name,
            }
        )
        return name

    def _ensure_connection(self) -> None:
        """Caller must hold the lock."""
        if self._connection is not None and self._connection.is_open \
                and self._channel is not None and self._channel.is_open:
            return

        import pika

        self._close_connection_unsafe()
        self._connection = pika.BlockingConnection(self._parameters())
        self._channel = self._connection.channel()
        self.declare(self._channel)
        logger.info("RabbitMQ publisher connection established", extra={'queue': self.queue_name})

    def _close_connection_unsafe(self) -> None:
        """Close connection without lock (caller must hold lock)."""
        if self._connection:
            try:
                if not self._connection.is_closed:
                    self._connection.close()
            except Exception as e:
                logger.debug(f"Ignoring error while closing RabbitMQ connection: {e}")
            self._connection = None
            self._channel = None
            self._retry_queues.clear()

    def _ensure_retry_queue(self, delay_ms: int) -> str:
        """Caller must hold the lock. Declared once per connection."""
        if delay_ms not in self._retry_queues:
            self.declare_retry_queue(self._channel, delay_ms)
            self._retry_queues.add(delay_ms)
        return self.retry_queue_name(delay_ms)

    def _publish(self, job: Job, delay_seconds: float = 0) -> None:
        """Publish with reconnect/backoff; raises JobQueueError when all attempts fail."""
        import pika

        delay_ms = int(delay_seconds * 1000)
        properties = pika.BasicProperties(
            delivery_mode=2,  # Persistent
            content_type='application/json',
            message_id=job.id,
        )

        last_error = None
        retry_delay = self.INITIAL_RETRY_DELAY

        for attempt in range(self.MAX_RETRIES):
            with self._connection_lock:
                try:
                    self._ensure_connection()
                    routing_key = self.queue_name
                    if delay_ms > 0:
                        routing_key = self._ensure_retry_queue(delay_ms)
                    self._channel.basic_publish(
                        exchange='',
                        routing_key=routing_key,
                        body=job.to_message(),
                        properties=properties,
                    )
                    return
                except Exception as e:
                    last_error = e
                    logger.warning(
                        f"Publish attempt {attempt + 1}/{self.MAX_RETRIES} failed for job {job.id}: {e}"
                    )
                    self._close_connection_unsafe()

            if attempt < self.MAX_RETRIES - 1:
                time.sleep(retry_delay)
                retry_delay = min(retry_delay * 2, self.MAX_RETRY_DELAY)

        raise JobQueueError(f"Failed to publish job {job.id}: {last_error}")

    def consume(self, handler: JobHandler, concurrency: int = 5) -> WorkerHandle:
        handle = RabbitMQWorkerHandle(self, handler, concurrency)
        handle.start()
        return handle

    def close(self) -> None:
        with self._connection_lock:
            self._close_connection_unsafe()

    def is_healthy(self) -> bool:
        with self._connection_lock:
            try:
                self._ensure_connection()
                self._connection.process_data_events(time_limit=0)
                return True
            except Exception:
                self._close_connection_unsafe()
                return False


class RabbitMQWorkerHandle(WorkerHandle):
    """
    Consumer thread plus job thread pool.

    The connection is only touched from the consumer thread; job threads hand
    their acks back with add_callback_threadsafe.
    """

    RECONNECT_DELAY = 5.0  # seconds
    POLL_INTERVAL = 1.0  # seconds

    def __init__(self, queue: RabbitMQJobQueue, handler: JobHandler, concurrency: int):
        self._queue = queue
        self._handler = handler
        self._concurrency = max(1, concurrency)
        self._stopping = threading.Event()
        self._thread = threading.Thread(
            target=self._run, name=f"consumer-{queue.queue_name}", daemon=True
        )

    def start(self) -> None:
        self._thread.start()

    def close(self) -> None:
        self._stopping.set()
        self._thread.join()

    def _run(self) -> None:
        while not self._stopping.is_set():
            try:
                self._consume_until_stopped()
            except Exception as e:
                logger.error(
                    f"Consumer error, reconnecting in {self.RECONNECT_DELAY}s: {e}",
                    exc_info=True,
                    extra={'queue': self._queue.queue_name}
                )
                self._stopping.wait(self.RECONNECT_DELAY)

    def _consume_until_stopped(self) -> None:
        import pika

        connection = pika.BlockingConnection(self._queue._parameters())
        executor = ThreadPoolExecutor(
            max_workers=self._concurrency,
            thread_name_prefix=f"job-{self._queue.queue_name}",
        )
        try:
            channel = connection.channel()
            self._queue.declare(channel)
            channel.basic_qos(prefetch_count=self._concurrency)

            def on_message(ch, method, properties, body):
                try:
                    job = Job.from_message(body)
                except (ValueError, KeyError, TypeError) as e:
                    logger.error(f"Dropping malformed job message: {e}", extra={'queue': self._queue.queue_name})
                    ch.basic_ack(delivery_tag=method.delivery_tag)
                    return
                executor.submit(self._process, connection, ch, method.delivery_tag, job)

            channel.basic_consume(queue=self._queue.queue_name, on_message_callback=on_message)
            logger.info(
                "Consumer started",
                extra={'queue': self._queue.queue_name, 'concurrency': self._concurrency}
            )

            while not self._stopping.is_set():
                connection.process_data_events(time_limit=self.POLL_INTERVAL)

            channel.stop_consuming()
            executor.shutdown(wait=True)
            # flush acks queued by the last jobs
            connection.process_data_events(time_limit=0)
            logger.info("Consumer stopped", extra={'queue': self._queue.queue_name})
        finally:
            executor.shutdown(wait=True)
            if connection.is_open:
                connection.close()

    def _process(self, connection, channel, delivery_tag, job: Job) -> None:
        try:
            self._queue._execute(self._handler, job)
            settle = partial(channel.basic_ack, delivery_tag=delivery_tag)
        except Exception as e:
            logger.error(
                f"Could not settle job, returning it to the queue: {e}",
                extra={'queue': self._queue.queue_name, 'job_id': job.id}
            )
            settle = partial(channel.basic_nack, delivery_tag=delivery_tag, requeue=True)

        if connection.is_open:
            connection.add_callback_threadsafe(settle)


class FakeJobQueue(JobQueue):
    """
    In-memory job queue for testing.
    Jobs run synchronously on drain(); retry delays are recorded, not waited.
    """

    def __init__(self, queue_name: str, store: KeyValueStore, **kwargs):
        kwargs.setdefault('backoff_seconds', 0)
        super().__init__(queue_name, store, **kwargs)
        self._pending: Deque[Job] = deque()
        self._handler: Optional[JobHandler] = None
        self.published: List[Tuple[Job, float]] = []
        self.available = True

    def _publish(self, job: Job, delay_seconds: float = 0) -> None:
        if not self.available:
            raise JobQueueError("Fake queue is unavailable")
        self.published.append((job, delay_seconds))
        self._pending.append(job)

    def consume(self, handler: JobHandler, concurrency: int = 5) -> WorkerHandle:
        self._handler = handler
        return FakeWorkerHandle(self)

    def drain(self) -> int:
        """Run pending jobs (and their retries) until the queue is empty."""
        if self._handler is None:
            raise RuntimeError("No consumer attached; call consume() first")
        processed = 0
        while self._pending:
            self._execute(self._handler, self._pending.popleft())
            processed += 1
        return processed

    @property
    def pending(self) -> List[Job]:
        return list(self._pending)

    def detach(self) -> None:
        self._handler = None

    def is_healthy(self) -> bool:
        return self.available


class FakeWorkerHandle(WorkerHandle):

    def __init__(self, queue: FakeJobQueue):
        self._queue = queue

    def close(self) -> None:
        self._queue.detach()
