"""
Tests for the job queue contract (FakeJobQueue) and job serialization.
"""
import pytest

from infrastructure.cache import FakeKeyValueStore
from infrastructure.errors import JobQueueError
from infrastructure.job_queue import FakeJobQueue, Job


@pytest.fixture
def kv():
    return FakeKeyValueStore()


@pytest.fixture
def queue(kv):
    return FakeJobQueue('insights', kv, max_attempts=3, retention_seconds=3600)


class TestJobMessage:

    def test_message_round_trip_keeps_attempt(self):
        job = Job(id='j1', name='generate', payload={'clientId': 'c1'}, attempt=2)
        assert Job.from_message(job.to_message()) == job

    def test_missing_attempt_defaults_to_first(self):
        job = Job.from_message(b'{"id": "j1", "name": "generate", "payload": {}}')
        assert job.attempt == 1


class TestEnqueue:

    def test_returns_given_job_id(self, queue):
        assert queue.enqueue('generate', {'a': 1}, job_id='insight_c1') == 'insight_c1'
        assert [job.id for job in queue.pending] == ['insight_c1']

    def test_generates_id_when_absent(self, queue):
        job_id = queue.enqueue('generate', {})
        assert job_id
        assert queue.pending[0].id == job_id

    def test_duplicate_id_collapses_while_outstanding(self, queue):
        queue.enqueue('generate', {}, job_id='j1')
        queue.enqueue('generate', {}, job_id='j1')
        assert len(queue.pending) == 1

    def test_id_reusable_after_completion(self, queue):
        ran = []
        queue.consume(lambda job: ran.append(job.id))

        queue.enqueue('generate', {}, job_id='j1')
        queue.drain()
        queue.enqueue('generate', {}, job_id='j1')
        queue.drain()

        assert ran == ['j1', 'j1']

    def test_publish_failure_raises_and_clears_marker(self, queue, kv):
        queue.available = False
        with pytest.raises(JobQueueError):
            queue.enqueue('generate', {}, job_id='j1')
        assert kv.get(queue.marker_key('j1')) is None

        queue.available = True
        queue.enqueue('generate', {}, job_id='j1')
        assert len(queue.pending) == 1


class TestExecution:

    def test_drain_without_consumer(self, queue):
        queue.enqueue('generate', {})
        with pytest.raises(RuntimeError):
            queue.drain()

    def test_failed_job_is_retried_with_backoff(self, kv):
        queue = FakeJobQueue('insights', kv, max_attempts=3, backoff_seconds=2.0)
        attempts = []

        def flaky(job):
            attempts.append(job.attempt)
            if job.attempt < 2:
                raise RuntimeError('boom')

        queue.consume(flaky)
        queue.enqueue('generate', {}, job_id='j1')
        queue.drain()

        assert attempts == [1, 2]
        assert [delay for _, delay in queue.published] == [0, 2.0]
        assert kv.get(queue.marker_key('j1')) is None

    def test_job_dropped_after_max_attempts(self, queue, kv):
        attempts = []

        def failing(job):
            attempts.append(job.attempt)
            raise RuntimeError('boom')

        queue.consume(failing)
        queue.enqueue('generate', {}, job_id='j1')
        processed = queue.drain()

        assert attempts == [1, 2, 3]
        assert processed == 3
        assert queue.pending == []
        assert kv.get(queue.marker_key('j1')) is None

    def test_backoff_is_capped(self, kv):
        queue = FakeJobQueue('insights', kv, backoff_seconds=100)
        assert queue.backoff_delay(1) == 100
        assert queue.backoff_delay(2) == 200
        assert queue.backoff_delay(5) == 300

    def test_close_detaches_consumer(self, queue):
        handle = queue.consume(lambda job: None)
        handle.close()
        queue.enqueue('generate', {})
        with pytest.raises(RuntimeError):
            queue.drain()
