"""
Tests for the insight pipeline: enqueue -> worker -> stored insight.
"""
from datetime import date

import pytest

from apps.checkins.models import CheckIn
from apps.insights.models import Insight
from services.caches import insight_cache
from services.insights import InsightJob, InsightWorker

RANGE = {'from': '2026-01-01', 'to': '2026-01-07'}


@pytest.fixture
def worker(job_queue, store):
    worker = InsightWorker(job_queue=job_queue, store=store)
    worker.start(concurrency=1)
    yield worker
    worker.stop()


def add_checkin(client_record, day, **metrics):
    CheckIn.objects.upsert_for_date(client_id=client_record.id, date=day, metrics=metrics)


class TestInsightJob:

    def test_job_id_is_deterministic(self):
        job = InsightJob(client_id='c1', range_start='2026-01-01', range_end='2026-01-07')
        assert job.job_id == 'insight_c1_2026-01-01_2026-01-07'
        assert job.to_payload() == {'clientId': 'c1', 'from': '2026-01-01', 'to': '2026-01-07'}


@pytest.mark.django_db
class TestInsightWorker:

    def test_computes_and_stores_insight(self, worker, job_queue, client_record):
        add_checkin(client_record, date(2026, 1, 1), sleep=5, soreness=8, weight=82)
        add_checkin(client_record, date(2026, 1, 2), sleep=7, soreness=6, weight=80)
        # outside the range
        add_checkin(client_record, date(2026, 1, 20), sleep=1, soreness=10, weight=50)

        job = InsightJob(str(client_record.id), RANGE['from'], RANGE['to'])
        job_queue.enqueue('generate', job.to_payload(), job_id=job.job_id)
        job_queue.drain()

        insight = Insight.objects.get(client_id=client_record.id)
        assert insight.avg_sleep == 6.0
        assert insight.avg_soreness == 7.0
        assert insight.weight_delta == -2.0
        assert insight.summary == (
            "Recovery warning: low average sleep with high soreness. "
            "Weight trend: down 2.0 over the period."
        )

    def test_recompute_updates_single_row(self, worker, client_record):
        job = InsightJob(str(client_record.id), RANGE['from'], RANGE['to'])
        add_checkin(client_record, date(2026, 1, 1), sleep=8)
        worker.process(job)
        first = Insight.objects.get(client_id=client_record.id)

        add_checkin(client_record, date(2026, 1, 2), sleep=6)
        worker.process(job)

        assert Insight.objects.filter(client_id=client_record.id).count() == 1
        updated = Insight.objects.get(client_id=client_record.id)
        assert updated.id == first.id
        assert updated.avg_sleep == 7.0

    def test_evicts_cached_insight(self, worker, store, client_record):
        cache = insight_cache(store)
        cache.put(str(client_record.id), RANGE['from'], RANGE['to'], {'summary': 'stale'})

        worker.process(InsightJob(str(client_record.id), RANGE['from'], RANGE['to']))

        assert cache.get(str(client_record.id), RANGE['from'], RANGE['to']) is None

    def test_scan_pages_through_all_checkins(self, job_queue, store, client_record):
        for day in range(1, 8):
            add_checkin(client_record, date(2026, 1, day), sleep=day)
        worker = InsightWorker(job_queue=job_queue, store=store, page_size=2)

        signals = worker.process(InsightJob(str(client_record.id), RANGE['from'], RANGE['to']))

        assert signals.avg_sleep == 4.0

    def test_scan_stops_at_page_cap(self, job_queue, store, client_record):
        for day in range(1, 8):
            add_checkin(client_record, date(2026, 1, day), sleep=day)
        worker = InsightWorker(job_queue=job_queue, store=store, page_size=2, max_pages=1)

        signals = worker.process(InsightJob(str(client_record.id), RANGE['from'], RANGE['to']))

        # newest two days only
        assert signals.avg_sleep == 6.5

    def test_no_checkins_gives_default_summary(self, worker, client_record):
        worker.process(InsightJob(str(client_record.id), RANGE['from'], RANGE['to']))
        insight = Insight.objects.get(client_id=client_record.id)
        assert insight.summary == "No notable signals detected for this period."
        assert insight.avg_sleep is None


@pytest.mark.django_db
class TestInsightsEndpoints:

    def test_enqueue_returns_job_id(self, api_client, auth_headers, client_record, job_queue):
        response = api_client.post(
            f'/api/v1/clients/{client_record.id}/insights',
            data=RANGE,
            content_type='application/json',
            **auth_headers
        )

        assert response.status_code == 202
        assert response.json() == {'jobId': f'insight_{client_record.id}_2026-01-01_2026-01-07'}

    def test_repeated_enqueue_runs_once(self, api_client, auth_headers, client_record, worker, job_queue):
        ran = []
        original = worker.process

        def counting(job):
            ran.append(job.job_id)
            return original(job)

        worker.process = counting
        url = f'/api/v1/clients/{client_record.id}/insights'

        job_ids = {
            api_client.post(url, data=RANGE, content_type='application/json', **auth_headers).json()['jobId']
            for _ in range(3)
        }
        job_queue.drain()

        assert len(job_ids) == 1
        assert ran == list(job_ids)

    def test_get_before_computation_is_not_found(self, api_client, auth_headers, client_record):
        response = api_client.get(
            f'/api/v1/clients/{client_record.id}/insights',
            data=RANGE,
            **auth_headers
        )
        assert response.status_code == 404

    def test_get_after_computation(self, api_client, auth_headers, client_record, worker, job_queue, store):
        add_checkin(client_record, date(2026, 1, 1), sleep=8, soreness=2)
        url = f'/api/v1/clients/{client_record.id}/insights'

        api_client.post(url, data=RANGE, content_type='application/json', **auth_headers)
        job_queue.drain()

        response = api_client.get(url, data=RANGE, **auth_headers)

        assert response.status_code == 200
        insight = response.json()['insight']
        assert insight['clientId'] == str(client_record.id)
        assert insight['from'] == '2026-01-01'
        assert insight['avgSleep'] == 8.0
        assert insight['summary'] == "No notable signals detected for this period."
        # filled on read
        assert store.get(f'insight:{client_record.id}:2026-01-01:2026-01-07') is not None

    def test_enqueue_validates_range(self, api_client, auth_headers, client_record):
        response = api_client.post(
            f'/api/v1/clients/{client_record.id}/insights',
            data={'from': '2026-01-07', 'to': '2026-01-01'},
            content_type='application/json',
            **auth_headers
        )
        assert response.status_code == 400
        assert response.json()['code'] == 'VALIDATION_ERROR'

    def test_enqueue_for_foreign_client_is_not_found(self, api_client, other_auth_headers, client_record, job_queue):
        response = api_client.post(
            f'/api/v1/clients/{client_record.id}/insights',
            data=RANGE,
            content_type='application/json',
            **other_auth_headers
        )
        assert response.status_code == 404
        assert job_queue.pending == []

    def test_queue_outage_is_internal_error(self, api_client, auth_headers, client_record, job_queue):
        job_queue.available = False
        response = api_client.post(
            f'/api/v1/clients/{client_record.id}/insights',
            data=RANGE,
            content_type='application/json',
            **auth_headers
        )
        assert response.status_code == 503
        assert response.json()['code'] == 'INTERNAL'
