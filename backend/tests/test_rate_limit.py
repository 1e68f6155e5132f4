"""
Tests for the fixed-window rate limiter and the insights endpoint limit.
"""
import pytest

from infrastructure.cache import FakeKeyValueStore
from infrastructure.clock import FakeClock
from infrastructure.rate_limit import FixedWindowRateLimiter


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def kv(clock):
    return FakeKeyValueStore(clock=clock)


@pytest.fixture
def limiter(kv):
    return FixedWindowRateLimiter(kv, prefix='rl_test', max_requests=2, window_seconds=60)


class TestFixedWindowRateLimiter:

    def test_allows_up_to_limit(self, limiter):
        assert limiter.hit('u1').allowed
        assert limiter.hit('u1').allowed

        denied = limiter.hit('u1')
        assert not denied.allowed
        assert denied.retry_after == 60

    def test_window_resets(self, limiter, clock):
        limiter.hit('u1')
        limiter.hit('u1')
        clock.advance_seconds(60)
        assert limiter.hit('u1').allowed

    def test_identities_are_independent(self, limiter):
        limiter.hit('u1')
        limiter.hit('u1')
        assert limiter.hit('u2').allowed

    def test_counter_key_and_expiry(self, limiter, kv):
        limiter.hit('u1')
        assert kv.get('rl_test_u1') == '1'
        assert kv.ttl('rl_test_u1') == 60

    def test_lost_expiry_is_restored(self, limiter, kv):
        kv.set('rl_test_u1', '5', ttl=0)
        decision = limiter.hit('u1')
        assert not decision.allowed
        assert decision.retry_after == 60
        assert kv.ttl('rl_test_u1') == 60

    def test_fails_open(self, limiter, kv):
        kv.available = False
        for _ in range(5):
            assert limiter.hit('u1').allowed


@pytest.mark.django_db
class TestInsightsRateLimit:

    def test_returns_429_with_retry_after(self, api_client, auth_headers, client_record, settings):
        settings.INSIGHTS_RATE_LIMIT_MAX = 1
        url = f'/api/v1/clients/{client_record.id}/insights'
        body = {'from': '2026-01-01', 'to': '2026-01-07'}

        first = api_client.post(url, data=body, content_type='application/json', **auth_headers)
        second = api_client.post(url, data=body, content_type='application/json', **auth_headers)

        assert first.status_code == 202
        assert second.status_code == 429
        assert second.json()['code'] == 'RATE_LIMITED'
        assert second['Retry-After'] == '60'
