"""
Tests for RedisKeyValueStore against fakeredis.
"""
import fakeredis
import pytest
import redis

from infrastructure.cache import ConnectionState, RedisKeyValueStore
from infrastructure.errors import KeyValueStoreError


@pytest.fixture
def server():
    return fakeredis.FakeServer()


@pytest.fixture
def kv(monkeypatch, server):
    def from_url(url, **kwargs):
        return fakeredis.FakeRedis(server=server, decode_responses=kwargs.get('decode_responses', False))

    monkeypatch.setattr(redis, 'from_url', from_url)
    store = RedisKeyValueStore('redis://localhost:6379/0', connect_timeout=1, socket_timeout=1)
    yield store
    store.disconnect()


class TestConnectionLifecycle:

    def test_starts_disconnected(self, kv):
        assert kv.state == ConnectionState.DISCONNECTED

    def test_connect_is_idempotent(self, kv):
        first = kv.connect()
        second = kv.connect()
        assert first is second
        assert kv.state == ConnectionState.CONNECTED

    def test_disconnect_when_never_connected(self, kv):
        kv.disconnect()
        assert kv.state == ConnectionState.DISCONNECTED

    def test_lazy_connect_on_first_command(self, kv):
        kv.set('k', 'v', ttl=10)
        assert kv.state == ConnectionState.CONNECTED

    def test_connect_failure(self, kv, server):
        server.connected = False
        with pytest.raises(KeyValueStoreError):
            kv.connect()
        assert kv.state == ConnectionState.DISCONNECTED


class TestCommands:

    def test_get_set(self, kv):
        assert kv.get('missing') is None
        kv.set('k', 'v', ttl=10)
        assert kv.get('k') == 'v'
        assert 0 < kv.ttl('k') <= 10

    def test_set_if_absent(self, kv):
        assert kv.set_if_absent('k', 'a', ttl=10) is True
        assert kv.set_if_absent('k', 'b', ttl=10) is False
        assert kv.get('k') == 'a'

    def test_increment_and_expire(self, kv):
        assert kv.increment('n') == 1
        assert kv.increment('n') == 2
        assert kv.ttl('n') == -1
        kv.expire('n', 30)
        assert 0 < kv.ttl('n') <= 30

    def test_delete(self, kv):
        kv.set('k', 'v', ttl=10)
        kv.delete('k')
        assert kv.get('k') is None
        assert kv.ttl('k') == -2

    def test_ping(self, kv):
        assert kv.ping() is True

    def test_command_errors_are_wrapped(self, kv, server):
        kv.connect()
        server.connected = False
        with pytest.raises(KeyValueStoreError):
            kv.get('k')

    def test_increment_on_non_integer(self, kv):
        kv.set('k', 'text', ttl=10)
        with pytest.raises(KeyValueStoreError):
            kv.increment('k')
