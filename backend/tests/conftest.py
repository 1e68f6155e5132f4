"""
Pytest configuration and fixtures for CoachDesk tests.
"""
import os
import uuid
import pytest
from django.test import Client

# Use fakes for testing
os.environ.setdefault('USE_FAKES', 'true')


@pytest.fixture(autouse=True)
def reset_container():
    """Reset DI container before each test."""
    from infrastructure.bootstrap import Container
    Container.reset()
    yield
    Container.reset()


@pytest.fixture
def container():
    from infrastructure.bootstrap import get_container
    return get_container()


@pytest.fixture
def store(container):
    """The container's FakeKeyValueStore."""
    from infrastructure.cache import KeyValueStore
    return container.get(KeyValueStore)


@pytest.fixture
def job_queue(container):
    """The container's FakeJobQueue."""
    from infrastructure.job_queue import JobQueue
    return container.get(JobQueue)


@pytest.fixture
def api_client():
    """Django test client for API requests."""
    return Client()


def _make_token(user) -> str:
    import jwt
    from datetime import datetime, timedelta, timezone
    from django.conf import settings

    now = datetime.now(tz=timezone.utc)
    payload = {
        'user_id': user.id,
        'exp': now + timedelta(days=1),
        'iat': now,
    }
    return jwt.encode(payload, settings.JWT_SECRET, algorithm='HS256')


@pytest.fixture
def coach(db):
    """Create a test coach."""
    from apps.users.models import User
    return User.objects.create(email='coach@example.com', role=User.Role.COACH)


@pytest.fixture
def other_coach(db):
    from apps.users.models import User
    return User.objects.create(email='other.coach@example.com', role=User.Role.COACH)


@pytest.fixture
def auth_headers(coach):
    """Authorization headers for the coach."""
    return {'HTTP_AUTHORIZATION': f'Bearer {_make_token(coach)}'}


@pytest.fixture
def other_auth_headers(other_coach):
    return {'HTTP_AUTHORIZATION': f'Bearer {_make_token(other_coach)}'}


@pytest.fixture
def token_for():
    """Build a bearer token for any user."""
    return _make_token


@pytest.fixture
def client_record(coach):
    """A client owned by the coach."""
    from apps.clients.models import Client as CoachedClient
    link = CoachedClient.create_with_link(coach.id, display_name='Sam Runner', email='sam@example.com')
    return link.client


@pytest.fixture
def idem_key():
    """Fresh Idempotency-Key header value per call."""
    return lambda: str(uuid.uuid4())
