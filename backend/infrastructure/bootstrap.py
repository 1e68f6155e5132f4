"""
Dependency Injection container and application bootstrap.
"""
from typing import TypeVar, Type, Dict, Any, Optional
import logging

from django.conf import settings

from infrastructure.clock import Clock, SystemClock, FakeClock
from infrastructure.cache import KeyValueStore, RedisKeyValueStore, FakeKeyValueStore
from infrastructure.job_queue import JobQueue, RabbitMQJobQueue, FakeJobQueue

T = TypeVar('T')

logger = logging.getLogger(__name__)


class Container:
    """
    Simple DI container for managing dependencies.
    Provides both real and fake implementations.
    """

    _instance: Optional['Container'] = None

    def __init__(self, use_fakes: bool = False):
        self._use_fakes = use_fakes
        self._singletons: Dict[Type, Any] = {}

        self._register_infrastructure()

    def _register_infrastructure(self):
        """Register infrastructure components."""
        queue_options = {
            'max_attempts': settings.INSIGHT_JOB_MAX_ATTEMPTS,
            'retention_seconds': settings.INSIGHT_JOB_RETENTION_SECONDS,
        }

        if self._use_fakes:
            clock = FakeClock()
            store = FakeKeyValueStore(clock=clock)
            self._singletons[Clock] = clock
            self._singletons[KeyValueStore] = store
            self._singletons[JobQueue] = FakeJobQueue(
                settings.INSIGHT_QUEUE_NAME, store, **queue_options
            )
        else:
            store = RedisKeyValueStore(
                settings.REDIS_URL,
                connect_timeout=settings.REDIS_CONNECT_TIMEOUT,
                socket_timeout=settings.REDIS_SOCKET_TIMEOUT,
            )
            self._singletons[Clock] = SystemClock()
            self._singletons[KeyValueStore] = store
            self._singletons[JobQueue] = RabbitMQJobQueue(
                settings.RABBITMQ_URL,
                settings.INSIGHT_QUEUE_NAME,
                store,
                **queue_options
            )

    def get(self, cls: Type[T]) -> T:
        """
        Get instance of a class.

        For infrastructure (Clock, KeyValueStore, JobQueue): returns singleton
        For Commands/Queries: creates new instance with injected dependencies
        """
        if cls in self._singletons:
            return self._singletons[cls]

        return self._create_service(cls)

    def _create_service(self, cls: Type[T]) -> T:
        """Create a service instance with dependencies."""
        return cls(
            store=self._singletons.get(KeyValueStore),
            clock=self._singletons.get(Clock),
            job_queue=self._singletons.get(JobQueue),
            logger=logging.getLogger(cls.__name__)
        )

    def shutdown(self) -> None:
        """Release broker and store connections."""
        job_queue = self._singletons.get(JobQueue)
        if isinstance(job_queue, RabbitMQJobQueue):
            job_queue.close()
        store = self._singletons.get(KeyValueStore)
        if isinstance(store, RedisKeyValueStore):
            store.disconnect()

    @classmethod
    def instance(cls) -> 'Container':
        """Get or create the global container instance."""
        if cls._instance is None:
            use_fakes = getattr(settings, 'USE_FAKES', False)
            cls._instance = cls(use_fakes=use_fakes)
            logger.info(f"Container initialized (use_fakes={use_fakes})")
        return cls._instance

    @classmethod
    def reset(cls) -> None:
        """Reset the global container (for testing)."""
        cls._instance = None


def get_container() -> Container:
    """Get the global container instance."""
    return Container.instance()

