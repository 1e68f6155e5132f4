"""
Base Command class for CQRS write operations.
Commands have side effects and may touch caches and the job queue.
"""
from abc import ABC, abstractmethod
from typing import TypeVar, Generic, Optional
import logging

from infrastructure.cache import KeyValueStore
from infrastructure.clock import Clock
from infrastructure.job_queue import JobQueue

T = TypeVar('T')


class BaseCommand(ABC, Generic[T]):
    """
    Base class for all Commands (write operations).

    Commands:
    - Have side effects (create, update, enqueue)
    - Invalidate the caches their writes affect
    - Surface infrastructure errors instead of hiding them
    """

    def __init__(
        self,
        store: KeyValueStore,
        clock: Clock,
        job_queue: Optional[JobQueue] = None,
        logger: Optional[logging.Logger] = None
    ):
        self._store = store
        self._clock = clock
        self._job_queue = job_queue
        self._logger = logger or logging.getLogger(self.__class__.__name__)

    @abstractmethod
    def execute(self, **kwargs) -> T:
        """
        Execute the command.
        Must be implemented by subclasses.
        """
        pass

    def log_info(self, message: str, **extra) -> None:
        """Log info message with extra fields."""
        self._logger.info(message, extra=extra)

    def log_warning(self, message: str, **extra) -> None:
        """Log warning message with extra fields."""
        self._logger.warning(message, extra=extra)
