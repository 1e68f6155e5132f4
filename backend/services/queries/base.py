"""
Base Query class for CQRS read operations.
Queries have no side effects besides filling caches.
"""
from abc import ABC, abstractmethod
from typing import TypeVar, Generic, Optional
import logging

from infrastructure.cache import KeyValueStore
from infrastructure.clock import Clock

T = TypeVar('T')


class BaseQuery(ABC, Generic[T]):
    """
    Base class for all Queries (read operations).

    Queries:
    - Have NO side effects on source-of-truth data
    - May use caching; a cache failure degrades to a store read
    """

    def __init__(
        self,
        store: Optional[KeyValueStore] = None,
        clock: Optional[Clock] = None,
        logger: Optional[logging.Logger] = None,
        **kwargs  # Accept extra kwargs for DI compatibility
    ):
        self._store = store
        self._clock = clock
        self._logger = logger or logging.getLogger(self.__class__.__name__)

    @abstractmethod
    def execute(self, **kwargs) -> T:
        """
        Execute the query.
        Must be implemented by subclasses.
        """
        pass

    def log_info(self, message: str, **extra) -> None:
        """Log info message with extra fields."""
        self._logger.info(message, extra=extra)

    def log_warning(self, message: str, **extra) -> None:
        """Log warning message with extra fields."""
        self._logger.warning(message, extra=extra)
