from __future__ import annotations

import logging
import threading

from respact.typing import Callable, Generic, Protocol, TypeVar

logger = logging.getLogger(__name__)


class Resettable(Protocol):
    def reset(self) -> None: ...


_RT = TypeVar("_RT", bound=Resettable)


class ObjectPool(Generic[_RT]):
    """
    Free list of reusable objects.

    Objects are reset when they are released back into the pool and
    new objects are created with :paramref:`factory` when the pool is
    empty. At most :paramref:`max_size` idle objects are retained.
    """

    def __init__(self, factory: Callable[[], _RT], max_size: Callable[[], int] | int = 64):
        self.factory = factory
        self._max_size = max_size
        self._available: list[_RT] = []
        self._created = 0
        self._lock = threading.Lock()

    def __repr__(self) -> str:
        return f"{type(self).__name__}<available={len(self._available)}, created={self._created}>"

    @property
    def max_size(self) -> int:
        return self._max_size() if callable(self._max_size) else self._max_size

    def acquire(self) -> _RT:
        with self._lock:
            if self._available:
                return self._available.pop()
            self._created += 1
        return self.factory()

    def release(self, obj: _RT) -> None:
        obj.reset()
        with self._lock:
            if len(self._available) < self.max_size:
                self._available.append(obj)
            else:
                logger.debug("Pool at capacity (%d), dropping released object", self.max_size)

    def clear(self) -> None:
        with self._lock:
            self._available.clear()
