from __future__ import annotations

import logging
import threading
import time
from dataclasses import dataclass, field
from typing import Any, Callable, Hashable, Optional

from ..core.constants import DEFAULT_LIST_CACHE_TTL_SECONDS

logger = logging.getLogger(__name__)

_MISSING = object()


@dataclass
class ListCache:
    """Short-lived cache for list reads, keyed by (namespace, filters).

    Writes must call ``invalidate(namespace)`` so readers never reconcile against stale lists.
    Shared by all request threads; every access to the entries holds ``_lock``.
    """

    ttl_seconds: float = DEFAULT_LIST_CACHE_TTL_SECONDS
    clock: Callable[[], float] = time.monotonic
    _entries: dict[tuple[str, Hashable], tuple[float, Any]] = field(default_factory=dict)
    _lock: threading.Lock = field(default_factory=threading.Lock, repr=False, compare=False)

    def get(self, namespace: str, key: Hashable) -> Any:
        now = self.clock()
        with self._lock:
            entry = self._entries.get((namespace, key))
            if entry is None:
                return _MISSING
            expires_at, value = entry
            if now >= expires_at:
                self._entries.pop((namespace, key), None)
                return _MISSING
            return value

    def set(self, namespace: str, key: Hashable, value: Any) -> None:
        if self.ttl_seconds <= 0:
            return
        expires_at = self.clock() + self.ttl_seconds
        with self._lock:
            self._entries[(namespace, key)] = (expires_at, value)

    def get_or_load(self, namespace: str, key: Hashable, loader: Callable[[], Any]) -> Any:
        # The loader runs outside the lock; two threads may both load on a miss.
        value = self.get(namespace, key)
        if value is _MISSING:
            value = loader()
            self.set(namespace, key, value)
        return value

    def invalidate(self, namespace: Optional[str] = None) -> None:
        with self._lock:
            if namespace is None:
                self._entries.clear()
            else:
                for cache_key in [k for k in self._entries if k[0] == namespace]:
                    del self._entries[cache_key]
        logger.debug("list cache invalidated", extra={"namespace": namespace or "*"})
