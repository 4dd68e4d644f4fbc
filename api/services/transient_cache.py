"""Process-wide key/value cache with per-entry expiry (Thread-safe version)."""

import logging
import threading
import time
from typing import Any, Callable, Dict, Optional, Tuple

logger = logging.getLogger(__name__)


class TransientCache:
    """In-memory transient store shared by every plugin in the process.

    Entries expire ``ttl`` seconds after they were written; a ttl of 0 keeps
    the entry until it is deleted.
    """

    def __init__(self, clock: Callable[[], float] = time.monotonic):
        self._clock = clock
        self._entries: Dict[str, Tuple[Any, Optional[float]]] = {}
        self._lock = threading.Lock()

    def get(self, key: str) -> Optional[Any]:
        """Return the cached value, or None if absent or expired."""
        with self._lock:
            entry = self._entries.get(key)
            if entry is None:
                return None
            value, expires_at = entry
            if expires_at is not None and self._clock() >= expires_at:
                del self._entries[key]
                logger.debug(f"Transient expired: {key}")
                return None
            return value

    def set(self, key: str, value: Any, ttl: int = 0) -> None:
        """Store ``value`` under ``key`` for ``ttl`` seconds."""
        expires_at = self._clock() + ttl if ttl > 0 else None
        with self._lock:
            self._entries[key] = (value, expires_at)
        logger.debug(f"Transient set: {key} (ttl={ttl}s)")

    def delete(self, key: str) -> bool:
        """Remove ``key``. Returns False if there was nothing to remove."""
        with self._lock:
            removed = self._entries.pop(key, None) is not None
        if removed:
            logger.debug(f"Transient deleted: {key}")
        return removed

    def clear(self) -> None:
        """Drop every entry."""
        with self._lock:
            self._entries.clear()
