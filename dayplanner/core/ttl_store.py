# core/ttl_store.py
"""Key-value store with per-key expiry, used for short-lived dedup keys."""
import threading
from datetime import datetime, timedelta
from typing import Any, Callable, Dict, Optional, Protocol, Tuple

from dayplanner.core.timeutils import utc_now


class TTLStore(Protocol):
    def get(self, key: str) -> Optional[Any]: ...

    def set(self, key: str, value: Any, ttl: timedelta) -> None: ...

    def add_if_absent(self, key: str, value: Any, ttl: timedelta) -> bool: ...

    def delete(self, key: str) -> None: ...

    def sweep(self) -> int: ...


class InMemoryTTLStore:
    """
    Process-local TTL map with expiry-on-read.

    Entries do not survive restarts and are not shared between
    processes; deployments with several workers should inject a shared
    implementation of the same protocol.
    """

    def __init__(self, clock: Callable[[], datetime] = utc_now):
        self._clock = clock
        self._data: Dict[str, Tuple[Any, datetime]] = {}
        self._lock = threading.Lock()

    def _live(self, key: str) -> Optional[Tuple[Any, datetime]]:
        entry = self._data.get(key)
        if entry is None:
            return None
        if entry[1] <= self._clock():
            del self._data[key]
            return None
        return entry

    def get(self, key: str) -> Optional[Any]:
        with self._lock:
            entry = self._live(key)
            return entry[0] if entry else None

    def set(self, key: str, value: Any, ttl: timedelta) -> None:
        with self._lock:
            self._data[key] = (value, self._clock() + ttl)

    def add_if_absent(self, key: str, value: Any, ttl: timedelta) -> bool:
        """Store the key only if no live entry exists. Returns True when stored."""
        with self._lock:
            if self._live(key) is not None:
                return False
            self._data[key] = (value, self._clock() + ttl)
            return True

    def delete(self, key: str) -> None:
        with self._lock:
            self._data.pop(key, None)

    def sweep(self) -> int:
        """Drop every expired entry. Returns how many were removed."""
        with self._lock:
            now = self._clock()
            expired = [key for key, (_, expires) in self._data.items() if expires <= now]
            for key in expired:
                del self._data[key]
            return len(expired)

    def __len__(self) -> int:
        with self._lock:
            return len(self._data)
