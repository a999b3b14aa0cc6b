"""
Caching Utilities

In-memory caching of composed reports and session metadata with TTL support.
"""

import time
from collections import OrderedDict
from threading import Lock
from typing import Any, Optional

from config import get_settings
from core.logging_config import cache_logger as logger


class TTLCache:
    """Thread-safe LRU cache with TTL support."""

    def __init__(self, maxsize: int = 128, ttl_seconds: int = 3600, enabled: bool = True):
        self.maxsize = maxsize
        self.ttl_seconds = ttl_seconds
        self.enabled = enabled
        self._cache: OrderedDict[str, tuple[Any, float]] = OrderedDict()
        self._lock = Lock()

    def get(self, key: str) -> Optional[Any]:
        """Get value from cache if not expired."""
        if not self.enabled:
            return None

        with self._lock:
            if key not in self._cache:
                return None

            value, timestamp = self._cache[key]
            if time.time() - timestamp > self.ttl_seconds:
                # Expired
                del self._cache[key]
                logger.debug(f"Expired cache entry {key}")
                return None

            # Move to end (most recently accessed)
            self._cache.move_to_end(key)
            return value

    def set(self, key: str, value: Any) -> None:
        """Set value in cache."""
        if not self.enabled:
            return

        with self._lock:
            self._cache.pop(key, None)
            # Remove oldest if at capacity
            while len(self._cache) >= self.maxsize:
                evicted, _ = self._cache.popitem(last=False)
                logger.debug(f"Evicted cache entry {evicted}")

            self._cache[key] = (value, time.time())

    def delete(self, key: str) -> bool:
        """Delete key from cache."""
        with self._lock:
            if key in self._cache:
                del self._cache[key]
                return True
            return False

    def clear(self) -> None:
        """Clear all cache entries."""
        with self._lock:
            self._cache.clear()

    def __contains__(self, key: str) -> bool:
        """Check if key exists and is not expired."""
        return self.get(key) is not None

    def __len__(self) -> int:
        with self._lock:
            return len(self._cache)


class SessionStore:
    """Session metadata storage."""

    def __init__(self, ttl_seconds: Optional[int] = None):
        self._sessions: dict[str, dict[str, Any]] = {}
        self._lock = Lock()
        if ttl_seconds is None:
            ttl_seconds = get_settings().session_ttl_hours * 3600
        self.ttl_seconds = ttl_seconds

    def create(self, session_id: str, metadata: dict[str, Any]) -> None:
        """Create new session."""
        with self._lock:
            self._sessions[session_id] = {
                **metadata,
                "created_at": time.time(),
            }

    def get(self, session_id: str) -> Optional[dict[str, Any]]:
        """Get session metadata."""
        with self._lock:
            session = self._sessions.get(session_id)
            if session is None:
                return None

            # Check expiration
            if time.time() - session["created_at"] > self.ttl_seconds:
                del self._sessions[session_id]
                return None

            return session

    def delete(self, session_id: str) -> bool:
        """Delete session."""
        with self._lock:
            if session_id in self._sessions:
                del self._sessions[session_id]
                return True
            return False

    def list_sessions(self) -> list[str]:
        """List all active session IDs."""
        with self._lock:
            now = time.time()
            # Clean expired and return active
            active = []
            expired = []
            for sid, session in self._sessions.items():
                if now - session["created_at"] > self.ttl_seconds:
                    expired.append(sid)
                else:
                    active.append(sid)

            for sid in expired:
                del self._sessions[sid]

            return active

    def clear_all(self) -> int:
        """Remove every session and return how many there were."""
        with self._lock:
            count = len(self._sessions)
            self._sessions.clear()
            return count


# Global instances
settings = get_settings()
report_cache = TTLCache(
    maxsize=settings.cache.max_size,
    ttl_seconds=settings.cache.ttl_seconds,
    enabled=settings.cache.enabled,
)
session_store = SessionStore()
