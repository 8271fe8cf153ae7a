"""
Keyed in-memory store for dataset classifications.

Callers create and pass a cache explicitly; there is no module-level
instance.
"""
import hashlib
import logging
import time
from typing import Optional, Dict, Sequence, TYPE_CHECKING
from dataclasses import dataclass
from threading import Lock

from lumina.core.config import get_settings

if TYPE_CHECKING:
    from lumina.core.schemas import DatasetClassification

logger = logging.getLogger(__name__)


@dataclass
class CacheEntry:
    """Cache entry with expiration."""
    data: "DatasetClassification"
    timestamp: float
    ttl: float  # seconds


class ClassificationCache:
    """Thread-safe classification cache with TTL, keyed by header list."""

    def __init__(self, default_ttl: Optional[float] = None):
        if default_ttl is None:
            default_ttl = get_settings().classification_cache_ttl
        self._cache: Dict[str, CacheEntry] = {}
        self._lock = Lock()
        self.default_ttl = default_ttl

    def get(self, key: str) -> Optional["DatasetClassification"]:
        """Get value from cache if not expired."""
        with self._lock:
            entry = self._cache.get(key)
            if entry is None:
                return None

            if time.time() - entry.timestamp > entry.ttl:
                del self._cache[key]
                logger.debug(f"Cache entry expired: {key[:16]}...")
                return None

            logger.debug(f"Cache hit: {key[:16]}...")
            return entry.data

    def set(self, key: str, value: "DatasetClassification", ttl: Optional[float] = None):
        """Set value in cache with optional TTL."""
        with self._lock:
            self._cache[key] = CacheEntry(
                data=value,
                timestamp=time.time(),
                ttl=ttl or self.default_ttl
            )

    def clear(self):
        with self._lock:
            self._cache.clear()

    def cleanup_expired(self) -> int:
        """Remove expired entries and return how many were dropped."""
        with self._lock:
            now = time.time()
            expired_keys = [
                key for key, entry in self._cache.items()
                if now - entry.timestamp > entry.ttl
            ]
            for key in expired_keys:
                del self._cache[key]
        if expired_keys:
            logger.debug(f"Cleaned up {len(expired_keys)} expired cache entries")
        return len(expired_keys)

    def __len__(self) -> int:
        with self._lock:
            return len(self._cache)


def generate_headers_cache_key(headers: Sequence[str]) -> str:
    """Cache key for a header list; order and case matter."""
    key_data = "\x1f".join(headers)
    return "headers:" + hashlib.sha256(key_data.encode("utf-8")).hexdigest()
