"""
Cache for views derived from a loaded corpus.

Joining the source tables is the expensive step of a session; the result
only depends on the tables' contents, so it is cached under the tables'
content hash. Loading different tables produces a different key, and the
previous entry is dropped.

The cache is owned by the caller (one per explorer), not a process-wide
singleton.
"""

import threading
from dataclasses import dataclass
from datetime import datetime
from typing import Any, Callable, Dict, Optional

from ..domain.source_tables import SourceTables
from ..logging_config import get_logger

logger = get_logger('corpus_cache')


@dataclass
class CacheEntry:
    """Metadata for a cached derived view"""
    value: Any
    created_at: datetime
    access_count: int
    last_accessed: datetime


class CorpusCache:
    """
    Thread-safe cache of derived corpus views keyed by source-table hash.

    Usage:
        cache = CorpusCache()
        result = cache.get_or_build(tables, lambda: join_service.join(tables))
    """

    def __init__(self, max_entries: int = 1):
        self._cache: Dict[str, CacheEntry] = {}
        self._cache_lock = threading.Lock()
        self.max_entries = max_entries
        self.hits = 0
        self.misses = 0

    def get_or_build(
        self,
        tables: SourceTables,
        builder: Callable[[], Any],
        force_rebuild: bool = False
    ) -> Any:
        """
        Return the cached view for *tables* or build and cache it.

        Args:
            tables: Source tables the view is derived from
            builder: Function producing the view on a miss
            force_rebuild: Rebuild even if cached

        Returns:
            The derived view
        """
        key = tables.content_hash()
        with self._cache_lock:
            entry = self._cache.get(key)
            if entry is not None and not force_rebuild:
                entry.access_count += 1
                entry.last_accessed = datetime.now()
                self.hits += 1
                logger.debug(f"Cache HIT: {key[:12]} (accesses: {entry.access_count})")
                return entry.value

            self.misses += 1
            logger.info(f"Cache MISS: building view for {key[:12]}...")
            value = builder()

            # Oldest entries go first once the cache is full
            while len(self._cache) >= self.max_entries and key not in self._cache:
                oldest = min(self._cache, key=lambda k: self._cache[k].created_at)
                del self._cache[oldest]
                logger.debug(f"Evicted cache entry {oldest[:12]}")

            now = datetime.now()
            self._cache[key] = CacheEntry(value=value, created_at=now, access_count=1, last_accessed=now)
            return value

    def invalidate(self, key: Optional[str] = None) -> int:
        """
        Drop one entry (by content hash) or, without a key, every entry.

        Returns:
            Number of entries removed
        """
        with self._cache_lock:
            if key is None:
                count = len(self._cache)
                self._cache.clear()
            else:
                count = 1 if self._cache.pop(key, None) is not None else 0
        if count:
            logger.info(f"Invalidated {count} cache entr{'y' if count == 1 else 'ies'}")
        return count

    def clear(self) -> int:
        """Clear the cache and reset the hit/miss counters."""
        count = self.invalidate()
        with self._cache_lock:
            self.hits = 0
            self.misses = 0
        return count

    def __len__(self) -> int:
        return len(self._cache)

    def get_stats(self) -> Dict[str, Any]:
        """Get cache statistics"""
        with self._cache_lock:
            now = datetime.now()
            return {
                'total_entries': len(self._cache),
                'hits': self.hits,
                'misses': self.misses,
                'entries': {
                    key: {
                        'created_at': entry.created_at.isoformat(),
                        'access_count': entry.access_count,
                        'last_accessed': entry.last_accessed.isoformat(),
                        'age_seconds': (now - entry.created_at).total_seconds(),
                    }
                    for key, entry in self._cache.items()
                }
            }
