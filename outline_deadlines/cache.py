"""
Caching for outline processing.

Two caches live here:
- CacheManager: SQLite store of reconciled deadlines keyed by the SHA-256 of
  the source document, so re-running on the same PDF skips extraction.
- LookupCache: in-memory, time-limited values for the outline web service
  (the unit code lookup table and the module version token). The caller
  creates one and hands it to the client; nothing is kept at module level.
"""

import hashlib
import json
import sqlite3
import time
from dataclasses import dataclass
from datetime import datetime
from pathlib import Path
from typing import Any, Callable, List, Optional

from .config import load_config
from .models import ReconciledDeadline

UNIT_LOOKUP_TTL_SECONDS = 30 * 24 * 60 * 60
MODULE_VERSION_TTL_SECONDS = 5 * 60


def compute_document_hash(path: Path) -> str:
    """Compute SHA-256 hash of a file."""
    with open(path, 'rb') as f:
        return hashlib.sha256(f.read()).hexdigest()


def compute_text_hash(*parts: str) -> str:
    """Compute SHA-256 hash of text inputs (e.g. an outline payload)."""
    digest = hashlib.sha256()
    for part in parts:
        digest.update((part or "").encode("utf-8"))
        digest.update(b"\x1f")
    return digest.hexdigest()


class CacheManager:
    """Stores reconciled deadlines per source document."""

    def __init__(self, cache_dir: Optional[Path] = None):
        """Initialize cache manager.

        Args:
            cache_dir: Directory for cache storage. Defaults to ~/.outline_deadlines_cache
        """
        if cache_dir is None:
            cache_dir = Path.home() / ".outline_deadlines_cache"
        cache_dir.mkdir(parents=True, exist_ok=True)
        self.db_path = cache_dir / "cache.db"
        self._init_db()

    def _init_db(self):
        """Initialize database schema."""
        conn = sqlite3.connect(self.db_path)
        conn.execute("""
            CREATE TABLE IF NOT EXISTS extraction_cache (
                document_hash TEXT PRIMARY KEY,
                unit TEXT,
                deadlines_json TEXT NOT NULL,
                timestamp TEXT NOT NULL
            )
        """)
        conn.commit()
        conn.close()

    def lookup(self, document_hash: str) -> Optional[List[ReconciledDeadline]]:
        """Look up deadlines previously extracted from a document.

        Args:
            document_hash: SHA-256 hash of the document

        Returns:
            The cached deadlines, or None on a cache miss
        """
        conn = sqlite3.connect(self.db_path)
        cursor = conn.execute(
            "SELECT deadlines_json FROM extraction_cache WHERE document_hash = ?",
            (document_hash,)
        )
        row = cursor.fetchone()
        conn.close()

        if row is None:
            return None
        return [ReconciledDeadline.from_dict(d) for d in json.loads(row[0])]

    def store(self, document_hash: str, deadlines: List[ReconciledDeadline],
              unit: Optional[str] = None):
        """Store extracted deadlines.

        Args:
            document_hash: SHA-256 hash of the document
            deadlines: Deadlines to store
            unit: Unit code, kept for inspection of the cache
        """
        deadlines_json = json.dumps([d.to_dict() for d in deadlines])
        conn = sqlite3.connect(self.db_path)
        conn.execute(
            """
            INSERT OR REPLACE INTO extraction_cache (document_hash, unit, deadlines_json, timestamp)
            VALUES (?, ?, ?, ?)
            """,
            (document_hash, unit, deadlines_json, datetime.now().isoformat())
        )
        conn.commit()
        conn.close()

    def clear(self):
        conn = sqlite3.connect(self.db_path)
        conn.execute("DELETE FROM extraction_cache")
        conn.commit()
        conn.close()


@dataclass
class TimedValue:
    """A value with the time it was fetched and how long it stays fresh."""
    ttl_seconds: float
    value: Any = None
    fetched_at: Optional[float] = None

    def is_fresh(self, now: Optional[float] = None) -> bool:
        if self.fetched_at is None:
            return False
        now = time.time() if now is None else now
        return now - self.fetched_at < self.ttl_seconds

    def get(self, now: Optional[float] = None) -> Any:
        """The value if still fresh, otherwise None."""
        return self.value if self.is_fresh(now) else None

    def set(self, value: Any, now: Optional[float] = None):
        self.value = value
        self.fetched_at = time.time() if now is None else now

    def get_or_fetch(self, fetch: Callable[[], Any], now: Optional[float] = None) -> Any:
        """Return the fresh value, calling ``fetch`` to refresh it when stale."""
        value = self.get(now)
        if not value:
            value = fetch()
            self.set(value, now)
        return value


class LookupCache:
    """Caller-owned cache for outline web service lookups."""

    def __init__(self, unit_lookup_ttl: float = UNIT_LOOKUP_TTL_SECONDS,
                 module_version_ttl: float = MODULE_VERSION_TTL_SECONDS):
        self.unit_lookup = TimedValue(unit_lookup_ttl)
        self.module_version = TimedValue(module_version_ttl)

    def invalidate(self):
        self.unit_lookup = TimedValue(self.unit_lookup.ttl_seconds)
        self.module_version = TimedValue(self.module_version.ttl_seconds)


def get_cache_manager(cache_dir: Optional[Path] = None) -> CacheManager:
    """Cache manager for the configured directory.

    Args:
        cache_dir: Explicit directory; otherwise OUTLINE_DEADLINES_CACHE_DIR or the default

    Returns:
        CacheManager instance
    """
    if cache_dir is None:
        cache_dir = load_config().cache_dir
    return CacheManager(cache_dir)
