"""Unit tests for caching system."""

from datetime import date

from outline_deadlines.cache import (
    CacheManager, LookupCache, TimedValue, compute_document_hash, compute_text_hash
)
from outline_deadlines.models import ReconciledDeadline


def test_compute_document_hash(tmp_path):
    """Test document hash computation."""
    # Create a test file
    test_file = tmp_path / "test.pdf"
    test_file.write_bytes(b"test pdf content")

    hash1 = compute_document_hash(test_file)
    hash2 = compute_document_hash(test_file)

    # Same file should produce same hash
    assert hash1 == hash2
    assert len(hash1) == 64  # SHA-256 hex digest length


def test_compute_text_hash_separates_parts():
    """Moving text between parts changes the hash."""
    assert compute_text_hash("ab", "c") != compute_text_hash("a", "bc")
    assert compute_text_hash("a", None) == compute_text_hash("a", "")


def test_cache_manager(tmp_path):
    """Test cache manager operations."""
    cache_dir = tmp_path / "cache"
    CacheManager(cache_dir=cache_dir)

    # Verify cache directory created
    assert cache_dir.exists()
    assert (cache_dir / "cache.db").exists()


def test_cache_lookup_miss(tmp_path):
    """Test cache lookup for non-existent entry."""
    cache_manager = CacheManager(cache_dir=tmp_path / "cache")

    result = cache_manager.lookup("nonexistent_hash")
    assert result is None


def test_cache_store_and_lookup(tmp_path):
    """Stored deadlines come back unchanged."""
    cache_manager = CacheManager(cache_dir=tmp_path / "cache")
    deadlines = [
        ReconciledDeadline(title="Assignment", unit="COMP1005", week=5, date=date(2026, 4, 3),
                           exact_time="23:59", is_tba=False, weight=40),
        ReconciledDeadline(title="Final Examination", unit="COMP1005", weight=40),
    ]

    cache_manager.store("abc123", deadlines, unit="COMP1005")
    assert cache_manager.lookup("abc123") == deadlines

    cache_manager.clear()
    assert cache_manager.lookup("abc123") is None


def test_timed_value_expiry():
    """Values expire after their TTL."""
    value = TimedValue(ttl_seconds=60)
    assert value.get(now=0) is None

    value.set("token", now=100)
    assert value.get(now=159) == "token"
    assert value.get(now=160) is None


def test_timed_value_get_or_fetch():
    """The fetch function only runs when the value is stale."""
    calls = []

    def fetch():
        calls.append(1)
        return "token-%d" % len(calls)

    value = TimedValue(ttl_seconds=300)
    assert value.get_or_fetch(fetch, now=0) == "token-1"
    assert value.get_or_fetch(fetch, now=200) == "token-1"
    assert value.get_or_fetch(fetch, now=400) == "token-2"
    assert len(calls) == 2


def test_lookup_cache_invalidate():
    cache = LookupCache()
    cache.module_version.set("token")
    cache.invalidate()
    assert cache.module_version.get() is None
    assert cache.module_version.ttl_seconds == 5 * 60
