"""
Tests for the classification cache.
"""
import time
from lumina.core.cache import ClassificationCache, generate_headers_cache_key
from lumina.core.schemas import DatasetClassification


def classification(dataset_type="sales"):
    return DatasetClassification(type=dataset_type, confidence=0.7, reasoning="test", indicators=[])


def test_cache_set_get():
    """Test basic cache set and get operations."""
    cache = ClassificationCache(default_ttl=1.0)

    cache.set("key1", classification("sales"))
    assert cache.get("key1").type == "sales"
    assert cache.get("missing") is None

    cache.set("key2", classification("finance"), ttl=0.1)
    assert cache.get("key2").type == "finance"

    # Wait for expiration
    time.sleep(0.2)
    assert cache.get("key2") is None


def test_cache_cleanup():
    """Test cache cleanup of expired entries."""
    cache = ClassificationCache(default_ttl=0.1)

    cache.set("key1", classification())
    cache.set("key2", classification(), ttl=1.0)

    time.sleep(0.15)
    assert cache.cleanup_expired() == 1

    assert cache.get("key1") is None
    assert cache.get("key2") is not None
    assert len(cache) == 1


def test_cache_clear():
    cache = ClassificationCache()
    cache.set("key1", classification())
    cache.clear()
    assert len(cache) == 0


def test_generate_headers_cache_key():
    """Same headers give the same key; order and case matter."""
    key1 = generate_headers_cache_key(["sku", "stock"])
    key2 = generate_headers_cache_key(["sku", "stock"])

    assert key1 == key2
    assert key1.startswith("headers:")
    assert key1 != generate_headers_cache_key(["stock", "sku"])
    assert key1 != generate_headers_cache_key(["SKU", "stock"])
    # joined headers must not collide with a single header containing a space
    assert generate_headers_cache_key(["a b"]) != generate_headers_cache_key(["a", "b"])


def test_separate_instances_do_not_share():
    """Caches are explicit stores, not a shared singleton."""
    first = ClassificationCache()
    second = ClassificationCache()
    first.set("key", classification())
    assert second.get("key") is None


def test_default_ttl_from_settings(monkeypatch):
    """Without an explicit TTL the configured one applies."""
    from lumina.core.config import reload_settings

    monkeypatch.setenv("LUMINA_CLASSIFICATION_CACHE_TTL", "120")
    reload_settings()
    try:
        assert ClassificationCache().default_ttl == 120
    finally:
        monkeypatch.delenv("LUMINA_CLASSIFICATION_CACHE_TTL")
        reload_settings()
