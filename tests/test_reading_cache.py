import pytest

from reading_cache import ReadingCache

PAYLOAD = {'device': {'temperature': 23, 'humidity': 65, 'unit': 'celsius'}}


def test_empty_cache_misses():
    assert ReadingCache().get(now=0) is None


def test_hit_within_ttl_returns_stored_payload():
    cache = ReadingCache(ttl=300)
    cache.put(PAYLOAD, now=100)
    entry = cache.get(now=399.9)
    assert entry.payload is PAYLOAD
    assert entry.fetched_at == 100


def test_miss_once_ttl_elapsed():
    cache = ReadingCache(ttl=300)
    cache.put(PAYLOAD, now=100)
    assert cache.get(now=400) is None


def test_put_overwrites_slot():
    cache = ReadingCache(ttl=300)
    cache.put(PAYLOAD, now=0)
    newer = {'device': {'temperature': 1, 'humidity': 2, 'unit': 'celsius'}}
    cache.put(newer, now=10)
    assert cache.get(now=20).payload is newer


@pytest.mark.parametrize('payload', [None, {}])
def test_put_rejects_empty_payload(payload):
    cache = ReadingCache()
    cache.put(PAYLOAD, now=0)
    with pytest.raises(ValueError):
        cache.put(payload, now=1)
    assert cache.get(now=2).payload is PAYLOAD


def test_uses_injected_clock():
    now = [50.0]
    cache = ReadingCache(ttl=10, clock=lambda: now[0])
    cache.put(PAYLOAD)
    assert cache.age() == 0
    now[0] = 59.0
    assert cache.get() is not None
    now[0] = 60.0
    assert cache.get() is None


def test_clear():
    cache = ReadingCache()
    cache.put(PAYLOAD, now=0)
    cache.clear()
    assert cache.get(now=0) is None
    assert cache.age(now=0) is None
