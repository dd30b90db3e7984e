from app.services.public_cache import PublicShareCache, trip_key
from app.services.public import weak_etag


class FakeClock:
    def __init__(self):
        self.now = 0.0

    def __call__(self):
        return self.now


def test_entries_expire_after_ttl():
    clock = FakeClock()
    cache = PublicShareCache(ttl_seconds=30, clock=clock)
    cache.set(trip_key(1), {"trip": 1})

    clock.now = 29.9
    assert cache.get(trip_key(1)) == {"trip": 1}
    clock.now = 30
    assert cache.get(trip_key(1)) is None


def test_invalidate_trip_only_drops_that_trip():
    cache = PublicShareCache(ttl_seconds=30, clock=FakeClock())
    cache.set(trip_key(1), "one")
    cache.set(trip_key(2), "two")

    cache.invalidate_trip(1)
    assert cache.get(trip_key(1)) is None
    assert cache.get(trip_key(2)) == "two"


def test_weak_etag_ignores_key_order():
    a = weak_etag({"trip": {"id": 1, "title": "x"}, "items": []})
    b = weak_etag({"items": [], "trip": {"title": "x", "id": 1}})
    assert a == b
    assert a.startswith('W/"') and a.endswith('"')
    assert weak_etag({"items": [1]}) != weak_etag({"items": [2]})
