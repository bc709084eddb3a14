import pytest
from starlette.requests import Request

from app.exceptions import NotFoundError, RateLimitExceeded
from app.utils.cache import CacheService
from app.utils.rate_limiter import RateLimiter
from app.utils.rounding import percentage, round_half_up


@pytest.mark.parametrize("value, expected", [(0.5, 1), (1.5, 2), (2.5, 3), (66.666, 67), (-0.5, 0)])
def test_round_half_up(value, expected):
    assert round_half_up(value) == expected


def test_percentage():
    assert percentage(2, 3) == 67
    assert percentage(1, 8) == 13
    assert percentage(5, 0) == 0


class FakeRedis:
    def __init__(self):
        self.store = {}

    def get(self, key):
        return self.store.get(key)

    def setex(self, key, ttl, value):
        self.store[key] = value

    def delete(self, key):
        self.store.pop(key, None)


def test_cache_disabled_by_configuration():
    cache = CacheService()

    assert cache.redis_client is None
    assert cache.get("anything") is None
    assert cache.set("anything", [1]) is False


def test_cache_round_trip_and_subject_invalidation():
    cache = CacheService()
    cache.redis_client = FakeRedis()
    key = cache.course_structure_key("subject-1")

    assert cache.set(key, [{"content_block_id": "b1"}])
    assert cache.get(key) == [{"content_block_id": "b1"}]

    cache.clear_subject_cache("subject-1")
    assert cache.get(key) is None


def make_request(ip="10.0.0.1", headers=None):
    return Request({
        "type": "http",
        "method": "GET",
        "path": "/api/progress",
        "headers": headers or [],
        "client": (ip, 5000),
    })


def test_rate_limiter_blocks_after_minute_limit():
    limiter = RateLimiter(requests_per_minute=2, requests_per_hour=100)

    limiter.check_rate_limit(make_request())
    limiter.check_rate_limit(make_request())
    with pytest.raises(RateLimitExceeded) as exc_info:
        limiter.check_rate_limit(make_request())

    body = exc_info.value.to_dict()
    assert body["status_code"] == 429
    assert body["retry_after"] == 60
    # other clients are unaffected
    limiter.check_rate_limit(make_request(ip="10.0.0.2"))


def test_rate_limiter_uses_forwarded_address_behind_trusted_proxy():
    limiter = RateLimiter(requests_per_minute=1, requests_per_hour=100, trust_forwarded=True)
    forwarded = [(b"x-forwarded-for", b"203.0.113.9, 10.0.0.1")]

    limiter.check_rate_limit(make_request(headers=forwarded))
    limiter.check_rate_limit(make_request())
    with pytest.raises(RateLimitExceeded):
        limiter.check_rate_limit(make_request(ip="10.0.0.7", headers=forwarded))


def test_rate_limiter_ignores_forwarded_header_by_default():
    limiter = RateLimiter(requests_per_minute=1, requests_per_hour=100)

    limiter.check_rate_limit(make_request(headers=[(b"x-forwarded-for", b"198.51.100.1")]))
    with pytest.raises(RateLimitExceeded):
        limiter.check_rate_limit(make_request(headers=[(b"x-forwarded-for", b"198.51.100.2")]))


def test_rate_limiter_drops_idle_clients():
    limiter = RateLimiter(requests_per_minute=5, requests_per_hour=100)
    limiter.check_rate_limit(make_request(ip="10.0.0.3"))
    limiter.requests["10.0.0.3"][0] -= 3601

    limiter.check_rate_limit(make_request(ip="10.0.0.4"))

    assert list(limiter.requests) == ["10.0.0.4"]


def test_not_found_error_body():
    body = NotFoundError("Student").to_dict()

    assert body["error"] == "NOT_FOUND"
    assert body["message"] == "Student not found"
    assert body["status_code"] == 404


def test_get_or_load_caches_only_non_empty_results():
    cache = CacheService()
    cache.redis_client = FakeRedis()
    calls = []

    def loader():
        calls.append(1)
        return [] if len(calls) == 1 else ["block"]

    assert cache.get_or_load("k", loader) == []
    assert cache.get_or_load("k", loader) == ["block"]
    assert cache.get_or_load("k", loader) == ["block"]
    assert len(calls) == 2
