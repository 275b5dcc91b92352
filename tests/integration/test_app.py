"""
API tests for the URL shortener, via the FastAPI TestClient.

Covers:
    - POST /shorten success, re-shortening, validation failures
    - GET /s/{code} redirect and 404
    - GET /stats/{code} with and without hits, and 404
    - Internal failures mapped to 500 without partial success
    - Startup failure on an unknown digest
"""

from datetime import datetime, timezone

import pytest
from fastapi.testclient import TestClient

from main import create_app
from url_shortener.config import Settings
from url_shortener.exceptions import CodeCollisionError, ConfigurationError, StorageError
from url_shortener.models import Hit
from url_shortener.storage.storage import Storage

TEST_HOST = "http://localhost:3000"


@pytest.fixture
def seeded(storage):
    """Two google.com records; the first has hits on 2020-01-01 and 2020-01-02."""
    first = storage.insert_url("NTQmN-z5", "https://www.google.com", f"{TEST_HOST}/s/NTQmN-z5")
    storage.insert_url("YQLGtT3-", "https://www.google.com", f"{TEST_HOST}/s/YQLGtT3-")
    storage.hits[first.id] = [
        Hit(id=1, url_id=first.id, created_at=datetime(2020, 1, 2, tzinfo=timezone.utc)),
        Hit(id=2, url_id=first.id, created_at=datetime(2020, 1, 1, tzinfo=timezone.utc)),
    ]
    return storage


def _shorten(client, url):
    return client.post("/shorten", json={"url": url})


# -------------------------
# GET /s/{code}
# -------------------------

def test_get_url_ok(client, seeded):
    res = client.get("/s/NTQmN-z5", follow_redirects=False)
    assert res.status_code == 303
    assert res.headers["location"] == "https://www.google.com"


def test_get_url_records_one_hit_per_call(client, seeded):
    record = seeded.get_url_by_code("YQLGtT3-")
    client.get("/s/YQLGtT3-", follow_redirects=False)
    assert seeded.hit_stats(record.id)[0] == 1
    client.get("/s/YQLGtT3-", follow_redirects=False)
    assert seeded.hit_stats(record.id)[0] == 2


def test_get_url_404(client, seeded):
    res = client.get("/s/aosdhfs", follow_redirects=False)
    assert res.status_code == 404


# -------------------------
# GET /stats/{code}
# -------------------------

def test_get_stats_ok(client, seeded):
    res = client.get("/stats/NTQmN-z5")
    assert res.status_code == 200
    assert res.json() == {
        "hits": 2,
        "last_hit": "2020-01-02T00:00:00Z",
        "short_url": f"{TEST_HOST}/s/NTQmN-z5",
        "url": "https://www.google.com",
    }


def test_get_stats_empty(client, seeded):
    res = client.get("/stats/YQLGtT3-")
    assert res.status_code == 200
    assert res.json() == {
        "hits": 0,
        "last_hit": None,
        "short_url": f"{TEST_HOST}/s/YQLGtT3-",
        "url": "https://www.google.com",
    }


def test_get_stats_404(client, seeded):
    assert client.get("/stats/aosdhfs").status_code == 404


def test_stats_follow_redirects(client):
    code = _shorten(client, "http://netflix.com").json()["code"]
    client.get(f"/s/{code}", follow_redirects=False)
    client.get(f"/s/{code}", follow_redirects=False)
    body = client.get(f"/stats/{code}").json()
    assert body["hits"] == 2
    assert body["last_hit"] is not None


# -------------------------
# POST /shorten
# -------------------------

def test_post_shorten_ok(client):
    res = _shorten(client, "http://netflix.com")
    assert res.status_code == 200
    body = res.json()
    assert body["url"] == "http://netflix.com"
    assert body["short_url"] == f"{TEST_HOST}/s/{body['code']}"
    assert len(body["code"]) == 8

    res = client.get(f"/s/{body['code']}", follow_redirects=False)
    assert res.status_code == 303
    assert res.headers["location"] == "http://netflix.com"


def test_post_shorten_known_first_code(client):
    body = _shorten(client, "https://www.google.com").json()
    assert body["code"] == "NTQmN-z5"


def test_post_shorten_existing(client):
    first_code = _shorten(client, "https://netflix.com").json()["code"]
    res = _shorten(client, "https://netflix.com")
    assert res.status_code == 200
    code = res.json()["code"]
    assert code != first_code

    for c in (first_code, code):
        res = client.get(f"/s/{c}", follow_redirects=False)
        assert res.status_code == 303
        assert res.headers["location"] == "https://netflix.com"


def test_post_shorten_skips_seeded_codes(client, seeded):
    body = _shorten(client, "https://www.google.com").json()
    assert body["code"] == "wJZTvWsB"


@pytest.mark.parametrize("url", ["invalid_url", "http://www.goo|gle.com"])
def test_post_shorten_invalid_url(client, storage, url):
    res = _shorten(client, url)
    assert res.status_code == 400
    assert res.json()["detail"] == "Invalid URL"
    assert storage.urls == {}


def test_post_missing_url(client):
    assert client.post("/shorten", json={}).status_code == 422


def test_health(client):
    res = client.get("/health")
    assert res.status_code == 200
    assert res.json() == {"status": "ok"}


# -------------------------
# Failures
# -------------------------

class BrokenInserts(Storage):
    def insert_url(self, code, url, short_url):
        raise StorageError("disk full")


class BrokenHits(Storage):
    def record_hit(self, url_id):
        raise StorageError("hits table unavailable")


class AlwaysTaken(Storage):
    def insert_url(self, code, url, short_url):
        raise CodeCollisionError(code)


def test_shorten_storage_failure_is_500(settings):
    client = TestClient(create_app(settings=settings, storage=BrokenInserts()))
    res = _shorten(client, "https://example.com")
    assert res.status_code == 500
    assert res.json() == {"detail": "Internal server error"}


def test_redirect_without_hit_is_500(settings):
    storage = BrokenHits()
    storage.insert_url("abc", "https://example.com", f"{TEST_HOST}/s/abc")
    client = TestClient(create_app(settings=settings, storage=storage))
    res = client.get("/s/abc", follow_redirects=False)
    assert res.status_code == 500
    assert "location" not in res.headers


def test_allocation_exhausted_is_500(settings, monkeypatch):
    monkeypatch.setenv("SHORTENER_MAX_ATTEMPTS", "3")
    client = TestClient(create_app(settings=Settings(), storage=AlwaysTaken()))
    res = _shorten(client, "https://example.com")
    assert res.status_code == 500


def test_unknown_digest_fails_at_startup(settings):
    settings.SHORTENER_DIGEST = "md5"
    with pytest.raises(ConfigurationError):
        create_app(settings=settings)
