"""Health check tests."""

import redis

from conftest import add_barcodes
from setbuilder import main


class FakeBroker:
    def __init__(self, error=None):
        self.error = error

    def ping(self):
        if self.error:
            raise self.error
        return True


def test_healthz(client):
    response = client.get("/v1/healthz")
    assert response.status_code == 200
    assert response.json() == {"status": "ok"}


def test_health_reports_pool_level(client, test_db, session_factory, monkeypatch):
    monkeypatch.setattr(main, "SessionLocal", session_factory)
    monkeypatch.setattr(main.redis, "from_url", lambda url, **kwargs: FakeBroker())
    add_barcodes(test_db, "B-1", "B-2")

    data = client.get("/health").json()

    assert data["status"] == "ok"
    assert data["unused_barcodes"] == 2
    assert data["open_jobs"] == 0


def test_health_degraded_on_empty_pool_or_broker(client, session_factory, monkeypatch):
    monkeypatch.setattr(main, "SessionLocal", session_factory)
    monkeypatch.setattr(
        main.redis,
        "from_url",
        lambda url, **kwargs: FakeBroker(redis.ConnectionError("refused")),
    )

    data = client.get("/health").json()

    assert data["status"] == "degraded"
    assert data["unused_barcodes"] == 0
    assert data["broker"].startswith("error:")
