"""Health endpoint probes the database and the optional Redis client."""

from __future__ import annotations

import fakeredis
import pytest
from redis.exceptions import ConnectionError as RedisConnectionError


@pytest.fixture()
def redis_client(app):
    client = fakeredis.FakeRedis()
    app.extensions["redis_client"] = client
    yield client
    app.extensions.pop("redis_client", None)


def test_health_without_redis(client) -> None:
    resp = client.get("/api/v1/health")
    body = resp.get_json()

    assert resp.status_code == 200
    assert body["status"] == "ok"
    assert body["db"] == "ok"
    assert body["redis"] == "disabled"


def test_health_with_redis(client, redis_client) -> None:
    body = client.get("/api/v1/health").get_json()
    assert body["redis"] == "ok"


def test_health_degraded_when_redis_fails(client, redis_client, monkeypatch) -> None:
    def _boom():
        raise RedisConnectionError("down")

    monkeypatch.setattr(redis_client, "ping", _boom)

    resp = client.get("/api/v1/health")

    assert resp.status_code == 503
    assert resp.get_json()["status"] == "degraded"
    assert resp.get_json()["redis"] == "fail"
