"""
Kořenový endpoint a health check.
"""
import redis

from core import redis_service


def test_root(client):
    response = client.get("/")

    assert response.status_code == 200
    assert response.json()["docs"] == "/docs"


def test_health_ok(client):
    response = client.get("/health")

    assert response.status_code == 200
    assert response.json() == {"status": "healthy", "checks": {"database": "ok", "redis": "ok"}}


def test_health_redis_down(client, monkeypatch):
    class BrokenRedis:
        def ping(self):
            raise redis.ConnectionError("Redis neběží")

    monkeypatch.setattr(redis_service, "redis_client", BrokenRedis())

    response = client.get("/health")

    assert response.status_code == 503
    assert response.json()["checks"]["redis"] == "error"


def test_unknown_route(client):
    response = client.get("/neexistuje")

    assert response.status_code == 404
