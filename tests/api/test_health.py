"""Health & Readiness Probes — verifies liveness and readiness endpoints.

Tests:
    - Liveness always 200 with service/version
    - Readiness 200 when SELECT 1 succeeds, 503 when the DB is down or absent
"""

from userapi import __version__
from userapi.infrastructure import database as db_module


async def test_liveness(client):
    res = await client.get("/api/health/")
    assert res.status_code == 200
    assert res.json() == {
        "status": "healthy", "service": "userapi", "version": __version__,
    }


async def test_readiness_with_database(client):
    res = await client.get("/api/health/ready")
    assert res.status_code == 200
    assert res.json() == {"status": "ready", "checks": {"database": "healthy"}}


async def test_readiness_when_database_unhealthy(client, db_manager):
    async def unhealthy():
        return False

    db_manager.health_check = unhealthy
    res = await client.get("/api/health/ready")
    assert res.status_code == 503
    assert res.json()["reason"] == "database_unavailable"


async def test_readiness_without_pool(client, monkeypatch):
    monkeypatch.setattr(db_module, "db_manager", None)
    res = await client.get("/api/health/ready")
    assert res.status_code == 503
