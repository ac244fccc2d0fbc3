"""Health Probe — GET /api/v1/health/."""

from hclrender import __version__


async def test_health_check(client):
    response = await client.get("/api/v1/health/")
    assert response.status_code == 200
    assert response.json() == {
        "status": "healthy", "service": "hclrender", "version": __version__,
    }
