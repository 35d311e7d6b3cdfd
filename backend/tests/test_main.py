"""Tests for the application shell and its lifespan."""

from httpx import ASGITransport, AsyncClient

from relay.main import create_application
from relay.publishing import PublishOrchestrator
from relay.tasks import SessionCleanupScheduler


async def test_lifespan_starts_and_stops_background_services(settings):
    app = create_application(settings)

    async with app.router.lifespan_context(app):
        assert isinstance(app.state.orchestrator, PublishOrchestrator)
        assert isinstance(app.state.session_cleanup, SessionCleanupScheduler)
        assert app.state.session_cleanup.running

        transport = ASGITransport(app=app)
        async with AsyncClient(transport=transport, base_url="http://test") as client:
            health = await client.get("/health")
            ready = await client.get("/ready")

    assert health.status_code == 200
    assert health.json() == {
        "status": "healthy",
        "version": settings.app_version,
        "checks": {"api": "up", "database": "up"},
    }
    assert ready.json() == {"ready": True}
    assert not app.state.session_cleanup.running


async def test_health_reports_database_down_without_startup(settings):
    app = create_application(settings)

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        response = await client.get("/health")

    assert response.status_code == 200
    assert response.json()["checks"]["database"] == "down"
