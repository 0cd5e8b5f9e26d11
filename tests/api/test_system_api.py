"""API tests for health, statistics and request tracing."""

from typing import Any, Dict, List

import pytest
from httpx import ASGITransport, AsyncClient

from src.infrastructure.app_factory import create_application
from src.infrastructure.config import get_settings
from src.infrastructure.database import Database
from src.infrastructure.middleware import REQUEST_ID_HEADER
from src.interfaces.api import router as api_router


class TestSystemAPI:
    """API tests for system endpoints."""

    @pytest.mark.asyncio
    async def test_health_ok(self, client: AsyncClient):
        """A reachable database reports healthy."""
        response = await client.get("/health")

        assert response.status_code == 200
        assert response.json() == {"status": "healthy", "database": "connected"}

    @pytest.mark.asyncio
    async def test_health_database_down(self, tmp_path):
        """An unreachable database reports 503."""
        database = Database(f"sqlite+aiosqlite:///{tmp_path / 'missing' / 'nowhere.db'}")
        app = create_application(router=api_router, database=database, create_tables_on_startup=False)

        async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as ac:
            response = await ac.get("/health")

        await database.dispose()
        assert response.status_code == 503
        assert response.json()["status"] == "unhealthy"

    @pytest.mark.asyncio
    async def test_stats(
        self, client: AsyncClient, test_students: List[Dict[str, Any]], test_books: List[Dict[str, Any]]
    ):
        """Counts per collection."""
        await client.post(
            "/library/borrow", json={"bookId": test_books[0]["id"], "studentId": test_students[0]["id"]}
        )

        response = await client.get("/stats")

        assert response.status_code == 200
        assert response.json() == {
            "students": {"total": 5, "byStatus": {"completed": 2, "enrolled": 3}},
            "books": {"total": 3, "available": 2, "borrowed": 1},
        }

    @pytest.mark.asyncio
    async def test_request_id_generated(self, client: AsyncClient):
        """Every response carries a request id."""
        response = await client.get("/health")
        assert response.headers.get(REQUEST_ID_HEADER)

    @pytest.mark.asyncio
    async def test_request_id_propagated(self, client: AsyncClient):
        """A caller-supplied request id is echoed back."""
        response = await client.get("/students", headers={REQUEST_ID_HEADER: "trace-123"})
        assert response.headers[REQUEST_ID_HEADER] == "trace-123"

    @pytest.mark.asyncio
    async def test_unknown_route(self, client: AsyncClient):
        """Unknown paths are 404."""
        response = await client.get("/nope")
        assert response.status_code == 404


class TestApplicationFactory:
    """Settings-driven options of the application factory."""

    @pytest.mark.asyncio
    async def test_debug_follows_settings(self, tmp_path):
        """``DEBUG`` from the settings reaches the application unless overridden."""
        database = Database(f"sqlite+aiosqlite:///{tmp_path / 'factory.db'}")

        default_app = create_application(router=api_router, database=database, create_tables_on_startup=False)
        debug_app = create_application(router=api_router, database=database, create_tables_on_startup=False, debug=True)

        await database.dispose()
        assert default_app.debug is get_settings().DEBUG
        assert debug_app.debug is True
