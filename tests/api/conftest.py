"""API test fixtures: a mocked orchestrator wired into the app.

Routes run for real; only the service layer behind them is replaced through
FastAPI dependency overrides.
"""

from __future__ import annotations

from unittest.mock import AsyncMock, MagicMock

import pytest
from httpx import ASGITransport, AsyncClient

from repolens.api.deps import get_orchestrator
from repolens.main import app
from repolens.services.selection import SelectionOrchestrator


@pytest.fixture
def orchestrator() -> MagicMock:
    """Orchestrator whose async operations are AsyncMocks."""
    mock = MagicMock(spec=SelectionOrchestrator)
    mock.discover = AsyncMock()
    mock.optimize_selection = AsyncMock()
    return mock


@pytest.fixture
async def api_client(orchestrator: MagicMock):
    """HTTP client against the app with the orchestrator overridden."""
    app.dependency_overrides[get_orchestrator] = lambda: orchestrator

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        yield client

    app.dependency_overrides.clear()
