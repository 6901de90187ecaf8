"""
API test fixtures.

Provides: TestClient over create_app() with the scroll service dependency
overridden by a service on in-memory collaborators. The lifespan is not
entered, so no database is created.
Dependencies: pytest, fastapi.testclient
System role: HTTP test infrastructure
"""

import pytest
from fastapi.testclient import TestClient

from scrollchain.api.deps import get_scroll_service
from scrollchain.application.services.scroll_service import ScrollService
from scrollchain.boundary.db.kv_store import InMemoryKeyValueStore
from scrollchain.boundary.ledger.memory_ledger import InMemoryLedger
from scrollchain.configs import PublishingSettings, Settings
from scrollchain.main import create_app


@pytest.fixture
def scroll_service() -> ScrollService:
    """Provide scroll service on an in-memory ledger and store."""
    return ScrollService(
        InMemoryLedger(),
        InMemoryKeyValueStore(),
        Settings(publishing=PublishingSettings(retry_delay_seconds=0)),
    )


@pytest.fixture
def client(scroll_service: ScrollService) -> TestClient:
    """Provide test client wired to the in-memory scroll service."""
    app = create_app()
    app.dependency_overrides[get_scroll_service] = lambda: scroll_service
    return TestClient(app)
