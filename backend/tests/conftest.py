from collections.abc import Generator
from datetime import UTC, datetime, timedelta
from uuid import UUID

import pytest
from fastapi.testclient import TestClient

from portal.core.repositories.implementations.memory.tag_store import InMemoryTagStateStore
from portal.core.schemas.auth import AuthUser
from portal.core.services.render_service import RenderService
from portal.core.services.tag_registry_service import TagRegistryService
from portal.dependencies import get_current_user, get_render_service, get_tag_registry_service
from portal.main import create_app

TEST_USER = AuthUser(id=UUID("11111111-1111-1111-1111-111111111111"), email="reader@example.com")


class FakeClock:
    """Deterministic clock advancing one second per call."""

    def __init__(self, start: datetime | None = None) -> None:
        self.now = start or datetime(2024, 1, 1, tzinfo=UTC)

    def __call__(self) -> datetime:
        self.now += timedelta(seconds=1)
        return self.now


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def tag_store() -> InMemoryTagStateStore:
    return InMemoryTagStateStore()


@pytest.fixture
def registry_service(tag_store: InMemoryTagStateStore) -> TagRegistryService:
    return TagRegistryService(tag_store, namespace_key="test-tags")


@pytest.fixture
def render_service(registry_service: TagRegistryService) -> RenderService:
    return RenderService(registry_service)


@pytest.fixture
def client(registry_service: TagRegistryService, render_service: RenderService) -> Generator[TestClient, None, None]:
    app = create_app()
    app.dependency_overrides[get_current_user] = lambda: TEST_USER
    app.dependency_overrides[get_tag_registry_service] = lambda: registry_service
    app.dependency_overrides[get_render_service] = lambda: render_service
    with TestClient(app) as c:
        yield c
