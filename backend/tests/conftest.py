from __future__ import annotations

from datetime import UTC, datetime
from typing import TYPE_CHECKING, Any

import pytest
from httpx import ASGITransport, AsyncClient

from event_approval.clock import FixedClock
from event_approval.config import Settings
from event_approval.main import create_app
from event_approval.repositories.memory import InMemoryRepository
from event_approval.schemas.auth import ActorInfo
from event_approval.seed import seed_identities
from event_approval.services.identity import InMemoryIdentityService
from event_approval.services.lifecycle import LifecycleService

if TYPE_CHECKING:
    from collections.abc import AsyncIterator

    from fastapi import FastAPI

START = datetime(2026, 1, 1, 9, 0, tzinfo=UTC)

OTHER_EMPLOYEE = ActorInfo(id="employee-002", display_name="Sam Employee", role="employee")


def build_payload(**overrides: Any) -> dict[str, Any]:
    """Valid submission body; ``overrides`` replace top-level keys."""
    payload: dict[str, Any] = {
        "event_name": "Global Engineering Summit",
        "event_website": "https://events.contoso.example/summit",
        "role": "speaker",
        "transportation_mode": "air",
        "origin": "Redmond",
        "destination": "Berlin",
        "cost_estimate": {
            "registration": 499,
            "travel": 1200,
            "hotels": 850,
            "meals": 280,
            "other": 100,
            "currency_code": "USD",
            "total": 2929,
        },
    }
    payload.update(overrides)
    return payload


@pytest.fixture
def clock() -> FixedClock:
    return FixedClock(START)


@pytest.fixture
def settings() -> Settings:
    return Settings(seed_demo_data=False, data_mode="memory", retention_days=None)


@pytest.fixture
def repository() -> InMemoryRepository:
    return InMemoryRepository()


@pytest.fixture
def lifecycle(settings: Settings, repository: InMemoryRepository, clock: FixedClock) -> LifecycleService:
    return LifecycleService.from_settings(settings, repository=repository, clock=clock)


@pytest.fixture
def identity() -> InMemoryIdentityService:
    directory = InMemoryIdentityService()
    seed_identities(directory)
    directory.seed(OTHER_EMPLOYEE)
    return directory


@pytest.fixture
def app(settings: Settings, lifecycle: LifecycleService, identity: InMemoryIdentityService) -> FastAPI:
    return create_app(settings, lifecycle=lifecycle, identity=identity)


@pytest.fixture
async def async_client(app: FastAPI) -> AsyncIterator[AsyncClient]:
    """Async HTTP client bound to an app backed by the in-memory store."""
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as client:
        yield client
