from typing import Literal

from fastapi import APIRouter, Request
from pydantic import BaseModel

from event_approval.api.deps import LifecycleDep

router = APIRouter(tags=["health"])


class HealthResponse(BaseModel):
    """Health check response."""

    status: Literal["ok", "degraded"]
    version: str
    environment: str
    data_mode: str


@router.get("/health", response_model=HealthResponse)
async def health(request: Request, lifecycle: LifecycleDep) -> HealthResponse:
    """Return the health status of the API service."""
    settings = request.app.state.settings
    return HealthResponse(
        status="ok" if await lifecycle.ping() else "degraded",
        version=settings.app_version,
        environment=settings.environment,
        data_mode=settings.data_mode,
    )
