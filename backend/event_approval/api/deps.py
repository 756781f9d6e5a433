# ruff: noqa: B008
from __future__ import annotations

from typing import Annotated

from fastapi import Depends, Header, Request

from event_approval.exceptions import ForbiddenError
from event_approval.schemas.auth import ActorInfo
from event_approval.services.identity import IdentityService
from event_approval.services.lifecycle import LifecycleService


def get_lifecycle_service(request: Request) -> LifecycleService:
    """Return the service graph built by the application factory."""
    return request.app.state.lifecycle


def get_identity_service(request: Request) -> IdentityService:
    return request.app.state.identity


LifecycleDep = Annotated[LifecycleService, Depends(get_lifecycle_service)]
IdentityDep = Annotated[IdentityService, Depends(get_identity_service)]


async def get_current_actor(
    identity: IdentityDep,
    x_user_id: str | None = Header(default=None),
) -> ActorInfo:
    """Resolve the caller from the dev ``X-User-Id`` header."""
    return await identity.resolve_actor(x_user_id)


ActorDep = Annotated[ActorInfo, Depends(get_current_actor)]


async def require_approver(actor: ActorDep) -> ActorInfo:
    """Require approver role for the request."""
    if actor.role != "approver":
        raise ForbiddenError("Approver access required")
    return actor


ApproverDep = Annotated[ActorInfo, Depends(require_approver)]
