# ruff: noqa: B008, TC003
from __future__ import annotations

import uuid

from fastapi import APIRouter, Query

from event_approval.api.deps import ActorDep, LifecycleDep
from event_approval.models.enums import DeliveryStatus
from event_approval.schemas.notification import NotificationQuery, NotificationResponse

notifications_router = APIRouter(prefix="/notifications", tags=["notifications"])


@notifications_router.get("", response_model=list[NotificationResponse])
async def list_notifications(
    lifecycle: LifecycleDep,
    actor: ActorDep,
    request_id: uuid.UUID | None = Query(default=None),
    delivery_status: DeliveryStatus | None = Query(default=None),
) -> list[NotificationResponse]:
    """Status notifications addressed to the current user, newest first."""
    query = NotificationQuery(request_id=request_id, delivery_status=delivery_status)
    return await lifecycle.list_notifications(actor.id, query)
