# ruff: noqa: TC001, TC003
from __future__ import annotations

import uuid
from datetime import datetime

from pydantic import BaseModel

from event_approval.models.enums import DeliveryStatus, NotificationChannel, RequestStatus


class NotificationQuery(BaseModel):
    """Optional filters applied on top of the recipient filter."""

    request_id: uuid.UUID | None = None
    delivery_status: DeliveryStatus | None = None


class NotificationContent(BaseModel):
    """What the recipient is told about the status change."""

    request_id: uuid.UUID
    status: RequestStatus
    comment: str


class NotificationResponse(BaseModel):
    """Response schema for a status notification."""

    id: uuid.UUID
    request_id: uuid.UUID
    recipient_id: str
    channel: NotificationChannel
    payload: NotificationContent
    delivery_status: DeliveryStatus
    created_at: datetime
    sent_at: datetime | None
