# ruff: noqa: TC003
from __future__ import annotations

import uuid
from datetime import datetime
from typing import Any

import sqlalchemy as sa
from sqlmodel import Field

from event_approval.models.base import UTCDateTime, UUIDBase
from event_approval.models.enums import DeliveryStatus, NotificationChannel


class StatusNotification(UUIDBase, table=True):
    """Status-change notification addressed to a request's submitter."""

    __tablename__ = "status_notification"

    request_id: uuid.UUID = Field(
        sa_column=sa.Column(sa.Uuid, sa.ForeignKey("event_approval_request.id"), nullable=False, index=True),
    )
    recipient_id: str = Field(max_length=255, index=True)
    channel: str = Field(default=NotificationChannel.IN_APP, max_length=20)
    payload_json: dict[str, Any] = Field(sa_type=sa.JSON)
    delivery_status: str = Field(default=DeliveryStatus.QUEUED, max_length=20)
    created_at: datetime = Field(sa_type=UTCDateTime(timezone=True))  # ty: ignore[invalid-argument-type]
    sent_at: datetime | None = Field(default=None, sa_type=UTCDateTime(timezone=True))  # ty: ignore[invalid-argument-type]
