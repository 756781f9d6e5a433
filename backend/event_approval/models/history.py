# ruff: noqa: TC003
from __future__ import annotations

import uuid
from datetime import datetime
from typing import Any

import sqlalchemy as sa
from sqlmodel import Field

from event_approval.models.base import UTCDateTime, UUIDBase


class RequestHistoryEntry(UUIDBase, table=True):
    """Append-only audit record of one lifecycle event."""

    __tablename__ = "request_history_entry"
    __table_args__ = (sa.Index("ix_history_request_occurred", "request_id", "occurred_at"),)

    request_id: uuid.UUID = Field(
        sa_column=sa.Column(sa.Uuid, sa.ForeignKey("event_approval_request.id"), nullable=False),
    )
    sequence: int = Field(sa_column=sa.Column(sa.BigInteger, nullable=False, unique=True))
    event_type: str = Field(max_length=50)
    actor_id: str = Field(max_length=255)
    actor_role: str = Field(max_length=20)
    comment: str | None = Field(default=None, max_length=2000)
    metadata_json: dict[str, Any] | None = Field(default=None, sa_type=sa.JSON)
    occurred_at: datetime = Field(sa_type=UTCDateTime(timezone=True))  # ty: ignore[invalid-argument-type]
