# ruff: noqa: TC003
from __future__ import annotations

import uuid
from datetime import datetime

import sqlalchemy as sa
from sqlmodel import Field

from event_approval.models.base import UTCDateTime, UUIDBase


class ApprovalDecision(UUIDBase, table=True):
    """Immutable record of one approve/reject act."""

    __tablename__ = "approval_decision"

    request_id: uuid.UUID = Field(
        sa_column=sa.Column(sa.Uuid, sa.ForeignKey("event_approval_request.id"), nullable=False, index=True),
    )
    approver_id: str = Field(max_length=255)
    approver_display_name: str = Field(max_length=255)
    decision_type: str = Field(max_length=20)
    comment: str = Field(max_length=2000)
    decided_at: datetime = Field(sa_type=UTCDateTime(timezone=True))  # ty: ignore[invalid-argument-type]
