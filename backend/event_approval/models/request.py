# ruff: noqa: TC003
from __future__ import annotations

from datetime import datetime
from decimal import Decimal

import sqlalchemy as sa
from sqlmodel import Field

from event_approval.models.base import TimestampMixin, UTCDateTime, UUIDBase
from event_approval.models.enums import RequestStatus

MONEY = sa.Numeric(12, 2)


class EventApprovalRequest(UUIDBase, TimestampMixin, table=True):
    """An employee's request to attend an event, with its approval state."""

    __tablename__ = "event_approval_request"
    __table_args__ = (sa.Index("ix_event_request_submitter_status", "submitter_id", "status"),)

    request_number: str = Field(max_length=32, unique=True)
    submitter_id: str = Field(max_length=255, index=True)
    submitter_display_name: str = Field(max_length=255)

    event_name: str = Field(max_length=200)
    event_website: str = Field(max_length=2048)
    role: str = Field(max_length=20)
    transportation_mode: str = Field(max_length=20)
    origin: str = Field(max_length=150)
    destination: str = Field(max_length=150)

    cost_registration: Decimal = Field(default=Decimal(0), sa_type=MONEY)
    cost_travel: Decimal = Field(default=Decimal(0), sa_type=MONEY)
    cost_hotels: Decimal = Field(default=Decimal(0), sa_type=MONEY)
    cost_meals: Decimal = Field(default=Decimal(0), sa_type=MONEY)
    cost_other: Decimal = Field(default=Decimal(0), sa_type=MONEY)
    currency_code: str = Field(max_length=3)
    cost_total: Decimal = Field(default=Decimal(0), sa_type=MONEY)

    status: str = Field(
        default=RequestStatus.SUBMITTED, max_length=20, index=True, sa_column_kwargs={"server_default": "submitted"}
    )
    updated_at: datetime = Field(sa_type=UTCDateTime(timezone=True))  # ty: ignore[invalid-argument-type]
    submitted_at: datetime | None = Field(default=None, sa_type=UTCDateTime(timezone=True))  # ty: ignore[invalid-argument-type]
    version: int = Field(default=1, sa_column_kwargs={"server_default": "1"})
