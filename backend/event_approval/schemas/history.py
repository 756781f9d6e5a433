# ruff: noqa: TC001, TC003
from __future__ import annotations

import uuid
from datetime import UTC, datetime
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator

from event_approval.models.enums import ActorRole, HistoryEventType
from event_approval.schemas.decision import MAX_COMMENT_LENGTH


class CommentPayload(BaseModel):
    """Request body for adding a comment to a request's history."""

    model_config = ConfigDict(str_strip_whitespace=True)

    comment: str = Field(min_length=1, max_length=MAX_COMMENT_LENGTH)


class HistoryQuery(BaseModel):
    """Conjunctive filters for a request's history. Bounds are inclusive."""

    model_config = ConfigDict(populate_by_name=True)

    event_types: list[HistoryEventType] | None = None
    from_: datetime | None = Field(default=None, alias="from")
    to: datetime | None = None

    @field_validator("from_", "to")
    @classmethod
    def _assume_utc(cls, value: datetime | None) -> datetime | None:
        if value is not None and value.tzinfo is None:
            return value.replace(tzinfo=UTC)
        return value


class HistoryEntryResponse(BaseModel):
    """Response schema for one history entry."""

    id: uuid.UUID
    request_id: uuid.UUID
    sequence: int
    event_type: HistoryEventType
    actor_id: str
    actor_role: ActorRole
    comment: str | None = None
    metadata: dict[str, Any] | None = None
    occurred_at: datetime
