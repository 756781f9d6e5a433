# ruff: noqa: TC001, TC003
from __future__ import annotations

import uuid
from datetime import datetime

from pydantic import AliasChoices, BaseModel, ConfigDict, Field

from event_approval.models.enums import DecisionType

MAX_COMMENT_LENGTH = 2000


class DecisionPayload(BaseModel):
    """Request body for approving or rejecting a request.

    ``expected_version`` is the version the approver last read; ``version`` is
    accepted as an alias.
    """

    model_config = ConfigDict(str_strip_whitespace=True)

    decision_type: DecisionType
    comment: str = Field(min_length=1, max_length=MAX_COMMENT_LENGTH)
    expected_version: int = Field(ge=1, validation_alias=AliasChoices("expected_version", "version"))


class DecisionResponse(BaseModel):
    """Response schema for a recorded decision."""

    id: uuid.UUID
    request_id: uuid.UUID
    approver_id: str
    approver_display_name: str
    decision_type: DecisionType
    comment: str
    decided_at: datetime
