# ruff: noqa: TC003
from __future__ import annotations

import uuid
from collections.abc import Mapping
from typing import TYPE_CHECKING, Any, TypeVar

from pydantic import BaseModel
from pydantic import ValidationError as PydanticValidationError

from event_approval.exceptions import NotFoundError, ValidationError, field_errors
from event_approval.services.query import is_retained, request_timestamp

if TYPE_CHECKING:
    from datetime import datetime

    from event_approval.models.request import EventApprovalRequest
    from event_approval.repositories.base import UnitOfWork

PayloadT = TypeVar("PayloadT", bound=BaseModel)


def validate_payload(model: type[PayloadT], payload: PayloadT | Mapping[str, Any], message: str) -> PayloadT:
    """Parse raw input into ``model``, raising ValidationError with per-field messages."""
    if isinstance(payload, model):
        return payload
    try:
        return model.model_validate(payload)
    except PydanticValidationError as exc:
        raise ValidationError(message, field_errors(exc.errors())) from None


async def get_request_or_404(
    uow: UnitOfWork,
    request_id: uuid.UUID,
    *,
    for_update: bool = False,
    cutoff: datetime | None = None,
) -> EventApprovalRequest:
    """Fetch a request by ID.

    Raises NotFoundError if absent, or if it was submitted before ``cutoff`` and is
    therefore outside the retention window.
    """
    request = await uow.get_request(request_id, for_update=for_update)
    if request is None or not is_retained(request_timestamp(request), cutoff):
        raise NotFoundError(f"Request {request_id} was not found")
    return request
