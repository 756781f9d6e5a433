# ruff: noqa: TC003
from __future__ import annotations

import logging
import uuid
from datetime import datetime
from typing import TYPE_CHECKING, Any

from event_approval.models.enums import ActorRole, HistoryEventType
from event_approval.models.history import RequestHistoryEntry
from event_approval.schemas.history import CommentPayload, HistoryEntryResponse, HistoryQuery
from event_approval.services.base import get_request_or_404, validate_payload
from event_approval.services.query import filter_history, retention_cutoff

if TYPE_CHECKING:
    from collections.abc import Mapping

    from event_approval.clock import Clock
    from event_approval.repositories.base import Repository, UnitOfWork
    from event_approval.schemas.auth import ActorInfo

logger = logging.getLogger(__name__)

SYSTEM_ACTOR_ID = "system"


def build_history_response(entry: RequestHistoryEntry) -> HistoryEntryResponse:
    """Map a history entry model to its response schema."""
    return HistoryEntryResponse(
        id=entry.id,
        request_id=entry.request_id,
        sequence=entry.sequence,
        event_type=HistoryEventType(entry.event_type),
        actor_id=entry.actor_id,
        actor_role=ActorRole(entry.actor_role),
        comment=entry.comment,
        metadata=entry.metadata_json,
        occurred_at=entry.occurred_at,
    )


async def append_history(
    uow: UnitOfWork,
    *,
    request_id: uuid.UUID,
    event_type: HistoryEventType,
    actor_id: str,
    actor_role: ActorRole,
    occurred_at: datetime,
    comment: str | None = None,
    metadata: dict[str, Any] | None = None,
) -> RequestHistoryEntry:
    """Append an immutable history entry within the caller's unit of work."""
    entry = RequestHistoryEntry(
        id=uow.new_id(),
        request_id=request_id,
        sequence=await uow.next_sequence(),
        event_type=event_type.value,
        actor_id=actor_id,
        actor_role=actor_role.value,
        comment=comment,
        metadata_json=metadata,
        occurred_at=occurred_at,
    )
    uow.add(entry)
    return entry


class AuditLog:
    """Read access to request history, plus free-form comments."""

    def __init__(self, repository: Repository, clock: Clock, retention_days: int | None = None) -> None:
        self._repository = repository
        self._clock = clock
        self._retention_days = retention_days

    async def get_history(
        self,
        request_id: uuid.UUID,
        query: HistoryQuery | None = None,
    ) -> list[HistoryEntryResponse]:
        """Return the request's history, filtered and oldest first."""
        query = query or HistoryQuery()
        cutoff = retention_cutoff(self._clock.now(), self._retention_days)
        async with self._repository.unit_of_work() as uow:
            await get_request_or_404(uow, request_id, cutoff=cutoff)
            entries = await uow.list_history(request_id)
        return [build_history_response(e) for e in filter_history(entries, query)]

    async def add_comment(
        self,
        actor: ActorInfo,
        request_id: uuid.UUID,
        payload: CommentPayload | Mapping[str, Any],
    ) -> HistoryEntryResponse:
        """Record a comment on the request. The request itself is not modified."""
        data = validate_payload(CommentPayload, payload, "Comment payload failed validation")
        cutoff = retention_cutoff(self._clock.now(), self._retention_days)
        async with self._repository.unit_of_work() as uow:
            await get_request_or_404(uow, request_id, cutoff=cutoff)
            entry = await append_history(
                uow,
                request_id=request_id,
                event_type=HistoryEventType.COMMENTED,
                actor_id=actor.id,
                actor_role=ActorRole(actor.role),
                occurred_at=self._clock.now(),
                comment=data.comment,
            )
            await uow.commit()
        logger.info("Comment added to request %s by %s", request_id, actor.id)
        return build_history_response(entry)
