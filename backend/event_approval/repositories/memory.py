# ruff: noqa: TC003
from __future__ import annotations

import itertools
import uuid
from collections.abc import AsyncIterator, Collection
from contextlib import asynccontextmanager
from typing import TypeVar

from sqlmodel import SQLModel

from event_approval.models.decision import ApprovalDecision
from event_approval.models.history import RequestHistoryEntry
from event_approval.models.notification import StatusNotification
from event_approval.models.request import EventApprovalRequest

RecordT = TypeVar("RecordT", bound=SQLModel)


def sequential_uuid(value: int) -> uuid.UUID:
    """Render an allocation counter as a deterministic UUID."""
    return uuid.UUID(f"00000000-0000-4000-8000-{value:012x}")


def _copy(record: RecordT) -> RecordT:
    return type(record)(**record.model_dump())


_RECORD_TYPES = (EventApprovalRequest, ApprovalDecision, RequestHistoryEntry, StatusNotification)


class InMemoryRepository:
    """Process-local store.

    Every identifier across the four collections comes from one counter, so ids
    sort in allocation order. Reads return copies; callers mutate their copy
    and stage it with ``add``.
    """

    def __init__(self) -> None:
        self._requests: dict[uuid.UUID, EventApprovalRequest] = {}
        self._decisions: list[ApprovalDecision] = []
        self._history: list[RequestHistoryEntry] = []
        self._notifications: list[StatusNotification] = []
        self._ids = itertools.count(1)
        self._sequence = itertools.count(1)

    def allocate_id(self) -> uuid.UUID:
        return sequential_uuid(next(self._ids))

    def allocate_sequence(self) -> int:
        return next(self._sequence)

    @asynccontextmanager
    async def unit_of_work(self) -> AsyncIterator[InMemoryUnitOfWork]:
        uow = InMemoryUnitOfWork(self)
        try:
            yield uow
        finally:
            await uow.rollback()

    async def ping(self) -> bool:
        return True

    async def initialize(self) -> None:
        return None

    async def dispose(self) -> None:
        return None

    def _apply(self, records: list[SQLModel]) -> None:
        staged = [_copy(record) for record in records]
        for record in staged:
            if not isinstance(record, _RECORD_TYPES):
                msg = f"Unsupported record type: {type(record).__name__}"
                raise TypeError(msg)
        # No await point below: readers see the whole batch or none of it.
        for record in staged:
            if isinstance(record, EventApprovalRequest):
                self._requests[record.id] = record
            elif isinstance(record, ApprovalDecision):
                self._decisions.append(record)
            elif isinstance(record, RequestHistoryEntry):
                self._history.append(record)
            else:
                self._notifications.append(record)


class InMemoryUnitOfWork:
    """Unit of work over an ``InMemoryRepository``. Reads see committed state only."""

    def __init__(self, repository: InMemoryRepository) -> None:
        self._repository = repository
        self._pending: list[SQLModel] = []

    def new_id(self) -> uuid.UUID:
        return self._repository.allocate_id()

    async def next_sequence(self) -> int:
        return self._repository.allocate_sequence()

    async def count_requests(self) -> int:
        return len(self._repository._requests)

    async def get_request(self, request_id: uuid.UUID, *, for_update: bool = False) -> EventApprovalRequest | None:
        request = self._repository._requests.get(request_id)
        return _copy(request) if request is not None else None

    async def list_requests(
        self,
        *,
        submitter_id: str | None = None,
        status: str | None = None,
    ) -> list[EventApprovalRequest]:
        return [
            _copy(r)
            for r in self._repository._requests.values()
            if (submitter_id is None or r.submitter_id == submitter_id) and (status is None or r.status == status)
        ]

    async def list_decisions(self, request_ids: Collection[uuid.UUID]) -> list[ApprovalDecision]:
        wanted = set(request_ids)
        return [_copy(d) for d in self._repository._decisions if d.request_id in wanted]

    async def list_history(self, request_id: uuid.UUID) -> list[RequestHistoryEntry]:
        return [_copy(e) for e in self._repository._history if e.request_id == request_id]

    async def list_notifications(self, recipient_id: str) -> list[StatusNotification]:
        return [_copy(n) for n in self._repository._notifications if n.recipient_id == recipient_id]

    def add(self, record: SQLModel) -> None:
        if not any(pending is record for pending in self._pending):
            self._pending.append(record)

    async def flush(self) -> None:
        return None

    async def commit(self) -> None:
        pending, self._pending = self._pending, []
        self._repository._apply(pending)

    async def rollback(self) -> None:
        self._pending = []
