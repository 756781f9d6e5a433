# ruff: noqa: TC003
from __future__ import annotations

import uuid
from collections.abc import Collection
from contextlib import AbstractAsyncContextManager
from typing import Protocol, runtime_checkable

from sqlmodel import SQLModel

from event_approval.models.decision import ApprovalDecision
from event_approval.models.history import RequestHistoryEntry
from event_approval.models.notification import StatusNotification
from event_approval.models.request import EventApprovalRequest


@runtime_checkable
class UnitOfWork(Protocol):
    """One atomic batch of reads and writes against the store.

    Writes become visible to other units of work only on ``commit``. Leaving the
    unit of work without committing discards them.
    """

    def new_id(self) -> uuid.UUID:
        """Allocate an identifier for a new record."""
        ...

    async def next_sequence(self) -> int:
        """Allocate the next history sequence number."""
        ...

    async def count_requests(self) -> int: ...

    async def get_request(self, request_id: uuid.UUID, *, for_update: bool = False) -> EventApprovalRequest | None:
        """Fetch a request. Returns None if not found."""
        ...

    async def list_requests(
        self,
        *,
        submitter_id: str | None = None,
        status: str | None = None,
    ) -> list[EventApprovalRequest]: ...

    async def list_decisions(self, request_ids: Collection[uuid.UUID]) -> list[ApprovalDecision]: ...

    async def list_history(self, request_id: uuid.UUID) -> list[RequestHistoryEntry]: ...

    async def list_notifications(self, recipient_id: str) -> list[StatusNotification]: ...

    def add(self, record: SQLModel) -> None:
        """Stage a new or modified record."""
        ...

    async def flush(self) -> None: ...

    async def commit(self) -> None: ...

    async def rollback(self) -> None: ...


@runtime_checkable
class Repository(Protocol):
    """Backing store for requests, decisions, history and notifications."""

    def unit_of_work(self) -> AbstractAsyncContextManager[UnitOfWork]: ...

    async def ping(self) -> bool:
        """Return True if the store is reachable."""
        ...

    async def initialize(self) -> None:
        """Prepare the store for use (create tables, etc.)."""
        ...

    async def dispose(self) -> None: ...
