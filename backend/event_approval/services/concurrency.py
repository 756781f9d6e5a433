# ruff: noqa: TC003
from __future__ import annotations

import asyncio
import logging
import uuid
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from typing import TYPE_CHECKING

from event_approval.exceptions import ConflictError
from event_approval.models.enums import ActorRole, HistoryEventType
from event_approval.services.audit import SYSTEM_ACTOR_ID, append_history

if TYPE_CHECKING:
    from event_approval.clock import Clock
    from event_approval.models.request import EventApprovalRequest
    from event_approval.repositories.base import UnitOfWork

logger = logging.getLogger(__name__)


class ConcurrencyGuard:
    """Optimistic version check plus a mutation lock per request.

    Callers hold ``lock(request_id)`` across read, ``check_version`` and write, so
    at most one decision succeeds per version. The guard never retries: a stale
    caller re-reads and resubmits.
    """

    def __init__(self, clock: Clock) -> None:
        self._clock = clock
        self._locks: dict[uuid.UUID, asyncio.Lock] = {}
        self._users: dict[uuid.UUID, int] = {}

    @asynccontextmanager
    async def lock(self, request_id: uuid.UUID) -> AsyncIterator[None]:
        """Serialize mutations of one request. The lock is dropped once nobody holds or awaits it."""
        lock = self._locks.setdefault(request_id, asyncio.Lock())
        self._users[request_id] = self._users.get(request_id, 0) + 1
        try:
            async with lock:
                yield
        finally:
            self._users[request_id] -= 1
            if not self._users[request_id]:
                del self._users[request_id]
                del self._locks[request_id]

    @property
    def active_locks(self) -> int:
        return len(self._locks)

    async def check_version(self, uow: UnitOfWork, request: EventApprovalRequest, expected_version: int) -> None:
        """Raise ConflictError if ``expected_version`` is stale.

        The mismatch is recorded as a ``stale_detected`` history entry and
        committed before raising, so rejected writes stay auditable.
        """
        if request.version == expected_version:
            return

        logger.warning(
            "Stale write on request %s: expected version %d, current %d",
            request.id,
            expected_version,
            request.version,
        )
        await append_history(
            uow,
            request_id=request.id,
            event_type=HistoryEventType.STALE_DETECTED,
            actor_id=SYSTEM_ACTOR_ID,
            actor_role=ActorRole.SYSTEM,
            occurred_at=self._clock.now(),
            comment=f"Version mismatch. Expected {expected_version}, current {request.version}.",
            metadata={"expected_version": expected_version, "current_version": request.version},
        )
        await uow.commit()
        raise ConflictError(
            "Request version is stale. Reload and retry.",
            expected_version=expected_version,
            current_version=request.version,
        )
