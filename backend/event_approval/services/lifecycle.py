# ruff: noqa: TC003
from __future__ import annotations

import logging
import uuid
from typing import TYPE_CHECKING, Any

from event_approval.clock import SystemClock
from event_approval.repositories import build_repository
from event_approval.services.audit import AuditLog
from event_approval.services.concurrency import ConcurrencyGuard
from event_approval.services.decision import DecisionEngine
from event_approval.services.notification import NotificationDispatcher
from event_approval.services.request import RequestStore

if TYPE_CHECKING:
    from collections.abc import Mapping

    from event_approval.clock import Clock
    from event_approval.config import Settings
    from event_approval.repositories.base import Repository
    from event_approval.schemas.auth import ActorInfo
    from event_approval.schemas.decision import DecisionPayload, DecisionResponse
    from event_approval.schemas.history import CommentPayload, HistoryEntryResponse, HistoryQuery
    from event_approval.schemas.notification import NotificationQuery, NotificationResponse
    from event_approval.schemas.request import (
        DashboardSummary,
        RequestListResponse,
        RequestQuery,
        RequestResponse,
        SubmitRequestPayload,
    )

logger = logging.getLogger(__name__)


class LifecycleService:
    """Single entry point over one store and its collaborating services."""

    def __init__(
        self,
        repository: Repository,
        *,
        store: RequestStore,
        decisions: DecisionEngine,
        audit: AuditLog,
        notifications: NotificationDispatcher,
        guard: ConcurrencyGuard,
    ) -> None:
        self.repository = repository
        self.guard = guard
        self.store = store
        self.decisions = decisions
        self.audit = audit
        self.notifications = notifications

    @classmethod
    def from_settings(
        cls,
        settings: Settings,
        *,
        repository: Repository | None = None,
        clock: Clock | None = None,
    ) -> LifecycleService:
        """Wire the service graph for ``settings``."""
        repository = repository or build_repository(settings)
        clock = clock or SystemClock()
        retention = settings.retention_days
        dispatcher = NotificationDispatcher(
            repository, clock, channel=settings.notification_channel, retention_days=retention
        )
        guard = ConcurrencyGuard(clock)
        logger.debug("Lifecycle service wired with %s", type(repository).__name__)
        return cls(
            repository,
            store=RequestStore(
                repository,
                clock,
                number_prefix=settings.request_number_prefix,
                number_start=settings.request_number_start,
                retention_days=retention,
            ),
            decisions=DecisionEngine(repository, clock, guard, dispatcher, retention_days=retention),
            audit=AuditLog(repository, clock, retention_days=retention),
            notifications=dispatcher,
            guard=guard,
        )

    # -- requests ----------------------------------------------------------

    async def submit_request(
        self, actor: ActorInfo, payload: SubmitRequestPayload | Mapping[str, Any]
    ) -> RequestResponse:
        return await self.store.submit_request(actor, payload)

    async def get_request(self, request_id: uuid.UUID) -> RequestResponse:
        return await self.store.get_request(request_id)

    async def list_requests(self, query: RequestQuery | None = None) -> RequestListResponse:
        return await self.store.list_requests(query)

    async def list_pending_approvals(self, offset: int = 0, limit: int = 50) -> RequestListResponse:
        return await self.store.list_pending_approvals(offset, limit)

    async def get_dashboard_summary(self, submitter_id: str | None = None) -> DashboardSummary:
        return await self.store.get_dashboard_summary(submitter_id)

    # -- decisions ---------------------------------------------------------

    async def decide(
        self,
        actor: ActorInfo,
        request_id: uuid.UUID,
        payload: DecisionPayload | Mapping[str, Any],
    ) -> DecisionResponse:
        return await self.decisions.decide(actor, request_id, payload)

    # -- history and notifications -----------------------------------------

    async def get_history(self, request_id: uuid.UUID, query: HistoryQuery | None = None) -> list[HistoryEntryResponse]:
        return await self.audit.get_history(request_id, query)

    async def add_comment(
        self,
        actor: ActorInfo,
        request_id: uuid.UUID,
        payload: CommentPayload | Mapping[str, Any],
    ) -> HistoryEntryResponse:
        return await self.audit.add_comment(actor, request_id, payload)

    async def list_notifications(
        self, recipient_id: str, query: NotificationQuery | None = None
    ) -> list[NotificationResponse]:
        return await self.notifications.list_notifications(recipient_id, query)

    # -- store lifecycle ---------------------------------------------------

    async def ping(self) -> bool:
        return await self.repository.ping()

    async def initialize(self) -> None:
        await self.repository.initialize()

    async def close(self) -> None:
        await self.repository.dispose()
