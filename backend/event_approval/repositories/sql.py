# ruff: noqa: TC003
from __future__ import annotations

import asyncio
import itertools
import logging
import uuid
from collections.abc import AsyncIterator, Collection
from contextlib import asynccontextmanager
from typing import TYPE_CHECKING, Any

from sqlalchemy import func, select, text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlmodel import SQLModel, col

from event_approval.exceptions import classify_store_error
from event_approval.models.decision import ApprovalDecision
from event_approval.models.history import RequestHistoryEntry
from event_approval.models.notification import StatusNotification
from event_approval.models.request import EventApprovalRequest

if TYPE_CHECKING:
    from sqlalchemy.engine import Result
    from sqlalchemy.sql.expression import Executable

logger = logging.getLogger(__name__)


class SqlRepository:
    """Store backed by an async SQLAlchemy engine."""

    def __init__(self, database_url: str, *, echo: bool = False) -> None:
        self._engine = create_async_engine(database_url, echo=echo, pool_pre_ping=True)
        self._session_factory = async_sessionmaker(self._engine, expire_on_commit=False)
        self._sequence: itertools.count[int] | None = None
        self._sequence_lock = asyncio.Lock()

    @asynccontextmanager
    async def unit_of_work(self) -> AsyncIterator[SqlUnitOfWork]:
        async with self._session_factory() as session:
            yield SqlUnitOfWork(session, self)

    async def ping(self) -> bool:
        try:
            async with self._session_factory() as session:
                await session.execute(text("SELECT 1"))
        except Exception:
            logger.exception("Health check: database connectivity failed")
            return False
        return True

    async def initialize(self) -> None:
        """Create missing tables."""
        async with self._engine.begin() as conn:
            await conn.run_sync(SQLModel.metadata.create_all)

    async def dispose(self) -> None:
        await self._engine.dispose()

    async def allocate_sequence(self, session: AsyncSession) -> int:
        """Next history sequence, seeded once from the highest stored value."""
        if self._sequence is None:
            async with self._sequence_lock:
                if self._sequence is None:
                    result = await session.execute(select(func.max(col(RequestHistoryEntry.sequence))))
                    self._sequence = itertools.count((result.scalar_one_or_none() or 0) + 1)
        return next(self._sequence)


class SqlUnitOfWork:
    """Unit of work over one ``AsyncSession``."""

    def __init__(self, session: AsyncSession, repository: SqlRepository) -> None:
        self.session = session
        self._repository = repository

    def new_id(self) -> uuid.UUID:
        return uuid.uuid4()

    async def next_sequence(self) -> int:
        try:
            return await self._repository.allocate_sequence(self.session)
        except SQLAlchemyError as exc:
            raise classify_store_error(exc) from exc

    async def count_requests(self) -> int:
        result = await self._execute(select(func.count()).select_from(EventApprovalRequest))
        return int(result.scalar_one())

    async def get_request(self, request_id: uuid.UUID, *, for_update: bool = False) -> EventApprovalRequest | None:
        query = select(EventApprovalRequest).where(col(EventApprovalRequest.id) == request_id)
        if for_update:
            query = query.with_for_update()
        result = await self._execute(query)
        return result.scalar_one_or_none()

    async def list_requests(
        self,
        *,
        submitter_id: str | None = None,
        status: str | None = None,
    ) -> list[EventApprovalRequest]:
        query = select(EventApprovalRequest)
        if submitter_id is not None:
            query = query.where(col(EventApprovalRequest.submitter_id) == submitter_id)
        if status is not None:
            query = query.where(col(EventApprovalRequest.status) == status)
        result = await self._execute(query.order_by(col(EventApprovalRequest.created_at)))
        return list(result.scalars().all())

    async def list_decisions(self, request_ids: Collection[uuid.UUID]) -> list[ApprovalDecision]:
        if not request_ids:
            return []
        result = await self._execute(
            select(ApprovalDecision).where(col(ApprovalDecision.request_id).in_(list(request_ids)))
        )
        return list(result.scalars().all())

    async def list_history(self, request_id: uuid.UUID) -> list[RequestHistoryEntry]:
        result = await self._execute(
            select(RequestHistoryEntry)
            .where(col(RequestHistoryEntry.request_id) == request_id)
            .order_by(col(RequestHistoryEntry.sequence))
        )
        return list(result.scalars().all())

    async def list_notifications(self, recipient_id: str) -> list[StatusNotification]:
        result = await self._execute(
            select(StatusNotification).where(col(StatusNotification.recipient_id) == recipient_id)
        )
        return list(result.scalars().all())

    def add(self, record: SQLModel) -> None:
        self.session.add(record)

    async def flush(self) -> None:
        try:
            await self.session.flush()
        except SQLAlchemyError as exc:
            await self.session.rollback()
            raise classify_store_error(exc) from exc

    async def commit(self) -> None:
        try:
            await self.session.commit()
        except SQLAlchemyError as exc:
            await self.session.rollback()
            raise classify_store_error(exc) from exc

    async def rollback(self) -> None:
        await self.session.rollback()

    async def _execute(self, statement: Executable) -> Result[Any]:
        try:
            return await self.session.execute(statement)
        except SQLAlchemyError as exc:
            raise classify_store_error(exc) from exc
