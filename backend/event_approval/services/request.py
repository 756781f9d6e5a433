# ruff: noqa: TC003
from __future__ import annotations

import asyncio
import logging
import uuid
from typing import TYPE_CHECKING, Any

from event_approval.models.enums import (
    ActorRole,
    HistoryEventType,
    RequestSort,
    RequestStatus,
    RoleType,
    TransportationMode,
)
from event_approval.models.request import EventApprovalRequest
from event_approval.schemas.request import (
    CostEstimate,
    DashboardSummary,
    RequestListResponse,
    RequestQuery,
    RequestResponse,
    RequestSummary,
    SubmitRequestPayload,
)
from event_approval.services.audit import append_history
from event_approval.services.base import get_request_or_404, validate_payload
from event_approval.services.query import (
    filter_requests,
    latest_decisions,
    paginate,
    retention_cutoff,
    sort_requests,
)

if TYPE_CHECKING:
    from collections.abc import Mapping

    from event_approval.clock import Clock
    from event_approval.models.decision import ApprovalDecision
    from event_approval.repositories.base import Repository, UnitOfWork
    from event_approval.schemas.auth import ActorInfo

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Internal helpers
# ---------------------------------------------------------------------------


def build_request_response(request: EventApprovalRequest) -> RequestResponse:
    """Map a request model to its response schema."""
    return RequestResponse(
        id=request.id,
        request_number=request.request_number,
        submitter_id=request.submitter_id,
        submitter_display_name=request.submitter_display_name,
        event_name=request.event_name,
        event_website=request.event_website,
        role=RoleType(request.role),
        transportation_mode=TransportationMode(request.transportation_mode),
        origin=request.origin,
        destination=request.destination,
        cost_estimate=CostEstimate(
            registration=request.cost_registration,
            travel=request.cost_travel,
            hotels=request.cost_hotels,
            meals=request.cost_meals,
            other=request.cost_other,
            currency_code=request.currency_code,
            total=request.cost_total,
        ),
        status=RequestStatus(request.status),
        created_at=request.created_at,
        updated_at=request.updated_at,
        submitted_at=request.submitted_at,
        version=request.version,
    )


def build_request_summary(request: EventApprovalRequest, decision: ApprovalDecision | None) -> RequestSummary:
    """Project a request onto its list representation."""
    return RequestSummary(
        id=request.id,
        request_number=request.request_number,
        event_name=request.event_name,
        role=RoleType(request.role),
        status=RequestStatus(request.status),
        submitted_at=request.submitted_at,
        destination=request.destination,
        total_cost=request.cost_total,
        currency_code=request.currency_code,
        submitter_display_name=request.submitter_display_name,
        latest_comment=decision.comment if decision is not None else None,
    )


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------


class RequestStore:
    """Creates and reads event approval requests.

    Requests are created here and nowhere else; status and version changes
    belong to the decision engine.
    """

    def __init__(
        self,
        repository: Repository,
        clock: Clock,
        *,
        number_prefix: str = "EA-",
        number_start: int = 1000,
        retention_days: int | None = None,
    ) -> None:
        self._repository = repository
        self._clock = clock
        self._number_prefix = number_prefix
        self._number_start = number_start
        self._retention_days = retention_days
        self._submission_lock = asyncio.Lock()

    async def _next_request_number(self, uow: UnitOfWork) -> str:
        count = await uow.count_requests()
        return f"{self._number_prefix}{self._number_start + count + 1}"

    async def submit_request(
        self,
        actor: ActorInfo,
        payload: SubmitRequestPayload | Mapping[str, Any],
    ) -> RequestResponse:
        """Validate and create a request in SUBMITTED state at version 1.

        Flow:
        1. Validate the payload (no mutation on failure)
        2. Allocate id and request number under the submission lock
        3. Snapshot the submitter's identity
        4. Create the request and its ``submitted`` history entry
        5. Commit both together
        """
        data = validate_payload(SubmitRequestPayload, payload, "Request payload failed validation")
        cost = data.cost_estimate

        async with self._submission_lock, self._repository.unit_of_work() as uow:
            now = self._clock.now()
            request = EventApprovalRequest(
                id=uow.new_id(),
                request_number=await self._next_request_number(uow),
                submitter_id=actor.id,
                submitter_display_name=actor.display_name,
                event_name=data.event_name,
                event_website=data.event_website,
                role=data.role.value,
                transportation_mode=data.transportation_mode.value,
                origin=data.origin,
                destination=data.destination,
                cost_registration=cost.registration,
                cost_travel=cost.travel,
                cost_hotels=cost.hotels,
                cost_meals=cost.meals,
                cost_other=cost.other,
                currency_code=cost.currency_code,
                cost_total=cost.total,
                status=RequestStatus.SUBMITTED.value,
                created_at=now,
                updated_at=now,
                submitted_at=now,
                version=1,
            )
            uow.add(request)
            await uow.flush()

            await append_history(
                uow,
                request_id=request.id,
                event_type=HistoryEventType.SUBMITTED,
                actor_id=actor.id,
                actor_role=ActorRole.EMPLOYEE,
                occurred_at=now,
                metadata={"request_number": request.request_number, "version": request.version},
            )
            await uow.commit()

        logger.info("Request %s (%s) submitted by %s", request.request_number, request.id, actor.id)
        return build_request_response(request)

    async def get_request(self, request_id: uuid.UUID) -> RequestResponse:
        """Get a single request by ID. Raises NotFoundError if absent or past retention."""
        cutoff = retention_cutoff(self._clock.now(), self._retention_days)
        async with self._repository.unit_of_work() as uow:
            request = await get_request_or_404(uow, request_id, cutoff=cutoff)
        return build_request_response(request)

    async def list_requests(self, query: RequestQuery | None = None) -> RequestListResponse:
        """List request summaries with optional filters, newest submission first by default."""
        query = query or RequestQuery()
        cutoff = retention_cutoff(self._clock.now(), self._retention_days)
        async with self._repository.unit_of_work() as uow:
            rows = await uow.list_requests(
                submitter_id=query.submitter_id,
                status=query.status.value if query.status is not None else None,
            )
            matched = sort_requests(filter_requests(rows, query, cutoff), query.sort)
            page = paginate(matched, query.offset, query.limit)
            latest = latest_decisions(await uow.list_decisions([r.id for r in page]))

        return RequestListResponse(
            items=[build_request_summary(r, latest.get(r.id)) for r in page],
            total=len(matched),
        )

    async def list_pending_approvals(self, offset: int = 0, limit: int = 50) -> RequestListResponse:
        """Submitted requests awaiting a decision, oldest first."""
        return await self.list_requests(
            RequestQuery(status=RequestStatus.SUBMITTED, sort=RequestSort.OLDEST, offset=offset, limit=limit)
        )

    async def get_dashboard_summary(self, submitter_id: str | None = None) -> DashboardSummary:
        """Count requests per lifecycle bucket, optionally for one submitter."""
        cutoff = retention_cutoff(self._clock.now(), self._retention_days)
        async with self._repository.unit_of_work() as uow:
            rows = await uow.list_requests(submitter_id=submitter_id)
        visible = filter_requests(rows, RequestQuery(submitter_id=submitter_id), cutoff)
        statuses = [r.status for r in visible]
        return DashboardSummary(
            total=len(statuses),
            pending=statuses.count(RequestStatus.SUBMITTED),
            approved=statuses.count(RequestStatus.APPROVED),
            rejected=statuses.count(RequestStatus.REJECTED),
        )
